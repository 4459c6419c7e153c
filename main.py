import asyncio
import logging
import traceback
from datetime import datetime

import functions_framework
import orjson
from flask import Request

from utils.config import Config
from utils.logger import setup_logging
from utils.networks import supported_networks
from handlers.lookup_handler import LookupHandler

setup_logging()
logger = logging.getLogger(__name__)

def json_dumps(data) -> str:
    return orjson.dumps(data).decode('utf-8')

# Global state
_handler = None

def get_handler() -> LookupHandler:
    """Create the handler (and validate config) once per instance"""
    global _handler
    if _handler is None:
        config = Config()
        errors = config.validate()
        if errors:
            logger.warning(f"Config warnings: {errors}")
        _handler = LookupHandler(config)
        logger.info("✅ Lookup handler initialized")
    return _handler

@functions_framework.http
def main(request: Request):
    """Main HTTP entry point"""
    # CORS handling
    if request.method == 'OPTIONS':
        return ('', 204, {
            'Access-Control-Allow-Origin': '*',
            'Access-Control-Allow-Methods': 'POST, GET, OPTIONS',
            'Access-Control-Allow-Headers': 'Content-Type'
        })

    headers = {'Access-Control-Allow-Origin': '*', 'Content-Type': 'application/json'}
    path = (request.path or '/').rstrip('/') or '/'

    try:
        if path.endswith('/hook-analyze') and request.method == 'POST':
            return handle_hook_request(request, headers)
        if path.endswith('/lookup') and request.method in ('GET', 'POST'):
            return handle_lookup_request(request, headers)
        if path == '/' and request.method == 'GET':
            return handle_health_request(headers)
        return (json_dumps({"error": "Not found", "success": False}), 404, headers)

    except Exception as e:
        logger.error(f"Request failed: {e}")
        return (json_dumps({
            "error": f"Request error: {str(e)}",
            "success": False,
            "traceback": traceback.format_exc()
        }), 500, headers)

def handle_health_request(headers):
    """Handle GET / (health check)"""
    response = {
        "message": "LookUp Analyzer",
        "status": "healthy",
        "service": "lookup-frame-analyzer",
        "timestamp": datetime.utcnow().isoformat(),
        "networks": supported_networks(),
        "types": ["eoa", "contract", "tx", "ens", "basename"]
    }
    return (json_dumps(response), 200, headers)

def handle_lookup_request(request: Request, headers):
    """Handle /lookup?parameter=...&network=...[&type=...]"""
    params = dict(request.args)
    if request.method == 'POST':
        params.update(request.get_json(silent=True) or {})

    parameter = params.get('parameter')
    network = params.get('network')
    if not parameter or not network:
        return (json_dumps({"error": "parameter and network are required", "success": False}), 400, headers)

    result = asyncio.run(get_handler().analyze(parameter, network, params.get('type')))
    return (json_dumps(result), 200, headers)

def handle_hook_request(request: Request, headers):
    """Handle the Neynar cast webhook"""
    body = request.get_json(silent=True)
    if not body:
        return (json_dumps({"error": "No JSON data provided"}), 400, headers)

    logger.info("call start: hook-analyze")
    result = asyncio.run(get_handler().handle_hook(body))
    return (json_dumps(result), 200, headers)

# Local testing
if __name__ == "__main__":
    logger.info("Starting local test")
    print(json_dumps(asyncio.run(get_handler().analyze("vitalik.eth", "base"))))
