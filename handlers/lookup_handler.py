import aiohttp
import logging
import traceback
from datetime import datetime
from typing import Dict, Any, Optional, Tuple

from utils.config import Config
from utils.constants import CAST_INTROS, HOOK_STATUS_MESSAGES, MESSAGE_TEMPLATES
from utils.networks import is_supported, supported_networks
from core.analysis.parameter_classifier import ParameterClassifier
from core.data.models import LookupOutcome, ParameterKind
from core.exceptions import LookUpError
from services.blockchain.chain_rpc import ChainRpcClient
from services.blockchain.chainbase_query import AnalyticsQueryClient
from services.blockchain.name_resolver import NameResolver
from services.blockchain.token_metadata import TokenMetadataClient
from services.notifications.farcaster import NeynarClient

logger = logging.getLogger(__name__)

def build_classifier(config: Config, session: Optional[aiohttp.ClientSession] = None) -> ParameterClassifier:
    """Wire request-scoped clients into a classifier"""
    return ParameterClassifier(
        rpc_client=ChainRpcClient(config, session),
        query_client=AnalyticsQueryClient(config, session),
        token_client=TokenMetadataClient(config, session),
        name_resolver=NameResolver(config),
        resolve_name_contracts=config.resolve_name_contracts,
    )

def parse_cast_text(text: str) -> Tuple[str, str, str]:
    """'@lookup <parameter> <network>' -> (command, parameter, network)"""
    parts = (text or '').lower().strip().split()
    parts += [''] * (3 - len(parts))
    return parts[0], parts[1], parts[2]

class LookupHandler:
    """Handle lookup requests and Neynar cast webhooks"""

    def __init__(self, config: Config = None):
        self.config = config or Config()

    async def analyze(self, parameter: str, network: str, kind: str = None) -> Dict[str, Any]:
        """Classify (unless the kind is given) and describe one parameter"""
        network = (network or '').strip().lower()
        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.request_timeout)
            ) as session:
                classifier = build_classifier(self.config, session)
                if kind:
                    outcome = await self._describe_known_kind(classifier, parameter, network, kind)
                else:
                    outcome = await classifier.analyze(parameter, network)

            logger.info(f"Lookup {parameter} on {network}: {outcome.kind.value}")
            return {'success': outcome.valid, **outcome.to_dict()}

        except LookUpError as e:
            logger.error(f"Lookup failed for {parameter} on {network}: {e}")
            return {
                'success': False,
                'parameter': parameter,
                'network': network,
                'type': ParameterKind.INVALID.value,
                'error': str(e),
                'description': MESSAGE_TEMPLATES['invalid'],
                'timestamp': datetime.utcnow().isoformat()
            }

    async def _describe_known_kind(self, classifier: ParameterClassifier, parameter: str,
                                   network: str, kind: str) -> LookupOutcome:
        try:
            parameter_kind = ParameterKind(kind.lower())
        except ValueError:
            parameter_kind = ParameterKind.INVALID

        if parameter_kind == ParameterKind.INVALID or not is_supported(network):
            return LookupOutcome(parameter, network, ParameterKind.INVALID, MESSAGE_TEMPLATES['invalid'])

        result = await classifier.enrich(parameter_kind, parameter, network)
        return LookupOutcome(parameter, network, parameter_kind, result.describe(), result)

    async def handle_hook(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """Neynar webhook: answer '@lookup <parameter> <network>' casts with a frame reply"""
        try:
            cast = body.get('data') or {}
            command, parameter, network = parse_cast_text(cast.get('text', ''))

            if command != self.config.lookup_command or not parameter or not network \
                    or network not in supported_networks():
                return {'message': HOOK_STATUS_MESSAGES['analyze_text']}

            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.request_timeout)
            ) as session:
                kind = await build_classifier(self.config, session).classify(parameter, network)

            if kind == ParameterKind.INVALID:
                return {'message': HOOK_STATUS_MESSAGES['analyze_text']}

            frame_url = f"{self.config.app_url}/api/frame-analyze/{network}/{kind.value}/{parameter}"
            async with NeynarClient(self.config) as neynar:
                cast_hash = await neynar.publish_cast(
                    CAST_INTROS[kind.value], embed_urls=[frame_url], parent_hash=cast.get('hash')
                )

            status = 'cast_success' if cast_hash else 'cast_error'
            return {'message': HOOK_STATUS_MESSAGES[status], 'type': kind.value, 'frame_url': frame_url}

        except Exception as e:
            logger.error(f"Hook processing failed: {e}")
            logger.error(f"Hook traceback: {traceback.format_exc()}")
            return {'message': HOOK_STATUS_MESSAGES['unexpected_error']}
