import os
from typing import List, Dict
import logging

from web3 import Web3

logger = logging.getLogger(__name__)

def _env_bool(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')

class Config:
    """Configuration management for the LookUp analyzer - Chainbase, web3 and Neynar"""

    def __init__(self):

        # Chainbase configuration (RPC, query execution and web3 data API)
        self.chainbase_api_key = os.getenv('CHAINBASE_API_KEY')
        self.chainbase_rpc_template = os.getenv(
            'CHAINBASE_RPC_TEMPLATE', 'https://{network_id}.s.chainbase.online/v1/{api_key}'
        )
        self.chainbase_query_url = os.getenv('CHAINBASE_QUERY_URL', 'https://api.chainbase.com/api/v1').rstrip('/')
        self.chainbase_web3_api_url = os.getenv('CHAINBASE_WEB3_API_URL', 'https://api.chainbase.online/v1').rstrip('/')

        # Pre-registered analytics queries
        self.query_id_account_activity = os.getenv('QUERY_ID_ACCOUNT_ACTIVITY', '690032')
        self.query_id_contract_facts = os.getenv('QUERY_ID_CONTRACT_FACTS', '690033')
        self.query_id_transaction_detail = os.getenv('QUERY_ID_TRANSACTION_DETAIL', '690035')

        # Timing
        self.query_poll_interval = float(os.getenv('QUERY_POLL_INTERVAL', '1.0'))
        self.query_timeout_seconds = float(os.getenv('QUERY_TIMEOUT_SECONDS', '60'))
        self.request_timeout = float(os.getenv('REQUEST_TIMEOUT', '10'))

        # Name resolution
        self.basename_registry_address = os.getenv(
            'BASENAME_REGISTRY_ADDRESS', '0xB94704422c2a1E396835A571837Aa5AE53285a95'
        )
        self.resolve_name_contracts = _env_bool('RESOLVE_NAME_CONTRACTS')

        # Farcaster / Neynar
        self.neynar_api_key = os.getenv('NEYNAR_API_KEY')
        self.neynar_api_url = os.getenv('NEYNAR_API_URL', 'https://api.neynar.com/v2/farcaster').rstrip('/')
        self.signer_uuid = os.getenv('SIGNER_UUID')
        self.app_url = os.getenv('APP_URL', 'http://localhost:8080').rstrip('/')
        self.lookup_command = os.getenv('LOOKUP_COMMAND', '@lookup').lower()

        # General settings
        self.environment = os.getenv('ENVIRONMENT', 'production')
        self.log_level = os.getenv('LOG_LEVEL', 'INFO')

        logger.info(f"Chainbase query API: {self.chainbase_query_url}")
        logger.info(f"Chainbase web3 API: {self.chainbase_web3_api_url}")
        logger.info(f"Query poll interval: {self.query_poll_interval}s, timeout: {self.query_timeout_seconds}s")
        logger.info(f"Resolve name contracts: {self.resolve_name_contracts}")

    @property
    def query_ids(self) -> Dict[str, str]:
        """Query ids keyed by the schema they return"""
        return {
            'account_activity': self.query_id_account_activity,
            'contract_facts': self.query_id_contract_facts,
            'transaction_detail': self.query_id_transaction_detail,
        }

    def rpc_url(self, network_id: str) -> str:
        """Build the Chainbase RPC endpoint for a provider network id"""
        return self.chainbase_rpc_template.format(network_id=network_id, api_key=self.chainbase_api_key or '')

    def validate(self) -> List[str]:
        """Validate configuration and return any errors"""
        errors = []

        if not self.chainbase_api_key:
            errors.append("CHAINBASE_API_KEY not configured")

        if not self.neynar_api_key or not self.signer_uuid:
            errors.append("NEYNAR_API_KEY / SIGNER_UUID not configured (cast replies disabled)")

        if self.query_poll_interval <= 0:
            errors.append("QUERY_POLL_INTERVAL must be positive")

        if self.query_timeout_seconds < self.query_poll_interval:
            errors.append("QUERY_TIMEOUT_SECONDS must be at least QUERY_POLL_INTERVAL")

        if self.request_timeout <= 0:
            errors.append("REQUEST_TIMEOUT must be positive")

        if not Web3.is_address(self.basename_registry_address.lower()):
            errors.append("BASENAME_REGISTRY_ADDRESS is not a valid address")

        return errors
