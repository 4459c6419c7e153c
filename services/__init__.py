from services.blockchain.chain_rpc import ChainRpcClient
from services.blockchain.chainbase_query import AnalyticsQueryClient
from services.blockchain.token_metadata import TokenMetadataClient
from services.blockchain.name_resolver import NameResolver
from .notifications.farcaster import NeynarClient

__all__ = [
    'ChainRpcClient',
    'AnalyticsQueryClient',
    'TokenMetadataClient',
    'NameResolver',
    'NeynarClient'
]
