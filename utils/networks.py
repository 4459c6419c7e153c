# utils/networks.py - Network catalog lookups
import logging
from dataclasses import dataclass
from typing import List

from utils.constants import NETWORKS
from core.exceptions import UnsupportedNetwork

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class NetworkInfo:
    key: str
    name: str
    chainbase_network_id: str
    chain_id: int
    symbol: str

def supported_networks() -> List[str]:
    """Names accepted by every lookup"""
    return list(NETWORKS.keys())

def is_supported(network: str) -> bool:
    return isinstance(network, str) and network.strip().lower() in NETWORKS

def resolve_network(network: str) -> NetworkInfo:
    """Resolve a user-facing network name, raising UnsupportedNetwork when unknown"""
    key = (network or '').strip().lower()
    entry = NETWORKS.get(key)
    if entry is None:
        logger.warning(f"Unsupported network: {network}")
        raise UnsupportedNetwork(network)

    return NetworkInfo(
        key=key,
        name=entry['name'],
        chainbase_network_id=entry['chainbase_network_id'],
        chain_id=entry['chain_id'],
        symbol=entry['symbol'],
    )
