import asyncio
import logging

from ens import AsyncENS
from ens.exceptions import InvalidName
from ens.utils import normalize_name
from web3 import AsyncWeb3, Web3

from utils.config import Config
from utils.constants import BASENAME_SUFFIX, ENS_SUFFIX
from utils.networks import resolve_network
from core.data.models import ParameterKind
from core.exceptions import UnresolvedName

logger = logging.getLogger(__name__)

class NameResolver:
    """Resolve ENS names (Ethereum mainnet) and Basenames (Base) to addresses"""

    def __init__(self, config: Config):
        self.config = config

    def _provider(self, network: str) -> AsyncWeb3.AsyncHTTPProvider:
        info = resolve_network(network)
        return AsyncWeb3.AsyncHTTPProvider(
            self.config.rpc_url(info.chainbase_network_id),
            request_kwargs={"timeout": self.config.request_timeout}
        )

    def _ens_for(self, kind: ParameterKind) -> AsyncENS:
        """Fresh resolver per lookup, never cached across requests"""
        if kind == ParameterKind.BASENAME:
            registry = Web3.to_checksum_address(self.config.basename_registry_address)
            return AsyncENS(self._provider('base'), addr=registry)
        return AsyncENS(self._provider('ethereum'))

    @staticmethod
    def kind_for(name: str) -> ParameterKind:
        lowered = (name or '').strip().lower()
        if lowered.endswith(BASENAME_SUFFIX):
            return ParameterKind.BASENAME
        if lowered.endswith(ENS_SUFFIX):
            return ParameterKind.ENS_NAME
        return ParameterKind.INVALID

    async def resolve_address(self, name: str, kind: ParameterKind = None) -> str:
        """Checksum address of a name; raises UnresolvedName when no record exists"""
        kind = kind or self.kind_for(name)
        if not kind.is_name:
            raise UnresolvedName(name, "not an ENS name or Basename")

        try:
            normalized = normalize_name(name)
        except InvalidName as e:
            raise UnresolvedName(name, f"normalization failed: {e}") from e

        try:
            ns = self._ens_for(kind)
        except ValueError as e:
            raise UnresolvedName(name, f"resolver misconfigured: {e}") from e

        try:
            address = await asyncio.wait_for(ns.address(normalized), timeout=self.config.request_timeout)
        except asyncio.TimeoutError as e:
            raise UnresolvedName(name, "resolution timed out") from e
        except Exception as e:
            raise UnresolvedName(name, str(e)) from e

        if not address:
            raise UnresolvedName(name, "no address record")

        logger.info(f"Resolved {kind.value} {normalized} -> {address}")
        return address
