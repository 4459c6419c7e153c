import aiohttp
import asyncio
import logging
from decimal import Decimal
from typing import Any, List, Optional

from utils.config import Config
from utils.constants import LATEST_BLOCK
from utils.formatting import hex_to_int, wei_to_native
from utils.networks import resolve_network
from core.data.models import TransactionReceipt
from core.exceptions import RpcError
from services.blockchain.session import session_scope

logger = logging.getLogger(__name__)

class ChainRpcClient:
    """Chainbase JSON-RPC client for per-network node calls"""

    def __init__(self, config: Config, session: Optional[aiohttp.ClientSession] = None):
        self.config = config
        self.session = session
        self._next_id = 1

    async def call(self, method: str, params: List[Any], network: str) -> Any:
        """Single JSON-RPC round trip; raises RpcError on any failure"""
        if not self.config.chainbase_api_key:
            raise RpcError("CHAINBASE_API_KEY not configured", method=method)

        info = resolve_network(network)
        url = self.config.rpc_url(info.chainbase_network_id)
        payload = {
            "jsonrpc": "2.0",
            "id": self._next_id,
            "method": method,
            "params": params
        }
        self._next_id += 1

        logger.debug(f"RPC {method} on {info.chainbase_network_id}")

        try:
            async with session_scope(self.session, self.config.request_timeout) as session:
                data = await self._post(session, url, payload, method)
        except asyncio.TimeoutError as e:
            raise RpcError(f"{method} timed out after {self.config.request_timeout}s", method=method) from e
        except aiohttp.ClientError as e:
            raise RpcError(f"{method} transport error: {e}", method=method) from e
        except ValueError as e:
            raise RpcError(f"{method} returned invalid JSON: {e}", method=method) from e

        if not isinstance(data, dict):
            raise RpcError(f"{method} returned a non-object response", method=method)

        error_obj = data.get('error')
        if error_obj:
            if isinstance(error_obj, dict):
                detail = f"code {error_obj.get('code')}: {error_obj.get('message')}"
            else:
                detail = str(error_obj)
            raise RpcError(f"{method} RPC error: {detail}", method=method)

        if 'result' not in data:
            raise RpcError(f"{method} response missing result", method=method)

        return data['result']

    async def _post(self, session: aiohttp.ClientSession, url: str, payload: dict, method: str) -> Any:
        timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)
        async with session.post(url, json=payload, timeout=timeout) as response:
            if not 200 <= response.status < 300:
                raise RpcError(f"{method} HTTP {response.status}", method=method)
            return await response.json(content_type=None)

    async def get_code(self, address: str, network: str) -> str:
        """Deployed bytecode at the latest block ('0x' for accounts without code)"""
        result = await self.call("eth_getCode", [address, LATEST_BLOCK], network)
        if not isinstance(result, str) or not result.startswith('0x'):
            raise RpcError(f"eth_getCode returned unexpected result: {result!r}", method="eth_getCode")
        return result

    async def get_balance(self, address: str, network: str) -> Decimal:
        """Native balance in ETH units, rounded half-up to 4 places"""
        result = await self.call("eth_getBalance", [address, LATEST_BLOCK], network)
        try:
            balance = wei_to_native(hex_to_int(result))
        except ValueError as e:
            raise RpcError(f"eth_getBalance returned unexpected result: {result!r}", method="eth_getBalance") from e

        logger.info(f"Balance for {address} on {network}: {balance}")
        return balance

    async def get_transaction_count(self, address: str, network: str) -> int:
        result = await self.call("eth_getTransactionCount", [address, LATEST_BLOCK], network)
        try:
            return hex_to_int(result)
        except ValueError as e:
            raise RpcError(f"eth_getTransactionCount returned unexpected result: {result!r}",
                           method="eth_getTransactionCount") from e

    async def get_transaction_receipt(self, tx_hash: str, network: str) -> Optional[TransactionReceipt]:
        """Receipt status and gas used; None while the transaction is unknown or pending"""
        result = await self.call("eth_getTransactionReceipt", [tx_hash], network)
        if result is None:
            return None
        if not isinstance(result, dict):
            raise RpcError("eth_getTransactionReceipt returned a non-object result",
                           method="eth_getTransactionReceipt")

        try:
            status = hex_to_int(result['status']) if result.get('status') else None
            gas_used = hex_to_int(result['gasUsed']) if result.get('gasUsed') else None
        except ValueError as e:
            raise RpcError(f"eth_getTransactionReceipt has malformed fields: {e}",
                           method="eth_getTransactionReceipt") from e

        return TransactionReceipt(
            status_code=status,
            gas_used=gas_used,
            sender=result.get('from'),
            receiver=result.get('to'),
        )
