import aiohttp
import asyncio
import logging
from decimal import InvalidOperation
from typing import Any, Dict, Optional

from utils.config import Config
from utils.formatting import format_token_count, scale_down
from utils.networks import resolve_network
from core.data.models import TokenInfo
from core.exceptions import MetadataFetchError
from services.blockchain.session import session_scope

logger = logging.getLogger(__name__)

class TokenMetadataClient:
    """Chainbase web3 API client for ERC-20 token and ERC-721 collection metadata"""

    def __init__(self, config: Config, session: Optional[aiohttp.ClientSession] = None):
        self.config = config
        self.session = session
        self.base_url = config.chainbase_web3_api_url

    async def fetch_token_info(self, address: str, network: str,
                               is_erc721: bool, is_erc20: bool) -> Optional[TokenInfo]:
        """Token name and human token count, empty when the contract is neither standard"""
        if not is_erc721 and not is_erc20:
            return TokenInfo()

        try:
            if is_erc721:
                return await self._collection_info(address, network)
            return await self._token_info(address, network)
        except MetadataFetchError as e:
            logger.error(f"Error fetching token info for {address} on {network}: {e}")
            return None

    async def _collection_info(self, address: str, network: str) -> TokenInfo:
        data = await self._get("/nft/collection/metadata", address, network)
        total_supply = data.get('total_supply')
        return TokenInfo(
            name=data.get('name') or None,
            symbol=data.get('symbol') or None,
            token_count=str(total_supply) if total_supply not in (None, '') else None,
            standard='ERC721',
        )

    async def _token_info(self, address: str, network: str) -> TokenInfo:
        data = await self._get("/token/metadata", address, network)
        total_supply = data.get('total_supply')
        decimals = data.get('decimals')

        token_count = None
        if total_supply not in (None, '') and decimals not in (None, ''):
            try:
                token_count = format_token_count(scale_down(total_supply, int(decimals)))
            except (InvalidOperation, ValueError, TypeError) as e:
                raise MetadataFetchError(
                    f"Bad supply/decimals for {address}: {total_supply!r}/{decimals!r}"
                ) from e

        return TokenInfo(
            name=data.get('name') or None,
            symbol=data.get('symbol') or None,
            token_count=token_count,
            standard='ERC20',
        )

    async def _get(self, path: str, address: str, network: str) -> Dict[str, Any]:
        info = resolve_network(network)
        url = f"{self.base_url}{path}"
        headers = {
            "accept": "application/json",
            "x-api-key": self.config.chainbase_api_key or ""
        }
        params = {
            "chain_id": str(info.chain_id),
            "contract_address": address
        }
        timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)

        try:
            async with session_scope(self.session, self.config.request_timeout) as session:
                async with session.get(url, headers=headers, params=params, timeout=timeout) as response:
                    if response.status != 200:
                        raise MetadataFetchError(f"{path} returned HTTP {response.status}")
                    payload = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise MetadataFetchError(f"{path} timed out") from e
        except aiohttp.ClientError as e:
            raise MetadataFetchError(f"{path} failed: {e}") from e
        except ValueError as e:
            raise MetadataFetchError(f"{path} returned invalid JSON: {e}") from e

        if not isinstance(payload, dict) or payload.get('code') not in (0, None):
            raise MetadataFetchError(f"{path} returned error payload: {payload}")

        data = payload.get('data')
        if not isinstance(data, dict):
            raise MetadataFetchError(f"{path} returned no metadata object")
        return data
