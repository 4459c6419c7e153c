import httpx
import logging
from typing import Optional, List

from utils.config import Config

logger = logging.getLogger(__name__)

class NeynarClient:
    """Publishes reply casts through the Neynar v2 API"""

    def __init__(self, config: Config):
        self.api_key = config.neynar_api_key
        self.signer_uuid = config.signer_uuid
        self.base_url = config.neynar_api_url
        self.timeout = config.request_timeout
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        if self.is_configured():
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=5.0),
                headers={"api_key": self.api_key, "accept": "application/json"},
                follow_redirects=True
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._client:
            await self._client.aclose()
            self._client = None

    def is_configured(self) -> bool:
        """Check if properly configured"""
        return bool(self.api_key and self.signer_uuid)

    async def publish_cast(self, text: str, embed_urls: List[str] = None,
                           parent_hash: str = None) -> Optional[str]:
        """Publish a cast and return its hash, None when not sent"""
        if not self._client or not self.is_configured():
            logger.warning("Neynar client not configured - skipping cast")
            return None

        payload = {
            "signer_uuid": self.signer_uuid,
            "text": text,
            "embeds": [{"url": url} for url in (embed_urls or [])]
        }
        if parent_hash:
            payload["parent"] = parent_hash

        try:
            response = await self._client.post(f"{self.base_url}/cast", json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Neynar publish failed: {e}")
            return None

        if response.status_code != 200:
            logger.error(f"Neynar API error: {response.status_code}")
            return None

        cast_hash = (response.json().get('cast') or {}).get('hash')
        logger.info(f"Cast published: {cast_hash}")
        return cast_hash
