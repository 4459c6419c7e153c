from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import aiohttp

@asynccontextmanager
async def session_scope(session: Optional[aiohttp.ClientSession],
                        timeout: float) -> AsyncIterator[aiohttp.ClientSession]:
    """Yield the request-scoped session, or a short-lived one when none was passed in"""
    if session is not None:
        yield session
        return

    async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as owned:
        yield owned
