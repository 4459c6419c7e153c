"""
Best-effort compiler version fingerprinting for deployed contracts.

Solidity appends a CBOR metadata trailer to runtime bytecode. When the
compiler version is included it is stored under the ``solc`` key
(``64736f6c63``) as a 3-byte string (``43``) holding major, minor and
patch. This module only pattern-matches that trailer; it does not decode
CBOR or the rest of the bytecode, so a miss simply yields ``Unknown``.
"""

import re
import logging
from typing import Optional

from utils.constants import UNKNOWN_COMPILER

logger = logging.getLogger(__name__)

# Tried in order, first match wins
VERSION_PATTERNS = [
    re.compile(r'a264697066735822.*?64736f6c6343([0-9a-f]{6})'),   # IPFS hash + solc
    re.compile(r'64736f6c6343([0-9a-f]{6})'),                      # solc only
    re.compile(r'(?:5b)?64736f6c6343([0-9a-f]{6})(?:5d)?'),        # bracket-wrapped
]

# Looser marker without the bytes(3) header, major.minor only
FALLBACK_PATTERN = re.compile(r'64736f6c63([0-9a-f]{4})')

def extract_compiler_version(bytecode: Optional[str]) -> str:
    """Compiler version as 'major.minor.patch' (or 'major.minor' from the fallback), else 'Unknown'"""
    if not bytecode:
        return UNKNOWN_COMPILER

    clean = bytecode[2:] if bytecode.startswith(('0x', '0X')) else bytecode
    clean = clean.lower()

    for pattern in VERSION_PATTERNS:
        match = pattern.search(clean)
        if match:
            version = match.group(1)
            major, minor, patch = (int(version[i:i + 2], 16) for i in (0, 2, 4))
            return f"{major}.{minor}.{patch}"

    match = FALLBACK_PATTERN.search(clean)
    if match:
        version = match.group(1)
        logger.debug("Compiler version from loose solc marker")
        return f"{int(version[0:2], 16)}.{int(version[2:4], 16)}"

    return UNKNOWN_COMPILER
