# utils/formatting.py - Display helpers shared by the descriptions
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Optional, Union

from utils.constants import WEI_DECIMALS, UNAVAILABLE

FOUR_PLACES = Decimal('0.0001')

def hex_to_int(value: str) -> int:
    """Convert a 0x-prefixed quantity to int"""
    if not isinstance(value, str) or not value.startswith('0x'):
        raise ValueError(f"Not a hex quantity: {value!r}")
    return int(value, 16) if len(value) > 2 else 0

def scale_down(raw: Union[int, str, Decimal], decimals: int) -> Decimal:
    """Divide a raw integer amount by 10**decimals without losing precision"""
    with localcontext() as ctx:
        ctx.prec = 100
        return Decimal(str(raw)) / (Decimal(10) ** int(decimals))

def wei_to_native(wei: Union[int, str, Decimal]) -> Decimal:
    """Wei -> native token units rounded half-up to 4 places"""
    with localcontext() as ctx:
        ctx.prec = 100
        return scale_down(wei, WEI_DECIMALS).quantize(FOUR_PLACES, rounding=ROUND_HALF_UP)

def format_native_amount(amount: Optional[Decimal], symbol: str = 'ETH') -> str:
    if amount is None:
        return UNAVAILABLE
    return f"{amount:.4f} {symbol}"

def format_token_count(count: Decimal) -> str:
    """Plain decimal notation without trailing zeros, e.g. Decimal('1000.000') -> '1000'"""
    with localcontext() as ctx:
        ctx.prec = 100
        normalized = count.normalize()
    return format(normalized, 'f')

def shorten_address(address: Optional[str]) -> str:
    """0x1234...abcd display form"""
    if not address:
        return UNAVAILABLE
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"

def display(value: Any, fallback: str = UNAVAILABLE) -> str:
    """Render an optional field, substituting the fallback for missing values"""
    if value is None or value == '':
        return fallback
    return str(value)
