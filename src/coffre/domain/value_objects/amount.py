"""
Coin amount conversion between decimal strings and smallest units.

All arithmetic is done on Python integers; amounts never pass through float.
"""

import re
from decimal import ROUND_HALF_UP, Decimal

from coffre.domain.exceptions.simulation import InvalidAmountError

ETHER_DECIMALS = 18
GWEI_DECIMALS = 9
WEI_PER_GWEI = 10**GWEI_DECIMALS

# ASCII digits only
_DECIMAL_PATTERN = re.compile(r"(?P<whole>[0-9]*)(?:\.(?P<fraction>[0-9]*))?")

# Whole-part digits accepted; stored amounts stay within 80 characters
MAX_WHOLE_DIGITS = 60


def to_smallest_unit(amount: str, decimals: int = ETHER_DECIMALS) -> str:
    """
    Convert a decimal coin amount to its integer smallest-unit string.

    Args:
        amount: Decimal string such as "1.5" or "0.000000000000000001"
        decimals: Fractional digits of the unit (18 for ether, 9 for gwei)

    Returns:
        Integer amount as a string (e.g. "1500000000000000000")

    Raises:
        InvalidAmountError: If amount is malformed, too precise or not > 0
    """
    if not isinstance(amount, str):
        raise InvalidAmountError(amount, "must be a decimal string")

    match = _DECIMAL_PATTERN.fullmatch(amount.strip())
    if match is None:
        raise InvalidAmountError(amount)

    whole = match.group("whole") or ""
    fraction = match.group("fraction") or ""
    if not whole and not fraction:
        raise InvalidAmountError(amount)

    if len(fraction) > decimals:
        raise InvalidAmountError(
            amount, f"more than {decimals} fractional digits"
        )
    if len(whole) > MAX_WHOLE_DIGITS:
        raise InvalidAmountError(
            amount, f"more than {MAX_WHOLE_DIGITS} whole digits"
        )

    value = int(whole or "0") * 10**decimals + int(fraction.ljust(decimals, "0"))
    if value <= 0:
        raise InvalidAmountError(amount, "must be greater than zero")

    return str(value)


def from_smallest_unit(value: int | str, decimals: int = ETHER_DECIMALS) -> str:
    """
    Render an integer smallest-unit amount as a decimal string.

    Always keeps at least one fractional digit ("1.0", "0.5", "-0.25").
    Negative values are allowed (projected balances can go below zero).

    Args:
        value: Integer amount or its string form
        decimals: Fractional digits of the unit

    Returns:
        Canonical decimal string
    """
    number = int(value)
    sign = "-" if number < 0 else ""
    whole, fraction = divmod(abs(number), 10**decimals)
    fraction_text = str(fraction).rjust(decimals, "0").rstrip("0") or "0"
    return f"{sign}{whole}.{fraction_text}"


def gwei_to_wei(gwei: str) -> int:
    """Convert a positive gwei decimal string to wei."""
    return int(to_smallest_unit(gwei, GWEI_DECIMALS))


def wei_to_gwei(wei: int | str) -> str:
    """Render wei as a gwei decimal string."""
    return from_smallest_unit(wei, GWEI_DECIMALS)


def mean_gwei(values_wei: list[int], places: int = 2) -> str:
    """
    Average of wei values expressed in gwei, rounded to fixed places.

    Returns "0.00" (per places) for an empty list.
    """
    quantum = Decimal(1).scaleb(-places)
    if not values_wei:
        return str(Decimal(0).quantize(quantum))
    mean = Decimal(sum(values_wei)) / Decimal(len(values_wei)) / Decimal(WEI_PER_GWEI)
    return str(mean.quantize(quantum, rounding=ROUND_HALF_UP))
