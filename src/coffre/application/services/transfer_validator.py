"""
Transfer request validation.

Runs before any simulation record is built, so storage never sees
malformed addresses or amounts.
"""

from dataclasses import dataclass
from typing import Optional

from coffre.domain.entities.transfer_simulation import (
    SimulationSource,
    TransferParameters,
)
from coffre.domain.exceptions import InvalidAmountError, InvalidTransferRequestError
from coffre.domain.value_objects.amount import (
    GWEI_DECIMALS,
    gwei_to_wei,
    to_smallest_unit,
)
from coffre.domain.value_objects.wallet_address import is_valid_address

# Block gas limits fit in 9 digits
MAX_GAS_LIMIT_DIGITS = 20


@dataclass
class TransferRequest:
    """Raw transfer parameters as supplied by the caller."""

    from_address: str
    to_address: str
    amount: str
    gas_limit: Optional[str] = None
    gas_price: Optional[str] = None
    max_fee_per_gas: Optional[str] = None
    max_priority_fee_per_gas: Optional[str] = None


def _require_address(field: str, value: Optional[str]) -> str:
    if not is_valid_address(value):
        raise InvalidTransferRequestError(field, "must be 0x followed by 40 hex digits")
    return value.lower()


def _optional_gwei(field: str, value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        to_smallest_unit(value, GWEI_DECIMALS)
    except InvalidAmountError as e:
        raise InvalidTransferRequestError(field, e.message)
    return value.strip()


def validate_gas_limit(value: Optional[str], default: str) -> str:
    """Return a canonical positive integer gas limit string."""
    raw = default if value is None else str(value).strip()
    if not (raw.isascii() and raw.isdigit()):
        raise InvalidTransferRequestError("gas_limit", "must be a positive integer")
    if len(raw) > MAX_GAS_LIMIT_DIGITS:
        raise InvalidTransferRequestError(
            "gas_limit", f"must have at most {MAX_GAS_LIMIT_DIGITS} digits"
        )
    if int(raw) <= 0:
        raise InvalidTransferRequestError("gas_limit", "must be a positive integer")
    return str(int(raw))


def validate_source(value: Optional[str]) -> SimulationSource:
    if value is None:
        return SimulationSource.API
    try:
        return SimulationSource(value)
    except ValueError:
        allowed = ", ".join(s.value for s in SimulationSource)
        raise InvalidTransferRequestError("source", f"must be one of: {allowed}")


def validate_transfer(
    request: TransferRequest,
    fallback_gas_price: str,
    default_gas_limit: str = "21000",
) -> TransferParameters:
    """
    Validate a transfer request and build its parameters.

    Args:
        request: Caller-supplied transfer fields
        fallback_gas_price: Gwei price used when the caller omits gas_price
        default_gas_limit: Gas limit used when the caller omits it

    Returns:
        TransferParameters with smallest-unit amounts filled in

    Raises:
        InvalidTransferRequestError: On the first invalid field
    """
    from_address = _require_address("from", request.from_address)
    to_address = _require_address("to", request.to_address)

    try:
        amount_wei = to_smallest_unit(request.amount)
    except InvalidAmountError as e:
        raise InvalidTransferRequestError("amount", e.message)

    gas_limit = validate_gas_limit(request.gas_limit, default_gas_limit)

    gas_price = _optional_gwei("gas_price", request.gas_price) or fallback_gas_price
    try:
        gas_price_wei = gwei_to_wei(gas_price)
    except InvalidAmountError as e:
        raise InvalidTransferRequestError("gas_price", e.message)

    return TransferParameters(
        from_address=from_address,
        to_address=to_address,
        amount=request.amount.strip(),
        amount_wei=amount_wei,
        gas_limit=gas_limit,
        gas_price=gas_price,
        gas_price_wei=str(gas_price_wei),
        max_fee_per_gas=_optional_gwei("max_fee_per_gas", request.max_fee_per_gas),
        max_priority_fee_per_gas=_optional_gwei(
            "max_priority_fee_per_gas", request.max_priority_fee_per_gas
        ),
    )
