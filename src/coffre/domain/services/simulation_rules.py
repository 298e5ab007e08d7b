"""
Transfer simulation business rules.

Pure functions over integer wei amounts, shared by the simulation engine
and its tests.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from coffre.domain.entities.transfer_simulation import (
    SimulationIssue,
    SimulationWarning,
    TransferParameters,
)
from coffre.domain.value_objects.amount import (
    WEI_PER_GWEI,
    from_smallest_unit,
    wei_to_gwei,
)

INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
SIMULATION_ERROR = "SIMULATION_ERROR"
LOW_GAS_PRICE = "LOW_GAS_PRICE"
HIGH_GAS_PRICE = "HIGH_GAS_PRICE"
SELF_TRANSFER = "SELF_TRANSFER"

# (minimum gas price in gwei, estimated seconds), fastest first
CONFIRMATION_TIERS = ((50, 30), (20, 120), (10, 300))
SLOWEST_CONFIRMATION_SECONDS = 600

LOW_GAS_PRICE_PERCENT = 80
HIGH_GAS_PRICE_PERCENT = 150


def estimate_confirmation_time(gas_price_wei: int) -> int:
    """
    Heuristic confirmation latency in seconds from the offered gas price.

    Not a chain query: fixed gwei thresholds only.
    """
    for min_gwei, seconds in CONFIRMATION_TIERS:
        if gas_price_wei >= min_gwei * WEI_PER_GWEI:
            return seconds
    return SLOWEST_CONFIRMATION_SECONDS


def check_funds(balance_wei: int, total_cost_wei: int) -> Optional[SimulationIssue]:
    """Return an INSUFFICIENT_FUNDS error when balance does not cover cost."""
    if balance_wei >= total_cost_wei:
        return None

    return SimulationIssue(
        code=INSUFFICIENT_FUNDS,
        message="Insufficient balance to cover transfer amount and gas fees",
        details={
            "required": from_smallest_unit(total_cost_wei),
            "available": from_smallest_unit(balance_wei),
            "shortfall": from_smallest_unit(total_cost_wei - balance_wei),
        },
    )


def _deviation_percent(gas_price_wei: int, reference_wei: int) -> str:
    difference = abs(Decimal(gas_price_wei - reference_wei))
    deviation = difference * 100 / Decimal(reference_wei)
    return str(deviation.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def assess_gas_price(
    gas_price_wei: int, reference_wei: int
) -> Optional[SimulationWarning]:
    """
    Compare an offered gas price with the network reference.

    Below 80% of the reference yields LOW_GAS_PRICE, above 150% yields
    HIGH_GAS_PRICE. A zero reference disables the comparison.
    """
    if reference_wei <= 0:
        return None

    details = {
        "gas_price": wei_to_gwei(gas_price_wei),
        "network_gas_price": wei_to_gwei(reference_wei),
    }

    if gas_price_wei * 100 < reference_wei * LOW_GAS_PRICE_PERCENT:
        percent = _deviation_percent(gas_price_wei, reference_wei)
        return SimulationWarning(
            type=LOW_GAS_PRICE,
            message=(
                f"Gas price is {percent}% below the network average; "
                "the transfer may take longer to confirm"
            ),
            details={"deviation_percent": percent, **details},
        )

    if gas_price_wei * 100 > reference_wei * HIGH_GAS_PRICE_PERCENT:
        percent = _deviation_percent(gas_price_wei, reference_wei)
        return SimulationWarning(
            type=HIGH_GAS_PRICE,
            message=(
                f"Gas price is {percent}% above the network average; "
                "you may be overpaying"
            ),
            details={"deviation_percent": percent, **details},
        )

    return None


def check_self_transfer(transfer: TransferParameters) -> Optional[SimulationWarning]:
    """Flag transfers whose sender and recipient are the same account."""
    if not transfer.is_self_transfer:
        return None

    return SimulationWarning(
        type=SELF_TRANSFER,
        message="Sender and recipient are the same address; only gas will be spent",
    )


def collect_warnings(
    transfer: TransferParameters, reference_wei: int
) -> List[SimulationWarning]:
    """All advisory warnings for a transfer, in a stable order."""
    candidates = (
        assess_gas_price(int(transfer.gas_price_wei), reference_wei),
        check_self_transfer(transfer),
    )
    return [warning for warning in candidates if warning is not None]
