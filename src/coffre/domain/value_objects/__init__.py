"""
Domain value objects.
"""

from coffre.domain.value_objects.amount import (
    ETHER_DECIMALS,
    GWEI_DECIMALS,
    WEI_PER_GWEI,
    from_smallest_unit,
    gwei_to_wei,
    mean_gwei,
    to_smallest_unit,
    wei_to_gwei,
)
from coffre.domain.value_objects.wallet_address import (
    WalletAddress,
    is_valid_address,
)

__all__ = [
    "ETHER_DECIMALS",
    "GWEI_DECIMALS",
    "WEI_PER_GWEI",
    "from_smallest_unit",
    "to_smallest_unit",
    "gwei_to_wei",
    "wei_to_gwei",
    "mean_gwei",
    "WalletAddress",
    "is_valid_address",
]
