"""
WalletAddress value object - Immutable EVM account address.
"""

import re
from dataclasses import dataclass

_ADDRESS_PATTERN = re.compile(r"0x[0-9a-fA-F]{40}")


def is_valid_address(value: object) -> bool:
    """
    Check EVM address syntax: '0x' followed by exactly 40 hex digits.

    Case-insensitive (checksum casing is not enforced). Never raises.

    Args:
        value: Anything a caller might pass as an address

    Returns:
        True if value is a well-formed address string
    """
    if not isinstance(value, str):
        return False
    return _ADDRESS_PATTERN.fullmatch(value) is not None


@dataclass(frozen=True)
class WalletAddress:
    """
    Value object representing a validated EVM wallet address.

    Business rules:
    - '0x' prefix plus 40 hexadecimal characters
    - Stored lowercase so lookups are case-insensitive
    - Immutable once created
    """

    address: str

    def __post_init__(self):
        """Validate and normalize wallet address on creation."""
        if not self.address:
            raise ValueError("Wallet address cannot be empty")

        if not is_valid_address(self.address):
            raise ValueError(f"Invalid wallet address format: {self.address}")

        object.__setattr__(self, "address", self.address.lower())

    def truncated(self) -> str:
        """Return truncated address for display (e.g., '0xab12...cd34')."""
        return f"{self.address[:6]}...{self.address[-4:]}"

    def __str__(self) -> str:
        """String representation returns full address."""
        return self.address
