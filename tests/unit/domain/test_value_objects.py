"""
Unit tests for address and amount value objects.

Usage:
    pytest tests/unit/domain/test_value_objects.py
"""

import pytest

from coffre.domain.exceptions import InvalidAmountError
from coffre.domain.value_objects.amount import (
    from_smallest_unit,
    gwei_to_wei,
    mean_gwei,
    to_smallest_unit,
    wei_to_gwei,
)
from coffre.domain.value_objects.wallet_address import WalletAddress, is_valid_address

CHECKSUM_ADDRESS = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"


class TestWalletAddress:
    """Address syntax and normalization."""

    def test_accepts_mixed_case(self):
        assert is_valid_address(CHECKSUM_ADDRESS)
        assert is_valid_address(CHECKSUM_ADDRESS.lower())

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "742d35cc6634c0532925a3b844bc454e4438f44e",
            "0x742d35cc6634c0532925a3b844bc454e4438f44",
            "0x742d35cc6634c0532925a3b844bc454e4438f44e0",
            "0xZZ2d35cc6634c0532925a3b844bc454e4438f44e",
            None,
            42,
        ],
    )
    def test_rejects_malformed(self, value):
        assert is_valid_address(value) is False

    def test_value_object_normalizes_to_lowercase(self):
        address = WalletAddress(CHECKSUM_ADDRESS)

        assert str(address) == CHECKSUM_ADDRESS.lower()
        assert address.truncated() == "0x742d...f44e"

    def test_value_object_rejects_invalid(self):
        with pytest.raises(ValueError):
            WalletAddress("0x1234")


class TestAmountConversion:
    """Decimal string <-> integer smallest unit conversion."""

    def test_to_smallest_unit(self):
        assert to_smallest_unit("1") == "1000000000000000000"
        assert to_smallest_unit("1.5") == "1500000000000000000"
        assert to_smallest_unit("0.000000000000000001") == "1"
        assert to_smallest_unit(".5") == "500000000000000000"

    def test_round_trip_preserves_value(self):
        for amount in ("0.1", "2.5", "123.456789012345678"):
            assert from_smallest_unit(to_smallest_unit(amount)) == amount

    @pytest.mark.parametrize(
        "amount",
        [
            "0",
            "0.0",
            "-1",
            "abc",
            "1e18",
            "",
            ".",
            "0.0000000000000000001",
            "١",
            "²",
            "1" * 61,
            "1" * 5000,
        ],
    )
    def test_rejects_invalid_amounts(self, amount):
        with pytest.raises(InvalidAmountError) as exc_info:
            to_smallest_unit(amount)
        assert exc_info.value.code == "INVALID_AMOUNT"

    def test_accepts_sixty_whole_digits(self):
        assert to_smallest_unit("9" * 60) == "9" * 60 + "0" * 18

    def test_rejects_non_string(self):
        with pytest.raises(InvalidAmountError):
            to_smallest_unit(1.5)

    def test_from_smallest_unit_formats(self):
        assert from_smallest_unit(10**18) == "1.0"
        assert from_smallest_unit(0) == "0.0"
        assert from_smallest_unit("250000000000000000") == "0.25"
        assert from_smallest_unit(-5 * 10**17) == "-0.5"

    def test_gwei_helpers(self):
        assert gwei_to_wei("20") == 20_000_000_000
        assert gwei_to_wei("1.5") == 1_500_000_000
        assert wei_to_gwei(25_000_000_000) == "25.0"

    def test_mean_gwei(self):
        assert mean_gwei([]) == "0.00"
        assert mean_gwei([20 * 10**9, 30 * 10**9]) == "25.00"
        assert mean_gwei([10**9, 2 * 10**9, 2 * 10**9]) == "1.67"
