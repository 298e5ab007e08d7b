"""
Unit tests for TransferSimulation entity and simulation rules.

Usage:
    pytest tests/unit/domain/test_transfer_simulation.py
"""

from datetime import timedelta

import pytest

from coffre.domain.clock import utcnow
from coffre.domain.entities.transfer_simulation import (
    NetworkContext,
    RequestMetadata,
    SimulationStatus,
    TransferParameters,
    TransferSimulation,
)
from coffre.domain.services import simulation_rules

SENDER = "0x742d35cc6634c0532925a3b844bc454e4438f44e"
RECIPIENT = "0x8ba1f109551bd432803012645ac136ddd64dba72"
GWEI = 10**9


def make_transfer(
    amount_wei: int = 10**18,
    gas_price_gwei: int = 20,
    to_address: str = RECIPIENT,
) -> TransferParameters:
    return TransferParameters(
        from_address=SENDER,
        to_address=to_address,
        amount="1.0",
        amount_wei=str(amount_wei),
        gas_limit="21000",
        gas_price=str(gas_price_gwei),
        gas_price_wei=str(gas_price_gwei * GWEI),
    )


def make_simulation(**kwargs) -> TransferSimulation:
    return TransferSimulation(
        simulation_id="sim_test",
        wallet_address=SENDER.upper().replace("0X", "0x"),
        transfer=kwargs.pop("transfer", make_transfer()),
        network=NetworkContext(chain_id=1, name="mainnet"),
        **kwargs,
    )


class TestTransferParameters:
    def test_costs(self):
        transfer = make_transfer(amount_wei=10**18, gas_price_gwei=20)

        assert transfer.gas_cost_wei == 21000 * 20 * GWEI
        assert transfer.total_cost_wei == 10**18 + 420_000 * GWEI

    def test_self_transfer_is_case_insensitive(self):
        transfer = make_transfer(to_address=SENDER.upper().replace("0X", "0x"))

        assert transfer.is_self_transfer is True


class TestTransferSimulation:
    """Lifecycle of a simulation record."""

    def test_new_simulation_is_pending(self):
        simulation = make_simulation()

        assert simulation.status == SimulationStatus.PENDING
        assert simulation.wallet_address == SENDER
        assert simulation.executed_at is None

    def test_transitions_stamp_times(self):
        simulation = make_simulation()

        simulation.transition_to(SimulationStatus.SIMULATING)
        assert simulation.executed_at is not None
        assert simulation.completed_at is None

        simulation.transition_to(SimulationStatus.SUCCESS)
        assert simulation.completed_at is not None
        assert simulation.status.is_terminal

    def test_terminal_status_is_final(self):
        simulation = make_simulation()
        simulation.transition_to(SimulationStatus.FAILED)

        with pytest.raises(ValueError):
            simulation.transition_to(SimulationStatus.SUCCESS)

    def test_cannot_return_to_pending(self):
        simulation = make_simulation()
        simulation.transition_to(SimulationStatus.SIMULATING)

        with pytest.raises(ValueError):
            simulation.transition_to(SimulationStatus.PENDING)

    def test_rejects_non_positive_amount(self):
        with pytest.raises(ValueError):
            make_simulation(transfer=make_transfer(amount_wei=0))

    def test_expiry(self):
        simulation = make_simulation()
        retention = timedelta(hours=24)

        assert simulation.is_expired(retention) is False
        assert simulation.is_expired(retention, now=utcnow() + retention) is True

    def test_public_dict_hides_request_metadata(self):
        simulation = make_simulation(
            metadata=RequestMetadata(ip_address="10.0.0.1", user_agent="curl/8")
        )

        public = simulation.to_public_dict()

        assert "ip_address" not in public
        assert "user_agent" not in public
        assert public["source"] == "api"
        assert public["status"] == "pending"


class TestSimulationRules:
    """Funds, gas price and confirmation heuristics."""

    def test_sufficient_funds(self):
        assert simulation_rules.check_funds(100, 100) is None

    def test_insufficient_funds_reports_shortfall(self):
        issue = simulation_rules.check_funds(5 * 10**17, 10**18)

        assert issue.code == "INSUFFICIENT_FUNDS"
        assert issue.details == {
            "required": "1.0",
            "available": "0.5",
            "shortfall": "0.5",
        }

    def test_low_gas_price_warning(self):
        warning = simulation_rules.assess_gas_price(10 * GWEI, 20 * GWEI)

        assert warning.type == "LOW_GAS_PRICE"
        assert warning.details["deviation_percent"] == "50.0"

    def test_high_gas_price_warning(self):
        warning = simulation_rules.assess_gas_price(40 * GWEI, 20 * GWEI)

        assert warning.type == "HIGH_GAS_PRICE"
        assert warning.details["deviation_percent"] == "100.0"

    def test_gas_price_within_band(self):
        assert simulation_rules.assess_gas_price(20 * GWEI, 20 * GWEI) is None
        assert simulation_rules.assess_gas_price(16 * GWEI, 20 * GWEI) is None
        assert simulation_rules.assess_gas_price(30 * GWEI, 20 * GWEI) is None

    def test_zero_reference_disables_comparison(self):
        assert simulation_rules.assess_gas_price(1, 0) is None

    def test_self_transfer_warning_collected(self):
        transfer = make_transfer(to_address=SENDER)

        warnings = simulation_rules.collect_warnings(transfer, 20 * GWEI)

        assert [w.type for w in warnings] == ["SELF_TRANSFER"]

    @pytest.mark.parametrize(
        "gwei, seconds",
        [(60, 30), (50, 30), (49, 120), (20, 120), (10, 300), (9, 600), (0, 600)],
    )
    def test_confirmation_time_tiers(self, gwei, seconds):
        assert simulation_rules.estimate_confirmation_time(gwei * GWEI) == seconds
