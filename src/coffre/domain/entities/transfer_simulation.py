"""
TransferSimulation entity - one cost/feasibility prediction for a transfer.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, List, Optional
from uuid import UUID, uuid4

from coffre.domain.clock import utcnow
from coffre.domain.value_objects.wallet_address import is_valid_address


class SimulationStatus(str, Enum):
    """Simulation lifecycle status."""

    PENDING = "pending"
    SIMULATING = "simulating"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (SimulationStatus.SUCCESS, SimulationStatus.FAILED)


class SimulationSource(str, Enum):
    """Client surface that requested the simulation."""

    WEB = "web"
    API = "api"
    MOBILE = "mobile"


@dataclass(frozen=True)
class TransferParameters:
    """
    Validated transfer parameters.

    Amounts are kept both as entered (decimal strings) and in smallest
    units (integer strings). Gas price is denominated in gwei.
    """

    from_address: str
    to_address: str
    amount: str
    amount_wei: str
    gas_limit: str
    gas_price: str
    gas_price_wei: str
    max_fee_per_gas: Optional[str] = None
    max_priority_fee_per_gas: Optional[str] = None

    @property
    def gas_cost_wei(self) -> int:
        """Maximum network fee: gas_limit * gas_price."""
        return int(self.gas_limit) * int(self.gas_price_wei)

    @property
    def total_cost_wei(self) -> int:
        """Transferred amount plus maximum network fee."""
        return int(self.amount_wei) + self.gas_cost_wei

    @property
    def is_self_transfer(self) -> bool:
        return self.from_address.lower() == self.to_address.lower()

    def to_dict(self) -> dict:
        return {
            "from_address": self.from_address,
            "to_address": self.to_address,
            "amount": self.amount,
            "amount_wei": self.amount_wei,
            "gas_limit": self.gas_limit,
            "gas_price": self.gas_price,
            "gas_price_wei": self.gas_price_wei,
            "max_fee_per_gas": self.max_fee_per_gas,
            "max_priority_fee_per_gas": self.max_priority_fee_per_gas,
        }


@dataclass
class SimulationResult:
    """Outcome of a simulation pass."""

    success: bool
    gas_used: str
    effective_gas_price: str
    total_cost: str
    total_cost_wei: str
    balance_after: str
    balance_after_wei: str
    estimated_confirmation_time: int

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "gas_used": self.gas_used,
            "effective_gas_price": self.effective_gas_price,
            "total_cost": self.total_cost,
            "total_cost_wei": self.total_cost_wei,
            "balance_after": self.balance_after,
            "balance_after_wei": self.balance_after_wei,
            "estimated_confirmation_time": self.estimated_confirmation_time,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SimulationResult":
        return cls(**data)


@dataclass
class SimulationIssue:
    """Structured error recorded on a simulation."""

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "details": self.details}

    @classmethod
    def from_dict(cls, data: dict) -> "SimulationIssue":
        return cls(
            code=data["code"],
            message=data["message"],
            details=data.get("details") or {},
        )


@dataclass
class SimulationWarning:
    """Structured, non-blocking advisory recorded on a simulation."""

    type: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"type": self.type, "message": self.message, "details": self.details}

    @classmethod
    def from_dict(cls, data: dict) -> "SimulationWarning":
        return cls(
            type=data["type"],
            message=data["message"],
            details=data.get("details") or {},
        )


@dataclass
class NetworkContext:
    """Chain snapshot taken when the simulation was created."""

    chain_id: int
    name: str
    block_number: Optional[int] = None
    block_timestamp: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "chain_id": self.chain_id,
            "name": self.name,
            "block_number": self.block_number,
            "block_timestamp": self.block_timestamp,
        }


@dataclass
class RequestMetadata:
    """Request provenance; ip_address and user_agent stay private."""

    source: SimulationSource = SimulationSource.API
    session_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass
class TransferSimulation:
    """
    TransferSimulation entity.

    Lifecycle: pending -> simulating -> success | failed. Terminal
    statuses never change. Records expire a fixed window after creation
    regardless of status; expiry is enforced by the store.
    """

    simulation_id: str
    wallet_address: str
    transfer: TransferParameters
    network: NetworkContext
    user_id: Optional[UUID] = None
    metadata: RequestMetadata = field(default_factory=RequestMetadata)
    status: SimulationStatus = SimulationStatus.PENDING
    result: Optional[SimulationResult] = None
    errors: List[SimulationIssue] = field(default_factory=list)
    warnings: List[SimulationWarning] = field(default_factory=list)
    executed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        """Validate simulation invariants."""
        if not self.simulation_id:
            raise ValueError("Simulation ID is required")

        for label, address in (
            ("from", self.transfer.from_address),
            ("to", self.transfer.to_address),
        ):
            if not is_valid_address(address):
                raise ValueError(f"Invalid {label} address: {address}")

        if int(self.transfer.amount_wei) <= 0:
            raise ValueError("Transfer amount must be positive")

        self.wallet_address = self.wallet_address.lower()

    def transition_to(
        self,
        status: SimulationStatus,
        result: Optional[SimulationResult] = None,
        errors: Optional[List[SimulationIssue]] = None,
        warnings: Optional[List[SimulationWarning]] = None,
        now: Optional[datetime] = None,
    ) -> None:
        """
        Move to a later lifecycle status.

        Stamps executed_at the first time the record enters simulating and
        completed_at on a terminal status. Errors and warnings are appended.

        Raises:
            ValueError: If the record is terminal or status moves backwards
        """
        if self.status.is_terminal:
            raise ValueError(
                f"Simulation {self.simulation_id} already {self.status.value}"
            )
        if status == SimulationStatus.PENDING:
            raise ValueError("Cannot move a simulation back to pending")

        now = now or utcnow()

        if status == SimulationStatus.SIMULATING and self.executed_at is None:
            self.executed_at = now
        if status.is_terminal:
            self.completed_at = now

        self.status = status
        if result is not None:
            self.result = result
        if errors:
            self.errors.extend(errors)
        if warnings:
            self.warnings.extend(warnings)
        self.updated_at = now

    def add_warning(self, warning: SimulationWarning) -> None:
        self.warnings.append(warning)
        self.updated_at = utcnow()

    def is_expired(self, retention: timedelta, now: Optional[datetime] = None) -> bool:
        """Check whether the record is past its retention window."""
        return (now or utcnow()) - self.created_at >= retention

    def to_public_dict(self) -> dict:
        """Public view - omits IP address and user agent."""
        return {
            "simulation_id": self.simulation_id,
            "wallet_address": self.wallet_address,
            "transfer": self.transfer.to_dict(),
            "status": self.status.value,
            "result": self.result.to_dict() if self.result else None,
            "errors": [error.to_dict() for error in self.errors],
            "warnings": [warning.to_dict() for warning in self.warnings],
            "network": self.network.to_dict(),
            "source": self.metadata.source.value,
            "executed_at": self.executed_at,
            "completed_at": self.completed_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
