"""
Transfer simulation API schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SimulateTransferRequest(BaseModel):
    """
    Transfer to simulate.

    Amounts are decimal strings in ether; gas prices are in gwei.
    """

    model_config = ConfigDict(populate_by_name=True)

    from_address: str = Field(
        ...,
        alias="from",
        examples=["0x742d35cc6634c0532925a3b844bc454e4438f44e"],
    )
    to_address: str = Field(
        ...,
        alias="to",
        examples=["0x8ba1f109551bd432803012645ac136ddd64dba72"],
    )
    amount: str = Field(..., description="Ether amount", examples=["0.5"])
    gas_limit: Optional[str] = Field(None, examples=["21000"])
    gas_price: Optional[str] = Field(
        None,
        description="Gwei; defaults to the network gas price",
        examples=["25"],
    )
    max_fee_per_gas: Optional[str] = Field(None, description="Gwei (EIP-1559)")
    max_priority_fee_per_gas: Optional[str] = Field(
        None, description="Gwei (EIP-1559)"
    )
    source: Optional[str] = Field(None, examples=["web", "api", "mobile"])


class TransferResponse(BaseModel):
    from_address: str
    to_address: str
    amount: str
    amount_wei: str
    gas_limit: str
    gas_price: str
    gas_price_wei: str
    max_fee_per_gas: Optional[str] = None
    max_priority_fee_per_gas: Optional[str] = None


class SimulationResultResponse(BaseModel):
    success: bool
    gas_used: str
    effective_gas_price: str
    total_cost: str
    total_cost_wei: str
    balance_after: str
    balance_after_wei: str
    estimated_confirmation_time: int = Field(..., description="Seconds")


class SimulationIssueResponse(BaseModel):
    code: str
    message: str
    details: dict = Field(default_factory=dict)


class SimulationWarningResponse(BaseModel):
    type: str
    message: str
    details: dict = Field(default_factory=dict)


class NetworkResponse(BaseModel):
    chain_id: int
    name: str
    block_number: Optional[int] = None
    block_timestamp: Optional[datetime] = None


class SimulationResponse(BaseModel):
    """Public simulation view (no IP address or user agent)."""

    simulation_id: str
    wallet_address: str
    transfer: TransferResponse
    status: str
    result: Optional[SimulationResultResponse] = None
    errors: List[SimulationIssueResponse] = Field(default_factory=list)
    warnings: List[SimulationWarningResponse] = Field(default_factory=list)
    network: NetworkResponse
    source: str
    executed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class SimulationListResponse(BaseModel):
    simulations: List[SimulationResponse]
    count: int
    limit: int
    skip: int


class SimulationStatsResponse(BaseModel):
    total: int
    successful: int
    failed: int
    pending: int
    simulating: int
    total_value_simulated: str = Field(..., description="Ether, successes only")
    average_gas_price: str = Field(..., description="Gwei, successes only")
    last_simulation: Optional[datetime] = None
