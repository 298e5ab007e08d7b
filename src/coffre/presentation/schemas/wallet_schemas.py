"""
Wallet API schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class BalanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    address: str
    balance: str
    balance_wei: str
    block_number: int
    block_timestamp: Optional[datetime] = None


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    hash: str
    block_number: int
    timestamp: datetime
    from_address: str
    to_address: Optional[str] = None
    value: str
    value_wei: str
    gas_used: str
    gas_price: str
    status: str


class TransactionHistoryResponse(BaseModel):
    address: str
    page: int
    offset: int
    transactions: List[TransactionResponse]


class WalletOverviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    address: str
    balance: BalanceResponse
    recent_transactions: List[TransactionResponse]
    last_updated: datetime
