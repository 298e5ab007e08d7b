"""
Domain service interfaces and business rules.
"""

from coffre.domain.services.i_chain_oracle import (
    BalanceSnapshot,
    IChainOracle,
    NetworkInfo,
)
from coffre.domain.services.i_simulation_executor import ISimulationExecutor
from coffre.domain.services.i_token_service import ITokenService, TokenClaims
from coffre.domain.services.i_transaction_explorer import (
    ITransactionExplorer,
    TransactionRecord,
)

__all__ = [
    "IChainOracle",
    "BalanceSnapshot",
    "NetworkInfo",
    "ITransactionExplorer",
    "TransactionRecord",
    "ITokenService",
    "TokenClaims",
    "ISimulationExecutor",
]
