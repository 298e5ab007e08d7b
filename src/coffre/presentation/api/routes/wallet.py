"""
Wallet API routes.

- GET /wallet/balance - Live balance of an address (defaults to caller)
- GET /wallet/transactions - Explorer transaction history
- GET /wallet/overview - Balance plus the 3 latest transactions
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from coffre.application.use_cases.get_transaction_history import (
    MAX_PAGE_SIZE,
    GetTransactionHistory,
)
from coffre.application.use_cases.get_wallet_balance import GetWalletBalance
from coffre.application.use_cases.get_wallet_overview import GetWalletOverview
from coffre.di.dependencies import (
    get_get_transaction_history,
    get_get_wallet_balance,
    get_get_wallet_overview,
)
from coffre.presentation.api.middleware.auth import get_current_wallet
from coffre.presentation.schemas.common import ApiResponse
from coffre.presentation.schemas.wallet_schemas import (
    BalanceResponse,
    TransactionHistoryResponse,
    TransactionResponse,
    WalletOverviewResponse,
)

router = APIRouter(prefix="/wallet", tags=["Wallet"])


@router.get(
    "/balance",
    response_model=ApiResponse[BalanceResponse],
    summary="Get wallet balance",
)
async def get_balance(
    address: Optional[str] = Query(None, description="Defaults to caller"),
    wallet_address: str = Depends(get_current_wallet),
    use_case: GetWalletBalance = Depends(get_get_wallet_balance),
) -> ApiResponse[BalanceResponse]:
    """
    Raises:
        ValidationError: 400 if address is malformed
        OracleUnavailableError: 503 if the chain cannot be queried
    """
    result = await use_case.execute(address or wallet_address)
    return ApiResponse(data=BalanceResponse.model_validate(result))


@router.get(
    "/transactions",
    response_model=ApiResponse[TransactionHistoryResponse],
    summary="Get transaction history",
)
async def get_transactions(
    address: Optional[str] = Query(None, description="Defaults to caller"),
    page: int = Query(1, ge=1),
    offset: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    wallet_address: str = Depends(get_current_wallet),
    use_case: GetTransactionHistory = Depends(get_get_transaction_history),
) -> ApiResponse[TransactionHistoryResponse]:
    """
    Raises:
        ExplorerUnavailableError: 502 if the explorer cannot be reached
    """
    target = (address or wallet_address).lower()
    records = await use_case.execute(target, page=page, offset=offset)
    return ApiResponse(
        data=TransactionHistoryResponse(
            address=target,
            page=page,
            offset=offset,
            transactions=[TransactionResponse.model_validate(r) for r in records],
        )
    )


@router.get(
    "/overview",
    response_model=ApiResponse[WalletOverviewResponse],
    summary="Get wallet overview",
)
async def get_overview(
    address: Optional[str] = Query(None, description="Defaults to caller"),
    wallet_address: str = Depends(get_current_wallet),
    use_case: GetWalletOverview = Depends(get_get_wallet_overview),
) -> ApiResponse[WalletOverviewResponse]:
    """
    Raises:
        ValidationError: 400 if address is malformed
        OracleUnavailableError: 503 if the chain cannot be queried
        ExplorerUnavailableError: 502 if the explorer cannot be reached
    """
    overview = await use_case.execute(address or wallet_address)
    return ApiResponse(
        message="Wallet overview retrieved",
        data=WalletOverviewResponse.model_validate(overview),
    )
