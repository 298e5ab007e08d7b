"""
Transfer simulation API routes.

Provides endpoints for transfer simulations:
- POST /transfer/simulate - Create a simulation (runs in background)
- GET /transfer/simulate/{simulation_id} - Poll one simulation
- GET /transfer/simulations - List own simulations
- GET /transfer/stats - Aggregate own simulations
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from coffre.application.services.session_manager import ValidatedSession
from coffre.application.services.simulation_engine import (
    CreateSimulationCommand,
    SimulationEngine,
)
from coffre.di.dependencies import get_simulation_engine
from coffre.domain.entities.transfer_simulation import SimulationStatus
from coffre.domain.exceptions import AccessDeniedError
from coffre.presentation.api.middleware.auth import (
    get_current_session,
    get_current_wallet,
)
from coffre.presentation.api.middleware.rate_limit_middleware import (
    client_ip,
    client_user_agent,
)
from coffre.presentation.schemas.common import ApiResponse
from coffre.presentation.schemas.transfer_schemas import (
    SimulateTransferRequest,
    SimulationListResponse,
    SimulationResponse,
    SimulationStatsResponse,
)

router = APIRouter(prefix="/transfer", tags=["Transfer"])


@router.post(
    "/simulate",
    response_model=ApiResponse[SimulationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Simulate a transfer",
)
async def simulate_transfer(
    body: SimulateTransferRequest,
    request: Request,
    current: ValidatedSession = Depends(get_current_session),
    engine: SimulationEngine = Depends(get_simulation_engine),
) -> ApiResponse[SimulationResponse]:
    """
    Create a pending simulation and queue it for execution.

    Poll GET /transfer/simulate/{simulation_id} for the outcome.

    Raises:
        InvalidTransferRequestError: 400 if any transfer field is invalid
    """
    simulation = await engine.create(
        CreateSimulationCommand(
            wallet_address=current.user.wallet_address,
            user_id=current.user.id,
            from_address=body.from_address,
            to_address=body.to_address,
            amount=body.amount,
            gas_limit=body.gas_limit,
            gas_price=body.gas_price,
            max_fee_per_gas=body.max_fee_per_gas,
            max_priority_fee_per_gas=body.max_priority_fee_per_gas,
            source=body.source,
            session_id=str(current.session.id),
            ip_address=client_ip(request),
            user_agent=client_user_agent(request),
        )
    )
    return ApiResponse(
        message="Simulation created",
        data=SimulationResponse.model_validate(simulation.to_public_dict()),
    )


@router.get(
    "/simulate/{simulation_id}",
    response_model=ApiResponse[SimulationResponse],
    summary="Get a simulation",
)
async def get_simulation(
    simulation_id: str,
    wallet_address: str = Depends(get_current_wallet),
    engine: SimulationEngine = Depends(get_simulation_engine),
) -> ApiResponse[SimulationResponse]:
    """
    Raises:
        EntityNotFoundError: 404 if unknown or expired
        AccessDeniedError: 403 if owned by another wallet
    """
    simulation = await engine.get(simulation_id)
    if simulation.wallet_address != wallet_address:
        raise AccessDeniedError(f"simulation {simulation_id}")

    return ApiResponse(
        data=SimulationResponse.model_validate(simulation.to_public_dict())
    )


@router.get(
    "/simulations",
    response_model=ApiResponse[SimulationListResponse],
    summary="List own simulations",
)
async def list_simulations(
    limit: int = Query(10, ge=1, description="Page size (capped at 50)"),
    skip: int = Query(0, ge=0),
    status_filter: Optional[SimulationStatus] = Query(None, alias="status"),
    wallet_address: str = Depends(get_current_wallet),
    engine: SimulationEngine = Depends(get_simulation_engine),
) -> ApiResponse[SimulationListResponse]:
    limit = min(limit, engine.policy.max_list_limit)
    simulations = await engine.list_for_wallet(
        wallet_address, limit=limit, skip=skip, status=status_filter
    )
    return ApiResponse(
        data=SimulationListResponse(
            simulations=[
                SimulationResponse.model_validate(s.to_public_dict())
                for s in simulations
            ],
            count=len(simulations),
            limit=limit,
            skip=skip,
        )
    )


@router.get(
    "/stats",
    response_model=ApiResponse[SimulationStatsResponse],
    summary="Aggregate own simulations",
)
async def get_simulation_stats(
    wallet_address: str = Depends(get_current_wallet),
    engine: SimulationEngine = Depends(get_simulation_engine),
) -> ApiResponse[SimulationStatsResponse]:
    stats = await engine.stats(wallet_address)
    return ApiResponse(data=SimulationStatsResponse(**stats.to_dict()))
