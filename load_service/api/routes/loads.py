"""Load consolidation endpoints."""

from fastapi import APIRouter, HTTPException, Depends
from typing import Optional
import logging

from load_service.api.schemas import (
    CompatibilityResponse,
    ConflictsResponse,
    GroupLoadsRequest,
    GroupLoadsResponse,
    LoadDetailResponse,
    LoadListResponse,
    LoadMutationResponse,
    LoadResponse,
    LoadStatusEnum,
    OrderReferenceRequest,
)
from load_service.core.consolidation import (
    ConsolidationStatus,
    LoadConsolidationEngine,
    MutationResult,
)
from load_service.core.models.domain import LoadStatus

logger = logging.getLogger(__name__)

router = APIRouter()

REJECTION_MESSAGES = {
    ConsolidationStatus.LOAD_NOT_FOUND: "Load not found",
    ConsolidationStatus.ORDER_NOT_FOUND: "Order not found",
    ConsolidationStatus.ORDER_NOT_IN_LOAD: "Order is not part of this load",
    ConsolidationStatus.ORDER_ALREADY_IN_LOAD: "Order is already part of this load",
    ConsolidationStatus.CAPACITY_EXCEEDED: "Adding the order would exceed load weight or volume capacity",
    ConsolidationStatus.TIME_WINDOW_CONFLICT: "Order time window is not compatible with the load",
}


def get_consolidation_engine() -> LoadConsolidationEngine:
    """Get consolidation engine from main app."""
    from load_service.api.main import app_state
    return app_state.get_engine()


def _raise_for_rejection(result: MutationResult) -> None:
    status_code = 404 if result.status.is_not_found else 400
    raise HTTPException(status_code=status_code, detail=REJECTION_MESSAGES[result.status])


@router.post("/loads/group", response_model=GroupLoadsResponse, status_code=201)
async def create_loads_by_geographic_area(
    request: GroupLoadsRequest,
    engine: LoadConsolidationEngine = Depends(get_consolidation_engine),
):
    """Group pending orders around a point into consolidated loads.

    Option fields left out of the request fall back to the service defaults.
    """
    logger.info(f"Grouping orders around ({request.latitude}, {request.longitude})")

    loads = await engine.group_orders_by_geographic_area(
        request.latitude,
        request.longitude,
        request.option_overrides(),
    )

    return GroupLoadsResponse(
        message=f"Created {len(loads)} load(s)",
        loads=[LoadResponse.model_validate(load) for load in loads],
    )


@router.get("/loads", response_model=LoadListResponse)
async def list_loads(
    status: Optional[LoadStatusEnum] = None,
    engine: LoadConsolidationEngine = Depends(get_consolidation_engine),
):
    """List loads, newest first, optionally filtered by status."""
    if status:
        loads = await engine.load_repository.find_by_status(LoadStatus(status.value))
    else:
        loads = await engine.load_repository.find_all()

    return LoadListResponse(loads=[LoadResponse.model_validate(load) for load in loads])


@router.get("/loads/{load_id}", response_model=LoadDetailResponse)
async def get_load(
    load_id: str,
    engine: LoadConsolidationEngine = Depends(get_consolidation_engine),
):
    load = await engine.load_repository.find_by_id(load_id)
    if load is None:
        raise HTTPException(status_code=404, detail=f"Load {load_id} not found")

    return LoadDetailResponse(load=LoadResponse.model_validate(load))


@router.post("/loads/{load_id}/orders", response_model=LoadMutationResponse)
async def add_order_to_load(
    load_id: str,
    request: OrderReferenceRequest,
    engine: LoadConsolidationEngine = Depends(get_consolidation_engine),
):
    """Add an order to an existing load if capacity and time windows allow."""
    result = await engine.try_add_order_to_load(load_id, request.order_id)
    if not result.ok:
        _raise_for_rejection(result)

    return LoadMutationResponse(
        message="Order added to load successfully",
        load=LoadResponse.model_validate(result.load),
    )


@router.delete("/loads/{load_id}/orders/{order_id}", response_model=LoadMutationResponse)
async def remove_order_from_load(
    load_id: str,
    order_id: str,
    engine: LoadConsolidationEngine = Depends(get_consolidation_engine),
):
    """Remove an order from a load and return it to pending."""
    result = await engine.try_remove_order_from_load(load_id, order_id)
    if not result.ok:
        _raise_for_rejection(result)

    return LoadMutationResponse(
        message="Order removed from load successfully",
        load=LoadResponse.model_validate(result.load),
    )


@router.get("/loads/{load_id}/conflicts", response_model=ConflictsResponse)
async def detect_delivery_conflicts(
    load_id: str,
    engine: LoadConsolidationEngine = Depends(get_consolidation_engine),
):
    conflicts = await engine.detect_delivery_conflicts(load_id)
    return ConflictsResponse(
        load_id=load_id,
        conflicts=conflicts,
        has_conflicts=bool(conflicts),
    )


@router.post("/loads/{load_id}/check-compatibility", response_model=CompatibilityResponse)
async def check_order_compatibility(
    load_id: str,
    request: OrderReferenceRequest,
    engine: LoadConsolidationEngine = Depends(get_consolidation_engine),
):
    """Check whether an order could be added to a load, without changing anything."""
    load = await engine.load_repository.find_by_id(load_id)
    order = await engine.order_repository.find_by_id(request.order_id)

    if load is None:
        raise HTTPException(status_code=404, detail="Load not found")
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")

    fit = await engine.check_order_fit(load, order)
    is_compatible = fit == ConsolidationStatus.OK

    return CompatibilityResponse(
        load_id=load_id,
        order_id=request.order_id,
        is_compatible=is_compatible,
        message=(
            "Order is compatible with load"
            if is_compatible
            else f"Order is not compatible with load: {REJECTION_MESSAGES[fit]}"
        ),
    )
