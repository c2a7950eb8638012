"""Load Mutator - add and remove orders on persisted loads.

The load update and the order status update are separate store writes; a
failure between them leaves the two out of step.
"""

from typing import List
import logging

from ..models.domain import Load, Order, OrderStatus
from ...db.base import LoadRepository, OrderRepository
from .compatibility_filters import is_compatible
from .options import GroupingOptions
from .package_metrics import order_volume, order_weight
from .results import ConsolidationStatus, MutationResult

logger = logging.getLogger(__name__)


class LoadMutator:
    """Adjusts load membership while keeping load totals in step."""

    def __init__(
        self,
        order_repository: OrderRepository,
        load_repository: LoadRepository,
    ):
        self.order_repository = order_repository
        self.load_repository = load_repository

    async def resolve_orders(self, order_ids: List[str]) -> List[Order]:
        """Fetch orders one by one, skipping any that no longer resolve."""
        orders = []
        for order_id in order_ids:
            order = await self.order_repository.find_by_id(order_id)
            if order is not None:
                orders.append(order)
        return orders

    async def check_order_fit(
        self, load: Load, order: Order, options: GroupingOptions
    ) -> ConsolidationStatus:
        """Check capacity first, then time windows against current members."""
        weight = order_weight(order)
        volume = order_volume(order)

        if (
            load.total_weight + weight > options.max_weight_kg
            or load.total_volume + volume > options.max_volume_m3
        ):
            return ConsolidationStatus.CAPACITY_EXCEEDED

        members = await self.resolve_orders(load.order_ids)
        if not is_compatible(members, order, options.max_time_window_overlap_minutes):
            return ConsolidationStatus.TIME_WINDOW_CONFLICT

        return ConsolidationStatus.OK

    async def add_order(
        self, load_id: str, order_id: str, options: GroupingOptions
    ) -> MutationResult:
        load = await self.load_repository.find_by_id(load_id)
        order = await self.order_repository.find_by_id(order_id)

        if load is None:
            return MutationResult(ConsolidationStatus.LOAD_NOT_FOUND)
        if order is None:
            return MutationResult(ConsolidationStatus.ORDER_NOT_FOUND)
        if load.contains_order(order_id):
            return MutationResult(ConsolidationStatus.ORDER_ALREADY_IN_LOAD)

        status = await self.check_order_fit(load, order, options)
        if status != ConsolidationStatus.OK:
            logger.info(f"Order {order_id} rejected for load {load_id}: {status.value}")
            return MutationResult(status)

        updated = await self.load_repository.update(
            load_id,
            order_ids=[*load.order_ids, order_id],
            total_weight=load.total_weight + order_weight(order),
            total_volume=load.total_volume + order_volume(order),
        )
        if updated is None:
            return MutationResult(ConsolidationStatus.LOAD_NOT_FOUND)

        await self.order_repository.update_status(order_id, OrderStatus.CONSOLIDATED)

        logger.info(f"Added order {order_id} to load {load_id}")
        return MutationResult(ConsolidationStatus.OK, updated)

    async def remove_order(self, load_id: str, order_id: str) -> MutationResult:
        load = await self.load_repository.find_by_id(load_id)
        order = await self.order_repository.find_by_id(order_id)

        if load is None:
            return MutationResult(ConsolidationStatus.LOAD_NOT_FOUND)
        if order is None:
            return MutationResult(ConsolidationStatus.ORDER_NOT_FOUND)
        if not load.contains_order(order_id):
            return MutationResult(ConsolidationStatus.ORDER_NOT_IN_LOAD)

        # Floor at zero in case earlier state drifted
        updated = await self.load_repository.update(
            load_id,
            order_ids=[oid for oid in load.order_ids if oid != order_id],
            total_weight=max(0.0, load.total_weight - order_weight(order)),
            total_volume=max(0.0, load.total_volume - order_volume(order)),
        )
        if updated is None:
            return MutationResult(ConsolidationStatus.LOAD_NOT_FOUND)

        await self.order_repository.update_status(order_id, OrderStatus.PENDING)

        logger.info(f"Removed order {order_id} from load {load_id}")
        return MutationResult(ConsolidationStatus.OK, updated)
