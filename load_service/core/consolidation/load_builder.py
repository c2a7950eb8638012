"""Load Builder.

Partitions a batch of candidate orders into loads:
1. Pack orders into draft groups (pure, no I/O) - ``LoadPacker``
2. Finalize each draft: persist the load, flip member orders to consolidated

The default ``GreedyLoadPacker`` is a single deterministic pass with no
backtracking. Another packer (e.g. first-fit-decreasing) can be plugged in
without touching callers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Sequence
import logging

from ..models.domain import Load, LoadStatus, Order, OrderStatus
from ...db.base import LoadRepository, OrderRepository
from .compatibility_filters import is_compatible
from .errors import LoadFinalizationError
from .options import GroupingOptions
from .package_metrics import order_volume, order_weight

logger = logging.getLogger(__name__)


@dataclass
class DraftLoad:
    """Packed group of orders not yet persisted."""

    orders: List[Order] = field(default_factory=list)
    total_weight: float = 0.0
    total_volume: float = 0.0

    @property
    def order_ids(self) -> List[str]:
        return [o.order_id for o in self.orders]

    def is_empty(self) -> bool:
        return not self.orders

    def add(self, order: Order, weight: float, volume: float) -> None:
        self.orders.append(order)
        self.total_weight += weight
        self.total_volume += volume

    def exceeds_capacity_with(
        self, weight: float, volume: float, options: GroupingOptions
    ) -> bool:
        return (
            self.total_weight + weight > options.max_weight_kg
            or self.total_volume + volume > options.max_volume_m3
        )


def sort_orders_by_time_window(orders: Sequence[Order]) -> List[Order]:
    """Sort by window start; orders without a window go last, in input order."""
    windowed = [o for o in orders if o.time_window is not None]
    unwindowed = [o for o in orders if o.time_window is None]
    return sorted(windowed, key=lambda o: o.time_window.start_time) + unwindowed


class LoadPacker(ABC):
    """Strategy that partitions orders into draft loads."""

    @abstractmethod
    def pack(self, orders: Sequence[Order], options: GroupingOptions) -> List[DraftLoad]:
        pass


class GreedyLoadPacker(LoadPacker):
    """Single-pass greedy packing in time-window order.

    Capacity is checked before time windows. An order that alone exceeds
    capacity still opens (and fills) its own load; orders are never split.
    """

    def pack(self, orders: Sequence[Order], options: GroupingOptions) -> List[DraftLoad]:
        drafts: List[DraftLoad] = []
        current = DraftLoad()

        for order in sort_orders_by_time_window(orders):
            weight = order_weight(order)
            volume = order_volume(order)

            if not current.is_empty() and current.exceeds_capacity_with(weight, volume, options):
                logger.debug(
                    f"Capacity reached at {current.total_weight:.1f}kg/"
                    f"{current.total_volume:.3f}m³, closing load before {order.order_id}"
                )
                drafts.append(current)
                current = DraftLoad()

            if not current.is_empty() and not is_compatible(
                current.orders, order, options.max_time_window_overlap_minutes
            ):
                logger.debug(f"Time window break before {order.order_id}, closing load")
                drafts.append(current)
                current = DraftLoad()

            if current.is_empty() and (
                weight > options.max_weight_kg or volume > options.max_volume_m3
            ):
                logger.warning(
                    f"Order {order.order_id} alone exceeds capacity "
                    f"({weight:.1f}kg, {volume:.3f}m³); placing it in its own load"
                )

            current.add(order, weight, volume)

        if not current.is_empty():
            drafts.append(current)

        return drafts


class LoadBuilder:
    """Packs candidate orders and persists the resulting loads."""

    def __init__(
        self,
        order_repository: OrderRepository,
        load_repository: LoadRepository,
        packer: LoadPacker = None,
    ):
        self.order_repository = order_repository
        self.load_repository = load_repository
        self.packer = packer or GreedyLoadPacker()

    async def build_loads(
        self, orders: Sequence[Order], options: GroupingOptions
    ) -> List[Load]:
        """Partition orders into loads and persist them in order.

        Raises:
            LoadFinalizationError: a store call failed; loads finalized before
                the failure stay committed and are attached to the error
        """
        drafts = self.packer.pack(orders, options)
        loads: List[Load] = []

        for draft in drafts:
            try:
                load = await self.finalize_load(draft)
            except Exception as e:
                logger.error(
                    f"Failed to finalize load with orders {draft.order_ids}: {e} "
                    f"({len(loads)} load(s) already committed)"
                )
                raise LoadFinalizationError(
                    f"Failed to finalize load with {len(draft.orders)} order(s): {e}",
                    committed_loads=loads,
                    pending_order_ids=draft.order_ids,
                ) from e
            loads.append(load)

        return loads

    async def finalize_load(self, draft: DraftLoad) -> Load:
        """Persist a draft as a consolidated load and mark its orders consolidated."""
        load = await self.load_repository.create(
            order_ids=draft.order_ids,
            total_weight=draft.total_weight,
            total_volume=draft.total_volume,
            status=LoadStatus.CONSOLIDATED,
        )

        for order in draft.orders:
            updated = await self.order_repository.update_status(
                order.order_id, OrderStatus.CONSOLIDATED
            )
            if updated is None:
                logger.warning(
                    f"Order {order.order_id} vanished while consolidating into {load.load_id}"
                )

        logger.info(
            f"Created load {load.load_id}: {len(draft.orders)} orders, "
            f"{draft.total_weight:.1f}kg, {draft.total_volume:.3f}m³"
        )
        return load
