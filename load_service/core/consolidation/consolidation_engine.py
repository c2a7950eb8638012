"""Load Consolidation Engine.

Entry point for callers (HTTP layer, scripts):
1. Geographic grouping: pending orders near a point → consolidated loads
2. Membership changes on existing loads (add / remove order)
3. Conflict audit of a load

Not-found and constraint failures are reported as None / False / [] on the
plain operations. The ``try_*`` and ``check_*`` variants return the reason.
"""

from typing import List, Optional
import logging

from ..models.domain import Load, Order
from ...db.base import LoadRepository, OrderRepository
from .conflict_detector import ConflictDetector, DeliveryConflict
from .load_builder import LoadBuilder, LoadPacker
from .load_mutator import LoadMutator
from .options import GroupingOptions, OptionOverrides, merge_options
from .results import ConsolidationStatus, MutationResult

logger = logging.getLogger(__name__)


class LoadConsolidationEngine:
    """Groups pending orders into loads and maintains them.

    Holds no mutable state of its own besides the repositories; the default
    options are frozen at construction.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        load_repository: LoadRepository,
        default_options: Optional[GroupingOptions] = None,
        packer: Optional[LoadPacker] = None,
    ):
        """Initialize consolidation engine."""
        self.order_repository = order_repository
        self.load_repository = load_repository
        self.default_options = default_options or GroupingOptions()

        self.builder = LoadBuilder(order_repository, load_repository, packer)
        self.mutator = LoadMutator(order_repository, load_repository)
        self.conflict_detector = ConflictDetector(order_repository, load_repository)

        logger.info(f"Load consolidation engine initialized ({self.default_options})")

    def effective_options(self, overrides: OptionOverrides = None) -> GroupingOptions:
        return merge_options(self.default_options, overrides)

    async def group_orders_by_geographic_area(
        self,
        latitude: float,
        longitude: float,
        options: OptionOverrides = None,
    ) -> List[Load]:
        """Group pending orders around a point into consolidated loads.

        Args:
            latitude: Center latitude of the area
            longitude: Center longitude of the area
            options: Per-call overrides merged onto the defaults

        Returns:
            Loads created, in packing order (empty if no pending orders)

        Raises:
            LoadFinalizationError: persisting a load or an order status failed
        """
        grouping_options = self.effective_options(options)

        pending_orders = await self.order_repository.find_pending_orders_in_area(
            latitude, longitude, grouping_options.max_distance_km
        )
        logger.info(
            f"Found {len(pending_orders)} pending orders within "
            f"{grouping_options.max_distance_km}km of ({latitude}, {longitude})"
        )

        if not pending_orders:
            return []

        loads = await self.builder.build_loads(pending_orders, grouping_options)
        logger.info(f"Grouped {len(pending_orders)} orders into {len(loads)} load(s)")
        return loads

    async def check_order_fit(
        self, load: Load, order: Order, options: OptionOverrides = None
    ) -> ConsolidationStatus:
        return await self.mutator.check_order_fit(load, order, self.effective_options(options))

    async def can_add_order_to_load(
        self, load: Load, order: Order, options: OptionOverrides = None
    ) -> bool:
        """Check if a load can take an order within capacity and time windows."""
        return await self.check_order_fit(load, order, options) == ConsolidationStatus.OK

    async def try_add_order_to_load(self, load_id: str, order_id: str) -> MutationResult:
        return await self.mutator.add_order(load_id, order_id, self.default_options)

    async def add_order_to_load(self, load_id: str, order_id: str) -> Optional[Load]:
        """Add an order to a load; None if missing or constraints would break."""
        return (await self.try_add_order_to_load(load_id, order_id)).load

    async def try_remove_order_from_load(self, load_id: str, order_id: str) -> MutationResult:
        return await self.mutator.remove_order(load_id, order_id)

    async def remove_order_from_load(self, load_id: str, order_id: str) -> Optional[Load]:
        """Remove an order from a load; None if load, order or membership is missing."""
        return (await self.try_remove_order_from_load(load_id, order_id)).load

    async def inspect_delivery_conflicts(self, load_id: str) -> List[DeliveryConflict]:
        return await self.conflict_detector.inspect_load(
            load_id, self.default_options.max_time_window_overlap_minutes
        )

    async def detect_delivery_conflicts(self, load_id: str) -> List[str]:
        """Describe delivery conflicts in a load; empty if the load is missing."""
        return await self.conflict_detector.detect_conflicts(
            load_id, self.default_options.max_time_window_overlap_minutes
        )
