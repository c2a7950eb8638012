"""Conflict Detector.

Audits the orders of a load and reports:
- pairs of orders whose delivery windows overlap less than required
- orders carrying special instructions (one summary line)
- fragile packages (one summary line)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
import logging

from ..models.domain import Order
from ...db.base import LoadRepository, OrderRepository
from .compatibility_filters import overlap_minutes

logger = logging.getLogger(__name__)


class ConflictKind(str, Enum):
    TIME_WINDOW = "time_window"
    SPECIAL_INSTRUCTIONS = "special_instructions"
    FRAGILE_ITEMS = "fragile_items"


@dataclass
class DeliveryConflict:
    """Single conflict finding for a load."""

    kind: ConflictKind
    description: str
    order_ids: List[str] = field(default_factory=list)
    count: int = 0
    overlap_minutes: Optional[float] = None


def _format_minutes(minutes: float):
    return int(minutes) if float(minutes).is_integer() else minutes


def find_time_window_conflicts(
    orders: List[Order], min_overlap_minutes: float
) -> List[DeliveryConflict]:
    conflicts = []
    for i in range(len(orders)):
        for j in range(i + 1, len(orders)):
            order1, order2 = orders[i], orders[j]
            if order1.time_window is None or order2.time_window is None:
                continue

            overlap = overlap_minutes(order1.time_window, order2.time_window)
            if overlap < min_overlap_minutes:
                conflicts.append(DeliveryConflict(
                    kind=ConflictKind.TIME_WINDOW,
                    description=(
                        f"Time window conflict between orders {order1.order_id} and "
                        f"{order2.order_id}: insufficient overlap "
                        f"({_format_minutes(overlap)} minutes)"
                    ),
                    order_ids=[order1.order_id, order2.order_id],
                    overlap_minutes=overlap,
                ))
    return conflicts


def find_special_instruction_conflict(orders: List[Order]) -> Optional[DeliveryConflict]:
    flagged = [o.order_id for o in orders if o.special_instructions]
    if not flagged:
        return None

    return DeliveryConflict(
        kind=ConflictKind.SPECIAL_INSTRUCTIONS,
        description=(
            f"Load contains {len(flagged)} orders with special instructions "
            f"that may require attention"
        ),
        order_ids=flagged,
        count=len(flagged),
    )


def find_fragile_conflict(orders: List[Order]) -> Optional[DeliveryConflict]:
    fragile_count = sum(o.fragile_package_count for o in orders)
    if fragile_count == 0:
        return None

    return DeliveryConflict(
        kind=ConflictKind.FRAGILE_ITEMS,
        description=f"Load contains {fragile_count} fragile items that require careful handling",
        order_ids=[o.order_id for o in orders if o.fragile_package_count],
        count=fragile_count,
    )


class ConflictDetector:
    """Inspects a persisted load's members for delivery conflicts."""

    def __init__(
        self,
        order_repository: OrderRepository,
        load_repository: LoadRepository,
    ):
        self.order_repository = order_repository
        self.load_repository = load_repository

    async def inspect_load(
        self, load_id: str, min_overlap_minutes: float
    ) -> List[DeliveryConflict]:
        """Return conflict findings; empty when the load does not exist."""
        load = await self.load_repository.find_by_id(load_id)
        if load is None:
            logger.debug(f"Load {load_id} not found, no conflicts to report")
            return []

        orders = []
        for order_id in load.order_ids:
            order = await self.order_repository.find_by_id(order_id)
            if order is not None:
                orders.append(order)

        conflicts = find_time_window_conflicts(orders, min_overlap_minutes)
        for finding in (
            find_special_instruction_conflict(orders),
            find_fragile_conflict(orders),
        ):
            if finding is not None:
                conflicts.append(finding)

        if conflicts:
            logger.info(f"Load {load_id}: {len(conflicts)} delivery conflict(s)")
        return conflicts

    async def detect_conflicts(self, load_id: str, min_overlap_minutes: float) -> List[str]:
        return [c.description for c in await self.inspect_load(load_id, min_overlap_minutes)]
