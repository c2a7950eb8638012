"""In-memory order and load stores.

Used by tests and local tooling. Entities are copied on the way in and out so
callers cannot mutate stored state behind the store's back.
"""

from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from ..core.models.domain import Coordinates, Load, LoadStatus, Order, OrderStatus
from ..utils.geo import is_within_radius
from .base import (
    DEFAULT_AREA_LIMIT,
    UPDATABLE_LOAD_FIELDS,
    LoadRepository,
    OrderRepository,
    generate_load_id,
)


def _copy_order(order: Order) -> Order:
    return replace(order, packages=list(order.packages))


def _copy_load(load: Load) -> Load:
    return replace(load, order_ids=list(load.order_ids))


class InMemoryOrderRepository(OrderRepository):
    """Order source backed by a dict keyed by order id."""

    def __init__(self, orders: Optional[Iterable[Order]] = None):
        self.orders: Dict[str, Order] = {}
        for order in orders or []:
            self.orders[order.order_id] = _copy_order(order)

    async def find_pending_orders_in_area(
        self,
        latitude: float,
        longitude: float,
        radius_km: float,
        limit: int = DEFAULT_AREA_LIMIT,
    ) -> List[Order]:
        center = Coordinates(latitude=latitude, longitude=longitude)
        matches = [
            order for order in self.orders.values()
            if order.status == OrderStatus.PENDING
            and is_within_radius(center, order.delivery_address.coordinates, radius_km)
        ]
        matches.sort(key=lambda o: o.created_at)
        return [_copy_order(o) for o in matches[:limit]]

    async def find_by_id(self, order_id: str) -> Optional[Order]:
        order = self.orders.get(order_id)
        return _copy_order(order) if order else None

    async def update_status(self, order_id: str, status: OrderStatus) -> Optional[Order]:
        order = self.orders.get(order_id)
        if order is None:
            return None

        order.status = status
        order.updated_at = datetime.now()
        return _copy_order(order)

    async def add(self, order: Order) -> Order:
        self.orders[order.order_id] = _copy_order(order)
        return _copy_order(order)


class InMemoryLoadRepository(LoadRepository):
    """Load store backed by a dict keyed by load id."""

    def __init__(self):
        self.loads: Dict[str, Load] = {}

    async def create(
        self,
        order_ids: List[str],
        total_weight: float,
        total_volume: float,
        status: LoadStatus = LoadStatus.PENDING,
    ) -> Load:
        load = Load(
            load_id=generate_load_id(),
            order_ids=list(order_ids),
            total_weight=total_weight,
            total_volume=total_volume,
            status=status,
        )
        self.loads[load.load_id] = load
        return _copy_load(load)

    async def find_by_id(self, load_id: str) -> Optional[Load]:
        load = self.loads.get(load_id)
        return _copy_load(load) if load else None

    async def update(self, load_id: str, **changes) -> Optional[Load]:
        unknown = set(changes) - UPDATABLE_LOAD_FIELDS
        if unknown:
            raise ValueError(f"Cannot update load fields: {sorted(unknown)}")

        load = self.loads.get(load_id)
        if load is None:
            return None

        if "order_ids" in changes:
            changes["order_ids"] = list(changes["order_ids"])
        updated = replace(load, updated_at=datetime.now(), **changes)
        self.loads[load_id] = updated
        return _copy_load(updated)

    async def find_all(self) -> List[Load]:
        loads = sorted(self.loads.values(), key=lambda l: l.created_at, reverse=True)
        return [_copy_load(l) for l in loads]

    async def find_by_status(self, status: LoadStatus) -> List[Load]:
        return [l for l in await self.find_all() if l.status == status]
