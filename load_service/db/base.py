"""Store interfaces consumed by the consolidation engine.

Implementations:
- ``load_service.db.repositories``: async SQLAlchemy (PostgreSQL / SQLite)
- ``load_service.db.memory``: in-process dictionaries (tests, tooling)

Not-found conditions are signalled by returning None, never by raising.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
import uuid

from ..core.models.domain import Load, LoadStatus, Order, OrderStatus

DEFAULT_AREA_LIMIT = 100

# Load fields a store may change after creation
UPDATABLE_LOAD_FIELDS = frozenset(
    {"order_ids", "total_weight", "total_volume", "status", "vehicle_id"}
)


def generate_load_id() -> str:
    return f"LOAD_{uuid.uuid4().hex[:8].upper()}"


class OrderRepository(ABC):
    """Order source."""

    @abstractmethod
    async def find_pending_orders_in_area(
        self,
        latitude: float,
        longitude: float,
        radius_km: float,
        limit: int = DEFAULT_AREA_LIMIT,
    ) -> List[Order]:
        """Pending orders within ``radius_km`` of a point, oldest first."""

    @abstractmethod
    async def find_by_id(self, order_id: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def update_status(self, order_id: str, status: OrderStatus) -> Optional[Order]:
        pass

    @abstractmethod
    async def add(self, order: Order) -> Order:
        pass


class LoadRepository(ABC):
    """Load store."""

    @abstractmethod
    async def create(
        self,
        order_ids: List[str],
        total_weight: float,
        total_volume: float,
        status: LoadStatus = LoadStatus.PENDING,
    ) -> Load:
        """Persist a new load and return it with its assigned identity."""

    @abstractmethod
    async def find_by_id(self, load_id: str) -> Optional[Load]:
        pass

    @abstractmethod
    async def update(self, load_id: str, **changes) -> Optional[Load]:
        """Apply field changes (``order_ids``, ``total_weight``, ...) to a load.

        Raises:
            ValueError: a change names a field outside ``UPDATABLE_LOAD_FIELDS``
        """

    @abstractmethod
    async def find_all(self) -> List[Load]:
        pass

    @abstractmethod
    async def find_by_status(self, status: LoadStatus) -> List[Load]:
        pass
