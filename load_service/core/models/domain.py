"""Domain models for the Load Consolidation Service."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from enum import Enum


class OrderStatus(str, Enum):
    """Order lifecycle statuses."""

    PENDING = "pending"
    CONSOLIDATED = "consolidated"
    ASSIGNED = "assigned"
    ROUTED = "routed"
    DISPATCHED = "dispatched"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    FAILED = "failed"
    CANCELLED = "cancelled"


class LoadStatus(str, Enum):
    """Load lifecycle statuses."""

    PENDING = "pending"
    CONSOLIDATED = "consolidated"
    ASSIGNED = "assigned"
    DISPATCHED = "dispatched"
    COMPLETED = "completed"


@dataclass
class Coordinates:
    """Geographic point."""

    latitude: float
    longitude: float


@dataclass
class Address:
    """Delivery address with geocoordinates."""

    street: str
    city: str
    coordinates: Coordinates
    state: str = ""
    zip_code: str = ""


@dataclass(frozen=True)
class Dimensions:
    """Package dimensions in centimeters."""

    length: float
    width: float
    height: float


@dataclass(frozen=True)
class Package:
    """Single package belonging to an order."""

    package_id: str
    description: str
    weight: float  # kg
    dimensions: Dimensions
    fragile: bool = False


@dataclass
class TimeWindow:
    """Delivery time window."""

    start_time: datetime
    end_time: datetime


@dataclass
class Order:
    """Delivery order with packages and an optional delivery window."""

    order_id: str
    customer_id: str
    customer_name: str
    delivery_address: Address

    packages: List[Package] = field(default_factory=list)
    time_window: Optional[TimeWindow] = None
    special_instructions: Optional[str] = None

    status: OrderStatus = OrderStatus.PENDING

    # Metadata
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def fragile_package_count(self) -> int:
        return sum(1 for pkg in self.packages if pkg.fragile)


@dataclass
class Load:
    """Group of orders travelling together, bounded by weight/volume capacity."""

    load_id: str
    order_ids: List[str] = field(default_factory=list)
    total_weight: float = 0.0  # kg
    total_volume: float = 0.0  # m³
    status: LoadStatus = LoadStatus.PENDING
    vehicle_id: Optional[str] = None  # assigned by the vehicle service

    # Metadata
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def contains_order(self, order_id: str) -> bool:
        return order_id in self.order_ids
