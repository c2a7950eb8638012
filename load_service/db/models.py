"""ORM Models for Database Persistence.

SQLAlchemy ORM models mapping to domain models:
- OrderModel: Delivery orders (address and packages stored as JSON)
- LoadModel: Consolidated loads (member order ids stored as a JSON array)
"""

from datetime import datetime

from sqlalchemy import (
    Column,
    String,
    Integer,
    Float,
    DateTime,
    Text,
    Enum as SQLEnum,
    Index,
    JSON,
)

from .database import Base
from ..core.models.domain import LoadStatus, OrderStatus


# ===========================
# Order
# ===========================

class OrderModel(Base):
    """Order model for delivery requests."""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(50), unique=True, nullable=False, index=True)
    customer_id = Column(String(50), nullable=False, index=True)
    customer_name = Column(String(255), nullable=False)

    # {street, city, state, zip_code, coordinates: {latitude, longitude}}
    delivery_address = Column(JSON, nullable=False)
    # Denormalized coordinates for area queries
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)

    # [{package_id, description, weight, dimensions: {length, width, height}, fragile}]
    package_details = Column(JSON, nullable=False)

    # Delivery window (optional)
    time_window_start = Column(DateTime, nullable=True)
    time_window_end = Column(DateTime, nullable=True)

    special_instructions = Column(Text, nullable=True)

    # Status
    status = Column(SQLEnum(OrderStatus), nullable=False, default=OrderStatus.PENDING, index=True)

    # Metadata
    created_at = Column(DateTime, nullable=False, default=datetime.now, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (
        Index("idx_orders_status_created", "status", "created_at"),
        Index("idx_orders_coordinates", "latitude", "longitude"),
    )


# ===========================
# Load
# ===========================

class LoadModel(Base):
    """Load model for consolidated order groups."""

    __tablename__ = "loads"

    id = Column(Integer, primary_key=True, autoincrement=True)
    load_id = Column(String(50), unique=True, nullable=False, index=True)

    # Orders in load (stored as JSON array, insertion order preserved)
    order_ids = Column(JSON, nullable=False)  # ["ORD_001", "ORD_002"]

    total_weight = Column(Float, nullable=False, default=0.0)  # kg
    total_volume = Column(Float, nullable=False, default=0.0)  # m³

    status = Column(SQLEnum(LoadStatus), nullable=False, default=LoadStatus.PENDING, index=True)
    vehicle_id = Column(String(50), nullable=True, index=True)

    # Metadata
    created_at = Column(DateTime, nullable=False, default=datetime.now, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (
        Index("idx_loads_status_created", "status", "created_at"),
    )
