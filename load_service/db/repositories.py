"""SQLAlchemy-backed order and load stores.

Every call runs in its own session and commits before returning, so writes
issued by the engine are not grouped into a single transaction.
"""

from datetime import datetime
from typing import List, Optional
import math
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.models.domain import (
    Address,
    Coordinates,
    Dimensions,
    Load,
    LoadStatus,
    Order,
    OrderStatus,
    Package,
    TimeWindow,
)
from ..utils.geo import EARTH_RADIUS_KM, is_within_radius
from .base import (
    DEFAULT_AREA_LIMIT,
    UPDATABLE_LOAD_FIELDS,
    LoadRepository,
    OrderRepository,
    generate_load_id,
)
from .database import session_scope
from .models import LoadModel, OrderModel

logger = logging.getLogger(__name__)

KM_PER_DEGREE_LATITUDE = EARTH_RADIUS_KM * math.pi / 180


# ===========================
# Mapping helpers
# ===========================

def order_to_model(order: Order) -> OrderModel:
    address = order.delivery_address
    return OrderModel(
        order_id=order.order_id,
        customer_id=order.customer_id,
        customer_name=order.customer_name,
        delivery_address={
            "street": address.street,
            "city": address.city,
            "state": address.state,
            "zip_code": address.zip_code,
            "coordinates": {
                "latitude": address.coordinates.latitude,
                "longitude": address.coordinates.longitude,
            },
        },
        latitude=address.coordinates.latitude,
        longitude=address.coordinates.longitude,
        package_details=[
            {
                "package_id": pkg.package_id,
                "description": pkg.description,
                "weight": pkg.weight,
                "dimensions": {
                    "length": pkg.dimensions.length,
                    "width": pkg.dimensions.width,
                    "height": pkg.dimensions.height,
                },
                "fragile": pkg.fragile,
            }
            for pkg in order.packages
        ],
        time_window_start=order.time_window.start_time if order.time_window else None,
        time_window_end=order.time_window.end_time if order.time_window else None,
        special_instructions=order.special_instructions,
        status=order.status,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def model_to_order(model: OrderModel) -> Order:
    address = model.delivery_address or {}
    coordinates = address.get("coordinates") or {}
    return Order(
        order_id=model.order_id,
        customer_id=model.customer_id,
        customer_name=model.customer_name,
        delivery_address=Address(
            street=address.get("street", ""),
            city=address.get("city", ""),
            state=address.get("state", ""),
            zip_code=address.get("zip_code", ""),
            coordinates=Coordinates(
                latitude=coordinates.get("latitude", model.latitude),
                longitude=coordinates.get("longitude", model.longitude),
            ),
        ),
        packages=[
            Package(
                package_id=pkg["package_id"],
                description=pkg.get("description", ""),
                weight=float(pkg["weight"]),
                dimensions=Dimensions(**pkg["dimensions"]),
                fragile=bool(pkg.get("fragile", False)),
            )
            for pkg in model.package_details or []
        ],
        time_window=TimeWindow(
            start_time=model.time_window_start,
            end_time=model.time_window_end,
        ) if model.time_window_start and model.time_window_end else None,
        special_instructions=model.special_instructions,
        status=OrderStatus(model.status),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def model_to_load(model: LoadModel) -> Load:
    return Load(
        load_id=model.load_id,
        order_ids=list(model.order_ids or []),
        total_weight=float(model.total_weight),
        total_volume=float(model.total_volume),
        status=LoadStatus(model.status),
        vehicle_id=model.vehicle_id,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


# ===========================
# Repositories
# ===========================

class SQLAlchemyOrderRepository(OrderRepository):
    """Order source backed by the ``orders`` table."""

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        self.session_factory = session_factory

    async def find_pending_orders_in_area(
        self,
        latitude: float,
        longitude: float,
        radius_km: float,
        limit: int = DEFAULT_AREA_LIMIT,
    ) -> List[Order]:
        # Latitude band narrows the scan; exact distance is checked below
        lat_delta = radius_km / KM_PER_DEGREE_LATITUDE
        query = (
            select(OrderModel)
            .where(OrderModel.status == OrderStatus.PENDING)
            .where(OrderModel.latitude.between(latitude - lat_delta, latitude + lat_delta))
            .order_by(OrderModel.created_at.asc())
        )

        async with session_scope(self.session_factory) as session:
            result = await session.execute(query)
            models = result.scalars().all()

        center = Coordinates(latitude=latitude, longitude=longitude)
        orders = []
        for model in models:
            order = model_to_order(model)
            if is_within_radius(center, order.delivery_address.coordinates, radius_km):
                orders.append(order)
                if len(orders) >= limit:
                    break
        return orders

    async def find_by_id(self, order_id: str) -> Optional[Order]:
        async with session_scope(self.session_factory) as session:
            model = await self._get_model(session, order_id)
            return model_to_order(model) if model else None

    async def update_status(self, order_id: str, status: OrderStatus) -> Optional[Order]:
        async with session_scope(self.session_factory) as session:
            model = await self._get_model(session, order_id)
            if model is None:
                return None

            model.status = status
            model.updated_at = datetime.now()
            await session.flush()
            return model_to_order(model)

    async def add(self, order: Order) -> Order:
        async with session_scope(self.session_factory) as session:
            model = order_to_model(order)
            session.add(model)
            await session.flush()
            return model_to_order(model)

    @staticmethod
    async def _get_model(session: AsyncSession, order_id: str) -> Optional[OrderModel]:
        result = await session.execute(
            select(OrderModel).where(OrderModel.order_id == order_id)
        )
        return result.scalar_one_or_none()


class SQLAlchemyLoadRepository(LoadRepository):
    """Load store backed by the ``loads`` table."""

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        self.session_factory = session_factory

    async def create(
        self,
        order_ids: List[str],
        total_weight: float,
        total_volume: float,
        status: LoadStatus = LoadStatus.PENDING,
    ) -> Load:
        async with session_scope(self.session_factory) as session:
            model = LoadModel(
                load_id=generate_load_id(),
                order_ids=list(order_ids),
                total_weight=total_weight,
                total_volume=total_volume,
                status=status,
            )
            session.add(model)
            await session.flush()
            logger.debug(f"Persisted load {model.load_id} with {len(order_ids)} orders")
            return model_to_load(model)

    async def find_by_id(self, load_id: str) -> Optional[Load]:
        async with session_scope(self.session_factory) as session:
            model = await self._get_model(session, load_id)
            return model_to_load(model) if model else None

    async def update(self, load_id: str, **changes) -> Optional[Load]:
        unknown = set(changes) - UPDATABLE_LOAD_FIELDS
        if unknown:
            raise ValueError(f"Cannot update load fields: {sorted(unknown)}")

        async with session_scope(self.session_factory) as session:
            model = await self._get_model(session, load_id)
            if model is None:
                return None

            for name, value in changes.items():
                # JSON columns only track reassignment
                setattr(model, name, list(value) if name == "order_ids" else value)
            model.updated_at = datetime.now()
            await session.flush()
            return model_to_load(model)

    async def find_all(self) -> List[Load]:
        async with session_scope(self.session_factory) as session:
            result = await session.execute(
                select(LoadModel).order_by(LoadModel.created_at.desc())
            )
            return [model_to_load(m) for m in result.scalars().all()]

    async def find_by_status(self, status: LoadStatus) -> List[Load]:
        async with session_scope(self.session_factory) as session:
            result = await session.execute(
                select(LoadModel)
                .where(LoadModel.status == status)
                .order_by(LoadModel.created_at.desc())
            )
            return [model_to_load(m) for m in result.scalars().all()]

    @staticmethod
    async def _get_model(session: AsyncSession, load_id: str) -> Optional[LoadModel]:
        result = await session.execute(
            select(LoadModel).where(LoadModel.load_id == load_id)
        )
        return result.scalar_one_or_none()
