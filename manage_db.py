"""Database Management Script.

This script provides utilities for database operations:
- Initialize database
- Create tables
- Seed sample pending orders
- Reset database (development only)
- Run a consolidation pass

Usage:
    python manage_db.py init                 # Initialize database and create tables
    python manage_db.py seed                 # Seed sample pending orders around San Francisco
    python manage_db.py reset                # Reset database (WARNING: Destroys all data)
    python manage_db.py check                # Check database health
    python manage_db.py group LAT LON        # Group pending orders near LAT/LON into loads
"""

import asyncio
import sys
from datetime import datetime, timedelta

from load_service.core.consolidation import LoadConsolidationEngine
from load_service.core.models.domain import (
    Address,
    Coordinates,
    Dimensions,
    Order,
    Package,
    TimeWindow,
)
from load_service.db import database
from load_service.db.database import (
    init_database,
    close_database,
    create_tables,
    reset_database,
    check_database_health,
)
from load_service.db.repositories import SQLAlchemyLoadRepository, SQLAlchemyOrderRepository
from load_service.utils.config import get_default_grouping_options

SAMPLE_CENTER = Coordinates(latitude=37.7749, longitude=-122.4194)


def build_sample_orders() -> list:
    """Six pending orders: two morning, two afternoon, one evening, one unscheduled."""
    day = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=1)

    def window(start_hour: int, end_hour: int) -> TimeWindow:
        return TimeWindow(day + timedelta(hours=start_hour), day + timedelta(hours=end_hour))

    def box(package_id: str, weight: float, fragile: bool = False) -> Package:
        return Package(
            package_id=package_id,
            description=f"Box {package_id}",
            weight=weight,
            dimensions=Dimensions(length=50, width=40, height=30),
            fragile=fragile,
        )

    samples = [
        ("ORD_SEED_001", "Market St", 0.001, [box("PKG_001", 120)], window(8, 11), None),
        ("ORD_SEED_002", "Mission St", 0.002, [box("PKG_002", 300, fragile=True)], window(9, 12), None),
        ("ORD_SEED_003", "Howard St", -0.002, [box("PKG_003", 450)], window(13, 17), "Call on arrival"),
        ("ORD_SEED_004", "Folsom St", 0.003, [box("PKG_004", 600)], window(14, 18), None),
        ("ORD_SEED_005", "Harrison St", -0.001, [box("PKG_005", 80)], window(18, 20), None),
        ("ORD_SEED_006", "Bryant St", 0.0, [box("PKG_006", 40)], None, "Leave at reception"),
    ]

    orders = []
    for i, (order_id, street, offset, packages, time_window, instructions) in enumerate(samples):
        orders.append(Order(
            order_id=order_id,
            customer_id=f"CUST_{i + 1:03d}",
            customer_name=f"Customer {i + 1}",
            delivery_address=Address(
                street=f"{100 + i} {street}",
                city="San Francisco",
                state="CA",
                zip_code="94103",
                coordinates=Coordinates(
                    latitude=SAMPLE_CENTER.latitude + offset,
                    longitude=SAMPLE_CENTER.longitude - offset,
                ),
            ),
            packages=packages,
            time_window=time_window,
            special_instructions=instructions,
            created_at=datetime.now() + timedelta(seconds=i),
        ))
    return orders


async def init_db():
    """Initialize database and create all tables."""
    print("Initializing database...")
    await init_database()
    print("Creating tables...")
    await create_tables()
    print("[OK] Database initialized successfully!")
    await close_database()


async def seed_db():
    """Seed database with sample pending orders."""
    print("Seeding database with sample orders...")
    await init_database()

    repository = SQLAlchemyOrderRepository(database.get_session_factory())
    for order in build_sample_orders():
        if await repository.find_by_id(order.order_id):
            print(f"  [SKIP] {order.order_id} already exists")
            continue
        await repository.add(order)
        print(f"  [OK] Created {order.order_id}")

    print("[OK] Database seeded successfully!")
    await close_database()


async def reset_db():
    """Reset database (WARNING: Destroys all data)."""
    print("[WARNING] This will destroy ALL data in the database!")
    confirm = input("Type 'yes' to confirm: ")

    if confirm.lower() != "yes":
        print("Reset cancelled.")
        return

    print("Resetting database...")
    await init_database()
    await reset_database()
    print("[OK] Database reset successfully!")
    await close_database()


async def check_db():
    """Check database health."""
    print("Checking database health...")
    await init_database()

    health = await check_database_health()

    if health["status"] == "healthy":
        print("[OK] Database is healthy")
    else:
        print("[ERROR] Database is unhealthy")
        print(f"  Error: {health.get('error', 'Unknown error')}")

    await close_database()


async def group_orders(latitude: float, longitude: float):
    """Run one consolidation pass and print the resulting loads."""
    await init_database()

    session_factory = database.get_session_factory()
    engine = LoadConsolidationEngine(
        SQLAlchemyOrderRepository(session_factory),
        SQLAlchemyLoadRepository(session_factory),
        default_options=get_default_grouping_options(),
    )

    loads = await engine.group_orders_by_geographic_area(latitude, longitude)
    print(f"[OK] Created {len(loads)} load(s)")
    for load in loads:
        print(
            f"  {load.load_id}: {len(load.order_ids)} orders, "
            f"{load.total_weight:.1f}kg, {load.total_volume:.3f}m³"
        )
        for conflict in await engine.detect_delivery_conflicts(load.load_id):
            print(f"    ! {conflict}")

    await close_database()


async def main():
    """Main entry point."""
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    command = sys.argv[1].lower()

    try:
        if command == "init":
            await init_db()
        elif command == "seed":
            await seed_db()
        elif command == "reset":
            await reset_db()
        elif command == "check":
            await check_db()
        elif command == "group":
            if len(sys.argv) < 4:
                print("Usage: python manage_db.py group LAT LON")
                sys.exit(1)
            await group_orders(float(sys.argv[2]), float(sys.argv[3]))
        else:
            print(f"Unknown command: {command}")
            print(__doc__)
            sys.exit(1)
    except Exception as e:
        print(f"[ERROR] {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
