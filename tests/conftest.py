"""Shared fixtures for consolidation tests."""

import pytest

from load_service.core.consolidation import GroupingOptions, LoadConsolidationEngine
from load_service.db.memory import InMemoryLoadRepository, InMemoryOrderRepository


@pytest.fixture
def order_repository():
    return InMemoryOrderRepository()


@pytest.fixture
def load_repository():
    return InMemoryLoadRepository()


@pytest.fixture
def small_truck():
    """50kg / 0.1m³ truck with a one-hour minimum shared window."""
    return GroupingOptions(
        max_distance_km=10,
        max_weight_kg=50,
        max_volume_m3=0.1,
        max_time_window_overlap_minutes=60,
    )


@pytest.fixture
def engine(order_repository, load_repository, small_truck):
    return LoadConsolidationEngine(order_repository, load_repository, small_truck)
