"""Delivery conflict audit of persisted loads."""

import asyncio

import pytest

from load_service.core.consolidation import (
    ConflictKind,
    GroupingOptions,
    LoadConsolidationEngine,
)
from load_service.core.consolidation.conflict_detector import (
    find_fragile_conflict,
    find_special_instruction_conflict,
    find_time_window_conflicts,
)
from load_service.core.models.domain import LoadStatus

from builders import make_order, package, window


def run(coro):
    return asyncio.run(coro)


def store_load(order_repository, load_repository, orders):
    for order in orders:
        run(order_repository.add(order))
    return run(load_repository.create(
        [o.order_id for o in orders], 0, 0, LoadStatus.CONSOLIDATED
    ))


@pytest.fixture
def strict_engine(order_repository, load_repository):
    """Engine requiring two hours of shared delivery window."""
    return LoadConsolidationEngine(
        order_repository,
        load_repository,
        GroupingOptions(max_time_window_overlap_minutes=120),
    )


def test_fragile_and_special_instruction_summaries(engine, order_repository, load_repository):
    load = store_load(order_repository, load_repository, [
        make_order("ORD_1", packages=[package("P1", 2, fragile=True)]),
        make_order("ORD_2", special_instructions="Leave at back door"),
    ])

    conflicts = run(engine.detect_delivery_conflicts(load.load_id))

    assert conflicts == [
        "Load contains 1 orders with special instructions that may require attention",
        "Load contains 1 fragile items that require careful handling",
    ]


def test_insufficient_overlap_is_reported_per_pair(strict_engine, order_repository, load_repository):
    load = store_load(order_repository, load_repository, [
        make_order("ORD_1", time_window=window("08:00", "10:00")),
        make_order("ORD_2", time_window=window("09:00", "10:30")),
    ])

    conflicts = run(strict_engine.detect_delivery_conflicts(load.load_id))

    assert conflicts == [
        "Time window conflict between orders ORD_1 and ORD_2: insufficient overlap (60 minutes)"
    ]


def test_fractional_overlap_keeps_its_fraction():
    orders = [
        make_order("ORD_1", time_window=window("08:00", "10:00")),
        make_order("ORD_2", time_window=window("09:00", "09:00")),
    ]
    orders[1].time_window.end_time = orders[1].time_window.end_time.replace(second=30)

    [conflict] = find_time_window_conflicts(orders, 60)

    assert conflict.overlap_minutes == 0.5
    assert "(0.5 minutes)" in conflict.description


def test_missing_load_has_no_conflicts(engine):
    assert run(engine.detect_delivery_conflicts("LOAD_MISSING")) == []


def test_clean_load_has_no_conflicts(engine, order_repository, load_repository):
    load = store_load(order_repository, load_repository, [
        make_order("ORD_1", time_window=window("08:00", "12:00")),
        make_order("ORD_2", time_window=window("09:00", "12:00")),
        make_order("ORD_3"),
    ])

    assert run(engine.detect_delivery_conflicts(load.load_id)) == []


def test_detection_is_repeatable(strict_engine, order_repository, load_repository):
    load = store_load(order_repository, load_repository, [
        make_order("ORD_1", time_window=window("08:00", "10:00"), special_instructions="Ring twice"),
        make_order("ORD_2", time_window=window("09:00", "10:30")),
    ])

    first = run(strict_engine.detect_delivery_conflicts(load.load_id))
    second = run(strict_engine.detect_delivery_conflicts(load.load_id))

    assert first == second
    assert len(first) == 2


def test_unresolvable_members_are_skipped(engine, order_repository, load_repository):
    run(order_repository.add(make_order("ORD_1", special_instructions="Call ahead")))
    load = run(load_repository.create(["ORD_1", "ORD_GONE"], 0, 0, LoadStatus.CONSOLIDATED))

    assert run(engine.detect_delivery_conflicts(load.load_id)) == [
        "Load contains 1 orders with special instructions that may require attention"
    ]


def test_inspect_returns_structured_findings(strict_engine, order_repository, load_repository):
    load = store_load(order_repository, load_repository, [
        make_order("ORD_1", time_window=window("08:00", "10:00"),
                   packages=[package("P1", 1, fragile=True), package("P2", 1, fragile=True)]),
        make_order("ORD_2", time_window=window("09:00", "10:30")),
    ])

    findings = run(strict_engine.inspect_delivery_conflicts(load.load_id))

    assert [f.kind for f in findings] == [ConflictKind.TIME_WINDOW, ConflictKind.FRAGILE_ITEMS]
    assert findings[0].order_ids == ["ORD_1", "ORD_2"]
    assert findings[0].overlap_minutes == 60
    assert findings[1].count == 2
    assert findings[1].order_ids == ["ORD_1"]


def test_blank_special_instructions_are_ignored():
    orders = [make_order("ORD_1", special_instructions=""), make_order("ORD_2")]
    assert find_special_instruction_conflict(orders) is None


def test_fragile_count_spans_orders():
    orders = [
        make_order("ORD_1", packages=[package("P1", 1, fragile=True)]),
        make_order("ORD_2", packages=[package("P2", 1, fragile=True), package("P3", 1)]),
    ]

    finding = find_fragile_conflict(orders)

    assert finding.count == 2
    assert finding.description == "Load contains 2 fragile items that require careful handling"
