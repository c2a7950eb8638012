"""Time-window overlap and compatibility."""

from load_service.core.consolidation import is_compatible, overlap_minutes

from builders import make_order, window


def test_overlap_of_intersecting_windows():
    assert overlap_minutes(window("08:00", "10:00"), window("09:00", "11:00")) == 60


def test_overlap_of_nested_windows():
    assert overlap_minutes(window("08:00", "18:00"), window("12:00", "12:30")) == 30


def test_disjoint_windows_have_zero_overlap():
    assert overlap_minutes(window("08:00", "10:00"), window("18:00", "20:00")) == 0


def test_touching_windows_have_zero_overlap():
    assert overlap_minutes(window("08:00", "10:00"), window("10:00", "12:00")) == 0


def test_inverted_window_has_zero_overlap():
    assert overlap_minutes(window("10:00", "08:00"), window("07:00", "12:00")) == 0


def test_candidate_without_window_is_always_compatible():
    existing = [make_order("A", time_window=window("08:00", "09:00"))]
    candidate = make_order("B")
    assert is_compatible(existing, candidate, 1000)


def test_existing_orders_without_window_do_not_constrain():
    existing = [make_order("A"), make_order("B")]
    candidate = make_order("C", time_window=window("08:00", "09:00"))
    assert is_compatible(existing, candidate, 120)


def test_overlap_below_threshold_is_incompatible():
    existing = [
        make_order("A", time_window=window("08:00", "12:00")),
        make_order("B", time_window=window("10:00", "11:00")),
    ]
    candidate = make_order("C", time_window=window("09:00", "12:00"))
    # 180 min with A but only 60 min with B
    assert not is_compatible(existing, candidate, 90)
    assert is_compatible(existing, candidate, 60)


def test_threshold_is_strictly_less_than():
    existing = [make_order("A", time_window=window("08:00", "10:00"))]
    candidate = make_order("B", time_window=window("09:00", "11:00"))
    assert is_compatible(existing, candidate, 60)
    assert not is_compatible(existing, candidate, 61)


def test_zero_threshold_accepts_disjoint_windows():
    existing = [make_order("A", time_window=window("08:00", "10:00"))]
    candidate = make_order("B", time_window=window("18:00", "20:00"))
    assert is_compatible(existing, candidate, 0)


def test_empty_group_is_compatible():
    assert is_compatible([], make_order("A", time_window=window("08:00", "09:00")), 120)
