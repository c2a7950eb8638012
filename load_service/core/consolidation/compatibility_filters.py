"""Time-window compatibility for consolidation.

The threshold is a *required minimum* shared delivery window: two windowed
orders are compatible only when they overlap by at least
``min_overlap_minutes``. Orders without a window never constrain grouping.
"""

from typing import Iterable
import logging

from ..models.domain import Order, TimeWindow

logger = logging.getLogger(__name__)


def overlap_minutes(window1: TimeWindow, window2: TimeWindow) -> float:
    """Calculate the overlap between two time windows in minutes.

    Returns 0 when the windows do not intersect (including inverted windows).
    """
    overlap_start = max(window1.start_time, window2.start_time)
    overlap_end = min(window1.end_time, window2.end_time)

    if overlap_end < overlap_start:
        return 0

    return (overlap_end - overlap_start).total_seconds() / 60


def is_compatible(
    existing_orders: Iterable[Order],
    candidate: Order,
    min_overlap_minutes: float,
) -> bool:
    """Check if a candidate order's window fits every windowed order in a group.

    Args:
        existing_orders: Orders already in the group
        candidate: Order to be added
        min_overlap_minutes: Minimum shared window required, in minutes

    Returns:
        False as soon as one existing window overlaps the candidate's by
        less than the threshold, True otherwise
    """
    if candidate.time_window is None:
        return True

    for existing in existing_orders:
        if existing.time_window is None:
            continue

        overlap = overlap_minutes(existing.time_window, candidate.time_window)
        if overlap < min_overlap_minutes:
            logger.debug(
                f"Order {candidate.order_id} incompatible with {existing.order_id}: "
                f"{overlap:.0f} min overlap < {min_overlap_minutes} required"
            )
            return False

    return True
