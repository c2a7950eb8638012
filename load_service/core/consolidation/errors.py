"""Consolidation exceptions."""

from typing import List, Sequence

from ..models.domain import Load


class ConsolidationError(Exception):
    """Base class for consolidation failures."""


class LoadFinalizationError(ConsolidationError):
    """A store call failed while persisting a load or flipping member statuses.

    Loads in ``committed_loads`` were fully finalized before the failure. The
    orders in ``pending_order_ids`` belong to the load in flight and may be
    left in a mixed pending/consolidated state.
    """

    def __init__(
        self,
        message: str,
        committed_loads: Sequence[Load] = (),
        pending_order_ids: Sequence[str] = (),
    ):
        super().__init__(message)
        self.committed_loads: List[Load] = list(committed_loads)
        self.pending_order_ids: List[str] = list(pending_order_ids)
