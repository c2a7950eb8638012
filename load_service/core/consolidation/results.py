"""Typed outcomes for load mutations."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models.domain import Load


class ConsolidationStatus(str, Enum):
    """Why a mutation or fit check succeeded or failed."""

    OK = "ok"
    LOAD_NOT_FOUND = "load_not_found"
    ORDER_NOT_FOUND = "order_not_found"
    ORDER_NOT_IN_LOAD = "order_not_in_load"
    ORDER_ALREADY_IN_LOAD = "order_already_in_load"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    TIME_WINDOW_CONFLICT = "time_window_conflict"

    @property
    def is_not_found(self) -> bool:
        return self in (
            ConsolidationStatus.LOAD_NOT_FOUND,
            ConsolidationStatus.ORDER_NOT_FOUND,
        )


@dataclass
class MutationResult:
    """Result of adding or removing an order."""

    status: ConsolidationStatus
    load: Optional[Load] = None

    @property
    def ok(self) -> bool:
        return self.status == ConsolidationStatus.OK
