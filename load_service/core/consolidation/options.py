"""Grouping options with call-site overrides."""

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional, Union


@dataclass(frozen=True)
class GroupingOptions:
    """Capacity, proximity and time-window limits for consolidation."""

    max_distance_km: float = 10
    max_weight_kg: float = 1000
    max_volume_m3: float = 10
    # Minimum shared delivery window (minutes) between orders of one load
    max_time_window_overlap_minutes: float = 120

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{f.name} must be a number, got {value!r}")
            if value < 0:
                raise ValueError(f"{f.name} must be >= 0, got {value}")

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


OptionOverrides = Union[GroupingOptions, Mapping[str, Any], None]

OPTION_NAMES = frozenset(f.name for f in fields(GroupingOptions))


def merge_options(
    defaults: GroupingOptions,
    overrides: OptionOverrides = None,
) -> GroupingOptions:
    """Merge call-site overrides onto defaults.

    A ``GroupingOptions`` override replaces the defaults entirely. In a
    mapping, ``None`` values are ignored and unknown keys are rejected.
    """
    if overrides is None:
        return defaults

    if isinstance(overrides, GroupingOptions):
        return overrides

    unknown = set(overrides) - OPTION_NAMES
    if unknown:
        raise ValueError(f"Unknown grouping options: {sorted(unknown)}")

    changes = {key: value for key, value in overrides.items() if value is not None}
    return replace(defaults, **changes) if changes else defaults


def options_from_mapping(values: Optional[Mapping[str, Any]]) -> GroupingOptions:
    """Build options from a config mapping, falling back to dataclass defaults."""
    return merge_options(GroupingOptions(), values or {})
