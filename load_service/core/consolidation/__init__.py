"""Load Consolidation Engine Package."""

from .package_metrics import total_weight, total_volume
from .compatibility_filters import overlap_minutes, is_compatible
from .options import GroupingOptions, merge_options
from .load_builder import DraftLoad, LoadBuilder, LoadPacker, GreedyLoadPacker
from .load_mutator import LoadMutator
from .conflict_detector import ConflictDetector, ConflictKind, DeliveryConflict
from .results import ConsolidationStatus, MutationResult
from .errors import ConsolidationError, LoadFinalizationError
from .consolidation_engine import LoadConsolidationEngine

__all__ = [
    # Package Metrics
    "total_weight",
    "total_volume",
    # Time-Window Compatibility
    "overlap_minutes",
    "is_compatible",
    # Options
    "GroupingOptions",
    "merge_options",
    # Load Builder
    "DraftLoad",
    "LoadBuilder",
    "LoadPacker",
    "GreedyLoadPacker",
    # Load Mutator
    "LoadMutator",
    # Conflict Detector
    "ConflictDetector",
    "ConflictKind",
    "DeliveryConflict",
    # Results & Errors
    "ConsolidationStatus",
    "MutationResult",
    "ConsolidationError",
    "LoadFinalizationError",
    # Main Engine
    "LoadConsolidationEngine",
]
