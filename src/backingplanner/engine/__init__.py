"""Engine module for backing analysis.

This module provides clash detection, door detection, wall dimensions,
placement optimization, and the orchestrator that runs them with progress
reporting.
"""

from .clashes import detect_clashes, is_ready_for_install
from .dimensions import generate_dimensions
from .doors import detect_doors
from .optimizer import apply_zones, optimize_backings, summarize_optimization
from .orchestrator import CancellationToken, DetectionOrchestrator, StageOutcome
from .results import DetectionResults, aggregate, merge_results
from .validators import InvalidInput

__all__ = [
    "detect_clashes",
    "is_ready_for_install",
    "detect_doors",
    "generate_dimensions",
    "optimize_backings",
    "apply_zones",
    "summarize_optimization",
    "DetectionOrchestrator",
    "CancellationToken",
    "StageOutcome",
    "DetectionResults",
    "merge_results",
    "aggregate",
    "InvalidInput",
]
