"""Decision paths and their alignment with tree nodes."""

from ._aligner import NodeHighlight, PathAlignment, align_path
from ._schemas import ClassificationResult, ClassificationStep, DecisionPath
from ._trace import trace_path
from ._types import Direction

__all__ = [
    "NodeHighlight",
    "PathAlignment",
    "align_path",
    "ClassificationResult",
    "ClassificationStep",
    "DecisionPath",
    "trace_path",
    "Direction",
]
