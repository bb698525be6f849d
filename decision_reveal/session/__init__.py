"""Session orchestration against the external classifier service."""

from ._metrics import ConfusionEntry, MetricsReport
from ._service import ClassifierService
from ._session import LOAD_FAILED_MESSAGE, Session

__all__ = [
    "ConfusionEntry",
    "MetricsReport",
    "ClassifierService",
    "LOAD_FAILED_MESSAGE",
    "Session",
]
