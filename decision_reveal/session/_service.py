from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from decision_reveal.path import ClassificationResult
from ._metrics import MetricsReport


@runtime_checkable
class ClassifierService(Protocol):
    """The external classifier and training engine.

    Transport is up to the implementation. Responses may be returned as the
    library's models or as the equivalent JSON-like mappings.
    """

    async def is_ready(self) -> bool:
        """Whether a model is loaded and can classify."""
        ...

    async def load_model(self, text: str) -> None:
        """Install a model written in the pre-order text format."""
        ...

    async def get_tree(self) -> Mapping[str, Any] | None:
        """The current tree as structured data, ``None`` if no model is loaded."""
        ...

    async def classify(self, text: str) -> ClassificationResult | Mapping[str, Any]:
        """Classify an input and report the decision path."""
        ...

    async def train(self, data: bytes, label_column: str) -> None:
        """Train a new model from a CSV file."""
        ...

    async def evaluate(
        self, data: bytes, label_column: str
    ) -> MetricsReport | Mapping[str, Any]:
        """Evaluate the current model on a labelled CSV file."""
        ...
