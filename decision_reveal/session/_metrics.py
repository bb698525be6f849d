from __future__ import annotations

from typing import Dict, List

import numpy as np
import orjson
import pandas as pd
from pydantic import BaseModel, ConfigDict, Field


class ConfusionEntry(BaseModel):
    """How often inputs of one label were predicted as another."""

    actual: str
    predicted: str
    count: int = Field(ge=0)


class MetricsReport(BaseModel):
    """Evaluation of the current model on a labelled test set."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    overall: float = Field(ge=0.0, le=1.0, description="Overall accuracy.")
    per_label: Dict[str, float] = Field(
        default_factory=dict,
        alias="perLabel",
        description="Accuracy per actual label.",
    )
    label_counts: Dict[str, int] = Field(
        default_factory=dict,
        alias="labelCounts",
        description="Number of test samples per actual label.",
    )
    confusion: List[ConfusionEntry] = Field(
        default_factory=list, description="Confusion matrix in tall format."
    )

    @classmethod
    def from_json(cls, data: str | bytes) -> MetricsReport:
        return cls.model_validate(orjson.loads(data))

    def labels(self) -> List[str]:
        """All labels mentioned anywhere in the report, sorted."""
        labels = set(self.per_label) | set(self.label_counts)
        for entry in self.confusion:
            labels.update((entry.actual, entry.predicted))
        return sorted(labels)

    def confusion_matrix(self) -> pd.DataFrame:
        """Square confusion matrix with actual labels as rows."""
        labels = self.labels()
        position = {label: i for i, label in enumerate(labels)}
        matrix = np.zeros((len(labels), len(labels)), dtype=np.int64)
        for entry in self.confusion:
            matrix[position[entry.actual], position[entry.predicted]] += entry.count
        return pd.DataFrame(
            matrix,
            index=pd.Index(labels, name="actual"),
            columns=pd.Index(labels, name="predicted"),
        )

    def per_label_frame(self) -> pd.DataFrame:
        """Accuracy and sample count per label."""
        rows = [
            {
                "label": label,
                "accuracy": self.per_label.get(label, np.nan),
                "count": self.label_counts.get(label, 0),
            }
            for label in self.labels()
        ]
        return pd.DataFrame(rows, columns=["label", "accuracy", "count"])
