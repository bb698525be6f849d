from __future__ import annotations

from typing import Any, Tuple, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ._types import Direction


class ClassificationStep(BaseModel):
    """One feature test performed while classifying an input.

    A step without a feature is the terminal step of a trace: the path ended at
    a leaf.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    feature: str | None = Field(default=None, description="The feature tested.")
    observed_value: float | None = Field(
        default=None,
        alias="value",
        description="The value of the feature for the classified input.",
    )
    threshold: float | None = Field(
        default=None, description="The threshold of the split that was tested."
    )
    direction: Direction | None = Field(
        default=None, description="The branch taken at the split."
    )
    node_id: int | None = Field(
        default=None,
        ge=0,
        description="Pre-order rank of the node that produced this step, when the "
        "classifier reports it.",
    )

    @field_validator("feature", mode="before")
    @classmethod
    def _empty_feature_is_terminal(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("direction", mode="before")
    @classmethod
    def _normalize_direction(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @model_validator(mode="after")
    def _check_split_step(self) -> ClassificationStep:
        if self.feature is not None and (
            self.threshold is None or self.direction is None
        ):
            raise ValueError(
                f"Step on '{self.feature}' must have a threshold and a direction"
            )
        return self

    @property
    def is_terminal(self) -> bool:
        """Check if the step marks the end of the path."""
        return self.feature is None


DecisionPath: TypeAlias = Tuple[ClassificationStep, ...]


class ClassificationResult(BaseModel):
    """The classifier's answer for one input."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(description="The predicted label.")
    path: DecisionPath = Field(
        default=(), description="Feature tests in the order they were performed."
    )
