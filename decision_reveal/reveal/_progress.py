from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncGenerator, Literal, TypeAlias

from decision_reveal.core._config import settings
from decision_reveal.tree import DecodedModel, NodeDescriptor
from ._scheduler import Sleep


logger = logging.getLogger(__name__)

ProgressPhase: TypeAlias = Literal["start", "split", "leaf", "done", "error"]


def construction_message(descriptor: NodeDescriptor) -> str:
    """Message shown when a node appears in the construction reveal."""
    if descriptor.kind == "leaf":
        return f"Adding leaf: {descriptor.label}"
    return (
        f'Creating split on "{descriptor.feature}" '
        f"at threshold {descriptor.threshold:.4f}"
    )


def reconstruction_message(descriptor: NodeDescriptor) -> str:
    """Message shown when a node is replayed while a model file loads."""
    if descriptor.kind == "leaf":
        return f"Adding leaf node: {descriptor.label}"
    return f"Reconstructing split on '{descriptor.feature}' < {descriptor.threshold:.4f}"


@dataclass(frozen=True, slots=True)
class BuildProgress:
    """A progress event of a model load or training run."""

    phase: ProgressPhase
    message: str = ""
    built_nodes: int = 0
    total_nodes: int = 0
    feature: str | None = None
    threshold: float | None = None

    @property
    def percent(self) -> float:
        if self.total_nodes <= 0:
            return 0.0
        return min(self.built_nodes / self.total_nodes * 100, 100.0)

    @classmethod
    def done(cls, total_nodes: int, message: str) -> BuildProgress:
        return cls(
            phase="done",
            message=message,
            built_nodes=total_nodes,
            total_nodes=total_nodes,
        )

    @classmethod
    def failed(cls, message: str) -> BuildProgress:
        return cls(phase="error", message=message)


async def replay_reconstruction(
    decoded: DecodedModel,
    tick: float | None = None,
    sleep: Sleep = asyncio.sleep,
) -> AsyncGenerator[BuildProgress, None]:
    """Replay the nodes of a decoded model as progress events.

    Yields a ``start`` event, then one ``split`` or ``leaf`` event per node in
    pre-order, ``tick`` seconds apart. The caller emits the final ``done``
    event once the model has actually been installed.
    """
    if tick is None:
        tick = settings.RECONSTRUCT_TICK_SECONDS

    total = decoded.node_count
    yield BuildProgress(
        phase="start",
        message=f"Loading model with {total} nodes...",
        total_nodes=total,
    )
    for built, descriptor in enumerate(decoded.descriptors, 1):
        await sleep(tick)
        logger.debug(f"Replayed node {built}/{total}")
        yield BuildProgress(
            phase=descriptor.kind,
            message=reconstruction_message(descriptor),
            built_nodes=built,
            total_nodes=total,
            feature=descriptor.feature,
            threshold=descriptor.threshold,
        )
