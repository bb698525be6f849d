"""Shared fixtures: trees, controllable timers and a fake classifier service."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Mapping

import pytest

from decision_reveal.path import ClassificationResult
from decision_reveal.session import MetricsReport
from decision_reveal.tree import Leaf, Split, TreeNode, decode_text, to_payload


SPAM_MODEL = """Feature: call
Threshold: 0.034
ham
Feature: txt
Threshold: 0.016
ham
spam
"""


async def _drain(rounds: int = 20) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


class RecordingSleep:
    """Sleep replacement that returns at once and records every delay."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


class ManualClock:
    """Sleep replacement whose waits only end when the test advances time."""

    def __init__(self) -> None:
        self.delays: List[float] = []
        self._waiters: List[asyncio.Future[None]] = []

    async def sleep(self, delay: float) -> None:
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self.delays.append(delay)
        self._waiters.append(waiter)
        await waiter

    @property
    def pending(self) -> int:
        return sum(1 for w in self._waiters if not w.done())

    async def advance(self, steps: int = 1) -> None:
        """Release every pending wait, ``steps`` times over."""
        for _ in range(steps):
            await _drain()
            waiters = [w for w in self._waiters if not w.done()]
            self._waiters = []
            for waiter in waiters:
                waiter.set_result(None)
            await _drain()


class FakeService:
    """In-memory stand-in for the classifier service."""

    def __init__(
        self,
        tree: TreeNode | None = None,
        results: List[ClassificationResult | Mapping[str, Any]] | None = None,
        metrics: Mapping[str, Any] | None = None,
        ready: bool = True,
    ) -> None:
        self.tree_payload: Dict[str, Any] | None = (
            to_payload(tree) if tree is not None else None
        )
        self.results = list(results or [])
        self.metrics = metrics
        self.ready = ready
        self.loaded_text: str | None = None
        self.trained: tuple[bytes, str] | None = None
        self.classified: List[str] = []
        self.train_error: Exception | None = None
        self.ready_error: Exception | None = None

    async def is_ready(self) -> bool:
        if self.ready_error is not None:
            raise self.ready_error
        return self.ready

    async def load_model(self, text: str) -> None:
        self.loaded_text = text
        self.tree_payload = to_payload(decode_text(text).tree)

    async def get_tree(self) -> Dict[str, Any] | None:
        return self.tree_payload

    async def classify(self, text: str) -> ClassificationResult | Mapping[str, Any]:
        self.classified.append(text)
        return self.results.pop(0)

    async def train(self, data: bytes, label_column: str) -> None:
        if self.train_error is not None:
            raise self.train_error
        self.trained = (data, label_column)

    async def evaluate(self, data: bytes, label_column: str) -> MetricsReport | Mapping[str, Any]:
        assert self.metrics is not None
        return self.metrics


@pytest.fixture
def spam_tree() -> TreeNode:
    return Split(
        feature="call",
        threshold=0.034,
        left=Leaf("ham"),
        right=Split(feature="txt", threshold=0.016, left=Leaf("ham"), right=Leaf("spam")),
    )


@pytest.fixture
def skewed_tree() -> TreeNode:
    """Left-leaning tree whose heap numbering skips indices."""
    return Split(
        "a",
        1.0,
        Split("b", 2.0, Split("c", 3.0, Leaf("x"), Leaf("y")), Leaf("z")),
        Leaf("w"),
    )


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def spam_model() -> str:
    return SPAM_MODEL
