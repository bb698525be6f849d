from __future__ import annotations

import asyncio
import logging

from decision_reveal.core._config import settings
from decision_reveal.path import ClassificationResult, DecisionPath, PathAlignment
from decision_reveal.path import align_path
from decision_reveal.tree import TreeNode
from ._scheduler import RevealScheduler, Sleep


logger = logging.getLogger(__name__)


class PathReveal(RevealScheduler):
    """Step-by-step disclosure of a decision path, then of the predicted label.

    Args:
        result: The classification to reveal.
        tick_interval: Seconds per step. Defaults to
            ``settings.PATH_TICK_SECONDS``.
        label_delay: Seconds between the last step and the label. Defaults to
            ``settings.LABEL_DELAY_SECONDS``.
        sleep: Coroutine function used to wait.
    """

    def __init__(
        self,
        result: ClassificationResult,
        *,
        tick_interval: float | None = None,
        label_delay: float | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.result = result
        self.label: str | None = None
        self.highlighting = False

        super().__init__(
            total=len(result.path),
            tick_interval=(
                settings.PATH_TICK_SECONDS if tick_interval is None else tick_interval
            ),
            settle_delay=(
                settings.LABEL_DELAY_SECONDS if label_delay is None else label_delay
            ),
            name="path",
            sleep=sleep,
        )

    @property
    def visible_path(self) -> DecisionPath:
        """Steps revealed so far, in their original order."""
        return self.result.path[: self.cursor]

    def alignment(self, tree: TreeNode | None, tolerance: float | None = None) -> PathAlignment:
        """Highlights for the visible part of the path."""
        return align_path(tree, self.visible_path, tolerance)

    def _on_start(self) -> None:
        self.highlighting = self.total > 0
        logger.info(f"Revealing decision path with {self.total} steps")

    def _on_tick(self, cursor: int) -> None:
        logger.debug(f"Added step {cursor} to path")

    def _on_settle(self) -> None:
        self.label = self.result.label
        logger.info(f"Classification complete: {self.label}")

    def _on_cancel(self) -> None:
        self.highlighting = False
