from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Tuple

from decision_reveal.core._config import settings
from decision_reveal.tree import DecodedModel, NodeDescriptor, PacingIndex, TreeNode
from decision_reveal.tree import build_indices, iter_preorder
from ._progress import construction_message
from ._scheduler import RevealScheduler, Sleep


logger = logging.getLogger(__name__)

START_MESSAGE = "Starting tree construction..."
COMPLETE_MESSAGE = "Tree construction complete!"


class ConstructionReveal(RevealScheduler):
    """Progressive disclosure of the nodes of a tree.

    A node is revealed once its BuildIndex is at most the cursor. When the
    reveal completes every node is revealed, including heap-numbered nodes
    whose index is larger than the node count.

    Args:
        model: The decoded model, or a bare tree.
        pacing: BuildIndex numbering. Defaults to ``settings.PACING_INDEX``.
        tick_interval: Seconds per node. Defaults to
            ``settings.BUILD_TICK_SECONDS``.
        grace: Seconds the completion message stays up. Defaults to
            ``settings.BUILD_GRACE_SECONDS``.
        sleep: Coroutine function used to wait.
    """

    def __init__(
        self,
        model: DecodedModel | TreeNode | None,
        *,
        pacing: PacingIndex | None = None,
        tick_interval: float | None = None,
        grace: float | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if isinstance(model, DecodedModel):
            self.tree: TreeNode | None = model.tree
            self.descriptors: Tuple[NodeDescriptor, ...] = model.descriptors
        else:
            self.tree = model
            self.descriptors = tuple(NodeDescriptor.of(n) for n in iter_preorder(model))

        self.pacing: PacingIndex = pacing or settings.PACING_INDEX
        self.build_indices: List[int] = build_indices(self.tree, self.pacing)
        self._rank_by_index: Dict[int, int] = {
            index: rank for rank, index in enumerate(self.build_indices)
        }
        self._reached_end = False
        self.message = ""

        super().__init__(
            total=len(self.descriptors),
            tick_interval=(
                settings.BUILD_TICK_SECONDS if tick_interval is None else tick_interval
            ),
            settle_delay=settings.BUILD_GRACE_SECONDS if grace is None else grace,
            name="construction",
            sleep=sleep,
        )

    def is_revealed(self, rank: int) -> bool:
        """Whether the node at ``rank`` is visible."""
        if self._reached_end:
            return True
        return self.build_indices[rank] <= self.cursor

    def revealed_ranks(self) -> List[int]:
        return [rank for rank in range(self.total) if self.is_revealed(rank)]

    def newest_rank(self) -> int | None:
        """The node revealed by the latest tick, while the reveal is running."""
        if self.state != "running" or self.cursor == 0:
            return None
        return self._rank_by_index.get(self.cursor)

    def _on_start(self) -> None:
        self.message = START_MESSAGE
        logger.info(f"Constructing tree with {self.total} nodes ({self.pacing} pacing)")

    def _on_tick(self, cursor: int) -> None:
        rank = self._rank_by_index.get(cursor)
        if rank is not None:
            self.message = construction_message(self.descriptors[rank])
            logger.debug(f"Revealed node {rank} at cursor {cursor}")

    def _on_complete(self) -> None:
        self._reached_end = True
        self.message = COMPLETE_MESSAGE

    def _on_settle(self) -> None:
        self.message = ""

    def _on_cancel(self) -> None:
        self.message = ""
