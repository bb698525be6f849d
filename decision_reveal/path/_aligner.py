"""Alignment of a classification trace with the nodes of a tree.

Traces from the classifier service share no object identity with the decoded
tree. Steps that carry a ``node_id`` are bound to that node directly. Steps
without one are matched structurally on feature name and threshold, which is
ambiguous when two splits test the same feature at nearly the same threshold.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from decision_reveal.core._config import settings
from decision_reveal.core._exceptions import AmbiguousPathMatch
from decision_reveal.tree import Leaf, Split, TreeNode, iter_preorder
from ._schemas import ClassificationStep
from ._types import Direction


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class NodeHighlight:
    """Highlight state of the node at ``rank``."""

    rank: int
    on_path: bool = False
    direction: Direction | None = None
    step: ClassificationStep | None = None


@dataclass(slots=True)
class PathAlignment:
    """Per-node highlights, listed by pre-order rank."""

    highlights: List[NodeHighlight] = field(default_factory=list)
    ambiguities: List[AmbiguousPathMatch] = field(default_factory=list)

    def highlight(self, rank: int) -> NodeHighlight:
        return self.highlights[rank]

    def on_path_ranks(self) -> List[int]:
        """Ranks of all nodes on the decision path."""
        return [h.rank for h in self.highlights if h.on_path]

    def direction_for(self, rank: int) -> Direction | None:
        """Branch taken at the node, ``None`` if it is off path or a leaf."""
        return self.highlights[rank].direction


def _matches(step: ClassificationStep, node: Split, tolerance: float) -> bool:
    return (
        step.feature == node.feature
        and step.threshold is not None
        and abs(step.threshold - node.threshold) < tolerance
    )


def _binds_to(step: ClassificationStep, nodes: Sequence[TreeNode]) -> bool:
    rank = step.node_id
    if rank is None or rank >= len(nodes):
        logger.warning(f"Ignoring step for node {rank}: tree has {len(nodes)} nodes")
        return False
    node = nodes[rank]
    if step.is_terminal and not isinstance(node, Leaf):
        logger.warning(f"Ignoring terminal step for node {rank}: node is not a leaf")
        return False
    if not step.is_terminal and (
        not isinstance(node, Split) or node.feature != step.feature
    ):
        logger.warning(
            f"Ignoring step on '{step.feature}' for node {rank}: "
            "node does not test that feature"
        )
        return False
    return True


def align_path(
    tree: TreeNode | None,
    path: Sequence[ClassificationStep],
    tolerance: float | None = None,
) -> PathAlignment:
    """Mark the nodes of ``tree`` that lie on ``path``.

    Args:
        tree: The current tree. ``None`` yields an empty alignment.
        path: The decision path, in the order the tests were performed.
        tolerance: Absolute threshold tolerance for structural matching.
            Defaults to ``settings.THRESHOLD_TOLERANCE``.

    Returns:
        One highlight per node. A split is on path when a step is bound to it
        by ``node_id`` or, failing that, when a step tests the same feature at
        a threshold within ``tolerance``; splits are visited in pre-order and
        each step is claimed by the first split it matches. A leaf is on path
        when a terminal step names it, or when the trace has a terminal step
        without a ``node_id``.
    """
    if tolerance is None:
        tolerance = settings.THRESHOLD_TOLERANCE

    nodes = list(iter_preorder(tree))
    bound: Dict[int, ClassificationStep] = {}
    structural: List[ClassificationStep] = []
    ends_at_any_leaf = False

    for step in path:
        if step.node_id is not None:
            if not _binds_to(step, nodes):
                continue
            if step.node_id in bound:
                logger.warning(f"Ignoring repeated step for node {step.node_id}")
                continue
            bound[step.node_id] = step
        elif step.is_terminal:
            ends_at_any_leaf = True
        else:
            structural.append(step)

    alignment = PathAlignment()
    claimed_by: Dict[int, int] = {}
    for rank, node in enumerate(nodes):
        if rank in bound or not isinstance(node, Split):
            continue

        shadowed: int | None = None
        for idx, step in enumerate(structural):
            if not _matches(step, node, tolerance):
                continue
            if idx in claimed_by:
                shadowed = idx if shadowed is None else shadowed
                continue
            claimed_by[idx] = rank
            bound[rank] = step
            break

        if rank not in bound and shadowed is not None:
            ambiguity = AmbiguousPathMatch(
                feature=node.feature,
                threshold=node.threshold,
                rank=rank,
                claimed_by=claimed_by[shadowed],
            )
            logger.debug(str(ambiguity))
            alignment.ambiguities.append(ambiguity)

    for rank, node in enumerate(nodes):
        step = bound.get(rank)
        if isinstance(node, Split):
            alignment.highlights.append(
                NodeHighlight(
                    rank=rank,
                    on_path=step is not None,
                    direction=step.direction if step is not None else None,
                    step=step,
                )
            )
        else:
            alignment.highlights.append(
                NodeHighlight(
                    rank=rank,
                    on_path=step is not None or ends_at_any_leaf,
                    step=step,
                )
            )

    logger.debug(
        f"Aligned {len(path)} steps: {len(alignment.on_path_ranks())} of "
        f"{len(nodes)} nodes on path"
    )
    return alignment
