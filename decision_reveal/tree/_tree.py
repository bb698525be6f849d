"""Immutable binary decision tree.

Nodes are built bottom-up and frozen, so a tree can be shared by the reveal
machines and any renderer without copying. Node identity across the library
is the node's pre-order rank (0-based position in :func:`iter_preorder`).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterator, List, Tuple, TypeAlias, Union

from decision_reveal.core._exceptions import DataError
from ._types import PacingIndex


@dataclass(frozen=True, slots=True)
class Leaf:
    """A terminal node carrying a predicted label."""

    label: str = field(metadata={"description": "The predicted label."})
    sample_count: int | None = field(
        default=None,
        compare=False,
        metadata={
            "description": "Training samples that reached this leaf. Only known "
            "for trees that come from training, never for decoded text models."
        },
    )

    def __post_init__(self) -> None:
        if not isinstance(self.label, str) or not self.label:
            raise DataError(f"Leaf label must be a non-empty string, got {self.label!r}")
        if self.sample_count is not None and (
            isinstance(self.sample_count, bool)
            or not isinstance(self.sample_count, int)
            or self.sample_count < 0
        ):
            raise DataError(
                f"sample_count must be a non-negative integer, got {self.sample_count!r}"
            )


@dataclass(frozen=True, slots=True)
class Split:
    """A decision node testing ``feature`` against ``threshold``."""

    feature: str = field(metadata={"description": "The feature tested."})
    threshold: float = field(metadata={"description": "The split threshold."})
    left: TreeNode = field(
        metadata={"description": "Subtree for values below the threshold."}
    )
    right: TreeNode = field(
        metadata={"description": "Subtree for values at or above the threshold."}
    )

    def __post_init__(self) -> None:
        if not isinstance(self.feature, str) or not self.feature:
            raise DataError(
                f"Split feature must be a non-empty string, got {self.feature!r}"
            )
        if (
            isinstance(self.threshold, bool)
            or not isinstance(self.threshold, (int, float))
            or not math.isfinite(self.threshold)
        ):
            raise DataError(
                f"Split threshold must be a finite number, got {self.threshold!r}"
            )
        if not isinstance(self.left, (Split, Leaf)) or not isinstance(
            self.right, (Split, Leaf)
        ):
            raise DataError(f"Split on '{self.feature}' must have both children")


TreeNode: TypeAlias = Union[Split, Leaf]


def is_leaf(node: TreeNode) -> bool:
    """Check if the node is a leaf node."""
    return isinstance(node, Leaf)


def children(node: TreeNode) -> Tuple[TreeNode, TreeNode] | None:
    """Return ``(left, right)`` for a split, ``None`` for a leaf."""
    if isinstance(node, Split):
        return node.left, node.right
    return None


def iter_preorder(node: TreeNode | None) -> Iterator[TreeNode]:
    """Yield nodes in pre-order: node, left subtree, right subtree."""
    stack: List[TreeNode] = [node] if node is not None else []
    while stack:
        current = stack.pop()
        yield current
        if isinstance(current, Split):
            stack.append(current.right)
            stack.append(current.left)


def count_nodes(node: TreeNode | None) -> int:
    """Number of nodes in the tree, 0 when no tree is loaded."""
    return sum(1 for _ in iter_preorder(node))


def tree_depth(node: TreeNode | None) -> int:
    """Number of nodes on the longest root-to-leaf path."""
    if node is None:
        return 0
    deepest = 0
    stack: List[Tuple[TreeNode, int]] = [(node, 1)]
    while stack:
        current, depth = stack.pop()
        deepest = max(deepest, depth)
        if isinstance(current, Split):
            stack.append((current.right, depth + 1))
            stack.append((current.left, depth + 1))
    return deepest


def build_indices(node: TreeNode | None, mode: PacingIndex = "preorder") -> List[int]:
    """BuildIndex of every node, listed by pre-order rank.

    Args:
        node: Root of the tree.
        mode: ``"preorder"`` numbers nodes 1..N in discovery order.
            ``"heap"`` uses complete-binary-tree numbering (root 1, children
            ``2i`` and ``2i + 1``); on skewed trees these values exceed N.

    Returns:
        ``indices[rank]`` is the BuildIndex of the node at that rank.
    """
    if mode == "preorder":
        return list(range(1, count_nodes(node) + 1))
    if mode != "heap":
        raise ValueError(f"Invalid pacing index: {mode}")

    indices: List[int] = []
    stack: List[Tuple[TreeNode, int]] = [(node, 1)] if node is not None else []
    while stack:
        current, index = stack.pop()
        indices.append(index)
        if isinstance(current, Split):
            stack.append((current.right, 2 * index + 1))
            stack.append((current.left, 2 * index))
    return indices
