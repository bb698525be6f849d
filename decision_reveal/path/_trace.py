from __future__ import annotations

import logging
from typing import List, Mapping

from decision_reveal.core._exceptions import DataError
from decision_reveal.tree import Split, TreeNode, count_nodes
from ._schemas import ClassificationResult, ClassificationStep


logger = logging.getLogger(__name__)


def trace_path(tree: TreeNode, features: Mapping[str, float]) -> ClassificationResult:
    """Classify a feature vector and record the path with node identities.

    Values below a split's threshold go left, all others go right. Every step
    carries the pre-order rank of its node and the trace ends with a terminal
    step naming the reached leaf.

    Raises:
        DataError: If a split tests a feature missing from ``features``.
    """
    steps: List[ClassificationStep] = []
    node = tree
    rank = 0
    while isinstance(node, Split):
        if node.feature not in features:
            raise DataError(f"Feature '{node.feature}' is missing from the input")
        value = float(features[node.feature])
        go_left = value < node.threshold
        steps.append(
            ClassificationStep(
                feature=node.feature,
                observed_value=value,
                threshold=node.threshold,
                direction="left" if go_left else "right",
                node_id=rank,
            )
        )
        if go_left:
            node, rank = node.left, rank + 1
        else:
            rank += 1 + count_nodes(node.left)
            node = node.right

    steps.append(ClassificationStep(node_id=rank))
    logger.debug(f"Traced {len(steps) - 1} splits to leaf '{node.label}' (node {rank})")
    return ClassificationResult(label=node.label, path=tuple(steps))
