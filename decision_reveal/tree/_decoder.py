"""Decoding of serialized decision trees.

Two sources are supported: the line-oriented text format written by the
classifier service when a model is exported, and the structured (JSON) tree the
service returns after training. Both produce a :class:`DecodedModel`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

import orjson

from decision_reveal.core._exceptions import DataError, MalformedModel
from decision_reveal.core._types import JSONObject
from ._tree import Leaf, Split, TreeNode, iter_preorder
from ._types import ModelSource, NodeKind


logger = logging.getLogger(__name__)

FEATURE_PREFIX = "Feature:"
THRESHOLD_PREFIX = "Threshold:"


@dataclass(frozen=True, slots=True)
class NodeDescriptor:
    """A node as first encountered while decoding, used for progress messages."""

    kind: NodeKind
    feature: str | None = None
    threshold: float | None = None
    label: str | None = None

    @classmethod
    def of(cls, node: TreeNode) -> NodeDescriptor:
        """Describe an already built node."""
        if isinstance(node, Split):
            return cls(kind="split", feature=node.feature, threshold=node.threshold)
        return cls(kind="leaf", label=node.label)


@dataclass(frozen=True, slots=True)
class DecodedModel:
    """A decoded tree together with its pre-order node descriptors."""

    tree: TreeNode
    descriptors: Tuple[NodeDescriptor, ...]
    source: ModelSource = field(default="text", compare=False)

    @property
    def node_count(self) -> int:
        return len(self.descriptors)

    @property
    def split_count(self) -> int:
        return sum(1 for d in self.descriptors if d.kind == "split")

    @property
    def leaf_count(self) -> int:
        return sum(1 for d in self.descriptors if d.kind == "leaf")


@dataclass(slots=True)
class _PendingSplit:
    feature: str
    threshold: float
    left: TreeNode | None = None


class _LineCursor:
    """Cursor over the non-blank, stripped lines of a model file."""

    def __init__(self, text: str) -> None:
        self._lines: List[Tuple[int, str]] = [
            (lineno, line.strip())
            for lineno, line in enumerate(text.splitlines(), 1)
            if line.strip()
        ]
        self._pos = 0

    @property
    def exhausted(self) -> bool:
        return self._pos >= len(self._lines)

    def peek(self) -> Tuple[int, str] | None:
        return None if self.exhausted else self._lines[self._pos]

    def next(self) -> Tuple[int, str] | None:
        item = self.peek()
        if item is not None:
            self._pos += 1
        return item


def _parse_threshold(raw: Any, where: str) -> float:
    if isinstance(raw, bool):
        raise MalformedModel(f"Threshold at {where} is not a number: {raw!r}")
    try:
        threshold = float(raw)
    except (TypeError, ValueError) as e:
        raise MalformedModel(f"Threshold at {where} is not a number: {raw!r}") from e
    if not math.isfinite(threshold):
        raise MalformedModel(f"Threshold at {where} is not finite: {raw!r}")
    return threshold


def _read_split_header(cursor: _LineCursor, lineno: int, line: str) -> Tuple[str, float]:
    feature = line[len(FEATURE_PREFIX) :].strip()
    if not feature:
        raise MalformedModel(f"Feature line {lineno} has no feature name")

    threshold_item = cursor.next()
    if threshold_item is None or not threshold_item[1].startswith(THRESHOLD_PREFIX):
        raise MalformedModel(
            f"Feature '{feature}' at line {lineno} has no matching Threshold line"
        )
    threshold_lineno, threshold_line = threshold_item
    raw = threshold_line[len(THRESHOLD_PREFIX) :].strip()
    return feature, _parse_threshold(raw, f"line {threshold_lineno}")


def _decode_lines(cursor: _LineCursor, descriptors: List[NodeDescriptor]) -> TreeNode:
    pending: List[_PendingSplit] = []
    while True:
        item = cursor.next()
        if item is None:
            raise MalformedModel(
                f"Model ended before the split on '{pending[-1].feature}' "
                "received both subtrees"
            )
        lineno, line = item

        if line.startswith(FEATURE_PREFIX):
            feature, threshold = _read_split_header(cursor, lineno, line)
            descriptors.append(
                NodeDescriptor(kind="split", feature=feature, threshold=threshold)
            )
            pending.append(_PendingSplit(feature=feature, threshold=threshold))
            continue

        descriptors.append(NodeDescriptor(kind="leaf", label=line))
        node: TreeNode = Leaf(label=line)

        # Close every split whose right subtree just completed.
        while pending and pending[-1].left is not None:
            done = pending.pop()
            node = Split(
                feature=done.feature,
                threshold=done.threshold,
                left=done.left,  # type: ignore[arg-type]
                right=node,
            )
        if not pending:
            return node
        pending[-1].left = node


def decode_text(text: str | bytes) -> DecodedModel:
    """Decode a model written in the pre-order text format.

    Each split is a ``Feature: <name>`` line followed by a
    ``Threshold: <float>`` line, then its left and right subtrees. Any other
    non-blank line is a leaf label. Blank lines are ignored.

    Args:
        text: The model file contents. Bytes are decoded as UTF-8.

    Returns:
        The decoded tree and its pre-order node descriptors.

    Raises:
        MalformedModel: If the file is empty, a split lacks its threshold line,
            a threshold is not a finite number, the tree is incomplete or
            content follows the root tree.
    """
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise MalformedModel("Model file is not valid UTF-8") from e
    else:
        text = text.removeprefix("\ufeff")

    cursor = _LineCursor(text)
    if cursor.exhausted:
        raise MalformedModel("Model file is empty")

    descriptors: List[NodeDescriptor] = []
    tree = _decode_lines(cursor, descriptors)

    trailing = cursor.peek()
    if trailing is not None:
        lineno, line = trailing
        raise MalformedModel(
            f"Unexpected content after the root tree at line {lineno}: {line!r}"
        )

    decoded = DecodedModel(tree=tree, descriptors=tuple(descriptors), source="text")
    logger.info(
        f"Decoded text model: {decoded.split_count} splits, "
        f"{decoded.leaf_count} leaves"
    )
    return decoded


def _node_from_payload(payload: Any, where: str) -> TreeNode:
    if not isinstance(payload, Mapping):
        raise MalformedModel(
            f"Node at {where} must be an object, got {type(payload).__name__}"
        )

    left = payload.get("left")
    right = payload.get("right")
    leaf_flag = payload.get("isLeaf", payload.get("is_leaf"))

    if left is not None or right is not None or payload.get("feature") is not None:
        if leaf_flag is True:
            raise MalformedModel(f"Leaf at {where} cannot have a split")
        if left is None or right is None:
            raise MalformedModel(f"Split at {where} must have both children")
        feature = payload.get("feature")
        if not isinstance(feature, str) or not feature:
            raise MalformedModel(f"Split at {where} has no feature name")
        threshold = _parse_threshold(payload.get("threshold"), where)
        left_node = _node_from_payload(left, f"{where}.left")
        right_node = _node_from_payload(right, f"{where}.right")
        return Split(feature=feature, threshold=threshold, left=left_node, right=right_node)

    label = payload.get("label")
    if isinstance(label, int) and not isinstance(label, bool):
        label = str(label)
    if not isinstance(label, str) or not label.strip():
        raise MalformedModel(f"Leaf at {where} has no label")
    samples = payload.get("samples", payload.get("sample_count"))
    try:
        return Leaf(label=label.strip(), sample_count=samples)
    except DataError as e:
        raise MalformedModel(f"Invalid leaf at {where}: {e}") from e


def decode_structured(payload: Mapping[str, Any]) -> DecodedModel:
    """Build a model from the structured tree returned by the classifier service.

    Split nodes are ``{feature, threshold, left, right}`` and leaves are
    ``{label}`` (optionally ``samples`` and ``isLeaf``).

    Raises:
        MalformedModel: If a node violates the tree invariants.
    """
    tree = _node_from_payload(payload, "root")
    descriptors = tuple(NodeDescriptor.of(node) for node in iter_preorder(tree))
    decoded = DecodedModel(tree=tree, descriptors=descriptors, source="structured")
    logger.info(
        f"Decoded structured model: {decoded.split_count} splits, "
        f"{decoded.leaf_count} leaves"
    )
    return decoded


def decode_json(data: str | bytes) -> DecodedModel:
    """Parse a JSON document and decode it with :func:`decode_structured`."""
    try:
        payload = orjson.loads(data)
    except orjson.JSONDecodeError as e:
        raise MalformedModel(f"Tree payload is not valid JSON: {e}") from e
    return decode_structured(payload)


def encode_text(tree: TreeNode) -> str:
    """Write a tree in the canonical pre-order text format.

    Thresholds are written with ``repr`` so they survive a round trip exactly.

    Raises:
        DataError: If a leaf label cannot be represented in the text format.
    """
    lines: List[str] = []
    for node in iter_preorder(tree):
        if isinstance(node, Split):
            lines.append(f"{FEATURE_PREFIX} {node.feature}")
            lines.append(f"{THRESHOLD_PREFIX} {node.threshold!r}")
        else:
            if node.label.startswith(FEATURE_PREFIX) or "\n" in node.label:
                raise DataError(f"Leaf label {node.label!r} cannot be written as text")
            lines.append(node.label)
    return "\n".join(lines) + "\n"


def to_payload(tree: TreeNode) -> JSONObject:
    """Structured form of a tree, accepted by :func:`decode_structured`."""
    if isinstance(tree, Split):
        return {
            "feature": tree.feature,
            "threshold": tree.threshold,
            "left": to_payload(tree.left),
            "right": to_payload(tree.right),
        }
    payload: Dict[str, Any] = {"label": tree.label, "isLeaf": True}
    if tree.sample_count is not None:
        payload["samples"] = tree.sample_count
    return payload
