"""Binary decision tree model and its decoders.

A tree is decoded either from the pre-order text format of an exported model
or from the structured tree returned by the classifier service after training.
"""

from ._tree import Leaf, Split, TreeNode
from ._tree import build_indices, children, count_nodes, is_leaf, iter_preorder
from ._tree import tree_depth
from ._decoder import DecodedModel, NodeDescriptor
from ._decoder import decode_json, decode_structured, decode_text
from ._decoder import encode_text, to_payload
from ._types import ModelSource, NodeKind, PacingIndex

__all__ = [
    "Leaf",
    "Split",
    "TreeNode",
    "build_indices",
    "children",
    "count_nodes",
    "is_leaf",
    "iter_preorder",
    "tree_depth",
    "DecodedModel",
    "NodeDescriptor",
    "decode_json",
    "decode_structured",
    "decode_text",
    "encode_text",
    "to_payload",
    "ModelSource",
    "NodeKind",
    "PacingIndex",
]
