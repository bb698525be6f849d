"""Tests for the text and structured model decoders."""

from __future__ import annotations

import pytest

from decision_reveal.core import DataError, MalformedModel
from decision_reveal.tree import Leaf, NodeDescriptor, Split, count_nodes
from decision_reveal.tree import decode_json, decode_structured, decode_text
from decision_reveal.tree import encode_text, to_payload


def test_decode_single_split():
    decoded = decode_text("Feature: call\nThreshold: 0.034\nham\nspam\n")

    assert decoded.tree == Split("call", 0.034, Leaf("ham"), Leaf("spam"))
    assert decoded.node_count == 3
    assert decoded.descriptors == (
        NodeDescriptor(kind="split", feature="call", threshold=0.034),
        NodeDescriptor(kind="leaf", label="ham"),
        NodeDescriptor(kind="leaf", label="spam"),
    )


def test_decode_nested_model(spam_tree, spam_model):
    decoded = decode_text(spam_model)
    assert decoded.tree == spam_tree
    assert decoded.split_count == 2
    assert decoded.leaf_count == 3
    assert decoded.source == "text"


@pytest.mark.parametrize(
    "text, splits, leaves",
    [
        ("ham\n", 0, 1),
        ("Feature: a\nThreshold: 1\nx\ny\n", 1, 2),
        ("Feature: a\nThreshold: 1\nFeature: b\nThreshold: 2\nx\ny\nz\n", 2, 3),
        (
            "Feature: a\nThreshold: 1\nFeature: b\nThreshold: 2\nx\ny\n"
            "Feature: c\nThreshold: 3\nz\nw\n",
            3,
            4,
        ),
    ],
)
def test_node_count_is_splits_plus_leaves(text, splits, leaves):
    decoded = decode_text(text)
    assert decoded.split_count == splits
    assert decoded.leaf_count == leaves
    assert count_nodes(decoded.tree) == splits + leaves
    assert leaves == splits + 1


def test_blank_lines_and_whitespace_are_ignored():
    text = "\n  Feature: call  \r\n\r\nThreshold:   0.034\n\n  ham \n\nspam\n\n\n"
    assert decode_text(text).tree == Split("call", 0.034, Leaf("ham"), Leaf("spam"))


def test_labels_keep_their_case():
    decoded = decode_text("Feature: x\nThreshold: 0\nHam\nSPAM\n")
    assert [d.label for d in decoded.descriptors if d.kind == "leaf"] == ["Ham", "SPAM"]


def test_decode_bytes_with_byte_order_mark():
    data = b"\xef\xbb\xbfFeature: call\nThreshold: 0.034\nham\nspam\n"
    assert decode_text(data).tree.feature == "call"


@pytest.mark.parametrize(
    "text",
    [
        "",
        "\n \n\t\n",
        "Feature: call\n",
        "Feature: call\nham\nspam\n",
        "Feature:\nThreshold: 0.5\nham\nspam\n",
        "Feature: call\nThreshold: abc\nham\nspam\n",
        "Feature: call\nThreshold: nan\nham\nspam\n",
        "Feature: call\nThreshold: 0.5\nham\n",
        "Feature: call\nThreshold: 0.5\nham\nspam\nextra\n",
    ],
)
def test_malformed_models_are_rejected(text):
    with pytest.raises(MalformedModel):
        decode_text(text)


def test_malformed_model_is_a_data_error():
    with pytest.raises(DataError):
        decode_text("Feature: call\n")


def test_invalid_utf8_is_rejected():
    with pytest.raises(MalformedModel):
        decode_text(b"\xff\xfe\xfa")


def test_encode_text_round_trip():
    tree = Split(
        "len",
        0.1 + 0.2,
        Split("call", 1e-5, Leaf("ham"), Leaf("spam")),
        Leaf("spam"),
    )
    text = encode_text(tree)
    assert text.startswith("Feature: len\nThreshold: 0.30000000000000004\n")
    assert decode_text(text).tree == tree


def test_encode_text_rejects_unwritable_labels():
    with pytest.raises(DataError):
        encode_text(Split("a", 1.0, Leaf("Feature: b"), Leaf("x")))


def test_structured_and_text_decoding_agree(spam_tree, spam_model):
    assert decode_structured(to_payload(spam_tree)) == decode_text(spam_model)


def test_structured_leaves_keep_sample_counts():
    payload = {
        "feature": "call",
        "threshold": "0.034",
        "left": {"label": "ham", "isLeaf": True, "samples": 40},
        "right": {"label": 1, "samples": 7},
    }
    decoded = decode_structured(payload)
    assert decoded.source == "structured"
    assert decoded.tree.left.sample_count == 40
    assert decoded.tree.right.label == "1"
    assert to_payload(decoded.tree)["left"] == {
        "label": "ham",
        "isLeaf": True,
        "samples": 40,
    }


@pytest.mark.parametrize(
    "payload",
    [
        {"feature": "call", "threshold": 0.5, "left": {"label": "ham"}},
        {"feature": "call", "threshold": 0.5, "isLeaf": True,
         "left": {"label": "ham"}, "right": {"label": "spam"}},
        {"threshold": 0.5, "left": {"label": "ham"}, "right": {"label": "spam"}},
        {"feature": "call", "threshold": None,
         "left": {"label": "ham"}, "right": {"label": "spam"}},
        {"label": ""},
        {"label": "ham", "samples": -3},
        ["ham"],
    ],
)
def test_invalid_structured_trees_are_rejected(payload):
    with pytest.raises(MalformedModel):
        decode_structured(payload)


def test_decode_json():
    decoded = decode_json(
        b'{"feature": "call", "threshold": 0.034,'
        b' "left": {"label": "ham"}, "right": {"label": "spam"}}'
    )
    assert decoded.tree == Split("call", 0.034, Leaf("ham"), Leaf("spam"))

    with pytest.raises(MalformedModel):
        decode_json("{not json")
