"""Tests for build progress events."""

from __future__ import annotations

import pytest

from decision_reveal.reveal import BuildProgress, replay_reconstruction
from decision_reveal.tree import decode_text


@pytest.mark.asyncio
async def test_replay_yields_one_event_per_node(spam_model, recording_sleep):
    decoded = decode_text(spam_model)

    events = [
        event
        async for event in replay_reconstruction(
            decoded, tick=0.2, sleep=recording_sleep
        )
    ]

    assert [e.phase for e in events] == ["start", "split", "leaf", "split", "leaf", "leaf"]
    assert [e.message for e in events] == [
        "Loading model with 5 nodes...",
        "Reconstructing split on 'call' < 0.0340",
        "Adding leaf node: ham",
        "Reconstructing split on 'txt' < 0.0160",
        "Adding leaf node: ham",
        "Adding leaf node: spam",
    ]
    assert [e.built_nodes for e in events] == [0, 1, 2, 3, 4, 5]
    assert events[-1].percent == 100.0
    assert events[1].feature == "call"
    assert events[1].threshold == 0.034
    assert recording_sleep.delays == [0.2] * 5


def test_done_and_failed_events():
    done = BuildProgress.done(7, "Model loaded successfully!")
    assert (done.phase, done.built_nodes, done.total_nodes) == ("done", 7, 7)
    assert done.percent == 100.0

    failed = BuildProgress.failed("Failed to load model")
    assert failed.phase == "error"
    assert failed.percent == 0.0
