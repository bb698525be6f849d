"""Tests for the settings layer."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from decision_reveal.core import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("DECISION_REVEAL_BUILD_TICK_SECONDS", raising=False)
    config = Settings(_env_file=None)
    assert config.BUILD_TICK_SECONDS == 0.4
    assert config.PATH_TICK_SECONDS == 0.6
    assert config.THRESHOLD_TOLERANCE == 1e-4
    assert config.PACING_INDEX == "preorder"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DECISION_REVEAL_BUILD_TICK_SECONDS", "0.05")
    monkeypatch.setenv("decision_reveal_pacing_index", "heap")
    config = Settings(_env_file=None)
    assert config.BUILD_TICK_SECONDS == 0.05
    assert config.PACING_INDEX == "heap"


@pytest.mark.parametrize(
    "name, value",
    [
        ("DECISION_REVEAL_THRESHOLD_TOLERANCE", "0"),
        ("DECISION_REVEAL_PATH_TICK_SECONDS", "-1"),
        ("DECISION_REVEAL_PACING_INDEX", "level"),
    ],
)
def test_invalid_values_are_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)
