"""Tests for evaluation reports."""

from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from decision_reveal.session import MetricsReport


REPORT = b"""{
    "overall": 0.9,
    "perLabel": {"ham": 0.95, "spam": 0.8},
    "labelCounts": {"ham": 20, "spam": 10},
    "confusion": [
        {"actual": "ham", "predicted": "ham", "count": 19},
        {"actual": "ham", "predicted": "spam", "count": 1},
        {"actual": "spam", "predicted": "spam", "count": 8},
        {"actual": "spam", "predicted": "ham", "count": 2},
        {"actual": "spam", "predicted": "unknown", "count": 0}
    ]
}"""


def test_report_from_service_json():
    report = MetricsReport.from_json(REPORT)
    assert report.overall == 0.9
    assert report.per_label["spam"] == 0.8
    assert report.label_counts == {"ham": 20, "spam": 10}
    assert report.labels() == ["ham", "spam", "unknown"]


def test_confusion_matrix():
    matrix = MetricsReport.from_json(REPORT).confusion_matrix()

    assert list(matrix.index) == ["ham", "spam", "unknown"]
    assert list(matrix.columns) == ["ham", "spam", "unknown"]
    assert matrix.index.name == "actual"
    assert matrix.loc["ham", "spam"] == 1
    assert matrix.loc["spam", "ham"] == 2
    assert int(matrix.to_numpy().sum()) == 30


def test_per_label_frame():
    frame = MetricsReport.from_json(REPORT).per_label_frame()

    assert list(frame["label"]) == ["ham", "spam", "unknown"]
    assert list(frame["count"]) == [20, 10, 0]
    assert frame["accuracy"].iloc[0] == 0.95
    assert math.isnan(frame["accuracy"].iloc[2])


def test_empty_report():
    report = MetricsReport(overall=0.0)
    assert report.confusion_matrix().shape == (0, 0)
    assert report.per_label_frame().empty


@pytest.mark.parametrize(
    "payload",
    [
        {"overall": 1.5},
        {"overall": 0.5, "confusion": [{"actual": "a", "predicted": "b", "count": -1}]},
        {},
    ],
)
def test_invalid_reports_are_rejected(payload):
    with pytest.raises(ValidationError):
        MetricsReport.model_validate(payload)
