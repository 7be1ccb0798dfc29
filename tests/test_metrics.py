"""Tests for ROI and summary calculations."""

import math

import pytest

from roi_tracker.metrics import (
    compute_roi,
    compute_summary,
    format_currency,
    format_roi,
    performance_grade,
    round_half_up,
)
from roi_tracker.models import Status


def test_compute_roi_sample_values() -> None:
    """Test ROI for the sample deals."""
    assert compute_roi(50000, 10) == 5000.0
    assert compute_roi(15000, 2) == 7500.0
    assert compute_roi(35000, 3) == 11666.67


@pytest.mark.parametrize(
    ("revenue", "time_taken", "expected"),
    [
        (0, 1, 0.0),
        (1, 3, 0.33),
        (100, 7, 14.29),
        (2.5, 0.5, 5.0),
        (999.99, 1.5, 666.66),
        (1, 0.001, 1000.0),
        (1, 8, 0.13),
        (5, 8, 0.63),
        (1, 16, 0.06),
    ],
)
def test_compute_roi_rounds_half_up(revenue: float, time_taken: float, expected: float) -> None:
    """Test ROI is revenue / time rounded to 2 decimals, halves going up."""
    assert compute_roi(revenue, time_taken) == expected


def test_compute_roi_accepts_numeric_text() -> None:
    """Test numeric strings are coerced."""
    assert compute_roi("100", " 4 ") == 25.0


@pytest.mark.parametrize(
    ("revenue", "time_taken"),
    [
        (100, 0),
        (100, -1),
        (-5, 2),
        ("abc", 2),
        (100, "x"),
        ("", ""),
        (None, 1),
        (math.nan, 1),
        (100, math.nan),
        (math.inf, 1),
    ],
)
def test_compute_roi_degenerate_input_is_zero(revenue: object, time_taken: object) -> None:
    """Test invalid or degenerate input yields 0 instead of inf/NaN."""
    assert compute_roi(revenue, time_taken) == 0  # type: ignore[arg-type]


def test_format_roi() -> None:
    """Test ROI display text."""
    assert format_roi(5000) == "5000.00"
    assert format_roi(11666.67) == "11666.67"
    assert format_roi(0) == "0.00"
    assert format_roi(math.nan) == "—"
    assert format_roi(math.inf) == "—"
    assert format_roi(-math.inf) == "—"


def test_format_currency() -> None:
    """Test whole-dollar currency display."""
    assert format_currency(50000) == "$50,000"
    assert format_currency(0) == "$0"
    assert format_currency(1234.4) == "$1,234"
    assert format_currency(-5) == "-$5"


def test_summary_of_empty_collection() -> None:
    """Test summary of no tasks is all zeros with grade D."""
    summary = compute_summary([])

    assert summary.model_dump() == {
        "total_tasks": 0,
        "completed_tasks": 0,
        "total_revenue": 0,
        "average_roi": 0,
        "efficiency": 0,
        "performance_grade": "D",
    }


def test_average_roi_excludes_zero_roi_tasks(make_task) -> None:
    """Test tasks with zero ROI are left out of the average."""
    tasks = [
        make_task(revenue=500.0, time_taken=0.0),  # roi 0
        make_task(revenue=100.0, time_taken=1.0),  # roi 100
    ]

    summary = compute_summary(tasks)

    assert summary.average_roi == 100
    assert summary.performance_grade == "A+"


def test_total_revenue_includes_degenerate_tasks(make_task) -> None:
    """Test total revenue counts every task regardless of ROI validity."""
    tasks = [make_task(revenue=500.0, time_taken=0.0), make_task(revenue=100.0, time_taken=1.0)]

    assert compute_summary(tasks).total_revenue == 600


def test_counts_and_efficiency(make_task) -> None:
    """Test completion counts and efficiency percentage rounding."""
    tasks = [
        make_task(status=Status.COMPLETED),
        make_task(status=Status.PENDING),
        make_task(status=Status.IN_PROGRESS),
    ]

    summary = compute_summary(tasks)

    assert summary.total_tasks == 3
    assert summary.completed_tasks == 1
    assert summary.efficiency == 33.3


def test_average_roi_is_rounded(make_task) -> None:
    """Test average ROI is rounded to 2 decimals."""
    tasks = [make_task(revenue=10.0, time_taken=3.0), make_task(revenue=20.0, time_taken=3.0)]

    # (3.33 + 6.67) / 2
    assert compute_summary(tasks).average_roi == 5.0


@pytest.mark.parametrize(
    ("average", "grade"),
    [
        (250, "A+"),
        (100, "A+"),
        (99.99, "A"),
        (75, "A"),
        (74.99, "B"),
        (50, "B"),
        (49.99, "C"),
        (25, "C"),
        (24.99, "D"),
        (0, "D"),
    ],
)
def test_performance_grade_boundaries(average: float, grade: str) -> None:
    """Test grade bands are inclusive at their lower bound."""
    assert performance_grade(average) == grade


def test_efficiency_rounds_half_up(make_task) -> None:
    """Test 1 completed task out of 16 (6.25%) shows as 6.3."""
    tasks = [make_task(status=Status.COMPLETED)] + [make_task() for _ in range(15)]

    assert compute_summary(tasks).efficiency == 6.3


def test_average_roi_rounds_half_up(make_task) -> None:
    """Test an average landing on a half cent rounds up."""
    tasks = [make_task(roi=1.0), make_task(roi=1.25)]

    # 1.125 is exact in binary
    assert compute_summary(tasks).average_roi == 1.13


@pytest.mark.parametrize(
    ("value", "digits", "expected"),
    [
        (0.125, 2, 0.13),
        (6.25, 1, 6.3),
        (2.5, 0, 3.0),
        (1.005, 2, 1.0),
        (math.inf, 2, math.inf),
    ],
)
def test_round_half_up(value: float, digits: int, expected: float) -> None:
    """Test halves round up on the scaled float."""
    assert round_half_up(value, digits) == expected
