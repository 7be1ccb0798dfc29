"""ROI and summary calculations."""

import math
from collections.abc import Iterable

from roi_tracker.models import Status, Task, TaskSummary

ROI_PLACEHOLDER = "—"

# (lower bound, grade), checked top-down, bounds inclusive
GRADE_THRESHOLDS: tuple[tuple[float, str], ...] = (
    (100, "A+"),
    (75, "A"),
    (50, "B"),
    (25, "C"),
)
LOWEST_GRADE = "D"


def parse_number(value: float | int | str | None) -> float:
    """Convert a number or numeric text to float.

    Returns NaN when the value cannot be interpreted as a number.
    """
    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return math.nan
    return math.nan


def round_half_up(value: float, digits: int) -> float:
    """Round to a number of decimals with halves going up (0.125 -> 0.13).

    Scaling happens in binary floating point, so 1.005 (stored as 1.00499...)
    rounds to 1.0. Only meant for non-negative values.
    """
    factor = 10**digits
    scaled = value * factor
    if not math.isfinite(scaled):
        return value
    return math.floor(scaled + 0.5) / factor


def compute_roi(revenue: float | int | str | None, time_taken: float | int | str | None) -> float:
    """Compute return on investment as revenue per unit of time.

    Args:
        revenue: Revenue amount (number or numeric text)
        time_taken: Time spent (number or numeric text)

    Returns:
        revenue / time_taken rounded half-up to 2 decimals, or 0 for degenerate input
        (non-numeric, non-finite, time_taken <= 0, revenue < 0)
    """
    rev = parse_number(revenue)
    time = parse_number(time_taken)

    if not (math.isfinite(rev) and math.isfinite(time)):
        return 0.0
    if time <= 0 or rev < 0:
        return 0.0

    roi = round_half_up(rev / time, 2)
    # Huge revenue over a tiny time can still overflow
    return roi if math.isfinite(roi) else 0.0


def format_roi(value: float) -> str:
    """Format ROI for display, using a placeholder for non-finite values."""
    if not math.isfinite(value):
        return ROI_PLACEHOLDER
    return f"{value:.2f}"


def format_currency(amount: float) -> str:
    """Format an amount as whole US dollars, e.g. 50000 -> "$50,000"."""
    if not math.isfinite(amount):
        return ROI_PLACEHOLDER
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.0f}"


def performance_grade(average_roi: float) -> str:
    """Map an average ROI onto a letter grade."""
    for lower_bound, grade in GRADE_THRESHOLDS:
        if average_roi >= lower_bound:
            return grade
    return LOWEST_GRADE


def compute_summary(tasks: Iterable[Task]) -> TaskSummary:
    """Derive aggregate metrics for a collection of tasks.

    Tasks with a zero ROI are left out of the average rather than counted as
    zero. Total revenue covers every task.

    Args:
        tasks: Tasks to summarize

    Returns:
        TaskSummary for the collection
    """
    items = list(tasks)
    total_tasks = len(items)
    completed_tasks = sum(1 for t in items if t.status == Status.COMPLETED)
    total_revenue = sum((t.revenue for t in items), 0.0)

    valid_rois = [t.roi for t in items if t.roi > 0]
    average_roi = sum(valid_rois) / len(valid_rois) if valid_rois else 0.0

    efficiency = completed_tasks / total_tasks * 100 if total_tasks else 0.0

    return TaskSummary(
        total_tasks=total_tasks,
        completed_tasks=completed_tasks,
        total_revenue=total_revenue,
        average_roi=round_half_up(average_roi, 2),
        efficiency=round_half_up(efficiency, 1),
        performance_grade=performance_grade(average_roi),
    )
