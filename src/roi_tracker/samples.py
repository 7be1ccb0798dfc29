"""Built-in sample tasks used to seed an empty store."""

from dataclasses import replace

from roi_tracker.models import Priority, Status, Task

SAMPLE_TASKS: tuple[Task, ...] = (
    Task(
        id="sample_1",
        title="Enterprise Client Proposal",
        description="Prepare and send proposal for Q1 enterprise deal",
        revenue=50000.0,
        time_taken=10.0,
        roi=5000.0,
        priority=Priority.HIGH,
        status=Status.IN_PROGRESS,
        notes="Decision expected by end of month",
        created_at="2024-01-15T10:00:00Z",
        updated_at="2024-01-15T10:00:00Z",
    ),
    Task(
        id="sample_2",
        title="Follow-up Call with Acme Corp",
        description="Schedule demo and discuss pricing",
        revenue=15000.0,
        time_taken=2.0,
        roi=7500.0,
        priority=Priority.HIGH,
        status=Status.PENDING,
        notes="Contact: John Smith, VP of Operations",
        created_at="2024-01-14T09:00:00Z",
        updated_at="2024-01-14T09:00:00Z",
    ),
    Task(
        id="sample_3",
        title="Renewal Discussion - TechStart",
        description="Annual contract renewal negotiation",
        revenue=25000.0,
        time_taken=5.0,
        roi=5000.0,
        priority=Priority.MEDIUM,
        status=Status.COMPLETED,
        notes="Upgraded to premium tier",
        created_at="2024-01-13T14:00:00Z",
        updated_at="2024-01-16T11:00:00Z",
    ),
    Task(
        id="sample_4",
        title="Cold Outreach Campaign",
        description="Email sequence for new prospects",
        revenue=8000.0,
        time_taken=8.0,
        roi=1000.0,
        priority=Priority.LOW,
        status=Status.PENDING,
        notes="Using new email templates",
        created_at="2024-01-12T08:00:00Z",
        updated_at="2024-01-12T08:00:00Z",
    ),
    Task(
        id="sample_5",
        title="Product Demo - GlobalTech",
        description="Live demonstration for technical team",
        revenue=35000.0,
        time_taken=3.0,
        roi=11666.67,
        priority=Priority.HIGH,
        status=Status.PENDING,
        notes="Include integration capabilities",
        created_at="2024-01-11T16:00:00Z",
        updated_at="2024-01-11T16:00:00Z",
    ),
)


def sample_tasks() -> list[Task]:
    """Return fresh copies of the sample tasks."""
    return [replace(task) for task in SAMPLE_TASKS]
