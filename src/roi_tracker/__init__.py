"""ROI Tracker: task tracking with per-task return on investment."""

__version__ = "0.1.0"
