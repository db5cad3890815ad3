"""Time Tracking: a single-user desktop time tracker."""

__version__ = "0.1.0"
