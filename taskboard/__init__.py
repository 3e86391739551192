"""Taskboard: personal task management API with real-time updates."""

__version__ = "1.0.0"
