"""Utility modules for the life dashboard."""

from . import task_tracker
