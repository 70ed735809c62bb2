"""Execution mode switch and the strategies it selects between."""

from .mode import ExecutionModeManager, ModeStatus
from .strategies import DelayedExecution, ExecutionStrategy, ImmediateExecution

__all__ = [
    "DelayedExecution",
    "ExecutionModeManager",
    "ExecutionStrategy",
    "ImmediateExecution",
    "ModeStatus",
]
