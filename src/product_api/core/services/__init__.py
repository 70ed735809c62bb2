"""Core services exports."""

from .database.db_session import DbSessionService
from .execution import (
    DelayedExecution,
    ExecutionModeManager,
    ExecutionStrategy,
    ImmediateExecution,
    ModeStatus,
)
from .product_service import ProductService

__all__ = [
    # Database Service
    "DbSessionService",
    # Execution mode
    "DelayedExecution",
    "ExecutionModeManager",
    "ExecutionStrategy",
    "ImmediateExecution",
    "ModeStatus",
    # Product Service
    "ProductService",
]
