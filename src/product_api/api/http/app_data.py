from dataclasses import dataclass

from src.product_api.core.services import (
    DbSessionService,
    ExecutionModeManager,
    ExecutionStrategy,
)


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    execution_mode: ExecutionModeManager
    delayed_execution: ExecutionStrategy
    immediate_execution: ExecutionStrategy
