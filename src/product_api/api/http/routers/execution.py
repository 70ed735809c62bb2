"""Runtime control of the delayed (async-simulated) execution path."""

from fastapi import APIRouter, Depends

from src.product_api.api.http.deps import get_execution_mode
from src.product_api.core.services import ExecutionModeManager, ModeStatus

router = APIRouter(prefix="/coroutines", tags=["execution"])


@router.get("", response_model=ModeStatus)
async def get_execution_status(
    mode: ExecutionModeManager = Depends(get_execution_mode),
) -> ModeStatus:
    """Return the current execution mode."""
    return mode.status()


@router.post("/enable", response_model=ModeStatus)
async def enable_delayed_execution(
    mode: ExecutionModeManager = Depends(get_execution_mode),
) -> ModeStatus:
    """Route product operations through the delayed path."""
    return mode.enable()


@router.post("/disable", response_model=ModeStatus)
async def disable_delayed_execution(
    mode: ExecutionModeManager = Depends(get_execution_mode),
) -> ModeStatus:
    """Run product operations inline, without simulated latency."""
    return mode.disable()
