"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from src.product_api.api.http.app_data import ApplicationDependencies
from src.product_api.core.services import (
    DbSessionService,
    ExecutionModeManager,
    ProductService,
)
from src.product_api.entities.service.product import ProductRepository


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    """Get the application-wide dependencies built at startup."""
    return request.app.state.app_dependencies


def get_database_service(request: Request) -> DbSessionService:
    """Get the database service instance."""
    return get_app_dependencies(request).database_service


def get_db_session(
    database_service: DbSessionService = Depends(get_database_service),
) -> Iterator[Session]:
    """Yield a database session scoped to the request."""
    with database_service.session_scope() as session:
        yield session


def get_execution_mode(request: Request) -> ExecutionModeManager:
    """Get the shared execution mode manager."""
    return get_app_dependencies(request).execution_mode


def get_product_repository(
    session: Session = Depends(get_db_session),
) -> ProductRepository:
    return ProductRepository(session)


def get_product_service(
    request: Request,
    repository: ProductRepository = Depends(get_product_repository),
    mode: ExecutionModeManager = Depends(get_execution_mode),
) -> ProductService:
    """Build the product service around the request's repository."""
    app_deps = get_app_dependencies(request)
    return ProductService(
        repository,
        mode,
        delayed=app_deps.delayed_execution,
        immediate=app_deps.immediate_execution,
    )
