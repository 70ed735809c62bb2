from __future__ import annotations

from collections.abc import Iterator
from decimal import Decimal

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from src.product_api.core.services import (
    DelayedExecution,
    ExecutionModeManager,
    ImmediateExecution,
    ProductService,
)
from src.product_api.entities.service.product import Product, ProductRepository
from src.product_api.runtime.config.config_data import (
    AppConfig,
    ConfigData,
    DatabaseConfig,
    ExecutionConfig,
    LoggingConfig,
)

OPERATION_DELAY = 0.02
ITEM_DELAY = 0.01


@pytest.fixture
def session() -> Iterator[Session]:
    """Create a fresh in-memory database session for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Register the table with the metadata before creating it
    from src.product_api.entities.service.product import ProductTable  # noqa: F401

    SQLModel.metadata.create_all(engine)

    with Session(engine, expire_on_commit=False) as session:
        try:
            yield session
        finally:
            session.rollback()
            session.close()
            engine.dispose()


@pytest.fixture
def product_repository(session: Session) -> ProductRepository:
    return ProductRepository(session)


@pytest.fixture
def execution_mode() -> ExecutionModeManager:
    return ExecutionModeManager(enabled=True)


@pytest.fixture
def delayed_execution() -> DelayedExecution:
    return DelayedExecution(operation_delay=OPERATION_DELAY, item_delay=ITEM_DELAY)


@pytest.fixture
def immediate_execution() -> ImmediateExecution:
    return ImmediateExecution()


@pytest.fixture
def product_service(
    product_repository: ProductRepository,
    execution_mode: ExecutionModeManager,
    delayed_execution: DelayedExecution,
    immediate_execution: ImmediateExecution,
) -> ProductService:
    return ProductService(
        product_repository,
        execution_mode,
        delayed=delayed_execution,
        immediate=immediate_execution,
    )


@pytest.fixture
def sample_product() -> Product:
    return Product(name="Tablet", description="Android tablet", price=Decimal("299.99"))


@pytest.fixture
def test_config() -> ConfigData:
    return ConfigData(
        app=AppConfig(environment="test"),
        logging=LoggingConfig(level="WARNING", file=None),
        database=DatabaseConfig(url="sqlite://"),
        execution=ExecutionConfig(
            enabled_by_default=True,
            operation_delay_ms=int(OPERATION_DELAY * 1000),
            item_delay_ms=int(ITEM_DELAY * 1000),
        ),
    )


@pytest.fixture
def app(test_config: ConfigData) -> FastAPI:
    from src.product_api.api.http.app import create_app

    return create_app(test_config)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """Test client running the application lifespan against an in-memory store."""
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
