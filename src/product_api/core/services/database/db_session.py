"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from src.product_api.runtime.config.config_data import ConfigData
from src.product_api.runtime.context import get_config


class DbSessionService:
    def __init__(self, config: ConfigData | None = None):
        """Initialize the shared database engine and session factory."""

        main_config = config or get_config()
        db_config = main_config.database

        logger.info(
            "Configuring database engine for environment: {}",
            main_config.app.environment,
        )
        engine_kwargs = {
            "echo": db_config.echo,
            "echo_pool": False,
            "connect_args": self._get_connect_args(main_config),
        }

        if db_config.is_in_memory:
            # One shared connection, otherwise every checkout sees an empty database
            engine_kwargs["poolclass"] = StaticPool
        elif not db_config.is_sqlite:
            engine_kwargs.update(
                {
                    "pool_size": db_config.pool_size,
                    "max_overflow": db_config.max_overflow,
                    "pool_timeout": db_config.pool_timeout,
                    "pool_recycle": db_config.pool_recycle,
                    "pool_pre_ping": True,
                }
            )

        self._engine = create_engine(db_config.url, **engine_kwargs)

        if main_config.app.environment == "production":
            logger.info(
                "Database engine initialized",
                pool_size=db_config.pool_size,
                max_overflow=db_config.max_overflow,
                pool_timeout=db_config.pool_timeout,
                pool_recycle=db_config.pool_recycle,
            )

    @property
    def engine(self):
        return self._engine

    def _get_connect_args(self, config: ConfigData) -> dict:
        """Get database-specific connection arguments."""
        connect_args = {}

        if config.database.is_sqlite:
            connect_args.update(
                {
                    # Sessions are handed to worker threads on the delayed path
                    "check_same_thread": False,
                    "timeout": 20,
                }
            )

            if config.app.environment == "production":
                logger.warning(
                    "SQLite is not recommended for production use. "
                    "Consider PostgreSQL for better performance and reliability."
                )

        elif "postgresql" in config.database.url:
            connect_args.update(
                {
                    "application_name": f"{config.app.environment}_product_api",
                    "connect_timeout": 30,
                }
            )

        return connect_args

    def create_all(self) -> None:
        """Create all database tables."""
        from src.product_api.entities.service.product import ProductTable  # noqa: F401

        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(
            self._engine,
            expire_on_commit=False,
            autoflush=True,
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Yield a session, rolling back and logging on failure."""
        db = self.get_session()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                "Database transaction failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except SQLAlchemyError as e:
            logger.error(
                "Database health check failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False

    def get_pool_status(self) -> dict:
        """Get current connection pool status for monitoring."""
        pool = self._engine.pool

        def _metric(name: str) -> int:
            value = getattr(pool, name, 0)
            return value() if callable(value) else value

        return {
            "class": type(pool).__name__,
            "size": _metric("size"),
            "checked_in": _metric("checkedin"),
            "checked_out": _metric("checkedout"),
            "overflow": _metric("overflow"),
        }

    def dispose(self) -> None:
        self._engine.dispose()
