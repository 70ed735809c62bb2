"""Loguru setup for the product service.

Every record carries a ``request_id`` (``-`` outside a request) so that the
service's ``<op> - async mode enabled`` lines can be tied to the request that
triggered them. Records from stdlib loggers (uvicorn, SQLAlchemy) are routed
through loguru; uvicorn's access log is dropped because the request logging
middleware already reports every request with its status and duration.
"""

import logging
import sys
from pathlib import Path

from loguru import logger

from src.product_api.runtime.config.config_data import ConfigData, LoggingConfig
from src.product_api.runtime.context import get_config

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "[<cyan>{extra[request_id]}</cyan>] | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# SQL echo and pool chatter stay out of the request log unless they are problems
STDLIB_LEVELS = {
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
    "uvicorn": logging.INFO,
}

DROPPED_LOGGERS = frozenset({"uvicorn.access"})


class InterceptHandler(logging.Handler):
    """Forward stdlib ``logging`` records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        if record.name in DROPPED_LOGGERS:
            return

        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(depth=2, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def _add_file_sink(cfg: LoggingConfig, debug_traces: bool) -> None:
    path = Path(cfg.file)
    path.parent.mkdir(parents=True, exist_ok=True)
    as_json = cfg.format == "json"
    logger.add(
        str(path),
        level=cfg.level,
        format="{message}" if as_json else CONSOLE_FORMAT,
        serialize=as_json,
        rotation=f"{cfg.max_size_mb} MB",
        retention=cfg.backup_count,
        compression="zip",
        enqueue=True,
        backtrace=debug_traces,
        diagnose=debug_traces,
    )


def _route_stdlib_logging() -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # Libraries that attached their own handlers now propagate to the root
    for name in list(logging.root.manager.loggerDict):
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = []
        stdlib_logger.propagate = True

    for name, level in STDLIB_LEVELS.items():
        logging.getLogger(name).setLevel(level)


def configure_logging(config: ConfigData | None = None) -> None:
    """Install loguru sinks for ``config`` (the active configuration by default).

    Safe to call repeatedly: existing sinks are removed first, which is how
    each application instance built by ``create_app`` applies its own level.
    """
    config = config or get_config()
    cfg = config.logging
    environment = config.app.environment
    # Variable values in tracebacks can expose data, keep them out of production
    debug_traces = environment != "production"

    logger.remove()
    logger.configure(
        extra={"request_id": "-"},
        patcher=lambda record: record["extra"].setdefault("request_id", "-"),
    )

    logger.add(
        sys.stderr,
        level=cfg.level,
        format=CONSOLE_FORMAT,
        colorize=True,
        backtrace=debug_traces,
        diagnose=debug_traces,
    )
    if cfg.file:
        _add_file_sink(cfg, debug_traces)

    _route_stdlib_logging()

    logger.info(
        "Logging configured",
        log_level=cfg.level,
        log_format=cfg.format,
        log_file=cfg.file,
        environment=environment,
    )
