"""Active configuration for the current execution context.

The configuration loaded from ``config.yaml`` at import time is the default.
``with_context`` layers a partial ``ConfigData`` on top of it for the duration
of a block (tests use it to shrink delays or swap the database URL), and
``set_config`` replaces it outright.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path

from pydantic import BaseModel

from src.product_api.runtime.config.config_data import ConfigData
from src.product_api.runtime.config.config_template import load_templated_yaml
from src.product_api.runtime.settings import EnvironmentVariables

_env = EnvironmentVariables()

_active_config: ContextVar[ConfigData] = ContextVar(
    "active_config",
    default=load_templated_yaml(Path(_env.config_file), env_mode=_env.environment),
)


def get_config() -> ConfigData:
    """Return the configuration active in the current context."""
    return _active_config.get()


def set_config(config: ConfigData) -> None:
    """Replace the configuration of the current context."""
    _active_config.set(config)


def _explicit_fields(model: BaseModel) -> dict:
    """Dump only the fields that were set when ``model`` was built.

    Nested models contribute only their own explicitly set fields, so
    ``ConfigData(execution=ExecutionConfig(item_delay_ms=0))`` overrides the
    item delay alone and keeps the other execution settings.
    """
    fields = {}
    for name in type(model).model_fields:
        value = getattr(model, name)
        if isinstance(value, BaseModel):
            nested = _explicit_fields(value)
            if nested:
                fields[name] = nested
            elif name in model.model_fields_set:
                fields[name] = value.model_dump()
        elif name in model.model_fields_set:
            fields[name] = value
    return fields


def _overlay(base: dict, override: dict) -> dict:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _overlay(merged[key], value)
        else:
            merged[key] = value
    return merged


def merge_config(base: ConfigData, override: ConfigData) -> ConfigData:
    """Return ``base`` with the explicitly set fields of ``override`` applied."""
    merged = _overlay(base.model_dump(), _explicit_fields(override))
    return ConfigData.model_validate(merged)


@contextmanager
def with_context(config_override: ConfigData | None = None) -> Iterator[None]:
    """Apply ``config_override`` on top of the active configuration within a block.

    Example:
        with with_context(ConfigData(execution=ExecutionConfig(operation_delay_ms=0))):
            assert get_config().execution.operation_delay_ms == 0
    """
    if config_override is None:
        yield
        return

    if not isinstance(config_override, ConfigData):
        raise ValueError(
            f"config_override must be ConfigData or None, got {type(config_override)}"
        )

    token = _active_config.set(merge_config(get_config(), config_override))
    try:
        yield
    finally:
        _active_config.reset(token)
