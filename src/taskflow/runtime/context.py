from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from typing import TypeVar

from pydantic import BaseModel

from src.taskflow.runtime.config.config_data import ConfigData
from src.taskflow.runtime.config.config_template import load_default_config

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass
class AppContext:
    """Application-wide state visible to the current task or thread."""

    config: ConfigData


_app_context: ContextVar[AppContext] = ContextVar(
    "app_context", default=AppContext(config=load_default_config())
)


def get_context() -> AppContext:
    return _app_context.get()


def set_context(context: AppContext) -> Token[AppContext]:
    """Make ``context`` current; keep the token to restore the previous one."""
    return _app_context.set(context)


def reset_context(token: Token[AppContext]) -> None:
    _app_context.reset(token)


def _overlay(base: ModelT, override: ModelT) -> ModelT:
    """Copy of ``base`` with the explicitly set fields of ``override`` applied.

    Nested models are overlaid field by field. A nested model that was passed
    explicitly but has nothing set inside it replaces the base value whole.
    """
    updates = {}
    for name in type(override).model_fields:
        incoming = getattr(override, name)
        current = getattr(base, name)
        if isinstance(incoming, BaseModel) and isinstance(current, BaseModel):
            if incoming.model_fields_set:
                updates[name] = _overlay(current, incoming)
            elif name in override.model_fields_set:
                updates[name] = incoming
        elif name in override.model_fields_set:
            updates[name] = incoming
    return base.model_copy(update=updates)


@contextmanager
def bound_config(config: ConfigData) -> Iterator[ConfigData]:
    """Make ``config`` the whole current configuration for the block."""
    token = set_context(replace(get_context(), config=config))
    try:
        yield config
    finally:
        reset_context(token)


@contextmanager
def with_context(config_override: ConfigData | None = None):
    """Temporarily override parts of the current configuration.

    Only the fields explicitly set on ``config_override`` replace current
    values; everything else is inherited from the enclosing context.

    Example:
        override = ConfigData(telegram=TelegramConfig(bot_token="123:abc"))
        with with_context(override):
            assert get_config().telegram.bot_token == "123:abc"
    """
    if config_override is None:
        yield
        return

    if not isinstance(config_override, ConfigData):
        raise ValueError(
            f"config_override must be ConfigData, or None, got {type(config_override)}"
        )

    with bound_config(_overlay(get_config(), config_override)):
        yield


def get_config() -> ConfigData:
    return get_context().config
