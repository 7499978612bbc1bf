"""Configuration template substitution utilities."""

import os
import re
from collections.abc import Mapping
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.taskflow.runtime.config.config_data import ConfigData

_PLACEHOLDER_RE = re.compile(r"\$\{(?P<name>[^}:]+)(?:(?P<op>:-|:\?)(?P<arg>[^}]*))?\}")


def substitute_env_vars(text: str, environ: Mapping[str, str] | None = None) -> str:
    """Fill ``${VAR}``, ``${VAR:-default}`` and ``${VAR:?message}`` placeholders.

    Values come from ``environ`` (default: ``os.environ``).

    Raises:
        ValueError: a required variable is unset
    """
    env = os.environ if environ is None else environ

    def resolve(match: re.Match[str]) -> str:
        name, op, arg = match.group("name", "op", "arg")
        value = env.get(name)
        if value is not None:
            return value
        if op == ":-":
            return arg
        if op == ":?":
            raise ValueError(f"Required environment variable {name}: {arg}")
        raise ValueError(f"Required environment variable {name} not set")

    return _PLACEHOLDER_RE.sub(resolve, text)


def parse_config_text(text: str, environ: Mapping[str, str] | None = None) -> ConfigData:
    """Substitute placeholders in YAML text and validate its ``config`` section."""
    try:
        document = yaml.safe_load(substitute_env_vars(text, environ))
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e
    if not isinstance(document, dict):
        raise ValueError("Configuration must be a YAML mapping")

    try:
        return ConfigData(**(document.get("config") or {}))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e


def environment_with_overrides(env_mode: str) -> dict[str, str]:
    """``os.environ`` with ``<ENV_MODE>_X`` variables shadowing ``X``."""
    prefix = f"{env_mode.upper()}_"
    environ = dict(os.environ)
    for name, value in os.environ.items():
        if name.startswith(prefix) and len(name) > len(prefix):
            environ[name[len(prefix):]] = value
            logger.debug("{} overridden by {}", name[len(prefix):], name)
    return environ


def load_templated_yaml(file_path: Path) -> ConfigData:
    """Load a YAML configuration file, filling placeholders from the environment.

    Variables prefixed with the upper-cased ``APP_ENVIRONMENT`` (for example
    ``PRODUCTION_JWT_SECRET``) take precedence over their unprefixed names.

    Raises:
        ValueError: a required variable is unset or the file is invalid
        FileNotFoundError: the file does not exist
    """
    env_mode = os.getenv("APP_ENVIRONMENT", "development")
    logger.info("Loading configuration for environment: {}", env_mode)
    return parse_config_text(file_path.read_text(), environment_with_overrides(env_mode))


def load_default_config() -> ConfigData:
    """Load ``config.yaml`` (or ``$TASKFLOW_CONFIG``), falling back to defaults."""
    config_path = Path(os.getenv("TASKFLOW_CONFIG", "config.yaml"))
    if not config_path.exists():
        logger.warning("{} not found; using built-in configuration defaults", config_path)
        return ConfigData()
    return load_templated_yaml(config_path)
