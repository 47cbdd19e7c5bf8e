"""Tool settings: where templates live and where the tool config file is."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
import yaml
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.errors import SetupError

logger = logging.getLogger(__name__)

APP_NAME = "utsusu"
DEFAULT_CONFIG_FILE = "config.yml"
DEFAULT_TEMPLATES_DIR = "templates"


def app_dir() -> Path:
    return Path(typer.get_app_dir(APP_NAME))


def default_config_file() -> Path:
    return app_dir() / DEFAULT_CONFIG_FILE


def default_templates_dir() -> Path:
    return app_dir() / DEFAULT_TEMPLATES_DIR


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="UTSUSU_", case_sensitive=False)

    config_file: Path | None = None
    templates_dir: Path | None = None
    no_input: bool = False


def load_settings() -> Settings:
    """Load settings from the environment.

    Raises:
        SetupError: If an environment variable holds an invalid value
    """
    try:
        return Settings()
    except ValidationError as exc:
        raise SetupError(f"Invalid UTSUSU_* environment settings: {exc}") from exc


class ToolConfig(BaseModel):
    """Contents of the tool's own ``config.yml``."""

    model_config = ConfigDict(extra="forbid")

    templates_dir: Path | None = None


def load_tool_config(path: Path) -> ToolConfig:
    """Load the tool config file; a missing file yields the empty config.

    Raises:
        SetupError: If the file exists but cannot be read or is invalid
    """
    if not path.exists():
        logger.debug(f"No tool config file at {path}")
        return ToolConfig()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        raise SetupError(f"Cannot read tool config file '{path}': {exc}") from exc

    if not isinstance(data, dict):
        raise SetupError(f"Tool config file '{path}' must contain a mapping")

    try:
        return ToolConfig.model_validate(data)
    except ValidationError as exc:
        raise SetupError(f"Invalid tool config file '{path}': {exc}") from exc


def resolve_templates_dir(
    flag: Path | None, settings: Settings, tool_config: ToolConfig, config_file: Path
) -> Path:
    """Pick the templates directory: flag, then environment, then tool config, then default.

    A relative path in the tool config is taken relative to the config file.
    """
    if flag is not None:
        return flag
    if settings.templates_dir is not None:
        return settings.templates_dir
    if tool_config.templates_dir is not None:
        return config_file.parent / tool_config.templates_dir.expanduser()
    return default_templates_dir()
