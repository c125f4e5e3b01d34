"""Configuration management for exterror."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from exterror.errors import CONFIG_001, CONFIG_002, ExtErrorFailure

DEFAULT_CONFIG_FILENAME = "exterror.yaml"

logger = logging.getLogger(__name__)


class ConfigError(ExtErrorFailure):
    code = CONFIG_001


class StackConfig(BaseModel):
    buffer_size: int = Field(default=4096, gt=0)


class LoggingConfig(BaseModel):
    logger_name: str = "exterror"
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "ERROR"
    log_on_create: bool = False

    @property
    def level_number(self) -> int:
        return logging.getLevelName(self.level)


class TemplateConfig(BaseModel):
    path: Path | None = None  # None = use the built-in report template
    indent: str = "    "


class ExtErrorConfig(BaseModel):
    stack: StackConfig = Field(default_factory=StackConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    template: TemplateConfig = Field(default_factory=TemplateConfig)


def load_config(config_path: Path | None = None, overrides: dict[str, Any] | None = None) -> ExtErrorConfig:
    resolved_path = _resolve_config_path(config_path)
    base_dir = resolved_path.parent if resolved_path else Path.cwd()
    data: dict[str, Any] = {}
    if resolved_path is not None:
        data = _load_yaml(resolved_path)
        logger.debug("Loaded exterror config from %s", resolved_path)
    if overrides:
        data = _deep_update(data, overrides)
    config = ExtErrorConfig.model_validate(data)
    return _resolve_template_path(config, base_dir)


def serialize_config(config: ExtErrorConfig) -> dict[str, Any]:
    return config.model_dump(mode="json")


_active_config: ExtErrorConfig | None = None
_config_lock = threading.Lock()


def get_config() -> ExtErrorConfig:
    """Return the process-wide configuration, loading it on first use.

    An unusable config file is logged and replaced by the defaults, so errors
    can always be constructed.
    """
    global _active_config
    if _active_config is None:
        with _config_lock:
            if _active_config is None:
                try:
                    _active_config = load_config()
                except (ConfigError, ValidationError) as exc:
                    logger.warning("Ignoring unusable exterror config, using defaults: %s", exc)
                    _active_config = ExtErrorConfig()
    return _active_config


def configure(config: ExtErrorConfig) -> None:
    """Replace the process-wide configuration.

    Meant to be called once during application start-up. The default report
    template is rebuilt lazily from the new settings.
    """
    global _active_config
    from exterror.rendering import reset_default_template

    with _config_lock:
        _active_config = config
    reset_default_template()


def _resolve_config_path(config_path: Path | None) -> Path | None:
    if config_path is not None:
        if not config_path.exists():
            raise ConfigError("Config file not found", code=CONFIG_002, path=config_path)
        return config_path
    default_path = Path.cwd() / DEFAULT_CONFIG_FILENAME
    return default_path if default_path.exists() else None


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError("Failed to read config file", path=path) from exc
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigError("Invalid YAML in config file", path=path) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Config file must define a mapping", path=path)
    return data


def _deep_update(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_update(merged[key], value)
        else:
            merged[key] = value
    return merged


def _resolve_template_path(config: ExtErrorConfig, base_dir: Path) -> ExtErrorConfig:
    template_path = config.template.path
    if template_path is None or template_path.is_absolute():
        return config
    template = config.template.model_copy(update={"path": (base_dir / template_path).resolve()})
    return config.model_copy(update={"template": template})
