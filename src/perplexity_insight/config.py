"""Server configuration — credential, endpoint, limits and tool defaults.

Resolved from an optional YAML file, overlaid by environment variables.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal, get_args

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from perplexity_insight import __version__
from perplexity_insight.errors import ConfigError, MissingApiKeyError
from perplexity_insight.upstream.client import DEFAULT_ENDPOINT

API_KEY_ENV = "PERPLEXITY_API_KEY"

# Environment variable -> dotted config key
_ENV_OVERRIDES: dict[str, str] = {
    API_KEY_ENV: "api_key",
    "PERPLEXITY_API_ENDPOINT": "api_endpoint",
    "PERPLEXITY_TIMEOUT": "request_timeout",
    "PERPLEXITY_LOG_LEVEL": "log_level",
}

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LOG_LEVELS: tuple[str, ...] = get_args(LogLevel)

DEFAULT_MODELS = ("sonar-reasoning", "sonar-pro", "sonar-deep-research")
DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant. Ensure all of your outputs are in UK English only."
)


class RateLimitConfig(BaseModel):
    """Outbound call budget."""

    per_minute: int = Field(default=60, ge=1)
    per_day: int = Field(default=10_000, ge=1)


class ToolDefaults(BaseModel):
    """Defaults advertised in the tool schemas and applied to omitted arguments."""

    models: list[str] = Field(default_factory=lambda: list(DEFAULT_MODELS), min_length=1)
    default_model: str = DEFAULT_MODELS[0]
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    max_tokens: int = Field(default=1000, ge=1)

    @model_validator(mode="after")
    def _default_model_is_listed(self) -> ToolDefaults:
        if self.default_model not in self.models:
            msg = f"default_model '{self.default_model}' is not one of {self.models}"
            raise ValueError(msg)
        return self


class ServerConfig(BaseModel):
    """Top-level configuration for ``perplexity-insight serve``."""

    api_key: str = Field(min_length=1)
    api_endpoint: str = DEFAULT_ENDPOINT
    server_name: str = "perplexity-insight"
    server_version: str = __version__
    request_timeout: float = Field(default=60.0, gt=0)
    log_level: LogLevel = "INFO"
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    tools: ToolDefaults = Field(default_factory=ToolDefaults)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


def load_config(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ServerConfig:
    """Build a :class:`ServerConfig` from *path* and the environment.

    ``${VAR}`` references in the YAML file are expanded before parsing.
    Environment variables listed in ``_ENV_OVERRIDES`` win over file values.

    Raises:
        MissingApiKeyError: No API key is set.
        ConfigError: The file is unreadable or invalid.
    """
    env = os.environ if environ is None else environ
    data: dict[str, Any] = _read_file(path) if path is not None else {}

    for var, key in _ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            data[key] = value

    if not data.get("api_key"):
        raise MissingApiKeyError(f"{API_KEY_ENV} environment variable is required")

    try:
        return ServerConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def load_tool_defaults(path: Path | None = None) -> ToolDefaults:
    """Read only the ``tools`` section of *path*; no API key is needed."""
    data = _read_file(path) if path is not None else {}
    try:
        return ToolDefaults.model_validate(data.get("tools") or {})
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def _read_file(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc

    try:
        data: Any = yaml.safe_load(os.path.expandvars(raw))
    except yaml.YAMLError as exc:
        raise ConfigError(f"YAML parse error: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Config YAML must be a mapping")
    return data
