"""Configuration loading and validation for the Gemini chat TUI."""

from __future__ import annotations

from copy import deepcopy
import logging
import os
from pathlib import Path
import re
from typing import Any
from urllib.parse import urlparse

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from .exceptions import ConfigValidationError

import tomllib  # stdlib since Python 3.11 (project requires >=3.11)

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "gemini-chat"
CONFIG_PATH = CONFIG_DIR / "config.toml"

API_KEY_ENV_VAR = "GEMINI_API_KEY"

HEX_COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")
MODEL_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _required_string(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("Expected a string value.")
    normalized = value.strip()
    if not normalized:
        raise ValueError("String value must not be empty.")
    return normalized


class AppConfig(BaseModel):
    """Application metadata."""

    title: str = "Gemini Chat"

    @field_validator("title", mode="before")
    @classmethod
    def _validate_non_empty_string(cls, value: Any) -> str:
        return _required_string(value)


class GeminiConfig(BaseModel):
    """Generation endpoint, model, and credential."""

    api_key: str = ""
    model: str = "gemini-1.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout: int = Field(default=60, ge=1, le=3600)

    @field_validator("api_key", mode="before")
    @classmethod
    def _normalize_api_key(cls, value: Any) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ValueError("api_key must be a string.")
        return value.strip()

    @field_validator("model", mode="before")
    @classmethod
    def _validate_model(cls, value: Any) -> str:
        normalized = _required_string(value)
        if not MODEL_NAME_PATTERN.match(normalized):
            raise ValueError(f"Invalid model name {normalized!r}.")
        return normalized

    @field_validator("base_url", mode="before")
    @classmethod
    def _validate_base_url(cls, value: Any) -> str:
        normalized = _required_string(value).rstrip("/")
        parsed = urlparse(normalized)
        if parsed.scheme.lower() not in {"http", "https"}:
            raise ValueError("gemini.base_url must use http or https scheme.")
        if not parsed.hostname:
            raise ValueError("gemini.base_url must include a hostname.")
        return normalized


class AttachmentsConfig(BaseModel):
    """Limits applied when a file is staged for the next turn."""

    max_bytes: int = Field(default=10 * 1024 * 1024, ge=1, le=100 * 1024 * 1024)
    allowed_media_prefixes: list[str] = Field(default_factory=lambda: ["image/"])

    @field_validator("allowed_media_prefixes", mode="before")
    @classmethod
    def _validate_prefixes(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("allowed_media_prefixes must be a list.")
        normalized: list[str] = []
        for item in value:
            if not isinstance(item, str):
                raise ValueError("allowed_media_prefixes entries must be strings.")
            candidate = item.strip().lower()
            if candidate and candidate not in normalized:
                normalized.append(candidate)
        return normalized


class UIConfig(BaseModel):
    """Visual settings for Textual rendering."""

    background_color: str = "#1a1b26"
    user_message_color: str = "#7aa2f7"
    assistant_message_color: str = "#9ece6a"
    error_message_color: str = "#ff0000"
    border_color: str = "#565f89"
    show_timestamps: bool = True
    placeholder_text: str = "Message..."

    @field_validator(
        "background_color",
        "user_message_color",
        "assistant_message_color",
        "error_message_color",
        "border_color",
        mode="before",
    )
    @classmethod
    def _validate_hex_color(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Expected a string value.")
        normalized = value.strip()
        if not HEX_COLOR_PATTERN.match(normalized):
            raise ValueError("Color must use #RGB or #RRGGBB format.")
        return normalized


class KeybindsConfig(BaseModel):
    """Keyboard action mapping."""

    send_message: str = "ctrl+enter"
    attach_file: str = "ctrl+o"
    cancel_attachment: str = "ctrl+x"
    clear_input: str = "ctrl+u"
    quit: str = "ctrl+q"

    @field_validator("*", mode="before")
    @classmethod
    def _validate_keybind(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Keybind must be a string.")
        normalized = value.strip()
        if not normalized:
            raise ValueError("Keybind must not be empty.")
        return normalized


class LoggingConfig(BaseModel):
    """Logging behavior and output destinations."""

    level: str = "INFO"
    structured: bool = True
    log_to_file: bool = False
    log_file_path: str = "~/.local/state/gemini-chat/app.log"

    @field_validator("level", mode="before")
    @classmethod
    def _validate_level(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Logging level must be a string.")
        normalized = value.strip().upper()
        if normalized not in VALID_LOG_LEVELS:
            raise ValueError(f"Unsupported log level {normalized!r}.")
        return normalized

    @field_validator("log_file_path", mode="before")
    @classmethod
    def _validate_log_file_path(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("log_file_path must be a string.")
        normalized = value.strip()
        if not normalized:
            raise ValueError("log_file_path must not be empty.")
        return normalized


class Config(BaseModel):
    """Root configuration model for all sections."""

    model_config = ConfigDict(populate_by_name=True)
    app: AppConfig = AppConfig()
    gemini: GeminiConfig = GeminiConfig()
    attachments: AttachmentsConfig = AttachmentsConfig()
    ui: UIConfig = UIConfig()
    keybinds: KeybindsConfig = KeybindsConfig()
    logging: LoggingConfig = LoggingConfig()


DEFAULT_CONFIG: dict[str, dict[str, Any]] = Config().model_dump(by_alias=True)


def ensure_config_dir(config_dir: Path | None = None) -> Path:
    """Ensure that the config directory exists and return its path."""
    directory = config_dir or CONFIG_DIR
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        LOGGER.warning("Unable to create config directory %s: %s", directory, exc)
    return directory


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override values onto base values."""
    merged: dict[str, Any] = deepcopy(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _enforce_private_permissions(path: Path) -> None:
    """Best-effort enforcement of private file permissions on POSIX systems."""
    if os.name != "posix" or not path.exists():
        return
    try:
        path.chmod(0o600)
    except OSError as exc:
        LOGGER.warning("Unable to enforce 0600 permissions for %s: %s", path, exc)


def _safe_default_config() -> dict[str, dict[str, Any]]:
    """Return a deep copy of validated default config data."""
    return deepcopy(DEFAULT_CONFIG)


SECTION_MODELS: dict[str, type[BaseModel]] = {
    "app": AppConfig,
    "gemini": GeminiConfig,
    "attachments": AttachmentsConfig,
    "ui": UIConfig,
    "keybinds": KeybindsConfig,
    "logging": LoggingConfig,
}


def _salvage_sections(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Keep every section that validates on its own; default the rest."""
    salvaged = _safe_default_config()
    for name, model in SECTION_MODELS.items():
        try:
            section = model.model_validate(raw.get(name, {}))
        except ValidationError as exc:
            LOGGER.warning("Invalid [%s] section, using its defaults: %s", name, exc)
            continue
        salvaged[name] = section.model_dump(by_alias=True)
    return salvaged


def _validate_config(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Validate merged config, falling back to defaults per invalid section."""
    try:
        config = Config.model_validate(raw)
        return config.model_dump(by_alias=True)
    except ValidationError:
        return _salvage_sections(raw)
    except Exception as exc:  # noqa: BLE001 - unexpected model construction failure.
        raise ConfigValidationError(f"Unable to validate configuration: {exc}") from exc


def _apply_environment(config: dict[str, dict[str, Any]]) -> dict[str, dict[str, Any]]:
    """Let the API key environment variable override the configured key."""
    env_key = os.environ.get(API_KEY_ENV_VAR, "").strip()
    if env_key:
        config["gemini"]["api_key"] = env_key
    return config


def load_config(config_path: Path | None = None) -> dict[str, dict[str, Any]]:
    """
    Load configuration from TOML, merge with defaults, and validate.

    The optional ``config_path`` argument is intended for tests and tooling.
    ``GEMINI_API_KEY`` takes precedence over ``gemini.api_key``.
    """
    target_path = config_path or CONFIG_PATH
    ensure_config_dir(target_path.parent)

    raw_data: dict[str, Any] = {}
    if target_path.exists():
        _enforce_private_permissions(target_path)
        try:
            raw_data = tomllib.loads(target_path.read_text(encoding="utf-8"))
        except (
            Exception
        ) as exc:  # noqa: BLE001 - we must not crash on invalid user config.
            LOGGER.warning("Failed to parse config at %s: %s", target_path, exc)
            raw_data = {}

    merged = (
        _deep_merge(DEFAULT_CONFIG, raw_data)
        if isinstance(raw_data, dict)
        else _safe_default_config()
    )
    return _apply_environment(_validate_config(merged))
