"""Configuration loading and validation for the Selecty consultation TUI."""

from __future__ import annotations

from copy import deepcopy
import logging
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .exceptions import ConfigValidationError

import tomllib  # stdlib since Python 3.11 (project requires >=3.11)

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "selecty"
CONFIG_PATH = CONFIG_DIR / "config.toml"

VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}

DEFAULT_REPLY_TEXT = "スタイリストからの返信をお待ちください。"


def _require_text(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("Expected a string value.")
    normalized = value.strip()
    if not normalized:
        raise ValueError("String value must not be empty.")
    return normalized


class AppConfig(BaseModel):
    """Application metadata."""

    title: str = "Selecty"

    @field_validator("title", mode="before")
    @classmethod
    def _validate_non_empty_string(cls, value: Any) -> str:
        return _require_text(value)


class ChatConfig(BaseModel):
    """Simulated reply behaviour for consultation chats."""

    reply_delay_seconds: float = Field(default=1.0, ge=0.0, le=600.0)
    reply_text: str = DEFAULT_REPLY_TEXT
    show_timestamps: bool = True

    @field_validator("reply_text", mode="before")
    @classmethod
    def _validate_reply_text(cls, value: Any) -> str:
        return _require_text(value)


class CameraConfig(BaseModel):
    """Camera backend and capture surface settings."""

    backend: str = "ffmpeg"
    device: str = "/dev/video0"
    input_format: str = "v4l2"
    ffmpeg_path: str = "ffmpeg"
    source_width: int = Field(default=640, ge=16, le=7680)
    source_height: int = Field(default=480, ge=16, le=4320)
    width: int = Field(default=640, ge=16, le=7680)
    height: int = Field(default=480, ge=16, le=4320)
    jpeg_quality: int = Field(default=85, ge=1, le=95)
    start_timeout_seconds: float = Field(default=5.0, gt=0.0, le=120.0)

    @field_validator("backend", mode="before")
    @classmethod
    def _validate_backend(cls, value: Any) -> str:
        normalized = _require_text(value).lower()
        if normalized not in {"ffmpeg", "none"}:
            raise ValueError("camera.backend must be 'ffmpeg' or 'none'.")
        return normalized

    @field_validator("device", "input_format", "ffmpeg_path", mode="before")
    @classmethod
    def _validate_required_string(cls, value: Any) -> str:
        return _require_text(value)


class AttachmentsConfig(BaseModel):
    """Limits applied to images imported from local storage."""

    max_image_bytes: int = Field(default=10 * 1024 * 1024, ge=1024, le=200 * 1024 * 1024)
    max_image_pixels: int = Field(default=40_000_000, ge=1, le=170_000_000)
    jpeg_quality: int = Field(default=85, ge=1, le=95)


class KeybindsConfig(BaseModel):
    """Keyboard action mapping."""

    send_message: str = "ctrl+enter"
    toggle_attachments: str = "ctrl+o"
    go_back: str = "escape"
    quit: str = "ctrl+q"

    @field_validator("*", mode="before")
    @classmethod
    def _validate_keybind(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Keybind must be a string.")
        return value.strip()


class LoggingConfig(BaseModel):
    """Logging behavior and output destinations."""

    level: str = "INFO"
    structured: bool = True
    log_to_file: bool = False
    log_file_path: str = "~/.local/state/selecty/app.log"

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
        return _require_text(value)


class ProviderConfig(BaseModel):
    """A stylist listed in the provider directory."""

    id: int = Field(ge=1)
    name: str
    is_online: bool = False
    photo_url: str = ""
    introduction: str = ""
    specialty: str = ""
    rating: float = Field(default=0.0, ge=0.0, le=5.0)

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: Any) -> str:
        return _require_text(value)


DEFAULT_PROVIDERS: list[dict[str, Any]] = [
    {
        "id": 1,
        "name": "山田花子",
        "is_online": True,
        "photo_url": "yamada_hanako.jpg",
        "introduction": "10年のスタイリスト経験があります。カジュアルからフォーマルまで幅広くアドバイスできます。",
        "specialty": "カジュアル",
        "rating": 4.8,
    },
    {
        "id": 2,
        "name": "鈴木一郎",
        "is_online": False,
        "photo_url": "suzuki_ichiro.jpg",
        "introduction": "メンズファッションが得意です。トレンドを押さえたコーディネートをご提案します。",
        "specialty": "メンズ",
        "rating": 4.5,
    },
]


class Config(BaseModel):
    """Root configuration model for all sections."""

    model_config = ConfigDict(populate_by_name=True)
    app: AppConfig = AppConfig()
    chat: ChatConfig = ChatConfig()
    camera: CameraConfig = CameraConfig()
    attachments: AttachmentsConfig = AttachmentsConfig()
    keybinds: KeybindsConfig = KeybindsConfig()
    logging: LoggingConfig = LoggingConfig()
    providers: list[ProviderConfig] = Field(
        default_factory=lambda: [ProviderConfig(**item) for item in DEFAULT_PROVIDERS]
    )

    @model_validator(mode="after")
    def _validate_unique_provider_ids(self) -> Config:
        seen: set[int] = set()
        for provider in self.providers:
            if provider.id in seen:
                raise ValueError(f"Duplicate provider id {provider.id}.")
            seen.add(provider.id)
        return self


DEFAULT_CONFIG: dict[str, Any] = Config().model_dump(by_alias=True)


def ensure_config_dir(config_dir: Path | None = None) -> Path:
    """Ensure that the config directory exists and return its path."""
    directory = config_dir or CONFIG_DIR
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        LOGGER.warning("Unable to create config directory %s: %s", directory, exc)
    return directory


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override values onto base values.

    Lists (such as ``providers``) are replaced wholesale.
    """
    merged: dict[str, Any] = deepcopy(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _safe_default_config() -> dict[str, Any]:
    """Return a deep copy of validated default config data."""
    return deepcopy(DEFAULT_CONFIG)


def _validate_config(raw: dict[str, Any]) -> dict[str, Any]:
    """Validate merged config and fallback to safe defaults when possible."""
    try:
        config = Config.model_validate(raw)
        return config.model_dump(by_alias=True)
    except ValidationError as exc:
        LOGGER.warning("Configuration validation failed, using safe defaults: %s", exc)
        return _safe_default_config()
    except Exception as exc:  # noqa: BLE001 - unexpected model construction failure.
        raise ConfigValidationError(f"Unable to validate configuration: {exc}") from exc


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """
    Load configuration from TOML, merge with defaults, and validate.

    The optional ``config_path`` argument is intended for tests and tooling.
    """
    target_path = config_path or CONFIG_PATH
    ensure_config_dir(target_path.parent)

    raw_data: dict[str, Any] = {}
    if target_path.exists():
        try:
            raw_data = tomllib.loads(target_path.read_text(encoding="utf-8"))
        except (tomllib.TOMLDecodeError, OSError, UnicodeDecodeError) as exc:
            LOGGER.warning("Failed to parse config at %s: %s", target_path, exc)
            raw_data = {}

    merged = (
        _deep_merge(DEFAULT_CONFIG, raw_data)
        if isinstance(raw_data, dict)
        else _safe_default_config()
    )
    return _validate_config(merged)
