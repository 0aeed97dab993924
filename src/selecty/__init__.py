"""Top-level package for the Selecty consultation chat."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .app import SelectyApp
    from .camera import MediaCaptureController
    from .config import ensure_config_dir, load_config
    from .exceptions import (
        CaptureAlreadyActiveError,
        CaptureUnavailableError,
        ConfigValidationError,
        EmptyMessageError,
        NoActiveStreamError,
        SelectyError,
        SessionClosedError,
        UnreadableFileError,
    )
    from .models import ImageRef, InputMode, Message, Provider, Sender
    from .replies import ReplySimulator
    from .service import ConsultationService
    from .session import ChatSession
    from .staging import AttachmentStagingArea
    from .timeline import MessageTimeline

__all__ = [
    "AttachmentStagingArea",
    "CaptureAlreadyActiveError",
    "CaptureUnavailableError",
    "ChatSession",
    "ConfigValidationError",
    "ConsultationService",
    "EmptyMessageError",
    "ImageRef",
    "InputMode",
    "MediaCaptureController",
    "Message",
    "MessageTimeline",
    "NoActiveStreamError",
    "Provider",
    "ReplySimulator",
    "SelectyApp",
    "SelectyError",
    "Sender",
    "SessionClosedError",
    "UnreadableFileError",
    "ensure_config_dir",
    "load_config",
]

_LAZY_MODULES: dict[str, str] = {
    "AttachmentStagingArea": ".staging",
    "ChatSession": ".session",
    "ConsultationService": ".service",
    "MediaCaptureController": ".camera",
    "MessageTimeline": ".timeline",
    "ReplySimulator": ".replies",
    "SelectyApp": ".app",
    "ensure_config_dir": ".config",
    "load_config": ".config",
    "ImageRef": ".models",
    "InputMode": ".models",
    "Message": ".models",
    "Provider": ".models",
    "Sender": ".models",
    "CaptureAlreadyActiveError": ".exceptions",
    "CaptureUnavailableError": ".exceptions",
    "ConfigValidationError": ".exceptions",
    "EmptyMessageError": ".exceptions",
    "NoActiveStreamError": ".exceptions",
    "SelectyError": ".exceptions",
    "SessionClosedError": ".exceptions",
    "UnreadableFileError": ".exceptions",
}


def __getattr__(name: str) -> Any:
    """Lazily import symbols to keep the Textual UI optional at import time."""
    module_name = _LAZY_MODULES.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    from importlib import import_module

    return getattr(import_module(module_name, __name__), name)
