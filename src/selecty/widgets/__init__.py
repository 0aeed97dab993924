"""Widget exports for the selecty UI."""

from .attachment_panel import AttachmentPanel
from .conversation import ConversationView
from .input_box import InputBox
from .message import MessageBubble
from .provider_card import ProviderCard

__all__ = ["AttachmentPanel", "ConversationView", "InputBox", "MessageBubble", "ProviderCard"]
