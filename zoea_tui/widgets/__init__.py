"""Widget exports for the zoea dashboard UI."""

from .conversation_log import ConversationLog
from .dashboard import SwarmDashboard
from .focus_header import FocusHeader
from .hint_bar import HintBar
from .message_input import MessageInput

__all__ = ["ConversationLog", "FocusHeader", "HintBar", "MessageInput", "SwarmDashboard"]
