"""Chat sessions, folders, and their display grouping."""

from healthyai.chat.grouping import SessionGroup, group_for_display
from healthyai.chat.models import ChatFolder, ChatSession, Message
from healthyai.chat.store import SessionStore, generate_title

__all__ = [
    "ChatFolder",
    "ChatSession",
    "Message",
    "SessionGroup",
    "SessionStore",
    "generate_title",
    "group_for_display",
]
