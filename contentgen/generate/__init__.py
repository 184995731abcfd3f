# Generator package

# Makes generate/ importable and exposes key interfaces.

from .chat import ChatSession, SessionRegistry, create_session
from .generator import ArticleGenerator
from .prompts import build_system_instruction, get_style_constraint
from .types import ArticleData, ChatMessage, ChatReply, GenerationOptions, Message
from .clients.echo_dev_client import EchoDevClient

__all__ = [
    "ArticleData",
    "ArticleGenerator",
    "ChatMessage",
    "ChatReply",
    "ChatSession",
    "EchoDevClient",
    "GenerationOptions",
    "Message",
    "SessionRegistry",
    "build_system_instruction",
    "create_session",
    "get_style_constraint",
]
