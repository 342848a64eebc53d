"""WASP chat -- a REPL that talks to a locally built WASM agent.

Quick usage::

    from wasp.chat import ChatSession, ConversationHistory

    session = ChatSession(history=ConversationHistory())
    await session.run_interactive()
"""

from wasp.chat.build_output import filter_build_messages
from wasp.chat.history import ConversationHistory, Message
from wasp.chat.response import (
    NativeResponse,
    OpaqueResponse,
    OpenAIResponse,
    ParsedResponse,
    format_response,
    parse_response,
)
from wasp.chat.runner import BuildInvoker, BuildOutput, ShellBuildInvoker
from wasp.chat.session import ChatSession, SessionState

__all__ = [
    "BuildInvoker",
    "BuildOutput",
    "ChatSession",
    "ConversationHistory",
    "Message",
    "NativeResponse",
    "OpaqueResponse",
    "OpenAIResponse",
    "ParsedResponse",
    "SessionState",
    "ShellBuildInvoker",
    "filter_build_messages",
    "format_response",
    "parse_response",
]
