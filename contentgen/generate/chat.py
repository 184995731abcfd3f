"""Context-bound chat sessions.

A session owns an append-only transcript that starts with a system turn
embedding the article. Every turn resends the whole transcript; a failed turn
leaves the transcript exactly as it was.
"""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Dict, List

from contentgen.errors import SessionNotFound
from .prompts import build_chat_system_prompt
from .types import ChatMessage, ChatReply, Message

logger = logging.getLogger(__name__)


class ChatSession:
    def __init__(self, topic: str, context: str, model_client):
        self.topic = topic
        self.model_client = model_client
        self._transcript: List[Message] = [
            Message(role="system", content=build_chat_system_prompt(topic, context))
        ]

    @property
    def transcript(self) -> List[Message]:
        return list(self._transcript)

    def send_message(self, text: str) -> ChatReply:
        user_turn = Message(role="user", content=text)
        reply, _meta = self.model_client.generate([*self._transcript, user_turn])
        reply = reply or ""
        self._transcript.append(user_turn)
        self._transcript.append(Message(role="assistant", content=reply))
        return ChatReply(text=reply)

    def messages(self) -> List[ChatMessage]:
        """Display view: user/model turns without the system prompt."""
        return [
            ChatMessage(role="user" if m.role == "user" else "model", text=m.content)
            for m in self._transcript
            if m.role != "system"
        ]


def create_session(topic: str, context: str, model_client) -> ChatSession:
    return ChatSession(topic, context, model_client)


class SessionRegistry:
    """In-memory sessions keyed by id; nothing survives a restart."""

    def __init__(self):
        self._sessions: Dict[str, ChatSession] = {}
        self._lock = threading.Lock()

    def add(self, session: ChatSession) -> str:
        session_id = uuid.uuid4().hex
        with self._lock:
            self._sessions[session_id] = session
        logger.info("Chat session %s opened for '%s'", session_id, session.topic[:80])
        return session_id

    def get(self, session_id: str) -> ChatSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def remove(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFound(session_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
