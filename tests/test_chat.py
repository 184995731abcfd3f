# Chat sessions: append-only transcript, whole-history resend, no partial
# turns on failure.

import pytest

from contentgen.errors import ProviderHttpError, SessionNotFound
from contentgen.generate import ChatMessage, SessionRegistry, create_session

ARTICLE = "---\ntitle: 量子计算\ncover: covers/green.jpg\n---\n\n# 量子计算\n\n105 比特芯片发布。"


def test_session_starts_with_system_context(echo_client):
    session = create_session("量子计算", ARTICLE, echo_client)

    assert len(session.transcript) == 1
    system = session.transcript[0]
    assert system.role == "system"
    assert "量子计算" in system.content
    assert ARTICLE in system.content
    assert session.messages() == []


def test_each_turn_resends_whole_transcript(echo_client):
    session = create_session("量子计算", ARTICLE, echo_client)

    first = session.send_message("芯片有多少比特？")
    session.send_message("什么时候发布？")

    assert first.text == "[ECHO RESPONSE]\n芯片有多少比特？"
    assert [m.role for m in echo_client.calls[0]] == ["system", "user"]
    assert [m.role for m in echo_client.calls[1]] == ["system", "user", "assistant", "user"]
    assert len(session.transcript) == 5


def test_failed_turn_leaves_transcript_unchanged(echo_client, failing_client):
    session = create_session("量子计算", ARTICLE, echo_client)
    session.send_message("第一问")
    before = session.transcript

    session.model_client = failing_client
    with pytest.raises(ProviderHttpError):
        session.send_message("第二问")

    assert len(session.transcript) == len(before)
    assert session.transcript == before


def test_messages_view(echo_client):
    session = create_session("量子计算", ARTICLE, echo_client)
    session.send_message("你好")
    assert session.messages() == [
        ChatMessage(role="user", text="你好"),
        ChatMessage(role="model", text="[ECHO RESPONSE]\n你好"),
    ]


def test_transcript_copy_is_detached(echo_client):
    session = create_session("t", "c", echo_client)
    session.transcript.clear()
    assert len(session.transcript) == 1


def test_registry_lifecycle(echo_client):
    registry = SessionRegistry()
    session = create_session("t", "c", echo_client)

    session_id = registry.add(session)
    assert registry.get(session_id) is session
    assert len(registry) == 1

    registry.remove(session_id)
    assert len(registry) == 0
    with pytest.raises(SessionNotFound):
        registry.get(session_id)
    with pytest.raises(SessionNotFound):
        registry.remove(session_id)
