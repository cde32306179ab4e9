from __future__ import annotations

from collections.abc import Sequence

import pytest

from content_factory.chat_session import EMPTY_REPLY_TEXT, SEND_ERROR_TEXT, ChatSessionManager
from content_factory.domain.models import ChatRole
from content_factory.errors import ChatError, ConfigurationError
from content_factory.gemini_api import Content, GeminiApiError, GenerationConfig
from content_factory.prompting import CHAT_ACKNOWLEDGEMENT


class FakeContentModel:
    """Test double that returns scripted replies and records requests."""

    def __init__(self, replies: list[str | Exception]) -> None:
        self._replies = list(replies)
        self.requests: list[list[Content]] = []
        self.closed = False

    def generate_text(self, contents: Sequence[Content], *, config: GenerationConfig) -> str:
        self.requests.append(list(contents))
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def close(self) -> None:
        self.closed = True


def _five_hundred_words() -> str:
    sentence = "Host: today we unpack why sleep quality matters more than sleep quantity for recovery. "
    words: list[str] = []
    while len(words) < 500:
        words.extend(sentence.split())
    return " ".join(words[:500])


def test_session_is_seeded_with_transcript_and_acknowledgement() -> None:
    manager = ChatSessionManager(model=FakeContentModel([]))

    session = manager.create_session("Guest: hello there")

    assert session.history == ()
    user_seed, model_seed = session.seed
    assert user_seed.role == ChatRole.user
    assert user_seed.text.endswith("\n\nGuest: hello there\n")
    assert model_seed.role == ChatRole.model
    assert model_seed.text == CHAT_ACKNOWLEDGEMENT


def test_send_message_appends_one_exchange() -> None:
    model = FakeContentModel(["Sleep quality beats sleep quantity."])
    manager = ChatSessionManager(model=model)
    session = manager.create_session(_five_hundred_words())

    reply = manager.send_message(session, "Summarize in one sentence")

    assert reply == "Sleep quality beats sleep quantity."
    assert [(item.role, item.text) for item in session.history] == [
        (ChatRole.user, "Summarize in one sentence"),
        (ChatRole.model, "Sleep quality beats sleep quantity."),
    ]
    sent = model.requests[0]
    assert [item.role for item in sent] == ["user", "model", "user"]
    assert sent[-1].text == "Summarize in one sentence"


def test_follow_up_resends_prior_turns() -> None:
    model = FakeContentModel(["first", "second"])
    manager = ChatSessionManager(model=model)
    session = manager.create_session("Host: hi")

    manager.send_message(session, "one")
    manager.send_message(session, "two")

    assert [item.text for item in model.requests[1][2:]] == ["one", "first", "two"]
    assert len(session.history) == 4


def test_failed_send_is_not_resent_as_context() -> None:
    model = FakeContentModel([GeminiApiError("Gemini API request failed: offline"), "second"])
    manager = ChatSessionManager(model=model)
    session = manager.create_session("Host: hi")

    with pytest.raises(ChatError):
        manager.send_message(session, "q1")
    assert manager.send_message(session, "q2") == "second"

    assert [(item.role, item.text) for item in model.requests[1][2:]] == [("user", "q2")]
    assert [item.text for item in session.history] == ["q1", SEND_ERROR_TEXT, "q2", "second"]


def test_empty_reply_is_not_resent_as_context() -> None:
    model = FakeContentModel(["", "second"])
    manager = ChatSessionManager(model=model)
    session = manager.create_session("Host: hi")

    manager.send_message(session, "q1")
    manager.send_message(session, "q2")

    assert [item.text for item in model.requests[1][2:]] == ["q2"]
    assert [item.text for item in session.history] == ["q1", EMPTY_REPLY_TEXT, "q2", "second"]


def test_empty_reply_becomes_fallback_text() -> None:
    manager = ChatSessionManager(model=FakeContentModel(["  "]))
    session = manager.create_session("Host: hi")

    assert manager.send_message(session, "anything?") == EMPTY_REPLY_TEXT
    assert session.history[-1].text == EMPTY_REPLY_TEXT


def test_upstream_failure_appends_error_turn() -> None:
    manager = ChatSessionManager(model=FakeContentModel([GeminiApiError("Gemini API error (500): boom")]))
    session = manager.create_session("Host: hi")

    with pytest.raises(ChatError, match="boom") as excinfo:
        manager.send_message(session, "hello?")

    assert excinfo.value.reply_text == SEND_ERROR_TEXT
    assert [(item.role, item.text) for item in session.history] == [
        (ChatRole.user, "hello?"),
        (ChatRole.model, SEND_ERROR_TEXT),
    ]


def test_missing_credentials_surface_as_chat_error() -> None:
    def factory() -> FakeContentModel:
        raise ConfigurationError("API key not found in environment.")

    manager = ChatSessionManager(model_factory=factory)
    session = manager.create_session("Host: hi")

    with pytest.raises(ChatError, match="API key not found"):
        manager.send_message(session, "hello?")
    assert len(session.history) == 2


def test_empty_message_leaves_history_untouched() -> None:
    manager = ChatSessionManager(model=FakeContentModel([]))
    session = manager.create_session("Host: hi")

    with pytest.raises(ChatError, match="must not be empty"):
        manager.send_message(session, "   ")
    assert session.history == ()


def test_blank_transcript_cannot_start_a_session() -> None:
    manager = ChatSessionManager(model=FakeContentModel([]))

    with pytest.raises(ValueError, match="Please paste a transcript first."):
        manager.create_session("")


def test_close_only_releases_factory_built_clients() -> None:
    injected = FakeContentModel([])
    ChatSessionManager(model=injected).close()
    assert injected.closed is False

    built = FakeContentModel(["ok"])
    manager = ChatSessionManager(model_factory=lambda: built)
    manager.send_message(manager.create_session("Host: hi"), "hello")
    manager.close()
    assert built.closed is True
