from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from content_factory.config import ConfigError, load_model_config
from content_factory.domain.models import ChatMessage, ChatRole
from content_factory.errors import ChatError, ConfigurationError
from content_factory.gemini_api import Content, ContentModel, GeminiApiError, GenerationConfig, connect_gemini
from content_factory.prompting import (
    CHAT_ACKNOWLEDGEMENT,
    PromptRenderer,
    default_prompt_registry,
    render_chat_context_prompt,
)
from content_factory.transcript_input import load_transcript_text

EMPTY_REPLY_TEXT = "I couldn't generate a response."
SEND_ERROR_TEXT = "Error sending message. Please try again."


@dataclass
class ChatSession:
    """A transcript plus the append-only conversation about it.

    ``seed`` holds the two synthetic turns that hand the transcript to the model;
    they are resent with every request but are not part of ``history``.
    ``history`` is what the user sees, including fallback and error turns.
    Only exchanges the model actually answered are resent as context.
    """

    transcript: str
    seed: tuple[ChatMessage, ChatMessage]
    _history: list[ChatMessage] = field(default_factory=list, repr=False)
    _context: list[ChatMessage] = field(default_factory=list, repr=False)

    @property
    def history(self) -> tuple[ChatMessage, ...]:
        return tuple(self._history)

    def append(self, role: ChatRole, text: str) -> ChatMessage:
        message = ChatMessage(role=role, text=text)
        self._history.append(message)
        return message

    def remember(self, question: str, answer: str) -> None:
        self._context.append(ChatMessage(role=ChatRole.user, text=question))
        self._context.append(ChatMessage(role=ChatRole.model, text=answer))

    def request_contents(self, message: str) -> list[Content]:
        turns = [Content(role=item.role.value, text=item.text) for item in (*self.seed, *self._context)]
        turns.append(Content(role=ChatRole.user.value, text=message))
        return turns


def _default_model_factory() -> ContentModel:
    try:
        model_config = load_model_config()
    except ConfigError as exc:
        raise ConfigurationError(str(exc)) from exc
    return connect_gemini(model_config=model_config)


class ChatSessionManager:
    def __init__(
        self,
        *,
        model: ContentModel | None = None,
        model_factory: Callable[[], ContentModel] | None = None,
        renderer: PromptRenderer | None = None,
    ) -> None:
        self._model = model
        self._owns_model = model is None
        self._model_factory = model_factory or _default_model_factory
        self._renderer = renderer or PromptRenderer(default_prompt_registry())

    def create_session(self, transcript: str) -> ChatSession:
        transcript = load_transcript_text(transcript)
        prompt = render_chat_context_prompt(renderer=self._renderer, transcript=transcript)
        seed = (
            ChatMessage(role=ChatRole.user, text=prompt.text),
            ChatMessage(role=ChatRole.model, text=CHAT_ACKNOWLEDGEMENT),
        )
        return ChatSession(transcript=transcript, seed=seed)

    def send_message(self, session: ChatSession, text: str) -> str:
        """Append *text* and the model's reply to the session; return the reply.

        On upstream failure the inline error turn is appended before
        :class:`ChatError` is raised, so the session stays usable.
        """
        if not text.strip():
            raise ChatError("Message must not be empty.")

        session.append(ChatRole.user, text)
        try:
            reply = self._model_or_connect().generate_text(session.request_contents(text), config=GenerationConfig())
        except (GeminiApiError, ConfigurationError) as exc:
            session.append(ChatRole.model, SEND_ERROR_TEXT)
            raise ChatError(str(exc), reply_text=SEND_ERROR_TEXT) from exc

        if not reply.strip():
            session.append(ChatRole.model, EMPTY_REPLY_TEXT)
            return EMPTY_REPLY_TEXT
        session.remember(text, reply)
        session.append(ChatRole.model, reply)
        return reply

    def _model_or_connect(self) -> ContentModel:
        if self._model is None:
            self._model = self._model_factory()
        return self._model

    def close(self) -> None:
        """Release a client this manager connected on its own."""
        if not self._owns_model or self._model is None:
            return
        close = getattr(self._model, "close", None)
        self._model = None
        if callable(close):
            close()
