"""Processing status state machine and the controller that drives it.

``transition`` is a pure function over immutable :class:`WorkbenchState`
values. :class:`Workbench` owns the current state plus the single live chat
session and is the only place that performs I/O.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

import typer

from content_factory.asset_generation import AssetGenerationClient
from content_factory.chat_session import ChatSession, ChatSessionManager
from content_factory.config import ModelConfig
from content_factory.domain.models import AssetBundle, ChatMessage, ProcessingStatus
from content_factory.errors import ChatError, ContentFactoryError, GenerationError
from content_factory.transcript_input import load_transcript_text

DEFAULT_ANALYZE_DELAY_SECONDS = 0.8
GENERIC_ERROR_MESSAGE = "An unexpected error occurred during processing."


class InvalidTransitionError(ContentFactoryError):
    pass


@dataclass(frozen=True)
class WorkbenchState:
    status: ProcessingStatus = ProcessingStatus.IDLE
    transcript: str | None = None
    bundle: AssetBundle | None = None
    error: str | None = None
    chat_history: tuple[ChatMessage, ...] = ()

    def to_json_data(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "bundle": self.bundle.to_wire() if self.bundle is not None else None,
            "error": self.error,
            "chat_history": [message.model_dump(mode="json") for message in self.chat_history],
            "has_transcript": self.transcript is not None,
        }


@dataclass(frozen=True)
class StartGeneration:
    transcript: str


@dataclass(frozen=True)
class GenerationStarted:
    pass


@dataclass(frozen=True)
class GenerationSucceeded:
    bundle: AssetBundle


@dataclass(frozen=True)
class GenerationFailed:
    message: str


@dataclass(frozen=True)
class ChatUpdated:
    history: tuple[ChatMessage, ...]


@dataclass(frozen=True)
class Reset:
    pass


Event = StartGeneration | GenerationStarted | GenerationSucceeded | GenerationFailed | ChatUpdated | Reset

_ALLOWED: dict[ProcessingStatus, frozenset[ProcessingStatus]] = {
    ProcessingStatus.IDLE: frozenset({ProcessingStatus.ANALYZING}),
    ProcessingStatus.ANALYZING: frozenset({ProcessingStatus.GENERATING, ProcessingStatus.ERROR}),
    ProcessingStatus.GENERATING: frozenset({ProcessingStatus.COMPLETE, ProcessingStatus.ERROR}),
    ProcessingStatus.COMPLETE: frozenset({ProcessingStatus.IDLE}),
    # Generating again from the error screen implies a reset.
    ProcessingStatus.ERROR: frozenset({ProcessingStatus.IDLE, ProcessingStatus.ANALYZING}),
}


def can_transition(current: ProcessingStatus, target: ProcessingStatus) -> bool:
    return target in _ALLOWED[current]


def transition(state: WorkbenchState, event: Event) -> WorkbenchState:
    if isinstance(event, ChatUpdated):
        if state.status != ProcessingStatus.COMPLETE:
            raise InvalidTransitionError(f"Chat is only available when COMPLETE, not {state.status.value}")
        return replace(state, chat_history=event.history)

    target = _target_status(event)
    if not can_transition(state.status, target):
        raise InvalidTransitionError(
            f"Cannot go from {state.status.value} to {target.value} on {type(event).__name__}",
        )

    if isinstance(event, StartGeneration):
        return WorkbenchState(status=target, transcript=event.transcript)
    if isinstance(event, GenerationStarted):
        return replace(state, status=target)
    if isinstance(event, GenerationSucceeded):
        return replace(state, status=target, bundle=event.bundle, error=None)
    if isinstance(event, GenerationFailed):
        return replace(state, status=target, bundle=None, error=event.message, chat_history=())
    return WorkbenchState()


def _target_status(event: Event) -> ProcessingStatus:
    if isinstance(event, StartGeneration):
        return ProcessingStatus.ANALYZING
    if isinstance(event, GenerationStarted):
        return ProcessingStatus.GENERATING
    if isinstance(event, GenerationSucceeded):
        return ProcessingStatus.COMPLETE
    if isinstance(event, GenerationFailed):
        return ProcessingStatus.ERROR
    if isinstance(event, Reset):
        return ProcessingStatus.IDLE
    raise TypeError(f"Unknown event: {event!r}")


class Workbench:
    """Runs one generation at a time and keeps the chat session it produced."""

    def __init__(
        self,
        *,
        generator: AssetGenerationClient,
        chat: ChatSessionManager,
        analyze_delay_seconds: float = DEFAULT_ANALYZE_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        on_change: Callable[[WorkbenchState], None] | None = None,
    ) -> None:
        self._generator = generator
        self._chat = chat
        self._analyze_delay_seconds = analyze_delay_seconds
        self._sleep = sleep
        self._on_change = on_change
        self._lock = threading.Lock()
        self._state = WorkbenchState()
        self._session: ChatSession | None = None

    @property
    def state(self) -> WorkbenchState:
        with self._lock:
            return self._state

    def begin(self, transcript: str) -> WorkbenchState:
        """Validate *transcript* and enter ANALYZING, discarding earlier results."""
        load_transcript_text(transcript)
        with self._lock:
            self._session = None
            self._state = state = transition(self._state, StartGeneration(transcript))
        return self._notify(state)

    def run(self) -> WorkbenchState:
        """Finish a generation started by :meth:`begin`."""
        with self._lock:
            transcript = self._state.transcript
            if self._state.status != ProcessingStatus.ANALYZING or transcript is None:
                raise InvalidTransitionError(f"No generation to run in {self._state.status.value}")

        if self._analyze_delay_seconds > 0:
            self._sleep(self._analyze_delay_seconds)
        self._apply(GenerationStarted())

        try:
            bundle = self._generator.generate(transcript)
            session = self._chat.create_session(transcript)
        except (GenerationError, ValueError) as exc:
            return self._apply(GenerationFailed(str(exc) or GENERIC_ERROR_MESSAGE))
        except Exception as exc:
            typer.echo(f"Unexpected generation failure: {exc!r}", err=True)
            return self._apply(GenerationFailed(GENERIC_ERROR_MESSAGE))

        with self._lock:
            self._session = session
            self._state = state = transition(self._state, GenerationSucceeded(bundle))
        return self._notify(state)

    def generate(self, transcript: str) -> WorkbenchState:
        self.begin(transcript)
        return self.run()

    def send_chat(self, text: str) -> str:
        """Send one chat message; upstream failures come back as the inline error text."""
        with self._lock:
            session = self._session
            if session is None or self._state.status != ProcessingStatus.COMPLETE:
                raise ChatError("No active chat session. Generate assets first.")

        try:
            reply = self._chat.send_message(session, text)
        except ChatError as exc:
            if exc.reply_text is None:
                raise
            reply = exc.reply_text

        with self._lock:
            if self._session is session:
                self._state = transition(self._state, ChatUpdated(session.history))
        return reply

    def reset(self) -> WorkbenchState:
        with self._lock:
            if self._state.status != ProcessingStatus.IDLE:
                self._state = transition(self._state, Reset())
            self._session = None
            state = self._state
        return self._notify(state)

    def _apply(self, event: Event) -> WorkbenchState:
        with self._lock:
            self._state = state = transition(self._state, event)
            if state.status == ProcessingStatus.ERROR:
                self._session = None
        return self._notify(state)

    def _notify(self, state: WorkbenchState) -> WorkbenchState:
        if self._on_change is not None:
            self._on_change(state)
        return state


def build_workbench(
    *,
    dry_run: bool = False,
    analyze_delay_seconds: float = DEFAULT_ANALYZE_DELAY_SECONDS,
    on_change: Callable[[WorkbenchState], None] | None = None,
) -> Workbench:
    """Wire a workbench to Gemini, or to the stub model when *dry_run* is set."""
    if dry_run:
        from content_factory.stub_model import StubContentModel

        stub = StubContentModel()
        return Workbench(
            generator=AssetGenerationClient(model=stub, model_config=ModelConfig(name="stub")),
            chat=ChatSessionManager(model=stub),
            analyze_delay_seconds=analyze_delay_seconds,
            on_change=on_change,
        )
    return Workbench(
        generator=AssetGenerationClient(),
        chat=ChatSessionManager(),
        analyze_delay_seconds=analyze_delay_seconds,
        on_change=on_change,
    )
