from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import typer

from content_factory.chat_session import ChatSession, ChatSessionManager
from content_factory.errors import ChatError
from content_factory.transcript_input import TranscriptInputError, load_transcript_file

_EXIT_WORDS = frozenset({"exit", "quit", ":q"})


def run_chat(
    *,
    transcript: Path,
    messages: Sequence[str],
    dry_run: bool,
    manager: ChatSessionManager | None = None,
) -> None:
    """Answer *messages* about the transcript, or chat interactively when none are given."""
    try:
        text = load_transcript_file(transcript)
    except TranscriptInputError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if manager is None:
        if dry_run:
            from content_factory.stub_model import StubContentModel

            manager = ChatSessionManager(model=StubContentModel())
        else:
            manager = ChatSessionManager()

    session = manager.create_session(text)
    failures = 0
    try:
        if messages:
            for message in messages:
                failures += _exchange(manager, session, message)
        else:
            failures = _interactive(manager, session)
    finally:
        manager.close()

    if failures:
        raise typer.Exit(code=1)


def _interactive(manager: ChatSessionManager, session: ChatSession) -> int:
    typer.echo("Ask about the episode. Submit an empty line or 'exit' to quit.", err=True)
    failures = 0
    while True:
        message = typer.prompt("You", default="", show_default=False)
        if not message.strip() or message.strip().lower() in _EXIT_WORDS:
            return failures
        failures += _exchange(manager, session, message)


def _exchange(manager: ChatSessionManager, session: ChatSession, message: str) -> int:
    typer.echo(f"You: {message}")
    try:
        reply = manager.send_message(session, message)
    except ChatError as exc:
        typer.echo(f"Model: {exc.reply_text or exc}")
        typer.echo(f"Error: {exc}", err=True)
        return 1
    typer.echo(f"Model: {reply}")
    return 0
