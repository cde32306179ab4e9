from pathlib import Path
from typing import Annotated

import typer

app = typer.Typer(add_completion=False)


@app.command()
def version() -> None:
    """Print version."""
    from content_factory import __version__

    typer.echo(__version__)


@app.command()
def generate(
    *,
    transcript: Annotated[
        Path,
        typer.Option(
            exists=True,
            dir_okay=False,
            help="Transcript file (SRT, VTT or plain text, at most 10MB).",
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(help="Write the asset bundle JSON here."),
    ] = None,
    dossier: Annotated[
        Path | None,
        typer.Option(help="Write the project dossier markdown here."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(help="Use the built-in stub model (no Gemini API key or network required)."),
    ] = False,
    delay: Annotated[
        float,
        typer.Option(min=0.0, help="Seconds to stay in ANALYZING before generating."),
    ] = 0.8,
) -> None:
    """Generate the full content asset bundle for one transcript."""
    from content_factory.entrypoints.generate import run_generate

    run_generate(
        transcript=transcript,
        output=output,
        dossier=dossier,
        dry_run=dry_run,
        delay_seconds=delay,
    )


@app.command()
def chat(
    *,
    transcript: Annotated[
        Path,
        typer.Option(
            exists=True,
            dir_okay=False,
            help="Transcript file the conversation is grounded on.",
        ),
    ],
    message: Annotated[
        list[str] | None,
        typer.Option(
            "--message",
            "-m",
            help="Question to ask (repeatable). Without any, chat interactively.",
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(help="Use the built-in stub model (no Gemini API key or network required)."),
    ] = False,
) -> None:
    """Ask questions about an episode transcript."""
    from content_factory.entrypoints.chat import run_chat

    run_chat(transcript=transcript, messages=message or [], dry_run=dry_run)


@app.command()
def dossier(
    *,
    bundle: Annotated[
        Path,
        typer.Option(
            exists=True,
            dir_okay=False,
            help="Asset bundle JSON written by `generate --output`.",
        ),
    ],
) -> None:
    """Render a saved asset bundle as the project dossier."""
    from content_factory.entrypoints.generate import run_dossier

    run_dossier(bundle_path=bundle)


@app.command()
def web(
    *,
    dry_run: Annotated[
        bool,
        typer.Option(help="Use the built-in stub model (no Gemini API key or network required)."),
    ] = False,
    open_browser: Annotated[
        bool,
        typer.Option("--open-browser/--no-browser", help="Open the workbench in a browser."),
    ] = True,
) -> None:
    """Serve the interactive workbench on a local port."""
    from content_factory.entrypoints.workbench_web import run_workbench_web

    run_workbench_web(dry_run=dry_run, open_browser=open_browser)


def main() -> None:
    app()
