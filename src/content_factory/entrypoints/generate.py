from __future__ import annotations

import json
from pathlib import Path

import typer

from content_factory.domain.models import AssetBundle, ProcessingStatus
from content_factory.dossier import render_dossier
from content_factory.transcript_input import TranscriptInputError, load_transcript_file
from content_factory.workbench_state import Workbench, WorkbenchState, build_workbench


def _echo_status(state: WorkbenchState) -> None:
    typer.echo(f"Status: {state.status.value}", err=True)


def run_generate(
    *,
    transcript: Path,
    output: Path | None,
    dossier: Path | None,
    dry_run: bool,
    delay_seconds: float,
    workbench: Workbench | None = None,
) -> None:
    try:
        text = load_transcript_file(transcript)
    except TranscriptInputError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    workbench = workbench or build_workbench(
        dry_run=dry_run,
        analyze_delay_seconds=delay_seconds,
        on_change=_echo_status,
    )
    state = workbench.generate(text)
    if state.status != ProcessingStatus.COMPLETE or state.bundle is None:
        typer.echo(f"Error: {state.error}", err=True)
        raise typer.Exit(code=1)

    bundle = state.bundle
    if output is not None:
        _write_text(output, bundle.to_json() + "\n")
        typer.echo(f"Assets: {output}", err=True)
    if dossier is not None:
        _write_text(dossier, render_dossier(bundle) + "\n")
        typer.echo(f"Dossier: {dossier}", err=True)
    if output is None and dossier is None:
        typer.echo(render_dossier(bundle))


def run_dossier(*, bundle_path: Path) -> None:
    try:
        bundle = AssetBundle.model_validate(json.loads(bundle_path.read_text(encoding="utf-8")))
    except (OSError, ValueError) as exc:
        typer.echo(f"Error: could not load asset bundle from {bundle_path}: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(render_dossier(bundle))


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
