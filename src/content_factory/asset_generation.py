from __future__ import annotations

import json
import re
from typing import Any

import typer
from pydantic import ValidationError

from content_factory.asset_schema import asset_bundle_response_schema, required_fields
from content_factory.config import ConfigError, ModelConfig, load_model_config
from content_factory.domain.models import AssetBundle
from content_factory.errors import (
    ConfigurationError,
    EmptyResponseError,
    SchemaValidationError,
    UpstreamError,
)
from content_factory.gemini_api import Content, ContentModel, GeminiApiError, GenerationConfig, connect_gemini
from content_factory.prompting import PromptRenderer, default_prompt_registry, render_asset_bundle_prompt
from content_factory.transcript_input import has_timecodes, load_transcript_text

_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*\n(?P<body>.*)\n```\s*$", re.DOTALL)


class AssetGenerationClient:
    """One blocking, schema-constrained request per transcript.

    When no *model* is injected, a Gemini client is built for each call from the
    API key in the environment and the YAML model config.
    """

    def __init__(
        self,
        *,
        model: ContentModel | None = None,
        model_config: ModelConfig | None = None,
        renderer: PromptRenderer | None = None,
    ) -> None:
        self._model = model
        self._model_config = model_config
        self._renderer = renderer or PromptRenderer(default_prompt_registry())

    def generate(self, transcript: str) -> AssetBundle:
        transcript = load_transcript_text(transcript)
        model_config = self._resolve_model_config()
        prompt = render_asset_bundle_prompt(renderer=self._renderer, transcript=transcript)
        contents = [Content(role="user", text=prompt.text)]
        config = GenerationConfig(
            temperature=model_config.temperature,
            response_mime_type="application/json",
            response_schema=asset_bundle_response_schema(),
        )

        typer.echo(f"  Generating assets with {model_config.name} ({prompt.prompt_id})...", err=True)
        if self._model is not None:
            text = _call_model(self._model, contents, config)
        else:
            with connect_gemini(model_config=model_config) as client:
                text = _call_model(client, contents, config)

        bundle = parse_asset_bundle(text)
        verify_timestamps(bundle, transcript)
        return bundle

    def _resolve_model_config(self) -> ModelConfig:
        if self._model_config is not None:
            return self._model_config
        try:
            return load_model_config()
        except ConfigError as exc:
            raise ConfigurationError(str(exc)) from exc


def _call_model(model: ContentModel, contents: list[Content], config: GenerationConfig) -> str:
    try:
        return model.generate_text(contents, config=config)
    except GeminiApiError as exc:
        raise UpstreamError(str(exc)) from exc


def parse_asset_bundle(text: str | None) -> AssetBundle:
    """Parse the model's JSON reply into a bundle, or fail without a partial result."""
    if text is None or not text.strip():
        raise EmptyResponseError("No response generated from Gemini.")

    raw = text.strip()
    fenced = _CODE_FENCE_RE.match(raw)
    if fenced:
        raw = fenced.group("body")
    try:
        payload: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SchemaValidationError("Failed to parse generated assets.") from exc
    if not isinstance(payload, dict):
        raise SchemaValidationError("Failed to parse generated assets: expected a JSON object.")

    missing = [key for key in required_fields() if key not in payload]
    if missing:
        raise SchemaValidationError(f"Generated assets are missing required fields: {', '.join(missing)}")

    try:
        return AssetBundle.model_validate(payload)
    except ValidationError as exc:
        raise SchemaValidationError(f"Generated assets failed validation: {_summarize(exc)}") from exc


def verify_timestamps(bundle: AssetBundle, transcript: str) -> None:
    """Reject timestamps that do not appear verbatim in the transcript."""
    if not bundle.timestamps:
        return
    if not has_timecodes(transcript):
        raise SchemaValidationError(
            "Generated timestamps, but the transcript contains no timecodes.",
        )
    invented = [item.time for item in bundle.timestamps if item.time.strip() not in transcript]
    if invented:
        raise SchemaValidationError(
            f"Generated timestamps not found in the transcript: {', '.join(invented)}",
        )


def _summarize(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors()[:5]:
        location = ".".join(str(item) for item in error["loc"]) or "<root>"
        parts.append(f"{location}: {error['msg']}")
    if exc.error_count() > 5:
        parts.append(f"... {exc.error_count() - 5} more")
    return "; ".join(parts)
