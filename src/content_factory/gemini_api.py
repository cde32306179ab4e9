from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import httpx

from content_factory.config import API_KEY_ENV_VARS, ModelConfig, resolve_api_key
from content_factory.errors import ConfigurationError


class GeminiApiError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class Content:
    role: str
    text: str

    def to_json_data(self) -> dict[str, Any]:
        return {"role": self.role, "parts": [{"text": self.text}]}


@dataclass(frozen=True)
class GenerationConfig:
    temperature: float | None = None
    response_mime_type: str | None = None
    response_schema: Mapping[str, Any] | None = None

    def to_json_data(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.temperature is not None:
            data["temperature"] = self.temperature
        if self.response_mime_type is not None:
            data["responseMimeType"] = self.response_mime_type
        if self.response_schema is not None:
            data["responseSchema"] = dict(self.response_schema)
        return data


@runtime_checkable
class ContentModel(Protocol):
    """Anything that turns a conversation into the model's reply text."""

    def generate_text(self, contents: Sequence[Content], *, config: GenerationConfig) -> str: ...


class GeminiClient:
    def __init__(
        self,
        *,
        api_key: str,
        model: ModelConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._model = model
        self._client = httpx.Client(
            headers={"x-goog-api-key": api_key},
            timeout=model.timeout_seconds,
            follow_redirects=True,
            transport=transport,
        )

    @property
    def model_name(self) -> str:
        return self._model.name

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> GeminiClient:
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    def generate_text(self, contents: Sequence[Content], *, config: GenerationConfig) -> str:
        """Call ``generateContent`` and return the text of the first candidate.

        An empty string means the call succeeded but the model produced no text.
        """
        url = f"{self._model.base_url.rstrip('/')}/models/{self._model.name}:generateContent"
        body: dict[str, Any] = {"contents": [item.to_json_data() for item in contents]}
        generation_config = config.to_json_data()
        if generation_config:
            body["generationConfig"] = generation_config
        payload = _request_json(self._client, "POST", url, json=body)
        return extract_candidate_text(payload)


def extract_candidate_text(payload: Mapping[str, Any]) -> str:
    candidates = payload.get("candidates")
    if not isinstance(candidates, Sequence) or isinstance(candidates, (str, bytes)) or not candidates:
        return ""
    first = candidates[0]
    if not isinstance(first, Mapping):
        return ""
    content = first.get("content")
    if not isinstance(content, Mapping):
        return ""
    parts = content.get("parts")
    if not isinstance(parts, Sequence) or isinstance(parts, (str, bytes)):
        return ""
    texts = [part["text"] for part in parts if isinstance(part, Mapping) and isinstance(part.get("text"), str)]
    return "".join(texts)


def _request_json(client: httpx.Client, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
    try:
        response = client.request(method, url, **kwargs)
    except httpx.TimeoutException as exc:
        raise GeminiApiError(f"Gemini API request timed out: {exc}") from exc
    except httpx.RequestError as exc:
        raise GeminiApiError(f"Gemini API request failed: {exc}") from exc

    try:
        payload = response.json()
    except ValueError as exc:
        raise GeminiApiError(
            f"Gemini API returned invalid JSON (status {response.status_code}).",
            status_code=response.status_code,
        ) from exc

    if response.status_code >= 400:
        message = _extract_error_message(payload) or f"HTTP {response.status_code}"
        raise GeminiApiError(
            f"Gemini API error ({response.status_code}): {message}",
            status_code=response.status_code,
        )
    if not isinstance(payload, Mapping):
        raise GeminiApiError("Gemini API returned a non-object response.", status_code=response.status_code)

    feedback = payload.get("promptFeedback")
    if isinstance(feedback, Mapping) and isinstance(feedback.get("blockReason"), str):
        raise GeminiApiError(
            f"Gemini API blocked the prompt: {feedback['blockReason']}",
            status_code=response.status_code,
        )
    return dict(payload)


def _extract_error_message(payload: object) -> str | None:
    if not isinstance(payload, Mapping):
        return None
    error = payload.get("error")
    if isinstance(error, Mapping):
        message = error.get("message")
        if isinstance(message, str) and message.strip():
            status = error.get("status")
            if isinstance(status, str) and status.strip():
                return f"{message.strip()} [{status.strip()}]"
            return message.strip()
    for key in ("error", "message", "detail"):
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def connect_gemini(
    *,
    model_config: ModelConfig,
    transport: httpx.BaseTransport | None = None,
) -> GeminiClient:
    """Build a client from the API key in the environment.

    Raises :class:`ConfigurationError` before any network access when no key is set.
    """
    api_key = resolve_api_key()
    if api_key is None:
        names = " or ".join(API_KEY_ENV_VARS)
        raise ConfigurationError(f"API key not found in environment. Make sure {names} is set.")
    return GeminiClient(api_key=api_key, model=model_config, transport=transport)
