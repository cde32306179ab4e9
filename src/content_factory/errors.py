from __future__ import annotations


class ContentFactoryError(RuntimeError):
    pass


class GenerationError(ContentFactoryError):
    """Asset generation failed; no bundle was produced."""


class ConfigurationError(GenerationError):
    pass


class UpstreamError(GenerationError):
    pass


class EmptyResponseError(GenerationError):
    pass


class SchemaValidationError(GenerationError):
    pass


class ChatError(ContentFactoryError):
    def __init__(self, message: str, *, reply_text: str | None = None) -> None:
        super().__init__(message)
        self.reply_text = reply_text
