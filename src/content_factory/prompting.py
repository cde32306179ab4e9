from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from hashlib import sha256


@dataclass(frozen=True)
class PromptTemplate:
    name: str
    template: str
    description: str | None = None


@dataclass(frozen=True)
class PromptRenderResult:
    prompt_id: str
    template: str
    text: str
    context: dict[str, str]


class PromptRegistry:
    def __init__(self, templates: Sequence[PromptTemplate]) -> None:
        self._templates = {template.name: template for template in templates}

    def get(self, name: str) -> PromptTemplate:
        if name not in self._templates:
            raise KeyError(f"Unknown prompt template: {name}")
        return self._templates[name]


class PromptRenderer:
    def __init__(self, registry: PromptRegistry) -> None:
        self._registry = registry

    def render(self, *, name: str, context: Mapping[str, str]) -> PromptRenderResult:
        template = self._registry.get(name)
        context_str = {key: str(value) for key, value in context.items()}
        text = template.template.rstrip().format_map(context_str) + "\n"
        return PromptRenderResult(
            prompt_id=_prompt_ref(template.name, text),
            template=template.name,
            text=text,
            context=context_str,
        )


TRANSCRIPT_HEADING = "TRANSCRIPT:"

BANNED_PHRASES = (
    "Delves into",
    "Comprehensive landscape",
    "Uncover",
    "Realm",
    "Tapestry",
    "Game-changer",
    "In this episode...",
)

_ASSET_BUNDLE_TEMPLATE = """You are 'The Content Factory', a world-class showrunner for top health and wellness \
creators.

YOUR STYLE GUIDE (CRITICAL):
1. NO AI FLUFF. Banned words: {banned_phrases}.
2. TONE: High-energy, empathetic, direct and value-driven. Speak to the listener's pain points and desired identity.
3. FORMAT: Short paragraphs. Punchy sentences.
4. TITLES: Provide 3-5 options.
5. TIMESTAMPS: CRITICAL. Only return timestamps if the transcript contains explicit timecodes \
(an SRT file or markers such as [00:12:30]). For a plain text transcript return an empty array. \
Never make up times.

DELIVERABLES:
1. Platform show notes: optimized for Apple Podcasts. Short, punchy, bullet points.
2. Blog post: long-form, SEO optimized, H2 headers, detailed.
3. Other assets: as described by the response schema.

{transcript_heading}
{transcript}
"""

_CHAT_CONTEXT_TEMPLATE = """Here is the transcript for the podcast episode I am working on. \
Please use this context to answer my future questions.

{transcript}
"""

CHAT_ACKNOWLEDGEMENT = (
    "Understood. I have analyzed the transcript and am ready to help you refine content, "
    "write new posts, or answer specific questions about the episode."
)

_DEFAULT_TEMPLATES = (
    PromptTemplate(
        name="asset_bundle",
        template=_ASSET_BUNDLE_TEMPLATE,
        description="Style guide plus transcript for the one-shot asset bundle request.",
    ),
    PromptTemplate(
        name="chat_context",
        template=_CHAT_CONTEXT_TEMPLATE,
        description="First user turn of every chat session.",
    ),
)


def default_prompt_registry() -> PromptRegistry:
    return PromptRegistry(_DEFAULT_TEMPLATES)


def render_asset_bundle_prompt(*, renderer: PromptRenderer, transcript: str) -> PromptRenderResult:
    context = {
        "banned_phrases": ", ".join(f'"{phrase}"' for phrase in BANNED_PHRASES),
        "transcript_heading": TRANSCRIPT_HEADING,
        "transcript": transcript,
    }
    return renderer.render(name="asset_bundle", context=context)


def render_chat_context_prompt(*, renderer: PromptRenderer, transcript: str) -> PromptRenderResult:
    return renderer.render(name="chat_context", context={"transcript": transcript})


_SAFE_REF_RE = re.compile(r"[^a-zA-Z0-9._-]+")


def _prompt_ref(template: str, text: str) -> str:
    digest = sha256(f"{template}\n{text}".encode()).hexdigest()
    safe_template = _safe_ref_token(template)
    return f"{safe_template}_{digest[:12]}"


def _safe_ref_token(value: str) -> str:
    cleaned = _SAFE_REF_RE.sub("_", value).strip("._-")
    if not cleaned:
        raise ValueError("prompt template name cannot be empty after sanitization")
    return cleaned
