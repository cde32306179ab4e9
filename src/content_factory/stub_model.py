"""Deterministic stand-in for the hosted model (``--dry-run``).

Builds a schema-conforming asset bundle straight from the transcript text and
answers chat messages with a canned reply. No network access.
"""

from __future__ import annotations

import json
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from content_factory.gemini_api import Content, GenerationConfig
from content_factory.prompting import TRANSCRIPT_HEADING
from content_factory.transcript_input import timecode_segments

_TOKEN_RE = re.compile(r"[A-Za-z][A-Za-z0-9'_-]+")
_SENTENCE_RE = re.compile(r"[^.!?\n]+[.!?]?")


@dataclass(frozen=True)
class StubModelConfig:
    max_timestamps: int = 20
    max_tags: int = 8


def _keywords(text: str, *, limit: int) -> list[str]:
    keywords: list[str] = []
    seen: set[str] = set()
    for match in _TOKEN_RE.finditer(text):
        token = match.group(0)
        if token.islower() or len(token) < 3:
            continue
        lowered = token.lower()
        if lowered in seen:
            continue
        seen.add(lowered)
        keywords.append(token)
        if len(keywords) >= limit:
            break
    return keywords


def _first_sentence(text: str) -> str:
    for match in _SENTENCE_RE.finditer(text):
        sentence = " ".join(match.group(0).split())
        if len(sentence) > 3:
            return sentence[:277].rstrip() + ("..." if len(sentence) > 277 else "")
    return "A conversation worth your time."


def _transcript_from_prompt(prompt_text: str) -> str:
    _before, marker, after = prompt_text.partition(f"\n{TRANSCRIPT_HEADING}\n")
    return after if marker else prompt_text


def stub_asset_bundle_payload(transcript: str, *, config: StubModelConfig | None = None) -> dict[str, Any]:
    config = config or StubModelConfig()
    keywords = _keywords(transcript, limit=max(config.max_tags, 3))
    topic = keywords[0] if keywords else "This Episode"
    quote = _first_sentence(transcript)

    timestamps = [
        {"time": time, "topic": text[:80] or f"Segment {idx}"}
        for idx, (time, text) in enumerate(timecode_segments(transcript)[: config.max_timestamps], start=1)
    ]
    short_times = [item["time"] for item in timestamps[:3]]
    short_times += ["00:00"] * (3 - len(short_times))
    return {
        "episodeTitles": [
            f"The Truth About {topic}",
            f"Why {topic} Changes Everything",
            f"What Nobody Tells You About {topic}",
        ],
        "hook": quote,
        "showNotes": f"{quote}\n\nWhat You Will Learn:\n- {topic}\n\nResources:\n- (add links)",
        "blogPost": f"## {topic}\n\n{quote}",
        "timestamps": timestamps,
        "newsletterDraft": f"Subject: The {topic} story\n\n{quote}",
        "guestSwipeEmail": f"I joined a fantastic show to talk about {topic}.\n\n{quote}",
        "linkedinCarousel": [
            {"slideNumber": idx, "title": f"{topic} #{idx}", "content": quote} for idx in range(1, 6)
        ],
        "viralQuotes": [quote] * 3,
        "socialHooks": [
            {"platform": platform, "content": f"{quote} #{topic}"} for platform in ("LinkedIn", "X", "Instagram")
        ],
        "youtube": {
            "titles": [f"{topic} Explained", f"I Tried {topic}", f"Stop Ignoring {topic}"],
            "description": f"{quote}\nWatch the full episode about {topic}.",
            "thumbnailText": ["WATCH THIS", topic.upper()[:20], "STOP NOW"],
            "tags": keywords[: config.max_tags],
            "shorts": [
                {"timestamp": time, "hook": f"Moment {idx}: {quote}", "score": 10 - idx}
                for idx, time in enumerate(short_times, start=1)
            ],
        },
    }


class StubContentModel:
    def __init__(self, *, config: StubModelConfig | None = None) -> None:
        self._config = config or StubModelConfig()
        self.calls: list[tuple[tuple[Content, ...], GenerationConfig]] = []

    def generate_text(self, contents: Sequence[Content], *, config: GenerationConfig) -> str:
        self.calls.append((tuple(contents), config))
        if config.response_schema is not None:
            transcript = _transcript_from_prompt(contents[-1].text if contents else "")
            payload = stub_asset_bundle_payload(transcript, config=self._config)
            return json.dumps(payload, ensure_ascii=False)

        context = contents[0].text if contents else ""
        transcript = context.partition("\n\n")[2] or context
        question = contents[-1].text if contents else ""
        word_count = len(transcript.split())
        return f"(stub) Based on the {word_count}-word transcript: {_first_sentence(transcript)} You asked: {question}"
