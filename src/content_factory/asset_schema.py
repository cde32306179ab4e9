"""Response schema sent with the asset generation request.

The schema uses the Gemini ``responseSchema`` dialect (an OpenAPI subset with
upper-case type names). Field descriptions carry the editorial rules the model
must follow, including cardinality bounds and the timestamp rule.
"""

from __future__ import annotations

from typing import Any

from pydantic.alias_generators import to_camel

from content_factory.domain.models import AssetBundle

STRING = "STRING"
INTEGER = "INTEGER"
ARRAY = "ARRAY"
OBJECT = "OBJECT"


def _string(description: str | None = None) -> dict[str, Any]:
    node: dict[str, Any] = {"type": STRING}
    if description:
        node["description"] = description
    return node


def _array(items: dict[str, Any], description: str | None = None) -> dict[str, Any]:
    node: dict[str, Any] = {"type": ARRAY, "items": items}
    if description:
        node["description"] = description
    return node


def _object(
    properties: dict[str, dict[str, Any]],
    *,
    description: str | None = None,
) -> dict[str, Any]:
    node: dict[str, Any] = {"type": OBJECT, "properties": properties}
    if description:
        node["description"] = description
    node["required"] = list(properties)
    return node


def _youtube_schema() -> dict[str, Any]:
    short_idea = _object(
        {
            "timestamp": _string(),
            "hook": _string("Why this specific moment will stop the scroll."),
            "score": {"type": INTEGER, "description": "Viral potential score from 1 to 10."},
        },
    )
    return _object(
        {
            "titles": _array(
                _string(),
                "Exactly 3 YouTube title options. Click-driven, under 60 characters "
                "(e.g. 'I Quit Sugar (Here is what happened)').",
            ),
            "description": _string(
                "The first 3 lines of the YouTube description. Include keywords and a link hook.",
            ),
            "thumbnailText": _array(
                _string(),
                "Exactly 3 options for the thumbnail text overlay, 2-4 words each (e.g. 'STOP DOING THIS').",
            ),
            "tags": _array(_string()),
            "shorts": _array(short_idea, "Exactly 3 moments that would make viral 60-second shorts."),
        },
        description="Assets for YouTube optimization.",
    )


def asset_bundle_response_schema() -> dict[str, Any]:
    """Declarative output schema for one :class:`AssetBundle`."""
    return _object(
        {
            "episodeTitles": _array(
                _string(),
                "3 to 5 viral, high-CTR episode titles that pass the curiosity gap test. "
                "Never fewer than 3, never more than 5.",
            ),
            "hook": _string(
                "A cold open paragraph for the show notes. Start with a story, a shocking stat "
                "or a counter-intuitive statement from the episode. Never start with 'In this episode'.",
            ),
            "showNotes": _string(
                "Show notes for Apple Podcasts, Spotify and YouTube audio. The first sentence hooks the "
                "listener immediately. Include a 'What You Will Learn' section with 3-5 bullet points and a "
                "short 'Resources' placeholder. Under 300 words, basic formatting only.",
            ),
            "blogPost": _string(
                "An SEO-optimized blog post of 600-800 words for the podcaster's website. Use Markdown "
                "'##' headers, a storytelling tone and short paragraphs.",
            ),
            "timestamps": _array(
                _object({"time": _string(), "topic": _string()}),
                "Only extract timestamps that explicitly exist in the source text (for example an SRT "
                "file or [00:12:30] markers), copying each time exactly as written. If the source has no "
                "timecodes, return an empty array. Never invent timestamps.",
            ),
            "newsletterDraft": _string(
                "A personal, friend-to-friend email with a curiosity-based subject line, "
                "following the Story-Lesson-Link framework.",
            ),
            "guestSwipeEmail": _string(
                "An email written by the GUEST to THEIR audience promoting this appearance. "
                "Flatter the host slightly.",
            ),
            "linkedinCarousel": _array(
                _object(
                    {
                        "slideNumber": {"type": INTEGER},
                        "title": _string("Big bold text for the slide."),
                        "content": _string("Supporting details for the slide."),
                    },
                ),
                "Content for a 5-7 slide educational carousel (PDF style).",
            ),
            "viralQuotes": _array(
                _string(),
                "3 to 5 short, punchy, tweetable quotes from the transcript, each under 280 characters.",
            ),
            "socialHooks": _array(
                _object({"platform": _string(), "content": _string()}),
                "3 distinct social media angles (e.g. controversial, story-driven, data-driven).",
            ),
            "youtube": _youtube_schema(),
        },
    )


def required_fields() -> tuple[str, ...]:
    return tuple(field.alias or to_camel(name) for name, field in AssetBundle.model_fields.items())
