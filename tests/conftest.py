from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

SRT_TRANSCRIPT = """1
00:00:05,000 --> 00:00:09,000
Host: Welcome to Deep Sleep Radio. Today we talk about Magnesium and Melatonin.

2
00:01:10,000 --> 00:01:15,000
Guest: Thanks for having me. Most people sleep badly because of late light.

3
00:12:30,000 --> 00:12:40,000
Host: So what is the one habit you would change tonight?
"""


def make_bundle_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "episodeTitles": ["Sleep Is A Skill", "The 10pm Rule", "Why You Wake At 3am"],
        "hook": "She slept four hours a night for a decade. Then one habit changed it.",
        "showNotes": "Sleep is trainable.\n\nWhat You Will Learn:\n- Light\n- Timing\n- Magnesium",
        "blogPost": "## Sleep Is A Skill\n\nShort paragraphs.",
        "timestamps": [],
        "newsletterDraft": "Subject: I was wrong about sleep\n\nStory. Lesson. Link.",
        "guestSwipeEmail": "I sat down with the sharpest host in wellness.",
        "linkedinCarousel": [
            {"slideNumber": 1, "title": "Sleep is a skill", "content": "You can train it."},
            {"slideNumber": 2, "title": "Light first", "content": "Morning light sets the clock."},
        ],
        "viralQuotes": ["Your bedroom is not an office."],
        "socialHooks": [
            {"platform": "LinkedIn", "content": "Productivity starts the night before."},
            {"platform": "X", "content": "Stop scrolling at 11pm."},
        ],
        "youtube": {
            "titles": ["I Fixed My Sleep", "The 3am Wake Up", "Sleep Like A Pro"],
            "description": "Fix your sleep in 7 days.\nFull episode below.",
            "thumbnailText": ["STOP DOING THIS", "3AM?", "SLEEP BETTER"],
            "tags": ["sleep", "health"],
            "shorts": [
                {"timestamp": "00:01:10", "hook": "Late light ruins sleep", "score": 9},
                {"timestamp": "00:12:30", "hook": "One habit tonight", "score": 7},
                {"timestamp": "00:00:05", "hook": "The welcome", "score": 3},
            ],
        },
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def bundle_payload() -> dict[str, Any]:
    return make_bundle_payload()


@pytest.fixture
def srt_transcript() -> str:
    return SRT_TRANSCRIPT


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point config lookup at an empty tmp dir and clear Gemini env vars."""
    config_path = tmp_path / "config" / "content-factory.yaml"
    monkeypatch.setenv("CONTENT_FACTORY_CONFIG", str(config_path))
    for name in ("GEMINI_API_KEY", "API_KEY", "GEMINI_MODEL", "GEMINI_BASE_URL"):
        monkeypatch.delenv(name, raising=False)
    return config_path
