from __future__ import annotations

from typing import Any

from content_factory.domain.models import AssetBundle
from content_factory.dossier import render_dossier


def test_dossier_sections_in_fixed_order(bundle_payload: dict[str, Any]) -> None:
    bundle_payload["timestamps"] = [{"time": "00:01:10", "topic": "Late light"}]
    text = render_dossier(AssetBundle.model_validate(bundle_payload))

    assert text.startswith("# PROJECT DOSSIER: Sleep Is A Skill\n")
    headings = [line for line in text.splitlines() if line.startswith("## ")]
    assert headings == [
        "## 1. TITLES",
        "## 2. HOOK",
        "## 3. PLATFORM SHOW NOTES (Apple/Spotify)",
        "## 4. BLOG POST (SEO)",
        "## 5. TIMESTAMPS",
        "## 6. YOUTUBE TITLES",
        "## 7. YOUTUBE DESCRIPTION",
        "## 8. YOUTUBE SHORTS",
        "## 9. NEWSLETTER",
        "## 10. LINKEDIN CAROUSEL",
        "## 11. SOCIAL HOOKS",
    ]


def test_dossier_line_formats(bundle_payload: dict[str, Any]) -> None:
    bundle_payload["timestamps"] = [{"time": "00:01:10", "topic": "Late light"}]
    text = render_dossier(AssetBundle.model_validate(bundle_payload))

    assert "- The 10pm Rule" in text
    assert "00:01:10 - Late light" in text
    assert "[00:01:10] Late light ruins sleep (Score: 9)" in text
    assert "Slide 1: Sleep is a skill - You can train it." in text
    assert "[LinkedIn] Productivity starts the night before." in text
    assert not text.endswith("\n")


def test_dossier_with_no_timestamps_keeps_the_section(bundle_payload: dict[str, Any]) -> None:
    text = render_dossier(AssetBundle.model_validate(bundle_payload))

    assert "## 5. TIMESTAMPS\n\n\n## 6. YOUTUBE TITLES" in text
