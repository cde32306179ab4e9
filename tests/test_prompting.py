from __future__ import annotations

import pytest

from content_factory.prompting import (
    BANNED_PHRASES,
    CHAT_ACKNOWLEDGEMENT,
    PromptRegistry,
    PromptRenderer,
    PromptTemplate,
    default_prompt_registry,
    render_asset_bundle_prompt,
    render_chat_context_prompt,
)


def test_asset_bundle_prompt_contains_style_guide_and_transcript() -> None:
    renderer = PromptRenderer(default_prompt_registry())

    result = render_asset_bundle_prompt(renderer=renderer, transcript="Host: hello {not a field}")

    assert result.template == "asset_bundle"
    assert result.prompt_id.startswith("asset_bundle_")
    assert "The Content Factory" in result.text
    for phrase in BANNED_PHRASES:
        assert phrase in result.text
    assert "Never make up times." in result.text
    assert result.text.endswith("TRANSCRIPT:\nHost: hello {not a field}\n")


def test_prompt_id_is_deterministic() -> None:
    renderer = PromptRenderer(default_prompt_registry())

    first = render_chat_context_prompt(renderer=renderer, transcript="abc")
    second = render_chat_context_prompt(renderer=renderer, transcript="abc")
    other = render_chat_context_prompt(renderer=renderer, transcript="abcd")

    assert first.prompt_id == second.prompt_id
    assert first.prompt_id != other.prompt_id


def test_transcript_trailing_whitespace_is_kept() -> None:
    renderer = PromptRenderer(default_prompt_registry())
    transcript = "00:00:05 Host: hi  \n\n"

    bundle_prompt = render_asset_bundle_prompt(renderer=renderer, transcript=transcript)
    chat_prompt = render_chat_context_prompt(renderer=renderer, transcript=transcript)

    assert bundle_prompt.text.endswith("TRANSCRIPT:\n" + transcript + "\n")
    assert chat_prompt.text.endswith("\n\n" + transcript + "\n")


def test_chat_context_prompt() -> None:
    renderer = PromptRenderer(default_prompt_registry())

    result = render_chat_context_prompt(renderer=renderer, transcript="Guest: thanks")

    assert result.text.startswith("Here is the transcript for the podcast episode")
    assert result.text.endswith("\n\nGuest: thanks\n")
    assert CHAT_ACKNOWLEDGEMENT.startswith("Understood.")


def test_unknown_template() -> None:
    renderer = PromptRenderer(PromptRegistry([PromptTemplate(name="x", template="{a}")]))

    with pytest.raises(KeyError, match="Unknown prompt template"):
        renderer.render(name="missing", context={})
