from __future__ import annotations

from content_factory.domain.models import AssetBundle


def render_dossier(bundle: AssetBundle) -> str:
    """Flatten a bundle into one plain-text document with fixed section order."""
    youtube = bundle.youtube
    sections = [
        ("TITLES", "\n".join(f"- {title}" for title in bundle.episode_titles)),
        ("HOOK", bundle.hook),
        ("PLATFORM SHOW NOTES (Apple/Spotify)", bundle.show_notes),
        ("BLOG POST (SEO)", bundle.blog_post),
        ("TIMESTAMPS", "\n".join(f"{item.time} - {item.topic}" for item in bundle.timestamps)),
        ("YOUTUBE TITLES", "\n".join(f"- {title}" for title in youtube.titles)),
        ("YOUTUBE DESCRIPTION", youtube.description),
        (
            "YOUTUBE SHORTS",
            "\n".join(f"[{short.timestamp}] {short.hook} (Score: {short.score})" for short in youtube.shorts),
        ),
        ("NEWSLETTER", bundle.newsletter_draft),
        (
            "LINKEDIN CAROUSEL",
            "\n".join(
                f"Slide {slide.slide_number}: {slide.title} - {slide.content}" for slide in bundle.linkedin_carousel
            ),
        ),
        ("SOCIAL HOOKS", "\n".join(f"[{hook.platform}] {hook.content}" for hook in bundle.social_hooks)),
    ]

    lines = [f"# PROJECT DOSSIER: {bundle.episode_titles[0]}"]
    for number, (heading, body) in enumerate(sections, start=1):
        lines.append("")
        lines.append(f"## {number}. {heading}")
        lines.append(body)
    return "\n".join(lines).strip()
