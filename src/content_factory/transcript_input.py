from __future__ import annotations

import re
from pathlib import Path

MAX_TRANSCRIPT_BYTES = 10 * 1024 * 1024


# HH:MM:SS or MM:SS, with the optional SRT/VTT millisecond fraction.
_TIMECODE_RE = re.compile(r"(?<![\d:])(?:\d{1,2}:)?[0-5]?\d:[0-5]\d(?:[.,]\d{1,3})?(?![\d:])")


class TranscriptInputError(ValueError):
    pass


def load_transcript_text(text: str) -> str:
    if not text.strip():
        raise TranscriptInputError("Please paste a transcript first.")
    return text


def load_transcript_bytes(raw: bytes) -> str:
    """Decode an uploaded transcript; invalid UTF-8 sequences are replaced."""
    if len(raw) > MAX_TRANSCRIPT_BYTES:
        raise TranscriptInputError("File size too large. Please upload a file smaller than 10MB.")
    return load_transcript_text(raw.decode("utf-8", errors="replace"))


def load_transcript_file(path: Path) -> str:
    try:
        size = path.stat().st_size
    except OSError as exc:
        raise TranscriptInputError("Failed to read file.") from exc
    if size > MAX_TRANSCRIPT_BYTES:
        raise TranscriptInputError("File size too large. Please upload a file smaller than 10MB.")
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise TranscriptInputError("Failed to read file.") from exc
    return load_transcript_bytes(raw)


def find_timecodes(text: str) -> list[str]:
    return _TIMECODE_RE.findall(text)


def has_timecodes(text: str) -> bool:
    return _TIMECODE_RE.search(text) is not None


def timecode_segments(text: str) -> list[tuple[str, str]]:
    """Pair each timecode with the text that follows it up to the next timecode."""
    matches = list(_TIMECODE_RE.finditer(text))
    segments: list[tuple[str, str]] = []
    for idx, match in enumerate(matches):
        end = matches[idx + 1].start() if idx + 1 < len(matches) else len(text)
        following = text[match.end() : end].strip(" []->\t\r\n")
        segments.append((match.group(0), " ".join(following.split())))
    return segments
