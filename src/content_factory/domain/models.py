from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

NonEmptyStr = Annotated[str, Field(min_length=1)]
ViralScore = Annotated[int, Field(ge=1, le=10)]


class DomainModel(BaseModel):
    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class WireModel(DomainModel):
    """Immutable record exchanged with the model API using camelCase keys."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ProcessingStatus(StrEnum):
    IDLE = "IDLE"
    ANALYZING = "ANALYZING"
    GENERATING = "GENERATING"
    COMPLETE = "COMPLETE"
    ERROR = "ERROR"


class ChatRole(StrEnum):
    user = "user"
    model = "model"


class TimestampItem(WireModel):
    time: NonEmptyStr
    topic: str


class SocialHook(WireModel):
    platform: str
    content: str


class CarouselSlide(WireModel):
    slide_number: int
    title: str
    content: str


class YouTubeShortIdea(WireModel):
    timestamp: str
    hook: str
    score: ViralScore


class YouTubeAssets(WireModel):
    titles: Annotated[tuple[NonEmptyStr, ...], Field(min_length=3, max_length=3)]
    description: str
    thumbnail_text: Annotated[tuple[NonEmptyStr, ...], Field(min_length=3, max_length=3)]
    tags: tuple[str, ...]
    shorts: Annotated[tuple[YouTubeShortIdea, ...], Field(min_length=3, max_length=3)]


class AssetBundle(WireModel):
    """Every marketing deliverable produced from one transcript in one call."""

    episode_titles: Annotated[tuple[NonEmptyStr, ...], Field(min_length=3, max_length=5)]
    hook: NonEmptyStr
    show_notes: NonEmptyStr
    blog_post: NonEmptyStr
    timestamps: tuple[TimestampItem, ...]
    newsletter_draft: NonEmptyStr
    guest_swipe_email: NonEmptyStr
    linkedin_carousel: tuple[CarouselSlide, ...]
    viral_quotes: tuple[str, ...]
    social_hooks: tuple[SocialHook, ...]
    youtube: YouTubeAssets

    def to_json(self, *, indent: int | None = 2) -> str:
        return self.model_dump_json(indent=indent, by_alias=True)

    @classmethod
    def from_json(cls, raw: str | bytes | bytearray) -> AssetBundle:
        return cls.model_validate_json(raw)


class ChatMessage(DomainModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    role: ChatRole
    text: str
