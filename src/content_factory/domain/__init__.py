"""Core domain models for content-factory."""

from content_factory.domain.models import (
    AssetBundle,
    CarouselSlide,
    ChatMessage,
    ChatRole,
    ProcessingStatus,
    SocialHook,
    TimestampItem,
    YouTubeAssets,
    YouTubeShortIdea,
)

__all__ = [
    "AssetBundle",
    "CarouselSlide",
    "ChatMessage",
    "ChatRole",
    "ProcessingStatus",
    "SocialHook",
    "TimestampItem",
    "YouTubeAssets",
    "YouTubeShortIdea",
]
