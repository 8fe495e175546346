"""Shared types and data classes for the extraction package.

This module contains the data classes that flow between the platform
matcher, the media selector and the extraction client. It has no
imports from the rest of the package to avoid circular import issues.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple, Union


class MediaType(str, Enum):
    """Kind of media returned by the extraction API."""
    VIDEO = "video"
    AUDIO = "audio"
    IMAGE = "image"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "MediaType":
        """Map a raw ``type`` field to a MediaType, UNKNOWN if unrecognized."""
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.UNKNOWN


@dataclass(frozen=True)
class PlatformRule:
    """A named platform and the URL substrings that identify it.

    Attributes:
        name: Platform name shown to users (e.g. "tiktok")
        patterns: Ordered substrings; any of them inside a URL means a match
    """
    name: str
    patterns: Tuple[str, ...]


@dataclass(frozen=True)
class MediaCandidate:
    """One media variant listed in an extraction API response."""
    type: MediaType
    url: str
    quality: Optional[str] = None
    extension: Optional[str] = None

    @classmethod
    def from_payload(cls, item: Any) -> Optional["MediaCandidate"]:
        """Build a candidate from one ``medias`` entry.

        Returns None for entries that are not objects or carry no URL.
        """
        if not isinstance(item, dict):
            return None
        url = item.get("url")
        if not isinstance(url, str) or not url.strip():
            return None

        quality = item.get("quality")
        extension = item.get("extension")
        return cls(
            type=MediaType.parse(item.get("type")),
            url=url.strip(),
            quality=quality if isinstance(quality, str) else None,
            extension=extension.strip().lower() if isinstance(extension, str) and extension.strip() else None,
        )


@dataclass(frozen=True)
class MultiCandidateResponse:
    """Response listing several media variants under ``medias``."""
    candidates: Tuple[MediaCandidate, ...]
    thumbnail: str = ""
    source: Optional[str] = None


@dataclass(frozen=True)
class SingleUrlResponse:
    """Response carrying a single bare ``url`` and no media list."""
    url: str
    thumbnail: str = ""
    source: Optional[str] = None


ExtractionResponse = Union[MultiCandidateResponse, SingleUrlResponse]


@dataclass(frozen=True)
class MediaInfo:
    """The media chosen for delivery.

    Attributes:
        platform: Platform the media came from ("unknown" if undetermined)
        media_url: Direct URL of the media file
        thumbnail: Thumbnail URL, empty string when the API gave none
        type: Media type used to pick the delivery method
        extension: File extension without the leading dot
    """
    platform: str
    media_url: str
    thumbnail: str
    type: MediaType
    extension: str
