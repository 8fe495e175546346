"""Extraction package: platform matching, media selection and API client.

This package turns a URL pasted into a chat into a single MediaInfo by
asking the third-party extraction API and applying the selection policy
to whatever variants it returns.
"""
import logging

# Set up package logger
logger = logging.getLogger(__name__)

from .types import (
    ExtractionResponse,
    MediaCandidate,
    MediaInfo,
    MediaType,
    MultiCandidateResponse,
    PlatformRule,
    SingleUrlResponse,
)

from .exceptions import (
    ExtractionError,
    ExtractionFailedError,
    MediaBotError,
    MediaDeliveryError,
    MediaFetchError,
    MediaNotFoundError,
    MediaSendError,
)

from .platforms import PlatformMatcher

from .selector import (
    SELECTION_RULES,
    SelectionRule,
    parse_extraction_response,
    select_best_media,
)

from .client import ExtractionClient


__all__ = [
    # Types
    "ExtractionResponse",
    "MediaCandidate",
    "MediaInfo",
    "MediaType",
    "MultiCandidateResponse",
    "PlatformRule",
    "SingleUrlResponse",
    # Exception hierarchy
    "ExtractionError",
    "ExtractionFailedError",
    "MediaBotError",
    "MediaDeliveryError",
    "MediaFetchError",
    "MediaNotFoundError",
    "MediaSendError",
    # Matching and selection
    "PlatformMatcher",
    "SELECTION_RULES",
    "SelectionRule",
    "parse_extraction_response",
    "select_best_media",
    # Client
    "ExtractionClient",
]
