"""Best-media selection from extraction API responses.

The API answers in one of two shapes:

1. A ``medias`` list of variants, each with a ``type`` and optional
   ``quality`` and ``extension``. The variant is chosen with
   SELECTION_RULES, an ordered table of predicates: the first rule that
   matches any candidate decides both the candidate and the media type.
2. A bare ``url`` with no list. The media type is inferred from the URL's
   trailing extension.

Example:
    matcher = PlatformMatcher(config.PLATFORM_RULES)
    info = select_best_media(payload, "https://vt.tiktok.com/abc", matcher)
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from .exceptions import MediaNotFoundError
from .platforms import PlatformMatcher
from .types import (
    ExtractionResponse,
    MediaCandidate,
    MediaInfo,
    MediaType,
    MultiCandidateResponse,
    SingleUrlResponse,
)

logger = logging.getLogger(__name__)

UNKNOWN_PLATFORM = "unknown"

DEFAULT_EXTENSIONS: Dict[MediaType, str] = {
    MediaType.VIDEO: "mp4",
    MediaType.AUDIO: "mp3",
    MediaType.IMAGE: "jpg",
}

AUDIO_URL_EXTENSIONS = ("mp3", "wav", "ogg")
IMAGE_URL_EXTENSIONS = ("jpg", "jpeg", "png", "gif")
IMAGE_CANDIDATE_EXTENSIONS = {"jpg", "png"}


@dataclass(frozen=True)
class SelectionRule:
    """One row of the selection table.

    Attributes:
        media_type: Type assigned to the media when this rule wins
        predicate: Test applied to each candidate, in list order
        description: Human-readable summary used in logs
    """

    media_type: MediaType
    predicate: Callable[[MediaCandidate], bool]
    description: str


def _is_video(candidate: MediaCandidate) -> bool:
    return candidate.type is MediaType.VIDEO


# Highest quality first. Video always wins over audio, audio over image.
SELECTION_RULES: Tuple[SelectionRule, ...] = (
    SelectionRule(
        MediaType.VIDEO,
        lambda c: _is_video(c) and c.quality == "hd_no_watermark",
        "video hd_no_watermark",
    ),
    SelectionRule(
        MediaType.VIDEO,
        lambda c: _is_video(c) and c.quality == "no_watermark",
        "video no_watermark",
    ),
    SelectionRule(MediaType.VIDEO, _is_video, "any video"),
    SelectionRule(MediaType.AUDIO, lambda c: c.type is MediaType.AUDIO, "any audio"),
    SelectionRule(
        MediaType.IMAGE,
        lambda c: c.type is MediaType.IMAGE or c.extension in IMAGE_CANDIDATE_EXTENSIONS,
        "image",
    ),
)


def parse_extraction_response(payload: Any, url: Optional[str] = None) -> ExtractionResponse:
    """Validate a decoded API payload into one of the two response shapes.

    Args:
        payload: Decoded JSON body of the extraction API
        url: Original URL, only used for error context

    Returns:
        MultiCandidateResponse or SingleUrlResponse

    Raises:
        MediaNotFoundError: If the payload matches neither shape
    """
    if not isinstance(payload, dict):
        raise MediaNotFoundError(
            message=f"Extraction response is not an object (got {type(payload).__name__})",
            url=url,
        )

    thumbnail = payload.get("thumbnail")
    thumbnail = thumbnail if isinstance(thumbnail, str) else ""
    source = payload.get("source")
    source = source.strip() if isinstance(source, str) and source.strip() else None

    medias = payload.get("medias")
    if isinstance(medias, list) and medias:
        candidates = tuple(
            candidate
            for candidate in (MediaCandidate.from_payload(item) for item in medias)
            if candidate is not None
        )
        return MultiCandidateResponse(candidates=candidates, thumbnail=thumbnail, source=source)

    bare_url = payload.get("url")
    if isinstance(bare_url, str) and bare_url.strip():
        return SingleUrlResponse(url=bare_url.strip(), thumbnail=thumbnail, source=source)

    raise MediaNotFoundError(
        message="Extraction response has neither a media list nor a url",
        url=url,
    )


def choose_candidate(
    candidates: Sequence[MediaCandidate],
    rules: Sequence[SelectionRule] = SELECTION_RULES,
) -> Optional[Tuple[MediaCandidate, MediaType]]:
    """Return the first candidate matched by the highest-priority rule.

    Returns:
        Tuple of (candidate, media_type) or None if no rule matches
    """
    for rule in rules:
        for candidate in candidates:
            if rule.predicate(candidate):
                logger.debug(f"Selected candidate by rule '{rule.description}': {candidate.url}")
                return candidate, rule.media_type
    return None


def infer_type_from_url(media_url: str) -> Tuple[MediaType, str]:
    """Infer media type and extension from a bare media URL.

    Returns:
        Tuple of (media_type, extension); unrecognized endings are video/mp4
    """
    url_lower = media_url.lower()
    if url_lower.endswith(tuple(f".{ext}" for ext in AUDIO_URL_EXTENSIONS)):
        return MediaType.AUDIO, url_lower.rsplit(".", 1)[-1]
    if url_lower.endswith(tuple(f".{ext}" for ext in IMAGE_URL_EXTENSIONS)):
        return MediaType.IMAGE, url_lower.rsplit(".", 1)[-1]
    return MediaType.VIDEO, DEFAULT_EXTENSIONS[MediaType.VIDEO]


def resolve_platform(
    response: ExtractionResponse,
    original_url: str,
    matcher: Optional[PlatformMatcher] = None,
) -> str:
    """Declared source, else the matched platform, else ``unknown``."""
    if response.source:
        return response.source
    if matcher is not None:
        platform = matcher.identify_platform(original_url)
        if platform:
            return platform
    return UNKNOWN_PLATFORM


def select_best_media(
    payload: Any,
    original_url: str,
    matcher: Optional[PlatformMatcher] = None,
) -> MediaInfo:
    """Pick the single best media from an extraction API payload.

    Args:
        payload: Decoded JSON body of the extraction API
        original_url: URL the user sent, used for platform identification
        matcher: Platform matcher used when the payload declares no source

    Returns:
        MediaInfo describing the chosen media

    Raises:
        MediaNotFoundError: If the payload holds no usable media
    """
    response = parse_extraction_response(payload, url=original_url)
    platform = resolve_platform(response, original_url, matcher)

    if isinstance(response, SingleUrlResponse):
        media_type, extension = infer_type_from_url(response.url)
        logger.debug(f"Single url response inferred as {media_type.value}/{extension}")
        return MediaInfo(
            platform=platform,
            media_url=response.url,
            thumbnail=response.thumbnail,
            type=media_type,
            extension=extension,
        )

    selection = choose_candidate(response.candidates)
    if selection is None:
        raise MediaNotFoundError(
            message=f"No usable media among {len(response.candidates)} candidates",
            url=original_url,
            platform=platform,
        )

    candidate, media_type = selection
    return MediaInfo(
        platform=platform,
        media_url=candidate.url,
        thumbnail=response.thumbnail,
        type=media_type,
        extension=candidate.extension or DEFAULT_EXTENSIONS[media_type],
    )


__all__ = [
    "DEFAULT_EXTENSIONS",
    "SELECTION_RULES",
    "SelectionRule",
    "UNKNOWN_PLATFORM",
    "choose_candidate",
    "infer_type_from_url",
    "parse_extraction_response",
    "resolve_platform",
    "select_best_media",
]
