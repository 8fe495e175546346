"""Platform identification from URL substrings.

Platforms are configured as an ordered list of rules, each holding one or
more substrings. A URL belongs to the first rule having a substring that
appears anywhere in the lower-cased URL.
"""
import logging
from typing import Iterable, Optional, Tuple

from .types import PlatformRule

logger = logging.getLogger(__name__)


class PlatformMatcher:
    """Maps raw URLs to configured platform names."""

    def __init__(self, rules: Iterable[PlatformRule]):
        self._rules: Tuple[PlatformRule, ...] = tuple(rules)

    def identify_platform(self, url: str) -> Optional[str]:
        """Return the name of the first rule matching the URL.

        Rules are tried in configured order and patterns in rule order, so
        overlapping patterns resolve to the earlier rule.

        Args:
            url: Raw URL (or message text containing it)

        Returns:
            The platform name, or None when no pattern matches
        """
        if not url:
            return None

        url_lower = url.lower()
        for rule in self._rules:
            for pattern in rule.patterns:
                if pattern.lower() in url_lower:
                    logger.debug(f"Matched {url} to platform {rule.name} (pattern {pattern!r})")
                    return rule.name

        logger.debug(f"No platform matched for {url}")
        return None

    def list_supported_platforms(self) -> str:
        """Comma separated, alphabetically sorted platform names."""
        return ", ".join(sorted(rule.name for rule in self._rules))
