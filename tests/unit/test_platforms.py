"""Tests for platform identification."""
import pytest

from mediabot.extraction import PlatformMatcher, PlatformRule


class TestIdentifyPlatform:
    """Tests for PlatformMatcher.identify_platform."""

    @pytest.mark.parametrize("url,expected", [
        ("https://www.tiktok.com/@u/video/123", "tiktok"),
        ("https://vt.tiktok.com/ZSabc/", "tiktok"),
        ("https://www.instagram.com/reel/xyz/", "instagram"),
        ("https://youtu.be/dQw4w9WgXcQ", "youtube"),
    ])
    def test_known_platforms(self, matcher, url, expected):
        assert matcher.identify_platform(url) == expected

    def test_match_is_case_insensitive(self, matcher):
        assert matcher.identify_platform("HTTPS://WWW.TIKTOK.COM/@U/VIDEO/1") == "tiktok"

    def test_uppercase_pattern_still_matches(self):
        matcher = PlatformMatcher([PlatformRule(name="x", patterns=("X.COM/",))])
        assert matcher.identify_platform("https://x.com/user/status/1") == "x"

    def test_pattern_anywhere_in_url(self, matcher):
        assert matcher.identify_platform("https://redirect.example/?to=instagram.com/p/1") == "instagram"

    @pytest.mark.parametrize("url", [
        "https://example.com/video.mp4",
        "https://vimeo.com/123",
        "",
    ])
    def test_unknown_returns_none(self, matcher, url):
        assert matcher.identify_platform(url) is None

    def test_first_rule_wins_on_overlap(self):
        matcher = PlatformMatcher([
            PlatformRule(name="youtube-shorts", patterns=("youtube.com/shorts",)),
            PlatformRule(name="youtube", patterns=("youtube.com",)),
        ])
        assert matcher.identify_platform("https://youtube.com/shorts/abc") == "youtube-shorts"
        assert matcher.identify_platform("https://youtube.com/watch?v=abc") == "youtube"


class TestListSupportedPlatforms:
    """Tests for PlatformMatcher.list_supported_platforms."""

    def test_sorted_and_comma_joined(self, matcher):
        assert matcher.list_supported_platforms() == "instagram, tiktok, youtube"

    def test_empty(self):
        assert PlatformMatcher([]).list_supported_platforms() == ""
