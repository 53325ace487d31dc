"""Unit tests for the parser profile registry."""

import pytest

from cineprog.sheets.profiles import PROFILE_REGISTRY, WEDNESDAY, get_profile


class TestGetProfile:
    def test_default_profile(self) -> None:
        profile = get_profile(None)
        assert profile.slug == "weekly-grid"
        assert profile.week_start_day == WEDNESDAY
        assert profile.shifted_time_fallback

    def test_unknown_slug_falls_back_to_weekly_grid(self) -> None:
        assert get_profile("no-such-parser") is PROFILE_REGISTRY["weekly-grid"]

    @pytest.mark.parametrize(
        "slug",
        [
            "kinepolis-fr-longwy-thionville",
            "kinepolis-fr-metz-amphitheatre",
            "kinepolis-fr-waves",
        ],
    )
    def test_kinepolis_france_slugs(self, slug: str) -> None:
        profile = get_profile(slug)
        assert profile.slug == slug
        assert profile.weekday_languages == ("fr", "en")
        assert profile.default_film_column == 0

    def test_scala_disables_shifted_fallback(self) -> None:
        assert not get_profile("scala-cinextdoor").shifted_time_fallback


class TestWithOverrides:
    def test_overrides_fields(self) -> None:
        profile = get_profile("kinepolis", {"scan_rows": 25, "week_start_day": 0})
        assert profile.scan_rows == 25
        assert profile.week_start_day == 0
        assert profile.slug == "kinepolis"

    def test_lists_become_tuples(self) -> None:
        profile = get_profile(None, {"weekday_languages": ["de", "fr"]})
        assert profile.weekday_languages == ("de", "fr")

    def test_unknown_keys_and_slug_are_ignored(self) -> None:
        profile = get_profile("kinepolis", {"colour": "red", "slug": "other"})
        assert profile == PROFILE_REGISTRY["kinepolis"]

    def test_registry_entry_is_not_mutated(self) -> None:
        get_profile("kinepolis", {"scan_rows": 3})
        assert PROFILE_REGISTRY["kinepolis"].scan_rows == 10

    def test_empty_config_returns_same_profile(self) -> None:
        base = PROFILE_REGISTRY["cinextdoor"]
        assert base.with_overrides(None) is base
        assert base.with_overrides({}) is base
