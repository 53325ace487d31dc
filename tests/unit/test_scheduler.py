"""Tests for the scheduler built at application startup."""

from unittest.mock import patch

from cineprog.main import build_scheduler


def test_weekly_enrichment_registered() -> None:
    with patch("cineprog.main.settings") as settings:
        settings.enrich_enabled = True
        scheduler = build_scheduler()

    job = scheduler.get_job("weekly_enrich")
    assert job is not None
    assert "day_of_week='mon'" in str(job.trigger)
    assert "hour='4'" in str(job.trigger)


def test_disabled_enrichment_leaves_scheduler_empty() -> None:
    with patch("cineprog.main.settings") as settings:
        settings.enrich_enabled = False
        scheduler = build_scheduler()

    assert scheduler.get_jobs() == []
