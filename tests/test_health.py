"""
Emote Tracker - Health Endpoint Tests
=====================================
"""

from types import SimpleNamespace

from src.core.health import HealthCheckServer


def _bot(ready: bool, scheduler=None):
    return SimpleNamespace(
        is_ready=lambda: ready,
        guilds=[object(), object()],
        scheduler=scheduler,
    )


class TestBuildStatus:
    """Tests for the status payload."""

    def test_connected_with_backfill(self, scheduler):
        status = HealthCheckServer(_bot(True, scheduler)).build_status()

        assert status["status"] == "healthy"
        assert status["guilds"] == 2
        assert status["backfill"]["enabled"] is True
        assert status["backfill"]["active"] == 0

    def test_starting_without_scheduler(self):
        status = HealthCheckServer(_bot(False)).build_status()

        assert status["status"] == "starting"
        assert status["connected"] is False
        assert status["backfill"] == {"enabled": False}
