"""Periodic gauge updates."""

from jsongauge.polling.poller import DEFAULT_INTERVAL_SECONDS, CycleStats, Poller

__all__ = ["DEFAULT_INTERVAL_SECONDS", "CycleStats", "Poller"]
