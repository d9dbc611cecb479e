"""
Exporter wiring.

Owns the loaded configuration, the topology built from it and the poller, and
runs the poller in a background thread next to the HTTP listener.

Usage:
    from jsongauge.exporter import Exporter

    Exporter.from_config_file("exporter.yaml").run()
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from pathlib import Path

from prometheus_client import REGISTRY, CollectorRegistry

from jsongauge.configs.loader import load_config, load_config_with_files
from jsongauge.monitoring.events import emit_event
from jsongauge.polling.poller import DEFAULT_INTERVAL_SECONDS, Poller
from jsongauge.schemas.config import ExporterConfig, FileSpec
from jsongauge.server import create_server
from jsongauge.topology.builder import Topology, build_topology

logger = logging.getLogger(__name__)


class Exporter:
    """A configured exporter instance."""

    def __init__(
        self,
        config: ExporterConfig,
        *,
        registry: CollectorRegistry = REGISTRY,
        interval: float = DEFAULT_INTERVAL_SECONDS,
    ):
        self.config = config
        self.registry = registry
        self.topology: Topology = build_topology(config, registry)
        self.poller = Poller(self.topology, interval=interval)
        self._poll_thread: threading.Thread | None = None

    @classmethod
    def from_config_file(cls, config_path: str | Path, **kwargs) -> Exporter:
        """Create an exporter from a full configuration file."""
        return cls(load_config(config_path), **kwargs)

    @classmethod
    def from_base_with_files(
        cls,
        base_config_path: str | Path,
        files: Iterable[FileSpec],
        **kwargs,
    ) -> Exporter:
        """
        Create an exporter from a single-group base config and external files.

        Raises:
            ConfigError: If the base config declares more than one group.
        """
        return cls(load_config_with_files(base_config_path, files), **kwargs)

    @property
    def metrics_path(self) -> str:
        return self.config.resolved_metrics_path

    def start_polling(self, stop_event: threading.Event | None = None) -> threading.Thread:
        """Start the poller loop in a daemon thread."""
        if self._poll_thread is None or not self._poll_thread.is_alive():
            self._poll_thread = threading.Thread(
                target=self.poller.run_forever,
                args=(stop_event,),
                name="jsongauge-poller",
                daemon=True,
            )
            self._poll_thread.start()
        return self._poll_thread

    def run(self) -> None:
        """
        Serve metrics until the process is terminated.

        Raises:
            OSError: If the listen address cannot be bound.
        """
        server = create_server(
            self.config.listen_host,
            self.config.listen_port,
            self.metrics_path,
            self.registry,
        )
        self.start_polling()

        logger.info(f"Starting listening on http://{self.config.address}{self.metrics_path}")
        emit_event(
            logger,
            "server.started",
            {"address": self.config.address, "metrics_path": self.metrics_path},
        )
        try:
            server.serve_forever()
        finally:
            server.server_close()
