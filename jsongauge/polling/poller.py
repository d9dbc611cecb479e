"""
Poller.

Re-reads every file group of every namespace on a fixed cadence and applies
the extracted values to the bound gauges. A broken file or path degrades to a
gauge pinned at 0.0 plus a warning; nothing in a cycle propagates outward.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass

from jsongauge.extraction.extractor import ExtractResult, extract_value, read_document
from jsongauge.monitoring.events import emit_event
from jsongauge.monitoring.logging import with_context
from jsongauge.topology.builder import FileGroup, Namespace, Topology

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 10.0
FAILED_VALUE = 0.0


@dataclass
class CycleStats:
    """Counts of series updates performed in one poll cycle."""

    updated: int = 0
    failed: int = 0
    elapsed_s: float = 0.0


class Poller:
    """
    Single sequential update loop over an injected topology.

    The loop sleeps ``interval`` seconds after each full pass; the time spent
    polling is not subtracted, so passes never overlap.
    """

    def __init__(self, topology: Topology, interval: float = DEFAULT_INTERVAL_SECONDS):
        self.topology = topology
        self.interval = interval
        self.cycles = 0

    def run_cycle(self) -> CycleStats:
        """Update every gauge binding once."""
        stats = CycleStats()
        t0 = time.monotonic()

        for namespace in self.topology.namespaces:
            for file_group in namespace.file_groups:
                group_stats = CycleStats()
                try:
                    self._update_file_group(namespace, file_group, group_stats)
                except Exception:
                    logger.error(
                        f"Unexpected failure updating {namespace.name}/{file_group.name} "
                        f"from {file_group.file_path}",
                        exc_info=True,
                    )
                    stats.failed += self._zero_file_group(namespace, file_group)
                else:
                    stats.updated += group_stats.updated
                    stats.failed += group_stats.failed

        stats.elapsed_s = time.monotonic() - t0
        self.cycles += 1
        emit_event(
            logger,
            "poll.cycle_completed",
            {
                "cycle": self.cycles,
                "updated": stats.updated,
                "failed": stats.failed,
                "elapsed_s": round(stats.elapsed_s, 3),
            },
            level="debug",
        )
        return stats

    def run_forever(self, stop_event: threading.Event | None = None) -> None:
        """Poll until the process exits, or until ``stop_event`` is set."""
        stop_event = stop_event or threading.Event()
        logger.info(
            f"Polling {self.topology.binding_count} gauge(s) every {self.interval:g}s"
        )
        while not stop_event.is_set():
            self.run_cycle()
            stop_event.wait(self.interval)

    def _update_file_group(
        self, namespace: Namespace, file_group: FileGroup, stats: CycleStats
    ) -> None:
        log = with_context(logger, namespace=namespace.name, file_group=file_group.name)

        doc = read_document(file_group.file_path)
        if not doc.ok:
            log.warning(
                f"Cannot load {file_group.file_path} ({doc.error.value}: {doc.detail}); "
                f"setting {len(namespace.gauges)} gauge(s) to {FAILED_VALUE}"
            )
            stats.failed += self._zero_file_group(namespace, file_group)
            return

        for binding in namespace.gauges:
            result: ExtractResult = extract_value(doc.document, binding.path)
            if result.ok:
                value = result.value
                stats.updated += 1
            else:
                value = FAILED_VALUE
                stats.failed += 1
                log.warning(
                    f"Extraction failed gauge={namespace.name}_{binding.name} "
                    f"file={file_group.file_path!r} path={binding.path!r} "
                    f"({result.short_error()}); setting {FAILED_VALUE}"
                )

            log.debug(
                f"Updating gauge={namespace.name}_{binding.name} file={file_group.file_path!r} "
                f"path={binding.path!r} value={value} labels={file_group.labels}"
            )
            binding.set(file_group.labels, value)

    def _zero_file_group(self, namespace: Namespace, file_group: FileGroup) -> int:
        """Set every binding of ``file_group`` to FAILED_VALUE; return the count."""
        for binding in namespace.gauges:
            try:
                binding.set(file_group.labels, FAILED_VALUE)
            except Exception:
                logger.error(
                    f"Cannot zero gauge={namespace.name}_{binding.name} "
                    f"for {file_group.name}",
                    exc_info=True,
                )
        return len(namespace.gauges)
