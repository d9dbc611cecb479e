"""
Topology builder.

Turns a validated ExporterConfig into the runtime topology: one Namespace per
configured group, each holding the file groups to poll and the gauge bindings
to update. Every gauge is registered with the metrics registry exactly once.

Usage:
    from jsongauge.topology.builder import build_topology

    topology = build_topology(config)
    for namespace in topology.namespaces:
        ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from prometheus_client import REGISTRY, CollectorRegistry, Gauge

from jsongauge.configs.loader import ConfigError
from jsongauge.monitoring.events import emit_event
from jsongauge.schemas.config import ExporterConfig, NamespaceGroupSpec, namespace_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileGroup:
    """One JSON source and the resolved label set its series carry."""

    name: str
    file_path: str
    labels: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class GaugeBinding:
    """A registered gauge vector and the path its value is extracted from."""

    name: str
    path: str
    gauge: Gauge
    label_keys: tuple[str, ...] = ()

    def set(self, labels: dict[str, str], value: float) -> None:
        """Set the series selected by ``labels``."""
        # A gauge declared without label names has a single unlabeled series.
        # Values go positionally so any valid label name works, `self` included.
        if self.label_keys:
            self.gauge.labels(*(labels[k] for k in self.label_keys)).set(value)
        else:
            self.gauge.set(value)


@dataclass
class Namespace:
    name: str
    file_groups: list[FileGroup] = field(default_factory=list)
    gauges: list[GaugeBinding] = field(default_factory=list)
    label_keys: tuple[str, ...] = ()
    skipped: list[str] = field(default_factory=list)


@dataclass
class Topology:
    """Namespaces built once at startup and handed to the poller."""

    namespaces: list[Namespace] = field(default_factory=list)

    @property
    def binding_count(self) -> int:
        return sum(len(ns.gauges) for ns in self.namespaces)

    def metric_names(self) -> list[str]:
        """Full ``<namespace>_<metric>`` names of every registered binding."""
        return [f"{ns.name}_{g.name}" for ns in self.namespaces for g in ns.gauges]

    def describe(self) -> dict[str, Any]:
        """Export the topology as a JSON-friendly dictionary."""
        return {
            "namespaces": [
                {
                    "name": ns.name,
                    "label_keys": list(ns.label_keys),
                    "files": [
                        {"name": fg.name, "filepath": fg.file_path, "labels": dict(fg.labels)}
                        for fg in ns.file_groups
                    ],
                    "metrics": [{"name": g.name, "path": g.path} for g in ns.gauges],
                    "skipped": list(ns.skipped),
                }
                for ns in self.namespaces
            ],
            "bindings": self.binding_count,
        }


def merge_labels(group_labels: dict[str, str], file_labels: dict[str, str]) -> dict[str, str]:
    """Overlay group-level labels onto file labels; file labels win on conflict."""
    merged = dict(file_labels)
    for k, v in group_labels.items():
        merged.setdefault(k, v)
    return merged


def build_namespace(
    group_key: str,
    group: NamespaceGroupSpec,
    registry: CollectorRegistry = REGISTRY,
) -> Namespace:
    """
    Build one namespace and register its gauges.

    Args:
        group_key: The group's key in the configuration.
        group: The validated group spec.
        registry: Registry to register gauges with.

    Returns:
        The namespace, without bindings for metrics whose names were taken.

    Raises:
        ConfigError: If the group has no files to derive a label schema from.
    """
    namespace = Namespace(name=namespace_name(group_key, group))

    for file_key, file_spec in group.files.items():
        namespace.file_groups.append(
            FileGroup(
                name=file_key,
                file_path=file_spec.file_path,
                labels=merge_labels(group.labels, file_spec.labels),
            )
        )

    if not namespace.file_groups:
        raise ConfigError(f"group '{group_key}' has no files to derive label keys from")

    # All file groups share one key set (enforced by validation).
    namespace.label_keys = tuple(sorted(namespace.file_groups[0].labels))

    for metric_key, metric in group.metrics.items():
        full_name = f"{namespace.name}_{metric_key}"
        try:
            gauge = Gauge(
                metric_key,
                metric.help,
                labelnames=namespace.label_keys,
                namespace=namespace.name,
                registry=registry,
            )
        except ValueError as e:
            logger.error(f"Registering gauge failed, name={full_name!r}: {e}")
            namespace.skipped.append(metric_key)
            continue

        logger.info(f"Registered gauge name={full_name}")
        namespace.gauges.append(
            GaugeBinding(
                name=metric_key,
                path=metric.path,
                gauge=gauge,
                label_keys=namespace.label_keys,
            )
        )

    return namespace


def build_topology(
    config: ExporterConfig,
    registry: CollectorRegistry = REGISTRY,
) -> Topology:
    """
    Build the runtime topology for every configured group.

    Name collisions in ``registry`` (across or within namespaces) skip the
    colliding metric and never abort the build.
    """
    topology = Topology()
    for group_key, group in config.groups.items():
        topology.namespaces.append(build_namespace(group_key, group, registry))

    emit_event(
        logger,
        "topology.built",
        {
            "namespaces": len(topology.namespaces),
            "bindings": topology.binding_count,
            "skipped": sum(len(ns.skipped) for ns in topology.namespaces),
        },
    )
    return topology
