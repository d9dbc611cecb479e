"""Runtime metric topology."""

from jsongauge.topology.builder import (
    FileGroup,
    GaugeBinding,
    Namespace,
    Topology,
    build_namespace,
    build_topology,
    merge_labels,
)

__all__ = [
    "FileGroup",
    "GaugeBinding",
    "Namespace",
    "Topology",
    "build_namespace",
    "build_topology",
    "merge_labels",
]
