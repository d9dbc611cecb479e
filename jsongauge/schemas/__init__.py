"""Configuration schemas."""

from jsongauge.schemas.config import (
    DEFAULT_METRICS_PATH,
    ExporterConfig,
    FileSpec,
    MetricSpec,
    NamespaceGroupSpec,
    namespace_name,
)

__all__ = [
    "DEFAULT_METRICS_PATH",
    "ExporterConfig",
    "FileSpec",
    "MetricSpec",
    "NamespaceGroupSpec",
    "namespace_name",
]
