"""
jsongauge.schemas.config

Pydantic models defining the exporter configuration contract.

Field aliases mirror the YAML keys so that validation errors point at the
key an operator actually wrote (``filepath``, ``namespace``, ...).

Requires: pydantic>=2
"""

from __future__ import annotations

import re
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

METRIC_NAME_RE = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")
LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

DEFAULT_METRICS_PATH = "/metrics"


def _coerce_label_values(v: Any) -> Any:
    """Accept bare YAML scalars as label values (``year: 2020``, ``canary: true``)."""
    if v is None:
        return {}
    if not isinstance(v, dict):
        return v
    coerced = {}
    for name, value in v.items():
        if isinstance(value, bool):
            value = str(value).lower()
        elif isinstance(value, (int, float)):
            value = str(value)
        coerced[name] = value
    return coerced


def _check_label_names(labels: dict[str, str]) -> dict[str, str]:
    for name in labels:
        if not LABEL_NAME_RE.match(name) or name.startswith("__"):
            raise ValueError(f"invalid label name '{name}'")
    return labels


# `labels:` with no value decodes to None and means no labels
LabelMap = Annotated[
    dict[str, str],
    BeforeValidator(_coerce_label_values),
    AfterValidator(_check_label_names),
]


# ----------------------------
# Leaf models
# ----------------------------


class MetricSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    help: str = Field(..., min_length=1, description="Gauge help text")
    path: str = Field(..., min_length=1, description="Dot-path into the JSON document")
    type: str | None = Field(default="", description="Reserved, must be empty")

    @field_validator("type")
    @classmethod
    def _reserved_type(cls, v: str | None) -> str:
        if v:
            raise ValueError("metric types are not supported yet; leave 'type' empty")
        return ""


class FileSpec(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    file_path: str = Field(..., alias="filepath", min_length=1)
    labels: LabelMap = Field(default_factory=dict)


# ----------------------------
# Group (one emitted namespace)
# ----------------------------


class NamespaceGroupSpec(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    namespace_override: str | None = Field(default=None, alias="namespace")
    metrics: dict[str, MetricSpec] = Field(..., min_length=1)
    labels: LabelMap = Field(default_factory=dict)
    files: dict[str, FileSpec] = Field(..., min_length=1)

    @field_validator("metrics")
    @classmethod
    def _valid_metric_keys(cls, v: dict[str, MetricSpec]) -> dict[str, MetricSpec]:
        for key in v:
            if not METRIC_NAME_RE.match(key):
                raise ValueError(f"invalid metric name '{key}'")
        return v

    @model_validator(mode="after")
    def _uniform_label_keys(self) -> NamespaceGroupSpec:
        # A gauge vector declares one label-key schema for all of its series.
        expected: tuple[str, frozenset[str]] | None = None
        for file_key, spec in self.files.items():
            keys = frozenset(self.labels) | frozenset(spec.labels)
            if expected is None:
                expected = (file_key, keys)
            elif keys != expected[1]:
                raise ValueError(
                    "all files in a group must resolve to the same label keys; "
                    f"'{expected[0]}' has {sorted(expected[1])}, "
                    f"'{file_key}' has {sorted(keys)}"
                )
        return self


# ----------------------------
# Top-level config
# ----------------------------


class ExporterConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    groups: dict[str, NamespaceGroupSpec] = Field(..., min_length=1)
    address: str = Field(..., min_length=1, description="host:port to listen on")
    metrics_path: str | None = Field(default=None)

    @field_validator("address")
    @classmethod
    def _valid_address(cls, v: str) -> str:
        _, sep, port = v.rpartition(":")
        if not sep or not port.isdigit():
            raise ValueError(f"address must be host:port, got '{v}'")
        if int(port) > 65535:
            raise ValueError(f"port out of range in '{v}'")
        return v

    @model_validator(mode="after")
    def _valid_namespaces(self) -> ExporterConfig:
        for group_key, group in self.groups.items():
            name = namespace_name(group_key, group)
            if not METRIC_NAME_RE.match(name):
                raise ValueError(
                    f"group '{group_key}' resolves to invalid namespace '{name}'"
                )
        return self

    @property
    def resolved_metrics_path(self) -> str:
        """Return the exposition path, defaulting to /metrics and forcing a leading slash."""
        if not self.metrics_path:
            return DEFAULT_METRICS_PATH
        if self.metrics_path.startswith("/"):
            return self.metrics_path
        return "/" + self.metrics_path

    @property
    def listen_host(self) -> str:
        # "[::1]:9100" -> "::1", ":9100" -> "" (all interfaces)
        return self.address.rpartition(":")[0].strip("[]")

    @property
    def listen_port(self) -> int:
        return int(self.address.rpartition(":")[2])


def namespace_name(group_key: str, group: NamespaceGroupSpec) -> str:
    """Resolve the emitted namespace: the override if set, else the group key."""
    return group.namespace_override or group_key
