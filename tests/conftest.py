"""
Shared pytest fixtures for the jsongauge test suite.

Provides temp config/report writers and an isolated metrics registry.
"""

import json
from pathlib import Path

import pytest
import yaml
from prometheus_client import CollectorRegistry

LIGHTHOUSE_REPORT = {
    "categories": {
        "performance": {"score": 0.87},
        "accessibility": {"score": 0.93},
    },
    "audits": {
        "first-contentful-paint": {"numericValue": 1234.5},
    },
}


@pytest.fixture
def registry():
    """Return a fresh registry so tests never touch the global one."""
    return CollectorRegistry()


@pytest.fixture
def write_json(tmp_path):
    """
    Return a function that writes a JSON document under tmp_path.

    Example:
        path = write_json("a.json", {"x": 1})
    """

    def _write_json(name: str, data) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write_json


@pytest.fixture
def write_config(tmp_path):
    """Return a function that dumps a config dict to a YAML file."""

    def _write_config(data: dict, name: str = "exporter.yaml") -> Path:
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        return path

    return _write_config


@pytest.fixture
def report_path(write_json):
    """Path to a Lighthouse-like report."""
    return write_json("a.json", LIGHTHOUSE_REPORT)


@pytest.fixture
def sample_config(report_path):
    """
    Return a single-group config dict.

    Group 'lightheus' labels every series with host=a.com and reads one file.
    """
    return {
        "groups": {
            "lightheus": {
                "labels": {"host": "a.com"},
                "metrics": {
                    "performance": {
                        "help": "Lighthouse performance score",
                        "path": "categories.performance.score",
                    },
                },
                "files": {
                    "home": {"filepath": str(report_path), "labels": {}},
                },
            },
        },
        "address": "localhost:31337",
    }
