"""
Unit tests for the topology builder.

Tests for label merging, label-key schemas and duplicate-safe registration.
"""

import copy

import pytest

from jsongauge.configs.loader import ConfigError
from jsongauge.schemas.config import ExporterConfig, NamespaceGroupSpec
from jsongauge.topology.builder import (
    GaugeBinding,
    Topology,
    build_namespace,
    build_topology,
    merge_labels,
)

# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def two_file_config(sample_config):
    """Config with two files sharing the page label key."""
    group = sample_config["groups"]["lightheus"]
    group["metrics"]["accessibility"] = {
        "help": "Accessibility score",
        "path": "categories.accessibility.score",
    }
    group["files"] = {
        "home": {"filepath": "home.json", "labels": {"page": "home"}},
        "pricing": {"filepath": "pricing.json", "labels": {"page": "pricing", "host": "b.com"}},
    }
    return sample_config


@pytest.fixture
def shared_namespace_config(sample_config):
    """Two groups declaring the same metric under override namespace 'shared'."""
    first = sample_config["groups"]["lightheus"]
    first["namespace"] = "shared"
    second = copy.deepcopy(first)
    second["metrics"]["pwa"] = {"help": "PWA score", "path": "categories.pwa.score"}
    sample_config["groups"]["lightheus2"] = second
    return sample_config


# =============================================================================
# TEST CLASSES
# =============================================================================


class TestMergeLabels:
    """Tests for merge_labels."""

    def test_group_labels_added(self):
        """Group labels should be added for keys the file lacks."""
        assert merge_labels({"host": "a.com"}, {"page": "home"}) == {
            "host": "a.com",
            "page": "home",
        }

    def test_file_labels_win(self):
        """File labels should take precedence over group labels."""
        assert merge_labels({"host": "a.com"}, {"host": "b.com"}) == {"host": "b.com"}

    def test_inputs_not_mutated(self):
        """Neither input map should be modified."""
        group, file = {"host": "a.com"}, {"page": "home"}
        merge_labels(group, file)
        assert group == {"host": "a.com"}
        assert file == {"page": "home"}


class TestBuildTopology:
    """Tests for build_topology."""

    def test_lighthouse_scenario(self, sample_config, registry):
        """One group, one file, one metric becomes one binding."""
        topology = build_topology(ExporterConfig.model_validate(sample_config), registry)

        assert isinstance(topology, Topology)
        assert len(topology.namespaces) == 1
        ns = topology.namespaces[0]
        assert ns.name == "lightheus"
        assert ns.label_keys == ("host",)
        assert [fg.labels for fg in ns.file_groups] == [{"host": "a.com"}]
        assert [g.name for g in ns.gauges] == ["performance"]
        assert isinstance(ns.gauges[0], GaugeBinding)
        assert ns.gauges[0].path == "categories.performance.score"
        assert topology.metric_names() == ["lightheus_performance"]

    def test_namespace_override(self, sample_config, registry):
        """The namespace override replaces the group key."""
        sample_config["groups"]["lightheus"]["namespace"] = "site"
        topology = build_topology(ExporterConfig.model_validate(sample_config), registry)
        assert topology.namespaces[0].name == "site"
        assert topology.metric_names() == ["site_performance"]

    def test_file_labels_override_group_labels(self, two_file_config, registry):
        """Merged labels should prefer the file's value."""
        topology = build_topology(ExporterConfig.model_validate(two_file_config), registry)
        labels = {fg.name: fg.labels for fg in topology.namespaces[0].file_groups}
        assert labels["home"] == {"host": "a.com", "page": "home"}
        assert labels["pricing"] == {"host": "b.com", "page": "pricing"}
        assert topology.namespaces[0].label_keys == ("host", "page")

    def test_config_not_mutated(self, two_file_config, registry):
        """Building should not write merged labels back into the config."""
        cfg = ExporterConfig.model_validate(two_file_config)
        build_topology(cfg, registry)
        assert cfg.groups["lightheus"].files["home"].labels == {"page": "home"}

    def test_gauges_registered(self, two_file_config, registry):
        """Every metric should be registered with the label schema."""
        build_topology(ExporterConfig.model_validate(two_file_config), registry)
        names = {m.name for m in registry.collect()}
        assert names == {"lightheus_performance", "lightheus_accessibility"}

    def test_duplicate_across_groups_skipped(self, shared_namespace_config, registry):
        """A second registration of shared_performance should be skipped, not fatal."""
        topology = build_topology(
            ExporterConfig.model_validate(shared_namespace_config), registry
        )

        first, second = topology.namespaces
        assert [g.name for g in first.gauges] == ["performance"]
        assert [g.name for g in second.gauges] == ["pwa"]
        assert second.skipped == ["performance"]
        assert topology.metric_names().count("shared_performance") == 1

    def test_duplicate_keeps_first_binding_working(self, shared_namespace_config, registry):
        """The surviving binding should still update its series."""
        topology = build_topology(
            ExporterConfig.model_validate(shared_namespace_config), registry
        )
        topology.namespaces[0].gauges[0].set({"host": "a.com"}, 0.5)
        assert registry.get_sample_value("shared_performance", {"host": "a.com"}) == 0.5

    def test_existing_registry_name_skipped(self, sample_config, registry):
        """A name already taken in the registry should be skipped."""
        cfg = ExporterConfig.model_validate(sample_config)
        build_topology(cfg, registry)
        topology = build_topology(cfg, registry)
        assert topology.binding_count == 0
        assert topology.namespaces[0].skipped == ["performance"]

    def test_idempotent_on_fresh_registries(self, two_file_config):
        """Building twice yields the same names and label schemas."""
        from prometheus_client import CollectorRegistry

        cfg = ExporterConfig.model_validate(two_file_config)
        a = build_topology(cfg, CollectorRegistry())
        b = build_topology(cfg, CollectorRegistry())
        assert a.metric_names() == b.metric_names()
        assert [ns.label_keys for ns in a.namespaces] == [ns.label_keys for ns in b.namespaces]

    def test_no_labels_gives_unlabeled_gauge(self, sample_config, registry):
        """A group without any labels registers a plain gauge."""
        del sample_config["groups"]["lightheus"]["labels"]
        topology = build_topology(ExporterConfig.model_validate(sample_config), registry)
        binding = topology.namespaces[0].gauges[0]
        binding.set({}, 3.0)
        assert registry.get_sample_value("lightheus_performance") == 3.0

    def test_binding_sets_series_by_label_schema(self, two_file_config, registry):
        """Bindings carry the namespace label keys and select series positionally."""
        two_file_config["groups"]["lightheus"]["labels"]["self"] = "x"
        topology = build_topology(ExporterConfig.model_validate(two_file_config), registry)
        ns = topology.namespaces[0]
        binding = ns.gauges[0]
        assert binding.label_keys == ns.label_keys == ("host", "page", "self")

        binding.set(ns.file_groups[1].labels, 0.25)
        series = {"host": "b.com", "page": "pricing", "self": "x"}
        assert registry.get_sample_value("lightheus_performance", series) == 0.25

    def test_describe(self, sample_config, registry):
        """describe() should be JSON-friendly and list files and metrics."""
        topology = build_topology(ExporterConfig.model_validate(sample_config), registry)
        desc = topology.describe()
        assert desc["bindings"] == 1
        ns = desc["namespaces"][0]
        assert ns["name"] == "lightheus"
        assert ns["files"][0]["labels"] == {"host": "a.com"}
        assert ns["metrics"] == [{"name": "performance", "path": "categories.performance.score"}]


class TestBuildNamespace:
    """Tests for build_namespace guards."""

    def test_empty_files_guard(self, registry):
        """A group that bypassed validation with no files raises ConfigError."""
        group = NamespaceGroupSpec.model_construct(
            namespace_override=None,
            metrics={},
            labels={},
            files={},
        )
        with pytest.raises(ConfigError):
            build_namespace("empty", group, registry)
