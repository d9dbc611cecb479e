"""
jsongauge - republish numeric fields of JSON reports as Prometheus gauges.

Key Components:
- ExporterConfig: Validated YAML configuration (groups -> files -> metrics)
- build_topology: Registers one gauge vector per configured metric
- Poller: Re-reads every file on a fixed cadence and updates the gauges
- Exporter: Wires poller and HTTP exposition together
"""

__version__ = "0.1.0"
