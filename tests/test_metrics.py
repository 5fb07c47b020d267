"""Tests for the exporter's metric registry."""

import pytest
from prometheus_client import CollectorRegistry, Gauge

from vmmig_bench.metrics import ExporterMetrics


def test_each_instance_has_its_own_registry():
    a = ExporterMetrics()
    b = ExporterMetrics()
    a.set_vm_count("default", 3)

    assert a.registry.get_sample_value("virtual_machine_count_total", {"namespace": "default"}) == 3
    assert b.registry.get_sample_value("virtual_machine_count_total", {"namespace": "default"}) is None


def test_double_registration_raises_value_error():
    registry = CollectorRegistry()
    ExporterMetrics(registry)
    with pytest.raises(ValueError):
        ExporterMetrics(registry)


def test_conflicting_name_raises_value_error():
    registry = CollectorRegistry()
    Gauge("virtual_machine_status", "someone else's metric", registry=registry)
    with pytest.raises(ValueError):
        ExporterMetrics(registry)


def test_clear_missing_status_is_a_no_op():
    metrics = ExporterMetrics()
    metrics.clear_vm_status("lab", "ghost", "Running")


def test_failed_migrations_counter_exposes_total_suffix():
    metrics = ExporterMetrics()
    metrics.record_failed_migration("lab")
    metrics.record_failed_migration("lab")
    assert metrics.registry.get_sample_value("failed_migrations_total", {"namespace": "lab"}) == 2
