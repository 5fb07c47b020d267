"""
Metric definitions for the exporter.

All series live in one CollectorRegistry owned by ExporterMetrics. The
registry is passed to whatever writes (collectors) or reads (the
/metrics endpoint) instead of using prometheus_client's global default
registry, so tests can build a fresh one per case.
"""

from __future__ import annotations

import logging
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge

log = logging.getLogger(__name__)


class ExporterMetrics:
    """Owns the registry and the four exported series.

    prometheus_client guards every child metric with its own lock, so
    the poll thread and scrape threads can share this object directly.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()

        # Registration fails with ValueError on duplicate names
        self.vm_count = Gauge(
            "virtual_machine_count_total",
            "Total number of virtual machines in the namespace",
            ["namespace"],
            registry=self.registry,
        )
        self.vm_status = Gauge(
            "virtual_machine_status",
            "Status of a virtual machine in the namespace",
            ["namespace", "vm_name", "status"],
            registry=self.registry,
        )
        self.failed_migrations = Counter(
            "failed_migrations_total",
            "Total number of failed migrations per namespace",
            ["namespace"],
            registry=self.registry,
        )
        self.migration_time = Gauge(
            "virtual_machine_migration_time_seconds",
            "Time taken for virtual machine migrations in the namespace",
            ["namespace", "vm_name"],
            registry=self.registry,
        )
        log.debug("Registered exporter metrics")

    def set_vm_count(self, namespace: str, count: int):
        self.vm_count.labels(namespace=namespace).set(count)

    def mark_vm_status(self, namespace: str, vm_name: str, status: str):
        # Presence indicator: 1 means "this VM was seen with this status"
        self.vm_status.labels(namespace=namespace, vm_name=vm_name, status=status).set(1)

    def clear_vm_status(self, namespace: str, vm_name: str, status: str):
        try:
            self.vm_status.remove(namespace, vm_name, status)
        except KeyError:
            pass

    def record_failed_migration(self, namespace: str):
        self.failed_migrations.labels(namespace=namespace).inc()

    def set_migration_time(self, namespace: str, vm_name: str, seconds: float):
        self.migration_time.labels(namespace=namespace, vm_name=vm_name).set(seconds)
