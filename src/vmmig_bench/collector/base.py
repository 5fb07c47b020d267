"""
Base collector interface.

A collector turns one kind of cluster resource into metric updates.
The poll loop only knows this interface, so it stays decoupled from
which API collections are queried and how they map to series.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from vmmig_bench.collector.kubevirt_client import KubeVirtClient
from vmmig_bench.metrics import ExporterMetrics


class MetricsCollector(ABC):
    """Shared wiring for all collection routines."""

    def __init__(self, client: KubeVirtClient, metrics: ExporterMetrics):
        self._client = client
        self._metrics = metrics
        self._log = logging.getLogger(type(self).__module__)

    @abstractmethod
    def collect(self, namespaces) -> None:
        """Run every routine of this collector for one poll cycle."""
        ...

    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this source."""
        ...
