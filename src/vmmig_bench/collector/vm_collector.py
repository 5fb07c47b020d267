"""
Per-namespace virtual machine metrics: how many VMs exist and which
printable status each one reports.

Status series are presence indicators (value 1). By default nothing is
ever removed, so a VM that changed status keeps its old series at 1
until the process restarts. With prune_stale_status enabled, series
this collector set in the previous successful poll of a namespace and
absent from the current one are dropped.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Set, Tuple

from vmmig_bench.collector.base import MetricsCollector
from vmmig_bench.collector.kubevirt_client import KubeVirtClient
from vmmig_bench.errors import KubeVirtAPIError
from vmmig_bench.metrics import ExporterMetrics


class VirtualMachineCollector(MetricsCollector):

    def __init__(
        self,
        client: KubeVirtClient,
        metrics: ExporterMetrics,
        prune_stale_status: bool = False,
    ):
        super().__init__(client, metrics)
        self._prune_stale_status = prune_stale_status
        self._seen_status: Dict[str, Set[Tuple[str, str]]] = {}

    def export_count(self, namespace: str) -> Optional[int]:
        """Set the VM count gauge for a namespace. Returns None on failure."""
        self._log.debug("Fetching virtual machine count for namespace %s", namespace)
        try:
            vms = self._client.list_virtual_machines(namespace)
        except KubeVirtAPIError as e:
            self._log.warning("Failed to count virtual machines in %s: %s", namespace, e)
            return None

        count = len(vms)
        self._metrics.set_vm_count(namespace, count)
        return count

    def export_statuses(self, namespace: str) -> Optional[Dict[str, str]]:
        """Mark each VM's current status. Returns {vm_name: status} or None on failure."""
        self._log.debug("Fetching virtual machine names and statuses for namespace %s", namespace)
        try:
            vms = self._client.list_virtual_machines(namespace)
        except KubeVirtAPIError as e:
            self._log.warning("Failed to fetch virtual machine statuses in %s: %s", namespace, e)
            return None

        statuses: Dict[str, str] = {}
        for vm in vms:
            statuses[vm.name] = vm.status
            self._metrics.mark_vm_status(namespace, vm.name, vm.status)

        if self._prune_stale_status:
            self._prune(namespace, set(statuses.items()))

        return statuses

    def _prune(self, namespace: str, current: Set[Tuple[str, str]]):
        previous = self._seen_status.get(namespace, set())
        for vm_name, status in previous - current:
            self._log.info("Dropping stale status series %s/%s=%s", namespace, vm_name, status)
            self._metrics.clear_vm_status(namespace, vm_name, status)
        self._seen_status[namespace] = current

    def collect(self, namespaces: Iterable[str]) -> None:
        for namespace in namespaces:
            self.export_count(namespace)
            self.export_statuses(namespace)

    def name(self) -> str:
        return f"KubeVirt virtual machines ({self._client.server_url})"
