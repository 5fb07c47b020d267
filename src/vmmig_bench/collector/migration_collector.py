"""
Migration duration metrics from Forklift Migration resources.

Queried cluster-wide rather than per configured namespace; the
namespace label comes from each migration's status block.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Dict, Iterable, Optional, Set, Tuple

from vmmig_bench.collector.base import MetricsCollector
from vmmig_bench.collector.kubevirt_client import KubeVirtClient
from vmmig_bench.errors import KubeVirtAPIError
from vmmig_bench.metrics import ExporterMetrics

_RFC3339_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(\.\d+)?(Z|[+-]\d{2}:\d{2})$"
)


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC3339 timestamp. Raises ValueError if it isn't one.

    Only the extended RFC3339 shape is accepted, with a mandatory
    timezone; fromisoformat() alone also takes basic ISO-8601 forms
    such as 20250310T090000Z and naive timestamps.
    """
    if not isinstance(value, str):
        raise ValueError(f"timestamp {value!r} is not a string")
    match = _RFC3339_RE.match(value.strip())
    if match is None:
        raise ValueError(f"timestamp {value!r} is not RFC3339")

    base, fraction, offset = match.groups()
    # fromisoformat takes at most microsecond precision
    fraction = fraction[:7] if fraction else ""
    offset = "+00:00" if offset == "Z" else offset
    return datetime.fromisoformat(base + fraction + offset)


class MigrationCollector(MetricsCollector):

    def __init__(self, client: KubeVirtClient, metrics: ExporterMetrics):
        super().__init__(client, metrics)
        # (namespace, migration, vm) failures seen in the last successful poll
        self._counted_failures: Set[Tuple[str, str, str]] = set()

    def export_durations(self) -> Optional[Dict[Tuple[str, str], float]]:
        """Set the duration gauge for every completed VM migration.

        Returns {(namespace, vm_name): seconds} for what was written, or
        None when the migration list could not be fetched.
        """
        try:
            migrations = self._client.list_migrations()
        except KubeVirtAPIError as e:
            self._log.warning("Failed to fetch migrations: %s", e)
            return None

        durations: Dict[Tuple[str, str], float] = {}
        failures: Set[Tuple[str, str, str]] = set()
        for migration in migrations:
            for vm in migration.vms:
                if vm.failed:
                    failures.add((migration.namespace, migration.name, vm.name))

                try:
                    started = parse_rfc3339(vm.started)
                except ValueError as e:
                    self._log.warning("Error parsing start time for VM %s: %s", vm.name, e)
                    continue
                try:
                    completed = parse_rfc3339(vm.completed)
                except ValueError as e:
                    self._log.warning("Error parsing completion time for VM %s: %s", vm.name, e)
                    continue

                seconds = (completed - started).total_seconds()
                if seconds < 0:
                    self._log.warning(
                        "VM %s completed before it started (%s < %s), skipping",
                        vm.name, vm.completed, vm.started,
                    )
                    continue

                self._log.debug("VM %s migration duration: %.0f seconds", vm.name, seconds)
                self._metrics.set_migration_time(migration.namespace, vm.name, seconds)
                durations[(migration.namespace, vm.name)] = seconds

        self._count_new_failures(failures)
        return durations

    def _count_new_failures(self, failures: Set[Tuple[str, str, str]]):
        for namespace, migration, vm_name in sorted(failures - self._counted_failures):
            self._log.info("Migration %s failed for VM %s in %s", migration or "<unnamed>", vm_name, namespace)
            self._metrics.record_failed_migration(namespace)
        self._counted_failures = failures

    def collect(self, namespaces: Iterable[str] = ()) -> None:
        # Migrations are read cluster-wide; configured namespaces don't apply
        self.export_durations()

    def name(self) -> str:
        return f"Forklift migrations ({self._client.server_url})"
