"""
Decoded views of the two upstream collections.

These only carry the fields the exporter turns into metrics. They are
built per API response and thrown away once the metrics are written.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass
class VMSnapshot:
    name: str
    status: str  # printableStatus, e.g. "Running", "Stopped"

    @classmethod
    def from_item(cls, item: dict) -> "VMSnapshot":
        metadata = item.get("metadata") or {}
        status = item.get("status") or {}
        return cls(
            name=metadata.get("name", ""),
            status=status.get("printableStatus", ""),
        )


@dataclass
class MigrationVMSnapshot:
    name: str
    started: str = ""     # RFC3339, raw as received
    completed: str = ""
    failed: bool = False

    @classmethod
    def from_entry(cls, entry: dict) -> "MigrationVMSnapshot":
        return cls(
            name=entry.get("name", ""),
            started=entry.get("started") or "",
            completed=entry.get("completed") or "",
            failed=_vm_failed(entry),
        )


@dataclass
class MigrationSnapshot:
    name: str
    namespace: str
    vms: List[MigrationVMSnapshot] = field(default_factory=list)

    @classmethod
    def from_item(cls, item: dict) -> "MigrationSnapshot":
        metadata = item.get("metadata") or {}
        status = item.get("status") or {}
        return cls(
            name=metadata.get("name", ""),
            namespace=status.get("namespace", ""),
            vms=[MigrationVMSnapshot.from_entry(vm) for vm in status.get("vms") or []],
        )


def _vm_failed(entry: dict) -> bool:
    # Forklift reports a failed VM with an "error" block and/or a Failed condition
    if entry.get("error"):
        return True
    for cond in entry.get("conditions") or []:
        if cond.get("type") == "Failed" and str(cond.get("status", "")).lower() == "true":
            return True
    return False
