"""
Thin client for the two cluster API collections the exporter reads:
KubeVirt virtual machines (per namespace) and Forklift migrations
(cluster-wide). Every call is a single authenticated GET; failures
surface as KubeVirtAPIError and are never retried here.
"""

from __future__ import annotations

import json
import logging
from typing import List, Optional

import httpx

from vmmig_bench.errors import KubeVirtAPIError
from vmmig_bench.snapshots import MigrationSnapshot, VMSnapshot

log = logging.getLogger(__name__)

VM_LIST_PATH = "/apis/kubevirt.io/v1/namespaces/{namespace}/virtualmachines"
MIGRATION_LIST_PATH = "/apis/forklift.konveyor.io/v1beta1/migrations"


class KubeVirtClient:

    def __init__(
        self,
        server_url: str,
        token: str,
        insecure_skip_tls_verify: bool = False,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._server_url = server_url.rstrip("/")
        if insecure_skip_tls_verify:
            log.warning("TLS certificate verification is disabled for %s", self._server_url)

        self._client = httpx.Client(
            headers={"Authorization": f"Bearer {token}"},
            verify=not insecure_skip_tls_verify,
            transport=transport,
        )

    @property
    def server_url(self) -> str:
        return self._server_url

    def get(self, path: str) -> bytes:
        """GET a path on the API server and return the raw body on 200."""
        url = f"{self._server_url}{path}"
        log.debug("Request URL: %s", url)

        try:
            response = self._client.get(url)
        except httpx.HTTPError as e:
            raise KubeVirtAPIError(f"request to {url} failed: {e}") from e

        log.debug("Response status code for %s: %d", url, response.status_code)
        if response.status_code != 200:
            raise KubeVirtAPIError(
                f"unexpected status code: {response.status_code}",
                status_code=response.status_code,
            )
        return response.content

    def get_json(self, path: str) -> dict:
        body = self.get(path)
        try:
            data = json.loads(body)
        except ValueError as e:
            raise KubeVirtAPIError(f"invalid JSON from {path}: {e}") from e
        if not isinstance(data, dict):
            raise KubeVirtAPIError(f"expected a JSON object from {path}, got {type(data).__name__}")
        return data

    def list_virtual_machines(self, namespace: str) -> List[VMSnapshot]:
        path = VM_LIST_PATH.format(namespace=namespace)
        data = self.get_json(path)
        try:
            return [VMSnapshot.from_item(item) for item in data.get("items") or []]
        except (AttributeError, TypeError) as e:
            raise KubeVirtAPIError(f"malformed virtual machine list from {path}: {e}") from e

    def list_migrations(self) -> List[MigrationSnapshot]:
        data = self.get_json(MIGRATION_LIST_PATH)
        try:
            return [MigrationSnapshot.from_item(item) for item in data.get("items") or []]
        except (AttributeError, TypeError) as e:
            raise KubeVirtAPIError(f"malformed migration list from {MIGRATION_LIST_PATH}: {e}") from e

    def close(self):
        self._client.close()
