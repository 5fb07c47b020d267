"""
Fake cluster API for running the exporter without an OpenShift cluster.

    python -m vmmig_bench.mock.fake_kubevirt_server
    vmmig-bench start --token dev --server-url http://127.0.0.1:9443 --namespaces default,migrationlab

Serves the KubeVirt VirtualMachine list per namespace and the Forklift
Migration list from an in-memory fixture. Tests swap the fixture or
force error responses per path.
"""

from __future__ import annotations

import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Dict, List, Optional

from vmmig_bench.collector.kubevirt_client import MIGRATION_LIST_PATH, VM_LIST_PATH


def vm_item(name: str, status: str) -> dict:
    return {
        "apiVersion": "kubevirt.io/v1",
        "kind": "VirtualMachine",
        "metadata": {"name": name},
        "status": {"printableStatus": status},
    }


def migration_item(name: str, namespace: str, vms: List[dict]) -> dict:
    return {
        "apiVersion": "forklift.konveyor.io/v1beta1",
        "kind": "Migration",
        "metadata": {"name": name, "namespace": "openshift-mtv"},
        "status": {"namespace": namespace, "vms": vms},
    }


def default_fixture() -> dict:
    return {
        "virtualmachines": {
            "default": [],
            "migrationlab": [vm_item("rocky9-esxi", "Running")],
        },
        "migrations": [
            migration_item("migrationlab-plan-1", "migrationlab", [
                {
                    "name": "centos-stream10-apricot-slug-73",
                    "started": "2025-03-10T09:00:00Z",
                    "completed": "2025-03-10T09:17:23Z",
                },
            ]),
        ],
    }


class _APIHandler(BaseHTTPRequestHandler):
    # Set per server by FakeKubeVirtServer
    state: "FakeKubeVirtServer"

    def do_GET(self):
        state = self.state
        path = self.path.split("?", 1)[0]

        with state.lock:
            state.requests.append((path, self.headers.get("Authorization", "")))
            forced = state.errors.get(path)

            if state.token and self.headers.get("Authorization") != f"Bearer {state.token}":
                self._send(401, {"kind": "Status", "message": "Unauthorized", "code": 401})
                return
            if forced is not None:
                self._send_raw(forced[0], forced[1])
                return

            payload = self._lookup(path, state.fixture)

        if payload is None:
            self._send(404, {"kind": "Status", "message": "the server could not find the requested resource", "code": 404})
        else:
            self._send(200, payload)

    @staticmethod
    def _lookup(path: str, fixture: dict) -> Optional[dict]:
        if path == MIGRATION_LIST_PATH:
            return {"kind": "MigrationList", "items": fixture.get("migrations", [])}

        prefix, _, suffix = VM_LIST_PATH.partition("{namespace}")
        if path.startswith(prefix) and path.endswith(suffix):
            namespace = path[len(prefix):len(path) - len(suffix)]
            # Unknown namespaces look empty, as they do to a real API server
            return {"kind": "VirtualMachineList", "items": fixture.get("virtualmachines", {}).get(namespace, [])}
        return None

    def _send(self, code: int, payload: dict):
        self._send_raw(code, json.dumps(payload).encode())

    def _send_raw(self, code: int, body: bytes):
        self.send_response(code)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass  # Suppress request logging noise


class FakeKubeVirtServer:
    """In-process fake of the two API collections the exporter reads."""

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 0,
        fixture: Optional[dict] = None,
        token: Optional[str] = None,
    ):
        self.lock = threading.Lock()
        self.fixture = fixture if fixture is not None else default_fixture()
        self.token = token
        self.errors: Dict[str, tuple] = {}
        self.requests: List[tuple] = []

        handler = type("APIHandler", (_APIHandler,), {"state": self})
        self._server = ThreadingHTTPServer((host, port), handler)
        self._server.daemon_threads = True
        self._thread: Optional[threading.Thread] = None

    @property
    def url(self) -> str:
        host, port = self._server.server_address[:2]
        return f"http://{host}:{port}"

    def set_fixture(self, fixture: dict):
        with self.lock:
            self.fixture = fixture

    def fail(self, path: str, status_code: int = 500, body: bytes = b'{"kind":"Status","code":500}'):
        """Make every GET on path answer with status_code and body."""
        with self.lock:
            self.errors[path] = (status_code, body)

    def recover(self, path: Optional[str] = None):
        with self.lock:
            if path is None:
                self.errors.clear()
            else:
                self.errors.pop(path, None)

    def start(self) -> "FakeKubeVirtServer":
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()
        return self

    def stop(self):
        self._server.shutdown()
        self._server.server_close()

    def __enter__(self):
        return self.start()

    def __exit__(self, *exc):
        self.stop()


def run_fake_server(host: str = "127.0.0.1", port: int = 9443):
    server = FakeKubeVirtServer(host=host, port=port)
    print(f"Fake KubeVirt API running at {server.url}")
    print("Press Ctrl+C to stop.\n")
    try:
        server._server.serve_forever()
    except KeyboardInterrupt:
        pass
    server._server.server_close()
    print("\nServer stopped.")


if __name__ == "__main__":
    run_fake_server()
