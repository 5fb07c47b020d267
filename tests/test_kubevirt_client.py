"""
Tests for the cluster API client against the fake KubeVirt server.
"""

import logging

import httpx
import pytest

from vmmig_bench.collector.kubevirt_client import MIGRATION_LIST_PATH, VM_LIST_PATH, KubeVirtClient
from vmmig_bench.errors import KubeVirtAPIError
from vmmig_bench.mock.fake_kubevirt_server import FakeKubeVirtServer


def test_sends_bearer_token():
    with FakeKubeVirtServer(token="sha256~abc") as server:
        client = KubeVirtClient(server.url, token="sha256~abc")
        try:
            vms = client.list_virtual_machines("migrationlab")
        finally:
            client.close()

    assert [(vm.name, vm.status) for vm in vms] == [("rocky9-esxi", "Running")]
    path, auth = server.requests[0]
    assert path == VM_LIST_PATH.format(namespace="migrationlab")
    assert auth == "Bearer sha256~abc"


def test_wrong_token_is_an_api_error_with_status():
    with FakeKubeVirtServer(token="right") as server:
        client = KubeVirtClient(server.url, token="wrong")
        with pytest.raises(KubeVirtAPIError) as exc_info:
            client.list_virtual_machines("default")
        client.close()

    assert exc_info.value.status_code == 401
    assert "401" in str(exc_info.value)


def test_non_200_raises():
    with FakeKubeVirtServer() as server:
        server.fail(MIGRATION_LIST_PATH, status_code=503)
        client = KubeVirtClient(server.url, token="t")
        with pytest.raises(KubeVirtAPIError) as exc_info:
            client.list_migrations()
        client.close()

    assert exc_info.value.status_code == 503


def test_invalid_json_raises():
    with FakeKubeVirtServer() as server:
        server.fail(MIGRATION_LIST_PATH, status_code=200, body=b"<html>not json</html>")
        client = KubeVirtClient(server.url, token="t")
        with pytest.raises(KubeVirtAPIError) as exc_info:
            client.list_migrations()
        client.close()

    assert exc_info.value.status_code is None


def test_malformed_items_raise():
    with FakeKubeVirtServer() as server:
        server.fail(MIGRATION_LIST_PATH, status_code=200, body=b'{"items": ["not-an-object"]}')
        client = KubeVirtClient(server.url, token="t")
        with pytest.raises(KubeVirtAPIError):
            client.list_migrations()
        client.close()


def test_transport_failure_raises():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = KubeVirtClient("https://api.unreachable:6443", token="t", transport=httpx.MockTransport(refuse))
    with pytest.raises(KubeVirtAPIError) as exc_info:
        client.get(MIGRATION_LIST_PATH)
    client.close()

    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


def test_missing_items_means_empty_list():
    def handler(request):
        return httpx.Response(200, json={"kind": "VirtualMachineList"})

    client = KubeVirtClient("https://api:6443", token="t", transport=httpx.MockTransport(handler))
    assert client.list_virtual_machines("default") == []
    client.close()


def test_insecure_mode_logs_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="vmmig_bench.collector.kubevirt_client"):
        client = KubeVirtClient("https://api:6443", token="t", insecure_skip_tls_verify=True)
        client.close()

    assert "verification is disabled" in caplog.text
