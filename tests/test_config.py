"""Tests for ExporterConfig construction and validation."""

import dataclasses

import pytest

from vmmig_bench.config import DEFAULT_LISTEN_PORT, DEFAULT_POLL_INTERVAL, ExporterConfig, parse_namespaces
from vmmig_bench.errors import ConfigError


def test_parse_namespaces_trims_and_drops_blanks():
    assert parse_namespaces("migrationlab, default,,") == ("migrationlab", "default")


def test_parse_namespaces_empty():
    assert parse_namespaces("") == ()


def test_from_options_defaults():
    config = ExporterConfig.from_options(
        token="sha256~secret",
        server_url="https://api.migrationlab.example:6443/",
        namespaces="migrationlab,default",
    )
    assert config.server_url == "https://api.migrationlab.example:6443"
    assert config.namespaces == ("migrationlab", "default")
    assert config.poll_interval == DEFAULT_POLL_INTERVAL == 15.0
    assert config.listen_port == DEFAULT_LISTEN_PORT == 8080
    assert config.insecure_skip_tls_verify is False
    assert config.prune_stale_status is False


def test_token_never_in_repr():
    config = ExporterConfig.from_options(token="sha256~secret", server_url="https://x", namespaces="a")
    assert "sha256~secret" not in repr(config)
    assert config.masked_token == "***"


@pytest.mark.parametrize("kwargs", [
    dict(token="", server_url="https://x", namespaces="a"),
    dict(token="t", server_url="", namespaces="a"),
    dict(token="t", server_url="api.example:6443", namespaces="a"),
    dict(token="t", server_url="https://x", namespaces=" , "),
])
def test_invalid_options_raise_config_error(kwargs):
    with pytest.raises(ConfigError):
        ExporterConfig.from_options(**kwargs)


def test_non_positive_interval_rejected():
    with pytest.raises(ConfigError):
        ExporterConfig.from_options(token="t", server_url="https://x", namespaces="a", poll_interval=0)


def test_config_is_immutable():
    config = ExporterConfig.from_options(token="t", server_url="https://x", namespaces="a")
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.token = "other"
