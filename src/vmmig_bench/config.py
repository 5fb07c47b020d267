"""
Runtime configuration for the exporter.

Built once from CLI options at startup and never mutated afterwards.
The poll interval and listen port are fixed here rather than exposed
as flags.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Tuple

from vmmig_bench.errors import ConfigError

DEFAULT_POLL_INTERVAL = 15.0
DEFAULT_LISTEN_PORT = 8080


def parse_namespaces(raw: str) -> Tuple[str, ...]:
    """Split a comma-separated namespace list, dropping blanks."""
    if not raw:
        return ()
    return tuple(ns.strip() for ns in raw.split(",") if ns.strip())


@dataclass(frozen=True)
class ExporterConfig:
    token: str = field(repr=False)
    server_url: str
    namespaces: Tuple[str, ...]
    poll_interval: float = DEFAULT_POLL_INTERVAL
    insecure_skip_tls_verify: bool = False
    prune_stale_status: bool = False
    listen_port: int = DEFAULT_LISTEN_PORT

    def __post_init__(self):
        if not self.token:
            raise ConfigError("token must not be empty")
        if not self.server_url:
            raise ConfigError("server URL must not be empty")
        if not self.server_url.startswith(("http://", "https://")):
            raise ConfigError(f"server URL must start with http:// or https://, got {self.server_url!r}")
        if not self.namespaces:
            raise ConfigError("at least one namespace is required")
        if self.poll_interval <= 0:
            raise ConfigError("poll interval must be positive")

    @classmethod
    def from_options(
        cls,
        token: str,
        server_url: str,
        namespaces: str | Iterable[str],
        **kwargs,
    ) -> "ExporterConfig":
        if isinstance(namespaces, str):
            ns = parse_namespaces(namespaces)
        else:
            ns = tuple(n for n in namespaces if n)
        return cls(
            token=token,
            server_url=server_url.rstrip("/"),
            namespaces=ns,
            **kwargs,
        )

    @property
    def masked_token(self) -> str:
        return "***"
