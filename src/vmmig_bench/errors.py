"""Exception types raised by the exporter."""

from __future__ import annotations

from typing import Optional


class VmmigError(Exception):
    """Base class for everything the exporter raises on purpose."""


class ConfigError(VmmigError):
    """Startup parameters are missing or invalid."""


class KubeVirtAPIError(VmmigError):
    """A call against the cluster API failed.

    Covers transport failures, non-200 responses and bodies that are not
    valid JSON. ``status_code`` is set only when the server answered.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
