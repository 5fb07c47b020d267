"""vmmig_bench - Prometheus exporter for OpenShift Virtualization migrations."""

__version__ = "0.2.0"
