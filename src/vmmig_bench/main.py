"""
vmmig_bench entry point.

Usage:
    vmmig-bench start --token <token> --server-url https://api.cluster:6443 --namespaces ns1,ns2

The three options can also come from OCP_TOKEN, OCP_SERVER_URL and
OCP_NAMESPACES.
"""

from __future__ import annotations

import logging

import click
from rich.console import Console

from vmmig_bench import __version__
from vmmig_bench.collector.kubevirt_client import KubeVirtClient
from vmmig_bench.collector.migration_collector import MigrationCollector
from vmmig_bench.collector.vm_collector import VirtualMachineCollector
from vmmig_bench.config import ExporterConfig
from vmmig_bench.errors import ConfigError
from vmmig_bench.exposition import MetricsServer
from vmmig_bench.metrics import ExporterMetrics
from vmmig_bench.scheduler import PollLoop


log = logging.getLogger("vmmig_bench")


def _print_banner(console: Console, config: ExporterConfig):
    console.print("[bold]========================================[/bold]")
    console.print(f"[bold]       vmmig_bench Exporter v{__version__}[/bold]")
    console.print("[bold]========================================[/bold]")
    console.print(
        f"start called with --token={config.masked_token} "
        f"--server-url={config.server_url} "
        f"--namespaces={','.join(config.namespaces)}"
    )
    if config.insecure_skip_tls_verify:
        console.print("[yellow]TLS certificate verification disabled[/yellow]")
    if config.prune_stale_status:
        console.print("[dim]Stale VM status series will be pruned[/dim]")


@click.group()
@click.version_option(version=__version__, prog_name="vmmig-bench")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging")
def cli(verbose: bool):
    """Prometheus exporter for OpenShift Virtualization (KubeVirt) migrations."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@cli.command()
@click.option("--token", default="", envvar="OCP_TOKEN", help="Authentication token (required)")
@click.option("--server-url", default="", envvar="OCP_SERVER_URL", help="Server URL (required)")
@click.option("--namespaces", default="", envvar="OCP_NAMESPACES",
              help="Comma-separated list of namespaces (required)")
@click.option("--insecure-skip-tls-verify", is_flag=True, default=False,
              help="Do not verify the API server's TLS certificate")
@click.option("--prune-stale-status", is_flag=True, default=False,
              help="Remove status series for VMs that vanished or changed status")
@click.pass_context
def start(ctx, token: str, server_url: str, namespaces: str,
          insecure_skip_tls_verify: bool, prune_stale_status: bool):
    """Poll the cluster and serve metrics on :8080/metrics."""
    if not token or not server_url or not namespaces:
        click.echo("Error: --token, --server-url, and --namespaces are required parameters", err=True)
        click.echo(ctx.get_usage(), err=True)
        raise SystemExit(1)

    try:
        config = ExporterConfig.from_options(
            token=token,
            server_url=server_url,
            namespaces=namespaces,
            insecure_skip_tls_verify=insecure_skip_tls_verify,
            prune_stale_status=prune_stale_status,
        )
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        click.echo(ctx.get_usage(), err=True)
        raise SystemExit(1)

    _print_banner(Console(), config)
    run_exporter(config)


def run_exporter(config: ExporterConfig):
    """Wire everything together and block serving scrapes."""
    try:
        metrics = ExporterMetrics()
    except ValueError as e:
        log.error("Error registering metrics: %s", e)
        raise SystemExit(1)

    try:
        server = MetricsServer(metrics.registry, port=config.listen_port)
    except OSError as e:
        log.error("Error starting Prometheus exporter on :%d: %s", config.listen_port, e)
        raise SystemExit(1)

    client = KubeVirtClient(
        server_url=config.server_url,
        token=config.token,
        insecure_skip_tls_verify=config.insecure_skip_tls_verify,
    )
    loop = PollLoop(
        collectors=[
            VirtualMachineCollector(client, metrics, prune_stale_status=config.prune_stale_status),
            MigrationCollector(client, metrics),
        ],
        namespaces=config.namespaces,
        interval=config.poll_interval,
    )
    loop.start()

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.shutdown()
        client.close()


if __name__ == "__main__":
    cli()
