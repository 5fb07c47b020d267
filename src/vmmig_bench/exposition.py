"""
HTTP endpoint serving the exporter's registry in Prometheus text format.

    curl http://localhost:8080/metrics

Scrapes only read the in-memory values; they never trigger a poll.
"""

from __future__ import annotations

import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

log = logging.getLogger(__name__)

METRICS_PATH = "/metrics"


class _MetricsHandler(BaseHTTPRequestHandler):
    # Set per server class by MetricsServer
    registry: CollectorRegistry

    def do_GET(self):
        if self.path.split("?", 1)[0] == METRICS_PATH:
            body = generate_latest(self.registry)
            self.send_response(200)
            self.send_header("Content-Type", CONTENT_TYPE_LATEST)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)
        else:
            self.send_response(404)
            self.end_headers()

    def log_message(self, format, *args):
        log.debug("%s - %s", self.address_string(), format % args)


class MetricsServer:
    """Threaded HTTP server, one thread per scrape.

    Binds in the constructor, so a port already in use raises OSError
    before anything else starts.
    """

    def __init__(self, registry: CollectorRegistry, host: str = "", port: int = 8080):
        handler = type("MetricsHandler", (_MetricsHandler,), {"registry": registry})
        self._server = ThreadingHTTPServer((host, port), handler)
        self._server.daemon_threads = True
        self._serving = False

    @property
    def port(self) -> int:
        return self._server.server_address[1]

    def serve_forever(self):
        log.info("Serving metrics on :%d%s", self.port, METRICS_PATH)
        self._serving = True
        try:
            self._server.serve_forever()
        finally:
            self._serving = False

    def shutdown(self):
        # socketserver's shutdown() blocks forever unless serve_forever() is running
        if self._serving:
            self._server.shutdown()
        self._server.server_close()
