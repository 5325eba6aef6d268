"""
HTTP front end. Serves the Prometheus text exposition of a dedicated
registry at the configured metrics path; every other path is a 404.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import CollectorRegistry, make_wsgi_app
from prometheus_client.exposition import ThreadingWSGIServer

from multipass_exporter.collector.base import CommandRunner
from multipass_exporter.collector.exporter import MultipassCollector
from multipass_exporter.collector.fetcher import SnapshotFetcher
from multipass_exporter.config import ExporterConfig
from multipass_exporter.engine.deriver import MetricDeriver
from multipass_exporter.engine.descriptors import build_descriptor_table

log = logging.getLogger(__name__)


class _LoggingHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        log.debug("%s %s", self.address_string(), format % args)


def build_collector(config: ExporterConfig, runner: Optional[CommandRunner] = None) -> MultipassCollector:
    fetcher = SnapshotFetcher(runner=runner, timeout_seconds=config.timeout_seconds)
    deriver = MetricDeriver(build_descriptor_table())
    return MultipassCollector(fetcher, deriver)


def build_registry(collector: MultipassCollector) -> CollectorRegistry:
    registry = CollectorRegistry(auto_describe=True)
    registry.register(collector)
    return registry


def create_app(registry: CollectorRegistry, metrics_path: str = "/metrics") -> Callable:
    metrics_app = make_wsgi_app(registry)
    not_found = (
        f"Multipass Exporter\nMetrics are served at {metrics_path}\n"
    ).encode("utf-8")

    def app(environ, start_response):
        if environ.get("PATH_INFO", "/") == metrics_path:
            return metrics_app(environ, start_response)
        start_response("404 Not Found", [
            ("Content-Type", "text/plain; charset=utf-8"),
            ("Content-Length", str(len(not_found))),
        ])
        return [not_found]

    return app


def create_server(app: Callable, host: str = "", port: int = 1986) -> WSGIServer:
    # Threaded so a slow multipass call doesn't block other scrapes
    return make_server(host, port, app, ThreadingWSGIServer, handler_class=_LoggingHandler)


def serve(config: ExporterConfig, runner: Optional[CommandRunner] = None):
    collector = build_collector(config, runner)
    app = create_app(build_registry(collector), config.metrics_path)
    server = create_server(app, config.listen_address, config.port)

    log.info(
        "Multipass Exporter is running on %s:%d%s (source: %s)",
        config.listen_address or "0.0.0.0", server.server_port, config.metrics_path, collector.name(),
    )
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
        log.info("Server stopped")
