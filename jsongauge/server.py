"""HTTP exposition of the metrics registry on a single path."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from socketserver import ThreadingMixIn
from typing import Any
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import REGISTRY, CollectorRegistry, make_wsgi_app

logger = logging.getLogger(__name__)

WSGIApp = Callable[[dict[str, Any], Callable[..., Any]], Iterable[bytes]]


class ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """Handle scrapes in worker threads so a slow client cannot stall others."""

    daemon_threads = True


class _LoggingRequestHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args: Any) -> None:
        logger.debug(f"{self.address_string()} {format % args}")


def make_metrics_app(metrics_path: str, registry: CollectorRegistry = REGISTRY) -> WSGIApp:
    """Wrap the prometheus_client WSGI app so only ``metrics_path`` is routed."""
    exposition = make_wsgi_app(registry)

    def app(environ: dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
        if environ.get("PATH_INFO") != metrics_path:
            start_response("404 Not Found", [("Content-Type", "text/plain; charset=utf-8")])
            return [b"Not Found\n"]
        if environ.get("REQUEST_METHOD", "GET") not in ("GET", "HEAD"):
            start_response(
                "405 Method Not Allowed",
                [("Content-Type", "text/plain; charset=utf-8"), ("Allow", "GET, HEAD")],
            )
            return [b"Method Not Allowed\n"]
        return exposition(environ, start_response)

    return app


def create_server(
    host: str,
    port: int,
    metrics_path: str,
    registry: CollectorRegistry = REGISTRY,
) -> WSGIServer:
    """
    Bind the exposition server.

    Raises:
        OSError: If the address cannot be bound (e.g. already in use).
    """
    app = make_metrics_app(metrics_path, registry)
    return make_server(
        host,
        port,
        app,
        server_class=ThreadingWSGIServer,
        handler_class=_LoggingRequestHandler,
    )
