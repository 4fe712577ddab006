"""Health and metrics endpoints for the operator."""

import threading
from typing import Any

from prometheus_client import make_wsgi_app
from werkzeug.serving import make_server
from werkzeug.wrappers import Request, Response

HEALTH_PATHS = {
    "/healthz": '{"status":"ok"}',
    "/readyz": '{"status":"ready"}',
}


def health_check_app(environ: dict[str, Any], start_response: Any) -> list[bytes]:
    """WSGI application answering liveness and readiness probes."""
    request = Request(environ)
    body = HEALTH_PATHS.get(request.path)
    if body is None:
        response = Response('{"error":"not found"}', mimetype="application/json", status=404)
    else:
        response = Response(body, mimetype="application/json", status=200)
    return response(environ, start_response)


def create_combined_wsgi_app() -> Any:
    """Create a WSGI app serving /healthz and /readyz, delegating everything else to Prometheus.

    Returns:
        Combined WSGI application
    """
    metrics_app = make_wsgi_app()

    def combined_app(environ: dict[str, Any], start_response: Any) -> list[bytes]:
        if environ.get("PATH_INFO", "") in HEALTH_PATHS:
            return health_check_app(environ, start_response)
        return metrics_app(environ, start_response)

    return combined_app


def start_metrics_server(port: int) -> threading.Thread:
    """Serve metrics and health endpoints from a background thread.

    Args:
        port: Port to listen on

    Returns:
        The daemon thread running the server
    """
    server = make_server("", port, create_combined_wsgi_app(), threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return thread
