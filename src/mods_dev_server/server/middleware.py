"""WSGI middleware mimicking the mod runtime's CORS and CSP headers."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from mods_dev_server.core.types import Environ, HeaderList, StartResponse, WSGIApp
from mods_dev_server.server.context import ServerContext

ALLOW_HEADERS = "Origin, X-Requested-With, Content-Type, Accept"
CSP_PREFIX = "sandbox allow-scripts; default-src 'self' 'unsafe-eval' 'unsafe-inline' blob: data:"
LEGACY_CSP = "sandbox allow-scripts"


def policy_headers(method: str, origin: Optional[str], context: ServerContext) -> HeaderList:
    """Compute the response headers for one request, recording its origin.

    A sandboxed iframe without ``allow-same-origin`` sends ``Origin: null``.
    Those requests get no CORS headers and their origin is not allowed, so
    module loading fails just like it does when embedded in the runtime.
    """
    headers: HeaderList = []

    # A CORS request from outside the sandbox.
    if origin and origin != "null":
        context.allow_origin(origin)
        headers.append(("Access-Control-Allow-Headers", ALLOW_HEADERS))
        headers.append(("Access-Control-Allow-Origin", "*"))

    # No caching at all, so stale CSP headers or pages without the
    # live-reload snippet are never reused.
    headers.append(("Cache-Control", "no-store"))

    if method != "GET":
        return headers

    sources = " ".join(context.csp_sources())
    headers.append(("content-security-policy", f"{CSP_PREFIX} {sources}"))
    # Older browsers without full CSP support.
    headers.append(("x-content-security-policy", LEGACY_CSP))
    return headers


class HeaderPolicyMiddleware:
    """Add the policy headers to every response of the wrapped application.

    Headers set here replace same-named headers from the wrapped app.
    """

    def __init__(self, app: WSGIApp, context: ServerContext) -> None:
        self.app = app
        self.context = context

    def __call__(self, environ: Environ, start_response: StartResponse) -> Iterable[bytes]:
        extra = policy_headers(
            environ.get("REQUEST_METHOD", "GET"),
            environ.get("HTTP_ORIGIN"),
            self.context,
        )
        overridden = {name.lower() for name, _ in extra}

        def _start_response(status: str, headers: HeaderList, exc_info: Any = None):
            kept = [(k, v) for k, v in headers if k.lower() not in overridden]
            return start_response(status, kept + extra, exc_info)

        return self.app(environ, _start_response)
