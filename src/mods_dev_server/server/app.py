"""Startup wiring: configuration, middleware chain and the livereload server."""

from __future__ import annotations

import sys
import threading
import webbrowser
from pathlib import Path
from typing import Any, Optional, Union

from livereload import Server

from mods_dev_server.config.settings import Settings
from mods_dev_server.core.errors import ConfigurationError
from mods_dev_server.core.types import WSGIApp
from mods_dev_server.server.context import ServerContext
from mods_dev_server.server.manifest import watch_manifest
from mods_dev_server.server.static import StaticFiles

_OPEN_BROWSER_DELAY = 1.0  # seconds


def _status(msg: str) -> None:
    print(msg, file=sys.stderr, flush=True)


def resolve_root(root: Union[str, Path]) -> Path:
    """Return *root* as an absolute path, or raise if it is not a directory."""
    path = Path(root).resolve()
    if not path.is_dir():
        raise ConfigurationError(f"The path '{path}' does not exist.")
    return path


def build_app(settings: Settings, context: ServerContext, root: Path) -> WSGIApp:
    """Wrap the static file app for *root* in ``settings.middleware``, first one outermost."""
    app: WSGIApp = StaticFiles(root, cors=settings.cors)
    for factory in reversed(settings.middleware):
        app = factory(app, context)
    return app


def create_server(
    settings: Settings,
    context: ServerContext,
    root: Optional[Path] = None,
) -> Server:
    """Create a livereload server for *settings* without starting it.

    Raises ``ConfigurationError`` before anything is created when the root
    directory is missing. *root*, when given, is the already resolved
    ``settings.root``.
    """
    if root is None:
        root = resolve_root(settings.root)
    server = Server(app=build_app(settings, context, root))

    def _add_watch(path: str, callback: Any) -> None:
        # The root watch below sends the reload.
        server.watch(path, callback, delay="forever")

    watch_manifest(root, context.set_external_resources, _add_watch, verbose=settings.verbose)
    server.watch(str(root), delay=settings.wait / 1000)
    return server


def start_server(**overrides: Any) -> None:
    """Serve a mod bundle with headers mimicking the mod runtime.

    Keyword arguments override the environment and the defaults of
    :class:`~mods_dev_server.config.settings.Settings`. Blocks until
    interrupted.
    """
    settings = Settings(**overrides)
    context = ServerContext()
    root = resolve_root(settings.root)
    server = create_server(settings, context, root)

    base_url = f"http://{settings.host}:{settings.port}"
    _status(f"Serving {root} at {base_url}")
    if context.external_resources:
        _status(f"External resources: {' '.join(context.external_resources)}")

    if settings.open:
        url = base_url + "/" + settings.open.lstrip("/")
        timer = threading.Timer(_OPEN_BROWSER_DELAY, webbrowser.open, args=(url,))
        timer.daemon = True
        timer.start()

    try:
        server.serve(
            port=settings.port,
            host=settings.host,
            root=str(root),
            debug=False,
            live_css=settings.live_css,
        )
    except KeyboardInterrupt:
        _status("\nShutting down.")
    finally:
        context.close()
