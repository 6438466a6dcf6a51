from __future__ import annotations

from typing import Callable, Dict, Optional, Tuple
from wsgiref.util import setup_testing_defaults

import pytest

Response = Tuple[str, Dict[str, str], bytes]


def _call(app, path: str = "/", method: str = "GET", origin: Optional[str] = None) -> Response:
    environ: dict = {"PATH_INFO": path, "REQUEST_METHOD": method}
    if origin is not None:
        environ["HTTP_ORIGIN"] = origin
    setup_testing_defaults(environ)

    captured: dict = {}

    def start_response(status, headers, exc_info=None):
        captured["status"] = status
        captured["headers"] = headers
        return lambda data: None

    body = b"".join(app(environ, start_response))
    names = [k.lower() for k, _ in captured["headers"]]
    assert len(names) == len(set(names)), f"duplicate headers: {captured['headers']}"
    return captured["status"], {k.lower(): v for k, v in captured["headers"]}, body


@pytest.fixture
def wsgi_call() -> Callable[..., Response]:
    return _call


@pytest.fixture
def mod_root(tmp_path):
    root = tmp_path / "mod"
    root.mkdir()
    (root / "index.html").write_text("<html><head></head><body>mod</body></html>", encoding="utf-8")
    (root / "main.js").write_text("console.log('mod');", encoding="utf-8")
    return root
