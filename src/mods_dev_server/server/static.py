"""WSGI application serving the files of a mod bundle directory."""

from __future__ import annotations

import html
import mimetypes
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union
from urllib.parse import quote

from mods_dev_server.core.types import Environ, HeaderList, StartResponse

# Some platforms map .js to text/plain, which makes browsers reject
# ES module scripts.
_MIME_OVERRIDES: Dict[str, str] = {
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".css": "text/css",
    ".json": "application/json",
    ".html": "text/html",
    ".svg": "image/svg+xml",
    ".wasm": "application/wasm",
}

_TEXT_PREFIXES = ("text/", "application/json", "application/javascript", "image/svg+xml")


def guess_type(path: Union[str, Path]) -> str:
    ext = Path(path).suffix.lower()
    if ext in _MIME_OVERRIDES:
        return _MIME_OVERRIDES[ext]
    guessed, _ = mimetypes.guess_type(str(path))
    return guessed or "application/octet-stream"


class StaticFiles:
    """Serve ``GET``/``HEAD`` requests from *root*.

    Directories serve ``index.html`` when present and a listing otherwise.
    Anything resolving outside *root* is reported as missing.
    """

    def __init__(
        self,
        root: Union[str, Path],
        *,
        cors: bool = False,
        index_file: str = "index.html",
    ) -> None:
        self.root = Path(root).resolve()
        self.cors = cors
        self.index_file = index_file

    def __call__(self, environ: Environ, start_response: StartResponse) -> Iterable[bytes]:
        method = environ.get("REQUEST_METHOD", "GET")

        if method == "OPTIONS":
            return self._respond(
                start_response,
                "204 No Content",
                [
                    ("Access-Control-Allow-Methods", "GET, HEAD, OPTIONS"),
                    ("Access-Control-Allow-Headers", "Content-Type"),
                ],
            )
        if method not in ("GET", "HEAD"):
            return self._respond(
                start_response,
                "405 Method Not Allowed",
                [("Allow", "GET, HEAD, OPTIONS")],
                b"Method Not Allowed",
            )

        url_path = _request_path(environ)
        target = self._resolve(url_path)
        if target is None:
            return self._respond(start_response, "404 Not Found", [], b"Not Found")

        if target.is_dir():
            if not url_path.endswith("/"):
                location = quote(url_path + "/")
                return self._respond(start_response, "301 Moved Permanently", [("Location", location)])
            index = target / self.index_file
            if not index.is_file():
                body = self._listing(target, url_path)
                return self._respond(
                    start_response,
                    "200 OK",
                    [("Content-Type", "text/html; charset=utf-8")],
                    body,
                    head=method == "HEAD",
                )
            target = index

        try:
            body = target.read_bytes()
        except PermissionError:
            return self._respond(start_response, "403 Forbidden", [], b"Forbidden")
        except OSError:
            return self._respond(start_response, "404 Not Found", [], b"Not Found")
        content_type = guess_type(target)
        if content_type.startswith(_TEXT_PREFIXES):
            content_type += "; charset=utf-8"
        return self._respond(
            start_response,
            "200 OK",
            [("Content-Type", content_type)],
            body,
            head=method == "HEAD",
        )

    # ── helpers ──────────────────────────────────────────────────────
    def _resolve(self, url_path: str) -> Optional[Path]:
        try:
            resolved = (self.root / url_path.lstrip("/")).resolve()
            if resolved != self.root and self.root not in resolved.parents:
                return None
            if not resolved.exists():
                return None
        except (OSError, ValueError):
            # embedded NUL bytes, names too long for the filesystem
            return None
        return resolved

    def _listing(self, directory: Path, url_path: str) -> bytes:
        title = html.escape(f"Index of {url_path}")
        items: List[str] = []
        for entry in sorted(directory.iterdir(), key=lambda p: p.name.lower()):
            name = entry.name + ("/" if entry.is_dir() else "")
            items.append(f'<li><a href="{quote(name)}">{html.escape(name)}</a></li>')
        listing = "\n".join(items)
        page = (
            "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"utf-8\">\n"
            f"<title>{title}</title>\n</head>\n<body>\n<h1>{title}</h1>\n"
            f"<ul>\n{listing}\n</ul>\n</body>\n</html>\n"
        )
        return page.encode("utf-8")

    def _respond(
        self,
        start_response: StartResponse,
        status: str,
        headers: HeaderList,
        body: bytes = b"",
        *,
        head: bool = False,
    ) -> List[bytes]:
        headers = list(headers)
        headers.append(("Content-Length", str(len(body))))
        if self.cors:
            headers.append(("Access-Control-Allow-Origin", "*"))
        start_response(status, headers)
        return [] if head else [body]


def _request_path(environ: Environ) -> str:
    # PEP 3333 hands PATH_INFO over as latin-1 decoded bytes.
    raw = environ.get("PATH_INFO", "") or "/"
    try:
        return raw.encode("latin-1").decode("utf-8", "replace")
    except UnicodeEncodeError:
        return raw
