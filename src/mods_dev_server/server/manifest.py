"""Reading ``externalResources`` from the mod manifest and keeping it current."""

from __future__ import annotations

import json
import os
import sys
import warnings
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

from mods_dev_server.core.errors import ManifestWarning

MANIFEST_NAME = "mod-manifest.json"

ResourcesHandler = Callable[[Tuple[str, ...]], None]
AddWatch = Callable[[str, Callable[[], Any]], Any]


def parse_external_resources(text: str) -> List[str]:
    """Return the ``externalResources`` entries of a manifest document.

    Raises ``ValueError`` if *text* is not JSON or not a JSON object. A missing
    or non-list field yields ``[]``; non-string entries are dropped.
    """
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("manifest is not a JSON object")
    resources = data.get("externalResources")
    if not isinstance(resources, list):
        return []
    return [r for r in resources if isinstance(r, str)]


def find_manifest(root: Path) -> Optional[Path]:
    """Return the manifest path in *root*, warning if there is none."""
    if MANIFEST_NAME not in os.listdir(root):
        warnings.warn(
            f"Could not find a {MANIFEST_NAME} in the root directory {root}",
            ManifestWarning,
            stacklevel=2,
        )
        return None
    return root / MANIFEST_NAME


class ManifestWatcher:
    """Re-reads a manifest on demand and notifies subscribers.

    A read that fails keeps the last good resources, and subscribers are
    called with those. The file watch itself is owned by whoever calls
    :meth:`refresh`.
    """

    def __init__(self, manifest_path: Path, *, verbose: bool = False) -> None:
        self.manifest_path = manifest_path
        self.verbose = verbose
        self.resources: Tuple[str, ...] = ()
        self._handlers: List[ResourcesHandler] = []

    def subscribe(self, handler: ResourcesHandler) -> None:
        self._handlers.append(handler)

    def refresh(self) -> Tuple[str, ...]:
        try:
            text = self.manifest_path.read_text(encoding="utf-8")
            self.resources = tuple(parse_external_resources(text))
        except (OSError, ValueError) as exc:
            # The file may be mid-write; the next change event will retry.
            if self.verbose:
                print(f"Ignoring unreadable {self.manifest_path.name}: {exc}", file=sys.stderr)
        for handler in self._handlers:
            handler(self.resources)
        return self.resources


def watch_manifest(
    root: Path,
    on_resources: ResourcesHandler,
    add_watch: AddWatch,
    *,
    verbose: bool = False,
) -> Optional[ManifestWatcher]:
    """Read the manifest in *root* now and again whenever it changes.

    Parameters
    ----------
    root : Path
        Absolute directory that should contain ``mod-manifest.json``.
    on_resources : callable
        Receives the declared resources after every read.
    add_watch : callable
        ``add_watch(path, callback)`` registers *callback* for changes to
        *path*, e.g. ``livereload.Server.watch``.
    verbose : bool
        Report unreadable manifests on stderr.
    """
    manifest_path = find_manifest(root)
    if manifest_path is None:
        return None

    watcher = ManifestWatcher(manifest_path, verbose=verbose)
    watcher.subscribe(on_resources)
    watcher.refresh()
    add_watch(str(manifest_path), watcher.refresh)
    return watcher
