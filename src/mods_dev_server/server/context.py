"""Per-run state shared by the header policy and the manifest watcher."""

from __future__ import annotations

import threading
from typing import Dict, List, Sequence, Tuple


class ServerContext:
    """Owns the origins seen on cross-origin requests and the resources
    declared in the manifest.

    Created when a server starts and closed when it stops. Origins only ever
    accumulate; the declared resources are replaced as a whole on each
    successful manifest read.
    """

    def __init__(self) -> None:
        # dict keys keep insertion order, so the CSP lists origins as first seen
        self._origins: Dict[str, None] = {}
        self._resources: Tuple[str, ...] = ()
        self._lock = threading.Lock()

    @property
    def allowed_origins(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._origins)

    @property
    def external_resources(self) -> Tuple[str, ...]:
        return self._resources

    def allow_origin(self, origin: str) -> None:
        with self._lock:
            self._origins[origin] = None

    def set_external_resources(self, resources: Sequence[str]) -> None:
        self._resources = tuple(resources)

    def csp_sources(self) -> List[str]:
        """Allowed origins followed by declared resources, duplicates kept."""
        return list(self.allowed_origins) + list(self._resources)

    def close(self) -> None:
        with self._lock:
            self._origins.clear()
        self._resources = ()
