from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, List, Tuple

Environ = Dict[str, Any]
HeaderList = List[Tuple[str, str]]
StartResponse = Callable[..., Callable[[bytes], Any]]
WSGIApp = Callable[[Environ, StartResponse], Iterable[bytes]]
