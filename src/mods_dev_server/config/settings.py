from typing import Any, Callable, List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mods_dev_server.server.manifest import MANIFEST_NAME
from mods_dev_server.server.middleware import HeaderPolicyMiddleware


def _default_middleware() -> List[Callable[..., Any]]:
    return [HeaderPolicyMiddleware]


class Settings(BaseSettings):
    port: int = 8090
    host: str = "127.0.0.1"
    root: str = "./test/test-files/"
    # Blanket CORS on the static app; the header policy handles CORS itself.
    cors: bool = False
    open: Optional[str] = "/" + MANIFEST_NAME
    wait: int = 250  # ms before a reload is sent
    live_css: bool = False
    verbose: bool = False
    middleware: List[Callable[..., Any]] = Field(default_factory=_default_middleware)

    model_config = SettingsConfigDict(
        env_prefix="MODS_DEV_",
        env_file=".env",
        extra="ignore",
    )
