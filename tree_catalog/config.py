# tree_catalog/config.py
"""
Process settings and the persisted site configuration.

``Settings`` is read from environment variables (and an optional
``.env`` file) with pydantic-settings. Paths default to the layout the
catalogue has always used, relative to the working directory::

    config.json
    templates/
    public/catalog.css
    public/JSON/<id>.json
    public/images/<filename>

``SiteConfig`` is the ``config.json`` document. It currently holds the
site title and is rewritten whenever the title changes.
"""

from __future__ import annotations

import json
import logging
import threading
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import StartupError, StorageWriteError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    DATA_DIR: Path = Field(default=Path("public/JSON"), description="Catalog entry JSON files")
    IMAGES_DIR: Path = Field(default=Path("public/images"), description="Catalog images")
    TEMPLATES_DIR: Path = Field(default=Path("templates"), description="HTML templates")
    STYLESHEET_PATH: Path = Field(default=Path("public/catalog.css"), description="Stylesheet file")
    STYLESHEET_URL: str = Field(default="/public/catalog.css", description="URL the stylesheet is served at")
    CONFIG_FILE: Path = Field(default=Path("config.json"), description="Site configuration file")

    API_HOST: str = Field(default="0.0.0.0", description="Host to bind the server to")
    API_PORT: int = Field(default=3433, ge=1, le=65535, description="Port for the server")
    DEBUG: bool = Field(default=False, description="Verbose logging")

    # Legacy behaviour: any request carrying ?title=... rewrites config.json.
    TITLE_FROM_QUERY: bool = Field(
        default=False,
        description="Update the site title from a 'title' query parameter on any request",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return the cached ``Settings`` instance."""
    return Settings()


class SiteConfig(BaseModel):
    """Contents of ``config.json``.

    Keys other than ``title`` are kept as-is so that rewriting the file
    never drops information written by someone else.
    """

    model_config = ConfigDict(extra="allow")

    title: str = ""


class SiteConfigStore:
    """Owns ``config.json``: loads it once and rewrites it on change."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.config = SiteConfig()
        self._lock = threading.Lock()

    def load(self) -> SiteConfig:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StartupError(f"Cannot read config file {self.path}: {exc}") from exc
        try:
            self.config = SiteConfig.model_validate_json(raw)
        except ValidationError as exc:
            raise StartupError(f"Invalid config file {self.path}: {exc}") from exc
        return self.config

    @property
    def title(self) -> str:
        return self.config.title

    def set_title(self, title: str) -> SiteConfig:
        """Persist a new title, then update the in-memory copy."""
        updated = self.config.model_copy(update={"title": title})
        with self._lock:
            try:
                with self.path.open("w", encoding="utf-8") as f:
                    json.dump(updated.model_dump(), f, ensure_ascii=False)
            except OSError as exc:
                raise StorageWriteError(str(self.path), str(exc)) from exc
            self.config = updated
        logger.info("Site title set to %r", title)
        return updated
