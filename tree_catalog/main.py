# tree_catalog/main.py
"""
Application factory and entry point.

``create_app()`` loads everything the catalogue serves from disk
(site config, templates, stylesheet, catalogue entries) before the
server accepts a connection; any failure there is a ``StartupError``
and the process stops.

Usage:
    tree-catalog
    uvicorn --factory tree_catalog.main:create_app
"""

import logging
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI

from .catalog import catalog_router
from .catalog.pages import CatalogPages
from .catalog.router import apply_title_query, serve_stylesheet
from .catalog.store import CatalogStore
from .config import Settings, SiteConfigStore, get_settings
from .exceptions import (
    NotFoundError,
    ServerError,
    StartupError,
    not_found_handler,
    server_error_handler,
)
from .storage import ImageStore
from .templates import TemplateStore

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    site_config = SiteConfigStore(settings.CONFIG_FILE)
    site_config.load()

    templates = TemplateStore()
    templates.load_all(settings.TEMPLATES_DIR)

    try:
        stylesheet = settings.STYLESHEET_PATH.read_bytes()
    except OSError as exc:
        raise StartupError(f"Cannot read stylesheet {settings.STYLESHEET_PATH}: {exc}") from exc

    catalog = CatalogStore(settings.DATA_DIR)
    catalog.load_all()

    if not settings.IMAGES_DIR.is_dir():
        raise StartupError(f"Images directory {settings.IMAGES_DIR} does not exist")
    images = ImageStore(settings.IMAGES_DIR)

    dependencies = [Depends(apply_title_query)] if settings.TITLE_FROM_QUERY else []
    app = FastAPI(
        title="Tree Catalog",
        description="A small catalogue of trees with pictures, names and descriptions.",
        version="1.0.0",
        dependencies=dependencies,
    )
    app.state.settings = settings
    app.state.site_config = site_config
    app.state.stylesheet = stylesheet
    app.state.catalog = catalog
    app.state.images = images
    app.state.pages = CatalogPages(templates, catalog, images, title=lambda: site_config.title)

    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(ServerError, server_error_handler)

    # Registered before the catalog router so the image catch-all cannot shadow it.
    app.add_api_route(settings.STYLESHEET_URL, serve_stylesheet, methods=["GET"])
    app.include_router(catalog_router)

    logger.info(
        "Catalog ready: %d templates, %d entries, %d images",
        len(templates.names()),
        len(catalog),
        len(images.list()),
    )
    return app


def main() -> None:
    settings = get_settings()
    configure_logging(settings)
    try:
        app = create_app(settings)
    except StartupError as exc:
        logger.critical("Startup failed: %s", exc.message)
        raise SystemExit(1) from exc
    logger.info("Server is listening on port %d", settings.API_PORT)
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)


if __name__ == "__main__":
    main()
