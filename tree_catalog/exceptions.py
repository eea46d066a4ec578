# tree_catalog/exceptions.py
"""
Exception types for the tree catalogue and the FastAPI handlers that
turn them into HTTP responses.

Two families reach the client: "not found" conditions (missing image,
catalogue entry or template) answer 404 with an empty body, and server
errors (failed writes, bad upload bodies, template errors) answer 500
with the plain text ``Server Error``. ``StartupError`` never reaches a
client; it aborts the process before the server starts listening.
"""

import logging

from fastapi import Request
from fastapi.responses import PlainTextResponse, Response

logger = logging.getLogger(__name__)


class TreeCatalogException(Exception):
    """Base exception for the catalogue application."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class StartupError(TreeCatalogException):
    """Raised when configuration, templates or data cannot be loaded."""


# ---------------------------------------------------------------------------
# Not found


class NotFoundError(TreeCatalogException):
    def __init__(self, message: str):
        super().__init__(message, status_code=404)


class ImageNotFoundError(NotFoundError):
    def __init__(self, filename: str):
        super().__init__(f"Image not found: {filename}")
        self.filename = filename


class EntryNotFoundError(NotFoundError):
    def __init__(self, entry_id: str):
        super().__init__(f"Catalog entry not found: {entry_id}")
        self.entry_id = entry_id


class TemplateNotFoundError(NotFoundError):
    def __init__(self, template_name: str):
        super().__init__(f"Template not found: {template_name}")
        self.template_name = template_name


# ---------------------------------------------------------------------------
# Server errors


class ServerError(TreeCatalogException):
    def __init__(self, message: str):
        super().__init__(message, status_code=500)


class StorageWriteError(ServerError):
    """Raised when a file under the data or images directory cannot be written."""

    def __init__(self, path: str, error: str):
        super().__init__(f"Failed to write {path}: {error}")
        self.path = path


class UploadError(ServerError):
    """Raised when an upload body is not a usable multipart form."""


class TemplateRenderError(ServerError):
    """Raised when a template expression is invalid or cannot be resolved."""


# ---------------------------------------------------------------------------
# Exception handlers


async def not_found_handler(request: Request, exc: NotFoundError) -> Response:
    logger.info("%s %s -> 404 (%s)", request.method, request.url.path, exc.message)
    return Response(status_code=404)


async def server_error_handler(request: Request, exc: ServerError) -> Response:
    logger.error("%s %s -> 500 (%s)", request.method, request.url.path, exc.message)
    return PlainTextResponse("Server Error", status_code=500)
