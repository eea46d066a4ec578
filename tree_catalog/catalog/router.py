"""
Route definitions for the tree catalogue.

Endpoints:
- GET  /, /catalog      : catalogue listing page
- POST /, /catalog      : upload an image with its name/description, then listing
- GET  /tree/{entry_id} : detail page of one entry
- POST /config/title    : change the site title
- GET  /{filename}      : raw image bytes from the images directory

The stylesheet route is registered by the application factory because
its URL comes from the settings; it must precede the image catch-all.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, Response
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from ..config import SiteConfigStore
from ..exceptions import StorageWriteError, UploadError
from ..storage import ImageStore, safe_filename
from .pages import CatalogPages, entry_id_for
from .schemas import CatalogEntry
from .store import CatalogStore

logger = logging.getLogger(__name__)

IMAGE_MEDIA_TYPE = "image/*"

router = APIRouter(tags=["catalog"])


# ---------------------------------------------------------------------------
# Dependencies
#
# Stores are created once by the application factory and kept on
# ``app.state``; handlers reach them through these small accessors.


def get_pages(request: Request) -> CatalogPages:
    return request.app.state.pages


def get_catalog(request: Request) -> CatalogStore:
    return request.app.state.catalog


def get_images(request: Request) -> ImageStore:
    return request.app.state.images


def get_site_config(request: Request) -> SiteConfigStore:
    return request.app.state.site_config


def apply_title_query(request: Request) -> None:
    """Rewrite the site title from ``?title=...`` on any request.

    Only installed when ``TITLE_FROM_QUERY`` is enabled.
    """
    title: Optional[str] = request.query_params.get("title")
    if title:
        get_site_config(request).set_title(title)


def serve_stylesheet(request: Request) -> Response:
    return Response(content=request.app.state.stylesheet, media_type="text/css")


# ---------------------------------------------------------------------------
# Pages


@router.get("/", response_class=HTMLResponse)
@router.get("/catalog", response_class=HTMLResponse)
def show_catalog(pages: CatalogPages = Depends(get_pages)) -> HTMLResponse:
    return HTMLResponse(pages.build_listing())


@router.post("/", response_class=HTMLResponse)
@router.post("/catalog", response_class=HTMLResponse)
async def upload_entry(
    request: Request,
    pages: CatalogPages = Depends(get_pages),
    catalog: CatalogStore = Depends(get_catalog),
    images: ImageStore = Depends(get_images),
) -> HTMLResponse:
    """Add a tree to the catalogue from a multipart form.

    The form carries the picture as ``image`` and the text fields
    ``name`` and ``description``. The entry JSON is written first, then
    the image; if the image cannot be written the entry is rolled back
    so the catalogue never points at a missing picture.
    """
    try:
        form = await request.form()
    except (StarletteHTTPException, MultiPartException, ValueError) as exc:
        raise UploadError(f"Malformed upload body: {exc}") from exc

    image = form.get("image")
    name = form.get("name")
    description = form.get("description")
    if not isinstance(image, UploadFile):
        raise UploadError("Upload is missing the 'image' file part")
    if not isinstance(name, str) or not isinstance(description, str):
        raise UploadError("Upload is missing the 'name' or 'description' field")

    filename = safe_filename(image.filename or "")
    data = await image.read()
    entry_id = entry_id_for(filename)
    entry = CatalogEntry(
        id=entry_id,
        image_path="/" + filename,
        name=name,
        description=description,
    )

    previous = await run_in_threadpool(catalog.put, entry_id, entry)
    try:
        await run_in_threadpool(images.write, filename, data)
    except StorageWriteError:
        logger.error(
            "Image %s could not be written after entry %s was stored; rolling back",
            filename,
            entry_id,
        )
        await run_in_threadpool(catalog.restore, entry_id, previous)
        raise

    return HTMLResponse(await run_in_threadpool(pages.build_listing))


@router.get("/tree/{entry_id}", response_class=HTMLResponse)
def show_tree(entry_id: str, pages: CatalogPages = Depends(get_pages)) -> HTMLResponse:
    return HTMLResponse(pages.build_detail(entry_id))


@router.post("/config/title")
def set_title(
    title: str = Form(...),
    site_config: SiteConfigStore = Depends(get_site_config),
):
    config = site_config.set_title(title)
    return {"title": config.title}


# ---------------------------------------------------------------------------
# Images
#
# Must stay the last route: anything not matched above is looked up as
# an image file name.


@router.get("/{filename:path}")
def serve_image(filename: str, images: ImageStore = Depends(get_images)) -> Response:
    return Response(content=images.read(filename), media_type=IMAGE_MEDIA_TYPE)
