"""
HTML pages of the catalogue.

``CatalogPages`` puts the stores and the template store together: the
listing page shows one linked thumbnail per image, the detail page one
entry with its picture, name and description.
"""

from __future__ import annotations

import html
from pathlib import PurePosixPath
from typing import Callable, List
from urllib.parse import quote

from ..storage import ImageStore
from ..templates import TemplateStore
from .store import CatalogStore

CATALOG_TEMPLATE = "catalog.html"
DETAIL_TEMPLATE = "treeData.html"


def entry_id_for(filename: str) -> str:
    """Catalogue id of an image or entry file: its name without extension."""
    return PurePosixPath(filename).stem


def image_tag(src: str, alt: str) -> str:
    return f'<img src="{html.escape(src)}" alt="{html.escape(alt)}"/>'


def thumbnail_tags(filenames: List[str]) -> List[str]:
    """Wrap each image in a link to its detail page."""
    return [
        f'<a href="tree/{quote(entry_id_for(name))}">'
        f"{image_tag('/' + quote(name), name)}</a>"
        for name in filenames
    ]


class CatalogPages:
    def __init__(
        self,
        templates: TemplateStore,
        catalog: CatalogStore,
        images: ImageStore,
        title: Callable[[], str] = lambda: "",
    ):
        self.templates = templates
        self.catalog = catalog
        self.images = images
        self._title = title

    def build_listing(self) -> str:
        tags = thumbnail_tags(self.images.list())
        return self.templates.render(
            CATALOG_TEMPLATE,
            {
                "title": html.escape(self._title()),
                "imageTags": "".join(tags),
            },
        )

    def build_detail(self, entry_id: str) -> str:
        """Render the page of one entry; raises ``EntryNotFoundError`` if unknown."""
        entry = self.catalog.get(entry_id)
        return self.templates.render(
            DETAIL_TEMPLATE,
            {
                "title": html.escape(self._title()),
                "imageTag": image_tag(entry.image_path, entry.name),
                "name": html.escape(entry.name),
                "description": html.escape(entry.description),
            },
        )
