"""
Catalog package for the tree catalogue.

This package holds the ``CatalogEntry`` schema, the file-backed entry
store, the HTML page builder and the route definitions that serve the
listing page, per-tree detail pages, uploads and image files.
"""

from .router import router as catalog_router  # noqa: F401
