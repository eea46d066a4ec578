"""
Pydantic schema definitions for the catalog module.

A ``CatalogEntry`` is one tree in the catalogue. On disk it is stored
as ``<id>.json`` holding ``imagePath``, ``name`` and ``description``;
the ``id`` itself comes from the file name and is not part of the
document.
"""

from typing import Any, Dict

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CatalogEntry(BaseModel):
    """A single catalogue entry.

    ``image_path`` is root-relative (``/oak.jpg``) and is expected to
    name a file the image store can serve, although nothing checks that
    when the entry is written. Older entry files used the key
    ``picturePath``; it is still accepted when loading.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(default="", exclude=True)
    image_path: str = Field(
        validation_alias=AliasChoices("imagePath", "picturePath", "image_path"),
        serialization_alias="imagePath",
    )
    name: str
    description: str

    def to_document(self) -> Dict[str, Any]:
        """Return the JSON document written to ``<id>.json``."""
        return self.model_dump(by_alias=True)
