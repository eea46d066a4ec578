"""
File-backed data store for the catalogue.

Each entry lives in its own ``<id>.json`` file inside the data
directory. ``CatalogStore.load_all()`` reads the whole directory once
at startup; afterwards the in-memory mapping is kept in step with the
files this process writes. Files added or removed by hand while the
server runs are not noticed until the next start.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from ..exceptions import EntryNotFoundError, StartupError, StorageWriteError
from .schemas import CatalogEntry

logger = logging.getLogger(__name__)


class CatalogStore:
    """Catalogue entries keyed by id, mirrored from a directory of JSON files."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self._entries: Dict[str, CatalogEntry] = {}
        # Serialises file write + mapping update so the two never disagree.
        self._lock = threading.Lock()

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def ids(self) -> List[str]:
        return list(self._entries)

    def _path_for(self, entry_id: str) -> Path:
        return self.directory / f"{entry_id}.json"

    def load_all(self) -> None:
        """Load every ``*.json`` file of the data directory.

        Raises
        ------
        StartupError
            If the directory cannot be read, or a file is not valid JSON
            or does not describe a catalogue entry.
        """
        try:
            paths = [p for p in self.directory.iterdir() if p.is_file() and p.suffix == ".json"]
        except OSError as exc:
            raise StartupError(f"Cannot read data directory {self.directory}: {exc}") from exc

        for path in paths:
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
                if not isinstance(raw, dict):
                    raise ValueError("expected a JSON object")
                entry = CatalogEntry.model_validate({**raw, "id": path.stem})
            except (OSError, ValueError, ValidationError) as exc:
                raise StartupError(f"Invalid catalog entry {path}: {exc}") from exc
            self._entries[entry.id] = entry
        logger.info("Loaded %d catalog entries from %s", len(self._entries), self.directory)

    def get(self, entry_id: str) -> CatalogEntry:
        try:
            return self._entries[entry_id]
        except KeyError:
            raise EntryNotFoundError(entry_id) from None

    def put(self, entry_id: str, entry: CatalogEntry) -> Optional[CatalogEntry]:
        """Write ``entry`` to ``<entry_id>.json`` and index it.

        The mapping is only updated once the file has been written.

        Returns
        -------
        Optional[CatalogEntry]
            The entry previously stored under ``entry_id``, if any.
        """
        entry = entry.model_copy(update={"id": entry_id})
        path = self._path_for(entry_id)
        with self._lock:
            previous = self._entries.get(entry_id)
            self._write(path, entry)
            self._entries[entry_id] = entry
        logger.info("Stored catalog entry %s", entry_id)
        return previous

    def restore(self, entry_id: str, previous: Optional[CatalogEntry]) -> None:
        """Undo a ``put``: rewrite ``previous`` or drop the entry entirely."""
        path = self._path_for(entry_id)
        with self._lock:
            if previous is not None:
                self._write(path, previous)
                self._entries[entry_id] = previous
            else:
                try:
                    path.unlink()
                except FileNotFoundError:
                    pass
                except OSError as exc:
                    raise StorageWriteError(str(path), str(exc)) from exc
                self._entries.pop(entry_id, None)
        logger.info("Rolled back catalog entry %s", entry_id)

    @staticmethod
    def _write(path: Path, entry: CatalogEntry) -> None:
        try:
            with path.open("w", encoding="utf-8") as f:
                json.dump(entry.to_document(), f, ensure_ascii=False, indent=2)
        except OSError as exc:
            raise StorageWriteError(str(path), str(exc)) from exc
