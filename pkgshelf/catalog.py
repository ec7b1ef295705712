from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Dict, Union

import structlog

from .errors import CatalogError
from .models import GameRecord

log = structlog.stdlib.get_logger()

CATALOG_EXT = ".json"


def empty_document() -> Dict[str, dict]:
    return {"DATA": {}}


class CatalogWriter:
    """Per-category JSON documents of the form ``{"DATA": {url: entry}}``.

    Each upsert is its own load-modify-store cycle; writes for one category
    are serialized by a lock so worker threads never interleave them.
    """

    def __init__(self, catalog_dir: Union[str, Path]) -> None:
        self.catalog_dir = Path(catalog_dir)
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock(self, category: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(category, threading.Lock())

    def path_for(self, category: str) -> Path:
        return self.catalog_dir / f"{category}{CATALOG_EXT}"

    def load(self, category: str) -> Dict[str, dict]:
        path = self.path_for(category)
        if not path.exists():
            return empty_document()
        try:
            doc = json.loads(path.read_text("utf-8"))
        except (OSError, ValueError) as e:
            raise CatalogError(f"unreadable catalog: {e}", path=str(path)) from e
        if not isinstance(doc, dict) or not isinstance(doc.get("DATA"), dict):
            raise CatalogError("catalog has no DATA mapping", path=str(path))
        return doc

    def _store(self, category: str, doc: Dict[str, dict]) -> None:
        path = self.path_for(category)
        path.parent.mkdir(parents=True, exist_ok=True)
        # sorted keys keep the bytes stable whatever order packages finish in
        path.write_text(json.dumps(doc, indent=4, sort_keys=True), encoding="utf-8")

    def reset(self, category: str) -> None:
        with self._lock(category):
            self._store(category, empty_document())
        log.debug("Catalog reset", category=category)

    def upsert(self, category: str, package_url: str, record: GameRecord) -> None:
        with self._lock(category):
            doc = self.load(category)
            doc["DATA"][package_url] = record.to_catalog_entry()
            self._store(category, doc)
        log.info("Updated catalog", category=category, title_id=record.title_id,
                 catalog=str(self.path_for(category)))
