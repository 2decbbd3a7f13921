"""JSON-file-backed implementation of CatalogStore.

Each collection lives in ``<data_dir>/<collection>.json`` as an object
mapping document id -> document. File access runs in a worker thread so
callers see the same suspension points a networked store would give them.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
import threading
import uuid
from pathlib import Path
from typing import Any

from storefront.domain.repository.catalog_store import CatalogStore, CatalogStoreError

log = logging.getLogger(__name__)


class JsonCatalogStore(CatalogStore):

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir
        self._lock = threading.Lock()

    # --- CatalogStore interface -----------------------------------------------

    async def get_by_id(self, collection: str, document_id: str) -> dict[str, Any] | None:
        return await asyncio.to_thread(self._get_by_id, collection, document_id)

    async def update_fields(
        self,
        collection: str,
        document_id: str,
        fields: dict[str, Any],
    ) -> None:
        await asyncio.to_thread(self._update_fields, collection, document_id, fields)

    async def insert(self, collection: str, record: dict[str, Any]) -> str:
        return await asyncio.to_thread(self._insert, collection, record)

    # --- Synchronous bodies ---------------------------------------------------

    def _get_by_id(self, collection: str, document_id: str) -> dict[str, Any] | None:
        with self._lock:
            document = self._load(collection).get(document_id)
        if document is None:
            return None
        if not isinstance(document, dict):
            raise CatalogStoreError(f"{collection}/{document_id} is not a JSON object")
        return {**copy.deepcopy(document), "id": document_id}

    def _update_fields(self, collection: str, document_id: str, fields: dict[str, Any]) -> None:
        with self._lock:
            documents = self._load(collection)
            document = documents.get(document_id)
            if document is None:
                raise CatalogStoreError(f"No document {collection}/{document_id} to update")
            if not isinstance(document, dict):
                raise CatalogStoreError(f"{collection}/{document_id} is not a JSON object")
            for path, value in fields.items():
                _set_path(document, path, copy.deepcopy(value))
            self._persist(collection, documents)
        log.debug("Updated %s/%s fields %s", collection, document_id, sorted(fields))

    def _insert(self, collection: str, record: dict[str, Any]) -> str:
        document_id = uuid.uuid4().hex[:20]
        with self._lock:
            documents = self._load(collection)
            documents[document_id] = copy.deepcopy(record)
            self._persist(collection, documents)
        log.debug("Inserted %s/%s", collection, document_id)
        return document_id

    # --- File helpers ---------------------------------------------------------

    def _path(self, collection: str) -> Path:
        return self._data_dir / f"{collection}.json"

    def _load(self, collection: str) -> dict[str, dict[str, Any]]:
        path = self._path(collection)
        if not path.exists():
            return {}
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise CatalogStoreError(f"Cannot read {path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise CatalogStoreError(f"{path} must hold a JSON object of documents")
        return raw

    def _persist(self, collection: str, documents: dict[str, dict[str, Any]]) -> None:
        path = self._path(collection)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(documents, indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
        except OSError as exc:
            raise CatalogStoreError(f"Cannot write {path}: {exc}") from exc


def _set_path(document: dict[str, Any], path: str, value: Any) -> None:
    """Assign *value* at a dotted field path, creating maps on the way."""
    *parents, leaf = path.split(".")
    target = document
    for part in parents:
        child = target.get(part)
        if not isinstance(child, dict):
            child = {}
            target[part] = child
        target = child
    target[leaf] = value
