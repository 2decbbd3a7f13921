"""JSON-file-backed implementation of CartStorage.

The file holds an object of key -> string value. Several handles may be
opened on the same file (one per running storefront session); a write
through one handle is announced to the listeners of every other handle
on that file in this process.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path

from storefront.domain.repository.cart_storage import CartStorage, StorageListener

log = logging.getLogger(__name__)

# Resolved file path -> [(handle, listener)] for every open subscription.
_SUBSCRIPTIONS: dict[Path, list[tuple[JsonCartStorage, StorageListener]]] = {}


class JsonCartStorage(CartStorage):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- CartStorage interface ------------------------------------------------

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._persist(data)
        self._notify(key, value)

    def subscribe(self, listener: StorageListener) -> Callable[[], None]:
        entry = (self, listener)
        _SUBSCRIPTIONS.setdefault(self._key(), []).append(entry)

        def unsubscribe() -> None:
            entries = _SUBSCRIPTIONS.get(self._key(), [])
            if entry in entries:
                entries.remove(entry)

        return unsubscribe

    # --- Notification ---------------------------------------------------------

    def _notify(self, key: str, value: str | None) -> None:
        for handle, listener in list(_SUBSCRIPTIONS.get(self._key(), [])):
            if handle is not self:
                listener(key, value)

    def _key(self) -> Path:
        return self._file_path.resolve()

    # --- File helpers ---------------------------------------------------------

    def _load(self) -> dict:
        try:
            raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        except ValueError:
            log.warning("Local storage file %s is corrupt; starting empty", self._file_path)
            return {}
        return raw if isinstance(raw, dict) else {}

    def _persist(self, data: dict) -> None:
        self._file_path.write_text(
            json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("{}", encoding="utf-8")
