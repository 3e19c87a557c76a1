"""Document store: load once, persist after every mutation, notify listeners.

The persisted form is one JSON blob under a single key of a key-value
backend. Persistence mirrors the in-memory document on a best-effort
basis: a failed write is logged and the new document stays current.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Callable

from whattodo.dates import is_date_key
from whattodo.errors import ImportParseError, PersistenceUnavailable
from whattodo.fileio import read_text, remove_file, write_text_atomic
from whattodo.models import Document

logger = logging.getLogger(__name__)

DEFAULT_KEY = "what-to-do-tracker"

Listener = Callable[[Document], None]


# ── Backends ──────────────────────────────────────────────────


class KeyValueBackend:
    """get/set/delete of text blobs. Failures raise PersistenceUnavailable."""

    def get(self, key: str) -> str | None:
        raise NotImplementedError

    def set(self, key: str, blob: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryBackend(KeyValueBackend):
    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, blob: str) -> None:
        self.data[key] = blob

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileBackend(KeyValueBackend):
    """One ``<key>.json`` file per key under ``root``."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def path_for(self, key: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self.root / f"{safe}.json"

    def get(self, key: str) -> str | None:
        try:
            return read_text(self.path_for(key))
        except OSError as e:
            raise PersistenceUnavailable(f"Cannot read {key}: {e}") from e

    def set(self, key: str, blob: str) -> None:
        try:
            write_text_atomic(self.path_for(key), blob)
        except OSError as e:
            raise PersistenceUnavailable(f"Cannot write {key}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            remove_file(self.path_for(key))
        except OSError as e:
            raise PersistenceUnavailable(f"Cannot delete {key}: {e}") from e


# ── Serialization ─────────────────────────────────────────────


def merge_with_defaults(data: dict[str, Any]) -> Document:
    """Shallow merge: top-level keys of ``data`` replace the defaults."""
    merged = Document().to_dict()
    merged.update(data)
    return Document.from_dict(merged)


def export_document(doc: Document) -> str:
    return json.dumps(doc.to_dict(), indent=2, ensure_ascii=False) + "\n"


def import_document(text: str) -> Document:
    """Parse an export.

    Raises ImportParseError on anything but a JSON object, or when a history
    key is not a ``YYYY-MM-DD`` date.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise ImportParseError(f"Invalid file: {e}") from e
    if not isinstance(data, dict):
        raise ImportParseError("Invalid file: expected a JSON object")
    history = data.get("history") or {}
    if not isinstance(history, dict):
        raise ImportParseError("Invalid file: history must be an object")
    bad = [k for k in history if not is_date_key(k)]
    if bad:
        raise ImportParseError(f"Invalid file: bad history date {bad[0]!r}")
    try:
        return merge_with_defaults(data)
    except (TypeError, ValueError, AttributeError) as e:
        raise ImportParseError(f"Invalid file: {e}") from e


def load_document(backend: KeyValueBackend, key: str = DEFAULT_KEY) -> tuple[Document, bool]:
    """Read the persisted document.

    Returns (document, found). Missing, unreadable or malformed data falls
    back to the defaults.
    """
    try:
        blob = backend.get(key)
    except PersistenceUnavailable as e:
        logger.warning("Stored data unavailable, starting from defaults: %s", e)
        return Document(), False
    if blob is None:
        return Document(), False
    try:
        return import_document(blob), True
    except ImportParseError as e:
        logger.warning("Stored data unreadable, starting from defaults: %s", e)
        return Document(), True


# ── Store ─────────────────────────────────────────────────────


class TrackerStore:
    """Holds the current document. ``apply`` is the only write path."""

    def __init__(self, backend: KeyValueBackend, key: str = DEFAULT_KEY) -> None:
        self.backend = backend
        self.key = key
        self._document, found = load_document(backend, key)
        self.first_run = not found
        self._listeners: list[Listener] = []
        self._notifying = False
        self._dirty = False

    def get(self) -> Document:
        return self._document

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def apply(self, mutation: Callable[..., Document], *args: Any, **kwargs: Any) -> Document:
        """Run ``mutation(current, *args, **kwargs)`` and commit its result.

        Errors raised by the mutation propagate and leave the store as is.
        """
        nxt = mutation(self._document, *args, **kwargs)
        self._commit(nxt)
        return nxt

    def export_text(self) -> str:
        return export_document(self._document)

    def import_text(self, text: str) -> Document:
        """Replace the document with an import. The store is untouched on error."""
        doc = import_document(text)
        self._commit(doc)
        logger.info("Imported document (%d goals, %d tasks)", len(doc.habits), len(doc.tasks))
        return doc

    def reset(self) -> Document:
        """Back to defaults and drop the persisted key."""
        self._document = Document()
        try:
            self.backend.delete(self.key)
        except PersistenceUnavailable as e:
            logger.warning("Could not clear stored data: %s", e)
        logger.info("All data deleted")
        self._notify()
        return self._document

    def _commit(self, doc: Document) -> None:
        if doc is self._document:
            return
        self._document = doc
        self.first_run = False
        try:
            self.backend.set(self.key, export_document(doc))
        except PersistenceUnavailable as e:
            logger.warning("Changes kept in memory only: %s", e)
        self._notify()

    def _notify(self) -> None:
        # Listeners may apply further mutations; those re-run the round
        # with the newest document instead of nesting.
        if self._notifying:
            self._dirty = True
            return
        self._notifying = True
        try:
            self._dirty = True
            while self._dirty:
                self._dirty = False
                snapshot = self._document
                for listener in list(self._listeners):
                    listener(snapshot)
        finally:
            self._notifying = False
