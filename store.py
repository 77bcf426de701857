from __future__ import annotations

import json
import logging
import os
import re
import threading
import uuid
from pathlib import Path
from typing import Dict, List, Optional

from errors import StoreError


logger = logging.getLogger(__name__)

ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


class JsonDocumentStore:
    """Document collections kept in a single JSON file.

    The file holds ``{database: {collection: [document, ...]}}``. Every
    document carries its identifier under ``_id``. Reads always go back to
    the file so nothing is cached between calls.
    """

    def __init__(self, path: Path, database: str = "blog") -> None:
        self.path = Path(path)
        self.database = database
        self._lock = threading.Lock()

    def find(self, collection: str) -> List[Dict]:
        with self._lock:
            data = self._load()
        return [dict(doc) for doc in self._collection(data, collection)]

    def find_one(self, collection: str, doc_id: str) -> Optional[Dict]:
        check_id(doc_id)
        with self._lock:
            data = self._load()
        for doc in self._collection(data, collection):
            if doc.get("_id") == doc_id:
                return dict(doc)
        return None

    def insert_one(self, collection: str, document: Dict) -> str:
        doc_id = uuid.uuid4().hex
        with self._lock:
            data = self._load()
            self._collection(data, collection).append({"_id": doc_id, **document})
            self._save(data)
        return doc_id

    def update_one(self, collection: str, doc_id: str, fields: Dict) -> int:
        """Merge ``fields`` into the matching document; return the match count."""
        check_id(doc_id)
        with self._lock:
            data = self._load()
            for doc in self._collection(data, collection):
                if doc.get("_id") == doc_id:
                    doc.update({k: v for k, v in fields.items() if k != "_id"})
                    self._save(data)
                    return 1
        return 0

    def delete_one(self, collection: str, doc_id: str) -> int:
        check_id(doc_id)
        with self._lock:
            data = self._load()
            docs = self._collection(data, collection)
            kept = [doc for doc in docs if doc.get("_id") != doc_id]
            if len(kept) == len(docs):
                return 0
            data[self.database][collection] = kept
            self._save(data)
        return 1

    def _collection(self, data: Dict, name: str) -> List[Dict]:
        return data.setdefault(self.database, {}).setdefault(name, [])

    def _load(self) -> Dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                raw = json.load(fh)
        except (OSError, ValueError) as exc:
            logger.exception("Could not read %s", self.path)
            raise StoreError(f"Could not read document store: {exc}") from exc
        if not isinstance(raw, dict):
            raise StoreError(f"Malformed document store at {self.path}")
        return raw

    def _save(self, data: Dict) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError) as exc:
            logger.exception("Could not write %s", self.path)
            raise StoreError(f"Could not write document store: {exc}") from exc


def check_id(doc_id: str) -> None:
    if not isinstance(doc_id, str) or not ID_PATTERN.match(doc_id):
        raise StoreError(f"'{doc_id}' is not a valid identifier")
