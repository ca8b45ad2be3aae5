"""Persistence collaborator used by import and export.

The real application keeps collections in its own database; this module
only defines the operations the interchange code needs, plus two simple
implementations: an in-memory store and a JSON file workspace for the CLI.
"""

import json
import logging
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel

from request_interchange.parser.base import RequestDescriptor

logger = logging.getLogger(__name__)


class StoredCollection(BaseModel):
    id: int
    name: str
    description: str = ""


class CollectionStore(Protocol):
    def list_collections(self) -> list[StoredCollection]: ...

    def list_requests(self, collection_id: int) -> list[RequestDescriptor]: ...

    def create_collection(self, name: str, description: str) -> int: ...

    def update_collection_description(self, collection_id: int, description: str) -> None: ...

    def delete_all_requests_of(self, collection_id: int) -> None: ...

    def create_request(self, collection_id: int, request: RequestDescriptor) -> int: ...


class StoreError(LookupError):
    """Unknown collection id."""


class MemoryStore:
    """Dict-backed store. Ids are assigned sequentially, starting at 1."""

    def __init__(self):
        self.collections: dict[int, StoredCollection] = {}
        self.requests: dict[int, list[tuple[int, RequestDescriptor]]] = {}
        self._next_id = 1

    def _new_id(self) -> int:
        new_id = self._next_id
        self._next_id += 1
        return new_id

    def _require(self, collection_id: int) -> StoredCollection:
        if collection_id not in self.collections:
            raise StoreError(f"No collection with id {collection_id}")
        return self.collections[collection_id]

    def list_collections(self) -> list[StoredCollection]:
        return list(self.collections.values())

    def list_requests(self, collection_id: int) -> list[RequestDescriptor]:
        self._require(collection_id)
        return [request for _, request in self.requests[collection_id]]

    def create_collection(self, name: str, description: str) -> int:
        collection_id = self._new_id()
        self.collections[collection_id] = StoredCollection(id=collection_id, name=name, description=description)
        self.requests[collection_id] = []
        return collection_id

    def update_collection_description(self, collection_id: int, description: str) -> None:
        collection = self._require(collection_id)
        self.collections[collection_id] = collection.model_copy(update={"description": description})

    def delete_all_requests_of(self, collection_id: int) -> None:
        self._require(collection_id)
        self.requests[collection_id] = []

    def create_request(self, collection_id: int, request: RequestDescriptor) -> int:
        self._require(collection_id)
        request_id = self._new_id()
        self.requests[collection_id].append((request_id, request))
        return request_id


class JsonFileStore(MemoryStore):
    """MemoryStore persisted to a single JSON file.

    Changes are written back only by ``save()``.
    """

    def __init__(self, path: Path):
        super().__init__()
        self.path = path
        if path.exists():
            self._load(json.loads(path.read_text(encoding="utf-8")))

    def _load(self, data: dict) -> None:
        for entry in data.get("collections", []):
            collection = StoredCollection.model_validate(entry)
            self.collections[collection.id] = collection
            self.requests[collection.id] = [
                (item["id"], RequestDescriptor.model_validate(item["request"]))
                for item in entry.get("requests", [])
            ]
        self._next_id = data.get("next_id", 1)
        logger.debug("Loaded %d collections from %s", len(self.collections), self.path)

    def save(self) -> None:
        data = {
            "next_id": self._next_id,
            "collections": [
                {
                    **collection.model_dump(),
                    "requests": [
                        {"id": request_id, "request": request.model_dump(mode="json")}
                        for request_id, request in self.requests[collection.id]
                    ],
                }
                for collection in self.collections.values()
            ],
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.debug("Saved %d collections to %s", len(self.collections), self.path)
