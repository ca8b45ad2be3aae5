"""Export collections from a store into either interchange schema."""

import logging

from request_interchange.exporter.native import export_native
from request_interchange.exporter.postman import export_postman
from request_interchange.parser.base import Collection
from request_interchange.parser.detect import Schema
from request_interchange.store import CollectionStore

logger = logging.getLogger(__name__)


def load_collections(store: CollectionStore, collection_ids: list[int] | None = None) -> list[Collection]:
    """Read collections with their requests, in store order.

    ``None`` selects every collection; unknown ids are skipped.
    """
    stored = store.list_collections()
    if collection_ids is not None:
        wanted = set(collection_ids)
        missing = wanted - {c.id for c in stored}
        if missing:
            logger.warning("Skipping unknown collection ids: %s", sorted(missing))
        stored = [c for c in stored if c.id in wanted]

    return [
        Collection(name=c.name, description=c.description, requests=store.list_requests(c.id))
        for c in stored
    ]


def export_collections(
    store: CollectionStore,
    collection_ids: list[int] | None = None,
    schema: Schema | str = Schema.NATIVE,
) -> dict:
    """Build a JSON-serializable export bundle."""
    collections = load_collections(store, collection_ids)
    logger.info("Exporting %d collections as %s", len(collections), Schema(schema).value)
    match Schema(schema):
        case Schema.NATIVE:
            return export_native(collections)
        case Schema.POSTMAN:
            return export_postman(collections)
