"""Collection merger: imports a parsed payload into a CollectionStore.

Import is not transactional: collections and requests are written one at
a time, and a failure partway through leaves earlier writes in place and
is reported in ImportResult.errors.
"""

import logging
from datetime import date
from typing import Any, Callable

from request_interchange.parser.base import (
    DEFAULT_REQUEST_NAME,
    CollectionDraft,
    ImportPlan,
    ImportResult,
    RequestDescriptor,
)
from request_interchange.parser.detect import Schema, detect_schema
from request_interchange.parser.native import read_native, request_from_native
from request_interchange.parser.postman import read_postman, request_from_item
from request_interchange.store import CollectionStore

logger = logging.getLogger(__name__)

Converter = Callable[[Any], RequestDescriptor]


def import_collections(
    payload: Any,
    overwrite: bool,
    store: CollectionStore,
    today: Callable[[], date] = date.today,
) -> ImportResult:
    """Import a parsed native or Postman payload.

    Raises MalformedInputError when the payload matches neither schema;
    every other problem is recorded in the returned result.
    """
    return CollectionMerger(store, today=today).merge(payload, overwrite)


def find_conflicts(payload: Any, store: CollectionStore) -> list[str]:
    """Collection names in ``payload`` that already exist in ``store``.

    These are the names ``overwrite`` decides about. Raises
    MalformedInputError like import_collections.
    """
    plan, _ = read_plan(payload)
    existing = {c.name for c in store.list_collections()}
    conflicts: list[str] = []
    for draft in plan.drafts:
        if draft.name in existing and draft.name not in conflicts:
            conflicts.append(draft.name)
    return conflicts


def read_plan(payload: Any) -> tuple[ImportPlan, Converter]:
    """Read a payload into drafts plus the converter for their entries."""
    match detect_schema(payload):
        case Schema.POSTMAN:
            return read_postman(payload), request_from_item
        case Schema.NATIVE:
            return read_native(payload), request_from_native


class CollectionMerger:
    """Resolves collection name collisions while importing."""

    def __init__(self, store: CollectionStore, today: Callable[[], date] = date.today):
        self.store = store
        self.today = today

    def merge(self, payload: Any, overwrite: bool = False) -> ImportResult:
        plan, convert = read_plan(payload)
        result = ImportResult(errors=list(plan.errors))
        produced: set[int] = set()
        for draft in plan.drafts:
            self._import_draft(draft, convert, overwrite, result, produced)

        logger.info(
            "Imported %d collections, %d requests (%d errors)",
            result.collections_imported,
            result.requests_imported,
            len(result.errors),
        )
        return result

    def _import_draft(
        self,
        draft: CollectionDraft,
        convert: Converter,
        overwrite: bool,
        result: ImportResult,
        produced: set[int],
    ) -> None:
        try:
            collection_id = self._target_collection(draft, overwrite, produced)
        except Exception as e:
            logger.warning("Failed to import collection %r: %s", draft.name, e)
            result.errors.append(f'Failed to import collection "{draft.name}": {e}')
            return

        produced.add(collection_id)
        result.collections_imported += 1

        for entry in draft.entries:
            try:
                self.store.create_request(collection_id, convert(entry))
            except Exception as e:
                name = _entry_name(entry)
                logger.warning("Failed to import request %r: %s", name, e)
                result.errors.append(f'Failed to import request "{name}": {e}')
                continue
            result.requests_imported += 1

    def _target_collection(self, draft: CollectionDraft, overwrite: bool, produced: set[int]) -> int:
        """Pick the collection id the draft's requests go into.

        A collection produced earlier in this same import is never
        overwritten; a second draft with its name is renamed instead.
        """
        existing = next((c for c in self.store.list_collections() if c.name == draft.name), None)
        if existing is None:
            return self.store.create_collection(draft.name, draft.description)

        if overwrite and existing.id not in produced:
            self.store.delete_all_requests_of(existing.id)
            self.store.update_collection_description(existing.id, draft.description)
            logger.debug("Overwriting collection %r (id %s)", existing.name, existing.id)
            return existing.id

        renamed = f"{draft.name} (Imported {self.today().strftime('%x')})"
        logger.debug("Collection %r exists, importing as %r", draft.name, renamed)
        return self.store.create_collection(renamed, draft.description)


def _entry_name(entry: Any) -> str:
    name = entry.get("name") if isinstance(entry, dict) else None
    return name or DEFAULT_REQUEST_NAME
