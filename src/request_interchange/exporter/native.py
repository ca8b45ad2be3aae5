"""Native export: a direct, lossless dump of collections and their descriptors."""

from datetime import datetime, timezone

from request_interchange.parser.base import Collection

NATIVE_VERSION = "1.0"
NATIVE_FORMAT = "native"


def export_native(collections: list[Collection], exported_at: datetime | None = None) -> dict:
    exported_at = exported_at or datetime.now(timezone.utc)
    return {
        "version": NATIVE_VERSION,
        "format": NATIVE_FORMAT,
        "exportedAt": exported_at.isoformat(),
        "collections": [collection.model_dump(mode="json") for collection in collections],
    }
