"""Native collection export reader.

Native exports already carry descriptors, so reading them is mostly
filling in zero values. Older exports with flat ``bodyType``/``authType``
fields are accepted too.
"""

from typing import Any

from pydantic import TypeAdapter

from .base import (
    DEFAULT_REQUEST_NAME,
    Auth,
    Body,
    CollectionDraft,
    ImportPlan,
    KeyValue,
    RequestDescriptor,
)

DEFAULT_COLLECTION_NAME = "Imported Collection"

AUTH_ADAPTER: TypeAdapter[Auth] = TypeAdapter(Auth)

_LEGACY_AUTH_TYPES = {"api-key": "apikey", "noauth": "none"}


def read_native(payload: dict) -> ImportPlan:
    drafts: list[CollectionDraft] = []
    errors: list[str] = []
    for index, collection in enumerate(payload["collections"]):
        if not isinstance(collection, dict):
            errors.append(f"Failed to import collection #{index + 1}: expected an object")
            continue
        name = _text(collection.get("name")) or DEFAULT_COLLECTION_NAME
        requests = collection.get("requests") or []
        if not isinstance(requests, list):
            errors.append(f'Failed to import collection "{name}": requests must be a list')
            continue
        drafts.append(
            CollectionDraft(name=name, description=_text(collection.get("description")), entries=requests)
        )
    return ImportPlan(drafts=drafts, errors=errors)


def request_from_native(entry: Any) -> RequestDescriptor:
    """Convert one native request object, filling missing fields with zero values."""
    if not isinstance(entry, dict):
        raise TypeError(f"request must be an object, got {type(entry).__name__}")
    return RequestDescriptor(
        name=_text(entry.get("name")) or DEFAULT_REQUEST_NAME,
        method=_text(entry.get("method")) or "GET",
        url=_text(entry.get("url")),
        headers=_key_values(entry.get("headers")),
        params=_key_values(entry.get("params")),
        body=_body(entry),
        auth=_auth(entry),
    )


def _key_values(entries: Any) -> list[KeyValue]:
    if not entries:
        return []
    if isinstance(entries, dict):
        return [KeyValue(key=key, value=_text(value)) for key, value in entries.items()]
    return [KeyValue.model_validate(entry) for entry in entries]


def _body(entry: dict) -> Body:
    body = entry.get("body")
    if isinstance(body, dict):
        return Body.model_validate(body)
    content = _text(_first(entry, "bodyContent", "body_content"))
    body_type = _first(entry, "bodyType", "body_type")
    if not body_type:
        # older exports defaulted untyped bodies to json
        body_type = "json" if content else "none"
    return Body(type=body_type, content=content)


def _auth(entry: dict) -> Auth:
    auth = entry.get("auth")
    if isinstance(auth, dict):
        kind, fields = auth.get("type"), auth.get("fields")
    else:
        kind = _first(entry, "authType", "auth_type")
        fields = _first(entry, "authData", "auth_data")
    kind = _LEGACY_AUTH_TYPES.get(kind, kind) or "none"
    fields = dict(fields or {})
    if "in" in fields and "location" not in fields:
        fields["location"] = fields.pop("in")
    return AUTH_ADAPTER.validate_python({"type": kind, "fields": fields})


def _first(entry: dict, *keys: str) -> Any:
    for key in keys:
        if entry.get(key) is not None:
            return entry[key]
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
