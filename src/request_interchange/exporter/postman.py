"""Postman Collection v2.1 export.

A single collection is exported flat; several collections become one
folder each. Multipart form-data fields are not carried over (the
formdata array is emitted empty).
"""

import logging
import uuid
from urllib.parse import parse_qsl, urlsplit

from request_interchange.parser.base import (
    ApiKeyAuth,
    Auth,
    BasicAuth,
    BearerAuth,
    Body,
    Collection,
    RequestDescriptor,
    join_query,
)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "2.1.0"
SCHEMA_URL = "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"
DEFAULT_EXPORT_NAME = "Collection Export"


def export_postman(collections: list[Collection], collection_id: str | None = None) -> dict:
    if len(collections) == 1:
        only = collections[0]
        name, description = only.name, only.description
        items = [request_to_item(request) for request in only.requests]
    else:
        name = DEFAULT_EXPORT_NAME
        description = f"Exported {len(collections)} collections"
        items = [
            {
                "name": collection.name,
                "description": collection.description,
                "item": [request_to_item(request) for request in collection.requests],
            }
            for collection in collections
        ]

    collection_id = collection_id or str(uuid.uuid4())
    return {
        "info": {
            "id": collection_id,
            "_postman_id": collection_id,
            "name": name,
            "description": description,
            "schemaVersion": SCHEMA_VERSION,
            "schema": SCHEMA_URL,
        },
        "item": items,
    }


def request_to_item(request: RequestDescriptor) -> dict:
    """Convert one descriptor into a Postman request item."""
    entry = {
        "method": request.method,
        "header": [{"key": h.key, "value": h.value} for h in request.headers],
        "url": _url(request),
        "auth": _auth(request.auth),
    }
    body = _body(request.body)
    if body is not None:
        entry["body"] = body
    return {"name": request.name, "request": entry, "response": []}


def _url(request: RequestDescriptor) -> dict:
    raw = join_query(request.url, request.params)
    try:
        parts = urlsplit(request.url)
        port = parts.port
    except ValueError:
        logger.debug("Exporting unparseable url %r as raw only", request.url)
        return {"raw": raw}
    if not (parts.scheme and parts.hostname):
        logger.debug("Exporting relative url %r as raw only", request.url)
        return {"raw": raw}

    return {
        "raw": raw,
        "protocol": parts.scheme,
        "host": parts.hostname.split("."),
        "port": str(port or (443 if parts.scheme == "https" else 80)),
        "path": [segment for segment in parts.path.split("/") if segment],
        "query": [{"key": p.key, "value": p.value} for p in request.params],
    }


def _field(key: str, value: str) -> dict:
    return {"key": key, "value": value, "type": "string"}


def _auth(auth: Auth) -> dict:
    match auth:
        case BasicAuth(fields=f):
            return {"type": "basic", "basic": [_field("username", f.username), _field("password", f.password)]}
        case BearerAuth(fields=f):
            return {"type": "bearer", "bearer": [_field("token", f.token)]}
        case ApiKeyAuth(fields=f):
            return {
                "type": "apikey",
                "apikey": [_field("key", f.key), _field("value", f.value), _field("in", f.location)],
            }
    return {"type": "noauth"}


def _body(body: Body) -> dict | None:
    match body.type:
        case "none":
            return None
        case "form-urlencoded":
            pairs = parse_qsl(body.content, keep_blank_values=True)
            return {
                "mode": "urlencoded",
                "urlencoded": [{"key": k, "value": v, "type": "text"} for k, v in pairs],
            }
        case "form-data":
            return {"mode": "formdata", "formdata": []}
    return {"mode": "raw", "raw": body.content, "options": {"raw": {"language": body.type}}}
