"""Fixed lookup tables shared by the curl parser, the exporters and dispatch."""

import base64
import json

from .base import ApiKeyAuth, Auth, BasicAuth, BearerAuth, Body, KeyValue

# form-data and binary are left to the transport (multipart boundary, file MIME).
BODY_CONTENT_TYPES: dict[str, str] = {
    "json": "application/json",
    "xml": "application/xml",
    "html": "text/html",
    "yaml": "application/x-yaml",
    "javascript": "application/javascript",
    "text": "text/plain",
    "form-urlencoded": "application/x-www-form-urlencoded",
}

_CONTENT_TYPE_ALIASES: dict[str, str] = {
    "text/xml": "xml",
    "application/yaml": "yaml",
    "text/yaml": "yaml",
    "text/x-yaml": "yaml",
    "text/javascript": "javascript",
}


def content_type_for(body_type: str) -> str | None:
    """MIME type for a body type, or None when the transport must decide."""
    return BODY_CONTENT_TYPES.get(body_type)


def body_type_for(content_type: str) -> str | None:
    """Reverse lookup: body type for a Content-Type header value.

    Media type parameters (``; charset=utf-8``) are ignored.
    """
    media_type = content_type.split(";", 1)[0].strip().lower()
    for body_type, mime in BODY_CONTENT_TYPES.items():
        if mime == media_type:
            return body_type
    if media_type in _CONTENT_TYPE_ALIASES:
        return _CONTENT_TYPE_ALIASES[media_type]
    if media_type.endswith("+json"):
        return "json"
    if media_type.endswith("+xml"):
        return "xml"
    return None


def expand_graphql(body: Body) -> Body:
    """Turn a graphql body into the json body that goes on the wire.

    Content that is already a JSON object with a ``query`` is sent as-is;
    anything else is treated as the bare query text.
    """
    if body.type != "graphql":
        return body
    try:
        document = json.loads(body.content)
    except ValueError:
        document = None
    if not (isinstance(document, dict) and "query" in document):
        document = {"query": body.content, "variables": {}}
    payload = {"query": document["query"], "variables": document.get("variables") or {}}
    return Body(type="json", content=json.dumps(payload))


def basic_credentials(username: str, password: str) -> str:
    return base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")


def auth_headers(auth: Auth) -> list[KeyValue]:
    """Headers derived from auth. Empty credentials derive nothing."""
    match auth:
        case BasicAuth(fields=f) if f.username or f.password:
            return [KeyValue(key="Authorization", value=f"Basic {basic_credentials(f.username, f.password)}")]
        case BearerAuth(fields=f) if f.token:
            return [KeyValue(key="Authorization", value=f"Bearer {f.token}")]
        case ApiKeyAuth(fields=f) if f.key and f.location == "header":
            return [KeyValue(key=f.key, value=f.value)]
    return []


def auth_params(auth: Auth) -> list[KeyValue]:
    """Query parameters derived from auth (api keys sent in the query)."""
    match auth:
        case ApiKeyAuth(fields=f) if f.key and f.location == "query":
            return [KeyValue(key=f.key, value=f.value)]
    return []
