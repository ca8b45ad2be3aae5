"""Postman Collection v2.1 reader.

Normalizes a Postman export into collection drafts (one per top-level
folder, plus one for root-level requests) and converts single items into
RequestDescriptor models.
"""

import json
import logging
from typing import Any

from .base import (
    BODY_TYPES,
    DEFAULT_REQUEST_NAME,
    ApiKeyAuth,
    ApiKeyFields,
    Auth,
    BasicAuth,
    BasicFields,
    BearerAuth,
    BearerFields,
    Body,
    CollectionDraft,
    ImportPlan,
    KeyValue,
    NoAuth,
    RequestDescriptor,
    encode_form,
)

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION_NAME = "Imported Collection"


def read_postman(collection: dict) -> ImportPlan:
    """Split a Postman collection into one draft per folder plus a root draft."""
    info = collection.get("info")
    if not isinstance(info, dict):
        info = {}
    name = _text(info.get("name")) or DEFAULT_COLLECTION_NAME
    description = _description(info.get("description"))

    folders: list[dict] = []
    root_requests: list[dict] = []
    errors: list[str] = []
    for item in collection["item"]:
        if _is_folder(item):
            folders.append(item)
        elif _is_request(item):
            root_requests.append(item)
        else:
            errors.append(_skipped(item))

    drafts = []
    for folder in folders:
        entries: list[dict] = []
        _collect_requests(folder["item"], entries, errors)
        drafts.append(
            CollectionDraft(
                name=_text(folder.get("name")) or name,
                description=_description(folder.get("description")) or description,
                entries=entries,
            )
        )

    # Root-level siblings of folders get their own collection; with no folders
    # at all this is the only collection, even when it is empty.
    if root_requests or not folders:
        drafts.append(CollectionDraft(name=name, description=description, entries=root_requests))

    return ImportPlan(drafts=drafts, errors=errors)


def _collect_requests(items: list, requests: list[dict], errors: list[str]) -> None:
    """Recursively gather requests; nested sub-folders flatten into their top folder."""
    for item in items:
        if _is_folder(item):
            _collect_requests(item["item"], requests, errors)
        elif _is_request(item):
            requests.append(item)
        else:
            errors.append(_skipped(item))


def _is_folder(item: Any) -> bool:
    return isinstance(item, dict) and isinstance(item.get("item"), list)


def _is_request(item: Any) -> bool:
    return isinstance(item, dict) and "request" in item


def _skipped(item: Any) -> str:
    name = item.get("name") if isinstance(item, dict) else None
    return f'Skipped item "{name or "Unnamed"}": neither a folder nor a request'


def request_from_item(item: dict) -> RequestDescriptor:
    """Convert one Postman request item into a descriptor."""
    request = item["request"]
    if isinstance(request, str):
        request = {"url": request}
    if not isinstance(request, dict):
        raise TypeError(f"request must be an object, got {type(request).__name__}")

    url = request.get("url")
    query = url.get("query") if isinstance(url, dict) else None
    return RequestDescriptor(
        name=_text(item.get("name")) or DEFAULT_REQUEST_NAME,
        method=_text(request.get("method")) or "GET",
        url=_build_url(url),
        headers=_key_values(request.get("header")),
        params=_key_values(query),
        body=_body(request.get("body")),
        auth=_auth(request.get("auth")),
    )


def _build_url(url: Any) -> str:
    if url is None:
        return ""
    if isinstance(url, str):
        return url
    if not isinstance(url, dict):
        raise TypeError(f"url must be a string or an object, got {type(url).__name__}")
    if "raw" in url:
        return _text(url["raw"])

    protocol = _text(url.get("protocol")) or "http"
    host = url.get("host")
    host = ".".join(_text(h) for h in host) if isinstance(host, list) else _text(host)
    port = _text(url.get("port"))
    path = url.get("path")
    path = "/".join(_text(p) for p in path) if isinstance(path, list) else _text(path)

    result = f"{protocol}://{host or 'localhost'}"
    if port:
        result += f":{port}"
    if path:
        result += "/" + path.lstrip("/")
    pairs = _key_values(url.get("query"))
    if pairs:
        result += "?" + "&".join(f"{p.key}={p.value}" for p in pairs)
    return result


def _key_values(entries: Any) -> list[KeyValue]:
    """Header/query arrays as ordered pairs; entries with an empty key are dropped."""
    if not entries:
        return []
    if isinstance(entries, str):
        # v2.0 exports may store headers as "Key: value" lines
        entries = [
            {"key": key.strip(), "value": value.strip()}
            for key, _, value in (line.partition(":") for line in entries.splitlines())
        ]
    if not isinstance(entries, list):
        raise TypeError(f"expected a list of key/value entries, got {type(entries).__name__}")
    result = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise TypeError(f"expected a key/value object, got {type(entry).__name__}")
        key = _text(entry.get("key"))
        if key.strip():
            result.append(KeyValue(key=key, value=_text(entry.get("value"))))
    return result


def _auth(auth: Any) -> Auth:
    if not auth:
        return NoAuth()
    if not isinstance(auth, dict):
        raise TypeError(f"auth must be an object, got {type(auth).__name__}")

    kind = auth.get("type")
    if kind in (None, "noauth", "inherit"):
        return NoAuth()
    fields = _auth_fields(auth.get(kind))
    match kind:
        case "basic":
            return BasicAuth(
                fields=BasicFields(username=fields.get("username", ""), password=fields.get("password", ""))
            )
        case "bearer":
            return BearerAuth(fields=BearerFields(token=fields.get("token", "")))
        case "apikey":
            location = fields.get("in", "header")
            return ApiKeyAuth(
                fields=ApiKeyFields(
                    key=fields.get("key", ""),
                    value=fields.get("value", ""),
                    location=location if location in ("header", "query") else "header",
                )
            )
    logger.warning("Unsupported Postman auth type %r imported as no auth", kind)
    return NoAuth()


def _auth_fields(entries: Any) -> dict[str, str]:
    """Index auth entries by key name once (v2.1 lists, v2.0 plain objects)."""
    if isinstance(entries, dict):
        return {key: _text(value) for key, value in entries.items()}
    fields: dict[str, str] = {}
    for entry in entries or []:
        if isinstance(entry, dict) and "key" in entry:
            fields.setdefault(_text(entry["key"]), _text(entry.get("value")))
    return fields


def _body(body: Any) -> Body:
    if not body:
        return Body()
    if not isinstance(body, dict):
        raise TypeError(f"body must be an object, got {type(body).__name__}")

    match body.get("mode"):
        case "raw":
            return Body(type=_raw_language(body), content=_text(body.get("raw")))
        case "urlencoded":
            pairs = [
                (_text(e.get("key")), _text(e.get("value")))
                for e in body.get("urlencoded") or []
                if isinstance(e, dict)
            ]
            return Body(type="form-urlencoded", content=encode_form(pairs))
        case "formdata":
            return Body(type="form-data", content=json.dumps(body.get("formdata") or []))
        case "graphql":
            graphql = body.get("graphql") or {}
            variables = graphql.get("variables") or {}
            if isinstance(variables, str):
                try:
                    variables = json.loads(variables) if variables.strip() else {}
                except ValueError:
                    logger.debug("Keeping unparseable GraphQL variables as text")
            return Body(
                type="graphql",
                content=json.dumps({"query": _text(graphql.get("query")), "variables": variables}),
            )
        case "file":
            return Body(type="binary", content=json.dumps(body.get("file") or {}))
    return Body()


def _raw_language(body: dict) -> str:
    options = body.get("options")
    raw_options = options.get("raw") if isinstance(options, dict) else None
    language = raw_options.get("language") if isinstance(raw_options, dict) else None
    if not language:
        return "json"
    if language not in BODY_TYPES or language == "none":
        return "text"
    return language


def _description(value: Any) -> str:
    # v2.1 descriptions may be {"content": ..., "type": "text/markdown"}
    if isinstance(value, dict):
        return _text(value.get("content"))
    return _text(value)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
