"""curl command parser.

Maps a tokenized curl command onto a RequestDescriptor. Only a fixed
set of flags is understood; everything else is skipped so that any
command copied from a browser or a terminal still yields a request.
"""

import json
from typing import Callable
from urllib.parse import unquote, urlsplit

from .base import BasicAuth, BasicFields, Body, KeyValue, RequestDescriptor
from .content_types import basic_credentials, body_type_for
from .tokenizer import tokenize

Handler = Callable[[RequestDescriptor, str], RequestDescriptor]


def parse_command(line: str) -> RequestDescriptor:
    """Parse a pasted curl command. Never raises; an empty url means nothing was found."""
    tokens = tokenize(line or "")
    if tokens and tokens[0] == "$":
        tokens = tokens[1:]
    if tokens and tokens[0].lower() == "curl":
        tokens = tokens[1:]
    return map_tokens(tokens)


def map_tokens(tokens: list[str]) -> RequestDescriptor:
    """Fold curl arguments (without the leading ``curl``) into a descriptor."""
    request = RequestDescriptor()
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token in VALUE_FLAGS:
            if i + 1 < len(tokens):
                request = VALUE_FLAGS[token](request, tokens[i + 1])
            i += 2
            continue
        if token in SWITCH_FLAGS:
            request = SWITCH_FLAGS[token](request)
        elif not token.startswith("-") and not request.url and _is_absolute_url(token):
            request = request.with_url(token)
        i += 1
    return _refine_body_type(request)


def _is_absolute_url(token: str) -> bool:
    try:
        parts = urlsplit(token)
    except ValueError:
        return False
    return bool(parts.scheme and parts.netloc)


# Header helpers. Lookups are case-insensitive; stored keys keep their case.


def _append_header(request: RequestDescriptor, key: str, value: str) -> RequestDescriptor:
    return request.model_copy(update={"headers": [*request.headers, KeyValue(key=key, value=value)]})


def _set_header(request: RequestDescriptor, key: str, value: str) -> RequestDescriptor:
    if request.get_header(key) is None:
        return _append_header(request, key, value)
    lowered = key.lower()
    headers, replaced = [], False
    for header in request.headers:
        if header.key.lower() == lowered:
            if replaced:
                continue
            header, replaced = KeyValue(key=key, value=value), True
        headers.append(header)
    return request.model_copy(update={"headers": headers})


def _default_header(request: RequestDescriptor, key: str, value: str) -> RequestDescriptor:
    if request.get_header(key) is not None:
        return request
    return _append_header(request, key, value)


def _promote_to_post(request: RequestDescriptor) -> RequestDescriptor:
    if request.method != "GET":
        return request
    return request.model_copy(update={"method": "POST"})


# Flag handlers. Each returns a new descriptor.


def _method(request: RequestDescriptor, value: str) -> RequestDescriptor:
    return request.model_copy(update={"method": value.strip().upper() or request.method})


def _header(request: RequestDescriptor, value: str) -> RequestDescriptor:
    key, colon, header_value = value.partition(":")
    if not colon or not key.strip():
        return request
    return _append_header(request, key.strip(), header_value.strip())


def _data(request: RequestDescriptor, value: str) -> RequestDescriptor:
    request = request.model_copy(update={"body": Body(type="text", content=value)})
    return _promote_to_post(request)


def _data_raw(request: RequestDescriptor, value: str) -> RequestDescriptor:
    request = _data(request, value)
    try:
        json.loads(value)
    except ValueError:
        return request
    request = request.model_copy(update={"body": Body(type="json", content=value)})
    return _default_header(request, "Content-Type", "application/json")


def _json(request: RequestDescriptor, value: str) -> RequestDescriptor:
    request = _promote_to_post(request.model_copy(update={"body": Body(type="json", content=value)}))
    request = _default_header(request, "Content-Type", "application/json")
    return _default_header(request, "Accept", "application/json")


def _data_urlencode(request: RequestDescriptor, value: str) -> RequestDescriptor:
    key, equals, encoded = value.partition("=")
    if equals and key:
        param = KeyValue(key=key, value=unquote(encoded))
        request = request.model_copy(update={"params": [*request.params, param]})
    return _promote_to_post(request)


def _form(request: RequestDescriptor, value: str) -> RequestDescriptor:
    content = f"{request.body.content}&{value}" if request.body.content else value
    request = request.model_copy(update={"body": Body(type="form-urlencoded", content=content)})
    request = _default_header(request, "Content-Type", "application/x-www-form-urlencoded")
    return _promote_to_post(request)


def _user(request: RequestDescriptor, value: str) -> RequestDescriptor:
    username, _, password = value.partition(":")
    auth = BasicAuth(fields=BasicFields(username=username, password=password))
    request = request.model_copy(update={"auth": auth})
    return _set_header(request, "Authorization", f"Basic {basic_credentials(username, password)}")


def _url(request: RequestDescriptor, value: str) -> RequestDescriptor:
    return request.with_url(value)


def _header_setter(key: str) -> Handler:
    def handler(request: RequestDescriptor, value: str) -> RequestDescriptor:
        return _set_header(request, key, value)

    return handler


def _compressed(request: RequestDescriptor) -> RequestDescriptor:
    return _set_header(request, "Accept-Encoding", "gzip, deflate, br")


def _head(request: RequestDescriptor) -> RequestDescriptor:
    return request.model_copy(update={"method": "HEAD"})


VALUE_FLAGS: dict[str, Handler] = {
    "-X": _method,
    "--request": _method,
    "-H": _header,
    "--header": _header,
    "-d": _data,
    "--data": _data,
    "--data-ascii": _data,
    "--data-binary": _data,
    "--data-raw": _data_raw,
    "--json": _json,
    "--data-urlencode": _data_urlencode,
    "-F": _form,
    "--form": _form,
    "-u": _user,
    "--user": _user,
    "-b": _header_setter("Cookie"),
    "--cookie": _header_setter("Cookie"),
    "-A": _header_setter("User-Agent"),
    "--user-agent": _header_setter("User-Agent"),
    "-e": _header_setter("Referer"),
    "--referer": _header_setter("Referer"),
    "--url": _url,
}

SWITCH_FLAGS: dict[str, Callable[[RequestDescriptor], RequestDescriptor]] = {
    "--compressed": _compressed,
    "-I": _head,
    "--head": _head,
}


def _refine_body_type(request: RequestDescriptor) -> RequestDescriptor:
    """Give plain ``-d`` bodies the type announced by the final Content-Type header."""
    if request.body.type != "text":
        return request
    content_type = request.get_header("Content-Type")
    body_type = body_type_for(content_type) if content_type else None
    if body_type is None or body_type == "text":
        return request
    return request.model_copy(update={"body": Body(type=body_type, content=request.body.content)})
