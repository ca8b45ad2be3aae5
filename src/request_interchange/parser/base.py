"""Unified data models for requests and collections.

The curl parser and both collection formats (native and Postman) convert
their input into these standard models, and the exporters read them back.
Models are frozen: building a request means producing a new descriptor,
never mutating one in place.
"""

from typing import Annotated, Any, Literal, Union, get_args
from urllib.parse import parse_qsl, quote, urlencode

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

BodyType = Literal[
    "none",
    "text",
    "json",
    "xml",
    "html",
    "yaml",
    "javascript",
    "form-urlencoded",
    "form-data",
    "binary",
    "graphql",
]
BODY_TYPES: tuple[str, ...] = get_args(BodyType)

DEFAULT_REQUEST_NAME = "Unnamed Request"

# Characters encodeURIComponent leaves alone, besides the ones quote() always keeps.
_COMPONENT_SAFE = "!~*'()"


def encode_form(pairs) -> str:
    """Percent-encode ``(key, value)`` pairs into an urlencoded form body."""
    return "&".join(
        f"{quote(key, safe=_COMPONENT_SAFE)}={quote(value, safe=_COMPONENT_SAFE)}" for key, value in pairs
    )


def canonical_form(content: str) -> str:
    """Re-encode form text so that ``name=John Doe&flag`` becomes ``name=John%20Doe&flag=``."""
    return encode_form(parse_qsl(content, keep_blank_values=True))


class KeyValue(BaseModel):
    """A single header or query parameter."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str = ""


class Body(BaseModel):
    """Request body. ``content`` is always a string, even for form-data/binary placeholders.

    form-urlencoded content is stored percent-encoded, one ``key=value`` per field.
    """

    model_config = ConfigDict(frozen=True)

    type: BodyType = "none"
    content: str = ""

    @model_validator(mode="before")
    @classmethod
    def _normalize_content(cls, data):
        if not isinstance(data, dict):
            return data
        body_type = data.get("type", "none")
        if body_type == "none":
            return {**data, "content": ""}
        if body_type == "form-urlencoded" and isinstance(data.get("content"), str):
            return {**data, "content": canonical_form(data["content"])}
        return data


class NoAuthFields(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class BasicFields(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: str = ""
    password: str = ""


class BearerFields(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str = ""


class ApiKeyFields(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str = ""
    value: str = ""
    location: Literal["header", "query"] = "header"


class NoAuth(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["none"] = "none"
    fields: NoAuthFields = Field(default_factory=NoAuthFields)


class BasicAuth(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["basic"] = "basic"
    fields: BasicFields = Field(default_factory=BasicFields)


class BearerAuth(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["bearer"] = "bearer"
    fields: BearerFields = Field(default_factory=BearerFields)


class ApiKeyAuth(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["apikey"] = "apikey"
    fields: ApiKeyFields = Field(default_factory=ApiKeyFields)


Auth = Annotated[Union[NoAuth, BasicAuth, BearerAuth, ApiKeyAuth], Field(discriminator="type")]


def split_query(url: str) -> tuple[str, list[KeyValue]]:
    """Split the query string off ``url``.

    Returns the url without its query (a ``#fragment`` is kept) and the
    decoded query pairs in order. Pairs with an empty key are dropped.
    """
    without_fragment, hash_mark, fragment = url.partition("#")
    base, question_mark, query = without_fragment.partition("?")
    if not question_mark:
        return url, []
    pairs = [
        KeyValue(key=k, value=v)
        for k, v in parse_qsl(query, keep_blank_values=True)
        if k
    ]
    return base + hash_mark + fragment, pairs


def join_query(url: str, params: list[KeyValue]) -> str:
    """Inverse of split_query: encode ``params`` back onto ``url``, before any fragment."""
    if not params:
        return url
    base, hash_mark, fragment = url.partition("#")
    query = urlencode([(p.key, p.value) for p in params], safe="{}")
    return f"{base}?{query}{hash_mark}{fragment}"


def merge_params(embedded: list[KeyValue], params) -> list[KeyValue]:
    """Url-embedded pairs first, then the given params whose key is not already embedded."""
    taken = {p.key for p in embedded}
    rest = [KeyValue.model_validate(p) for p in params]
    return embedded + [p for p in rest if p.key not in taken]


class RequestDescriptor(BaseModel):
    """The canonical in-memory HTTP request."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    method: str = "GET"
    url: str = ""
    headers: list[KeyValue] = []
    params: list[KeyValue] = []
    body: Body = Body()
    auth: Auth = NoAuth()

    @field_validator("method")
    @classmethod
    def _uppercase_method(cls, value: str) -> str:
        return value.strip().upper() or "GET"

    @model_validator(mode="before")
    @classmethod
    def _extract_embedded_query(cls, data):
        if not isinstance(data, dict):
            return data
        url = data.get("url")
        if not isinstance(url, str) or "?" not in url:
            return data
        url, embedded = split_query(url)
        return {**data, "url": url, "params": merge_params(embedded, data.get("params") or [])}

    def get_header(self, name: str) -> str | None:
        """Case-insensitive header lookup; returns the first match."""
        lowered = name.lower()
        for header in self.headers:
            if header.key.lower() == lowered:
                return header.value
        return None

    def with_url(self, url: str) -> "RequestDescriptor":
        """Return a copy pointing at ``url``, with its query moved into ``params``."""
        url, embedded = split_query(url)
        return self.model_copy(update={"url": url, "params": merge_params(embedded, self.params)})


class Collection(BaseModel):
    """A named, ordered group of requests."""

    name: str
    description: str = ""
    requests: list[RequestDescriptor] = []


class ImportResult(BaseModel):
    """Statistics and non-fatal errors from one import call."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    collections_imported: int = 0
    requests_imported: int = 0
    errors: list[str] = []


class CollectionDraft(BaseModel):
    """A collection read from an import payload, before its entries are converted.

    ``entries`` keep the raw per-request objects so that one malformed
    request fails on its own instead of failing the whole payload.
    """

    name: str
    description: str = ""
    entries: list[Any] = []


class ImportPlan(BaseModel):
    drafts: list[CollectionDraft] = []
    errors: list[str] = []
