"""Turn a stored descriptor into what the HTTP transport actually sends.

Auth is stored once on the descriptor; the Authorization header or api
key parameter is derived here, at send time.
"""

from pydantic import BaseModel

from request_interchange.parser.base import KeyValue, RequestDescriptor, join_query
from request_interchange.parser.content_types import (
    auth_headers,
    auth_params,
    content_type_for,
    expand_graphql,
)


class PreparedRequest(BaseModel):
    method: str
    url: str
    headers: list[KeyValue]
    body: str | None = None


def prepare_request(request: RequestDescriptor) -> PreparedRequest:
    body = expand_graphql(request.body)
    url = join_query(request.url, [*request.params, *auth_params(request.auth)])

    prepared = request
    for header in auth_headers(request.auth):
        if prepared.get_header(header.key) is None:
            prepared = prepared.model_copy(update={"headers": [*prepared.headers, header]})

    content_type = content_type_for(body.type)
    if content_type and prepared.get_header("Content-Type") is None:
        prepared = prepared.model_copy(
            update={"headers": [*prepared.headers, KeyValue(key="Content-Type", value=content_type)]}
        )

    return PreparedRequest(
        method=request.method,
        url=url,
        headers=prepared.headers,
        body=None if body.type == "none" else body.content,
    )
