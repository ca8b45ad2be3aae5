import pytest
from pydantic import ValidationError

from request_interchange.parser.base import (
    ApiKeyAuth,
    BasicAuth,
    Body,
    ImportResult,
    KeyValue,
    NoAuth,
    RequestDescriptor,
    join_query,
    split_query,
)


class TestRequestDescriptor:
    def test_defaults(self):
        request = RequestDescriptor()
        assert request.method == "GET"
        assert request.url == ""
        assert request.body == Body(type="none", content="")
        assert request.auth == NoAuth()

    def test_method_is_uppercased(self):
        assert RequestDescriptor(method="patch").method == "PATCH"

    def test_blank_method_falls_back_to_get(self):
        assert RequestDescriptor(method="  ").method == "GET"

    def test_embedded_query_is_extracted(self):
        request = RequestDescriptor(url="https://x.io/a?b=1&c=two%20words#top")
        assert request.url == "https://x.io/a#top"
        assert request.params == [KeyValue(key="b", value="1"), KeyValue(key="c", value="two words")]

    def test_params_do_not_duplicate_embedded_keys(self):
        request = RequestDescriptor(
            url="https://x.io/a?b=1",
            params=[{"key": "b", "value": "stale"}, {"key": "d", "value": "4"}],
        )
        assert request.params == [KeyValue(key="b", value="1"), KeyValue(key="d", value="4")]

    def test_with_url_returns_new_descriptor(self):
        original = RequestDescriptor(params=[KeyValue(key="a", value="1")])
        moved = original.with_url("https://x.io/?z=9")
        assert moved.url == "https://x.io/"
        assert moved.params == [KeyValue(key="z", value="9"), KeyValue(key="a", value="1")]
        assert original.url == ""

    def test_models_are_frozen(self):
        request = RequestDescriptor()
        with pytest.raises(ValidationError):
            request.method = "POST"

    def test_header_lookup_is_case_insensitive(self):
        request = RequestDescriptor(headers=[KeyValue(key="Content-Type", value="text/plain")])
        assert request.get_header("content-type") == "text/plain"
        assert request.get_header("Accept") is None


class TestBodyAndAuth:
    def test_none_body_drops_content(self):
        assert Body(type="none", content="leftover").content == ""

    def test_form_content_is_percent_encoded(self):
        body = Body(type="form-urlencoded", content="a=x y&flag&c=%41")
        assert body.content == "a=x%20y&flag=&c=A"
        assert Body(type="form-urlencoded", content=body.content).content == body.content

    def test_unknown_body_type_is_rejected(self):
        with pytest.raises(ValidationError):
            Body(type="markdown", content="# hi")

    def test_no_auth_drops_fields(self):
        request = RequestDescriptor(auth={"type": "none", "fields": {"token": "x"}})
        assert request.auth.model_dump() == {"type": "none", "fields": {}}

    def test_auth_variant_from_dict(self):
        request = RequestDescriptor(auth={"type": "apikey", "fields": {"key": "K", "value": "V", "location": "query"}})
        assert isinstance(request.auth, ApiKeyAuth)
        assert request.auth.fields.location == "query"

    def test_auth_dump_shape(self):
        auth = BasicAuth(fields={"username": "u", "password": "p"})
        assert auth.model_dump() == {"type": "basic", "fields": {"username": "u", "password": "p"}}

    def test_invalid_apikey_location(self):
        with pytest.raises(ValidationError):
            RequestDescriptor(auth={"type": "apikey", "fields": {"location": "cookie"}})


class TestQueryHelpers:
    def test_split_without_query(self):
        assert split_query("https://x.io/a") == ("https://x.io/a", [])

    def test_split_drops_empty_keys(self):
        assert split_query("https://x.io/?=1&a=")[1] == [KeyValue(key="a", value="")]

    def test_join_inserts_before_fragment(self):
        params = [KeyValue(key="q", value="a b"), KeyValue(key="t", value="{{token}}")]
        assert join_query("https://x.io/s#frag", params) == "https://x.io/s?q=a+b&t={{token}}#frag"

    def test_join_without_params(self):
        assert join_query("https://x.io/s", []) == "https://x.io/s"


class TestImportResult:
    def test_dumps_with_camel_case_aliases(self):
        result = ImportResult(collections_imported=1, requests_imported=2, errors=["x"])
        assert result.model_dump(by_alias=True) == {
            "collectionsImported": 1,
            "requestsImported": 2,
            "errors": ["x"],
        }
