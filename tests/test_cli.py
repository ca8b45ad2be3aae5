import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from request_interchange.cli import main

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "workspace.json"


def _invoke(store_path, *args, **kwargs):
    return CliRunner().invoke(main, ["--store", str(store_path), *args], **kwargs)


class TestCliParseCurl:
    def test_prints_descriptor(self, store_path):
        result = _invoke(store_path, "parse-curl", "curl -u bob:secret https://x.io/users?id=5")

        assert result.exit_code == 0
        request = json.loads(result.output)
        assert request["url"] == "https://x.io/users"
        assert request["params"] == [{"key": "id", "value": "5"}]
        assert request["auth"] == {"type": "basic", "fields": {"username": "bob", "password": "secret"}}

    def test_prepared(self, store_path):
        result = _invoke(store_path, "parse-curl", "--prepared", "curl --json '{\"a\": 1}' https://x.io/a?b=1")

        assert result.exit_code == 0
        prepared = json.loads(result.output)
        assert prepared["method"] == "POST"
        assert prepared["url"] == "https://x.io/a?b=1"
        assert prepared["body"] == '{"a": 1}'

    def test_reads_stdin(self, store_path):
        result = _invoke(store_path, "parse-curl", "-", input="curl -X DELETE https://x.io/a/1\n")

        assert result.exit_code == 0
        assert json.loads(result.output)["method"] == "DELETE"

    def test_no_url(self, store_path):
        result = _invoke(store_path, "parse-curl", "curl -X POST")

        assert result.exit_code == 1
        assert "No request URL found" in result.output


class TestCliImport:
    def test_import_and_list(self, store_path):
        result = _invoke(store_path, "import", str(FIXTURES / "sample.postman.json"))

        assert result.exit_code == 0
        assert "Imported 2 collections, 5 requests." in result.output
        assert store_path.exists()

        listing = _invoke(store_path, "list")
        assert listing.exit_code == 0
        assert "Pets\t3 requests" in listing.output
        assert "Pet Store\t2 requests" in listing.output

    def test_second_import_renames(self, store_path):
        _invoke(store_path, "import", str(FIXTURES / "sample.native.json"))
        _invoke(store_path, "import", str(FIXTURES / "sample.native.json"))

        listing = _invoke(store_path, "list")
        assert listing.output.count("Test API Collection") == 2
        assert "Test API Collection (Imported " in listing.output

    def test_overwrite(self, store_path):
        _invoke(store_path, "import", str(FIXTURES / "sample.native.json"))
        result = _invoke(store_path, "import", str(FIXTURES / "sample.native.json"), "--overwrite")

        assert result.exit_code == 0
        listing = _invoke(store_path, "list")
        assert listing.output.count("Test API Collection") == 1
        assert "Test API Collection\t3 requests" in listing.output

    def test_dry_run_lists_conflicts_without_importing(self, store_path):
        _invoke(store_path, "import", str(FIXTURES / "sample.native.json"))
        before = store_path.read_text(encoding="utf-8")

        result = _invoke(store_path, "import", str(FIXTURES / "sample.native.json"), "--dry-run")

        assert result.exit_code == 0
        assert "Existing collections to keep alongside a renamed copy" in result.output
        assert "  Test API Collection" in result.output
        assert "  Empty" in result.output
        assert "Imported" not in result.output
        assert store_path.read_text(encoding="utf-8") == before

    def test_dry_run_on_empty_workspace(self, store_path):
        result = _invoke(store_path, "import", str(FIXTURES / "sample.postman.json"), "--dry-run")

        assert result.exit_code == 0
        assert "No existing collections conflict." in result.output
        assert not store_path.exists()

    def test_import_reports_replaced_collections(self, store_path):
        _invoke(store_path, "import", str(FIXTURES / "sample.postman.json"))
        result = _invoke(store_path, "import", str(FIXTURES / "sample.postman.json"), "--overwrite")

        assert result.exit_code == 0
        assert "Existing collections to replace:" in result.output
        assert "  Pets" in result.output

    def test_import_yaml(self, store_path, tmp_path):
        payload = tmp_path / "hand-written.yaml"
        payload.write_text(
            "collections:\n"
            "  - name: Handmade\n"
            "    requests:\n"
            "      - name: Ping\n"
            "        url: https://x.io/ping\n",
            encoding="utf-8",
        )
        result = _invoke(store_path, "import", str(payload))

        assert result.exit_code == 0
        assert "Imported 1 collections, 1 requests." in result.output

    def test_malformed_import(self, store_path, tmp_path):
        payload = tmp_path / "bad.json"
        payload.write_text('{"hello": "world"}', encoding="utf-8")
        result = _invoke(store_path, "import", str(payload))

        assert result.exit_code == 1
        assert "Invalid import data format" in result.output
        assert not store_path.exists()

    def test_item_errors_are_printed(self, store_path, tmp_path):
        payload = tmp_path / "partial.json"
        payload.write_text(json.dumps({"collections": [{"name": "C", "requests": ["oops"]}]}), encoding="utf-8")
        result = _invoke(store_path, "import", str(payload))

        assert result.exit_code == 0
        assert "Imported 1 collections, 0 requests." in result.output
        assert 'Failed to import request "Unnamed Request"' in result.output


class TestCliExport:
    def test_export_native(self, store_path, tmp_path):
        _invoke(store_path, "import", str(FIXTURES / "sample.postman.json"))
        output = tmp_path / "out" / "bundle.json"
        result = _invoke(store_path, "export", "-o", str(output))

        assert result.exit_code == 0
        bundle = json.loads(output.read_text(encoding="utf-8"))
        assert bundle["format"] == "native"
        assert [c["name"] for c in bundle["collections"]] == ["Pets", "Pet Store"]

    def test_export_postman_selected(self, store_path, tmp_path):
        _invoke(store_path, "import", str(FIXTURES / "sample.postman.json"))
        output = tmp_path / "pets.postman.json"
        result = _invoke(store_path, "export", "-o", str(output), "-f", "postman", "-c", "1")

        assert result.exit_code == 0
        bundle = json.loads(output.read_text(encoding="utf-8"))
        assert bundle["info"]["name"] == "Pets"
        assert [i["name"] for i in bundle["item"]] == ["List pets", "Create pet", "Delete pet"]

    def test_exported_file_imports_back(self, store_path, tmp_path):
        _invoke(store_path, "import", str(FIXTURES / "sample.native.json"))
        output = tmp_path / "bundle.json"
        _invoke(store_path, "export", "-o", str(output))

        other_store = tmp_path / "other.json"
        result = _invoke(other_store, "import", str(output))
        assert "Imported 2 collections, 3 requests." in result.output


class TestCliList:
    def test_empty_workspace(self, store_path):
        result = _invoke(store_path, "list")
        assert result.exit_code == 0
        assert "No collections." in result.output
