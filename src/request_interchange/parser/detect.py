"""Detect which collection schema an import payload uses."""

import json
from enum import Enum
from pathlib import Path
from typing import Any

import yaml


class Schema(str, Enum):
    NATIVE = "native"
    POSTMAN = "postman"


class MalformedInputError(ValueError):
    """The payload matches neither the native nor the Postman schema."""


def detect_schema(payload: Any) -> Schema:
    """Classify a parsed payload.

    Postman: an object with ``info`` and an ``item`` list.
    Native: an object with a ``collections`` list.
    Raises MalformedInputError for anything else.
    """
    if isinstance(payload, dict):
        if "info" in payload and isinstance(payload.get("item"), list):
            return Schema.POSTMAN
        if isinstance(payload.get("collections"), list):
            return Schema.NATIVE
    raise MalformedInputError(
        "Invalid import data format. Expected a Postman v2.1.0 collection "
        "(info + item) or a native export (collections)."
    )


def load_payload(file_path: Path) -> Any:
    """Read a collection file.

    JSON is tried first; YAML is the fallback for hand-written files.
    Raises MalformedInputError when the file is neither.
    """
    text = file_path.read_text(encoding="utf-8")

    try:
        return json.loads(text)
    except (json.JSONDecodeError, ValueError):
        pass

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise MalformedInputError(f"{file_path} is neither JSON nor YAML: {e}") from e
