"""Reading scenario files and writing reflow output bundles."""

from __future__ import annotations

import json
from pathlib import Path

from reflow.shared.documents import result_to_dict
from reflow.shared.errors import InvalidDocumentError
from reflow.shared.models import ReflowResult


def load_scenario(path: str | Path) -> list[dict]:
    """Load a JSON array of documents.

    Raises ``OSError`` if unreadable, ``json.JSONDecodeError`` if not JSON
    and :class:`InvalidDocumentError` if not an array of objects.
    """
    with open(path, encoding="utf-8") as f:
        parsed = json.load(f)
    if not isinstance(parsed, list):
        raise InvalidDocumentError(
            "Scenario file must be a JSON array of documents.", path=str(path),
        )
    if not all(isinstance(doc, dict) for doc in parsed):
        raise InvalidDocumentError(
            "Every scenario document must be a JSON object.", path=str(path),
        )
    return parsed


def dump_result(result: ReflowResult) -> str:
    return json.dumps(result_to_dict(result), indent=2)


def save_result(result: ReflowResult, path: str | Path) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(dump_result(result))
        f.write("\n")


def save_scenario(documents: list[dict], path: str | Path) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(documents, f, indent=2)
        f.write("\n")
