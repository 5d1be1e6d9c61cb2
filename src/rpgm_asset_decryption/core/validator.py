"""JSON Schema validation for System.json documents.

This module loads the schema describing the part of ``data/System.json``
the key reader relies on, and validates parsed documents against it.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import ValidationError

SCHEMAS_DIR = Path(__file__).parent.parent / "schemas"

SYSTEM_SCHEMA = "system.schema.json"


@lru_cache(maxsize=None)
def load_schema(name: str = SYSTEM_SCHEMA) -> dict[str, Any]:
    """Read a bundled schema, cached per name.

    Raises:
        FileNotFoundError: If no schema of that name is bundled
    """
    schema_file = SCHEMAS_DIR / name
    if not schema_file.is_file():
        raise FileNotFoundError(f"No bundled schema named {name} in {SCHEMAS_DIR}")

    return json.loads(schema_file.read_text(encoding="utf-8"))  # type: ignore[no-any-return]


def validate_system_manifest(document: Any) -> None:
    """Validate a parsed System.json against the JSON Schema.

    Args:
        document: The parsed JSON document

    Raises:
        ValidationError: If the document doesn't conform to the schema
    """
    jsonschema.validate(instance=document, schema=load_schema())


def validate_system_manifest_with_error_details(document: Any) -> tuple[bool, str | None, str]:
    """Validate a document and return detailed error information.

    Args:
        document: The parsed JSON document

    Returns:
        Tuple of (is_valid, error_message, error_location). The location is
        the dotted path of the offending field, "root" for the document
        itself, and empty when valid.
    """
    try:
        validate_system_manifest(document)
        return True, None, ""
    except ValidationError as e:
        error_path = ".".join(str(p) for p in e.path) if e.path else "root"
        return False, f"Validation error at {error_path}: {e.message}", error_path
