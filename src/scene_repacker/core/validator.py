"""JSON Schema validation for package snapshots and repack summaries.

This module loads the formal JSON Schemas shipped in ``schemas/`` and
validates documents before they are decoded or emitted.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import ValidationError

# src/scene_repacker/core/validator.py -> src/scene_repacker/schemas/
SCHEMA_DIR = Path(__file__).parent.parent / "schemas"
PACKAGE_SCHEMA = "package.schema.json"
SUMMARY_SCHEMA = "summary.schema.json"


@lru_cache(maxsize=None)
def load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema from disk.

    Args:
        name: File name inside the schema directory

    Returns:
        Dictionary containing the JSON Schema.

    Raises:
        FileNotFoundError: If schema file doesn't exist
        json.JSONDecodeError: If schema is invalid JSON
    """
    schema_path = SCHEMA_DIR / name
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")

    with schema_path.open("r", encoding="utf-8") as f:
        return json.load(f)  # type: ignore[no-any-return]


def describe_error(error: ValidationError) -> str:
    """Build a readable message naming the failing location."""
    error_path = " -> ".join(str(p) for p in error.absolute_path) if error.absolute_path else "root"
    return f"Validation error at {error_path}: {error.message}"


def validate_package(document: Any) -> None:
    """Validate a package snapshot against the package schema.

    Raises:
        ValidationError: If the document doesn't conform to the schema
    """
    jsonschema.validate(instance=document, schema=load_schema(PACKAGE_SCHEMA))


def validate_summary(summary: Any) -> None:
    """Validate a repack summary against the summary schema.

    Raises:
        ValidationError: If the summary doesn't conform to the schema
    """
    jsonschema.validate(instance=summary, schema=load_schema(SUMMARY_SCHEMA))


def validate_summary_with_error_details(summary: Any) -> tuple[bool, str | None]:
    """Validate a summary and return detailed error information.

    Returns:
        Tuple of (is_valid, error_message). error_message is None if valid.
    """
    try:
        validate_summary(summary)
        return True, None
    except ValidationError as e:
        return False, describe_error(e)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        return False, f"Schema error: {e}"
