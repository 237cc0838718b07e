"""Record shape validation against the bundled JSON schema."""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import yaml
from jsonschema import validate, ValidationError

SCHEMA_PATH = Path(__file__).parent / "schema.yaml"


@lru_cache(maxsize=1)
def load_schema() -> dict:
    """Load the record schemas from schema.yaml."""
    with open(SCHEMA_PATH) as f:
        return yaml.load(f, Loader=yaml.SafeLoader)


def record_schema(collection: str) -> dict:
    """Schema for one record of ``collection`` (generic record if unknown)."""
    schema = load_schema()
    return schema["collections"].get(collection, schema["record"])


def validate_record(collection: str, record: Any) -> None:
    """Raise ValidationError unless ``record`` is a valid record."""
    validate(instance=record, schema=record_schema(collection))


def validate_records(collection: str, records: Any) -> None:
    """Raise ValidationError unless ``records`` is a list of valid records."""
    validate(
        instance=records,
        schema={"type": "array", "items": record_schema(collection)},
    )


def validate_mirror_file(
    filepath: Path, collection: Optional[str] = None
) -> List[str]:
    """Validate a single mirror file. Returns list of errors."""
    collection = collection or filepath.stem
    errors = []
    try:
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
        validate_records(collection, data)
    except ValueError as e:
        errors.append(f"JSON parse error: {e}")
    except ValidationError as e:
        errors.append(f"Schema validation error: {e.message}")
        if e.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in e.path)}")
    except OSError as e:
        errors.append(f"Error: {e}")
    return errors


def field_types(collection: str) -> Dict[str, Set[str]]:
    """JSON types declared for each known field of a ``collection`` record."""
    types = {}
    for key, prop in record_schema(collection).get("properties", {}).items():
        declared = prop.get("type", [])
        if isinstance(declared, str):
            declared = [declared]
        types[key] = set(declared)
    return types
