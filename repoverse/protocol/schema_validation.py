from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError
from jsonschema.validators import RefResolver

from repoverse.scene_core.models import Entity, Viewer, entity_from_payload, viewer_from_payload

SCHEMA_ROOT = Path(__file__).resolve().parent / "schemas"

ENTITY_SCHEMA = "types/entity_v1.schema.json"
VIEWER_SCHEMA = "types/viewer_v1.schema.json"
SCENE_REQUEST_SCHEMA = "types/scene_request_v1.schema.json"


@dataclass
class ProtocolValidationError(Exception):
    schema_path: str
    issues: list[dict[str, str]]

    def __str__(self) -> str:
        return f"Schema validation failed for {self.schema_path}: {len(self.issues)} issue(s)"


class ProtocolValidator:
    def __init__(self, schema_root: Path | None = None) -> None:
        self.schema_root = schema_root or SCHEMA_ROOT

    @lru_cache(maxsize=16)
    def _load_schema(self, schema_path: str) -> dict[str, Any]:
        path = (self.schema_root / schema_path).resolve()
        return json.loads(path.read_text(encoding="utf-8"))

    @lru_cache(maxsize=16)
    def _validator(self, schema_path: str) -> Draft202012Validator:
        path = (self.schema_root / schema_path).resolve()
        schema = self._load_schema(schema_path)
        resolver = RefResolver(base_uri=path.as_uri(), referrer=schema)
        return Draft202012Validator(schema=schema, resolver=resolver)

    def validate(self, schema_path: str, payload: Any) -> None:
        validator = self._validator(schema_path)
        errors = sorted(
            validator.iter_errors(payload),
            key=lambda e: [str(part) for part in e.absolute_path],
        )
        if not errors:
            return
        raise ProtocolValidationError(
            schema_path=schema_path,
            issues=[self._format_error(err) for err in errors],
        )

    def scene_request(self, payload: Any) -> tuple[Viewer, list[Entity]]:
        """Validate a ``{viewer, entities}`` payload and build the core records."""
        self.validate(SCENE_REQUEST_SCHEMA, payload)
        viewer = viewer_from_payload(payload["viewer"])
        entities = [entity_from_payload(row) for row in payload["entities"]]
        return viewer, entities

    @staticmethod
    def _format_error(error: ValidationError) -> dict[str, str]:
        if error.absolute_path:
            path = ".".join(str(part) for part in error.absolute_path)
        else:
            path = "$"
        return {
            "path": path,
            "rule": str(error.validator),
            "message": error.message,
        }


__all__ = [
    "ENTITY_SCHEMA",
    "ProtocolValidationError",
    "ProtocolValidator",
    "SCENE_REQUEST_SCHEMA",
    "VIEWER_SCHEMA",
]
