"""Entity registry backed by the models.json manifest."""

from __future__ import annotations

from typing import Any

import jsonschema
from pydantic import ValidationError

from .exceptions import MalformedArtifactError
from .merge import MergeEngine
from .models import FieldSpec
from .store import ArtifactStore

MANIFEST_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "ScaffoldKit Entity Registry",
    "type": "object",
    "propertyNames": {"pattern": "^[A-Za-z][A-Za-z0-9]*$"},
    "additionalProperties": {
        "type": "array",
        "items": {
            "type": "object",
            "required": ["name", "type"],
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "type": {"type": "string"},
            },
        },
    },
}


class EntityRegistry:
    """Known entity types and their field schemas.

    The manifest is written by the scaffolder through the keyed container
    merge; this class is the read side used for duplicate checks and listings.
    """

    def __init__(self, store: ArtifactStore, path: str = "models.json") -> None:
        """Initialize registry over a manifest in the artifact store.

        Args:
            store: Artifact store holding the manifest
            path: Manifest path relative to the store root
        """
        self.store = store
        self.path = path

    def load(self) -> dict[str, list[FieldSpec]]:
        """Load and validate the manifest.

        Returns:
            Mapping of entity identifier to its fields; empty if the manifest
            does not exist yet

        Raises:
            MalformedArtifactError: If the manifest is not a valid registry
        """
        data = MergeEngine.load_container(self.path, self.store.read_optional(self.path))

        try:
            jsonschema.validate(data, MANIFEST_SCHEMA)
        except jsonschema.ValidationError as e:
            msg = f"Registry validation failed: {e.message}"
            raise MalformedArtifactError(
                msg,
                details={"path": self.path, "at": list(e.absolute_path)},
            ) from e

        try:
            return {
                name: [FieldSpec.model_validate(field) for field in fields]
                for name, fields in data.items()
            }
        except ValidationError as e:
            msg = f"Registry contains an invalid field: {e}"
            raise MalformedArtifactError(msg, details={"path": self.path}) from e

    def entity_names(self) -> list[str]:
        return sorted(self.load())

    def contains(self, identifier: str) -> bool:
        return identifier in self.load()

    def fields_for(self, identifier: str) -> list[FieldSpec]:
        """Fields registered for an entity, or an empty list if unknown."""
        return self.load().get(identifier, [])
