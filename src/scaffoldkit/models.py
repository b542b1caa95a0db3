"""Core data models for ScaffoldKit."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .exceptions import InvalidIdentifierError
from .naming import to_identifier


class TargetType(str, Enum):
    """Primitive types a scaffolded column can map to."""

    TEXT = "text"
    INTEGER = "integer"
    FLOATING = "floating"
    TIMESTAMP = "timestamp"
    BYTES = "bytes"
    BOOLEAN = "boolean"

    @property
    def go_type(self) -> str:
        return _GO_TYPES[self]

    @property
    def html_input(self) -> str:
        return _HTML_INPUTS[self]


_GO_TYPES = {
    TargetType.TEXT: "string",
    TargetType.INTEGER: "int",
    TargetType.FLOATING: "float64",
    TargetType.TIMESTAMP: "time.Time",
    TargetType.BYTES: "[]byte",
    TargetType.BOOLEAN: "bool",
}

_HTML_INPUTS = {
    TargetType.TEXT: "text",
    TargetType.INTEGER: "number",
    TargetType.FLOATING: "number",
    TargetType.TIMESTAMP: "datetime-local",
    TargetType.BYTES: "file",
    TargetType.BOOLEAN: "checkbox",
}


def _check_identifier(value: str, what: str) -> str:
    try:
        to_identifier(value)
    except InvalidIdentifierError as e:
        msg = f"{what} must be a snake_case identifier, got {value!r}"
        raise ValueError(msg) from e
    return value


class FieldSpec(BaseModel):
    """A single column submitted for scaffolding."""

    name: str = Field(..., description="snake_case column name")
    type: str = Field(default="string", description="SQL or Go type token")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate the field name derives into a Go identifier."""
        return _check_identifier(v.strip(), "Field name")

    @property
    def identifier(self) -> str:
        return to_identifier(self.name)


class EntitySpec(BaseModel):
    """A table and its fields, the unit of one scaffold request."""

    table_name: str = Field(..., description="snake_case table name")
    reference_table: str | None = Field(
        default=None,
        description="Previously scaffolded table to add a foreign key to",
    )
    fields: list[FieldSpec] = Field(default_factory=list)

    @field_validator("table_name")
    @classmethod
    def validate_table_name(cls, v: str) -> str:
        """Validate the table name derives into a Go identifier."""
        return _check_identifier(v.strip(), "Table name")

    @field_validator("reference_table")
    @classmethod
    def validate_reference_table(cls, v: str | None) -> str | None:
        """Treat an empty reference as no reference."""
        if v is None or not v.strip():
            return None
        return _check_identifier(v.strip(), "Reference table")

    @model_validator(mode="after")
    def validate_unique_fields(self) -> EntitySpec:
        """Reject field names that collide once converted to identifiers."""
        seen: set[str] = set()
        ref = self.reference_identifier
        reserved = (ref, f"{ref}ID") if ref is not None else ()
        for field in self.fields:
            if field.identifier in reserved:
                msg = f"Field name {field.name} collides with reference field for {self.reference_table}"
                raise ValueError(msg)
            if field.identifier in seen:
                msg = f"Duplicate field name: {field.name}"
                raise ValueError(msg)
            seen.add(field.identifier)
        return self

    @property
    def identifier(self) -> str:
        return to_identifier(self.table_name)

    @property
    def reference_identifier(self) -> str | None:
        if self.reference_table is None:
            return None
        return to_identifier(self.reference_table)


class InsertionPolicy(str, Enum):
    """How a fragment is merged into its target artifact."""

    APPEND_BEFORE_TERMINATOR = "append_before_terminator"
    APPEND_TO_KEYED_CONTAINER = "append_to_keyed_container"
    APPEND_WITH_DECLARATION_HEADER = "append_with_declaration_header"
    REPLACE = "replace"


class Fragment(BaseModel):
    """A generated block of text bound for one artifact."""

    model_config = ConfigDict(frozen=True)

    target: str = Field(..., description="Artifact path relative to the project root")
    policy: InsertionPolicy
    text: str = Field(default="", description="Rendered fragment text")
    key: str | None = Field(default=None, description="Keyed container key")
    value: Any = Field(default=None, description="Keyed container value")
    preamble: str | None = Field(
        default=None,
        description="Content used when the artifact does not exist yet",
    )
    terminator: str = Field(default="}", description="Closing structural token")
    declaration: str | None = Field(
        default=None,
        description="Line that must be present exactly once",
    )
    block_opener: str | None = Field(
        default=None,
        description="Line that opens the block entries are appended to",
    )
    import_path: str | None = Field(
        default=None,
        description="Package the declaration imports, matched inside import blocks too",
    )


class GeneratedFragments(BaseModel):
    """Every fragment produced for one entity."""

    model: Fragment
    migration: Fragment
    handlers: Fragment
    route_block: Fragment
    model_list_entry: Fragment
    registry_entry: Fragment
    views: list[Fragment] = Field(default_factory=list)

    def in_merge_order(self) -> list[Fragment]:
        """Fragments in the order the scaffolder applies them."""
        return [
            self.model,
            self.migration,
            self.handlers,
            self.route_block,
            *self.views,
            self.model_list_entry,
            self.registry_entry,
        ]


class ChangeAction(str, Enum):
    """What a merge did to an artifact."""

    CREATED = "created"
    UPDATED = "updated"
    REPLACED = "replaced"
    UNCHANGED = "unchanged"


class ArtifactChange(BaseModel):
    """Outcome of merging one fragment."""

    path: str
    action: ChangeAction


class ScaffoldResult(BaseModel):
    """Outcome of one scaffold request."""

    entity: str = Field(..., description="Derived entity identifier")
    table_name: str
    changes: list[ArtifactChange] = Field(default_factory=list)
    dry_run: bool = False

    def paths_with(self, action: ChangeAction) -> list[str]:
        return [c.path for c in self.changes if c.action == action]


class ScaffoldPaths(BaseModel):
    """Where generated artifacts live, relative to the project root."""

    registry: str = "models.json"
    migrations: str = "helpers/migrations.go"
    routes: str = "internals/routes.go"
    model_list: str = "helpers/model_list.go"
    models_dir: str = "models"
    handlers_dir: str = "handlers"
    views_dir: str = "views"


class ScaffoldConfig(BaseModel):
    """Project-level configuration."""

    version: str = Field(default="1.0.0", description="Config schema version")
    project_name: str = Field(
        default="",
        description="Go module path interpolated into generated imports",
    )
    paths: ScaffoldPaths = Field(default_factory=ScaffoldPaths)

    @field_validator("version")
    @classmethod
    def validate_semver(cls, v: str) -> str:
        """Validate version follows semantic versioning."""
        if not re.match(r"^\d+\.\d+\.\d+$", v):
            msg = "Version must follow semantic versioning (e.g., 1.0.0)"
            raise ValueError(msg)
        return v


class ScaffoldData(BaseModel):
    """Body of an entity submission, using the wire field names."""

    model_config = ConfigDict(populate_by_name=True)

    table_name: str = Field(..., alias="tableName")
    ref_table_name: str = Field(default="", alias="refTableName")
    fields: list[dict[str, Any]] = Field(default_factory=list)


class ScaffoldRequest(BaseModel):
    """Entity submission envelope (``{"scaffoldData": {...}}``)."""

    model_config = ConfigDict(populate_by_name=True)

    scaffold_data: ScaffoldData = Field(..., alias="scaffoldData")


class ScaffoldResponse(BaseModel):
    """Successful submission response."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = "Scaffold created successfully"
    action: str = "migrate"
    action_param: str = Field(..., alias="actionParam")
