"""Custom exceptions for ScaffoldKit."""

from typing import Any


class ScaffoldKitError(Exception):
    """Base exception for all ScaffoldKit errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}


class InvalidIdentifierError(ScaffoldKitError):
    """Raised when an entity or field name cannot become a Go identifier."""


class MalformedArtifactError(ScaffoldKitError):
    """Raised when an existing artifact is missing its structural anchor."""


class ArtifactIOError(ScaffoldKitError):
    """Raised when reading or writing an artifact fails."""


class ArtifactNotFoundError(ArtifactIOError):
    """Raised when reading an artifact that does not exist."""


class DuplicateEntityError(ScaffoldKitError):
    """Raised when scaffolding an entity that is already registered."""


class ConfigError(ScaffoldKitError):
    """Raised when project configuration is invalid."""
