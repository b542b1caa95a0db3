"""File-backed artifact store keyed by project-relative path."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from .exceptions import ArtifactIOError, ArtifactNotFoundError

logger = logging.getLogger(__name__)


class ArtifactStore:
    """Reads and writes generated artifacts under a project root.

    There is no locking: one scaffold operation at a time is expected to
    touch a given project.
    """

    def __init__(self, root: Path) -> None:
        """Initialize store with the target project root.

        Args:
            root: Directory of the Go project being scaffolded
        """
        self.root = Path(root)

    def path_for(self, path: str) -> Path:
        return self.root / path

    def exists(self, path: str) -> bool:
        return self.path_for(path).is_file()

    def read(self, path: str) -> str:
        """Read an artifact.

        Raises:
            ArtifactNotFoundError: If the artifact does not exist
            ArtifactIOError: If the artifact cannot be read
        """
        full_path = self.path_for(path)
        try:
            return full_path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            msg = f"Artifact not found: {full_path}"
            raise ArtifactNotFoundError(msg, details={"path": path}) from e
        except OSError as e:
            msg = f"Failed to read {full_path}: {e}"
            raise ArtifactIOError(msg, details={"path": path}) from e

    def read_optional(self, path: str) -> str | None:
        """Read an artifact, returning None when it does not exist."""
        try:
            return self.read(path)
        except ArtifactNotFoundError:
            return None

    def write(self, path: str, content: str) -> None:
        """Overwrite an artifact, creating parent directories as needed.

        The content goes to a temporary file in the same directory which is
        then renamed over the target, so readers never see a partial file.

        Raises:
            ArtifactIOError: If the artifact cannot be written
        """
        full_path = self.path_for(path)
        tmp_name = None
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=full_path.parent,
                prefix=f".{full_path.name}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_name, full_path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            msg = f"Failed to write {full_path}: {e}"
            raise ArtifactIOError(msg, details={"path": path}) from e

        logger.debug("Wrote %s (%d bytes)", full_path, len(content))
