"""Merge engine that splices generated fragments into existing artifacts.

Every merge is a pure function of the fragment and the artifact's current
text: the engine never caches insertion points between merges, and it never
writes anything itself. Applying the same fragment twice leaves the artifact
byte-identical to a single application.

Existing artifacts are expected to keep the structural anchors the engine
created (the closing terminator, the package clause, the init block). When an
anchor is missing the merge stops with :class:`MalformedArtifactError` instead
of guessing where the fragment belongs.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from .exceptions import MalformedArtifactError
from .models import Fragment, InsertionPolicy

logger = logging.getLogger(__name__)


def contains_line(content: str, line: str) -> bool:
    """Return True when ``line`` appears as a whole line of ``content``.

    Matching whole stripped lines keeps ``models.Order{}`` from matching
    inside ``models.OrderItem{}`` and an import path from matching a longer
    path that starts with it.
    """
    wanted = line.strip()
    return any(existing.strip() == wanted for existing in content.splitlines())


def contains_block(content: str, block: str) -> bool:
    """Return True when every line of ``block`` appears, in order, in ``content``."""
    wanted = [line.strip() for line in block.strip().splitlines()]
    if not wanted:
        return True
    lines = [line.strip() for line in content.splitlines()]
    width = len(wanted)
    return any(lines[i:i + width] == wanted for i in range(len(lines) - width + 1))


def imports_package(content: str, path: str) -> bool:
    """Return True when Go source imports ``path``, alone or in an import block.

    Aliased and blank imports (``m "pkg"``, ``_ "pkg"``) count as imports.
    """
    quoted = f'"{path}"'
    in_block = False
    for line in content.splitlines():
        stripped = line.strip()
        if in_block:
            if stripped == ")":
                in_block = False
            elif stripped.split()[-1:] == [quoted]:
                return True
        elif stripped == "import (":
            in_block = True
        elif stripped.startswith("import ") and stripped.split()[-1] == quoted:
            return True
    return False


class MergeEngine:
    """Applies insertion policies to artifact text."""

    def merge(self, fragment: Fragment, existing: str | None) -> str:
        """Merge a fragment into an artifact.

        Args:
            fragment: Fragment to merge
            existing: Current artifact text, or None if the artifact is absent

        Returns:
            The new artifact text

        Raises:
            MalformedArtifactError: If the existing artifact lacks the anchor
                the fragment's policy relies on
        """
        handlers = {
            InsertionPolicy.APPEND_BEFORE_TERMINATOR: self._append_before_terminator,
            InsertionPolicy.APPEND_TO_KEYED_CONTAINER: self._append_to_keyed_container,
            InsertionPolicy.APPEND_WITH_DECLARATION_HEADER: self._append_with_declaration,
            InsertionPolicy.REPLACE: self._replace,
        }
        logger.debug("Merging %s fragment into %s", fragment.policy.value, fragment.target)
        return handlers[fragment.policy](fragment, existing)

    def _replace(self, fragment: Fragment, existing: str | None) -> str:
        return fragment.text

    def _append_before_terminator(self, fragment: Fragment, existing: str | None) -> str:
        entry = fragment.text
        terminator = fragment.terminator

        if existing is None:
            return f"{fragment.preamble or ''}{entry}{terminator}\n"

        idx = self._last_terminator(existing, terminator)
        if idx is None:
            msg = f"{fragment.target} has no closing {terminator!r}"
            raise MalformedArtifactError(
                msg,
                details={"path": fragment.target, "anchor": terminator},
            )

        if contains_block(existing[:idx], entry):
            logger.debug("%s already contains fragment, skipping", fragment.target)
            return existing

        body = existing[:idx]
        if body and not body.endswith("\n"):
            body += "\n"
        return body + entry + existing[idx:]

    @staticmethod
    def _last_terminator(content: str, terminator: str) -> int | None:
        # Only a terminator on a line of its own closes the enclosing block
        pattern = re.compile(rf"^{re.escape(terminator)}[ \t]*$", re.MULTILINE)
        last = None
        for last in pattern.finditer(content):
            pass
        return last.start() if last is not None else None

    def _append_to_keyed_container(self, fragment: Fragment, existing: str | None) -> str:
        if fragment.key is None:
            msg = f"Keyed fragment for {fragment.target} has no key"
            raise ValueError(msg)

        container = self.load_container(fragment.target, existing)
        container[fragment.key] = fragment.value
        return json.dumps(container, indent=2, sort_keys=True) + "\n"

    @staticmethod
    def load_container(target: str, existing: str | None) -> dict[str, Any]:
        """Parse a keyed container artifact, treating an absent one as empty."""
        if existing is None or not existing.strip():
            return {}
        try:
            container = json.loads(existing)
        except json.JSONDecodeError as e:
            msg = f"{target} is not valid JSON: {e}"
            raise MalformedArtifactError(msg, details={"path": target}) from e
        if not isinstance(container, dict):
            msg = f"{target} must contain a JSON object"
            raise MalformedArtifactError(msg, details={"path": target})
        return container

    @staticmethod
    def _declared(fragment: Fragment, content: str) -> bool:
        if contains_line(content, fragment.declaration):
            return True
        return fragment.import_path is not None and imports_package(content, fragment.import_path)

    def _append_with_declaration(self, fragment: Fragment, existing: str | None) -> str:
        content = existing if existing is not None else (fragment.preamble or "")
        lines = content.splitlines()
        if not lines or not lines[0].strip():
            msg = f"{fragment.target} does not start with a header line"
            raise MalformedArtifactError(
                msg,
                details={"path": fragment.target, "anchor": "header"},
            )

        if fragment.declaration and not self._declared(fragment, content):
            lines[1:1] = ["", fragment.declaration]

        opener = fragment.block_opener
        if opener is None:
            msg = f"Declaration fragment for {fragment.target} has no block opener"
            raise ValueError(msg)

        opener_idx = next(
            (i for i, line in enumerate(lines) if line.strip() == opener.strip()),
            None,
        )
        if opener_idx is None:
            if lines[-1].strip():
                lines.append("")
            lines.extend([opener, fragment.terminator])
            opener_idx = len(lines) - 2

        close_idx = next(
            (
                i
                for i in range(opener_idx + 1, len(lines))
                if lines[i].rstrip() == fragment.terminator
            ),
            None,
        )
        if close_idx is None:
            msg = f"{fragment.target} has an unterminated {opener!r} block"
            raise MalformedArtifactError(
                msg,
                details={"path": fragment.target, "anchor": fragment.terminator},
            )

        if fragment.text and not contains_line(content, fragment.text):
            lines.insert(close_idx, fragment.text)

        return "\n".join(lines) + "\n"
