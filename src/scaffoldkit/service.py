"""Entity submission handling for the dev HTTP endpoint."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from .exceptions import (
    ArtifactIOError,
    DuplicateEntityError,
    InvalidIdentifierError,
    MalformedArtifactError,
)
from .models import EntitySpec, ScaffoldData, ScaffoldRequest, ScaffoldResponse
from .scaffolder import Scaffolder

logger = logging.getLogger(__name__)

# One scaffold at a time per process; artifacts have a single writer
_SCAFFOLD_LOCK = threading.Lock()


@dataclass
class Submission:
    """HTTP status and JSON body for a processed submission."""

    status_code: int
    body: dict[str, Any]

    @property
    def ok(self) -> bool:
        return self.status_code < 400


def entity_from_data(data: ScaffoldData) -> EntitySpec:
    """Build an entity from submitted data.

    Raises:
        InvalidIdentifierError: If a table or field name is unusable
    """
    try:
        return EntitySpec(
            table_name=data.table_name,
            reference_table=data.ref_table_name or None,
            fields=data.fields,
        )
    except ValidationError as e:
        errors = [err["msg"] for err in e.errors()]
        msg = "; ".join(errors)
        raise InvalidIdentifierError(msg, details={"errors": errors}) from e


def parse_submission(payload: Any) -> ScaffoldData:
    """Accept either the ``scaffoldData`` envelope or its bare contents."""
    if isinstance(payload, dict) and "scaffoldData" in payload:
        return ScaffoldRequest.model_validate(payload).scaffold_data
    return ScaffoldData.model_validate(payload)


class ScaffoldService:
    """Turns submission payloads into scaffold runs and JSON responses."""

    def __init__(self, scaffolder: Scaffolder, replace: bool = False) -> None:
        self.scaffolder = scaffolder
        self.replace = replace

    def submit(self, payload: Any) -> Submission:
        """Process one submission.

        Malformed input and bad names are client errors; duplicates are
        conflicts; artifact problems are server errors.
        """
        try:
            data = parse_submission(payload)
        except ValidationError as e:
            logger.warning("Rejected submission: %s", e)
            return Submission(400, {"error": "Cannot parse JSON"})

        try:
            entity = entity_from_data(data)
            with _SCAFFOLD_LOCK:
                self.scaffolder.scaffold(entity, replace=self.replace)
        except InvalidIdentifierError as e:
            return Submission(400, {"error": str(e)})
        except DuplicateEntityError as e:
            return Submission(409, {"error": str(e)})
        except (MalformedArtifactError, ArtifactIOError) as e:
            logger.error("Scaffold of %s failed: %s", data.table_name, e)
            return Submission(500, {"error": str(e)})

        response = ScaffoldResponse(action_param=data.table_name)
        return Submission(200, response.model_dump(by_alias=True))
