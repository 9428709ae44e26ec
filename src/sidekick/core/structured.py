"""Decode structured (format=json) model replies into file records."""
from __future__ import annotations

import json
from typing import List

from pydantic import BaseModel, ValidationError

from sidekick.errors import StructuredOutputError


class GeneratedFile(BaseModel):
    """A file the model asked to create, as decoded from its JSON reply."""
    filename: str = ""
    content: str = ""


class EditResult(BaseModel):
    """Edit mode reply: the complete new content of one file."""
    filename: str = ""
    content: str = ""
    summary: str = ""


def parse_generated_files(payload: str) -> List[GeneratedFile]:
    """
    Parse a JSON array of {filename, content} objects or a single object.

    Models are inconsistent about which shape they return, so both are
    accepted; a single object comes back as a one-element list.

    Raises:
        StructuredOutputError: If neither shape decodes. The raw payload
            is kept on the error.
    """
    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, TypeError) as e:
        raise StructuredOutputError("invalid JSON for generated files", raw=str(payload)) from e

    try:
        if isinstance(data, list):
            return [GeneratedFile.model_validate(item) for item in data]
        return [GeneratedFile.model_validate(data)]
    except ValidationError as e:
        raise StructuredOutputError("invalid JSON for generated files", raw=payload) from e


def parse_edit_result(payload: str) -> EditResult:
    """Parse edit mode's single {filename, content, summary} object."""
    try:
        return EditResult.model_validate_json(payload)
    except ValidationError as e:
        raise StructuredOutputError("invalid JSON for edit result", raw=payload) from e
