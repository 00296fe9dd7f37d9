"""Validated JSON document store with `$schema` tag preservation."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from job_queue.errors import DocumentReadError, SchemaValidationError

logger = logging.getLogger(__name__)

SCHEMA_KEY = "$schema"

ModelT = TypeVar("ModelT", bound=BaseModel)


def encode_record(record: BaseModel) -> dict[str, Any]:
    """Encode a record using wire names and dropping unset optional fields."""

    return record.model_dump(mode="json", by_alias=True, exclude_none=True)


def dump_json(payload: Any) -> str:
    """Pretty-print JSON the way every document and editor buffer is written."""

    return json.dumps(payload, ensure_ascii=False, indent=2) + "\n"


def format_validation_issues(error: ValidationError) -> list[str]:
    """Flatten pydantic errors into `location: message` lines."""

    issues: list[str] = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        issues.append(f"{location}: {item['msg']}")
    return issues


def validate_payload(model: type[ModelT], payload: Any, *, source: str) -> ModelT:
    """Validate an already parsed JSON value against `model`."""

    try:
        return model.model_validate(payload)
    except ValidationError as error:
        raise SchemaValidationError(
            f"JSON at {source} does not match schema",
            issues=format_validation_issues(error),
        ) from error


def decode_record(model: type[ModelT], text: str) -> ModelT:
    """Parse and validate one record from editor text."""

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as error:
        raise SchemaValidationError(f"not valid JSON: {error}") from error
    return validate_payload(model, payload, source="editor buffer")


class JsonDocument(Generic[ModelT]):
    """In-memory owner of one JSON document and the only writer of its file."""

    def __init__(self, path: Path, data: ModelT, schema_ref: str | None = None) -> None:
        self.path = path
        self.data = data
        self.schema_ref = schema_ref

    @classmethod
    def load(cls, path: Path, model: type[ModelT]) -> JsonDocument[ModelT]:
        """Read, parse and validate the document at `path`."""

        try:
            raw = json.loads(path.read_text("utf-8"))
        except (OSError, ValueError) as error:
            raise DocumentReadError(f"Couldn't open '{path}': {error}") from error

        schema_ref: str | None = None
        if isinstance(raw, dict):
            raw = dict(raw)
            tag = raw.pop(SCHEMA_KEY, None)
            if isinstance(tag, str):
                schema_ref = tag

        data = validate_payload(model, raw, source=f"'{path}'")
        logger.debug("Loaded %s (schema_ref=%s)", path, schema_ref)
        return cls(path, data, schema_ref)

    @classmethod
    def create(
        cls,
        path: Path,
        data: ModelT,
        schema_ref: str | None = None,
    ) -> JsonDocument[ModelT]:
        """Write a fresh document and return its store."""

        document = cls(path, data, schema_ref)
        document.sync()
        return document

    def to_payload(self) -> dict[str, Any]:
        """Encoded document with the `$schema` tag re-attached first."""

        encoded = encode_record(self.data)
        if self.schema_ref is None:
            return encoded
        return {SCHEMA_KEY: self.schema_ref, **encoded}

    def sync(self) -> None:
        """Overwrite the backing file with the current in-memory data."""

        try:
            self.path.write_text(dump_json(self.to_payload()), "utf-8")
        except OSError as error:
            raise DocumentReadError(f"Couldn't write '{self.path}': {error}") from error
        logger.debug("Synced %s", self.path)
