"""eCAR audit record decoding.

A source line is first decoded into a plain ``dict`` (enough for the
filter), and only records that pass the filter are validated into an
``AuditRecord`` for triple emission.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel
from pydantic import Field
from pydantic import field_validator
from pydantic import StrictStr
from pydantic import ValidationError

from ecargraph.errors import FilterEvaluationError
from ecargraph.errors import MalformedInputError


def parse_line(line: str, *, line_no: int | None = None) -> dict[str, Any]:
    """Decode one JSON line into a field-keyed mapping.

    Raises ``MalformedInputError`` on invalid JSON or a non-object value.
    """
    try:
        data = json.loads(line)
    except json.JSONDecodeError as exc:
        raise MalformedInputError(f"invalid JSON ({exc.msg})", line_no=line_no) from exc
    if not isinstance(data, dict):
        raise MalformedInputError(
            f"expected a JSON object, got {type(data).__name__}", line_no=line_no
        )
    return data


def string_field(record: dict[str, Any], name: str) -> str:
    """Return ``record[name]`` when it is present and a string."""
    if name not in record:
        raise FilterEvaluationError(f"field {name!r} is absent")
    value = record[name]
    if not isinstance(value, str):
        raise FilterEvaluationError(
            f"field {name!r} is {type(value).__name__}, not str"
        )
    return value


def _render_number(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, float):
        return repr(value)
    return value


class AuditRecord(BaseModel):
    """The fields of one eCAR event needed to emit its triples."""

    model_config = {"frozen": True, "extra": "ignore"}

    id: StrictStr = Field(min_length=1, description="Event identity.")
    action: StrictStr = Field(description="Action type label.")
    actor_id: StrictStr = Field(alias="actorID", min_length=1)
    object_id: StrictStr = Field(alias="objectID", min_length=1)
    object: StrictStr = Field(description="Object label, e.g. a file path.")
    hostname: StrictStr
    pid: StrictStr = Field(description="Process id, rendered as text.")
    ppid: StrictStr = Field(description="Parent process id, rendered as text.")
    timestamp: StrictStr

    @field_validator("pid", "ppid", mode="before")
    @classmethod
    def _numbers_as_text(cls, value: Any) -> Any:
        return _render_number(value)

    @field_validator("*")
    @classmethod
    def _encodable_as_utf8(cls, value: str) -> str:
        # json.loads accepts lone surrogate escapes such as "\ud800"
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ValueError(
                f"unpaired surrogate at position {exc.start} cannot be written as UTF-8"
            ) from exc
        return value

    @classmethod
    def from_mapping(
        cls, data: dict[str, Any], *, line_no: int | None = None
    ) -> AuditRecord:
        """Validate *data*, raising ``MalformedInputError`` on the first problem."""
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            first = exc.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or "<record>"
            raise MalformedInputError(
                f"field {field!r}: {first['msg']}", line_no=line_no
            ) from exc
