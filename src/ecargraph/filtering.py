"""Single-predicate record filter compiled from ``predicate:search:value``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ecargraph.errors import ConfigError
from ecargraph.errors import FilterEvaluationError
from ecargraph.records import string_field

logger = logging.getLogger(__name__)

_DELIMITER = ":"


@dataclass(frozen=True)
class FilterSpec:
    """Equality test of one record field against an expected value.

    ``search`` is carried through from the expression but does not take
    part in matching.
    """

    predicate: str
    search: str
    value: str

    def evaluate(self, record: dict[str, Any]) -> bool:
        """Compare the predicate field; raises ``FilterEvaluationError``."""
        return string_field(record, self.predicate) == self.value


def compile_filter(expression: str) -> FilterSpec:
    """Parse *expression* into a ``FilterSpec``.

    The value is everything after the second colon, so it may contain
    colons itself.
    """
    parts = expression.split(_DELIMITER, 2)
    if len(parts) != 3:
        raise ConfigError(
            f"filter expression {expression!r} must have the form "
            "predicate:search:value"
        )
    predicate, search, value = parts
    for name, segment in (("predicate", predicate), ("search", search), ("value", value)):
        if not segment:
            raise ConfigError(f"filter expression {expression!r} has an empty {name}")
    return FilterSpec(predicate=predicate, search=search, value=value)


def matches(spec: FilterSpec | None, record: dict[str, Any]) -> bool:
    """Return whether *record* passes *spec*; no spec lets everything through."""
    if spec is None:
        return True
    try:
        return spec.evaluate(record)
    except FilterEvaluationError as exc:
        logger.debug("Record skipped by filter on %r: %s", spec.predicate, exc)
        return False
