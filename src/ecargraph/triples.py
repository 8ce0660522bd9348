"""RDF triple emission for accepted audit records.

Each record becomes an actor --action--> event --acts_on--> object chain
plus literal attributes. Identity-declaration triples (``actorID``,
``objectID``) are written only for the first record of a run that
references the identity.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from dataclasses import dataclass

from ecargraph.identity import IdentityTracker
from ecargraph.records import AuditRecord

# ---------------------------------------------------------------------------
# Schema predicate names (fixed, shared with the Dgraph schema)
# ---------------------------------------------------------------------------

ACTION = "action"
ACTION_TYPE = "action_type"
ACTS_ON = "acts_on"
ACTOR_ID = "actorID"
HOSTNAME = "hostname"
ID = "id"
OBJECT = "object"
OBJECT_ID = "objectID"
PID = "pid"
PPID = "ppid"
TIMESTAMP = "timestamp"

# ---------------------------------------------------------------------------
# Term rendering
# ---------------------------------------------------------------------------

_VERBATIM_LABEL_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9-]*")


def _label_char(index: int, ch: str) -> str:
    if ch.isascii() and (ch.isalnum() or (ch == "-" and index > 0)):
        return ch
    return f"_{ord(ch):x}_"


def blank_node(value: str) -> str:
    """Render the blank node for an identity value.

    Plain alphanumeric values are kept verbatim (``_:a1``). Any other
    character, ``_`` included, becomes ``_<hex>_`` so distinct values never
    share a label.
    """
    if _VERBATIM_LABEL_RE.fullmatch(value):
        return f"_:{value}"
    return "_:" + "".join(_label_char(i, ch) for i, ch in enumerate(value))


def literal(value: str) -> str:
    """Render a quoted, escaped string literal."""
    return json.dumps(value, ensure_ascii=False)


@dataclass(frozen=True)
class Triple:
    """One ``subject <predicate> object .`` statement with rendered terms."""

    subject: str
    predicate: str
    object: str

    @property
    def is_literal(self) -> bool:
        return self.object.startswith('"')

    def render(self) -> str:
        return f"{self.subject} <{self.predicate}> {self.object} .\n"


def _edge(subject: str, predicate: str, target: str) -> Triple:
    return Triple(blank_node(subject), predicate, blank_node(target))


def _attribute(subject: str, predicate: str, value: str) -> Triple:
    return Triple(blank_node(subject), predicate, literal(value))


# ---------------------------------------------------------------------------
# Emission
# ---------------------------------------------------------------------------


def emit_triples(record: AuditRecord, tracker: IdentityTracker) -> list[Triple]:
    """Return the triples for *record* and mark its identities as declared."""
    seen = tracker.classify(record.actor_id, record.object_id)
    event = record.id

    triples: list[Triple] = []
    if seen.new_actor:
        triples.append(_attribute(record.actor_id, ACTOR_ID, record.actor_id))
    triples.extend(
        [
            _edge(record.actor_id, ACTION, event),
            _attribute(event, ACTION_TYPE, record.action),
            _attribute(event, HOSTNAME, record.hostname),
            _edge(event, ACTS_ON, record.object_id),
            _attribute(event, ID, record.id),
            _attribute(record.object_id, OBJECT, record.object),
            _attribute(event, PID, record.pid),
            _attribute(event, PPID, record.ppid),
            _attribute(event, TIMESTAMP, record.timestamp),
        ]
    )
    if seen.new_object:
        triples.append(_attribute(record.object_id, OBJECT_ID, record.object_id))

    tracker.remember(record.actor_id, record.object_id)
    return triples


def render_block(triples: Iterable[Triple]) -> str:
    """Join rendered triples into one write batch."""
    return "".join(triple.render() for triple in triples)
