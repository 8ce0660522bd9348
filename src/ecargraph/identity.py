"""Per-run membership state for actor and object identities."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field


@dataclass(frozen=True)
class IdentityClassification:
    """Which identities of a record are seen for the first time."""

    new_actor: bool
    new_object: bool


@dataclass
class IdentityTracker:
    """Actors and objects already declared during one stream pass.

    One tracker belongs to one driver invocation and is discarded at its
    end. Cross-file coalescing is left to the bulk loader's identity map.
    """

    seen_actors: set[str] = field(default_factory=set)
    seen_objects: set[str] = field(default_factory=set)

    def classify(self, actor_id: str, object_id: str) -> IdentityClassification:
        """Report first sightings without changing state."""
        return IdentityClassification(
            new_actor=actor_id not in self.seen_actors,
            new_object=object_id not in self.seen_objects,
        )

    def remember(self, actor_id: str, object_id: str) -> None:
        self.seen_actors.add(actor_id)
        self.seen_objects.add(object_id)
