"""
Cross-state entity reconciliation.

Collapses the cookies and trackers of the three consent snapshots
into one entity per identity key, tagged with every state the key
was observed in.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable

from cookiecare.models import scan


@dataclasses.dataclass
class Reconciliation:
    """Reconciled cookies and trackers keyed by identity key."""

    cookies: dict[str, scan.ReconciledEntity] = dataclasses.field(default_factory=dict)
    trackers: dict[str, scan.ReconciledEntity] = dataclasses.field(default_factory=dict)

    def entities(self) -> list[scan.ReconciledEntity]:
        """All entities, cookies first, each in first-seen order."""
        return [*self.cookies.values(), *self.trackers.values()]

    def __len__(self) -> int:
        return len(self.cookies) + len(self.trackers)


def merge_observations(
    entities: dict[str, scan.ReconciledEntity],
    observations: Iterable[scan.CookieObservation | scan.TrackerObservation],
    state: scan.ConsentState,
    kind: scan.EntityKind,
) -> None:
    """Fold one state's observations into *entities* in place.

    A new key starts an entity seen only in *state*; a known key gains
    *state* and its data is replaced by this observation.
    """
    for observation in observations:
        key = observation.key
        entity = entities.get(key)
        if entity is None:
            entities[key] = scan.ReconciledEntity(
                key=key, kind=kind, data=observation, states={state}
            )
        else:
            entity.states.add(state)
            entity.data = observation


def reconcile(capture: scan.TriStateCapture) -> Reconciliation:
    """Merge the three snapshots of *capture*, pre-consent first.

    Trackers arrive as unordered sets and are folded in key order so
    the result does not depend on set iteration order.
    """
    result = Reconciliation()
    for state, page in capture.by_state():
        merge_observations(result.cookies, page.cookies, state, "cookie")
        merge_observations(
            result.trackers,
            sorted(page.trackers, key=lambda t: t.key),
            state,
            "tracker",
        )
    return result
