"""Candidate pool resolution: who is still available for which seat."""

from dataclasses import dataclass, field

from boatfill.layout import resolve_seat
from boatfill.models import (
    Capability, DuplicateParticipant, InvalidLockedSeat, InvalidParticipant,
    Occupant, Participant, ParticipantId, Seat, UNFILLED,
)


@dataclass
class CandidatePool:
    """Participants not consumed by locked seats, grouped by capability.

    Each list keeps the caller's pool order.
    """
    participants: dict[ParticipantId, Participant]
    locked_ids: frozenset
    left: list[Participant] = field(default_factory=list)
    right: list[Participant] = field(default_factory=list)
    drum: list[Participant] = field(default_factory=list)
    steer: list[Participant] = field(default_factory=list)

    def for_capability(self, capability: Capability) -> list[Participant]:
        return {
            Capability.LEFT: self.left,
            Capability.RIGHT: self.right,
            Capability.DRUM: self.drum,
            Capability.STEER: self.steer,
        }[capability]

    def paddlers(self) -> list[Participant]:
        """Everyone on either paddle list, once each, in pool order."""
        on_side = {p.id for p in self.left} | {p.id for p in self.right}
        return [p for pid, p in self.participants.items() if pid in on_side]


def index_participants(pool: list[Participant]) -> dict[ParticipantId, Participant]:
    """Map id -> participant, rejecting duplicate ids, bad weights and capabilities."""
    by_id: dict[ParticipantId, Participant] = {}
    for p in pool:
        if p.id in by_id:
            raise DuplicateParticipant(f"Participant {p.id!r} appears more than once in the pool")
        if (isinstance(p.weight, bool) or not isinstance(p.weight, (int, float))
                or not p.weight > 0):
            raise InvalidParticipant(
                f"Participant {p.id!r} needs a positive weight, got {p.weight!r}"
            )
        unknown = [c for c in p.capabilities if not isinstance(c, Capability)]
        if unknown:
            raise InvalidParticipant(
                f"Participant {p.id!r} has unknown capabilities {unknown!r}"
            )
        by_id[p.id] = p
    return by_id


def check_locks(locked: dict, participants: dict[ParticipantId, Participant],
                rows: int) -> dict[Seat, Occupant]:
    """Validate caller pins and return them keyed by Seat.

    A pin may name a participant from the pool or UNFILLED (None is accepted
    as UNFILLED). A participant can be pinned to one seat only.
    """
    resolved: dict[Seat, Occupant] = {}
    pinned_to: dict[ParticipantId, Seat] = {}

    for key, pid in (locked or {}).items():
        seat = resolve_seat(key, rows)
        if seat in resolved:
            raise InvalidLockedSeat(f"Seat {seat} is locked more than once")

        if pid is None or pid is UNFILLED:
            resolved[seat] = UNFILLED
            continue

        if pid not in participants:
            raise InvalidLockedSeat(
                f"Seat {seat} is locked to {pid!r}, who is not in the pool"
            )
        if pid in pinned_to:
            raise InvalidLockedSeat(
                f"Participant {pid!r} is locked to both {pinned_to[pid]} and {seat}"
            )
        pinned_to[pid] = seat
        resolved[seat] = pid

    return resolved


def resolve_candidates(pool: list[Participant],
                       locked_ids=frozenset()) -> CandidatePool:
    """Build per-capability candidate lists, excluding locked participants."""
    participants = index_participants(pool)
    locked_ids = frozenset(locked_ids)

    candidates = CandidatePool(participants=participants, locked_ids=locked_ids)
    for p in pool:
        if p.id in locked_ids:
            continue
        for cap in Capability:
            if p.can(cap):
                candidates.for_capability(cap).append(p)
    return candidates
