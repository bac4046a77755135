"""Data models for the boatfill seat optimizer."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


ParticipantId = Union[str, int]


class AutofillError(ValueError):
    """Base class for errors that reject a whole autofill request."""


class InvalidLayout(AutofillError):
    pass


class DuplicateParticipant(AutofillError):
    pass


class InvalidLockedSeat(AutofillError):
    pass


class InvalidParticipant(AutofillError):
    pass


class Capability(Enum):
    LEFT = "left"
    RIGHT = "right"
    DRUM = "drum"
    STEER = "steer"

    @classmethod
    def from_str(cls, s: str) -> "Capability":
        return cls(s.strip().lower())


PADDLE_CAPABILITIES = frozenset([Capability.LEFT, Capability.RIGHT])


class SeatKind(Enum):
    LEFT_PADDLE = "left"
    RIGHT_PADDLE = "right"
    DRUM = "drummer"
    STEER = "steer"

    @property
    def capability(self) -> Capability:
        """The capability a participant needs to sit in this kind of seat."""
        return _KIND_CAPABILITY[self]

    def is_paddle(self) -> bool:
        return self in (SeatKind.LEFT_PADDLE, SeatKind.RIGHT_PADDLE)


_KIND_CAPABILITY = {
    SeatKind.LEFT_PADDLE: Capability.LEFT,
    SeatKind.RIGHT_PADDLE: Capability.RIGHT,
    SeatKind.DRUM: Capability.DRUM,
    SeatKind.STEER: Capability.STEER,
}

PADDLE_KINDS = [SeatKind.LEFT_PADDLE, SeatKind.RIGHT_PADDLE]


class Vacancy(Enum):
    """Explicit marker for a seat with nobody in it."""
    UNFILLED = "unfilled"

    def __repr__(self) -> str:
        return "UNFILLED"


UNFILLED = Vacancy.UNFILLED

Occupant = Union[ParticipantId, Vacancy]


def id_sort_key(pid: ParticipantId) -> tuple:
    """Order ids ascending; numeric ids sort before string ids."""
    if isinstance(pid, int):
        return (0, pid, "")
    return (1, 0, str(pid))


@dataclass(frozen=True)
class Seat:
    """A seat in the boat.

    Paddle seats carry a 0-based row index. The drummer and steer seats are
    boat-level and have row None.
    """
    row: Optional[int]
    kind: SeatKind

    def is_paddle(self) -> bool:
        return self.kind.is_paddle()

    def __str__(self) -> str:
        if self.row is None:
            return self.kind.value
        return f"row-{self.row + 1}-{self.kind.value}"


@dataclass(frozen=True)
class Participant:
    """A paddler available for the boat."""
    id: ParticipantId
    weight: float
    capabilities: frozenset = field(default_factory=frozenset)
    is_substitute: bool = False
    name: str = ""
    is_ballast: bool = False  # canister, not a person
    prefers_steer: bool = False
    is_stroke: bool = False  # sets the pace from the front-most row

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def can_sit(self, seat: Seat) -> bool:
        return seat.kind.capability in self.capabilities

    @property
    def tier(self) -> int:
        """Selection tier for paddle seats: regulars, substitutes, ballast."""
        if self.is_ballast:
            return 2
        if self.is_substitute:
            return 1
        return 0

    @property
    def label(self) -> str:
        return self.name or str(self.id)


@dataclass
class Shortage:
    """A seat the optimizer could not fill."""
    seat: Seat
    reason: str  # "capability-shortage" or "no-candidate"


@dataclass
class AutofillResult:
    """Outcome of one autofill run.

    assignment covers every seat of the layout, in layout order.
    """
    assignment: dict[Seat, Occupant]
    shortages: list[Shortage] = field(default_factory=list)
    swaps: list[tuple[Seat, Seat]] = field(default_factory=list)

    @property
    def unfilled_seats(self) -> list[Seat]:
        return [s for s, occ in self.assignment.items() if occ is UNFILLED]

    def occupant(self, seat: Seat) -> Occupant:
        return self.assignment[seat]

    def seat_ids(self) -> dict[str, Optional[ParticipantId]]:
        """Assignment keyed by textual seat id, None for empty seats."""
        return {
            str(s): (None if occ is UNFILLED else occ)
            for s, occ in self.assignment.items()
        }
