"""Seat auto-fill engine for boatfill.

Four phases, run once each in order:
1. Exclusive seats: steer and drummer, from the most specialised candidates
2. Side balancing: greedy heaviest-first split of paddlers over left/right
3. Trim adjustment: same-side front/back swaps toward the target trim
4. Finalize: merge pinned seats, mark anything still empty as unfilled

Validation of the request happens before phase 1; nothing after that raises.
Phases 2 and 3 are pure functions over a PartialAssignment and can be swapped
out through the `balancer` and `trimmer` arguments of autofill().
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from boatfill.layout import (
    DEFAULT_ROWS, DRUM_SEAT, STEER_SEAT,
    build_layout, is_front_row, middle_out_order, partition_seats,
)
from boatfill.models import (
    AutofillResult, Occupant, Participant, ParticipantId, PADDLE_KINDS,
    Seat, SeatKind, Shortage, UNFILLED, id_sort_key,
)
from boatfill.pool import (
    CandidatePool, check_locks, index_participants, resolve_candidates,
)

DEFAULT_TOLERANCE = 0.5  # kg

_EPS = 1e-9


@dataclass
class PartialAssignment:
    """Work-in-progress seating shared between phases.

    `locked` holds the caller's pins (participant id or UNFILLED), `filled`
    the seats the optimizer has placed someone in so far.
    """
    rows: int
    locked: dict[Seat, Occupant] = field(default_factory=dict)
    filled: dict[Seat, ParticipantId] = field(default_factory=dict)
    swaps: list[tuple[Seat, Seat]] = field(default_factory=list)

    def copy(self) -> "PartialAssignment":
        return PartialAssignment(
            rows=self.rows,
            locked=dict(self.locked),
            filled=dict(self.filled),
            swaps=list(self.swaps),
        )

    def is_free(self, seat: Seat) -> bool:
        return seat not in self.locked and seat not in self.filled

    def occupant(self, seat: Seat) -> Optional[ParticipantId]:
        if seat in self.locked:
            occ = self.locked[seat]
            return None if occ is UNFILLED else occ
        return self.filled.get(seat)

    def used_ids(self) -> set:
        used = {pid for pid in self.locked.values() if pid is not UNFILLED}
        used.update(self.filled.values())
        return used


Balancer = Callable[[PartialAssignment, CandidatePool], PartialAssignment]
Trimmer = Callable[[PartialAssignment, dict, float, float], PartialAssignment]


# ---------------------------------------------------------------------------
# Phase 1: Drummer and steer
# ---------------------------------------------------------------------------

def pick_specialist(candidates: list[Participant], used: set,
                    prefer: Optional[Callable[[Participant], bool]] = None
                    ) -> Optional[Participant]:
    """Pick the unused candidate with the fewest capabilities.

    Ties go to candidates for whom `prefer` is true, then to the lowest id.
    """
    available = [p for p in candidates if p.id not in used]
    if not available:
        return None
    return min(available, key=lambda p: (
        len(p.capabilities),
        not (prefer and prefer(p)),
        id_sort_key(p.id),
    ))


def _prefers_steer(p: Participant) -> bool:
    return p.prefers_steer


def fill_exclusive_seats(partial: PartialAssignment,
                         candidates: CandidatePool
                         ) -> tuple[PartialAssignment, list[Shortage]]:
    """Fill the steer seat, then the drummer seat, if they are not pinned."""
    result = partial.copy()
    shortages = []

    for seat in (STEER_SEAT, DRUM_SEAT):
        if not result.is_free(seat):
            continue
        prefer = _prefers_steer if seat.kind == SeatKind.STEER else None
        pick = pick_specialist(
            candidates.for_capability(seat.kind.capability), result.used_ids(),
            prefer,
        )
        if pick is None:
            shortages.append(Shortage(seat, "capability-shortage"))
            continue
        result.filled[seat] = pick.id

    return result, shortages


# ---------------------------------------------------------------------------
# Phase 2: Left/right balancing
# ---------------------------------------------------------------------------

def side_sums(partial: PartialAssignment,
              participants: dict[ParticipantId, Participant]) -> dict[SeatKind, float]:
    """Weight on each side, counting pinned and already-placed paddlers."""
    sums = {kind: 0.0 for kind in PADDLE_KINDS}
    for seat in list(partial.locked) + list(partial.filled):
        if not seat.is_paddle():
            continue
        pid = partial.occupant(seat)
        if pid is not None:
            sums[seat.kind] += participants[pid].weight
    return sums


def _single_side_demand(waiting: list[Participant], kind: SeatKind) -> int:
    """How many waiting paddlers can only sit on `kind`'s side."""
    other = SeatKind.RIGHT_PADDLE if kind == SeatKind.LEFT_PADDLE else SeatKind.LEFT_PADDLE
    return sum(
        1 for p in waiting
        if p.can(kind.capability) and not p.can(other.capability)
    )


def balance_sides(partial: PartialAssignment,
                  candidates: CandidatePool) -> PartialAssignment:
    """Place paddlers heaviest first, each on the lighter side they can sit on.

    Regulars go before substitutes, substitutes before ballast; order within a
    tier is heaviest first, pool order on equal weights. Exact ties between
    sides go left. Seats on a side fill from the middle of the boat outwards.
    A stroke paddler takes the front-most free seat on their side instead.

    This is not a pure lighter-side greedy: a paddler who can sit either side
    leaves a side alone when its remaining seats are all needed by one-sided
    paddlers still waiting, even if that side is lighter. They only take such
    a side when no other capable side has a free seat.
    """
    result = partial.copy()
    used = result.used_ids()
    taken = set(result.locked) | set(result.filled)
    _, free_seats = partition_seats(build_layout(result.rows), taken)

    free = {
        kind: middle_out_order(
            [s for s in free_seats if s.kind == kind], result.rows
        )
        for kind in PADDLE_KINDS
    }
    sums = side_sums(result, candidates.participants)

    queue = sorted(
        (p for p in candidates.paddlers() if p.id not in used),
        key=lambda p: (p.tier, -p.weight),
    )

    for i, p in enumerate(queue):
        sides = [k for k in PADDLE_KINDS if p.can(k.capability) and free[k]]
        if not sides:
            continue
        if len(sides) > 1:
            waiting = queue[i + 1:]
            spare = [k for k in sides
                     if len(free[k]) > _single_side_demand(waiting, k)]
            if spare:
                sides = spare

        side = min(sides, key=lambda k: (sums[k], PADDLE_KINDS.index(k)))
        if p.is_stroke:
            seat = min(free[side], key=lambda s: s.row)
            free[side].remove(seat)
        else:
            seat = free[side].pop(0)
        result.filled[seat] = p.id
        sums[side] += p.weight

    return result


# ---------------------------------------------------------------------------
# Phase 3: Front/back trim
# ---------------------------------------------------------------------------

def _placed_paddle_seats(partial: PartialAssignment) -> list[Seat]:
    seats = [s for s in partial.filled if s.is_paddle()]
    return sorted(seats, key=lambda s: (s.row, PADDLE_KINDS.index(s.kind)))


def measure_trim(partial: PartialAssignment,
                 participants: dict[ParticipantId, Participant]) -> float:
    """Front minus back weight over the paddle seats the optimizer filled."""
    trim = 0.0
    for seat in _placed_paddle_seats(partial):
        w = participants[partial.filled[seat]].weight
        if is_front_row(seat.row, partial.rows):
            trim += w
        else:
            trim -= w
    return trim


def adjust_trim(partial: PartialAssignment,
                participants: dict[ParticipantId, Participant],
                target_trim: float = 0.0,
                tolerance: float = DEFAULT_TOLERANCE,
                max_passes: Optional[int] = None) -> PartialAssignment:
    """Swap front and back paddlers on the same side toward `target_trim`.

    Each pass applies the one swap that most reduces |trim - target|. Both
    seats of a swap are on the same side, so left/right sums never change.
    Stroke paddlers stay where they were seated.
    Stops inside the tolerance, when no swap strictly helps, or after
    `max_passes` (default: seat count of the boat).
    """
    result = partial.copy()
    if max_passes is None:
        max_passes = 2 * result.rows + 2

    for _ in range(max_passes):
        trim = measure_trim(result, participants)
        best_dev = abs(trim - target_trim)
        if best_dev <= tolerance:
            break

        placed = [s for s in _placed_paddle_seats(result)
                  if not participants[result.filled[s]].is_stroke]
        front = [s for s in placed if is_front_row(s.row, result.rows)]
        back = [s for s in placed if not is_front_row(s.row, result.rows)]

        best = None
        for f in front:
            wf = participants[result.filled[f]].weight
            for b in back:
                if b.kind != f.kind:
                    continue
                wb = participants[result.filled[b]].weight
                dev = abs(trim + 2 * (wb - wf) - target_trim)
                if dev < best_dev - _EPS:
                    best_dev = dev
                    best = (f, b)

        if best is None:
            break
        f, b = best
        result.filled[f], result.filled[b] = result.filled[b], result.filled[f]
        result.swaps.append(best)

    return result


# ---------------------------------------------------------------------------
# Phase 4: Finalize
# ---------------------------------------------------------------------------

def finalize(layout: list[Seat], partial: PartialAssignment,
             shortages: list[Shortage]) -> AutofillResult:
    """Merge pins and placements over the whole layout; empty seats become UNFILLED."""
    assignment: dict[Seat, Occupant] = {}
    all_shortages = list(shortages)
    short_seats = {s.seat for s in shortages}

    for seat in layout:
        if seat in partial.locked:
            assignment[seat] = partial.locked[seat]
        elif seat in partial.filled:
            assignment[seat] = partial.filled[seat]
        else:
            assignment[seat] = UNFILLED
            if seat not in short_seats:
                all_shortages.append(Shortage(seat, "no-candidate"))

    order = {seat: i for i, seat in enumerate(layout)}
    all_shortages.sort(key=lambda s: order[s.seat])

    return AutofillResult(
        assignment=assignment,
        shortages=all_shortages,
        swaps=list(partial.swaps),
    )


def autofill(rows: int = DEFAULT_ROWS,
             pool: Optional[list[Participant]] = None,
             locked: Optional[dict] = None,
             target_trim: float = 0.0,
             tolerance: float = DEFAULT_TOLERANCE,
             balancer: Balancer = balance_sides,
             trimmer: Trimmer = adjust_trim) -> AutofillResult:
    """Fill every free seat of a `rows`-row boat from `pool`.

    `locked` maps seats (Seat objects or ids like 'row-1-left') to a
    participant id, or to None/UNFILLED to keep the seat empty. Raises an
    AutofillError subclass for malformed input; seats that cannot be filled
    come back as UNFILLED with a matching Shortage.
    """
    layout = build_layout(rows)
    pool = list(pool or [])
    participants = index_participants(pool)
    locks = check_locks(locked, participants, rows)

    locked_ids = {pid for pid in locks.values() if pid is not UNFILLED}
    candidates = resolve_candidates(pool, locked_ids)

    partial = PartialAssignment(rows=rows, locked=locks)
    partial, shortages = fill_exclusive_seats(partial, candidates)
    partial = balancer(partial, candidates)
    partial = trimmer(partial, candidates.participants, target_trim, tolerance)

    return finalize(layout, partial, shortages)
