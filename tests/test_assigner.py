"""Tests for assigner.py: the four fill phases and autofill()."""

import pytest

from boatfill.assigner import (
    PartialAssignment, adjust_trim, autofill, balance_sides,
    fill_exclusive_seats, measure_trim, pick_specialist,
)
from boatfill.layout import DRUM_SEAT, STEER_SEAT, build_layout
from boatfill.models import (
    Capability, DuplicateParticipant, InvalidLayout, InvalidLockedSeat,
    InvalidParticipant, Participant, Seat, SeatKind, UNFILLED,
)
from boatfill.pool import index_participants, resolve_candidates

L = SeatKind.LEFT_PADDLE
R = SeatKind.RIGHT_PADDLE


def _make_participant(pid, weight=70, caps=("left", "right"), **kwargs):
    return Participant(
        id=pid, weight=weight,
        capabilities=frozenset(Capability.from_str(c) for c in caps),
        **kwargs,
    )


def _side_sum(assignment, pool, kind):
    weights = {p.id: p.weight for p in pool}
    return sum(weights[pid] for seat, pid in assignment.items()
               if seat.kind == kind and pid is not UNFILLED)


def _seated_ids(assignment):
    return [pid for pid in assignment.values() if pid is not UNFILLED]


class TestExampleScenarios:
    def test_one_row_full_boat(self):
        pool = [
            _make_participant(1, 70, ("left",)),
            _make_participant(2, 90, ("right",)),
            _make_participant(3, 60, ("drum",)),
            _make_participant(4, 65, ("steer",)),
        ]
        result = autofill(rows=1, pool=pool)

        assert result.assignment == {
            Seat(0, L): 1,
            Seat(0, R): 2,
            DRUM_SEAT: 3,
            STEER_SEAT: 4,
        }
        assert result.unfilled_seats == []
        assert result.shortages == []

    def test_two_dual_paddlers(self):
        pool = [_make_participant("a", 80), _make_participant("b", 100)]
        result = autofill(rows=1, pool=pool)

        # heaviest first, empty sides tie -> left
        assert result.assignment[Seat(0, L)] == "b"
        assert result.assignment[Seat(0, R)] == "a"
        assert abs(_side_sum(result.assignment, pool, L)
                   - _side_sum(result.assignment, pool, R)) <= 20

    def test_locked_participant_not_reused(self):
        pool = [
            _make_participant(5, 100, ("left", "right")),
            _make_participant(6, 70, ("left", "right")),
            _make_participant(7, 60, ("left",)),
        ]
        result = autofill(rows=1, pool=pool, locked={Seat(0, L): 5})

        assert result.assignment[Seat(0, L)] == 5
        assert _seated_ids(result.assignment).count(5) == 1
        assert result.assignment[Seat(0, R)] == 6


class TestPhaseExclusiveSeats:
    def test_prefers_specialist(self):
        versatile = _make_participant("a", 70, ("left", "right", "steer"))
        specialist = _make_participant("z", 70, ("steer",))
        assert pick_specialist([versatile, specialist], set()) == specialist

    def test_tie_by_lowest_id(self):
        pool = [_make_participant("b", 70, ("drum",)),
                _make_participant("a", 90, ("drum",))]
        assert pick_specialist(pool, set()).id == "a"

    def test_skips_used(self):
        pool = [_make_participant("a", 70, ("drum",))]
        assert pick_specialist(pool, {"a"}) is None

    def test_steer_before_drummer(self):
        both = _make_participant("x", 70, ("drum", "steer"))
        cands = resolve_candidates([both])
        partial, shortages = fill_exclusive_seats(PartialAssignment(rows=1), cands)
        assert partial.filled == {STEER_SEAT: "x"}
        assert [(s.seat, s.reason) for s in shortages] == [
            (DRUM_SEAT, "capability-shortage")
        ]

    def test_pinned_empty_seat_left_empty(self):
        pool = [_make_participant("s", 80, ("steer",)),
                _make_participant("p", 70)]
        result = autofill(rows=1, pool=pool, locked={"steer": None})

        assert result.assignment[STEER_SEAT] is UNFILLED
        assert STEER_SEAT not in [s.seat for s in result.shortages]
        assert "s" not in _seated_ids(result.assignment)

    def test_capability_shortage_is_not_an_error(self):
        pool = [_make_participant("a", 70), _make_participant("b", 72)]
        result = autofill(rows=1, pool=pool)
        reasons = {s.seat: s.reason for s in result.shortages}
        assert reasons == {DRUM_SEAT: "capability-shortage",
                           STEER_SEAT: "capability-shortage"}
        assert result.unfilled_seats == [DRUM_SEAT, STEER_SEAT]

    def test_steer_preference_breaks_tie(self):
        pool = [_make_participant("a", 70, ("steer",)),
                _make_participant("z", 70, ("steer",), prefers_steer=True)]
        partial, _ = fill_exclusive_seats(PartialAssignment(rows=1),
                                          resolve_candidates(pool))
        assert partial.filled[STEER_SEAT] == "z"

    def test_specialisation_beats_steer_preference(self):
        pool = [_make_participant("b", 70, ("left", "steer"), prefers_steer=True),
                _make_participant("a", 70, ("steer",))]
        partial, _ = fill_exclusive_seats(PartialAssignment(rows=1),
                                          resolve_candidates(pool))
        assert partial.filled[STEER_SEAT] == "a"

    def test_steer_preference_ignored_for_drummer(self):
        pool = [_make_participant("b", 70, ("drum",), prefers_steer=True),
                _make_participant("a", 70, ("drum",))]
        partial, _ = fill_exclusive_seats(PartialAssignment(rows=1),
                                          resolve_candidates(pool))
        assert partial.filled[DRUM_SEAT] == "a"


class TestPhaseBalanceSides:
    def _balance(self, pool, rows, locked=None):
        locked = locked or {}
        cands = resolve_candidates(pool, {p for p in locked.values()})
        partial = PartialAssignment(rows=rows, locked=locked)
        return balance_sides(partial, cands)

    def test_balance_bound(self):
        weights = [91, 84, 77, 70, 66, 62, 58, 55]
        pool = [_make_participant(f"p{i}", w) for i, w in enumerate(weights)]
        partial = self._balance(pool, rows=4)

        assert len(partial.filled) == 8
        left = _side_sum(partial.filled, pool, L)
        right = _side_sum(partial.filled, pool, R)
        assert abs(left - right) <= max(weights)
        assert abs(left - right) == 1

    def test_does_not_mutate_input(self):
        pool = [_make_participant("a", 80)]
        cands = resolve_candidates(pool)
        partial = PartialAssignment(rows=1)
        balance_sides(partial, cands)
        assert partial.filled == {}

    def test_side_capability_respected(self):
        pool = [
            _make_participant("l1", 95, ("left",)),
            _make_participant("l2", 90, ("left",)),
            _make_participant("r1", 60, ("right",)),
        ]
        partial = self._balance(pool, rows=2)
        for seat, pid in partial.filled.items():
            p = next(p for p in pool if p.id == pid)
            assert p.can_sit(seat)
        assert len(partial.filled) == 3

    def test_one_sided_overflow_left_unseated(self):
        pool = [_make_participant(f"l{i}", 70 + i, ("left",)) for i in range(3)]
        partial = self._balance(pool, rows=2)
        assert len(partial.filled) == 2
        # heaviest go first
        assert set(partial.filled.values()) == {"l2", "l1"}

    def test_dual_paddler_leaves_seat_for_one_sided(self):
        pool = [
            _make_participant("dual", 100, ("left", "right")),
            _make_participant("lefty", 80, ("left",)),
        ]
        partial = self._balance(pool, rows=1)
        assert partial.filled == {Seat(0, R): "dual", Seat(0, L): "lefty"}

    def test_regulars_before_substitutes(self):
        pool = [
            _make_participant("sub", 100, is_substitute=True),
            _make_participant("r1", 60),
            _make_participant("r2", 50),
        ]
        partial = self._balance(pool, rows=1)
        assert set(partial.filled.values()) == {"r1", "r2"}

    def test_ballast_last(self):
        pool = [
            _make_participant("can", 25, is_substitute=True, is_ballast=True),
            _make_participant("sub", 60, is_substitute=True),
        ]
        partial = self._balance(pool, rows=1)
        assert partial.filled == {Seat(0, L): "sub", Seat(0, R): "can"}

    def test_locked_weight_counts_toward_side(self):
        pool = [
            _make_participant("heavy", 100),
            _make_participant("a", 60),
        ]
        partial = self._balance(pool, rows=2, locked={Seat(0, L): "heavy"})
        # right is lighter, so the placement goes right
        assert partial.filled == {Seat(0, R): "a"}

    def test_fills_middle_rows_first(self):
        pool = [_make_participant("a", 80), _make_participant("b", 70)]
        partial = self._balance(pool, rows=5)
        assert set(partial.filled) == {Seat(2, L), Seat(2, R)}

    def test_stroke_takes_front_row(self):
        pool = [_make_participant("a", 80),
                _make_participant("s", 70, is_stroke=True)]
        partial = self._balance(pool, rows=5)
        assert partial.filled == {Seat(2, L): "a", Seat(0, R): "s"}

    def test_stroke_skips_taken_front_row(self):
        pool = [_make_participant("x", 60, ("right",)),
                _make_participant("s", 70, ("right",), is_stroke=True)]
        partial = self._balance(pool, rows=3, locked={Seat(0, R): "x"})
        assert partial.filled == {Seat(1, R): "s"}


class TestPhaseAdjustTrim:
    def _setup(self):
        pool = [
            _make_participant("a", 90), _make_participant("b", 70),
            _make_participant("c", 80), _make_participant("d", 60),
            _make_participant("e", 70), _make_participant("f", 70),
            _make_participant("g", 70), _make_participant("h", 70),
        ]
        partial = PartialAssignment(rows=4, filled={
            Seat(0, L): "a", Seat(1, L): "b", Seat(2, L): "c", Seat(3, L): "d",
            Seat(0, R): "e", Seat(1, R): "f", Seat(2, R): "g", Seat(3, R): "h",
        })
        return pool, partial, index_participants(pool)

    def test_measure_trim(self):
        _, partial, participants = self._setup()
        assert measure_trim(partial, participants) == 20

    def test_converges_to_level(self):
        pool, partial, participants = self._setup()
        adjusted = adjust_trim(partial, participants, target_trim=0.0, tolerance=0.5)

        assert measure_trim(adjusted, participants) == 0
        assert adjusted.swaps == [(Seat(0, L), Seat(2, L))]
        assert adjusted.filled[Seat(0, L)] == "c"
        assert adjusted.filled[Seat(2, L)] == "a"
        # same-side swaps keep left/right sums unchanged
        assert _side_sum(adjusted.filled, pool, L) == _side_sum(partial.filled, pool, L)
        assert _side_sum(adjusted.filled, pool, R) == _side_sum(partial.filled, pool, R)

    def test_front_heavy_target(self):
        _, partial, participants = self._setup()
        adjusted = adjust_trim(partial, participants, target_trim=40.0)
        assert measure_trim(adjusted, participants) == 40
        assert adjusted.swaps == [(Seat(1, L), Seat(2, L))]

    def test_within_tolerance_no_swaps(self):
        _, partial, participants = self._setup()
        adjusted = adjust_trim(partial, participants, target_trim=18.0, tolerance=5.0)
        assert adjusted.swaps == []
        assert adjusted.filled == partial.filled

    def test_no_improving_swap(self):
        pool = [_make_participant(x, 70) for x in "abcd"]
        partial = PartialAssignment(rows=2, filled={
            Seat(0, L): "a", Seat(1, L): "b", Seat(0, R): "c", Seat(1, R): "d",
        })
        adjusted = adjust_trim(partial, index_participants(pool), target_trim=30.0)
        assert adjusted.swaps == []

    def test_pass_limit(self):
        _, partial, participants = self._setup()
        adjusted = adjust_trim(partial, participants, max_passes=0)
        assert adjusted.swaps == []

    def test_never_crosses_sides(self):
        pool, partial, participants = self._setup()
        adjusted = adjust_trim(partial, participants, target_trim=-100.0)
        for f, b in adjusted.swaps:
            assert f.kind == b.kind

    def test_pinned_seats_untouched(self):
        pool, partial, participants = self._setup()
        pinned = partial.copy()
        pid = pinned.filled.pop(Seat(0, L))
        pinned.locked[Seat(0, L)] = pid
        adjusted = adjust_trim(pinned, participants, target_trim=0.0)
        assert adjusted.locked == {Seat(0, L): "a"}
        assert Seat(0, L) not in [s for pair in adjusted.swaps for s in pair]

    def test_stroke_not_swapped(self):
        pool = [_make_participant("s", 100, ("left",), is_stroke=True),
                _make_participant("a", 60, ("left",))]
        result = autofill(rows=2, pool=pool, target_trim=-40)
        assert result.assignment[Seat(0, L)] == "s"
        assert result.swaps == []

    def test_same_boat_without_stroke_swaps(self):
        pool = [_make_participant("s", 100, ("left",)),
                _make_participant("a", 60, ("left",))]
        result = autofill(rows=2, pool=pool, target_trim=-40)
        assert result.assignment[Seat(0, L)] == "a"
        assert result.swaps == [(Seat(0, L), Seat(1, L))]


class TestAutofill:
    def _pool(self):
        return [
            _make_participant("anna", 62, ("left",)),
            _make_participant("ben", 88, ("right",)),
            _make_participant("carla", 70),
            _make_participant("dirk", 95),
            _make_participant("elif", 58, ("left",)),
            _make_participant("frank", 82, ("right",)),
            _make_participant("greta", 66),
            _make_participant("rita", 52, ("drum",)),
            _make_participant("sven", 84, ("steer",)),
            _make_participant("tom", 79, ("right", "steer")),
        ]

    def test_deterministic(self):
        first = autofill(rows=5, pool=self._pool(), target_trim=5.0)
        second = autofill(rows=5, pool=self._pool(), target_trim=5.0)
        assert first.assignment == second.assignment
        assert list(first.assignment) == list(second.assignment)
        assert first.shortages == second.shortages
        assert first.swaps == second.swaps

    def test_covers_every_seat_in_layout_order(self):
        result = autofill(rows=5, pool=self._pool())
        assert list(result.assignment) == build_layout(5)

    def test_no_duplicates_and_capabilities(self):
        pool = self._pool()
        result = autofill(rows=5, pool=pool, locked={"row-3-left": "dirk"})
        seated = _seated_ids(result.assignment)
        assert len(seated) == len(set(seated))

        by_id = {p.id: p for p in pool}
        for seat, pid in result.assignment.items():
            if pid is not UNFILLED:
                assert by_id[pid].can_sit(seat)
        assert result.assignment[Seat(2, L)] == "dirk"

    def test_specialists_take_exclusive_seats(self):
        result = autofill(rows=5, pool=self._pool())
        assert result.assignment[STEER_SEAT] == "sven"
        assert result.assignment[DRUM_SEAT] == "rita"

    def test_everyone_seated_when_room(self):
        pool = self._pool()
        result = autofill(rows=5, pool=pool)
        assert sorted(_seated_ids(result.assignment)) == sorted(p.id for p in pool)
        assert len(result.unfilled_seats) == 2
        assert all(s.reason == "no-candidate" for s in result.shortages)

    def test_empty_pool(self):
        result = autofill(rows=2, pool=[])
        assert len(result.unfilled_seats) == 6

    def test_custom_strategies(self):
        calls = []

        def no_balance(partial, candidates):
            calls.append("balance")
            return partial

        def no_trim(partial, participants, target, tolerance):
            calls.append("trim")
            return partial

        result = autofill(rows=1, pool=[_make_participant("a", 70)],
                          balancer=no_balance, trimmer=no_trim)
        assert calls == ["balance", "trim"]
        assert result.unfilled_seats == build_layout(1)


class TestRejectedRequests:
    def test_bad_rows(self):
        with pytest.raises(InvalidLayout):
            autofill(rows=0, pool=[])

    def test_duplicate_participant(self):
        pool = [_make_participant("a"), _make_participant("a", 80)]
        with pytest.raises(DuplicateParticipant):
            autofill(rows=1, pool=pool)

    def test_lock_unknown_participant(self):
        with pytest.raises(InvalidLockedSeat):
            autofill(rows=1, pool=[_make_participant("a")], locked={"row-1-left": "b"})

    def test_lock_invalid_seat(self):
        with pytest.raises(InvalidLockedSeat):
            autofill(rows=1, pool=[_make_participant("a")], locked={"row-2-left": "a"})

    def test_non_positive_weight(self):
        with pytest.raises(InvalidParticipant):
            autofill(rows=1, pool=[_make_participant("a", 0)])

    def test_lock_fractional_row(self):
        pool = [_make_participant("a"), _make_participant("b")]
        with pytest.raises(InvalidLockedSeat):
            autofill(rows=2, pool=pool, locked={Seat(0.5, L): "a"})

    def test_capabilities_must_be_enum_members(self):
        pool = [Participant("a", 70, frozenset({"left"}))]
        with pytest.raises(InvalidParticipant):
            autofill(rows=1, pool=pool)
