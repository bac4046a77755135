"""Seat layout for a dragon boat.

A boat has `rows` benches with a left and a right paddle seat each, plus a
drummer at the bow and a steer at the stern. Row 0 is the front bench.
"""

import re

from boatfill.models import (
    InvalidLayout, InvalidLockedSeat, Seat, SeatKind, PADDLE_KINDS,
)

DEFAULT_ROWS = 10

BOAT_SIZES = {
    "small": 5,
    "standard": 10,
}

DRUM_SEAT = Seat(None, SeatKind.DRUM)
STEER_SEAT = Seat(None, SeatKind.STEER)

_ROW_SEAT_RE = re.compile(r"^row-(\d+)-(left|right)$")


def rows_for_size(size: str) -> int:
    """Row count for a named boat size ('small' or 'standard')."""
    key = str(size).strip().lower()
    if key not in BOAT_SIZES:
        raise ValueError(
            f"Unknown boat size {size!r} (expected one of {', '.join(BOAT_SIZES)})"
        )
    return BOAT_SIZES[key]


def build_layout(rows: int = DEFAULT_ROWS) -> list[Seat]:
    """Build the ordered seat list: row seats front to back, then drum, then steer."""
    if isinstance(rows, bool) or not isinstance(rows, int) or rows <= 0:
        raise InvalidLayout(f"Row count must be a positive integer, got {rows!r}")

    seats = []
    for r in range(rows):
        for kind in PADDLE_KINDS:
            seats.append(Seat(r, kind))
    seats.append(DRUM_SEAT)
    seats.append(STEER_SEAT)
    return seats


def is_front_row(row: int, rows: int) -> bool:
    """Rows 0 .. rows//2 - 1 count as front; the middle row of an odd boat is back."""
    return row < rows // 2


def middle_out_order(seats: list[Seat], rows: int) -> list[Seat]:
    """Paddle seats ordered from the middle of the boat outwards.

    Ties in distance go to the front row, then left before right.
    """
    mid = (rows - 1) / 2
    return sorted(
        seats,
        key=lambda s: (abs(s.row - mid), s.row, PADDLE_KINDS.index(s.kind)),
    )


def parse_seat_id(text: str) -> Seat:
    """Parse 'row-3-left', 'drummer' or 'steer' into a Seat (row numbers are 1-based)."""
    s = str(text).strip().lower()
    if s in ("drummer", "drum"):
        return DRUM_SEAT
    if s == "steer":
        return STEER_SEAT

    m = _ROW_SEAT_RE.match(s)
    if not m:
        raise InvalidLockedSeat(f"Unrecognised seat id: {text!r}")
    row = int(m.group(1)) - 1
    kind = SeatKind.LEFT_PADDLE if m.group(2) == "left" else SeatKind.RIGHT_PADDLE
    return Seat(row, kind)


def resolve_seat(key, rows: int) -> Seat:
    """Turn a Seat or seat id into a Seat that exists in a boat of `rows` rows."""
    seat = key if isinstance(key, Seat) else parse_seat_id(key)

    if not isinstance(seat.kind, SeatKind):
        raise InvalidLockedSeat(f"Unknown seat kind {seat.kind!r}")
    if seat.kind.is_paddle():
        if isinstance(seat.row, bool) or not isinstance(seat.row, int):
            raise InvalidLockedSeat(
                f"Paddle seat row must be an integer, got {seat.row!r}"
            )
        if not (0 <= seat.row < rows):
            raise InvalidLockedSeat(
                f"Seat {seat} is not in a boat with {rows} rows"
            )
    elif seat.row is not None:
        raise InvalidLockedSeat(
            f"{seat.kind.value} seat cannot have a row (got row {seat.row})"
        )
    return seat


def partition_seats(layout: list[Seat], locked) -> tuple[list[Seat], list[Seat]]:
    """Split the layout into (locked, free) seats, both in layout order."""
    locked_seats = [s for s in layout if s in locked]
    free_seats = [s for s in layout if s not in locked]
    return locked_seats, free_seats
