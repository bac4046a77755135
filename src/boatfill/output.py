"""Output formatters for boatfill."""

import csv
from io import StringIO
from pathlib import Path

from boatfill.layout import DRUM_SEAT, STEER_SEAT, build_layout, parse_seat_id
from boatfill.models import Participant, Seat, SeatKind, UNFILLED

CSV_COLUMNS = ["seat", "participant_id", "name", "weight"]


def _occupant(assignment: dict, seat: Seat):
    occ = assignment.get(seat, assignment.get(str(seat)))
    return None if occ is UNFILLED else occ


def _cell(pid, participants: dict, width: int) -> str:
    if pid is None:
        return "-- empty --".center(width)
    p = participants.get(pid)
    if p is None:
        return f"?{pid}".center(width)
    text = f"{p.label} ({p.weight:g})"
    if len(text) > width:
        text = text[:width - 1] + "~"
    return text.center(width)


def format_boat(assignment: dict, pool: list[Participant], rows: int,
                title: str = "") -> str:
    """Draw the boat bow to stern: drummer, each row left|right, steer."""
    participants = {p.id: p for p in pool}
    width = 22

    lines = []
    lines.append("=" * (2 * width + 9))
    lines.append((title or "BOAT").upper())
    lines.append("=" * (2 * width + 9))

    lines.append(f"{'DRUM':>5}  {_cell(_occupant(assignment, DRUM_SEAT), participants, 2 * width + 1)}")
    for r in range(rows):
        left = _cell(_occupant(assignment, Seat(r, SeatKind.LEFT_PADDLE)), participants, width)
        right = _cell(_occupant(assignment, Seat(r, SeatKind.RIGHT_PADDLE)), participants, width)
        lines.append(f"{r + 1:>5}  {left}|{right}")
    lines.append(f"{'STEER':>5}  {_cell(_occupant(assignment, STEER_SEAT), participants, 2 * width + 1)}")

    return "\n".join(lines)


def format_assignment_csv(assignment: dict, pool: list[Participant],
                          rows: int) -> str:
    """Format an assignment as CSV, one line per seat in layout order.

    Columns: seat, participant_id, name, weight (blank for empty seats)
    """
    participants = {p.id: p for p in pool}
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_COLUMNS)

    for seat in build_layout(rows):
        pid = _occupant(assignment, seat)
        p = participants.get(pid) if pid is not None else None
        writer.writerow([
            str(seat),
            "" if pid is None else pid,
            p.name if p else "",
            f"{p.weight:g}" if p else "",
        ])

    return output.getvalue()


def read_assignment_csv(csv_path: str | Path,
                        pool: list[Participant] | None = None) -> dict:
    """Read an assignment CSV back into {Seat: participant id or UNFILLED}.

    CSV ids are text; when `pool` is given they are mapped back to the pool's
    own ids so integer ids survive the round trip.
    """
    by_text = {str(p.id): p.id for p in pool or []}
    assignment = {}

    with open(csv_path, newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            seat_text = (row.get("seat") or "").strip()
            if not seat_text:
                continue
            seat = parse_seat_id(seat_text)
            pid = (row.get("participant_id") or "").strip()
            if not pid:
                assignment[seat] = UNFILLED
            else:
                assignment[seat] = by_text.get(pid, pid)

    return assignment


def write_assignment(assignment: dict, pool: list[Participant], rows: int,
                     output_prefix: str = "output", title: str = ""):
    """Write boat.txt and assignment.csv into {output_prefix}/ directory."""
    out_dir = Path(output_prefix)
    out_dir.mkdir(parents=True, exist_ok=True)

    boat_path = out_dir / "boat.txt"
    boat_path.write_text(format_boat(assignment, pool, rows, title=title) + "\n")
    print(f"Written: {boat_path}")

    csv_path = out_dir / "assignment.csv"
    csv_path.write_text(format_assignment_csv(assignment, pool, rows))
    print(f"Written: {csv_path}")
