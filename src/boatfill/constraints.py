"""Constraint validation for boatfill.

Can validate either an in-memory AutofillResult or a re-imported CSV, checked
against the request it was built from.
"""

from collections import defaultdict

from boatfill.layout import build_layout, resolve_seat
from boatfill.models import InvalidLockedSeat, Participant, UNFILLED


def validate_assignment(assignment: dict, pool: list[Participant], rows: int,
                        locked: dict | None = None) -> dict:
    """Validate a seat assignment.

    `assignment` maps Seat (or seat id) to a participant id, UNFILLED or None.

    Returns dict with:
    - valid: bool (True if no hard constraint violations)
    - errors: list of hard constraint violations
    - warnings: list of soft issues (empty seats, pinned capability mismatches)
    """
    errors = []
    warnings = []

    participants = {p.id: p for p in pool}
    layout = build_layout(rows)

    seated = {}
    for key, occ in assignment.items():
        try:
            seat = resolve_seat(key, rows)
        except InvalidLockedSeat as e:
            errors.append(f"Unknown seat: {e}")
            continue
        seated[seat] = None if occ is UNFILLED else occ

    pins = {}
    for key, occ in (locked or {}).items():
        pins[resolve_seat(key, rows)] = None if occ is UNFILLED else occ

    # 1. Every seat present
    for seat in layout:
        if seat not in seated:
            errors.append(f"Seat {seat} missing from assignment")

    # 2. Known participants, no one seated twice
    seats_by_id = defaultdict(list)
    for seat, pid in seated.items():
        if pid is None:
            continue
        if pid not in participants:
            errors.append(f"{seat}: {pid!r} is not in the pool")
            continue
        seats_by_id[pid].append(seat)

    for pid, seats in seats_by_id.items():
        if len(seats) > 1:
            names = ", ".join(str(s) for s in seats)
            errors.append(f"{participants[pid].label} seated {len(seats)} times: {names}")

    # 3. Pins kept verbatim
    for seat, pid in pins.items():
        if seated.get(seat) != pid:
            want = pid if pid is not None else "empty"
            got = seated.get(seat)
            errors.append(
                f"Locked seat {seat} changed: expected {want}, "
                f"got {got if got is not None else 'empty'}"
            )

    # 4. Capabilities (pinned seats are the caller's call: warn only)
    for seat, pid in seated.items():
        if pid is None or pid not in participants:
            continue
        p = participants[pid]
        if p.can_sit(seat):
            continue
        msg = f"{seat}: {p.label} cannot {seat.kind.capability.value}"
        if seat in pins:
            warnings.append(msg + " (locked)")
        else:
            errors.append(msg)

    # 5. Empty seats
    empty = [str(s) for s in layout if s in seated and seated[s] is None]
    if empty:
        warnings.append(f"{len(empty)} empty seat(s): {', '.join(empty)}")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
    }


def format_validation_report(result: dict) -> str:
    """Format validation result as human-readable text."""
    lines = []
    lines.append("=" * 60)
    lines.append("SEATING VALIDATION REPORT")
    lines.append("=" * 60)

    if result["valid"]:
        lines.append("\nRESULT: VALID (no hard constraint violations)")
    else:
        lines.append(f"\nRESULT: INVALID ({len(result['errors'])} violations)")

    if result["errors"]:
        lines.append(f"\n--- ERRORS ({len(result['errors'])}) ---")
        for e in result["errors"]:
            lines.append(f"  ERROR: {e}")

    if result["warnings"]:
        lines.append(f"\n--- WARNINGS ({len(result['warnings'])}) ---")
        for w in result["warnings"]:
            lines.append(f"  WARN: {w}")

    return "\n".join(lines)
