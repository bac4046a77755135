"""Weight statistics and balance reporting for boatfill."""

from boatfill.layout import is_front_row, resolve_seat
from boatfill.models import InvalidLockedSeat, Participant, SeatKind, UNFILLED


def compute_stats(assignment: dict, pool: list[Participant], rows: int,
                  target_trim: float = 0.0) -> dict:
    """Compute weight distribution for a seated boat.

    Drummer weight counts toward the front, steer weight toward the back,
    paddlers by row. Returns dict with left, right, total, diff_lr, front,
    back, diff_fb, count and trim_deviation (diff_fb - target_trim).
    """
    weights = {p.id: p.weight for p in pool}

    left = right = front = back = total = 0.0
    count = 0

    for key, pid in assignment.items():
        if pid is None or pid is UNFILLED or pid not in weights:
            continue
        try:
            seat = resolve_seat(key, rows)
        except InvalidLockedSeat:
            continue  # not a seat of this boat
        w = weights[pid]
        count += 1
        total += w

        if seat.kind == SeatKind.DRUM:
            front += w
        elif seat.kind == SeatKind.STEER:
            back += w
        else:
            if seat.kind == SeatKind.LEFT_PADDLE:
                left += w
            else:
                right += w
            if is_front_row(seat.row, rows):
                front += w
            else:
                back += w

    return {
        "left": left,
        "right": right,
        "total": total,
        "diff_lr": left - right,
        "front": front,
        "back": back,
        "diff_fb": front - back,
        "count": count,
        "seats": 2 * rows + 2,
        "target_trim": target_trim,
        "trim_deviation": (front - back) - target_trim,
    }


def format_stats_report(stats: dict) -> str:
    """Format statistics into a human-readable report."""
    lines = []
    lines.append("=" * 60)
    lines.append("BOAT BALANCE")
    lines.append("=" * 60)

    lines.append(f"\nSeated: {stats['count']} of {stats['seats']}   "
                 f"Total: {stats['total']:.1f} kg")

    lines.append("\n--- LEFT / RIGHT ---")
    lines.append(f"  {'Left':<8} {stats['left']:>8.1f} kg")
    lines.append(f"  {'Right':<8} {stats['right']:>8.1f} kg")
    lines.append(f"  {'Diff':<8} {stats['diff_lr']:>+8.1f} kg")

    lines.append("\n--- FRONT / BACK ---")
    lines.append(f"  {'Front':<8} {stats['front']:>8.1f} kg")
    lines.append(f"  {'Back':<8} {stats['back']:>8.1f} kg")
    lines.append(f"  {'Trim':<8} {stats['diff_fb']:>+8.1f} kg "
                 f"(target {stats['target_trim']:+.1f}, "
                 f"off by {stats['trim_deviation']:+.1f})")

    return "\n".join(lines)
