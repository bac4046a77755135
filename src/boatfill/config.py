"""Request loading and validation for boatfill.

A request file describes one boat to fill: its size, the target trim, the
paddlers available and any seats pinned by hand.
"""

from pathlib import Path

import yaml

from boatfill.assigner import DEFAULT_TOLERANCE
from boatfill.layout import DEFAULT_ROWS, parse_seat_id, rows_for_size
from boatfill.models import (
    Capability, PADDLE_CAPABILITIES, Participant, UNFILLED,
)

CANISTER_WEIGHT = 25.0

STEER_PREFERRED = "steer_preferred"
STROKE = "stroke"


def _skill_tokens(side=None, skills=None) -> list[str]:
    tokens = []
    if side:
        tokens.append(str(side))
    if isinstance(skills, str):
        tokens.extend(skills.split(","))
    elif skills:
        tokens.extend(str(s) for s in skills)
    return [t.strip().lower() for t in tokens if t.strip()]


def parse_capabilities(side=None, skills=None) -> frozenset:
    """Combine a side ('left', 'right', 'both') and extra skills into a capability set.

    Skills may be a list or a comma-separated string. 'both' is accepted in
    either place. 'steer_preferred' implies steer; 'stroke' adds no seat
    capability.
    """
    caps = set()
    for t in _skill_tokens(side, skills):
        if t == "both":
            caps.update(PADDLE_CAPABILITIES)
        elif t == STEER_PREFERRED:
            caps.add(Capability.STEER)
        elif t == STROKE:
            continue
        else:
            try:
                caps.add(Capability.from_str(t))
            except ValueError:
                raise ValueError(f"Unknown capability {t!r}") from None
    return frozenset(caps)


def parse_participant(data: dict) -> Participant:
    """Build a Participant from one `paddlers:` entry."""
    if "id" not in data:
        raise ValueError(f"Paddler entry without an id: {data}")
    if "weight" not in data:
        raise ValueError(f"Paddler {data['id']!r} has no weight")

    tokens = _skill_tokens(data.get("side"), data.get("skills"))
    return Participant(
        id=data["id"],
        weight=float(data["weight"]),
        capabilities=parse_capabilities(data.get("side"), data.get("skills")),
        is_substitute=bool(data.get("substitute", False)),
        name=str(data.get("name", "")),
        prefers_steer=STEER_PREFERRED in tokens,
        is_stroke=STROKE in tokens,
    )


def make_canisters(count: int) -> list[Participant]:
    """Ballast canisters: 25 kg, either side, used only after every paddler."""
    return [
        Participant(
            id=f"canister-{i}",
            weight=CANISTER_WEIGHT,
            capabilities=PADDLE_CAPABILITIES,
            is_substitute=True,
            name="Canister",
            is_ballast=True,
        )
        for i in range(1, count + 1)
    ]


def parse_request(raw: dict) -> dict:
    """Turn a parsed request document into autofill() inputs.

    Returns dict with:
    - name: free-text label of the boat/event
    - rows: row count
    - pool: list[Participant] (paddlers, then canisters)
    - locked: {Seat: participant id or UNFILLED}
    - target_trim, tolerance: kg
    """
    raw = raw or {}
    boat = raw.get("boat") or {}

    if "rows" in boat:
        rows = int(boat["rows"])
    elif "size" in boat:
        rows = rows_for_size(boat["size"])
    else:
        rows = DEFAULT_ROWS

    pool = [parse_participant(p) for p in raw.get("paddlers") or []]
    pool.extend(make_canisters(int(boat.get("canisters", 0))))

    for p in pool:
        if not p.capabilities:
            print(f"Warning: paddler {p.label} has no side or skills and cannot be seated")

    locked = {}
    for key, pid in (raw.get("locks") or {}).items():
        seat = parse_seat_id(key)
        locked[seat] = UNFILLED if pid is None else pid

    return {
        "name": str(raw.get("name", "")),
        "rows": rows,
        "pool": pool,
        "locked": locked,
        "target_trim": float(boat.get("target_trim", 0.0)),
        "tolerance": float(boat.get("trim_tolerance", DEFAULT_TOLERANCE)),
    }


def load_request(path: str | Path) -> dict:
    """Load a request YAML file. See parse_request() for the returned keys."""
    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f)
    return parse_request(raw)
