#!/usr/bin/env python3
"""Dragon boat seat auto-fill.

Fill mode (default):
    boatfill [request.yaml] [--trim KG] [--rows N] [-o DIR]

    Seats every free place in the boat described by the request file and
    writes:
      {DIR}/boat.txt        - Boat diagram, drummer to steer
      {DIR}/assignment.csv  - One line per seat (seat, participant_id, name, weight)

Verify mode:
    boatfill [request.yaml] --verify <assignment.csv>

    Re-imports an assignment CSV and checks it against the request.
    Exit code 0 if valid, 1 if violations found.

Examples:
    boatfill                           # default request file boat.yaml
    boatfill regatta.yaml --trim 15    # 15 kg front-heavy
    boatfill --verify output/assignment.csv
"""

import argparse
import sys
from pathlib import Path

from boatfill.assigner import autofill
from boatfill.config import load_request
from boatfill.constraints import validate_assignment, format_validation_report
from boatfill.models import AutofillError
from boatfill.output import read_assignment_csv, write_assignment
from boatfill.stats import compute_stats, format_stats_report


def main():
    parser = argparse.ArgumentParser(
        description="Dragon boat seat auto-fill",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Output files (fill mode):
  {dir}/boat.txt        Boat diagram
  {dir}/assignment.csv  Seat assignment CSV

Exit codes:
  0  Boat filled (possibly with empty seats) / assignment valid
  1  Request rejected, or constraint violations found
""",
    )
    parser.add_argument(
        "request", nargs="?", default="boat.yaml",
        help="Path to request YAML file (default: boat.yaml)"
    )
    parser.add_argument(
        "--trim", type=float, default=None,
        help="Target front-minus-back weight in kg (overrides the request)"
    )
    parser.add_argument(
        "--rows", type=int, default=None,
        help="Number of rows (overrides the request's boat size)"
    )
    parser.add_argument(
        "--output-prefix", "-o", default="output",
        help="Output directory for generated files (default: output/)"
    )
    parser.add_argument(
        "--verify", metavar="CSV",
        help="Verify an existing assignment CSV instead of filling"
    )
    args = parser.parse_args()

    request_path = args.request
    if not Path(request_path).exists():
        print(f"Error: request file {request_path} not found")
        sys.exit(1)

    print(f"Loading request from {request_path}...")
    try:
        request = load_request(request_path)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args.rows is not None:
        request["rows"] = args.rows
    if args.trim is not None:
        request["target_trim"] = args.trim

    rows = request["rows"]
    pool = request["pool"]

    if args.verify:
        print(f"Verifying assignment from {args.verify}...")
        try:
            assignment = read_assignment_csv(args.verify, pool)
            result = validate_assignment(assignment, pool, rows,
                                         locked=request["locked"])
        except AutofillError as e:
            print(f"Error: {e}")
            sys.exit(1)
        print(format_validation_report(result))

        stats = compute_stats(assignment, pool, rows, request["target_trim"])
        print("\n" + format_stats_report(stats))
        sys.exit(0 if result["valid"] else 1)

    # Fill mode
    print(f"Filling {2 * rows + 2} seats from {len(pool)} candidates "
          f"(target trim {request['target_trim']:+g} kg)...")
    try:
        filled = autofill(
            rows=rows,
            pool=pool,
            locked=request["locked"],
            target_trim=request["target_trim"],
            tolerance=request["tolerance"],
        )
    except AutofillError as e:
        print(f"Error: {e}")
        sys.exit(1)

    for shortage in filled.shortages:
        print(f"  {shortage.seat}: {shortage.reason}")
    if filled.swaps:
        print(f"  {len(filled.swaps)} front/back swaps applied for trim")

    print("\nValidating...")
    result = validate_assignment(filled.assignment, pool, rows,
                                 locked=request["locked"])
    print(format_validation_report(result))

    stats = compute_stats(filled.assignment, pool, rows, request["target_trim"])
    print("\n" + format_stats_report(stats))

    print("\nWriting output files...")
    write_assignment(filled.assignment, pool, rows,
                     output_prefix=args.output_prefix, title=request["name"])

    if not result["valid"]:
        print(f"\nAssignment has {len(result['errors'])} constraint violations.")
        sys.exit(1)
    print("\nBoat filled successfully!")


if __name__ == "__main__":
    main()
