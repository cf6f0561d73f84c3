import argparse
import datetime as dt
import logging
import random
import sys
from pathlib import Path

from backend import config
from backend.allocator import find_assignment, generate_plan, room_summary
from backend.errors import SeatingError
from backend.seating_csv import from_text, seating_filename, to_text
from backend.snapshot import load_snapshot, save_snapshot
from backend.storage_client import SeatingStorageClient
from student_import import import_examinees, import_rooms, review_examinees


def print_rejected(kind, rejected):
    for row_no, reason in rejected:
        print(f"  skipped {kind} row {row_no}: {reason}")


def cmd_generate(args):
    students = import_examinees(args.students)
    rooms = import_rooms(args.rooms)
    print_rejected("student", students.rejected)
    print_rejected("room", rooms.rejected)

    if args.review:
        review_examinees(students.records)

    rng = random.Random(args.seed) if args.seed is not None else None

    result = generate_plan(students.records, rooms.records, rng=rng, exam_date=args.date)
    plan = result.plan

    print("\n--- Seat Allocation ---")
    for a in plan.seating_arrangement:
        print(
            f"{a.examinee_name} ({a.examinee_id}, {a.subject}) -> Room {a.room_no} | "
            f"Seat {a.seat_no} | Row {a.row} | Column {a.column}"
        )

    print("\n--- Room Utilization ---")
    for room in room_summary(plan):
        print(f"{room['room_no']}: {room['occupied']}/{room['capacity']} students ({room['utilization']}% utilized)")

    print(
        "\nNote: students of the same exam are interleaved with other exams, "
        "but neighbours can still share an exam once the smaller groups run out."
    )

    if result.unplaced:
        print(
            f"\nWarning: {result.unplaced} students could not be assigned. "
            "Please add more rooms or increase capacity."
        )

    output = Path(args.output or seating_filename())
    output.write_text(to_text(plan), encoding="utf-8")
    print(f"\nSeating exported to {output}")

    save_snapshot(plan, args.snapshot)

    if args.push:
        with SeatingStorageClient() as client:
            if client.save_plan(plan):
                print("Seating data saved to server")
            else:
                print("Failed to save seating data to server")

    return 0


def cmd_lookup(args):
    if args.source:
        plan = from_text(Path(args.source).read_text(encoding="utf-8-sig"))
        assignment = find_assignment(args.student_id, plan)
    elif args.remote:
        with SeatingStorageClient() as client:
            assignment = client.find_student(args.student_id)
    else:
        plan = load_snapshot(args.snapshot)
        if plan is None:
            print("No seating data available. Generate or import seating first.")
            return 1
        assignment = find_assignment(args.student_id, plan)

    if assignment is None:
        print(f"Student {args.student_id} not found")
        return 1

    print(f"{assignment.examinee_name} ({assignment.examinee_id})")
    print(f"  Exam: {assignment.subject} on {assignment.date}")
    print(f"  Room: {assignment.room_no} {assignment.room_name}")
    print(f"  Seat {assignment.seat_no} | Row {assignment.row} | Column {assignment.column}")
    return 0


def cmd_serve(args):
    import uvicorn

    uvicorn.run("backend.main_api:app", host=args.host, port=args.port)
    return 0


def build_parser():
    p = argparse.ArgumentParser(description="Exam seat allocator")
    sub = p.add_subparsers(dest="command", required=True)

    g = sub.add_parser("generate", help="Generate a seating plan from student and room files")
    g.add_argument("students", help="CSV/Excel with Student ID, Student Name, Student Exam, Date")
    g.add_argument("rooms", help="CSV/Excel with Room No, Room Name, Number of Seats, Seat Matrix (Rows x Columns)")
    g.add_argument("--seed", type=int, default=None, help="Seed for a reproducible shuffle")
    g.add_argument("--date", type=dt.date.fromisoformat, default=None, help="Only seat students sitting on this date (YYYY-MM-DD)")
    g.add_argument("--output", default=None, help="CSV output path (default exam-seating-<date>.csv)")
    g.add_argument("--snapshot", default=config.SNAPSHOT_PATH)
    g.add_argument("--review", action="store_true", help="Print the imported student list first")
    g.add_argument("--push", action="store_true", help="Also save the plan to the seating server")
    g.set_defaults(func=cmd_generate)

    lk = sub.add_parser("lookup", help="Find a student's seat")
    lk.add_argument("student_id")
    src = lk.add_mutually_exclusive_group()
    src.add_argument("--from", dest="source", default=None, help="Exported seating CSV")
    src.add_argument("--remote", action="store_true", help="Query the seating server")
    lk.add_argument("--snapshot", default=config.SNAPSHOT_PATH)
    lk.set_defaults(func=cmd_lookup)

    s = sub.add_parser("serve", help="Run the seating API")
    s.add_argument("--host", default="127.0.0.1")
    s.add_argument("--port", type=int, default=8080)
    s.set_defaults(func=cmd_serve)

    return p


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except SeatingError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
