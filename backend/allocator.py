"""
Seat allocation pipeline: group -> interleave -> place.

Interleaving deals examinees round-robin from each (subject, date) group so
that neighbouring seats usually belong to different exams. It is a heuristic:
once the smaller groups run out, the remaining examinees of the larger groups
sit next to each other.
"""
import logging
import random

from backend.errors import CapacityOverflowError, DuplicateRoomError, MissingInputError
from backend.layouts import seat_position
from models import Plan, SeatAssignment, SeatingResult

logger = logging.getLogger(__name__)


def group_examinees(examinees):
    groups = {}

    for examinee in examinees:
        if not examinee.active:
            continue
        groups.setdefault(examinee.group_key, []).append(examinee)

    return groups


def interleave(groups, rng=None):
    shuffle = (rng or random).shuffle

    exam_lists = []
    for members in groups.values():
        members = list(members)
        shuffle(members)
        exam_lists.append(members)

    max_size = max((len(m) for m in exam_lists), default=0)

    sequence = []
    for i in range(max_size):
        for members in exam_lists:
            if i < len(members):
                sequence.append(members[i])

    return sequence


def place_examinees(sequence, rooms):
    # sorted() is stable, so equal-capacity rooms keep their upload order
    sorted_rooms = sorted(rooms, key=lambda r: r.capacity)

    assignments = []
    index = 0

    for room in sorted_rooms:
        if index >= len(sequence):
            break

        remaining = len(sequence) - index
        take = min(room.capacity, remaining)
        columns = room.columns

        for seat_no in range(1, take + 1):
            examinee = sequence[index]
            row, column = seat_position(seat_no, columns)

            assignments.append(
                SeatAssignment(
                    examinee_id=examinee.examinee_id,
                    examinee_name=examinee.name,
                    subject=examinee.subject,
                    date=examinee.exam_date.isoformat(),
                    room_no=room.room_no,
                    room_name=room.room_name,
                    seat_no=seat_no,
                    row=row,
                    column=column,
                    room_capacity=room.capacity,
                    room_layout=room.layout,
                )
            )
            index += 1

        logger.info(
            "Room %s: assigned %d/%d students (%.1f%% utilized)",
            room.room_no, take, room.capacity, take / room.capacity * 100,
        )

    return assignments, len(sequence) - index


def check_capacity(assignments, rooms):
    capacities = {r.room_no: r.capacity for r in rooms}
    counts = {}
    for a in assignments:
        counts[a.room_no] = counts.get(a.room_no, 0) + 1

    for room_no, assigned in counts.items():
        capacity = capacities.get(room_no, 0)
        if assigned > capacity:
            logger.error("Room %s overflow: %d > %d", room_no, assigned, capacity)
            raise CapacityOverflowError(room_no, assigned, capacity)


def _warn_small_layouts(rooms):
    for room in rooms:
        rows, columns = room.rows, room.columns
        if rows and rows * columns < room.capacity:
            logger.warning(
                "Room %s seat matrix %s holds %d seats but capacity is %d",
                room.room_no, room.layout, rows * columns, room.capacity,
            )


def generate_plan(examinees, rooms, rng=None, exam_date=None):
    if exam_date is not None:
        examinees = [e for e in examinees if e.exam_date == exam_date]

    if not examinees:
        raise MissingInputError("No students loaded. Please upload student data first.")
    if not rooms:
        raise MissingInputError("No rooms loaded. Please upload room data first.")

    seen = set()
    for room in rooms:
        if room.room_no in seen:
            raise DuplicateRoomError(room.room_no)
        seen.add(room.room_no)

    groups = group_examinees(examinees)
    if not groups:
        raise MissingInputError("No active students to seat.")

    for (subject, date), members in groups.items():
        logger.info("Exam group %s %s: %d students", subject, date.isoformat(), len(members))

    _warn_small_layouts(rooms)

    sequence = interleave(groups, rng)
    assignments, unplaced = place_examinees(sequence, rooms)
    check_capacity(assignments, rooms)

    if unplaced:
        logger.warning(
            "%d students could not be assigned (insufficient room capacity)", unplaced
        )

    return SeatingResult(plan=Plan(seating_arrangement=assignments), unplaced=unplaced)


def find_assignment(examinee_id, plan):
    wanted = examinee_id.strip().lower()
    for a in plan.seating_arrangement:
        if a.examinee_id.lower() == wanted:
            return a
    return None


def assignments_in_room(room_no, plan):
    return [a for a in plan.seating_arrangement if a.room_no == room_no]


def room_summary(plan):
    summary = {}

    for a in plan.seating_arrangement:
        if a.room_no not in summary:
            summary[a.room_no] = {
                "room_no": a.room_no,
                "room_name": a.room_name,
                "room_layout": a.room_layout,
                "capacity": a.room_capacity,
                "occupied": 0,
            }
        summary[a.room_no]["occupied"] += 1

    rooms = []
    for entry in summary.values():
        capacity = entry["capacity"]
        entry["available"] = capacity - entry["occupied"]
        entry["utilization"] = round(entry["occupied"] / capacity * 100, 1) if capacity else 0.0
        rooms.append(entry)

    return rooms
