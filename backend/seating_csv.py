"""
Plain-text export/import of a seating plan.

Every field is written inside double quotes and embedded quotes are doubled.
Commas inside a field are written as-is: the reader splits lines naively on
the delimiter, so a name containing a comma will shift the columns of that
row on re-import.
"""
import datetime as dt
import logging
import re

from backend.config import CSV_DELIMITER
from models import Plan, SeatAssignment

logger = logging.getLogger(__name__)

HEADERS = [
    "Student ID",
    "Student Name",
    "Student Exam",
    "Date",
    "Room No",
    "Room Name",
    "Seat No",
    "Row",
    "Column",
    "Room Capacity",
    "Room Layout",
]


def _quote(value):
    return '"' + str(value).replace('"', '""') + '"'


_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


def _to_int(value):
    # leading digits only: "7.0" -> 7, "fifty" -> 0
    match = _LEADING_INT_RE.match(value)
    return int(match.group(1)) if match else 0


def to_text(plan):
    lines = [CSV_DELIMITER.join(HEADERS)]

    for a in plan.seating_arrangement:
        fields = [
            a.examinee_id,
            a.examinee_name,
            a.subject,
            a.date,
            a.room_no,
            a.room_name,
            int(a.seat_no),
            int(a.row),
            int(a.column),
            int(a.room_capacity),
            a.room_layout,
        ]
        lines.append(CSV_DELIMITER.join(_quote(f) for f in fields))

    return "\n".join(lines)


def from_text(text):
    lines = text.splitlines()
    if not lines:
        return Plan()

    header_count = len(lines[0].split(CSV_DELIMITER))
    assignments = []

    for line_no, line in enumerate(lines[1:], start=2):
        line = line.strip()
        if not line:
            continue

        values = [v.replace('"', "").strip() for v in line.split(CSV_DELIMITER)]
        if len(values) < header_count:
            logger.debug("Dropping line %d: %d of %d fields", line_no, len(values), header_count)
            continue
        values += [""] * (len(HEADERS) - len(values))

        assignments.append(
            SeatAssignment(
                examinee_id=values[0],
                examinee_name=values[1],
                subject=values[2],
                date=values[3],
                room_no=values[4],
                room_name=values[5],
                seat_no=_to_int(values[6]),
                row=_to_int(values[7]),
                column=_to_int(values[8]),
                room_capacity=_to_int(values[9]),
                room_layout=values[10],
            )
        )

    return Plan(seating_arrangement=assignments)


def seating_filename(today=None):
    today = today or dt.date.today()
    return f"exam-seating-{today.isoformat()}.csv"
