import logging
from pathlib import Path

import pandas as pd
from pydantic import ValidationError

from backend.errors import UploadError
from models import Examinee, Room

logger = logging.getLogger(__name__)

STUDENT_COLUMNS = {
    "examinee_id": ("student id", "identifier", "stu_id", "id"),
    "name": ("student name", "name", "stu_name"),
    "subject": ("student exam", "subject", "exam"),
    "exam_date": ("date", "exam date", "exam_date"),
}

ROOM_COLUMNS = {
    "room_no": ("room no", "room id", "room_id", "room"),
    "room_name": ("room name", "room_name"),
    "capacity": ("number of seats", "seat count", "capacity", "seats"),
    "layout": ("seat matrix (rows x columns)", "layout descriptor", "seat matrix", "layout"),
}

OPTIONAL_COLUMNS = {"name", "room_name", "layout"}


class ImportResult:
    def __init__(self, records, rejected):
        self.records = records
        # (row number in the file, reason)
        self.rejected = rejected


def read_table(source, filename=None):
    name = filename or (str(source) if isinstance(source, (str, Path)) else "")
    suffix = Path(name).suffix.lower()

    try:
        if suffix in (".xlsx", ".xls"):
            df = pd.read_excel(source, dtype=str, keep_default_na=False)
        else:
            df = pd.read_csv(source, dtype=str, keep_default_na=False, skipinitialspace=True)
    except Exception as e:
        raise UploadError(f"Could not read {name or 'upload'}: {e}") from e

    df.columns = [str(c).strip().lower() for c in df.columns]
    return df


def _match_columns(df, column_map):
    matched = {}
    for field, aliases in column_map.items():
        for alias in aliases:
            if alias in df.columns:
                matched[field] = alias
                break

    missing = [f for f in column_map if f not in matched and f not in OPTIONAL_COLUMNS]
    if missing:
        expected = ", ".join(f"'{column_map[f][0]}'" for f in missing)
        raise UploadError(f"Missing columns: {expected}")

    return matched


def _rows(df, column_map):
    matched = _match_columns(df, column_map)

    for index, row in df.iterrows():
        values = {field: str(row[col]).strip() for field, col in matched.items()}
        if not any(values.values()):
            continue
        yield index + 2, values


def _reason(error):
    if isinstance(error, ValidationError):
        first = error.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        return f"{field}: {first['msg']}"
    return str(error)


def _parse_date(value):
    if not value:
        raise ValueError("missing date")
    return pd.to_datetime(value).date()


def import_examinees(source, filename=None):
    df = read_table(source, filename)

    examinees = []
    rejected = []

    for row_no, values in _rows(df, STUDENT_COLUMNS):
        try:
            values["exam_date"] = _parse_date(values["exam_date"])
            examinees.append(Examinee.model_validate(values))
        except (ValueError, ValidationError) as e:
            rejected.append((row_no, _reason(e)))
            logger.warning("Rejected student row %d: %s", row_no, e)

    logger.info("Imported %d students (%d rejected)", len(examinees), len(rejected))
    return ImportResult(examinees, rejected)


def import_rooms(source, filename=None):
    df = read_table(source, filename)

    rooms = []
    rejected = []
    seen = set()

    for row_no, values in _rows(df, ROOM_COLUMNS):
        if values["room_no"] in seen:
            rejected.append((row_no, f"duplicate room {values['room_no']}"))
            continue

        try:
            room = Room.model_validate(values)
        except ValidationError as e:
            rejected.append((row_no, _reason(e)))
            logger.warning("Rejected room row %d: %s", row_no, e)
            continue

        seen.add(room.room_no)
        rooms.append(room)

    logger.info("Imported %d rooms (%d rejected)", len(rooms), len(rejected))
    return ImportResult(rooms, rejected)


def review_examinees(examinees):
    print("\n Student List")
    for e in examinees:
        print(f"{e.examinee_id}:{e.name}, Exam:{e.subject}, Date:{e.exam_date.isoformat()}")

    counts = {}
    for e in examinees:
        counts[e.group_key] = counts.get(e.group_key, 0) + 1

    print("\n Exam Groups")
    for (subject, date), count in counts.items():
        print(f"{subject} ({date.isoformat()}): {count} students")

    return examinees
