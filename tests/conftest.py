import datetime as dt
import os

os.environ.setdefault("SEAT_ALLOCATOR_DATABASE_URL", "sqlite://")

import pytest

from models import Examinee, Room


def make_examinees(counts, date=dt.date(2024, 12, 20), prefix="STU"):
    """Build examinees from {subject: count}, numbered in insertion order."""
    examinees = []
    n = 1
    for subject, count in counts.items():
        for _ in range(count):
            examinees.append(
                Examinee(
                    examinee_id=f"{prefix}{n:03d}",
                    name=f"Student {n}",
                    subject=subject,
                    exam_date=date,
                )
            )
            n += 1
    return examinees


def make_room(room_no, capacity, layout="", name=None):
    return Room(room_no=room_no, room_name=name or f"Hall {room_no}", capacity=capacity, layout=layout)


@pytest.fixture
def examinee_factory():
    return make_examinees


@pytest.fixture
def room_factory():
    return make_room
