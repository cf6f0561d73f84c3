import datetime as dt
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field

from backend.layouts import parse_layout


class Examinee(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    examinee_id: str = Field(alias="studentId", min_length=1)
    name: str = Field(alias="studentName", default="")
    subject: str = Field(alias="studentExam", min_length=1)
    exam_date: dt.date = Field(alias="date")
    active: bool = Field(alias="isActive", default=True)

    @property
    def group_key(self) -> Tuple[str, dt.date]:
        return (self.subject, self.exam_date)


class Room(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    room_no: str = Field(alias="roomNo", min_length=1)
    room_name: str = Field(alias="roomName", default="")
    capacity: int = Field(alias="numberOfSeats", gt=0)
    # "rows x columns", e.g. "10x5"
    layout: str = Field(alias="seatMatrix", default="")

    @property
    def rows(self):
        return parse_layout(self.layout)[0]

    @property
    def columns(self):
        return parse_layout(self.layout)[1]


class SeatAssignment(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    examinee_id: str = Field(alias="studentId")
    examinee_name: str = Field(alias="studentName", default="")
    subject: str = Field(alias="studentExam", default="")
    date: str = ""
    room_no: str = Field(alias="roomNo", default="")
    room_name: str = Field(alias="roomName", default="")
    seat_no: int = Field(alias="seatNo", default=0)
    row: int = 0
    column: int = 0
    room_capacity: int = Field(alias="roomCapacity", default=0)
    room_layout: str = Field(alias="roomLayout", default="")


class Plan(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    seating_arrangement: List[SeatAssignment] = Field(alias="seatingArrangement", default_factory=list)
    generated_at: dt.datetime = Field(alias="generatedAt", default_factory=dt.datetime.now)

    @computed_field(alias="totalStudents")
    @property
    def total_students(self) -> int:
        return len(self.seating_arrangement)

    def to_json_dict(self):
        return self.model_dump(mode="json", by_alias=True)


class SeatingResult(BaseModel):
    plan: Plan
    unplaced: int = 0
