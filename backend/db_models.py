from sqlalchemy import Column, DateTime, Integer, String, ForeignKey
from sqlalchemy.orm import relationship

from backend.database import Base
from models import Plan, SeatAssignment


class SeatingPlanDB(Base):
    __tablename__ = "seating_plans"

    id = Column(Integer, primary_key = True, index = True)
    generated_at = Column(DateTime, nullable = False)
    total_students = Column(Integer, nullable = False, default = 0)

    assignments = relationship(
        "SeatAssignmentDB",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="SeatAssignmentDB.position",
    )

    def to_plan(self):
        return Plan(
            seating_arrangement=[a.to_assignment() for a in self.assignments],
            generated_at=self.generated_at,
        )


class SeatAssignmentDB(Base):
    __tablename__ = "seat_assignments"

    id = Column(Integer, primary_key=True, index=True)
    plan_id = Column(Integer, ForeignKey("seating_plans.id"), nullable=False)
    # order within the plan
    position = Column(Integer, nullable=False)

    stu_id = Column(String, index=True, nullable=False)
    stu_name = Column(String, nullable=False, default="")
    subject = Column(String, nullable=False, default="")
    exam_date = Column(String, nullable=False, default="")

    room_no = Column(String, index=True, nullable=False, default="")
    room_name = Column(String, nullable=False, default="")
    seat_no = Column(Integer, nullable=False, default=0)
    row_no = Column(Integer, nullable=False, default=0)
    col_no = Column(Integer, nullable=False, default=0)
    room_capacity = Column(Integer, nullable=False, default=0)
    room_layout = Column(String, nullable=False, default="")

    plan = relationship("SeatingPlanDB", back_populates="assignments")

    @classmethod
    def from_assignment(cls, position, a):
        return cls(
            position=position,
            stu_id=a.examinee_id,
            stu_name=a.examinee_name,
            subject=a.subject,
            exam_date=a.date,
            room_no=a.room_no,
            room_name=a.room_name,
            seat_no=a.seat_no,
            row_no=a.row,
            col_no=a.column,
            room_capacity=a.room_capacity,
            room_layout=a.room_layout,
        )

    def to_assignment(self):
        return SeatAssignment(
            examinee_id=self.stu_id,
            examinee_name=self.stu_name,
            subject=self.subject,
            date=self.exam_date,
            room_no=self.room_no,
            room_name=self.room_name,
            seat_no=self.seat_no,
            row=self.row_no,
            column=self.col_no,
            room_capacity=self.room_capacity,
            room_layout=self.room_layout,
        )
