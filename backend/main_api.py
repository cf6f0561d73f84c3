import datetime as dt
import io
import logging
import random
from typing import List, Optional

from fastapi import FastAPI, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse, Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from backend.allocator import assignments_in_room, find_assignment, generate_plan, room_summary
from backend.config import EXPORT_DIR
from backend.database import Base, engine, SessionLocal
from backend.db_models import SeatingPlanDB, SeatAssignmentDB
from backend.errors import CapacityOverflowError, DuplicateRoomError, MissingInputError, UploadError
from backend.exports import write_excel, write_pdf
from backend.layouts import generate_layout
from backend.seating_csv import from_text, seating_filename, to_text
from models import Examinee, Plan, Room, SeatAssignment
from student_import import import_examinees, import_rooms

logger = logging.getLogger(__name__)

app = FastAPI(title = "Seat Allocator API")

Base.metadata.create_all(bind = engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


class SaveSeatingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    seating_arrangement: List[SeatAssignment] = Field(alias="seatingArrangement")


class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    students: List[Examinee] = Field(default_factory=list)
    rooms: List[Room] = Field(default_factory=list)
    seed: Optional[int] = None
    exam_date: Optional[dt.date] = Field(alias="examDate", default=None)


def store_plan(db, plan):
    # a new plan replaces the previous one wholesale
    db.query(SeatAssignmentDB).delete()
    db.query(SeatingPlanDB).delete()

    db_plan = SeatingPlanDB(
        generated_at=plan.generated_at,
        total_students=plan.total_students,
    )
    db_plan.assignments = [
        SeatAssignmentDB.from_assignment(position, a)
        for position, a in enumerate(plan.seating_arrangement)
    ]
    db.add(db_plan)
    db.commit()


def load_plan(db):
    db_plan = db.query(SeatingPlanDB).order_by(SeatingPlanDB.id.desc()).first()
    if not db_plan:
        return None
    return db_plan.to_plan()


def require_plan(db):
    plan = load_plan(db)
    if plan is None or plan.total_students == 0:
        raise HTTPException(status_code=404, detail="No seating data found. Generate seating first.")
    return plan


def run_generation(db, examinees, rooms, seed=None, exam_date=None):
    rng = random.Random(seed) if seed is not None else None

    try:
        result = generate_plan(examinees, rooms, rng=rng, exam_date=exam_date)
    except (MissingInputError, DuplicateRoomError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CapacityOverflowError as e:
        raise HTTPException(status_code=500, detail=f"Room overflow detected: {e}")

    store_plan(db, result.plan)

    response = result.plan.to_json_dict()
    response["unplaced"] = result.unplaced
    if result.unplaced:
        response["warning"] = (
            f"{result.unplaced} students could not be assigned. "
            "Please add more rooms or increase capacity."
        )
    return response


@app.get("/")
def root():
    return {"message": "Seat Allocator API is running !"}


@app.get("/api/health")
def health():
    return {"status": "healthy", "message": "Exam Seating Backend is running"}


@app.post("/api/save-seating")
def save_seating(req: SaveSeatingRequest, db: Session = Depends(get_db)):
    plan = Plan(seating_arrangement=req.seating_arrangement)
    store_plan(db, plan)

    logger.info("Saved seating plan with %d students", plan.total_students)
    return {
        "success": True,
        "message": "Seating data saved",
        "totalStudents": plan.total_students,
    }


@app.get("/api/seating")
def get_seating(db: Session = Depends(get_db)):
    plan = load_plan(db)
    if plan is None:
        return {"seatingArrangement": [], "message": "No seating data found", "totalStudents": 0}
    return plan.to_json_dict()


@app.get("/api/student/{student_id:path}")
def search_student(student_id: str, db: Session = Depends(get_db)):
    plan = load_plan(db)
    assignment = find_assignment(student_id, plan) if plan else None

    if assignment is None:
        return {"found": False, "message": "Student not found"}

    return {"found": True, "student": assignment.model_dump(mode="json", by_alias=True)}


@app.post("/api/seating/generate")
def generate_seating(req: GenerateRequest, db: Session = Depends(get_db)):
    return run_generation(db, req.students, req.rooms, req.seed, req.exam_date)


@app.post("/api/seating/upload")
def upload_and_generate(
    students: UploadFile = File(...),
    rooms: UploadFile = File(...),
    seed: Optional[int] = Form(None),
    exam_date: Optional[dt.date] = Form(None, alias="examDate"),
    db: Session = Depends(get_db),
):
    try:
        student_result = import_examinees(io.BytesIO(students.file.read()), students.filename)
        room_result = import_rooms(io.BytesIO(rooms.file.read()), rooms.filename)
    except UploadError as e:
        raise HTTPException(status_code=400, detail=str(e))

    response = run_generation(db, student_result.records, room_result.records, seed, exam_date)
    response["rejected"] = {
        "students": [{"row": r, "reason": reason} for r, reason in student_result.rejected],
        "rooms": [{"row": r, "reason": reason} for r, reason in room_result.rejected],
    }
    return response


@app.post("/api/seating/import")
def import_seating(file: UploadFile = File(...), db: Session = Depends(get_db)):
    text = file.file.read().decode("utf-8-sig", errors="replace")
    plan = from_text(text)

    if plan.total_students == 0:
        raise HTTPException(status_code=400, detail="No valid seating data found in the CSV file.")

    store_plan(db, plan)
    return {
        "success": True,
        "message": f"Successfully imported {plan.total_students} students from CSV file.",
        "totalStudents": plan.total_students,
    }


@app.get("/api/seating/export")
def export_seating_csv(db: Session = Depends(get_db)):
    plan = require_plan(db)

    return Response(
        content=to_text(plan),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{seating_filename()}"'},
    )


@app.get("/api/seating/export/excel")
def export_seating_excel(db: Session = Depends(get_db)):
    plan = require_plan(db)

    file_path = write_excel(plan, EXPORT_DIR / seating_filename().replace(".csv", ".xlsx"))

    return FileResponse(
        path=str(file_path),
        filename=file_path.name,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )


@app.get("/api/seating/export/pdf")
def export_seating_pdf(db: Session = Depends(get_db)):
    plan = require_plan(db)

    file_path = write_pdf(plan, EXPORT_DIR / seating_filename().replace(".csv", ".pdf"))

    return FileResponse(
        path=str(file_path),
        filename=file_path.name,
        media_type="application/pdf"
    )


@app.get("/api/rooms/summary")
def rooms_summary(db: Session = Depends(get_db)):
    plan = require_plan(db)
    rooms = room_summary(plan)

    return {"total_students": plan.total_students, "total_rooms": len(rooms), "rooms": rooms}


@app.get("/api/rooms/{room_no}/layout")
def room_layout(room_no: str, db: Session = Depends(get_db)):
    plan = require_plan(db)
    assignments = assignments_in_room(room_no, plan)
    if not assignments:
        raise HTTPException(status_code=404, detail="Room not found in seating plan")

    layout = assignments[0].room_layout
    return {
        "room_no": room_no,
        "room_name": assignments[0].room_name,
        "seat_matrix": layout,
        "occupied": len(assignments),
        "grid": generate_layout(assignments, layout),
    }
