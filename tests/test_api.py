import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend import main_api
from backend.database import Base
from backend.seating_csv import HEADERS

STUDENT = {
    "studentId": "STU001",
    "studentName": "John Doe",
    "studentExam": "Mathematics",
    "date": "2024-12-20",
    "roomNo": "ROOM001",
    "roomName": "Main Hall A",
    "seatNo": 1,
    "row": 1,
    "column": 1,
    "roomCapacity": 50,
    "roomLayout": "10x5",
}


@pytest.fixture
def client(tmp_path, monkeypatch):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    main_api.app.dependency_overrides[main_api.get_db] = override_get_db
    monkeypatch.setattr(main_api, "EXPORT_DIR", tmp_path)

    with TestClient(main_api.app) as c:
        yield c

    main_api.app.dependency_overrides.clear()


def students_payload(counts):
    students = []
    n = 1
    for subject, count in counts.items():
        for _ in range(count):
            students.append(
                {"studentId": f"STU{n:03d}", "studentName": f"Student {n}", "studentExam": subject, "date": "2024-12-20"}
            )
            n += 1
    return students


def test_root_and_health(client):
    assert client.get("/").status_code == 200
    assert client.get("/api/health").json()["status"] == "healthy"


def test_empty_seating(client):
    data = client.get("/api/seating").json()

    assert data["seatingArrangement"] == []
    assert data["totalStudents"] == 0
    assert client.get("/api/student/STU001").json() == {"found": False, "message": "Student not found"}


def test_save_and_load_seating(client):
    second = dict(STUDENT, studentId="STU002", studentName="Jane Smith", seatNo=2, column=2)

    response = client.post("/api/save-seating", json={"seatingArrangement": [STUDENT, second]})

    assert response.status_code == 200
    assert response.json()["success"] is True

    data = client.get("/api/seating").json()
    assert data["totalStudents"] == 2
    assert data["seatingArrangement"] == [STUDENT, second]
    assert "generatedAt" in data


def test_save_replaces_previous_plan(client):
    client.post("/api/save-seating", json={"seatingArrangement": [STUDENT]})
    client.post("/api/save-seating", json={"seatingArrangement": [dict(STUDENT, studentId="STU777")]})

    data = client.get("/api/seating").json()
    assert [s["studentId"] for s in data["seatingArrangement"]] == ["STU777"]


def test_student_lookup_is_case_insensitive(client):
    client.post("/api/save-seating", json={"seatingArrangement": [STUDENT]})

    data = client.get("/api/student/stu001").json()

    assert data["found"] is True
    assert data["student"] == STUDENT


def test_generate(client):
    payload = {
        "students": students_payload({"A": 6, "B": 6}),
        "rooms": [
            {"roomNo": "BIG", "roomName": "Big Hall", "numberOfSeats": 10, "seatMatrix": "2x5"},
            {"roomNo": "SMALL", "roomName": "Small Hall", "numberOfSeats": 5, "seatMatrix": "1x5"},
        ],
        "seed": 42,
    }

    response = client.post("/api/seating/generate", json=payload)
    data = response.json()

    assert response.status_code == 200
    assert data["unplaced"] == 0
    assert data["totalStudents"] == 12
    assert [s["roomNo"] for s in data["seatingArrangement"]].count("SMALL") == 5

    again = client.post("/api/seating/generate", json=payload).json()
    assert [s["studentId"] for s in again["seatingArrangement"]] == [
        s["studentId"] for s in data["seatingArrangement"]
    ]

    stored = client.get("/api/seating").json()
    assert stored["totalStudents"] == 12


def test_generate_reports_unplaced(client):
    payload = {
        "students": students_payload({"A": 20}),
        "rooms": [{"roomNo": "R1", "roomName": "One", "numberOfSeats": 15, "seatMatrix": "3x5"}],
    }

    data = client.post("/api/seating/generate", json=payload).json()

    assert data["totalStudents"] == 15
    assert data["unplaced"] == 5
    assert "5 students could not be assigned" in data["warning"]


def test_generate_without_rooms(client):
    response = client.post("/api/seating/generate", json={"students": students_payload({"A": 2}), "rooms": []})

    assert response.status_code == 400
    assert "rooms" in response.json()["detail"]


def test_generate_rejects_bad_room(client):
    payload = {
        "students": students_payload({"A": 2}),
        "rooms": [{"roomNo": "R1", "roomName": "One", "numberOfSeats": 0, "seatMatrix": "1x1"}],
    }

    assert client.post("/api/seating/generate", json=payload).status_code == 422


def test_upload_and_generate(client):
    students = "Student ID,Student Name,Student Exam,Date\nSTU001,John,Maths,2024-12-20\n,Nobody,Maths,2024-12-20\nSTU003,Mike,Physics,2024-12-20\n"
    rooms = "Room No,Room Name,Number of Seats,Seat Matrix (Rows x Columns)\nROOM001,Main Hall A,50,10x5\n"

    response = client.post(
        "/api/seating/upload",
        files={
            "students": ("students.csv", students, "text/csv"),
            "rooms": ("rooms.csv", rooms, "text/csv"),
        },
        data={"seed": "3"},
    )
    data = response.json()

    assert response.status_code == 200
    assert data["totalStudents"] == 2
    assert data["rejected"]["students"][0]["row"] == 3
    assert data["rejected"]["rooms"] == []


def test_upload_with_missing_columns(client):
    response = client.post(
        "/api/seating/upload",
        files={
            "students": ("students.csv", "Student ID\nSTU001\n", "text/csv"),
            "rooms": ("rooms.csv", "Room No\nR1\n", "text/csv"),
        },
    )

    assert response.status_code == 400


def test_import_and_export_csv(client):
    rows = [
        ",".join(HEADERS),
        '"STU001","John Doe","Mathematics","2024-12-20","ROOM001","Main Hall A","1","1","1","50","10x5"',
        '"STU002","Jane Smith","Mathematics","2024-12-20","ROOM001"',
    ]

    response = client.post("/api/seating/import", files={"file": ("plan.csv", "\n".join(rows), "text/csv")})

    assert response.status_code == 200
    assert response.json()["totalStudents"] == 1

    exported = client.get("/api/seating/export")
    assert exported.status_code == 200
    assert "exam-seating-" in exported.headers["content-disposition"]
    assert exported.text.split("\n") == rows[:2]


def test_import_without_valid_rows(client):
    response = client.post(
        "/api/seating/import",
        files={"file": ("plan.csv", ",".join(HEADERS) + "\n\"STU001\",\"short\"", "text/csv")},
    )

    assert response.status_code == 400


def test_exports_need_a_plan(client):
    assert client.get("/api/seating/export").status_code == 404
    assert client.get("/api/seating/export/pdf").status_code == 404
    assert client.get("/api/rooms/summary").status_code == 404


def test_excel_and_pdf_exports(client):
    client.post("/api/save-seating", json={"seatingArrangement": [STUDENT]})

    excel = client.get("/api/seating/export/excel")
    pdf = client.get("/api/seating/export/pdf")

    assert excel.status_code == 200
    assert excel.content[:2] == b"PK"
    assert pdf.status_code == 200
    assert pdf.content.startswith(b"%PDF")


def test_room_views(client):
    second = dict(STUDENT, studentId="STU002", studentName="Jane Smith", seatNo=6, row=2, column=1)
    client.post("/api/save-seating", json={"seatingArrangement": [STUDENT, second]})

    summary = client.get("/api/rooms/summary").json()
    assert summary["rooms"][0]["occupied"] == 2
    assert summary["rooms"][0]["utilization"] == 4.0

    layout = client.get("/api/rooms/ROOM001/layout").json()
    assert len(layout["grid"]) == 10
    assert layout["grid"][0][0] == "STU001 - John Doe"
    assert layout["grid"][1][0] == "STU002 - Jane Smith"

    assert client.get("/api/rooms/NOPE/layout").status_code == 404


def test_generate_rejects_duplicate_room_numbers(client):
    payload = {
        "students": students_payload({"A": 6, "B": 6}),
        "rooms": [
            {"roomNo": "R1", "roomName": "One", "numberOfSeats": 5, "seatMatrix": "1x5"},
            {"roomNo": "R1", "roomName": "One again", "numberOfSeats": 10, "seatMatrix": "2x5"},
        ],
    }

    response = client.post("/api/seating/generate", json=payload)

    assert response.status_code == 400
    assert "R1" in response.json()["detail"]
    assert client.get("/api/seating").json()["totalStudents"] == 0


def test_student_lookup_with_slash_in_id(client):
    client.post("/api/save-seating", json={"seatingArrangement": [dict(STUDENT, studentId="CS/2024/01")]})

    data = client.get("/api/student/cs%2F2024%2F01").json()

    assert data["found"] is True
    assert data["student"]["studentId"] == "CS/2024/01"


def test_upload_and_generate_for_one_date(client):
    students = (
        "Student ID,Student Name,Student Exam,Date\n"
        "STU001,John,Maths,2024-12-20\n"
        "STU002,Jane,Maths,2024-12-22\n"
        "STU003,Mike,Physics,2024-12-22\n"
    )
    rooms = "Room No,Room Name,Number of Seats,Seat Matrix (Rows x Columns)\nROOM001,Main Hall A,50,10x5\n"

    response = client.post(
        "/api/seating/upload",
        files={
            "students": ("students.csv", students, "text/csv"),
            "rooms": ("rooms.csv", rooms, "text/csv"),
        },
        data={"examDate": "2024-12-22"},
    )
    data = response.json()

    assert response.status_code == 200
    assert sorted(s["studentId"] for s in data["seatingArrangement"]) == ["STU002", "STU003"]
