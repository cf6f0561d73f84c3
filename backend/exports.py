import logging
from pathlib import Path

import pandas as pd
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from backend.allocator import assignments_in_room, room_summary
from backend.seating_csv import HEADERS

logger = logging.getLogger(__name__)


def plan_to_dataframe(plan):
    data = []
    for a in plan.seating_arrangement:
        data.append([
            a.examinee_id,
            a.examinee_name,
            a.subject,
            a.date,
            a.room_no,
            a.room_name,
            a.seat_no,
            a.row,
            a.column,
            a.room_capacity,
            a.room_layout,
        ])
    return pd.DataFrame(data, columns=HEADERS)


def write_excel(plan, file_path):
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    plan_to_dataframe(plan).to_excel(file_path, index=False, sheet_name="Seating")
    logger.info("Excel export written to %s", file_path)
    return file_path


def write_pdf(plan, file_path):
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    c = canvas.Canvas(str(file_path), pagesize=A4)
    width, height = A4

    for room in room_summary(plan):
        y = height - 50
        c.setFont("Helvetica-Bold", 14)
        c.drawString(50, y, f"Seating Arrangement - {room['room_no']} {room['room_name']}")
        y -= 20

        c.setFont("Helvetica", 10)
        c.drawString(
            50, y,
            f"Occupied {room['occupied']}/{room['capacity']} "
            f"({room['utilization']}%)  Layout {room['room_layout'] or '-'}",
        )
        y -= 25

        c.drawString(50, y, "Seat")
        c.drawString(90, y, "Stu ID")
        c.drawString(170, y, "Name")
        c.drawString(340, y, "Exam")
        c.drawString(460, y, "Row")
        c.drawString(500, y, "Col")
        y -= 15

        c.line(50, y, 550, y)
        y -= 15

        for a in assignments_in_room(room["room_no"], plan):
            if y < 60:
                c.showPage()
                c.setFont("Helvetica", 10)
                y = height - 50

            c.drawString(50, y, str(a.seat_no))
            c.drawString(90, y, a.examinee_id[:12])
            c.drawString(170, y, a.examinee_name[:28])
            c.drawString(340, y, a.subject[:20])
            c.drawString(460, y, str(a.row))
            c.drawString(500, y, str(a.column))
            y -= 15

        c.showPage()

    c.save()
    logger.info("PDF export written to %s", file_path)
    return file_path
