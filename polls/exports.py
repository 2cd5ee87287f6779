"""Spreadsheet exports of poll, class and department data."""
import io
import logging
import re

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from .catalog import local_now

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

MAX_SHEET_TITLE = 31
MAX_COLUMN_WIDTH = 50

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="366092", end_color="366092", fill_type="solid")


def write_workbook(sheets):
    """Builds an xlsx workbook with one worksheet per named sheet.

    Args:
        sheets (list): dictionaries with a "name" and a list of row dictionaries
            under "rows"; the keys of the first row become the header

    Returns:
        bytes: xlsx file content
    """
    wb = openpyxl.Workbook()
    wb.remove(wb.active)

    for sheet in sheets:
        ws = wb.create_sheet(title=sheet["name"][:MAX_SHEET_TITLE])
        rows = sheet.get("rows") or []
        if not rows:
            continue

        headers = list(rows[0].keys())
        ws.append(headers)
        for cell in ws[1]:
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            cell.alignment = Alignment(horizontal="center")
        for row in rows:
            ws.append([row.get(header) for header in headers])

        # Auto-adjust column widths
        for col_idx, header in enumerate(headers, 1):
            values = [str(header)] + ["" if row.get(header) is None else str(row.get(header)) for row in rows]
            width = min(max(len(value) for value in values) + 2, MAX_COLUMN_WIDTH)
            ws.column_dimensions[get_column_letter(col_idx)].width = width

    if not wb.worksheets:
        wb.create_sheet(title="Sheet1")

    buffer = io.BytesIO()
    wb.save(buffer)
    logger.debug("Wrote workbook with %d sheet(s)", len(wb.worksheets))
    return buffer.getvalue()


def sanitize_filename(name):
    name = re.sub(r"[^\w\s-]", "", name or "").strip()
    return re.sub(r"\s+", "_", name) or "export"


def today_ddmm(now=None):
    now = now or local_now()
    return now.strftime("%d-%m")


def student_rows(students, status=None):
    rows = []
    for student in students:
        row = {
            "Registration Number": student["registration_number"],
            "Name": student["name"],
            "Email": student["email"],
            "Department": student["department"],
            "Section": student["section"],
        }
        if status:
            row["Status"] = status
        rows.append(row)
    return rows


def poll_sheets(report, now=None):
    """Poll Summary, Option Counts, Responded Students and Non-Responded Students sheets."""
    now = now or local_now()
    poll = report["poll"]
    info = {
        "Poll Title": poll["title"],
        "Category": poll["category"],
        "Class": poll["class_name"],
        "Section": poll["section"],
        "Faculty Name": poll["owner"],
        "Faculty Email": report["owner_email"],
        "Total Students": poll["total_students"],
        "Responded": poll["responded_students"],
        "Not Responded": poll["total_students"] - poll["responded_students"],
        "Response Rate": report["response_rate"],
        "Export Date": now.strftime("%d/%m/%Y"),
        "Export Time": now.strftime("%H:%M:%S"),
    }
    if report.get("link_url"):
        info["Link"] = report["link_url"]

    return [
        {
            "name": "Poll Summary",
            "rows": [{"Field": key, "Value": value} for key, value in info.items()],
        },
        {
            "name": "Option Counts",
            "rows": [
                {
                    "Option": entry["option"],
                    "Count": entry["count"],
                    "Percentage": entry["percentage"],
                }
                for entry in report["option_counts"]
            ],
        },
        {
            "name": "Responded Students",
            "rows": [
                {
                    "Registration Number": response["registration_number"],
                    "Student Name": response["name"],
                    "Response": response["response"],
                    "Option Selected": response["selected_option"],
                    "Responded At": response["responded_at"],
                    "Status": "Responded",
                }
                for response in report["responded"]
            ],
        },
        {
            "name": "Non-Responded Students",
            "rows": student_rows(report["not_responded"], status="Not Responded"),
        },
    ]


def poll_filename(report, now=None):
    return f"{sanitize_filename(report['poll']['title'])}_{today_ddmm(now)}"


def class_sheets(summary):
    """Student list and poll overview of a faculty member's class."""
    return [
        {"name": "Students", "rows": student_rows(summary["students"])},
        {
            "name": "Polls",
            "rows": [
                {
                    "Poll Title": poll["title"],
                    "Category": poll["category"],
                    "Total Students": poll["total_students"],
                    "Responded": poll["responded_students"],
                    "Response Rate": poll["response_rate"],
                }
                for poll in summary["polls"]
            ],
        },
    ]


def class_filename(summary):
    return sanitize_filename(f"students_{summary['department']}_{summary['section']}")


def department_sheets(department, hod_name, students):
    """Section Summary and Student Details sheets for a head of department.

    Args:
        department (string): department name
        hod_name (string): head of department exporting
        students (list): student row dictionaries already filtered to the wanted sections
    """
    sections = {}
    for student in students:
        sections[student["section"]] = sections.get(student["section"], 0) + 1

    return [
        {
            "name": "Section Summary",
            "rows": [
                {
                    "Section": section,
                    "Student Count": count,
                    "Department": department,
                    "HOD": hod_name,
                }
                for section, count in sorted(sections.items())
            ],
        },
        {"name": "Student Details", "rows": student_rows(students)},
    ]


def department_filename(department, section=None, now=None):
    if section and section != "all":
        name = f"{department}_Section_{section}_Students_{today_ddmm(now)}"
    else:
        name = f"{department}_Students_{today_ddmm(now)}"
    return sanitize_filename(name)
