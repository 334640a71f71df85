"""
Excel digest of search results.
"""

from collections import Counter
from datetime import date
from io import BytesIO
from pathlib import Path
from zoneinfo import ZoneInfo

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from core.config import DIGEST_HEADERS, SUMMARY_HEADERS
from services.formatting import format_event

EVENTS_SHEET = "Events"
SUMMARY_SHEET = "Summary"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def format_date_display(d: date) -> str:
    """Format date as 'Wed 11/6/2025' (D/M/YYYY, no zero-padding)."""
    return f"{d.strftime('%a')} {d.day}/{d.month}/{d.year}"


def digest_rows(events: list[dict], tz: ZoneInfo) -> list[list]:
    """One row per tagged event, in the order given."""
    rows = []
    for event in events:
        card = format_event(event, tz)
        start_time = event.get("start_time")
        date_str = format_date_display(start_time.astimezone(tz).date()) if start_time else ""
        rows.append(
            [
                date_str,
                card["time"],
                (event.get("city") or "").title(),
                card["name"],
                card["location"],
                card["price"],
                card["event_link"],
            ]
        )
    return rows


def write_events_sheet(ws, events: list[dict], tz: ZoneInfo):
    """Write headers and one row per event."""
    for col_idx, header in enumerate(DIGEST_HEADERS, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True)

    for row_idx, row_data in enumerate(digest_rows(events, tz), start=2):
        for col_idx, value in enumerate(row_data, start=1):
            ws.cell(row=row_idx, column=col_idx, value=value)

    # Rough column widths so titles and addresses stay readable
    for col_idx, width in enumerate((16, 10, 12, 40, 40, 12, 30), start=1):
        ws.column_dimensions[get_column_letter(col_idx)].width = width


def write_summary_sheet(ws, events: list[dict]):
    """
    Per-city event counts.

    Row 1: headers, one row per city (alphabetical), last row: Total (SUM formula).
    """
    for col_idx, header in enumerate(SUMMARY_HEADERS, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True)

    counts = Counter((event.get("city") or "").title() for event in events)
    cities = sorted(counts)
    for row_idx, city in enumerate(cities, start=2):
        ws.cell(row=row_idx, column=1, value=city)
        ws.cell(row=row_idx, column=2, value=counts[city])

    total_row = len(cities) + 2
    total_cell = ws.cell(row=total_row, column=1, value="Total")
    total_cell.font = Font(bold=True)
    if cities:
        ws.cell(row=total_row, column=2, value=f"=SUM(B2:B{total_row - 1})")
    else:
        ws.cell(row=total_row, column=2, value=0)


def build_events_workbook(events: list[dict], tz: ZoneInfo) -> Workbook:
    wb = Workbook()

    ws_events = wb.active
    ws_events.title = EVENTS_SHEET
    write_events_sheet(ws_events, events, tz)

    ws_summary = wb.create_sheet(title=SUMMARY_SHEET)
    write_summary_sheet(ws_summary, events)

    return wb


def create_events_digest(events: list[dict], tz: ZoneInfo, output_path: Path):
    """Save the digest workbook to output_path."""
    wb = build_events_workbook(events, tz)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(output_path))
    print(f"Saved events digest to: {output_path}")


def create_events_digest_bytes(events: list[dict], tz: ZoneInfo) -> bytes:
    buffer = BytesIO()
    build_events_workbook(events, tz).save(buffer)
    return buffer.getvalue()
