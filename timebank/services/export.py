import csv
import io
from typing import Iterable, Optional, Tuple

BOM = "\ufeff"

CSV_HEADERS = ["Week start", "Hours", "Tags", "Note", "Contributor", "Email", "Created at"]


def format_hours(hours: float) -> str:
    return f"{hours:g}"


def entries_to_csv(rows: Iterable[Tuple[object, Optional[str], Optional[str]]]) -> str:
    """
    rows: (entry, contributor display name, contributor email)
    Every cell is quoted and embedded quotes are doubled. Prefixed with a BOM for spreadsheet apps.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for entry, name, email in rows:
        writer.writerow([
            entry.week_start.isoformat(),
            format_hours(entry.hours),
            "; ".join(entry.tags or []),
            entry.note or "",
            name or "Unknown",
            email or "",
            entry.created_at.strftime("%Y-%m-%d %H:%M:%S") if entry.created_at else "",
        ])
    return BOM + buffer.getvalue()
