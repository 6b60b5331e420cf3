from __future__ import annotations

import csv
import io
import re
from typing import Iterable, Mapping, Sequence

import pandas as pd

EXPORT_COLUMNS = [
    "Name",
    "Email",
    "Student/ID",
    "Program",
    "Year",
    "Status",
    "Check-in",
    "Check-out",
    "Session",
]

CSV_MIMETYPE = "text/csv"
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

MAX_SHEET_NAME = 31
MAX_FILENAME_STEM = 50

_SHEET_FORBIDDEN = re.compile(r"[\[\]:*?/\\]")


def sanitize_filename(name: str) -> str:
    """Lowercase, hyphenated, alphanumeric stem for download names."""

    stem = re.sub(r"[^\w\s-]", "", name or "")
    stem = re.sub(r"\s+", "-", stem.strip()).lower()
    return stem[:MAX_FILENAME_STEM] or "event"


def sanitize_sheet_name(name: str) -> str:
    cleaned = _SHEET_FORBIDDEN.sub("", name or "").strip().strip("'")
    return cleaned[:MAX_SHEET_NAME] or "Sheet"


def write_csv(rows: Sequence[Mapping[str, object]]) -> bytes:
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=EXPORT_COLUMNS)
    writer.writeheader()
    for row in rows:
        writer.writerow(row)

    # BOM so Excel opens UTF-8 names correctly.
    return out.getvalue().encode("utf-8-sig")


def write_xlsx(sheets: Iterable[tuple[str, Sequence[Mapping[str, object]]]]) -> bytes:
    """One worksheet per (title, rows) pair; titles are sanitized and deduplicated."""

    out = io.BytesIO()
    used: set[str] = set()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        for title, rows in sheets:
            base = sanitize_sheet_name(title)
            sheet_name = base
            n = 2
            while sheet_name.lower() in used:
                suffix = f" ({n})"
                sheet_name = base[: MAX_SHEET_NAME - len(suffix)] + suffix
                n += 1
            used.add(sheet_name.lower())

            df = pd.DataFrame(list(rows), columns=EXPORT_COLUMNS)
            df.to_excel(writer, sheet_name=sheet_name, index=False)
    return out.getvalue()
