"""
utils.py
Parsing, dates, search, paging and spreadsheet import.
"""

from __future__ import annotations

import io
import re
from datetime import date, datetime
from pathlib import Path

import openpyxl
import pandas as pd

from models import (
    DEFAULT_CONTRIBUTION,
    MARGIN_MAX,
    MARGIN_MIN,
    MONTHS_ID,
    QUALITY_OPTIONS,
    Donor,
    MosqueInfo,
    PrintSettings,
)

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value, default: int | None = None) -> int | None:
    """
    Lenient integer parse: "12", " 12 ", "12.0" and "12abc" all give 12.
    Anything without a leading integer gives `default`.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value and abs(value) != float("inf") else default
    m = _LEADING_INT_RE.match(str(value or ""))
    if not m:
        return default
    return int(m.group(1))


def parse_float(value, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        out = float(value)
    except (TypeError, ValueError):
        return default
    if out != out or abs(out) == float("inf"):
        return default
    return out


def coerce_settings(raw, base: PrintSettings | None = None) -> PrintSettings:
    """
    Build PrintSettings from a loosely typed mapping (form values or persisted JSON).
    Missing or unusable fields keep the value from `base` (defaults when not given).
    """
    base = base or PrintSettings()
    raw = raw if isinstance(raw, dict) else {}

    def margin(key: str, current: float) -> float:
        val = parse_float(raw.get(key, current), current)
        return min(max(val, MARGIN_MIN), MARGIN_MAX)

    scale = parse_float(raw.get("scale", base.scale), base.scale)
    if scale <= 0:
        scale = base.scale if base.scale > 0 else 100.0

    per_page = parse_int(raw.get("donorsPerPage", base.donors_per_page), base.donors_per_page)
    per_page = max(1, per_page or 1)

    quality = str(raw.get("quality", base.quality)).strip().upper()
    if quality not in QUALITY_OPTIONS:
        quality = base.quality if base.quality in QUALITY_OPTIONS else QUALITY_OPTIONS[0]

    return PrintSettings(
        margin_top=margin("marginTop", base.margin_top),
        margin_bottom=margin("marginBottom", base.margin_bottom),
        margin_left=margin("marginLeft", base.margin_left),
        margin_right=margin("marginRight", base.margin_right),
        scale=scale,
        donors_per_page=per_page,
        quality=quality,
    )


def coerce_mosque_info(raw) -> MosqueInfo:
    if not isinstance(raw, dict):
        raise ValueError("mosque info must be an object")
    defaults = MosqueInfo()
    return MosqueInfo(
        name=str(raw.get("name", defaults.name)),
        year=str(raw.get("year", defaults.year)),
        subtitle=str(raw.get("subtitle", defaults.subtitle)),
    )


def donor_from_dict(raw) -> Donor:
    """Rebuild a persisted donor. Raises ValueError when the entry has no usable id."""
    if not isinstance(raw, dict) or not str(raw.get("id") or "").strip():
        raise ValueError("donor entry without id")
    return Donor(
        id=str(raw["id"]),
        no=parse_int(raw.get("no"), 0),
        name=str(raw.get("name") or ""),
        date=str(raw.get("date") or ""),
        date2=str(raw.get("date2") or ""),
        contribution_type=str(raw.get("contributionType") or ""),
    )


# ---------- Dates ----------

def normalize_date(raw: str) -> str:
    """
    "19/02/26" -> "19 Februari 2026".
    Strings that already carry a month name, or don't look like day/month/year,
    come back unchanged.
    """
    text = "" if raw is None else str(raw)
    if any(month in text for month in MONTHS_ID):
        return text

    parts = [p.strip() for p in text.split("/")]
    if len(parts) != 3 or not all(p.isdecimal() for p in parts):
        return text

    day, month, year = parts
    month_idx = int(month)
    if month_idx < 1 or month_idx > 12:
        return text

    if len(year) == 2:
        year = str(2000 + int(year))
    return f"{day.zfill(2)} {MONTHS_ID[month_idx - 1]} {year}"


# ---------- Derived views ----------

def filter_donors(donors: list[Donor], query: str) -> list[Donor]:
    """Case-insensitive substring match on name, date and contribution type."""
    q = (query or "").lower()
    if not q:
        return list(donors)
    return [
        d for d in donors
        if q in d.name.lower() or q in d.date.lower() or q in d.contribution_type.lower()
    ]


def chunk_donors(donors: list[Donor], per_page) -> list[list[Donor]]:
    size = max(1, parse_int(per_page, 1) or 1)
    return [donors[i:i + size] for i in range(0, len(donors), size)]


# ---------- Import ----------

def rows_to_records(rows: list[list], existing_count: int) -> list[dict]:
    """
    Map spreadsheet rows to donor field dicts (ids are assigned by the store).
    Columns: No, Nama, Tanggal 1, Tanggal 2, Jenis Sumbangan. First row is the header.
    """
    records: list[dict] = []
    for row in rows[1:]:
        cells = ["" if c is None else str(c) for c in (row or [])]
        if len(cells) < 2 or not cells[1].strip():
            continue

        fallback_no = existing_count + len(records) + 1
        date2 = cells[3] if len(cells) > 3 else ""
        contribution = cells[4].strip() if len(cells) > 4 else ""
        records.append(
            {
                "no": parse_int(cells[0], fallback_no),
                "name": cells[1].upper(),
                "date": normalize_date(cells[2] if len(cells) > 2 else ""),
                "date2": normalize_date(date2) if date2 else "",
                "contribution_type": contribution or DEFAULT_CONTRIBUTION,
            }
        )
    return records


def _cell_text(value) -> str:
    # Mirror what the sheet shows rather than the stored value
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.strftime("%d/%m/%y")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _read_csv_rows(data: bytes) -> list[list[str]]:
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ValueError(f"Cannot read CSV file: {e}") from e

    lines = text.splitlines()
    if not any(line.strip() for line in lines):
        return []

    # Widest line sets the column count so a long row doesn't fail the whole file
    width = max(line.count(",") for line in lines) + 1
    try:
        df = pd.read_csv(
            io.StringIO(text), header=None, names=range(width), dtype=str, keep_default_na=False
        )
    except pd.errors.ParserError as e:
        raise ValueError(f"Cannot read CSV file: {e}") from e

    df = df.fillna("")
    while df.shape[1] > 1 and (df.iloc[:, -1] == "").all():
        df = df.iloc[:, :-1]
    return df.values.tolist()


def read_table(data: bytes, filename: str) -> list[list[str]]:
    """
    Read the first sheet of an uploaded .xlsx (or a .csv) as rows of display strings.
    """
    suffix = Path(filename or "").suffix.lower()
    if suffix == ".csv":
        return _read_csv_rows(data)

    if suffix in (".xlsx", ".xlsm"):
        try:
            wb = openpyxl.load_workbook(io.BytesIO(data), read_only=True, data_only=True)
        except Exception as e:
            raise ValueError(f"Cannot read Excel file: {e}") from e
        try:
            ws = wb.worksheets[0]
            return [[_cell_text(v) for v in row] for row in ws.iter_rows(values_only=True)]
        finally:
            wb.close()

    raise ValueError("Only .xlsx and .csv files are supported.")
