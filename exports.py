"""
exports.py
Excel workbook, Word (.doc) document and printable page layout for the schedule.
"""

from __future__ import annotations

import io
from html import escape

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from models import Donor, MosqueInfo, PrintSettings
from utils import chunk_donors

SHEET_NAME = "Data Donatur"
XLSX_FILENAME = "Jadwal_Tajil.xlsx"
DOC_FILENAME = "Jadwal_Tajil.doc"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
DOC_MIME = "application/msword"

EXPORT_HEADER = ["No", "Nama", "Tanggal 1", "Tanggal 2", "Jenis Sumbangan"]
HEADER_FILL_COLOR = "D1FAE5"


def donors_to_rows(donors: list[Donor]) -> list[list]:
    """
    Header row + one row per donor, in the column order the importer reads.
    An empty contribution type is written as-is; re-importing it yields the
    default "Makanan / Uang".
    """
    rows: list[list] = [list(EXPORT_HEADER)]
    for d in donors:
        rows.append([d.no, d.name, d.date, d.date2 or "", d.contribution_type])
    return rows


def donors_to_xlsx_bytes(info: MosqueInfo, donors: list[Donor]) -> bytes:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = SHEET_NAME
    wb.properties.title = info.name
    wb.properties.subject = info.subtitle

    for row in donors_to_rows(donors):
        ws.append(row)

    header_fill = PatternFill(start_color=HEADER_FILL_COLOR, end_color=HEADER_FILL_COLOR, fill_type="solid")
    for cell in ws[1]:
        cell.font = Font(bold=True)
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center")

    # Autosize
    for col in ws.columns:
        max_len = 0
        letter = get_column_letter(col[0].column)
        for cell in col:
            v = "" if cell.value is None else str(cell.value)
            max_len = max(max_len, len(v))
        ws.column_dimensions[letter].width = min(max_len + 2, 60)

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def _title_lines(info: MosqueInfo) -> list[str]:
    return [
        f"SELAMAT MENUNAIKAN IBADAH PUASA {info.year}",
        info.subtitle,
        info.name,
    ]


def _donor_row_html(d: Donor) -> str:
    dates = f"<div>{escape(d.date)}</div>"
    if d.date2:
        dates += f"<div>{escape(d.date2)}</div>"
    return (
        "<tr>"
        f"<td>{d.no}</td>"
        f"<td><b>{escape(d.name)}</b></td>"
        f"<td>{dates}</td>"
        f"<td>{escape(d.contribution_type)}</td>"
        "</tr>"
    )


_TABLE_HEAD = (
    "<thead><tr>"
    "<th style=\"width:40px\">No</th><th>NAMA</th><th>TANGGAL</th><th>JENIS SUMBANGAN</th>"
    "</tr></thead>"
)


def donors_to_doc_html(info: MosqueInfo, donors: list[Donor]) -> str:
    """
    Word-compatible HTML: the header lines and a single table of every donor.
    """
    titles = "".join(f"<h2>{escape(line)}</h2>" for line in _title_lines(info))
    body = "".join(_donor_row_html(d) for d in donors)
    return (
        "<html xmlns:o=\"urn:schemas-microsoft-com:office:office\" "
        "xmlns:w=\"urn:schemas-microsoft-com:office:word\" "
        "xmlns=\"http://www.w3.org/TR/REC-html40\">"
        "<head><meta charset=\"utf-8\"><title>"
        f"{escape(info.name)}</title>"
        "<style>"
        "body{font-family:'Times New Roman',serif;}"
        "h2{text-align:center;text-transform:uppercase;margin:2px 0;}"
        "table{width:100%;border-collapse:collapse;margin-top:12px;}"
        "th,td{border:1px solid #000;padding:8px;text-align:center;}"
        "</style></head><body>"
        f"{titles}<table>{_TABLE_HEAD}<tbody>{body}</tbody></table>"
        "</body></html>"
    )


def donors_to_doc_bytes(info: MosqueInfo, donors: list[Donor]) -> bytes:
    return donors_to_doc_html(info, donors).encode("utf-8")


def print_layout_html(info: MosqueInfo, settings: PrintSettings, donors: list[Donor]) -> str:
    """
    One page per chunk of `donors_per_page` donors, each page repeating the header.
    Margins are millimetres, scale is a percentage.
    """
    titles = "".join(f"<h2>{escape(line)}</h2>" for line in _title_lines(info))
    pages = []
    for group in chunk_donors(donors, settings.donors_per_page):
        rows = "".join(_donor_row_html(d) for d in group)
        pages.append(
            f"<section class=\"page\">{titles}<table>{_TABLE_HEAD}<tbody>{rows}</tbody></table></section>"
        )

    if settings.quality == "TAJAM":
        quality_css = (
            "*{-webkit-print-color-adjust:exact;print-color-adjust:exact;}"
            "body{text-rendering:geometricPrecision;-webkit-font-smoothing:antialiased;}"
        )
    else:
        quality_css = ""

    return (
        "<html><head><meta charset=\"utf-8\"><style>"
        f"@page{{size:A4;margin:{settings.margin_top:g}mm {settings.margin_right:g}mm "
        f"{settings.margin_bottom:g}mm {settings.margin_left:g}mm;}}"
        f"body{{font-family:'Times New Roman',serif;zoom:{settings.scale / 100:.4g};}}"
        ".page{page-break-after:always;}"
        ".page:last-child{page-break-after:auto;}"
        "h2{text-align:center;text-transform:uppercase;margin:2px 0;font-size:18px;}"
        "table{width:100%;border-collapse:collapse;margin:8px 0 24px;}"
        "th,td{border:1px solid #000;padding:12px;text-align:center;}"
        f"{quality_css}"
        "</style></head><body>"
        f"{''.join(pages)}"
        "</body></html>"
    )
