"""
models.py
Lightweight domain helpers (header, print settings, donors, calendar table).
"""

from __future__ import annotations
from dataclasses import dataclass, asdict

# Long month names, 1-indexed by position (used for date normalization)
MONTHS_ID = [
    "Januari",
    "Februari",
    "Maret",
    "April",
    "Mei",
    "Juni",
    "Juli",
    "Agustus",
    "September",
    "Oktober",
    "November",
    "Desember",
]

QUALITY_OPTIONS = ("TAJAM", "STANDAR")

DEFAULT_CONTRIBUTION = "Makanan / Uang"
NEW_DONOR_NAME = "Donatur Baru"
NEW_DONOR_DATE = "Tanggal Baru"

MARGIN_MIN = 0.0
MARGIN_MAX = 50.0


@dataclass
class MosqueInfo:
    name: str = "MESJID NURUL HUDA KAMPUNG GUNUNG SARI"
    year: str = "1447 HIJRIYAH"
    subtitle: str = "JADWAL MEMBERI TA'JIL BUKA PUASA"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class PrintSettings:
    margin_top: float = 5.0
    margin_bottom: float = 5.0
    margin_left: float = 5.0
    margin_right: float = 5.0
    scale: float = 100.0  # percent
    donors_per_page: int = 4
    quality: str = "TAJAM"  # 'TAJAM' or 'STANDAR'

    def to_dict(self) -> dict:
        # camelCase keys are the persisted layout
        return {
            "marginTop": self.margin_top,
            "marginBottom": self.margin_bottom,
            "marginLeft": self.margin_left,
            "marginRight": self.margin_right,
            "scale": self.scale,
            "donorsPerPage": self.donors_per_page,
            "quality": self.quality,
        }


@dataclass
class Donor:
    id: str
    no: int
    name: str
    date: str
    date2: str = ""
    contribution_type: str = DEFAULT_CONTRIBUTION

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "no": self.no,
            "name": self.name,
            "date": self.date,
            "date2": self.date2,
            "contributionType": self.contribution_type,
        }


# First-run roster
SEED_DONORS = [
    {"no": 7, "name": "ARIANTO/ATUT", "date": "19 Februari 2026", "date2": "06 Maret 2026"},
    {"no": 8, "name": "SAPA", "date": "20 Februari 2026", "date2": "06 Maret 2026"},
    {"no": 9, "name": "BAHAR", "date": "20 Februari 2026", "date2": "06 Maret 2026"},
]
