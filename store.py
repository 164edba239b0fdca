"""
store.py
In-memory schedule state: the donor list, header info and print settings.
All changes go through ScheduleState, which notifies listeners (persistence)
after each committed change.
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable

from models import (
    DEFAULT_CONTRIBUTION,
    NEW_DONOR_DATE,
    NEW_DONOR_NAME,
    SEED_DONORS,
    Donor,
    MosqueInfo,
    PrintSettings,
)
import utils

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("no", "name", "date", "date2", "contribution_type")


class DonorStore:
    """Ordered donor records keyed by a generated id. Order is insertion order."""

    def __init__(self, donors: list[Donor] | None = None):
        self._donors: list[Donor] = []
        self._issued: set[str] = set()
        if donors:
            self.replace_all(donors)

    @property
    def donors(self) -> list[Donor]:
        return list(self._donors)

    def __len__(self) -> int:
        return len(self._donors)

    def _new_id(self) -> str:
        while True:
            new_id = uuid.uuid4().hex[:12]
            if new_id not in self._issued:
                self._issued.add(new_id)
                return new_id

    def next_no(self) -> int:
        return max((d.no for d in self._donors), default=0) + 1

    def get(self, donor_id: str) -> Donor | None:
        return next((d for d in self._donors if d.id == donor_id), None)

    def add(
        self,
        no: int | None = None,
        name: str = NEW_DONOR_NAME,
        date: str = NEW_DONOR_DATE,
        date2: str = "",
        contribution_type: str = DEFAULT_CONTRIBUTION,
    ) -> Donor:
        donor = Donor(
            id=self._new_id(),
            no=self.next_no() if no is None else no,
            name=name,
            date=date,
            date2=date2,
            contribution_type=contribution_type,
        )
        self._donors.append(donor)
        return donor

    def extend(self, records: list[dict]) -> list[Donor]:
        """Append field dicts as new donors, each with a fresh id."""
        added = [self.add(**{k: r[k] for k in EDITABLE_FIELDS if k in r}) for r in records]
        return added

    def update(self, donor_id: str, patch: dict) -> bool:
        """
        Merge `patch` into the donor with `donor_id`. Returns False if no such donor.
        The id and the position in the list never change.
        """
        for idx, current in enumerate(self._donors):
            if current.id != donor_id:
                continue
            merged = Donor(
                id=current.id,
                no=utils.parse_int(patch.get("no", current.no), current.no),
                name=str(patch.get("name", current.name)),
                date=str(patch.get("date", current.date)),
                date2=str(patch.get("date2", current.date2) or ""),
                contribution_type=str(patch.get("contribution_type", current.contribution_type)),
            )
            self._donors[idx] = merged
            return True
        return False

    def delete(self, donor_id: str) -> None:
        self._donors = [d for d in self._donors if d.id != donor_id]

    def replace_all(self, donors: list[Donor]) -> None:
        ids = [d.id for d in donors]
        if len(set(ids)) != len(ids):
            raise ValueError("duplicate donor ids")
        self._donors = list(donors)
        self._issued.update(ids)

    def clear(self) -> None:
        self._donors = []


Listener = Callable[[dict], None]


class ScheduleState:
    """Owns header, print settings and donors; the only place they are changed."""

    def __init__(
        self,
        mosque_info: MosqueInfo | None = None,
        settings: PrintSettings | None = None,
        donors: list[Donor] | None = None,
    ):
        self._mosque_info = mosque_info or MosqueInfo()
        self._settings = settings or PrintSettings()
        self._store = DonorStore(donors)
        self._listeners: list[Listener] = []

    @property
    def mosque_info(self) -> MosqueInfo:
        return self._mosque_info

    @property
    def settings(self) -> PrintSettings:
        return self._settings

    @property
    def donors(self) -> list[Donor]:
        return self._store.donors

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def snapshot(self) -> dict:
        return {
            "mosqueInfo": self._mosque_info.to_dict(),
            "settings": self._settings.to_dict(),
            "donors": [d.to_dict() for d in self._store.donors],
        }

    def _commit(self) -> None:
        snap = self.snapshot()
        for listener in self._listeners:
            try:
                listener(snap)
            except Exception:
                # in-memory change stands even if saving failed
                logger.exception("[STATE] Listener failed after commit")

    # ---------- Header & settings ----------

    def set_mosque_info(self, info: MosqueInfo) -> None:
        self._mosque_info = MosqueInfo(name=info.name, year=info.year, subtitle=info.subtitle)
        self._commit()

    def set_settings(self, raw) -> PrintSettings:
        """Accepts a PrintSettings or a loose mapping of camelCase fields."""
        if isinstance(raw, PrintSettings):
            raw = raw.to_dict()
        self._settings = utils.coerce_settings(raw, base=self._settings)
        self._commit()
        return self._settings

    # ---------- Donors ----------

    def add_donor(self, **fields) -> Donor:
        donor = self._store.add(**fields)
        self._commit()
        return donor

    def update_donor(self, donor_id: str, patch: dict) -> bool:
        found = self._store.update(donor_id, patch)
        if found:
            self._commit()
        return found

    def delete_donor(self, donor_id: str) -> None:
        self._store.delete(donor_id)
        self._commit()

    def replace_donors(self, donors: list[Donor]) -> None:
        self._store.replace_all(donors)
        self._commit()

    def clear_donors(self) -> None:
        self._store.clear()
        self._commit()

    def import_rows(self, rows: list[list]) -> int:
        """Append donors built from spreadsheet rows. Returns how many were added."""
        records = utils.rows_to_records(rows, len(self._store))
        if not records:
            return 0
        self._store.extend(records)
        logger.info("[IMPORT] %d donor(s) imported", len(records))
        self._commit()
        return len(records)

    # ---------- Views ----------

    def search(self, query: str) -> list[Donor]:
        return utils.filter_donors(self._store.donors, query)

    def pages(self) -> list[list[Donor]]:
        return utils.chunk_donors(self._store.donors, self._settings.donors_per_page)


def default_donors() -> list[Donor]:
    return [
        Donor(id=uuid.uuid4().hex[:12], contribution_type=DEFAULT_CONTRIBUTION, **seed)
        for seed in SEED_DONORS
    ]


def hydrate(blob: dict | None) -> ScheduleState:
    """
    Build state from a persisted blob. Each top-level field is restored on its own;
    a missing or broken field falls back to its default.
    """
    blob = blob if isinstance(blob, dict) else {}

    mosque_info = MosqueInfo()
    if "mosqueInfo" in blob:
        try:
            mosque_info = utils.coerce_mosque_info(blob["mosqueInfo"])
        except ValueError as e:
            logger.warning("[STATE] Ignoring stored mosque info: %s", e)

    settings = PrintSettings()
    if "settings" in blob:
        if isinstance(blob["settings"], dict):
            settings = utils.coerce_settings(blob["settings"])
        else:
            logger.warning("[STATE] Ignoring stored settings: not an object")

    donors = default_donors()
    if "donors" in blob:
        try:
            donors = _donors_from_blob(blob["donors"])
        except ValueError as e:
            logger.warning("[STATE] Ignoring stored donors: %s", e)

    return ScheduleState(mosque_info=mosque_info, settings=settings, donors=donors)


def _donors_from_blob(raw) -> list[Donor]:
    if not isinstance(raw, list):
        raise ValueError("donors must be a list")
    donors = [utils.donor_from_dict(item) for item in raw]
    if len({d.id for d in donors}) != len(donors):
        raise ValueError("duplicate donor ids")
    return donors
