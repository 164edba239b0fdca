from __future__ import annotations

import pytest

from models import Donor, MosqueInfo, PrintSettings
from store import DonorStore, ScheduleState, default_donors, hydrate


def _state_with_seed() -> ScheduleState:
    return ScheduleState(donors=default_donors())


def test_add_uses_max_no_plus_one() -> None:
    state = _state_with_seed()
    assert [d.no for d in state.donors] == [7, 8, 9]

    donor = state.add_donor()
    assert donor.no == 10
    assert state.donors[-1] == donor
    assert donor.name == "Donatur Baru"
    assert donor.date == "Tanggal Baru"
    assert donor.date2 == ""
    assert donor.contribution_type == "Makanan / Uang"


def test_add_on_empty_store_starts_at_one() -> None:
    store = DonorStore()
    assert store.add().no == 1


def test_add_appends_in_insertion_order_not_no_order() -> None:
    store = DonorStore()
    store.add(no=50, name="A")
    store.add(no=2, name="B")
    third = store.add(name="C")
    assert third.no == 51
    assert [d.name for d in store.donors] == ["A", "B", "C"]


def test_ids_are_unique_and_never_reused() -> None:
    store = DonorStore()
    seen = set()
    for _ in range(50):
        d = store.add()
        assert d.id not in seen
        seen.add(d.id)
        store.delete(d.id)
    store.clear()
    assert store.add().id not in seen


def test_update_merges_patch_and_keeps_id_and_position() -> None:
    state = _state_with_seed()
    target = state.donors[1]

    assert state.update_donor(target.id, {"name": "SAPA DG. NAI", "no": "12", "id": "hijack"})

    updated = state.donors[1]
    assert updated.id == target.id
    assert updated.name == "SAPA DG. NAI"
    assert updated.no == 12
    assert updated.date == target.date
    assert [d.no for d in state.donors] == [7, 12, 9]


def test_update_bad_no_keeps_previous_value() -> None:
    state = _state_with_seed()
    target = state.donors[0]
    state.update_donor(target.id, {"no": "tujuh"})
    assert state.donors[0].no == 7


def test_update_missing_id_reports_not_found_without_commit() -> None:
    state = _state_with_seed()
    calls = []
    state.subscribe(calls.append)

    assert state.update_donor("missing", {"name": "X"}) is False
    assert calls == []


def test_delete_and_delete_missing() -> None:
    state = _state_with_seed()
    first = state.donors[0]
    state.delete_donor(first.id)
    assert [d.no for d in state.donors] == [8, 9]

    state.delete_donor("missing")
    assert [d.no for d in state.donors] == [8, 9]


def test_replace_all_rejects_duplicate_ids() -> None:
    store = DonorStore()
    dupes = [Donor(id="a", no=1, name="A", date=""), Donor(id="a", no=2, name="B", date="")]
    with pytest.raises(ValueError):
        store.replace_all(dupes)


def test_replace_all_ids_are_not_issued_again() -> None:
    store = DonorStore()
    store.replace_all([Donor(id="fixed", no=1, name="A", date="")])
    store.clear()
    assert all(store.add().id != "fixed" for _ in range(20))


def test_clear_empties_and_notifies() -> None:
    state = _state_with_seed()
    snaps = []
    state.subscribe(snaps.append)

    state.clear_donors()

    assert state.donors == []
    assert snaps[-1]["donors"] == []


def test_every_change_notifies_listener_with_full_snapshot() -> None:
    state = _state_with_seed()
    snaps = []
    state.subscribe(snaps.append)

    state.set_mosque_info(MosqueInfo(name="MASJID AL-IKHLAS", year="1448 HIJRIYAH", subtitle="JADWAL"))
    state.set_settings({"donorsPerPage": "6"})
    donor = state.add_donor(name="BACO")
    state.update_donor(donor.id, {"date": "01 Maret 2026"})
    state.delete_donor(donor.id)

    assert len(snaps) == 5
    assert snaps[0]["mosqueInfo"]["name"] == "MASJID AL-IKHLAS"
    assert snaps[1]["settings"]["donorsPerPage"] == 6
    assert snaps[2]["donors"][-1]["name"] == "BACO"
    assert snaps[3]["donors"][-1]["date"] == "01 Maret 2026"
    assert len(snaps[4]["donors"]) == 3


def test_listener_failure_does_not_roll_back(caplog) -> None:
    state = _state_with_seed()

    def broken(_snapshot):
        raise OSError("disk full")

    state.subscribe(broken)
    donor = state.add_donor(name="TETAP")

    assert state.donors[-1].id == donor.id
    assert "Listener failed" in caplog.text


def test_set_settings_never_lets_page_size_below_one() -> None:
    state = ScheduleState()
    s = state.set_settings({"donorsPerPage": -2})
    assert s.donors_per_page == 1

    state.set_settings(PrintSettings(donors_per_page=0))
    assert state.settings.donors_per_page == 1


def test_import_rows_appends_with_fresh_ids() -> None:
    state = _state_with_seed()
    before_ids = {d.id for d in state.donors}
    rows = [
        ["No", "Nama", "T1", "T2", "Jenis"],
        ["1", "syamsia", "19/02/26", "06/03/26", "Makanan / Uang"],
        ["x", "beddu", "20/02/26"],
    ]

    count = state.import_rows(rows)

    assert count == 2
    assert len(state.donors) == 5
    imported = state.donors[3:]
    assert imported[0].name == "SYAMSIA"
    assert imported[0].date == "19 Februari 2026"
    assert imported[0].date2 == "06 Maret 2026"
    assert imported[0].contribution_type == "Makanan / Uang"
    # fallback no: store length + imported so far + 1
    assert imported[1].no == 5
    assert not before_ids & {d.id for d in imported}
    assert len({d.id for d in imported}) == 2


def test_import_nothing_changes_nothing() -> None:
    state = _state_with_seed()
    snaps = []
    state.subscribe(snaps.append)

    assert state.import_rows([["No", "Nama"], ["1", ""]]) == 0
    assert snaps == []
    assert len(state.donors) == 3


def test_search_and_pages_views() -> None:
    state = _state_with_seed()
    state.set_settings({"donorsPerPage": 2})

    assert [d.name for d in state.search("bahar")] == ["BAHAR"]
    # paging always covers the full list
    assert [len(p) for p in state.pages()] == [2, 1]


# ---------- hydrate ----------

def test_hydrate_none_gives_defaults() -> None:
    state = hydrate(None)
    assert state.mosque_info == MosqueInfo()
    assert state.settings == PrintSettings()
    assert [d.name for d in state.donors] == ["ARIANTO/ATUT", "SAPA", "BAHAR"]


def test_hydrate_missing_settings_uses_default_settings_only() -> None:
    blob = {
        "mosqueInfo": {"name": "MASJID RAYA", "year": "1448 H", "subtitle": "TA'JIL"},
        "donors": [
            {"id": "abc", "no": 3, "name": "BACO", "date": "01 Maret 2026", "date2": "", "contributionType": "Uang"}
        ],
    }
    state = hydrate(blob)

    assert state.mosque_info == MosqueInfo(name="MASJID RAYA", year="1448 H", subtitle="TA'JIL")
    assert state.settings == PrintSettings()
    assert state.donors == [
        Donor(id="abc", no=3, name="BACO", date="01 Maret 2026", date2="", contribution_type="Uang")
    ]


def test_hydrate_broken_fields_fall_back_independently(caplog) -> None:
    blob = {
        "mosqueInfo": "garbled",
        "settings": {"marginTop": 10, "donorsPerPage": 0, "quality": "STANDAR"},
        "donors": [{"no": 1, "name": "NO ID"}],
    }
    state = hydrate(blob)

    assert state.mosque_info == MosqueInfo()
    assert state.settings.margin_top == 10
    assert state.settings.donors_per_page == 1
    assert state.settings.quality == "STANDAR"
    assert [d.no for d in state.donors] == [7, 8, 9]
    assert "Ignoring stored" in caplog.text


def test_hydrate_keeps_an_empty_donor_list() -> None:
    state = hydrate({"donors": []})
    assert state.donors == []
