"""
app.py
Streamlit editor for the Ta'jil donor schedule (header, print margins, donor roster).
Run: streamlit run app.py
"""

from __future__ import annotations

import logging
from html import escape

import pandas as pd
import streamlit as st
import streamlit.components.v1 as components

import db
import exports
import store
import utils
from models import QUALITY_OPTIONS, MARGIN_MAX, MosqueInfo

logging.basicConfig(level=logging.INFO,
                    format="%(asctime)s - %(levelname)s - %(message)s")

st.set_page_config(page_title="Editor Jadwal Ta'jil", layout="wide")


def _persist(snapshot: dict) -> None:
    db.save_state(snapshot)


def init_once():
    # Hydrate once per session; every later change is written back through _persist
    if "schedule" in st.session_state:
        return
    db.init_db()
    state = store.hydrate(db.load_state())
    state.subscribe(_persist)
    st.session_state.schedule = state
    st.session_state.edit_donor_id = None


def get_state() -> store.ScheduleState:
    return st.session_state.schedule


def header_card():
    state = get_state()
    info = state.mosque_info
    st.subheader("🕌 Kepala Surat")
    with st.form("mosque_info_form"):
        name = st.text_input("Nama Masjid", value=info.name)
        year = st.text_input("Tahun Hijriyah", value=info.year)
        subtitle = st.text_input("Sub Judul", value=info.subtitle)
        if st.form_submit_button("Simpan", type="primary"):
            state.set_mosque_info(MosqueInfo(name=name, year=year, subtitle=subtitle))
            st.success("Kepala surat disimpan.")
            st.rerun()


def settings_card():
    state = get_state()
    s = state.settings
    st.subheader("📐 Presisi Margin (A4 Full)")
    with st.form("print_settings_form"):
        c1, c2 = st.columns(2)
        with c1:
            top = st.slider("Margin Atas (mm)", 0, int(MARGIN_MAX), int(s.margin_top))
            left = st.slider("Margin Kiri (mm)", 0, int(MARGIN_MAX), int(s.margin_left))
        with c2:
            bottom = st.slider("Margin Bawah (mm)", 0, int(MARGIN_MAX), int(s.margin_bottom))
            right = st.slider("Margin Kanan (mm)", 0, int(MARGIN_MAX), int(s.margin_right))

        c3, c4, c5 = st.columns(3)
        with c3:
            scale = st.text_input("Skala (%)", value=f"{s.scale:g}")
        with c4:
            per_page = st.text_input("Donatur/Hal", value=str(s.donors_per_page))
        with c5:
            quality = st.selectbox(
                "Kualitas", options=list(QUALITY_OPTIONS), index=list(QUALITY_OPTIONS).index(s.quality)
            )

        if st.form_submit_button("Simpan", type="primary"):
            # Unusable numbers fall back to the current values
            state.set_settings(
                {
                    "marginTop": top,
                    "marginBottom": bottom,
                    "marginLeft": left,
                    "marginRight": right,
                    "scale": scale,
                    "donorsPerPage": per_page,
                    "quality": quality,
                }
            )
            st.success("Pengaturan cetak disimpan.")
            st.rerun()


def donor_form(existing):
    state = get_state()
    st.subheader(f"✏️ Ubah Data Donatur ({existing.name})")
    with st.form("donor_form"):
        no = st.text_input("No Urut", value=str(existing.no))
        name = st.text_input("Nama Donatur", value=existing.name)
        date1 = st.text_input("Jadwal Tanggal (Baris 1)", value=existing.date)
        date2 = st.text_input("Jadwal Tanggal (Baris 2)", value=existing.date2)
        contribution = st.text_input("Jenis Sumbangan", value=existing.contribution_type)

        c1, c2 = st.columns(2)
        save = c1.form_submit_button("Simpan", type="primary")
        cancel = c2.form_submit_button("Batal")

    if save:
        found = state.update_donor(
            existing.id,
            {
                "no": no,
                "name": name,
                "date": date1,
                "date2": date2,
                "contribution_type": contribution,
            },
        )
        st.session_state.edit_donor_id = None
        if found:
            st.success("Data donatur disimpan.")
        else:
            st.warning("Donatur sudah tidak ada.")
        st.rerun()
    if cancel:
        st.session_state.edit_donor_id = None
        st.rerun()


def import_section():
    state = get_state()
    uploaded = st.file_uploader("Upload (.xlsx / .csv)", type=["xlsx", "csv"])
    if uploaded is not None and st.button("Impor data"):
        try:
            rows = utils.read_table(uploaded.getvalue(), uploaded.name)
        except ValueError as e:
            st.error(str(e))
            return
        count = state.import_rows(rows)
        if count:
            st.success(f"{count} donatur berhasil diimpor.")
        else:
            st.info("Tidak ada baris yang bisa diimpor.")


def export_section():
    state = get_state()
    c1, c2 = st.columns(2)
    with c1:
        st.download_button(
            "📗 EXCEL",
            data=exports.donors_to_xlsx_bytes(state.mosque_info, state.donors),
            file_name=exports.XLSX_FILENAME,
            mime=exports.XLSX_MIME,
        )
    with c2:
        st.download_button(
            "📘 WORD",
            data=exports.donors_to_doc_bytes(state.mosque_info, state.donors),
            file_name=exports.DOC_FILENAME,
            mime=exports.DOC_MIME,
        )


def donors_table():
    state = get_state()
    st.subheader("👥 Daftar Donatur")

    search = st.text_input("Cari...", value="")
    rows = state.search(search)

    df = pd.DataFrame(
        [
            {
                "id": d.id,
                "No": d.no,
                "Nama": d.name,
                "Tanggal": d.date,
                "Tanggal 2": d.date2,
                "Jenis Sumbangan": d.contribution_type,
            }
            for d in rows
        ],
        columns=["id", "No", "Nama", "Tanggal", "Tanggal 2", "Jenis Sumbangan"],
    )
    if df.empty:
        st.caption("Tidak ada data donatur ditemukan...")
    else:
        st.dataframe(df.drop(columns=["id"]), use_container_width=True, hide_index=True)

    c1, c2, c3 = st.columns([1, 2, 1])
    with c1:
        if st.button("➕ TAMBAH", type="primary"):
            state.add_donor()
            st.rerun()

    with c2:
        labels = {d.id: f"{d.no}. {d.name}" for d in rows}
        chosen = st.selectbox(
            "Pilih donatur",
            key="donor_pick",
            options=[None] + list(labels.keys()),
            format_func=lambda donor_id: "(none)" if donor_id is None else labels[donor_id],
        )
        if chosen is not None:
            a1, a2, a3 = st.columns(3)
            with a1:
                if st.button("Ubah"):
                    st.session_state.edit_donor_id = chosen
                    st.rerun()
            with a2:
                delete_confirm = st.checkbox("Konfirmasi hapus", value=False, key="del_confirm")
            with a3:
                if st.button("Hapus", disabled=not delete_confirm):
                    state.delete_donor(chosen)
                    # confirmation is per action
                    st.session_state.pop("del_confirm", None)
                    st.session_state.pop("donor_pick", None)
                    st.success("Donatur dihapus.")
                    st.rerun()

    with c3:
        clear_confirm = st.checkbox("Hapus semua data donatur?", value=False, key="clear_confirm")
        if st.button("🗑️ Hapus semua", disabled=not clear_confirm):
            state.clear_donors()
            st.session_state.pop("clear_confirm", None)
            st.session_state.pop("donor_pick", None)
            st.session_state.pop("del_confirm", None)
            st.success("Semua data donatur dihapus.")
            st.rerun()

    if st.session_state.get("edit_donor_id"):
        existing = next((d for d in state.donors if d.id == st.session_state.edit_donor_id), None)
        if existing:
            donor_form(existing)
        else:
            st.session_state.edit_donor_id = None


def print_preview():
    state = get_state()
    st.subheader("🖨️ Pratinjau")
    st.caption(f"{len(state.donors)} donatur, {len(state.pages())} halaman.")
    html = exports.print_layout_html(state.mosque_info, state.settings, state.donors)
    trigger = (
        "<button onclick=\"document.getElementById('sheet').contentWindow.print()\">Cetak</button>"
        f"<iframe id=\"sheet\" srcdoc=\"{escape(html, quote=True)}\" style=\"width:100%;height:760px;border:1px solid #ccc\"></iframe>"
    )
    components.html(trigger, height=820, scrolling=True)

def main_app():
    st.sidebar.title("📝 Editor Jadwal Ta'jil")

    pages = ["Editor", "Pratinjau"]
    if "page" not in st.session_state:
        st.session_state.page = "Editor"
    st.session_state.page = st.sidebar.radio("Navigate", pages, index=pages.index(st.session_state.page))

    if st.session_state.page == "Editor":
        col1, col2 = st.columns(2)
        with col1:
            header_card()
        with col2:
            settings_card()

        st.divider()
        import_section()
        export_section()
        st.divider()
        donors_table()
    elif st.session_state.page == "Pratinjau":
        print_preview()


# --------- App entry ---------

def run():
    init_once()
    main_app()


if __name__ == "__main__":
    run()
