from __future__ import annotations

from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

import db

APP_FILE = str(Path(__file__).resolve().parent.parent / "app.py")


@pytest.fixture
def app(tmp_path, monkeypatch):
    monkeypatch.setattr(db, "DB_FILE", tmp_path / "tajil_app_test.db")
    at = AppTest.from_file(APP_FILE, default_timeout=30)
    return at.run()


def _button(at, label):
    return next(b for b in at.button if b.label == label)


def test_clear_all_needs_a_fresh_confirmation_each_time(app) -> None:
    at = app
    assert len(at.session_state["schedule"].donors) == 3

    at.checkbox(key="clear_confirm").check().run()
    _button(at, "🗑️ Hapus semua").click().run()

    assert at.session_state["schedule"].donors == []
    assert db.load_state()["donors"] == []
    assert at.checkbox(key="clear_confirm").value is False
    assert _button(at, "🗑️ Hapus semua").disabled


def test_delete_confirmation_does_not_carry_over_to_next_donor(app) -> None:
    at = app
    first, second = at.session_state["schedule"].donors[:2]

    at.selectbox(key="donor_pick").set_value(first.id).run()
    at.checkbox(key="del_confirm").check().run()
    _button(at, "Hapus").click().run()

    remaining = at.session_state["schedule"].donors
    assert first.id not in {d.id for d in remaining}

    at.selectbox(key="donor_pick").set_value(second.id).run()
    assert at.checkbox(key="del_confirm").value is False
    assert _button(at, "Hapus").disabled
