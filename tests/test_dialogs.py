import pytest
from streamlit.testing.v1 import AppTest

from anesrec.models.app_types import TimeRecord
from anesrec.persistence.snapshot import Snapshot, load_snapshot, save_snapshot
from anesrec.projection.chart import EditTarget
from anesrec.ui.charts import PENDING_EDIT
from anesrec.ui.render import PENDING_CLEAR

EDIT_SCRIPT = """
from anesrec.config.settings import load_settings
from anesrec.state.init import ensure_init
from anesrec.ui.charts import render_pending_edit

render_pending_edit(ensure_init(load_settings()))
"""

CLEAR_SCRIPT = """
from anesrec.config.settings import load_settings
from anesrec.state.init import ensure_init
from anesrec.ui.render import record_actions

record_actions(ensure_init(load_settings()))
"""

PULSE = EditTarget(index=0, kind="vital", name="pulse", label="PULSE", time="09:00", current=90)


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("ANESREC_DATA_DIR", str(tmp_path))
    save_snapshot(tmp_path / "anesthesia_data.json", Snapshot(records=[TimeRecord(time="09:00", pulse=90)]))
    return tmp_path


def open_edit(script=EDIT_SCRIPT):
    at = AppTest.from_string(script)
    at.session_state[PENDING_EDIT] = PULSE
    return at.run()


# 1) Edit dialog

def test_edit_dialog_survives_plain_rerun(data_dir):
    at = open_edit()
    assert len(at.text_input) == 1

    # what the autorefresh tick does
    at.run()
    assert len(at.text_input) == 1
    assert at.session_state[PENDING_EDIT] == PULSE


def test_edit_dialog_confirm_applies_and_closes(data_dir):
    at = open_edit()
    at.text_input[0].set_value("95")
    at.button(key="edit_confirm").click().run()

    assert PENDING_EDIT not in at.session_state
    assert len(at.text_input) == 0
    assert load_snapshot(data_dir / "anesthesia_data.json").records[0].pulse == 95


def test_edit_dialog_cancel_closes_without_change(data_dir):
    at = open_edit()
    at.text_input[0].set_value("120")
    at.button(key="edit_cancel").click().run()

    assert PENDING_EDIT not in at.session_state
    assert len(at.text_input) == 0
    assert at.session_state["record"].store[0].pulse == 90


def test_edit_dialog_rejects_non_number(data_dir):
    at = open_edit()
    at.text_input[0].set_value("fast")
    at.button(key="edit_confirm").click().run()

    assert at.session_state[PENDING_EDIT] == PULSE
    assert len(at.warning) == 1
    assert at.session_state["record"].store[0].pulse == 90


# 2) Clear confirmation

def test_clear_dialog_survives_plain_rerun(data_dir):
    at = AppTest.from_string(CLEAR_SCRIPT)
    at.session_state[PENDING_CLEAR] = True
    at.run()
    assert at.button(key="clear_confirm")

    at.run()
    assert at.button(key="clear_confirm")

    at.button(key="clear_confirm").click().run()
    assert PENDING_CLEAR not in at.session_state
    assert len(at.session_state["record"].store) == 0
