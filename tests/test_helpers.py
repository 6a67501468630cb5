from anesrec.ui.helpers import apply_editor_state, fmt_value


BLANK = {"name": "", "dose": "", "unit": "mg/kg"}


def rows():
    return [
        {"name": "Propofol", "dose": "4", "unit": "mg/kg"},
        {"name": "Fentanyl", "dose": "2", "unit": "mcg/kg"},
    ]


def test_fmt_value():
    assert fmt_value(None) == "--"
    assert fmt_value(38.5) == "38.5"
    assert fmt_value(120) == "120"


def test_edits_apply_and_none_becomes_blank():
    out = apply_editor_state(rows(), {"edited_rows": {1: {"dose": "3", "name": None}}}, BLANK)
    assert out[1] == {"name": "", "dose": "3", "unit": "mcg/kg"}


def test_computed_columns_are_ignored():
    out = apply_editor_state(rows(), {"edited_rows": {0: {"Total": "99 mg"}}}, BLANK, computed=("Total",))
    assert out == rows()


def test_added_rows_start_from_blank():
    out = apply_editor_state(rows(), {"added_rows": [{"name": "Ketamine"}]}, BLANK)
    assert out[-1] == {"name": "Ketamine", "dose": "", "unit": "mg/kg"}


def test_deletes_use_original_positions():
    state = {
        "edited_rows": {"1": {"dose": "5"}},
        "added_rows": [{}],
        "deleted_rows": [0],
    }
    out = apply_editor_state(rows(), state, BLANK)
    assert [r["name"] for r in out] == ["Fentanyl", ""]
    assert out[0]["dose"] == "5"


def test_input_rows_are_not_mutated():
    original = rows()
    apply_editor_state(original, {"edited_rows": {0: {"dose": "9"}}}, BLANK)
    assert original[0]["dose"] == "4"
