from anesrec.projection.history import (
    DELETE_COLUMN,
    build_history_table,
    apply_history_edits,
    fluid_column,
)

from conftest import log_minutes


def seeded(store, clock):
    log_minutes(store, clock, [
        {"systolic": 120, "diastolic": 80, "pulse": 90},
        {"pulse": 92},
        {"spo2": 97},
    ])
    store.edit_fluid(1, "LRS", 10)


def test_rows_are_most_recent_first(store, clock):
    seeded(store, clock)
    table = build_history_table(store.records)

    assert table.frame["Time"].tolist() == ["09:02", "09:01", "09:00"]
    assert table.store_indices == [2, 1, 0]
    assert table.frame.loc[2, "MEAN"] == 93
    assert table.frame.loc[1, fluid_column("LRS")] == 10
    assert table.frame[DELETE_COLUMN].tolist() == [False, False, False]


def test_columns_include_one_per_channel(store, clock):
    seeded(store, clock)
    table = build_history_table(store.records)

    assert fluid_column("LRS") in table.frame.columns
    assert table.routes[fluid_column("LRS")] == ("fluid", "LRS")
    assert table.routes["SYS"] == ("vital", "systolic")
    assert "MEAN" not in table.routes
    assert "Time" not in table.routes


def test_empty_store_gives_empty_frame():
    table = build_history_table([])
    assert table.frame.empty
    assert list(table.frame.columns)[0] == "Time"
    assert table.channels == []


def test_edit_routes_display_row_to_store_index(store, clock):
    seeded(store, clock)
    table = build_history_table(store.records)

    # display row 2 is the oldest record
    applied = apply_history_edits(store, table, {2: {"SYS": 150, "DIA": "90"}})

    assert applied == 2
    assert (store[0].systolic, store[0].diastolic, store[0].mean) == (150, 90, 110)


def test_fluid_cell_edit_and_clear(store, clock):
    seeded(store, clock)
    table = build_history_table(store.records)

    apply_history_edits(store, table, {"1": {fluid_column("LRS"): None}})
    assert store[1].fluids is None


def test_rejected_edit_is_not_counted(store, clock):
    seeded(store, clock)
    table = build_history_table(store.records)

    assert apply_history_edits(store, table, {0: {"SpO2": "high", "MEAN": 1}}) == 0
    assert store[2].spo2 == 97


def test_delete_rows_keeps_indices_valid(store, clock):
    seeded(store, clock)
    table = build_history_table(store.records)

    applied = apply_history_edits(store, table, {
        0: {DELETE_COLUMN: True},
        2: {DELETE_COLUMN: True, "PULSE": 70},
    })

    assert applied == 3
    assert len(store) == 1
    assert store[0].time == "09:01"
    assert store[0].pulse == 92


def test_unticked_delete_does_nothing(store, clock):
    seeded(store, clock)
    table = build_history_table(store.records)
    assert apply_history_edits(store, table, {0: {DELETE_COLUMN: False}}) == 0
    assert len(store) == 3
