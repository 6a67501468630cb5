from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence, Tuple

import pandas as pd

from anesrec.models.app_types import TimeRecord
from anesrec.store.channels import derive_channels
from anesrec.store.timeseries import TimeSeriesStore


VITAL_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("SYS", "systolic"),
    ("DIA", "diastolic"),
    ("MEAN", "mean"),
    ("PULSE", "pulse"),
    ("SpO2", "spo2"),
    ("ETCO2", "etco2"),
    ("BT", "bt"),
    ("RR", "rr"),
    ("ISO %", "iso"),
)
READONLY_COLUMNS = ("Time", "MEAN")
DELETE_COLUMN = "Delete"


def fluid_column(name: str) -> str:
    return f"{name} (ml/hr)"


@dataclass
class HistoryTable:
    """Most-recent-first view of the store.

    `routes` maps each editable column to ("vital", field), ("fluid", channel)
    or ("delete", ""). `store_indices[row]` is the store index shown on
    display row `row`.
    """
    frame: pd.DataFrame
    routes: Dict[str, Tuple[str, str]]
    store_indices: List[int]
    channels: List[str]


def build_history_table(records: Sequence[TimeRecord]) -> HistoryTable:
    channels = derive_channels(records)
    store_indices = list(range(len(records) - 1, -1, -1))

    routes: Dict[str, Tuple[str, str]] = {}
    for column, field in VITAL_COLUMNS:
        if column not in READONLY_COLUMNS:
            routes[column] = ("vital", field)
    for name in channels:
        routes[fluid_column(name)] = ("fluid", name)
    routes[DELETE_COLUMN] = ("delete", "")

    rows = []
    for i in store_indices:
        r = records[i]
        row: Dict[str, Any] = {"Time": r.time}
        for column, field in VITAL_COLUMNS:
            row[column] = getattr(r, field)
        for name in channels:
            row[fluid_column(name)] = r.fluids.get(name) if r.fluids else None
        row[DELETE_COLUMN] = False
        rows.append(row)

    columns = ["Time"] + [c for c, _ in VITAL_COLUMNS] + [fluid_column(n) for n in channels] + [DELETE_COLUMN]
    frame = pd.DataFrame(rows, columns=columns)
    return HistoryTable(frame, routes, store_indices, channels)


def apply_history_edits(
    store: TimeSeriesStore,
    table: HistoryTable,
    edited_rows: Mapping[Any, Mapping[str, Any]],
) -> int:
    """Forward `st.data_editor` edits to the store; returns how many took effect.

    Deletions run after all cell edits, highest store index first, so the
    indices captured in `table` stay valid for the whole batch.
    """
    applied = 0
    deletes = set()
    for pos, changes in edited_rows.items():
        index = table.store_indices[int(pos)]
        for column, value in changes.items():
            route = table.routes.get(column)
            if route is None:
                continue
            kind, name = route
            if kind == "delete":
                if value:
                    deletes.add(index)
            elif kind == "vital":
                applied += store.edit_field(index, name, value)
            else:
                applied += store.edit_fluid(index, name, value)

    for index in sorted(deletes, reverse=True):
        store.delete_record(index)
        applied += 1
    return applied
