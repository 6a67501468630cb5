"""The anesthesia record for one case.

`AnesthesiaSession` owns the vitals store plus the side tables (patient
fields, drugs, fluid rows, epidurals, notes) and the case timer. It is the
single subscriber to the store: every store mutation runs the whole pipeline
(channel set -> chart model -> history table -> save) before control returns
to the caller, so the UI always renders from up-to-date projections.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from anesrec.config.settings import Settings
from anesrec.persistence.snapshot import (
    Snapshot,
    default_snapshot,
    dumps,
    load_snapshot,
    parse_snapshot,
    save_snapshot,
)
from anesrec.projection.chart import ChartModel, EditTarget, build_chart_model
from anesrec.projection.history import HistoryTable, apply_history_edits, build_history_table
from anesrec.store.channels import derive_channels
from anesrec.store.timeseries import TimeSeriesStore
from anesrec.timer.case_timer import CaseTimer, load_timer, save_timer

logger = logging.getLogger(__name__)


class AnesthesiaSession:
    def __init__(
        self,
        settings: Settings,
        snapshot: Optional[Snapshot] = None,
        timer: Optional[CaseTimer] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.settings = settings
        self.timer = timer or CaseTimer()
        self.revision = 0   # bumped on every store pipeline run
        self.epoch = 0      # bumped when the whole record is replaced

        snapshot = snapshot or default_snapshot()
        self._set_side_tables(snapshot)
        self.store = TimeSeriesStore(snapshot.records, clock=clock)
        self.store.subscribe(self._on_store_change)
        self._recompute()

    @classmethod
    def open(cls, settings: Settings, clock: Callable[[], datetime] = datetime.now) -> "AnesthesiaSession":
        snapshot = load_snapshot(settings.snapshot_path)
        timer = load_timer(settings.timer_path)
        logger.info("Opened record with %d vitals entries from %s", len(snapshot.records), settings.snapshot_path)
        return cls(settings, snapshot, timer, clock)

    # -- pipeline -----------------------------------------------------------

    def _on_store_change(self, store: TimeSeriesStore) -> None:
        self._recompute()
        self.save()

    def _recompute(self) -> None:
        records = self.store.records
        self.channels: List[str] = derive_channels(records)
        self.chart: ChartModel = build_chart_model(records, px_per_slot=self.settings.px_per_slot)
        self.history: HistoryTable = build_history_table(records)
        self.revision += 1

    # -- snapshot -----------------------------------------------------------

    def _set_side_tables(self, snapshot: Snapshot) -> None:
        self.patient: Dict[str, Any] = dict(snapshot.patient)
        self.drugs: List[Dict[str, Any]] = [dict(r) for r in snapshot.drugs]
        self.fluid_rows: List[Dict[str, Any]] = [dict(r) for r in snapshot.fluids]
        self.epidurals: List[Dict[str, Any]] = [dict(r) for r in snapshot.epidurals]
        self.notes: str = snapshot.notes

    def snapshot(self) -> Snapshot:
        return Snapshot(
            patient=dict(self.patient),
            drugs=[dict(r) for r in self.drugs],
            fluids=[dict(r) for r in self.fluid_rows],
            epidurals=[dict(r) for r in self.epidurals],
            records=[r.copy() for r in self.store],
            notes=self.notes,
        )

    def save(self) -> None:
        save_snapshot(self.settings.snapshot_path, self.snapshot())

    def save_timer(self) -> None:
        save_timer(self.settings.timer_path, self.timer)

    def export_json(self) -> str:
        return dumps(self.snapshot())

    def import_json(self, text: str) -> None:
        """Replace the whole record with an exported snapshot (blank if unreadable)."""
        self._replace(parse_snapshot(text))

    def clear(self) -> None:
        for path in (self.settings.snapshot_path, self.settings.timer_path):
            path.unlink(missing_ok=True)
        self.timer = CaseTimer()
        self._replace(default_snapshot())
        logger.info("Cleared anesthesia record")

    def _replace(self, snapshot: Snapshot) -> None:
        self._set_side_tables(snapshot)
        self.epoch += 1
        self.store.replace_all(snapshot.records)

    # -- vitals -------------------------------------------------------------

    def log_vitals(self, **fields: Any) -> bool:
        return self.store.log_vitals(**fields)

    def log_fluid_row(self, row: int) -> bool:
        """LOG button of a fluid row: chart the rate now, then clear the rate box."""
        entry = self.fluid_rows[row]
        if not self.store.log_fluid_pulse(entry.get("name", ""), entry.get("rate", "")):
            return False
        entry["rate"] = ""
        self.save()
        return True

    def apply_point_edit(self, target: EditTarget, raw: Any) -> bool:
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return False
        if target.kind == "fluid":
            return self.store.edit_fluid(target.index, target.name, raw)
        return self.store.edit_field(target.index, target.name, raw)

    def apply_history_edits(self, table: HistoryTable, edited_rows: Mapping[Any, Mapping[str, Any]]) -> int:
        return apply_history_edits(self.store, table, edited_rows)

    # -- side tables --------------------------------------------------------

    def update_patient(self, field: str, value: Any) -> None:
        self.patient[field] = value
        self.save()

    def set_notes(self, notes: str) -> None:
        self.notes = notes
        self.save()

    def set_rows(self, table: str, rows: List[Dict[str, Any]]) -> None:
        if table not in ("drugs", "fluid_rows", "epidurals"):
            raise KeyError(f"unknown table: {table!r}")
        setattr(self, table, [dict(r) for r in rows])
        self.save()

    # -- timer --------------------------------------------------------------

    def start_timer(self) -> None:
        if self.timer.start():
            self.save_timer()

    def stop_timer(self) -> None:
        if self.timer.stop():
            self.save_timer()
