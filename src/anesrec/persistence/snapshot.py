"""Snapshot (de)serialisation for an anesthesia record.

The on-disk shape mirrors the browser record the app replaces:

    {"patient": {...}, "drugs": [...], "fluids": [...], "epidurals": [...],
     "vitals": {"times": [...], "systolic": [...], ..., "fluids": [...]},
     "notes": "..."}

`vitals` stores the timeline column-wise; every array is indexed by record.
Loading is forgiving: missing arrays mean an empty timeline, short arrays are
padded with no-reading, and anything unreadable falls back to a blank record.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from anesrec.models.app_types import INT_FIELDS, TimeRecord
from anesrec.store.timeseries import InvalidReadingError, parse_reading

logger = logging.getLogger(__name__)

VITALS_KEYS = ("systolic", "diastolic", "mean", "pulse", "spo2", "etco2", "bt", "rr", "iso")


def blank_drug_row() -> Dict[str, str]:
    return {"name": "", "dose": "", "unit": "mg/kg", "route": "IV", "time": ""}


def blank_fluid_row() -> Dict[str, str]:
    return {"name": "", "rate": ""}


def blank_epidural_row() -> Dict[str, str]:
    return {"drug": "", "dose": "", "unit": "mg/kg", "route": ""}


@dataclass
class Snapshot:
    patient: Dict[str, Any] = field(default_factory=dict)
    drugs: List[Dict[str, Any]] = field(default_factory=list)
    fluids: List[Dict[str, Any]] = field(default_factory=list)
    epidurals: List[Dict[str, Any]] = field(default_factory=list)
    records: List[TimeRecord] = field(default_factory=list)
    notes: str = ""


def default_snapshot() -> Snapshot:
    """Empty record with one blank row per auxiliary table."""
    return Snapshot(
        drugs=[blank_drug_row()],
        fluids=[blank_fluid_row()],
        epidurals=[blank_epidural_row()],
    )


# -- vitals ---------------------------------------------------------------

def vitals_to_dict(records: Sequence[TimeRecord]) -> Dict[str, list]:
    data: Dict[str, list] = {"times": [r.time for r in records]}
    for key in VITALS_KEYS:
        data[key] = [getattr(r, key) for r in records]
    data["fluids"] = [dict(r.fluids) if r.fluids else None for r in records]
    return data


def _reading(values: Any, i: int, key: str) -> Optional[float]:
    if i >= len(values):
        return None
    try:
        return parse_reading(values[i], integer=key in INT_FIELDS)
    except InvalidReadingError:
        logger.warning("Dropping unreadable %s value %r at row %d", key, values[i], i)
        return None


def _fluid_map(raw: Any) -> Optional[Dict[str, float]]:
    if not isinstance(raw, dict):
        return None
    # older records stored a single {"name": ..., "rate": ...} pair
    if set(raw) == {"name", "rate"} and isinstance(raw["name"], str):
        raw = {raw["name"]: raw["rate"]}
    rates = {}
    for name, rate in raw.items():
        try:
            value = parse_reading(rate)
        except InvalidReadingError:
            logger.warning("Dropping unreadable rate %r for fluid %r", rate, name)
            continue
        if value is not None and str(name):
            rates[str(name)] = value
    return rates or None


def vitals_from_dict(data: Any) -> List[TimeRecord]:
    if not isinstance(data, dict):
        raise ValueError("vitals must be an object")
    times = data.get("times") or []
    if not isinstance(times, list):
        raise ValueError("vitals.times must be a list")

    columns = {}
    for key in VITALS_KEYS + ("fluids",):
        values = data.get(key) or []
        if not isinstance(values, list):
            raise ValueError(f"vitals.{key} must be a list")
        columns[key] = values

    records = []
    for i, t in enumerate(times):
        record = TimeRecord(time=str(t) if t is not None else "")
        for key in VITALS_KEYS:
            if key != "mean":
                setattr(record, key, _reading(columns[key], i, key))
        fluids = columns["fluids"]
        record.fluids = _fluid_map(fluids[i]) if i < len(fluids) else None
        record.refresh_mean()
        records.append(record)
    return records


# -- whole snapshot ---------------------------------------------------------

def to_dict(snapshot: Snapshot) -> Dict[str, Any]:
    return {
        "patient": dict(snapshot.patient),
        "drugs": [dict(r) for r in snapshot.drugs],
        "fluids": [dict(r) for r in snapshot.fluids],
        "epidurals": [dict(r) for r in snapshot.epidurals],
        "vitals": vitals_to_dict(snapshot.records),
        "notes": snapshot.notes,
    }


def _rows(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    rows = data.get(key) or []
    if not isinstance(rows, list):
        raise ValueError(f"{key} must be a list")
    return [dict(r) for r in rows if isinstance(r, dict)]


def from_dict(data: Any) -> Snapshot:
    """Build a Snapshot from a (possibly partial) decoded object.

    Raises ValueError/TypeError on structurally wrong input; `parse_snapshot`
    turns those into the blank fallback.
    """
    if not isinstance(data, dict):
        raise ValueError("snapshot must be an object")
    patient = data.get("patient") or {}
    if not isinstance(patient, dict):
        raise ValueError("patient must be an object")
    notes = data.get("notes") or ""
    return Snapshot(
        patient=dict(patient),
        drugs=_rows(data, "drugs"),
        fluids=_rows(data, "fluids"),
        epidurals=_rows(data, "epidurals"),
        records=vitals_from_dict(data["vitals"]) if data.get("vitals") else [],
        notes=str(notes),
    )


def dumps(snapshot: Snapshot) -> str:
    return json.dumps(to_dict(snapshot), indent=2)


def parse_snapshot(text: Optional[str]) -> Snapshot:
    if not text or not text.strip():
        return default_snapshot()
    try:
        return from_dict(json.loads(text))
    except (json.JSONDecodeError, TypeError, ValueError, RecursionError) as e:
        logger.warning("Snapshot unreadable, starting a blank record: %s", e)
        return default_snapshot()


def save_snapshot(path: Path, snapshot: Snapshot) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(snapshot), encoding="utf-8")


def load_snapshot(path: Path) -> Snapshot:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return default_snapshot()
    except (OSError, ValueError) as e:
        logger.warning("Could not read snapshot %s: %s", path, e)
        return default_snapshot()
    return parse_snapshot(text)


def export_filename(now: datetime, ext: str = "json") -> str:
    return f"anesthesia_record_{now.strftime('%Y-%m-%d_%H-%M')}.{ext}"
