"""Chart projection of the vitals store.

Turns the store into a renderer-neutral model: the padded label axis, one
`SeriesSpec` per channel and three y axes whose upper bounds grow with the
data. Nothing here mutates the store; point clicks are resolved into an
`EditTarget` which the caller hands back to `TimeSeriesStore.edit_field` or
`edit_fluid`.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from anesrec.config.axes import DEFAULT_AXES
from anesrec.models.app_types import MIN_CHART_SLOTS, AxisBounds, TimeRecord
from anesrec.store.channels import derive_channels, project_channel


# key, label, colour, marker shape, marker angle, dash, axis
FIXED_SERIES: Tuple[Tuple[str, str, str, str, int, Tuple[int, ...], str], ...] = (
    ("systolic", "SYS", "#ff6384", "triangle-down", 0, (), "vitals"),
    ("diastolic", "DIA", "#36a2eb", "triangle-up", 0, (), "vitals"),
    ("mean", "MEAN", "#6e7681", "diamond", 0, (5, 5), "vitals"),
    ("pulse", "PULSE", "#f1c40f", "circle", 0, (), "vitals"),
    ("spo2", "SpO2", "#2ecc71", "M0,-1L0.22,-0.31L0.95,-0.31L0.36,0.12L0.59,0.81L0,0.38L-0.59,0.81L-0.36,0.12L-0.95,-0.31L-0.22,-0.31Z", 0, (), "vitals"),
    ("etco2", "ETCO2", "#9b59b6", "cross", 45, (), "vitals"),
    ("bt", "BT", "#34495e", "square", 0, (), "vitals"),
    ("rr", "RR", "#00bcd4", "cross", 0, (), "vitals"),
    ("iso", "ISO", "#e67e22", "circle", 0, (2, 2), "iso"),
)

FLUID_COLORS = ["#e74c3c", "#3498db", "#1abc9c", "#f39c12", "#9b59b6", "#34495e"]
FLUID_PREFIX = "fluid:"

# fields whose values decide the vitals axis height (RR and MEAN are excluded)
VITALS_AXIS_FIELDS = ("systolic", "diastolic", "pulse", "spo2", "etco2", "bt")


@dataclass
class SeriesSpec:
    key: str
    label: str
    color: str
    shape: str
    angle: int
    dash: Tuple[int, ...]
    axis: str
    data: List[Optional[float]] = field(default_factory=list)


@dataclass
class AxisSpec:
    name: str
    min: float
    max: float
    step: float
    title: str
    orient: str


@dataclass
class ChartModel:
    labels: List[str]
    series: List[SeriesSpec]
    axes: Dict[str, AxisSpec]
    width: Optional[int]   # None = natural container width

    @property
    def slot_count(self) -> int:
        return len(self.labels)

    def series_by_key(self, key: str) -> Optional[SeriesSpec]:
        return next((s for s in self.series if s.key == key), None)


@dataclass(frozen=True)
class EditTarget:
    index: int
    kind: str        # "vital" or "fluid"
    name: str        # vital field name or fluid channel name
    label: str
    time: str
    current: Optional[float]


def chart_labels(records: Sequence[TimeRecord], min_slots: int = MIN_CHART_SLOTS) -> List[str]:
    labels = [r.time for r in records]
    labels.extend([""] * max(0, min_slots - len(labels)))
    return labels


def grown_max(values: Iterable[Optional[float]], bounds: AxisBounds) -> float:
    """Default max unless some value exceeds it; then round up to `grow_step`."""
    if not bounds.grow_step:
        return bounds.max
    present = [v for v in values if v is not None]
    peak = max(present) if present else 0
    if peak > bounds.max:
        return math.ceil(peak / bounds.grow_step) * bounds.grow_step
    return bounds.max


def vitals_axis_max(records: Sequence[TimeRecord], bounds: AxisBounds = DEFAULT_AXES["vitals"]) -> float:
    values = (getattr(r, f) for r in records for f in VITALS_AXIS_FIELDS)
    return grown_max(values, bounds)


def fluid_axis_max(records: Sequence[TimeRecord], bounds: AxisBounds = DEFAULT_AXES["fluid"]) -> float:
    values = (rate for r in records if r.fluids for rate in r.fluids.values())
    return grown_max(values, bounds)


def scroll_width(slot_count: int, px_per_slot: int, min_slots: int = MIN_CHART_SLOTS) -> Optional[int]:
    if slot_count > min_slots:
        return slot_count * px_per_slot
    return None


def _padded(values: List[Optional[float]], length: int) -> List[Optional[float]]:
    return values + [None] * (length - len(values))


def build_chart_model(
    records: Sequence[TimeRecord],
    px_per_slot: int = 40,
    axes: Dict[str, AxisBounds] = DEFAULT_AXES,
) -> ChartModel:
    records = list(records)
    labels = chart_labels(records)
    n = len(labels)

    series = [
        SeriesSpec(key, label, color, shape, angle, dash, axis,
                   _padded([getattr(r, key) for r in records], n))
        for key, label, color, shape, angle, dash, axis in FIXED_SERIES
    ]
    for i, name in enumerate(derive_channels(records)):
        series.append(SeriesSpec(
            key=FLUID_PREFIX + name,
            label=name,
            color=FLUID_COLORS[i % len(FLUID_COLORS)],
            shape="square",
            angle=0,
            dash=(),
            axis="fluid",
            data=_padded(project_channel(records, name), n),
        ))

    maxima = {
        "vitals": vitals_axis_max(records, axes["vitals"]),
        "fluid": fluid_axis_max(records, axes["fluid"]),
        "iso": axes["iso"].max,
    }
    axis_specs = {
        name: AxisSpec(name, b.min, maxima[name], b.step, b.title, b.orient)
        for name, b in axes.items()
    }
    return ChartModel(labels, series, axis_specs, scroll_width(n, px_per_slot))


def resolve_point(records: Sequence[TimeRecord], slot: int, series_key: str) -> Optional[EditTarget]:
    """Map a clicked (slot, series) to the store value behind it.

    Padded slots and the derived MEAN series have nothing to edit.
    """
    if not 0 <= slot < len(records) or series_key == "mean":
        return None
    record = records[slot]

    if series_key.startswith(FLUID_PREFIX):
        name = series_key[len(FLUID_PREFIX):]
        current = record.fluids.get(name) if record.fluids else None
        return EditTarget(slot, "fluid", name, name, record.time, current)

    for key, label, *_ in FIXED_SERIES:
        if key == series_key:
            return EditTarget(slot, "vital", key, label, record.time, getattr(record, key))
    return None


def chart_frame(model: ChartModel) -> pd.DataFrame:
    """Long-form frame for the renderer, one row per present point.

    Missing readings are dropped rather than stored as gaps so that each
    series' line runs straight across them.
    """
    slots = np.arange(model.slot_count)
    rows = []
    for order, s in enumerate(model.series):
        for slot, value in zip(slots, s.data):
            if value is None:
                continue
            rows.append({
                "slot": int(slot),
                "time": model.labels[slot],
                "series": s.key,
                "label": s.label,
                "axis": s.axis,
                "order": order,
                "value": float(value),
            })
    return pd.DataFrame(rows, columns=["slot", "time", "series", "label", "axis", "order", "value"])
