from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional


# Chart constants
MIN_CHART_SLOTS: int = 20    # label axis is padded to at least this many slots
TIME_FORMAT: str = "%H:%M"   # record key, 24-hour clock


# Vital fields in logging/display order. Integer fields truncate decimal input.
INT_FIELDS = ("systolic", "diastolic", "pulse", "spo2", "etco2", "rr")
FLOAT_FIELDS = ("bt", "iso")
VITAL_FIELDS = ("systolic", "diastolic", "pulse", "spo2", "etco2", "bt", "rr", "iso")
EDITABLE_FIELDS = frozenset(VITAL_FIELDS)


# Form vocabularies
DRUG_OPTIONS: List[str] = sorted([
    "Acepromazine", "Alfaxalone", "Atipamazole", "Atropine", "Buprenorphine",
    "Butorphanol", "Cefazolin", "Dexmedetomidine", "Diazepam", "Dobutamine",
    "Dopamine", "Epinephrine", "Fentanyl", "Flumazenil",
    "Glycopyrrolate", "Ketamine", "Lidocaine", "Maropitant", "Meloxicam",
    "Methadone", "Midazolam", "Morphine", "Naloxone", "Propofol",
    "Zolazepam/Tiletamine (Zoletil)",
])
EPIDURAL_OPTIONS: List[str] = ["Lidocaine", "Bupivacaine", "Ropivacaine"]
IVC_SITES: List[str] = ["18G", "19G", "20G", "21G", "22G", "23G", "24G", "25G"]
ROUTE_OPTIONS: List[str] = ["IV", "IM", "SC"]
DOSE_UNITS: List[str] = ["mg/kg", "mcg/kg", "mg/m^2", "mcg/m^2", "mg/animal", "mcg/animal"]

AGE_YEARS: List[int] = list(range(0, 26))
AGE_MONTHS: List[int] = list(range(0, 13))
ET_TUBE_SIZES: List[str] = ["none"] + [f"{x / 2:g}" for x in range(5, 31)]  # 2.5 .. 15

PATIENT_FIELDS = (
    "pet-name", "animal-id", "breed", "date", "weight", "sex", "anesthetist", "surgeon", "procedure",
    "et-tube-size", "intubation-time", "extubation-time", "ivc-site", "bp-cuff-size",
    "age-y", "age-m", "setup-ventilator", "setup-mask",
)


@dataclass
class AxisBounds:
    min: float
    max: float          # default max; the axis only grows past it
    step: float         # tick spacing
    grow_step: float    # rounding unit when growing, 0 = fixed range
    title: str
    orient: str


@dataclass
class TimeRecord:
    """One logged instant on the vitals timeline.

    `mean` is derived from systolic/diastolic and is only ever written by
    `refresh_mean`. `fluids` is sparse and is `None` when no fluid was logged.
    """
    time: str
    systolic: Optional[int] = None
    diastolic: Optional[int] = None
    pulse: Optional[int] = None
    spo2: Optional[int] = None
    etco2: Optional[int] = None
    bt: Optional[float] = None
    rr: Optional[int] = None
    iso: Optional[float] = None
    mean: Optional[int] = None
    fluids: Optional[Dict[str, float]] = field(default=None)

    def refresh_mean(self) -> None:
        self.mean = mean_arterial_pressure(self.systolic, self.diastolic)

    def copy(self) -> "TimeRecord":
        return replace(self, fluids=dict(self.fluids) if self.fluids else None)


def mean_arterial_pressure(systolic: Optional[float], diastolic: Optional[float]) -> Optional[int]:
    """MAP = DIA + (SYS - DIA) / 3, rounded half up. None unless both are present."""
    if systolic is None or diastolic is None:
        return None
    value = diastolic + (systolic - diastolic) / 3
    # half-up rounding, not Python's round-half-even
    return math.floor(value + 0.5)
