# Dose totals for drug and epidural rows.
# Weight-based units (/kg, /m^2) are multiplied by the patient weight;
# per-animal units are taken as-is. Missing weight counts as 1.

from typing import Any


def _to_float(x: Any) -> float | None:
    try:
        return float(x)
    except (TypeError, ValueError):
        return None


def needs_weight(unit: str) -> bool:
    return "/kg" in unit or "/m^2" in unit


def total_unit(unit: str) -> str:
    if "mg" in unit:
        return "mg"
    if "mcg" in unit:
        return "mcg"
    return ""


def dose_total(dose: Any, unit: str, weight: Any) -> float:
    d = _to_float(dose) or 0.0
    w = _to_float(weight) or 1.0
    return d * w if needs_weight(unit or "") else d


def format_total(dose: Any, unit: str, weight: Any) -> str:
    """Display string for the Total column, e.g. '2.500 mg' or '--'."""
    total = dose_total(dose, unit, weight)
    if not total:
        return "--"
    return f"{total:.3f} {total_unit(unit or '')}".rstrip()
