from __future__ import annotations

from typing import Dict

from anesrec.models.app_types import AxisBounds


DEFAULT_AXES: Dict[str, AxisBounds] = {
    "vitals": AxisBounds(0, 200, 20, 20, "Vitals", "left"),
    "fluid": AxisBounds(0, 50, 5, 10, "Fluid Rate (ml/hr)", "right"),
    "iso": AxisBounds(0, 5, 0.5, 0, "ISO %", "right"),
}
