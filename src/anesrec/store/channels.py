from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from anesrec.models.app_types import TimeRecord


def derive_channels(records: Iterable[TimeRecord]) -> List[str]:
    """Sorted union of fluid names used anywhere on the timeline."""
    names = set()
    for r in records:
        if r.fluids:
            names.update(r.fluids.keys())
    return sorted(names)


def project_channel(records: Sequence[TimeRecord], name: str) -> List[Optional[float]]:
    """One rate per record for `name`; None where that fluid was not logged."""
    return [r.fluids.get(name) if r.fluids else None for r in records]


def project_all(records: Sequence[TimeRecord]) -> Dict[str, List[Optional[float]]]:
    return {name: project_channel(records, name) for name in derive_channels(records)}
