from typing import Any, Dict, List, Mapping, Optional


def fmt_value(value: Optional[float]) -> str:
    if value is None:
        return "--"
    return f"{value:g}"


def apply_editor_state(
    rows: List[Dict[str, Any]],
    state: Mapping[str, Any],
    blank: Dict[str, Any],
    computed: tuple = (),
) -> List[Dict[str, Any]]:
    """Apply a `st.data_editor` delta (edited/added/deleted rows) to plain row dicts.

    Positions in `edited_rows` and `deleted_rows` refer to the rows as they
    were shown, so edits go first and deletions last.
    """
    out = [dict(r) for r in rows]
    for pos, changes in (state.get("edited_rows") or {}).items():
        pos = int(pos)
        if pos >= len(out):
            continue
        for col, val in changes.items():
            if col not in computed:
                out[pos][col] = "" if val is None else val

    kept = len(out)
    for added in state.get("added_rows") or []:
        row = dict(blank)
        row.update({k: ("" if v is None else v) for k, v in added.items() if k not in computed})
        out.append(row)

    for pos in sorted((int(p) for p in state.get("deleted_rows") or []), reverse=True):
        if pos < kept:
            del out[pos]
    return out
