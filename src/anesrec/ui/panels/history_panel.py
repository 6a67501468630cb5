import streamlit as st

from anesrec.projection.history import DELETE_COLUMN, READONLY_COLUMNS, HistoryTable
from anesrec.session.controller import AnesthesiaSession


def _on_history_change(session: AnesthesiaSession, table: HistoryTable, key: str) -> None:
    state = st.session_state.get(key) or {}
    edited = state.get("edited_rows") or {}
    if edited and not session.apply_history_edits(table, edited):
        st.session_state.history_rejected = True


def render_history(session: AnesthesiaSession) -> None:
    table = session.history
    if table.frame.empty:
        st.caption("No vitals logged yet.")
        return

    if st.session_state.pop("history_rejected", False):
        st.warning("Edit ignored: values must be numbers.")

    column_config = {
        DELETE_COLUMN: st.column_config.CheckboxColumn(DELETE_COLUMN, help="Remove this entry", width="small"),
        "Time": st.column_config.TextColumn("Time", width="small"),
    }
    for column, (kind, _) in table.routes.items():
        if kind in ("vital", "fluid"):
            whole = kind == "vital" and column not in ("BT", "ISO %")
            column_config[column] = st.column_config.NumberColumn(column, min_value=0, step=1 if whole else 0.1)

    # key follows the store revision so each render starts from fresh data
    key = f"history_{session.revision}"
    st.data_editor(
        table.frame,
        key=key,
        hide_index=True,
        num_rows="fixed",
        disabled=list(READONLY_COLUMNS),
        column_config=column_config,
        use_container_width=True,
        on_change=_on_history_change,
        args=(session, table, key),
    )
