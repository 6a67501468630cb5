from datetime import datetime

import pandas as pd
import streamlit as st

from anesrec.dosing.calc import format_total
from anesrec.models.app_types import DOSE_UNITS, DRUG_OPTIONS, EPIDURAL_OPTIONS, ROUTE_OPTIONS, TIME_FORMAT
from anesrec.persistence.snapshot import blank_drug_row, blank_epidural_row, blank_fluid_row
from anesrec.session.controller import AnesthesiaSession
from anesrec.ui.helpers import apply_editor_state

DRUG_COLUMNS = ["name", "dose", "unit", "total", "route", "time"]
EPIDURAL_COLUMNS = ["drug", "dose", "unit", "total", "route"]


def _dose_frame(rows, columns, weight) -> pd.DataFrame:
    data = []
    for r in rows:
        row = {c: r.get(c, "") for c in columns if c != "total"}
        row["total"] = format_total(r.get("dose"), r.get("unit", ""), weight)
        data.append(row)
    return pd.DataFrame(data, columns=columns)


def _on_table_change(session: AnesthesiaSession, table: str, key: str, blank: dict) -> None:
    rows = apply_editor_state(getattr(session, table), st.session_state.get(key) or {}, blank, computed=("total",))
    session.set_rows(table, rows)


def render_drugs(session: AnesthesiaSession) -> None:
    weight = session.patient.get("weight")
    key = f"drugs_{session.epoch}_{len(session.drugs)}"
    st.data_editor(
        _dose_frame(session.drugs, DRUG_COLUMNS, weight),
        key=key,
        hide_index=True,
        num_rows="dynamic",
        use_container_width=True,
        disabled=["total"],
        column_config={
            "name": st.column_config.SelectboxColumn("Drug", options=DRUG_OPTIONS),
            "dose": st.column_config.TextColumn("Dose"),
            "unit": st.column_config.SelectboxColumn("Unit", options=DOSE_UNITS, default="mg/kg"),
            "total": st.column_config.TextColumn("Total"),
            "route": st.column_config.SelectboxColumn("Route", options=ROUTE_OPTIONS, default="IV"),
            "time": st.column_config.TextColumn("Time", help="HH:MM"),
        },
        on_change=_on_table_change,
        args=(session, "drugs", key, {**blank_drug_row(), "time": datetime.now().strftime(TIME_FORMAT)}),
    )


def render_epidurals(session: AnesthesiaSession) -> None:
    weight = session.patient.get("weight")
    key = f"epidurals_{session.epoch}_{len(session.epidurals)}"
    st.data_editor(
        _dose_frame(session.epidurals, EPIDURAL_COLUMNS, weight),
        key=key,
        hide_index=True,
        num_rows="dynamic",
        use_container_width=True,
        disabled=["total"],
        column_config={
            "drug": st.column_config.SelectboxColumn("Drug", options=EPIDURAL_OPTIONS),
            "dose": st.column_config.TextColumn("Dose"),
            "unit": st.column_config.SelectboxColumn("Unit", options=DOSE_UNITS, default="mg/kg"),
            "total": st.column_config.TextColumn("Total"),
            "route": st.column_config.TextColumn("Route"),
        },
        on_change=_on_table_change,
        args=(session, "epidurals", key, blank_epidural_row()),
    )


def _on_fluid_field(session: AnesthesiaSession, row: int, field: str, key: str) -> None:
    rows = [dict(r) for r in session.fluid_rows]
    rows[row][field] = st.session_state.get(key, "")
    session.set_rows("fluid_rows", rows)


def _on_fluid_delete(session: AnesthesiaSession, row: int) -> None:
    rows = [dict(r) for r in session.fluid_rows]
    del rows[row]
    session.set_rows("fluid_rows", rows)


def render_fluids(session: AnesthesiaSession) -> None:
    """Fluid rows; LOG charts the current rate at this minute."""
    for i, row in enumerate(session.fluid_rows):
        c_name, c_rate, c_log, c_del = st.columns([3, 2, 1, 1])
        # rate box is keyed on the revision so it empties after a LOG
        name_key = f"fluid_name_{session.epoch}_{len(session.fluid_rows)}_{i}"
        rate_key = f"fluid_rate_{session.epoch}_{session.revision}_{i}"
        c_name.text_input(
            "Fluid", value=row.get("name", ""), key=name_key, placeholder="Fluid Name",
            label_visibility="collapsed", on_change=_on_fluid_field, args=(session, i, "name", name_key),
        )
        c_rate.text_input(
            "Rate", value=str(row.get("rate", "")), key=rate_key, placeholder="ml/hr",
            label_visibility="collapsed", on_change=_on_fluid_field, args=(session, i, "rate", rate_key),
        )
        if c_log.button("LOG", key=f"fluid_log_{session.epoch}_{i}", type="primary", use_container_width=True):
            if session.log_fluid_row(i):
                st.rerun()
            st.warning("Enter a fluid name and a numeric rate first.")
        c_del.button(
            "×", key=f"fluid_del_{session.epoch}_{i}", use_container_width=True,
            on_click=_on_fluid_delete, args=(session, i),
        )

    if st.button("+ Add fluid", key="add_fluid"):
        session.set_rows("fluid_rows", session.fluid_rows + [blank_fluid_row()])
        st.rerun()
