from __future__ import annotations

from datetime import date, datetime
from typing import Any

import streamlit as st

from anesrec.models.app_types import AGE_MONTHS, AGE_YEARS, ET_TUBE_SIZES, IVC_SITES
from anesrec.persistence.snapshot import export_filename
from anesrec.session.controller import AnesthesiaSession

PENDING_CLEAR = "pending_clear"


def header(session: AnesthesiaSession) -> None:
    left, right = st.columns([4, 2])

    with left:
        st.markdown(
            f"""
            <div class="ar-header">
                <div>
                    <div class="ar-title">Anesthesia Monitoring Record</div>
                    <div class="ar-sub">{session.patient.get('pet-name') or 'Unnamed patient'}
                    · {session.patient.get('procedure') or 'No procedure set'}</div>
                </div>
                <div style="text-align:right">
                    <div class="ar-clock">{datetime.now().strftime('%H:%M:%S')}</div>
                    <div class="ar-timer">Case {session.timer.display()}</div>
                </div>
            </div>
            """,
            unsafe_allow_html=True,
        )

    with right:
        st.markdown("<div style='margin-top:14px'></div>", unsafe_allow_html=True)
        b1, b2 = st.columns(2)
        b1.button("Start case", disabled=session.timer.running, on_click=session.start_timer, use_container_width=True)
        b2.button("End case", disabled=not session.timer.running, on_click=session.stop_timer, use_container_width=True)


def _bind(session: AnesthesiaSession, field: str, key: str) -> None:
    value: Any = st.session_state.get(key)
    if isinstance(value, date):
        value = value.isoformat()
    session.update_patient(field, value)


def _index(options: list, value: Any) -> int:
    try:
        return options.index(value)
    except ValueError:
        return 0


def patient_panel(session: AnesthesiaSession) -> None:
    p = session.patient

    def k(field: str) -> str:
        return f"patient_{session.epoch}_{field}"

    def text(col, label: str, field: str, **kwargs) -> None:
        col.text_input(label, value=str(p.get(field) or ""), key=k(field),
                       on_change=_bind, args=(session, field, k(field)), **kwargs)

    def select(col, label: str, field: str, options: list) -> None:
        col.selectbox(label, options, index=_index(options, p.get(field)), key=k(field),
                      on_change=_bind, args=(session, field, k(field)))

    c1, c2, c3, c4 = st.columns(4)
    text(c1, "Pet name", "pet-name")
    text(c2, "Animal ID", "animal-id")
    text(c3, "Breed", "breed")
    try:
        visit = date.fromisoformat(p["date"]) if p.get("date") else date.today()
    except (TypeError, ValueError):
        visit = date.today()
    c4.date_input("Date", value=visit, key=k("date"), on_change=_bind, args=(session, "date", k("date")))

    c1, c2, c3, c4 = st.columns(4)
    text(c1, "Weight (kg)", "weight")
    select(c2, "Sex", "sex", ["", "M", "MN", "F", "FS"])
    select(c3, "Age (y)", "age-y", [str(x) for x in AGE_YEARS])
    select(c4, "Age (m)", "age-m", [str(x) for x in AGE_MONTHS])

    c1, c2, c3 = st.columns(3)
    text(c1, "Anesthetist", "anesthetist")
    text(c2, "Surgeon", "surgeon")
    text(c3, "Procedure", "procedure")

    c1, c2, c3, c4 = st.columns(4)
    select(c1, "ET tube size", "et-tube-size", ET_TUBE_SIZES)
    text(c2, "Intubation time", "intubation-time", placeholder="HH:MM")
    text(c3, "Extubation time", "extubation-time", placeholder="HH:MM")
    select(c4, "IV catheter", "ivc-site", [""] + IVC_SITES)

    c1, c2, c3 = st.columns(3)
    text(c1, "BP cuff size", "bp-cuff-size")
    text(c2, "Ventilator", "setup-ventilator")
    text(c3, "Mask", "setup-mask")


def vitals_form(session: AnesthesiaSession) -> None:
    with st.form("vitals_form", clear_on_submit=True):
        cols = st.columns(8)
        whole = dict(value=None, step=1, format="%d")
        sys_ = cols[0].number_input("SYS", min_value=0, **whole)
        dia = cols[1].number_input("DIA", min_value=0, **whole)
        pulse = cols[2].number_input("PULSE", min_value=0, **whole)
        spo2 = cols[3].number_input("SpO2", min_value=0, **whole)
        etco2 = cols[4].number_input("ETCO2", min_value=0, **whole)
        bt = cols[5].number_input("BT", min_value=0.0, value=None, step=0.1, format="%.1f")
        rr = cols[6].number_input("RR", min_value=0, **whole)
        iso = cols[7].number_input("ISO %", min_value=0.0, value=None, step=0.1, format="%.1f")
        submitted = st.form_submit_button("Log vitals", type="primary")

    if submitted and not session.log_vitals(
        systolic=sys_, diastolic=dia, pulse=pulse, spo2=spo2, etco2=etco2, bt=bt, rr=rr, iso=iso,
    ):
        st.info("Enter at least one reading to log.")


def notes_panel(session: AnesthesiaSession) -> None:
    key = f"notes_{session.epoch}"
    st.text_area(
        "Procedure notes",
        value=session.notes,
        key=key,
        height=120,
        on_change=lambda: session.set_notes(st.session_state.get(key, "")),
    )


def _close_clear() -> None:
    st.session_state.pop(PENDING_CLEAR, None)


def _open_clear() -> None:
    st.session_state[PENDING_CLEAR] = True


@st.dialog("Clear all data?", on_dismiss=_close_clear)
def _confirm_clear(session: AnesthesiaSession) -> None:
    st.write("This will permanently delete all logged data.")
    ok, cancel = st.columns(2)
    if ok.button("Confirm", key="clear_confirm", type="primary", use_container_width=True):
        _close_clear()
        session.clear()
        st.rerun()
    if cancel.button("Cancel", key="clear_cancel", use_container_width=True):
        _close_clear()
        st.rerun()


def record_actions(session: AnesthesiaSession) -> None:
    d1, d2, d3 = st.columns([1, 2, 1])
    with d1:
        st.download_button(
            "Export JSON",
            data=session.export_json(),
            file_name=export_filename(datetime.now()),
            mime="application/json",
            use_container_width=True,
        )
    with d2:
        upload = st.file_uploader("Import record (JSON)", type=["json"], key=f"import_{session.epoch}")
        if upload is not None and st.button("Load record"):
            session.import_json(upload.getvalue().decode("utf-8", errors="replace"))
            st.rerun()
    with d3:
        st.button("Clear all data", type="secondary", use_container_width=True, on_click=_open_clear)
    if st.session_state.get(PENDING_CLEAR):
        _confirm_clear(session)
