from __future__ import annotations

import json
from typing import Any, Optional, Tuple

import altair as alt
import numpy as np
import streamlit as st

from anesrec.projection.chart import ChartModel, EditTarget, chart_frame, resolve_point
from anesrec.session.controller import AnesthesiaSession
from anesrec.ui.helpers import fmt_value

PICK = "pick"
PENDING_EDIT = "pending_edit"
CHART_HEIGHT = 380
AXIS_OFFSETS = {"vitals": 0, "fluid": 0, "iso": 60}


def _ticks(lo: float, hi: float, step: float) -> list:
    return [round(float(v), 2) for v in np.arange(lo, hi + step / 2, step)]


def build_vitals_chart(model: ChartModel) -> alt.LayerChart:
    """Layered altair chart: one line + point layer pair per y axis.

    Points are drawn only where a reading exists and each line joins the
    points of its series, so gaps are bridged rather than breaking the line.
    """
    df = chart_frame(model)
    specs = {s.key: s for s in model.series}
    df["angle"] = df["series"].map(lambda k: specs[k].angle)

    labels = [s.label for s in model.series]
    color = alt.Color(
        "label:N",
        title=None,
        scale=alt.Scale(domain=labels, range=[s.color for s in model.series]),
        legend=alt.Legend(orient="bottom", columns=9, symbolSize=80),
    )
    shape = alt.Shape(
        "label:N",
        title=None,
        scale=alt.Scale(domain=labels, range=[s.shape for s in model.series]),
    )
    dash = alt.StrokeDash(
        "label:N",
        scale=alt.Scale(domain=labels, range=[list(s.dash) or [1, 0] for s in model.series]),
        legend=None,
    )

    n = model.slot_count
    x = alt.X(
        "slot:Q",
        title=None,
        scale=alt.Scale(domain=[-0.5, n - 0.5], nice=False, zero=False),
        axis=alt.Axis(values=list(range(n)), labelExpr=f"{json.dumps(model.labels)}[datum.value]", labelAngle=0),
    )
    pick = alt.selection_point(name=PICK, fields=["slot", "series"], on="click", clear="dblclick")

    layers = []
    for name, axis in model.axes.items():
        sub = df[df["axis"] == name]
        scale = alt.Scale(domain=[axis.min, axis.max], nice=False, zero=True)
        line = (
            alt.Chart(sub)
            .mark_line(strokeWidth=2, interpolate="monotone")
            .encode(x=x, y=alt.Y("value:Q", scale=scale, axis=None), color=color, strokeDash=dash, detail="series:N")
        )
        points = (
            alt.Chart(sub)
            .mark_point(filled=True, size=70)
            .encode(
                x=x,
                y=alt.Y(
                    "value:Q",
                    scale=scale,
                    title=axis.title,
                    axis=alt.Axis(
                        orient=axis.orient,
                        values=_ticks(axis.min, axis.max, axis.step),
                        offset=AXIS_OFFSETS.get(name, 0),
                        grid=name == "vitals",
                    ),
                ),
                color=color,
                shape=shape,
                angle=alt.Angle("angle:Q", scale=None),
                tooltip=[
                    alt.Tooltip("time:N", title="Time"),
                    alt.Tooltip("label:N", title="Channel"),
                    alt.Tooltip("value:Q", title="Value"),
                ],
            )
            .add_params(pick)
        )
        layers += [line, points]

    return (
        alt.layer(*layers)
        .resolve_scale(y="independent")
        .properties(height=CHART_HEIGHT, width=model.width or "container")
    )


def picked_point(event: Any) -> Optional[Tuple[int, str]]:
    """(slot, series key) of the clicked point in an altair selection event."""
    try:
        points = event["selection"][PICK]
    except (KeyError, TypeError):
        return None
    if not points:
        return None
    p = points[0]
    if p.get("slot") is None or p.get("series") is None:
        return None
    return int(p["slot"]), str(p["series"])


def _close_edit() -> None:
    st.session_state.pop(PENDING_EDIT, None)
    # a fresh chart key drops the old selection so the same point can be clicked again
    st.session_state.chart_nonce = st.session_state.get("chart_nonce", 0) + 1


@st.dialog("Edit reading", on_dismiss=_close_edit)
def edit_point_dialog(session: AnesthesiaSession, target: EditTarget) -> None:
    st.markdown(f"**Edit {target.label} at {target.time}**")
    seed = "" if target.current is None else fmt_value(target.current)
    raw = st.text_input("Value", value=seed, key=f"edit_{target.index}_{target.kind}_{target.name}")
    ok, cancel = st.columns(2)
    if ok.button("Confirm", key="edit_confirm", type="primary", use_container_width=True):
        if not raw.strip():
            st.warning("Please enter a value")
            return
        if session.apply_point_edit(target, raw):
            _close_edit()
            st.rerun()
        st.warning(f"'{raw}' is not a number")
    if cancel.button("Cancel", key="edit_cancel", use_container_width=True):
        _close_edit()
        st.rerun()


def render_pending_edit(session: AnesthesiaSession) -> None:
    """Re-open the edit dialog on every rerun until it is confirmed or dismissed."""
    target = st.session_state.get(PENDING_EDIT)
    if target is None:
        return
    if target.index >= len(session.store):
        _close_edit()
        return
    edit_point_dialog(session, target)


def render_vitals_chart(session: AnesthesiaSession) -> None:
    model = session.chart
    nonce = st.session_state.get("chart_nonce", 0)
    event = st.altair_chart(
        build_vitals_chart(model),
        use_container_width=model.width is None,
        on_select="rerun",
        selection_mode=PICK,
        key=f"vitals_chart_{session.revision}_{nonce}",
    )

    picked = picked_point(event)
    if picked is not None and PENDING_EDIT not in st.session_state:
        target = resolve_point(session.store.records, *picked)
        if target is not None:
            st.session_state[PENDING_EDIT] = target

    render_pending_edit(session)
