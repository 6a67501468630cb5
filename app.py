"""Veterinary anesthesia monitoring record (Streamlit entrypoint).

What this app does
------------------
- Captures patient details, drugs, fluids and epidurals for one case.
- Logs vital signs (BP, pulse, SpO2, EtCO2, temperature, RR, ISO %) and
  fluid rates against the minute they were taken.
- Charts the timeline on three axes (vitals, fluid rate, ISO %); click a
  point to correct it.
- Keeps an editable history table, a case timer and a JSON snapshot on disk
  that is rewritten after every change.

How it runs
-----------
    `python -m streamlit run app.py`

"""

import logging
import os
import sys

import streamlit as st
from streamlit_autorefresh import st_autorefresh

# Ensure the `src/` folder is importable when run from a plain checkout.
SRC_DIR = os.path.join(os.path.dirname(__file__), "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from anesrec.config.settings import load_settings
from anesrec.state.init import ensure_init
from anesrec.ui import render as ui_render
from anesrec.ui import styles as ui_styles
from anesrec.ui.charts import render_vitals_chart
from anesrec.ui.panels.history_panel import render_history
from anesrec.ui.panels.tables import render_drugs, render_epidurals, render_fluids


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    st.set_page_config(page_title="Anesthesia Record", layout="wide")
    ui_styles.inject()

    session = ensure_init(settings)

    # Clock and case timer tick
    st_autorefresh(interval=settings.refresh_ms, key="tick")

    ui_render.header(session)

    patient_tab, drugs_tab, fluids_tab, epidural_tab = st.tabs(["Patient", "Drugs", "Fluids", "Epidural"])
    with patient_tab:
        ui_render.patient_panel(session)
    with drugs_tab:
        render_drugs(session)
    with fluids_tab:
        render_fluids(session)
    with epidural_tab:
        render_epidurals(session)

    st.markdown("**Monitoring**")
    ui_render.vitals_form(session)
    render_vitals_chart(session)

    st.markdown("**Vitals history**")
    render_history(session)

    ui_render.notes_panel(session)
    st.markdown("---")
    ui_render.record_actions(session)


if __name__ == "__main__":
    main()
