from __future__ import annotations

import streamlit as st

from anesrec.config.settings import Settings
from anesrec.session.controller import AnesthesiaSession


def ensure_init(settings: Settings) -> AnesthesiaSession:
    """Open the anesthesia record once per browser session.

    The record is loaded from the snapshot on disk the first time and then
    kept in `st.session_state.record` across reruns.
    """
    if "record" not in st.session_state:
        st.session_state.record = AnesthesiaSession.open(settings)
    return st.session_state.record
