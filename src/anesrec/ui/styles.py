import streamlit as st

GLOBAL_CSS = """
<style>
.block-container {
    padding-top: 2rem;
}

.ar-header {
  display:flex;
  align-items:center;
  justify-content:space-between;
  padding:10px 14px;
  border-radius:14px;
  color:white;
  background:linear-gradient(90deg,#0ea5e9 0%, #38bdf8 100%);
  margin-bottom:10px;
}
.ar-title {font-weight:800; font-size:20px; line-height:1.1;}
.ar-sub {font-size:11px; opacity:.9}
.ar-clock {font-family:monospace; font-size:22px; font-weight:700;}
.ar-timer {font-family:monospace; font-size:18px; opacity:.95;}

[data-testid="stVegaLiteChart"] { overflow-x:auto; }
</style>
"""


def inject() -> None:
    """Inject global CSS into the Streamlit page."""
    st.markdown(GLOBAL_CSS, unsafe_allow_html=True)
