"""
Periodic data refresh for a dashboard left open without interaction.

The cache TTL only expires the loaded rows; this fragment reruns the whole
app on a timer so that the expired cache is actually reloaded.
"""

from __future__ import annotations

import logging
import time
from typing import MutableMapping

import streamlit as st

from student_dashboard.config import get_settings
from student_dashboard.data.loader import clear_cache

logger = logging.getLogger(__name__)

LAST_REFRESH_KEY = "sd_last_refresh"
# Timers can fire slightly early
TIMER_TOLERANCE_SECONDS = 1.0


def refresh_if_due(state: MutableMapping, now: float, interval_seconds: int) -> bool:
    """Return True, and restart the interval, once `interval_seconds` have passed."""
    last = state.setdefault(LAST_REFRESH_KEY, now)
    if now - last < interval_seconds - TIMER_TOLERANCE_SECONDS:
        return False
    state[LAST_REFRESH_KEY] = now
    return True


def reset_refresh_timer(state: MutableMapping, now: float) -> None:
    state[LAST_REFRESH_KEY] = now


@st.fragment(run_every=get_settings().refresh_interval_seconds)
def auto_refresh() -> None:
    interval = get_settings().refresh_interval_seconds
    if refresh_if_due(st.session_state, time.monotonic(), interval):
        logger.info("Refreshing data after %d seconds", interval)
        clear_cache()
        st.rerun(scope="app")
