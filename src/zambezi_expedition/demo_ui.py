"""Streamlit dashboard for the Zambezi source expedition.

Shows the live expedition position on the route map, the latest synthetic
sensor readings, a heart rate / pH chart of the rolling history, nearby
threat alerts, and the expedition log.

Run:
    streamlit run src/zambezi_expedition/demo_ui.py

Notes:
- The live panel is an `st.fragment` rerun every tick interval. A rerun only
  advances the engine when a full interval has elapsed since the last tick,
  so widget interactions do not speed the expedition up.
"""

from datetime import datetime
from pathlib import Path
from time import monotonic
from typing import Any, Optional

import plotly.graph_objects as go
import streamlit as st

from zambezi_expedition.config import load_settings, setup_file_logging
from zambezi_expedition.data.contract import COLUMN_DESCRIPTIONS
from zambezi_expedition.engine import ExpeditionEngine, ExpeditionSession
from zambezi_expedition.logbook import ExpeditionLogStore, open_file_store
from zambezi_expedition.models import (
    LOG_ICONS,
    ExpeditionLogEntry,
    GeoPoint,
    RouteData,
    TelemetrySample,
    TelemetrySnapshot,
)

SESSION_KEY = "expedition_session"
LAST_TICK_KEY = "expedition_last_tick"
SELECTED_LOG_KEY = "selected_log_id"

ICON_LABELS = {"note": "General note", "observation": "Observation", "alert": "Alert"}
THREAT_COLORS = {"deforestation": "#f97316", "fire": "#ef4444", "logging": "#eab308"}
LOG_COLORS = {"note": "#38bdf8", "observation": "#a3e635", "alert": "#f43f5e"}

# ----------------------------
# Session wiring
# ----------------------------

@st.cache_resource
def shared_log_store(path: Path, key: str) -> ExpeditionLogStore:
    """One store per file for every browser session of this server process."""
    return open_file_store(path, key)

def get_session() -> ExpeditionSession:
    if SESSION_KEY not in st.session_state:
        settings = load_settings()
        setup_file_logging(settings.log_dir)
        st.session_state[SESSION_KEY] = ExpeditionSession(
            ExpeditionEngine(settings=settings),
            log_store=shared_log_store(settings.log_store_path, settings.log_store_key),
        )
        st.session_state[LAST_TICK_KEY] = monotonic()
    return st.session_state[SESSION_KEY]

def maybe_tick(session: ExpeditionSession) -> TelemetrySnapshot:
    interval_s = session.engine.settings.tick_interval_ms / 1000
    now = monotonic()
    if now - st.session_state.get(LAST_TICK_KEY, now) >= interval_s:
        st.session_state[LAST_TICK_KEY] = now
        return session.tick()
    return session.snapshot()

# ----------------------------
# Figures
# ----------------------------

def _lats(points: Any) -> list[float]:
    return [p.lat for p in points]

def _lngs(points: Any) -> list[float]:
    return [p.lng for p in points]

def render_route_map(
    route_data: RouteData,
    position: GeoPoint,
    logs: tuple[ExpeditionLogEntry, ...] = (),
    show_threats: bool = True,
    show_wetlands: bool = True,
    show_corridor: bool = True,
    show_logs: bool = True,
) -> go.Figure:
    """Build the Plotly map: route, overlays, log pins and the expedition marker."""
    fig = go.Figure()

    if show_wetlands:
        for idx, patch in enumerate(route_data.wetlands):
            closed = [*patch, patch[0]]
            fig.add_trace(
                go.Scattermap(
                    lat=_lats(closed),
                    lon=_lngs(closed),
                    mode="lines",
                    fill="toself",
                    fillcolor="rgba(20,184,166,0.25)",
                    line=dict(color="#14b8a6", width=1),
                    name="Wetlands" if idx == 0 else None,
                    showlegend=idx == 0,
                    hoverinfo="skip",
                )
            )

    if show_corridor and route_data.corridor:
        fig.add_trace(
            go.Scattermap(
                lat=_lats(route_data.corridor),
                lon=_lngs(route_data.corridor),
                mode="lines",
                line=dict(color="#a855f7", width=3),
                name="Conservation corridor",
                hoverinfo="skip",
            )
        )

    fig.add_trace(
        go.Scattermap(
            lat=_lats(route_data.route),
            lon=_lngs(route_data.route),
            mode="lines+markers",
            line=dict(color="#e5e7eb", width=3),
            marker=dict(size=5),
            name="Expedition route",
            hoverinfo="skip",
        )
    )

    if show_threats and route_data.threat_markers:
        markers = route_data.threat_markers
        fig.add_trace(
            go.Scattermap(
                lat=[m.position.lat for m in markers],
                lon=[m.position.lng for m in markers],
                mode="markers",
                marker=dict(size=14, color=[THREAT_COLORS[m.category] for m in markers]),
                hovertext=[m.label for m in markers],
                hoverinfo="text",
                name="Threats",
            )
        )

    if show_logs and logs:
        fig.add_trace(
            go.Scattermap(
                lat=[entry.position.lat for entry in logs],
                lon=[entry.position.lng for entry in logs],
                mode="markers",
                marker=dict(size=11, color=[LOG_COLORS[entry.icon] for entry in logs]),
                hovertext=[f"{entry.title}<br>{ICON_LABELS[entry.icon]}" for entry in logs],
                hoverinfo="text",
                name="Expedition logs",
            )
        )

    fig.add_trace(
        go.Scattermap(
            lat=[position.lat],
            lon=[position.lng],
            mode="markers",
            marker=dict(size=18, color="#f97316"),
            hovertext=[f"Expedition<br>{position.lat:.4f}, {position.lng:.4f}"],
            hoverinfo="text",
            name="Expedition",
        )
    )

    fig.update_layout(
        height=520,
        margin=dict(l=0, r=0, t=0, b=0),
        map=dict(
            style="carto-darkmatter",
            center=dict(lat=position.lat, lon=position.lng),
            zoom=8,
        ),
        legend=dict(orientation="h", yanchor="bottom", y=0.01, xanchor="left", x=0.01),
    )
    return fig

def render_telemetry_chart(history: tuple[TelemetrySample, ...]) -> go.Figure:
    """Heart rate (left axis) and pH (right axis) over the retained window."""
    ticks = [s.tick for s in history]
    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=ticks,
            y=[s.heart_rate for s in history],
            mode="lines",
            name="Heart rate (bpm)",
            line=dict(color="#f97316", width=2),
        )
    )
    fig.add_trace(
        go.Scatter(
            x=ticks,
            y=[s.ph for s in history],
            mode="lines",
            name="pH",
            yaxis="y2",
            line=dict(color="#14b8a6", width=2),
        )
    )

    hr_values = [s.heart_rate for s in history] or [80, 160]
    ph_values = [s.ph for s in history] or [6.6, 7.4]
    fig.update_layout(
        height=240,
        margin=dict(l=20, r=20, t=20, b=20),
        xaxis=dict(title="Tick"),
        yaxis=dict(title="bpm", range=[min(min(hr_values), 80), max(max(hr_values), 160)]),
        yaxis2=dict(title="pH", overlaying="y", side="right", range=[min(min(ph_values), 6.4), max(max(ph_values), 7.6)]),
        hovermode="x unified",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )
    return fig

# ----------------------------
# Panels
# ----------------------------

def render_metrics(snapshot: TelemetrySnapshot) -> None:
    st.caption(f"Updated {snapshot.last_updated}")
    c1, c2, c3 = st.columns(3)
    with c1:
        st.metric("Distance traveled", f"{snapshot.distance_km} km", help=COLUMN_DESCRIPTIONS["distance_km"])
        st.metric("Water turbidity", f"{snapshot.turbidity:.1f} NTU", help=COLUMN_DESCRIPTIONS["turbidity"])
    with c2:
        st.metric("Team heart rate", f"{snapshot.heart_rate} bpm", help=COLUMN_DESCRIPTIONS["heart_rate"])
        st.metric("Water temperature", f"{snapshot.water_temp:.1f} °C", help=COLUMN_DESCRIPTIONS["water_temp"])
    with c3:
        st.metric("Water pH", f"{snapshot.ph:.2f}", help=COLUMN_DESCRIPTIONS["ph"])
        st.metric("Nearest alert", f"{snapshot.nearest_threat_km:.1f} km away", help=COLUMN_DESCRIPTIONS["nearest_threat_km"])

def render_alerts(session: ExpeditionSession, position: GeoPoint) -> None:
    st.markdown("#### Threat alerts")
    for alert in session.engine.threat_alerts(position):
        st.caption(f"**{alert.label}**  \n{alert.time_ago} · {alert.distance_km:.1f} km away")

def _format_created(entry: ExpeditionLogEntry) -> str:
    return datetime.fromtimestamp(entry.created_at / 1000).strftime("%Y-%m-%d %H:%M:%S")

def render_log_detail(entry: Optional[ExpeditionLogEntry]) -> None:
    if entry is None:
        return
    with st.container(border=True):
        st.markdown(f"**{entry.title}**")
        st.caption(f"{ICON_LABELS[entry.icon]} · {_format_created(entry)} · {entry.position.lat:.4f}, {entry.position.lng:.4f}")
        if entry.body:
            st.write(entry.body)

def render_logbook(session: ExpeditionSession) -> None:
    store = session.log_store
    if store is None:
        return

    st.markdown("#### Expedition log")
    with st.form("new_log", clear_on_submit=True):
        title = st.text_input("Title")
        body = st.text_area("Notes")
        icon = st.selectbox("Type", options=list(LOG_ICONS), format_func=lambda v: ICON_LABELS[v])
        submitted = st.form_submit_button("Pin at current position", use_container_width=True)
    if submitted:
        entry = session.add_log(title, body, icon)
        if entry is None:
            st.warning("A log entry needs a title.")
        else:
            st.session_state[SELECTED_LOG_KEY] = entry.id
            st.success(f"Logged '{entry.title}'.")

    if not store.entries:
        st.info("No expedition logs yet.")
        return

    labels = {entry.id: f"{entry.title} · {_format_created(entry)}" for entry in store.entries}
    ids = list(labels.keys())
    selected = st.session_state.get(SELECTED_LOG_KEY)
    selected_id = st.selectbox(
        "Logs",
        options=ids,
        index=ids.index(selected) if selected in ids else 0,
        format_func=lambda entry_id: labels[entry_id],
    )
    st.session_state[SELECTED_LOG_KEY] = selected_id
    render_log_detail(store.find_by_id(selected_id))

# ----------------------------
# Main UI
# ----------------------------

def main() -> None:
    st.set_page_config(page_title="The Source of the Zambezi", layout="wide")
    st.title("The Source of the Zambezi")
    st.caption("Zambezi Source Explorer · Demo")

    session = get_session()
    interval_s = session.engine.settings.tick_interval_ms / 1000

    with st.sidebar:
        st.subheader("Overlays")
        overlays = {
            "show_threats": st.toggle("Threats", value=True),
            "show_wetlands": st.toggle("Wetlands", value=True),
            "show_corridor": st.toggle("Corridor", value=True),
            "show_logs": st.toggle("Logs", value=True),
        }
        st.divider()
        render_logbook(session)

    @st.fragment(run_every=interval_s)
    def live_panel() -> None:
        snapshot = maybe_tick(session)
        map_col, side_col = st.columns([3, 2])
        with map_col:
            logs = session.log_store.entries if session.log_store is not None else ()
            st.plotly_chart(
                render_route_map(session.engine.route_data, snapshot.position, logs, **overlays),
                use_container_width=True,
            )
        with side_col:
            render_metrics(snapshot)
            st.plotly_chart(render_telemetry_chart(snapshot.history), use_container_width=True)
            render_alerts(session, snapshot.position)

    live_panel()

if __name__ == "__main__":
    main()
