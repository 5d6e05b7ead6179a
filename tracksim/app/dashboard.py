import streamlit as st
import sys
import os

# --- PATH SETUP ---
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if project_root not in sys.path:
    sys.path.append(project_root)

from tracksim.core.config import TrackerConfig
from tracksim.physics.shadows import GroundShadowRasterizer
from tracksim.simulation import simulate_year, get_instantaneous_state
from tracksim.app import charts

# ==========================================
# 1. PAGE CONFIG
# ==========================================
st.set_page_config(page_title="TrackSim", layout="wide", initial_sidebar_state="expanded")

defaults = TrackerConfig()

# ==========================================
# 2. SIDEBAR PARAMETERS
# ==========================================
st.sidebar.title("Tracker Array")

with st.sidebar.expander("Site", expanded=True):
    latitude = st.number_input("Latitude (deg)", -66.5, 66.5, defaults.latitude, 0.01)
    longitude = st.number_input("Longitude (deg)", -180.0, 180.0, defaults.longitude, 0.01)

with st.sidebar.expander("Geometry", expanded=True):
    panel_chord = st.number_input("Panel Chord (m)", 0.5, 6.0, defaults.panel_chord, 0.1)
    tracker_length = st.number_input("Tracker Length (m)", 2.0, 200.0, defaults.tracker_length, 1.0)
    row_spacing = st.number_input("Row Spacing / Pitch (m)", 1.0, 20.0, defaults.row_spacing, 0.1)
    hub_height = st.number_input("Hub Height (m)", 0.5, 5.0, defaults.hub_height, 0.1)
    number_of_rows = st.number_input("Rows", 1, 20, defaults.number_of_rows)
    st.caption(f"GCR: {panel_chord / row_spacing:.2f}")

with st.sidebar.expander("Control", expanded=True):
    backtracking = st.checkbox("Backtracking", value=defaults.backtracking)
    max_rotation = st.slider("Max Rotation (deg)", 0, 90, int(defaults.max_rotation))
    start_time, end_time = st.slider("Sampled Hours", 0, 24, (defaults.start_time, defaults.end_time))

config = TrackerConfig(
    latitude=latitude,
    longitude=longitude,
    panel_chord=panel_chord,
    tracker_length=tracker_length,
    row_spacing=row_spacing,
    hub_height=hub_height,
    backtracking=backtracking,
    max_rotation=float(max_rotation),
    number_of_rows=int(number_of_rows),
    start_time=int(start_time),
    end_time=int(end_time)
)

if st.sidebar.button("Run Simulation", type="primary"):
    try:
        config.validate()
    except ValueError as e:
        st.sidebar.error(str(e))
    else:
        progress_bar = st.progress(0)
        with st.spinner("Running Simulation..."):
            result = simulate_year(config, progress=lambda done, total: progress_bar.progress(done / total))
        progress_bar.empty()
        st.session_state["result"] = result
        st.session_state["result_config"] = config

# ==========================================
# 3. RESULTS
# ==========================================
st.title("Single-Axis Tracker Inter-Row Shading")

result = st.session_state.get("result")
result_config = st.session_state.get("result_config")

if result is None:
    st.info("Set the array parameters and press 'Run Simulation'.")
else:
    if result_config != config:
        st.warning("Parameters changed since the last run. Results below are for the previous configuration.")

    c1, c2, c3 = st.columns(3)
    c1.metric("Shading Loss", f"{result.shading_loss_percent:.2f} %")
    c2.metric("Annual Shade-Weighted Irradiance", f"{result.total_aswa:,.0f}")
    c3.metric("Daylight Samples", f"{result.daylight_samples}")

    tab_month, tab_hour, tab_ground = st.tabs(["Monthly", "Day x Hour", "Ground Shadow"])
    with tab_month:
        st.plotly_chart(charts.monthly_figure(result), use_container_width=True)
        st.dataframe(result.monthly_frame(), use_container_width=True)
    with tab_hour:
        st.plotly_chart(charts.hourly_heatmap_figure(result), use_container_width=True)
    with tab_ground:
        st.plotly_chart(charts.ground_heatmap_figure(result, result_config), use_container_width=True)

# ==========================================
# 4. SINGLE MOMENT
# ==========================================
st.subheader("Single Moment")
m1, m2 = st.columns(2)
day = m1.slider("Day of Year", 1, 365, 172)
hour = m2.slider("Hour", 0.0, 24.0, 12.0, 0.25)

moment = get_instantaneous_state(day, hour, config)
st.plotly_chart(charts.cross_section_figure(moment, config), use_container_width=True)

if moment.is_valid:
    rasterizer = GroundShadowRasterizer(config)
    sun_vec = rasterizer.sun_vector(moment.sun_elevation, moment.sun_azimuth)
    footprint = rasterizer.shadow_footprint(moment.tracker_angle, sun_vec)
    st.caption(
        f"Sun azimuth {moment.sun_azimuth:.1f} deg, elevation {moment.sun_elevation:.1f} deg. "
        f"Ground shadow area {footprint.area:.1f} m2."
    )
else:
    st.caption("Sun below the horizon, trackers parked flat.")
