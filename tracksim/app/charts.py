import plotly.graph_objects as go
import numpy as np

from tracksim.core.config import TrackerConfig
from tracksim.physics.shadows import GroundShadowRasterizer
from tracksim.simulation import SimulationResult, InstantState

PANEL_COLOR = "rgba(56, 189, 248, 0.9)"
PANEL_FILL = "rgba(56, 189, 248, 0.15)"
SUN_COLOR = "#f59e0b"
SHADE_SCALE = "Inferno"


def monthly_figure(result: SimulationResult) -> go.Figure:
    """Average shading per month (bars) with monthly irradiance on a second axis."""
    df = result.monthly_frame()

    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=df["month"], y=df["avg_shading"] * 100.0,
        name="Avg Shading (%)", marker_color=PANEL_COLOR
    ))
    fig.add_trace(go.Scatter(
        x=df["month"], y=df["total_irradiance"],
        name="Irradiance (sampled sum)", yaxis="y2",
        mode="lines+markers", line=dict(color=SUN_COLOR)
    ))
    fig.update_layout(
        title="Monthly Shading",
        yaxis=dict(title="Shading (%)"),
        yaxis2=dict(title="Irradiance", overlaying="y", side="right"),
        legend=dict(orientation="h"),
        margin=dict(l=40, r=40, t=40, b=40)
    )
    return fig


def hourly_heatmap_figure(result: SimulationResult) -> go.Figure:
    """Shaded fraction per sampled day (x) and hour (y)."""
    df = result.hourly_frame()
    if df.empty:
        z, days, hours = [[]], [], []
    else:
        pivot = df.pivot_table(index="hour", columns="day", values="shading")
        z, days, hours = pivot.values, list(pivot.columns), list(pivot.index)

    fig = go.Figure(go.Heatmap(
        z=z, x=days, y=hours,
        colorscale=SHADE_SCALE, zmin=0.0, zmax=1.0,
        colorbar=dict(title="Shaded")
    ))
    fig.update_layout(
        title="Shading by Day and Hour",
        xaxis_title="Day of Year",
        yaxis_title="Hour",
        margin=dict(l=40, r=40, t=40, b=40)
    )
    return fig


def ground_heatmap_figure(result: SimulationResult, config: TrackerConfig) -> go.Figure:
    """
    Fraction of sampled daylight hours each ground cell was shadowed,
    in world coordinates (X=East, Y=North), with row outlines on top.
    """
    g = result.ground_heatmap
    fig = go.Figure(go.Heatmap(
        z=g.grid, x=g.cell_centers_x(), y=g.cell_centers_y(),
        colorscale=SHADE_SCALE, zmin=0.0, zmax=1.0,
        colorbar=dict(title="Shadow freq.")
    ))

    rasterizer = GroundShadowRasterizer(config)
    half_w = config.panel_chord / 2.0
    half_l = config.tracker_length / 2.0
    for r, row_x in enumerate(rasterizer.row_positions()):
        fig.add_trace(go.Scatter(
            x=[row_x - half_w, row_x + half_w, row_x + half_w, row_x - half_w, row_x - half_w],
            y=[-half_l, -half_l, half_l, half_l, -half_l],
            mode="lines", line=dict(color=PANEL_COLOR, width=1),
            fill="toself", fillcolor=PANEL_FILL,
            name=f"Row {r + 1}", showlegend=False
        ))

    fig.update_layout(
        title="Ground Shadow Density",
        xaxis=dict(title="East (m)", scaleanchor="y"),
        yaxis=dict(title="North (m)"),
        margin=dict(l=40, r=40, t=40, b=40)
    )
    return fig


def cross_section_figure(state: InstantState, config: TrackerConfig) -> go.Figure:
    """
    East-west cross-section of the rows at one moment, with the sun ray.
    """
    rasterizer = GroundShadowRasterizer(config)
    theta = np.radians(state.tracker_angle)
    half_w = config.panel_chord / 2.0
    dx = half_w * np.cos(theta)
    dz = half_w * np.sin(theta)
    h = config.hub_height

    fig = go.Figure()
    for r, row_x in enumerate(rasterizer.row_positions()):
        fig.add_trace(go.Scatter(
            x=[row_x - dx, row_x + dx], y=[h - dz, h + dz],
            mode="lines", line=dict(color=PANEL_COLOR, width=4),
            name=f"Row {r + 1}", showlegend=False
        ))
        fig.add_trace(go.Scatter(
            x=[row_x, row_x], y=[0.0, h],
            mode="lines", line=dict(color="gray", width=2),
            showlegend=False, hoverinfo="skip"
        ))

    if state.is_valid:
        # Profile angle is measured from the west; flip to east-positive
        span = config.array_width / 2.0 + config.row_spacing
        ray_x = -np.cos(state.profile_angle_rad) * span
        ray_y = np.sin(state.profile_angle_rad) * span
        fig.add_trace(go.Scatter(
            x=[0.0, ray_x], y=[h, h + ray_y],
            mode="lines+markers", line=dict(color=SUN_COLOR, dash="dash"),
            marker=dict(size=[0, 14], color=SUN_COLOR),
            name="Sun"
        ))

    fig.update_layout(
        title=f"Tracker Angle {state.tracker_angle:.1f} deg, Sun El {state.sun_elevation:.1f} deg",
        xaxis=dict(title="East (m)", scaleanchor="y"),
        yaxis=dict(title="Height (m)", rangemode="tozero"),
        margin=dict(l=40, r=40, t=40, b=40)
    )
    return fig
