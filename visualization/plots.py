"""
Visualization module for the Chemical Release Dispersion Engine.

Provides Plotly figures of contour footprints and centerline profiles.
The engine itself is colour agnostic; the severity scale lives here.
"""

import numpy as np
import plotly.graph_objects as go
from typing import Iterable, List, Optional, Sequence

from config import IMPACT_COLORS, SEVERITY_COLORS
from models.results import ContourLevel, ReceptorOutcome
from models.source import ReleaseSource


def severity_color(level: float) -> str:
    """Colour of a concentration level (mg/m^3) on the severity scale."""
    for upper, color in SEVERITY_COLORS:
        if level < upper:
            return color
    return SEVERITY_COLORS[-1][1]


def _add_source_marker(fig: go.Figure, source: ReleaseSource) -> None:
    fig.add_trace(
        go.Scatter(
            x=[source.longitude],
            y=[source.latitude],
            mode="markers+text",
            marker=dict(size=12, color="lime", symbol="diamond",
                        line=dict(width=1, color="black")),
            text=[source.name or "Source"],
            textposition="top center",
            textfont=dict(size=9, color="white"),
            name="Release Source",
            hovertemplate="%{text}<br>(%{y:.5f}, %{x:.5f})<extra></extra>",
        )
    )


def _add_receptors(fig: go.Figure, outcomes: Iterable[ReceptorOutcome]) -> None:
    lats, lons, labels, colors = [], [], [], []
    for outcome in outcomes:
        if not outcome.ok or not outcome.receptor.is_geographic:
            continue
        lats.append(outcome.receptor.latitude)
        lons.append(outcome.receptor.longitude)
        labels.append(
            f"{outcome.receptor.name or 'Receptor'}: "
            f"{outcome.result.concentration:.3g} mg/m3 ({outcome.impact_level})"
        )
        colors.append(IMPACT_COLORS.get(outcome.impact_level, "cyan"))
    if not lats:
        return
    fig.add_trace(
        go.Scatter(
            x=lons,
            y=lats,
            mode="markers",
            marker=dict(size=9, color=colors, symbol="circle",
                        line=dict(width=1, color="black")),
            text=labels,
            name="Receptors",
            hovertemplate="%{text}<extra></extra>",
        )
    )


def create_contour_figure(
    contours: Sequence[ContourLevel],
    source: ReleaseSource,
    receptors: Optional[Iterable[ReceptorOutcome]] = None,
    title: Optional[str] = None,
) -> go.Figure:
    """Create a map-style figure of iso-concentration footprints."""
    fig = go.Figure()

    # Largest footprint first so higher levels draw on top
    for contour in sorted(contours, key=lambda c: c.level):
        lats = [p[0] for p in contour.polygon]
        lons = [p[1] for p in contour.polygon]
        color = severity_color(contour.level)
        label = f"{contour.level:g} mg/m3"
        if contour.truncated:
            label += " (truncated)"
        fig.add_trace(
            go.Scatter(
                x=lons,
                y=lats,
                mode="lines",
                fill="toself",
                fillcolor=color,
                opacity=0.45,
                line=dict(color=color, width=2),
                name=label,
                hovertemplate=f"{label}<extra></extra>",
            )
        )

    _add_source_marker(fig, source)
    if receptors is not None:
        _add_receptors(fig, receptors)

    if not contours:
        fig.add_annotation(text="No contour level reached", showarrow=False,
                           xref="paper", yref="paper", x=0.5, y=0.5)

    fig.update_layout(
        title=title or "Iso-Concentration Contours",
        height=700,
        template="plotly_dark",
        legend=dict(
            orientation="h",
            yanchor="bottom",
            y=-0.12,
            xanchor="center",
            x=0.5,
        ),
        margin=dict(l=60, r=60, t=60, b=80),
    )

    fig.update_xaxes(title_text="Longitude")
    # Keep metres roughly square at the source latitude
    fig.update_yaxes(
        title_text="Latitude",
        scaleanchor="x",
        scaleratio=1.0 / max(np.cos(np.radians(source.latitude)), 1e-6),
    )

    return fig


def create_centerline_figure(
    distances: np.ndarray,
    concentrations: np.ndarray,
    levels: Sequence[float] = (),
    peak_distance: Optional[float] = None,
) -> go.Figure:
    """Ground-level centerline concentration against downwind distance."""
    distances = np.asarray(distances, dtype=float)
    concentrations = np.asarray(concentrations, dtype=float)
    positive = concentrations > 0

    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=distances[positive],
            y=concentrations[positive],
            mode="lines",
            line=dict(color="gold", width=2),
            name="Centerline",
            hovertemplate="x: %{x:.0f} m<br>C: %{y:.3g} mg/m3<extra></extra>",
        )
    )

    for level in levels:
        fig.add_hline(
            y=level,
            line=dict(color=severity_color(level), dash="dash", width=1),
            annotation_text=f"{level:g} mg/m3",
            annotation_position="top right",
        )

    if peak_distance is not None:
        fig.add_vline(x=peak_distance, line=dict(color="white", dash="dot", width=1),
                      annotation_text="peak")

    fig.update_layout(
        title="Ground-Level Centerline Concentration",
        xaxis_title="Downwind distance (m)",
        yaxis_title="Concentration (mg/m3)",
        template="plotly_dark",
        height=400,
    )
    fig.update_yaxes(type="log")

    return fig


def contour_legend(contours: Sequence[ContourLevel]) -> List[dict]:
    """Level / colour / truncation rows for a map legend."""
    return [
        {"level": c.level, "color": severity_color(c.level), "truncated": c.truncated}
        for c in contours
    ]
