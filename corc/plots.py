# MIT License
"""Plotly figure builders for the CORC audit report.

Figures are built here and rendered by the Streamlit view so that the page
code stays free of styling details.
"""

from __future__ import annotations
from typing import Iterable, Optional

import numpy as np
import pandas as pd
import plotly.graph_objects as go

from .params import MethodologyParams
from .persistence import persistence_fraction_from_ratio
from .results import CalculationResult, EmissionsBreakdown


def fig_corc_waterfall(result: CalculationResult) -> go.Figure:
    """Waterfall from stored carbon down to net CORCs.

    Parameters
    ----------
    result:
        A full calculation result.

    Returns
    -------
    plotly.graph_objects.Figure
        Five steps: C_stored, the four deductions and the net total.
    """
    labels = ["C_stored", "- C_baseline", "- C_loss", "- E_project", "- E_leakage", "Net CORCs"]
    values = [
        result.c_stored_tco2e,
        -result.c_baseline_tco2e,
        -result.c_loss_tco2e,
        -result.e_project_tco2e,
        -result.e_leakage_tco2e,
        result.net_corcs_tco2e,
    ]
    fig = go.Figure(go.Waterfall(
        measure=["absolute"] + ["relative"] * 4 + ["total"],
        x=labels,
        y=values,
        connector={"line": {"width": 1}},
    ))
    fig.update_layout(template="plotly_white", title="CORC Breakdown (tCO2e)", yaxis_title="tCO2e")
    return fig


def fig_emissions_breakdown(breakdown: EmissionsBreakdown) -> go.Figure:
    labels = ["Biomass", "Production", "Embodied", "End use", "Ecological leakage", "Market leakage"]
    values = [
        breakdown.biomass_emissions_tco2e,
        breakdown.production_emissions_tco2e,
        breakdown.embodied_emissions_tco2e,
        breakdown.end_use_emissions_tco2e,
        breakdown.ecological_leakage_tco2e,
        breakdown.market_leakage_tco2e,
    ]
    fig = go.Figure()
    fig.add_bar(x=labels, y=values, name="tCO2e")
    fig.update_layout(template="plotly_white", title="Project Emissions & Leakage", yaxis_title="tCO2e")
    return fig


def persistence_curves(
    temperatures: Iterable[float] = (10.0, 15.0, 20.0, 25.0, 30.0),
    ratios: Optional[Iterable[float]] = None,
    methodology: Optional[MethodologyParams] = None,
) -> pd.DataFrame:
    """Long-form table of PF over H/C_org for several soil temperatures.

    Returns
    -------
    pandas.DataFrame
        Columns `mean_soil_temp_c`, `h_over_corg` and
        `persistence_fraction_percent`.
    """
    methodology = methodology or MethodologyParams()
    if ratios is None:
        ratios = np.linspace(0.0, methodology.h_corg_threshold, 15)
    ratios = [float(r) for r in ratios]
    rows = []
    for t in temperatures:
        for r in ratios:
            rows.append(dict(
                mean_soil_temp_c=float(t),
                h_over_corg=r,
                persistence_fraction_percent=persistence_fraction_from_ratio(r, float(t), methodology.persistence),
            ))
    return pd.DataFrame(rows, columns=["mean_soil_temp_c", "h_over_corg", "persistence_fraction_percent"])


def fig_persistence_curves(df: pd.DataFrame, threshold: Optional[float] = None) -> go.Figure:
    """Line chart of PF against H/C_org, one line per soil temperature.

    Parameters
    ----------
    df:
        Output of :func:`persistence_curves`.
    threshold:
        Eligibility threshold drawn as a vertical line, if given.
    """
    fig = go.Figure()
    for temp, grp in df.groupby("mean_soil_temp_c"):
        fig.add_scatter(
            x=grp["h_over_corg"],
            y=grp["persistence_fraction_percent"],
            mode="lines",
            name=f"{temp:g} °C",
        )
    if threshold is not None:
        fig.add_vline(x=threshold, line_dash="dash", annotation_text="eligibility limit")
    fig.update_layout(
        template="plotly_white",
        title="Persistence Fraction vs H/C_org",
        xaxis_title="H/C_org (molar)",
        yaxis_title="PF (%)",
    )
    return fig


def fig_periods(df: pd.DataFrame) -> go.Figure:
    """Net CORCs per monitoring period; estimated periods are drawn separately."""
    fig = go.Figure()
    for status, grp in df.groupby("status"):
        if status == "failed":
            continue
        fig.add_bar(x=grp["period_id"], y=grp["net_corcs_tco2e"], name=str(status))
    fig.update_layout(template="plotly_white", title="Net CORCs per Monitoring Period", yaxis_title="tCO2e")
    return fig
