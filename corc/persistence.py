# MIT License
"""Persistence fraction estimator (BC+200 permanence model).

The persistence fraction PF is the share of stored carbon expected to remain
sequestered over the accounting horizon:

    PF = M - a × H/C_org

where ``M`` and ``a`` depend on the mean annual soil temperature and come
from the :class:`~corc.params.PersistenceParameters` table.  Between
tabulated temperatures both coefficients are interpolated linearly.  Outside
the table the coefficients of the nearest entry are used and the clamped
temperature is reported back to the caller.
"""

from __future__ import annotations
import logging
import math
from typing import Iterable, Optional, Tuple

import numpy as np
import pandas as pd

from .errors import ValidationError
from .params import MethodologyParams, PersistenceParameters
from .quality import h_over_corg

logger = logging.getLogger(__name__)

DEFAULT_SENSITIVITY_RATIOS = (0.3, 0.4, 0.5, 0.6, 0.7)


def clamp_temperature(mean_soil_temp_c: float, table: PersistenceParameters) -> float:
    """Clamp a soil temperature into the tabulated range."""
    return min(max(mean_soil_temp_c, table.min_temp_c), table.max_temp_c)


def persistence_params(mean_soil_temp_c: float, table: Optional[PersistenceParameters] = None) -> Tuple[float, float, float]:
    """Look up the persistence coefficients for a soil temperature.

    Parameters
    ----------
    mean_soil_temp_c:
        Mean annual soil temperature (°C).
    table:
        Persistence table; defaults to the current methodology table.

    Returns
    -------
    tuple of float
        ``(M, a, temp_used_c)`` where `temp_used_c` is the temperature after
        clamping to the table range.
    """
    if not math.isfinite(mean_soil_temp_c):
        raise ValidationError("Mean soil temperature must be a finite number")
    table = table or PersistenceParameters()
    temp_used = clamp_temperature(mean_soil_temp_c, table)
    if temp_used != mean_soil_temp_c:
        logger.info(
            "Soil temperature %.2f °C outside persistence table range [%.1f, %.1f]; using %.1f °C",
            mean_soil_temp_c, table.min_temp_c, table.max_temp_c, temp_used,
        )
    temps = np.array(table.temperatures, dtype=float)
    m = float(np.interp(temp_used, temps, [p.m for p in table.points]))
    a = float(np.interp(temp_used, temps, [p.a for p in table.points]))
    return m, a, temp_used


def persistence_fraction_from_ratio(ratio: float, mean_soil_temp_c: float, table: Optional[PersistenceParameters] = None) -> float:
    """PF (%) for an already computed H/C_org ratio, clamped to [0, 100]."""
    if ratio < 0:
        raise ValidationError("H/C_org ratio cannot be negative")
    m, a, _ = persistence_params(mean_soil_temp_c, table)
    pf = m - a * ratio
    return max(0.0, min(100.0, pf))


def persistence_fraction(
    mean_soil_temp_c: float,
    hydrogen_percent: float,
    organic_carbon_percent: float,
    table: Optional[PersistenceParameters] = None,
) -> float:
    """Compute the persistence fraction from soil temperature and composition.

    Parameters
    ----------
    mean_soil_temp_c:
        Mean annual soil temperature (°C).
    hydrogen_percent:
        Hydrogen mass content (%).
    organic_carbon_percent:
        Organic carbon mass content (%).

    Returns
    -------
    float
        Persistence fraction in percent, clamped to [0, 100].

    Raises
    ------
    ValidationError
        If `organic_carbon_percent` is zero.
    """
    ratio = h_over_corg(hydrogen_percent, organic_carbon_percent)
    return persistence_fraction_from_ratio(ratio, mean_soil_temp_c, table)


def permanent_carbon(c_stored_tco2e: float, persistence_fraction_percent: float) -> float:
    """Carbon expected to remain after the accounting horizon (tCO2e)."""
    return c_stored_tco2e * (persistence_fraction_percent / 100.0)


def persistence_breakdown(ratio: float, mean_soil_temp_c: float, c_stored_tco2e: float, table: Optional[PersistenceParameters] = None) -> dict:
    """Every intermediate value of the persistence step, for audit reports."""
    m, a, temp_used = persistence_params(mean_soil_temp_c, table)
    pf = max(0.0, min(100.0, m - a * ratio))
    loss_percent = 100.0 - pf
    return dict(
        h_over_corg=ratio,
        mean_soil_temp_c=mean_soil_temp_c,
        temp_used_c=temp_used,
        m=m,
        a=a,
        persistence_fraction_percent=pf,
        loss_percent=loss_percent,
        c_stored_tco2e=c_stored_tco2e,
        c_loss_tco2e=c_stored_tco2e * loss_percent / 100.0,
        permanent_carbon_tco2e=permanent_carbon(c_stored_tco2e, pf),
    )


def persistence_range(
    mean_soil_temp_c: float,
    ratios: Iterable[float] = DEFAULT_SENSITIVITY_RATIOS,
    methodology: Optional[MethodologyParams] = None,
) -> pd.DataFrame:
    """Sensitivity of PF to the H/C_org ratio at one temperature.

    Returns
    -------
    pandas.DataFrame
        One row per ratio with columns `h_over_corg`,
        `persistence_fraction_percent` and `eligible`.
    """
    methodology = methodology or MethodologyParams()
    rows = []
    for r in ratios:
        rows.append(dict(
            h_over_corg=float(r),
            persistence_fraction_percent=persistence_fraction_from_ratio(float(r), mean_soil_temp_c, methodology.persistence),
            eligible=float(r) <= methodology.h_corg_threshold,
        ))
    return pd.DataFrame(rows, columns=["h_over_corg", "persistence_fraction_percent", "eligible"])
