# MIT License
"""Monitoring-period resolution.

A monitoring period is quantified with the full calculation whenever its
input allows it.  When the calculation fails, :func:`resolve_period`
decides, visibly, to fall back to the estimator, and marks the resolution
as approximate.  :func:`recompute_periods` applies this to many periods and
returns one row per period; periods share no state, so callers are free to
parallelise the calls.
"""

from __future__ import annotations
import logging
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from .calculator import coerce_input, estimate_corcs, try_calculate_corcs
from .errors import ValidationError
from .params import CalculationInput, MethodologyParams
from .results import CalculationResult, CalculationSuccess, PeriodResolution

logger = logging.getLogger(__name__)

PERIOD_COLUMNS = [
    "period_id",
    "status",
    "approximate",
    "c_stored_tco2e",
    "c_baseline_tco2e",
    "c_loss_tco2e",
    "persistence_fraction_percent",
    "e_project_tco2e",
    "e_leakage_tco2e",
    "net_corcs_tco2e",
    "quality_valid",
    "errors",
]


def resolve_period(inp: CalculationInput, methodology: Optional[MethodologyParams] = None) -> PeriodResolution:
    """Quantify one monitoring period, falling back to an estimate on failure.

    Parameters
    ----------
    inp:
        Aggregated input of the period.
    methodology:
        Methodology parameters shared by both paths.

    Returns
    -------
    PeriodResolution
        With `result` set on success; with `estimate` set and
        ``approximate=True`` when the full calculation failed but the
        composition still allows an estimate; with only `errors` otherwise.
    """
    outcome = try_calculate_corcs(inp, methodology)
    if isinstance(outcome, CalculationSuccess):
        return PeriodResolution(result=outcome.result)

    logger.warning("Full calculation failed, falling back to estimate: %s", "; ".join(outcome.errors))
    try:
        estimate = estimate_corcs(
            inp.biochar_dry_mass_tonnes,
            inp.organic_carbon_percent,
            inp.hydrogen_percent,
            inp.mean_soil_temp_c,
            methodology,
        )
    except ValidationError as exc:
        logger.error("Estimate also failed: %s", "; ".join(exc.errors))
        return PeriodResolution(errors=outcome.errors + tuple(exc.errors))
    return PeriodResolution(estimate=estimate, approximate=True, errors=outcome.errors)


def period_record_fields(result: CalculationResult) -> Dict[str, float]:
    """Scalar fields stored on the monitoring-period record before issuance."""
    return dict(
        c_stored_tco2e=result.c_stored_tco2e,
        c_baseline_tco2e=result.c_baseline_tco2e,
        c_loss_tco2e=result.c_loss_tco2e,
        persistence_fraction_percent=result.persistence_fraction_percent,
        e_project_tco2e=result.e_project_tco2e,
        e_leakage_tco2e=result.e_leakage_tco2e,
        net_corcs_tco2e=result.net_corcs_tco2e,
    )


def _row(period_id: str, res: PeriodResolution) -> dict:
    nan = float("nan")
    row = dict(period_id=period_id, approximate=res.approximate, errors="; ".join(res.errors))
    if res.result is not None:
        r = res.result
        row.update(period_record_fields(r), status="calculated", quality_valid=r.quality_valid)
    elif res.estimate is not None:
        e = res.estimate
        row.update(
            status="estimated",
            c_stored_tco2e=e.c_stored_tco2e,
            c_baseline_tco2e=nan,
            c_loss_tco2e=e.c_loss_tco2e,
            persistence_fraction_percent=e.persistence_fraction_percent,
            e_project_tco2e=nan,
            e_leakage_tco2e=nan,
            net_corcs_tco2e=e.estimated_corcs_tco2e,
            quality_valid=None,
        )
    else:
        row.update(status="failed", quality_valid=None)
    return row


def inputs_from_frame(df: pd.DataFrame) -> List[Tuple[str, CalculationInput]]:
    """Build ``(period_id, input)`` pairs from a flat table, one period per row.

    Required columns are `period_id`, `biochar_dry_mass_tonnes`,
    `organic_carbon_percent` and `hydrogen_percent`; any other top-level
    :class:`CalculationInput` field present as a column is used too.
    Emission and leakage sub-terms cannot be given this way.

    Raises
    ------
    ValidationError
        If a required column is missing or a row does not validate.
    """
    required = ["period_id", "biochar_dry_mass_tonnes", "organic_carbon_percent", "hydrogen_percent"]
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValidationError(f"Missing columns: {', '.join(missing)}")
    scalar_fields = [
        "biochar_dry_mass_tonnes",
        "organic_carbon_percent",
        "hydrogen_percent",
        "mean_soil_temp_c",
        "baseline_type",
        "baseline_carbon_storage_tco2e",
    ]
    cols = [c for c in scalar_fields if c in df.columns]
    pairs = []
    for rec in df.to_dict(orient="records"):
        data = {c: rec[c] for c in cols if not pd.isna(rec[c])}
        pairs.append((str(rec["period_id"]), coerce_input(data)))
    return pairs


def recompute_periods(
    periods: Iterable[Tuple[str, CalculationInput]],
    methodology: Optional[MethodologyParams] = None,
) -> pd.DataFrame:
    """Recompute many monitoring periods.

    Parameters
    ----------
    periods:
        ``(period_id, input)`` pairs.

    Returns
    -------
    pandas.DataFrame
        One row per period with columns listed in :data:`PERIOD_COLUMNS`.
        `status` is 'calculated', 'estimated' or 'failed'; values the
        estimator does not produce are NaN.
    """
    rows = [_row(period_id, resolve_period(inp, methodology)) for period_id, inp in periods]
    return pd.DataFrame(rows, columns=PERIOD_COLUMNS)
