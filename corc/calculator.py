# MIT License
"""Net CORC resolver and the fallback estimator.

Main quantification formula::

    CORCs = C_stored - C_baseline - C_loss - E_project - E_leakage

:func:`calculate_corcs` computes every term from a
:class:`~corc.params.CalculationInput` and raises
:class:`~corc.errors.ValidationError` when a term is undefined.
:func:`try_calculate_corcs` wraps it into a tagged outcome so that the
caller decides explicitly whether to fall back to :func:`estimate_corcs`.

The calculation is a pure function of its input and methodology: no I/O,
no shared state, and identical inputs yield identical results.
"""

from __future__ import annotations
import logging
import math
import warnings
from typing import Any, Dict, List, Mapping, Optional, Union

import pandas as pd
import pydantic

from .carbon import c_baseline, c_loss, c_stored
from .emissions import project_emissions_kg
from .errors import DomainWarning, ValidationError
from .leakage import leakage_kg
from .params import BASELINE_TYPES, CalculationInput, MethodologyParams
from .persistence import persistence_fraction_from_ratio, persistence_params
from .quality import h_over_corg, is_quality_valid
from .results import (
    CalculationFailure,
    CalculationOutcome,
    CalculationResult,
    CalculationSuccess,
    EmissionsBreakdown,
    EstimateResult,
    InputValidationReport,
)
from .utils import input_hash, kg_to_tonnes

logger = logging.getLogger(__name__)

ESTIMATE_NOTE = (
    "Estimate using a conservative emissions assumption ({pct:.0f}% of C_stored). "
    "Full LCA calculation required for actual CORC issuance."
)


def coerce_input(raw: Union[CalculationInput, Mapping[str, Any]]) -> CalculationInput:
    """Return `raw` as a :class:`CalculationInput`.

    Plain mappings are validated; pydantic validation failures are
    re-raised as :class:`~corc.errors.ValidationError` with one message per
    offending field.
    """
    if isinstance(raw, CalculationInput):
        return raw
    try:
        return CalculationInput.model_validate(raw)
    except pydantic.ValidationError as exc:
        messages = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
        raise ValidationError("Invalid calculation input", messages) from exc


def resolve_net_corcs(
    c_stored_tco2e: float,
    c_baseline_tco2e: float,
    c_loss_tco2e: float,
    e_project_tco2e: float,
    e_leakage_tco2e: float,
) -> float:
    """Combine the five terms into net CORCs (tCO2e).

    Raises
    ------
    ValidationError
        If any term is NaN or infinite.
    """
    terms = dict(
        c_stored=c_stored_tco2e,
        c_baseline=c_baseline_tco2e,
        c_loss=c_loss_tco2e,
        e_project=e_project_tco2e,
        e_leakage=e_leakage_tco2e,
    )
    bad = [name for name, value in terms.items() if value is None or not math.isfinite(value)]
    if bad:
        raise ValidationError(f"Undefined calculation terms: {', '.join(bad)}", [f"{name} is not a finite number" for name in bad])
    return c_stored_tco2e - c_baseline_tco2e - c_loss_tco2e - e_project_tco2e - e_leakage_tco2e


def calculate_corcs(
    inp: Union[CalculationInput, Mapping[str, Any]],
    methodology: Optional[MethodologyParams] = None,
) -> CalculationResult:
    """Calculate net CORCs with the full five-term breakdown.

    Parameters
    ----------
    inp:
        Calculation input, or a mapping that validates into one.
    methodology:
        Methodology parameters (persistence table, GWPs, threshold).
        Defaults to the current edition.

    Returns
    -------
    CalculationResult
        All terms in tCO2e.  `quality_valid` is advisory; an ineligible
        batch still gets a numeric result and a :class:`DomainWarning`.

    Raises
    ------
    ValidationError
        On malformed input, zero organic carbon, or any non-finite term.
    """
    inp = coerce_input(inp)
    methodology = methodology or MethodologyParams()
    notes: List[str] = []

    ratio = h_over_corg(inp.hydrogen_percent, inp.organic_carbon_percent)

    m, a, temp_used = persistence_params(inp.mean_soil_temp_c, methodology.persistence)
    if temp_used != inp.mean_soil_temp_c:
        notes.append(
            f"Soil temperature {inp.mean_soil_temp_c:g} °C is outside the persistence table "
            f"range; coefficients for {temp_used:g} °C were used."
        )
    pf = max(0.0, min(100.0, m - a * ratio))

    stored = c_stored(inp.biochar_dry_mass_tonnes, inp.organic_carbon_percent)
    loss = c_loss(stored, pf)
    baseline = c_baseline(inp.baseline_carbon_storage_tco2e)

    project = project_emissions_kg(inp.project_emissions, methodology.gwp)
    leak = leakage_kg(inp.leakage_emissions)
    # single kg -> t conversion point
    e_project = kg_to_tonnes(project["total"])
    e_leakage = kg_to_tonnes(leak["total"])

    quality_valid = is_quality_valid(ratio, methodology.h_corg_threshold)
    if not quality_valid:
        notes.append(
            f"H/C_org ratio {ratio:.3f} exceeds the {methodology.h_corg_threshold} eligibility threshold."
        )

    net = resolve_net_corcs(stored, baseline, loss, e_project, e_leakage)
    logger.debug(
        "CORC terms tCO2e: stored=%.6f baseline=%.6f loss=%.6f project=%.6f leakage=%.6f net=%.6f (PF %.4f %%)",
        stored, baseline, loss, e_project, e_leakage, net, pf,
    )
    for note in notes:
        logger.warning(note)
        warnings.warn(note, DomainWarning, stacklevel=2)

    return CalculationResult(
        c_stored_tco2e=stored,
        c_baseline_tco2e=baseline,
        c_loss_tco2e=loss,
        persistence_fraction_percent=pf,
        e_project_tco2e=e_project,
        e_leakage_tco2e=e_leakage,
        net_corcs_tco2e=net,
        quality_valid=quality_valid,
        permanence_type=methodology.permanence_type,
        breakdown=EmissionsBreakdown(
            biomass_emissions_tco2e=kg_to_tonnes(project["biomass"]),
            production_emissions_tco2e=kg_to_tonnes(project["production_allocated"]),
            embodied_emissions_tco2e=kg_to_tonnes(project["embodied"]),
            end_use_emissions_tco2e=kg_to_tonnes(project["end_use"]),
            ecological_leakage_tco2e=kg_to_tonnes(leak["ecological"]),
            market_leakage_tco2e=kg_to_tonnes(leak["market_activity"]),
        ),
        h_over_corg=ratio,
        temp_used_c=temp_used,
        calculation_version=methodology.calculation_version,
        gwp_version=methodology.gwp.version,
        input_hash=input_hash(inp),
        warnings=tuple(notes),
    )


def try_calculate_corcs(
    inp: Union[CalculationInput, Mapping[str, Any]],
    methodology: Optional[MethodologyParams] = None,
) -> CalculationOutcome:
    """Run :func:`calculate_corcs` and report the outcome as a tagged value.

    Never raises :class:`~corc.errors.ValidationError`; a failure carries the
    error messages so the caller can decide to use :func:`estimate_corcs`.
    """
    try:
        result = calculate_corcs(inp, methodology)
    except ValidationError as exc:
        logger.warning("CORC calculation failed: %s", "; ".join(exc.errors))
        return CalculationFailure(errors=tuple(exc.errors))
    return CalculationSuccess(result=result)


def estimate_corcs(
    biochar_mass: float,
    organic_carbon_percent: float,
    hydrogen_percent: float,
    mean_soil_temp_c: float,
    methodology: Optional[MethodologyParams] = None,
) -> EstimateResult:
    """Quick, reduced-fidelity CORC estimate without LCA data.

    Persistence, stored carbon and carbon loss use the same formulas as
    :func:`calculate_corcs`; project emissions and leakage are replaced by a
    single conservative term (a fraction of C_stored).

    Parameters
    ----------
    biochar_mass:
        Dry mass of biochar (t).
    organic_carbon_percent:
        Organic carbon content (%).
    hydrogen_percent:
        Hydrogen content (%).
    mean_soil_temp_c:
        Mean soil temperature at the end-use location (°C).

    Returns
    -------
    EstimateResult
        Always flagged with ``is_approximation=True``.  The estimated
        CORCs are floored at zero.

    Raises
    ------
    ValidationError
        On zero organic carbon or when any estimate term is not finite.
    """
    methodology = methodology or MethodologyParams()
    ratio = h_over_corg(hydrogen_percent, organic_carbon_percent)
    pf = persistence_fraction_from_ratio(ratio, mean_soil_temp_c, methodology.persistence)
    stored = c_stored(biochar_mass, organic_carbon_percent)
    loss = c_loss(stored, pf)
    emissions = stored * methodology.estimator_emission_fraction
    terms = dict(c_stored=stored, c_loss=loss, estimated_emissions=emissions)
    bad = [name for name, value in terms.items() if not math.isfinite(value)]
    if bad:
        raise ValidationError(f"Undefined estimate terms: {', '.join(bad)}", [f"{name} is not a finite number" for name in bad])
    return EstimateResult(
        c_stored_tco2e=stored,
        c_loss_tco2e=loss,
        estimated_emissions_tco2e=emissions,
        estimated_corcs_tco2e=max(0.0, stored - loss - emissions),
        persistence_fraction_percent=pf,
        note=ESTIMATE_NOTE.format(pct=methodology.estimator_emission_fraction * 100),
    )


def validate_input(inp: CalculationInput, methodology: Optional[MethodologyParams] = None) -> InputValidationReport:
    """Pre-flight checks on an input, split into blocking errors and warnings."""
    methodology = methodology or MethodologyParams()
    table = methodology.persistence
    errors: List[str] = []
    warns: List[str] = []

    if inp.biochar_dry_mass_tonnes <= 0:
        errors.append("Biochar dry mass must be greater than 0")
    if inp.organic_carbon_percent <= 0 or inp.organic_carbon_percent > 100:
        errors.append("Organic carbon percent must be between 0 and 100")
    if inp.hydrogen_percent < 0 or inp.hydrogen_percent > 100:
        errors.append("Hydrogen percent must be between 0 and 100")

    try:
        ratio = h_over_corg(inp.hydrogen_percent, inp.organic_carbon_percent)
    except ValidationError:
        errors.append("Unable to calculate H/C_org ratio")
    else:
        if ratio > methodology.h_corg_threshold:
            warns.append(
                f"H/C_org ratio ({ratio:.3f}) exceeds {methodology.h_corg_threshold} threshold. "
                "Biochar is not eligible for CORC issuance."
            )
        elif ratio > methodology.h_corg_warning_level:
            warns.append(
                f"H/C_org ratio ({ratio:.3f}) is close to {methodology.h_corg_threshold} threshold. "
                "Consider optimizing pyrolysis conditions."
            )

    if inp.mean_soil_temp_c < table.min_temp_c:
        warns.append(
            f"Soil temperature ({inp.mean_soil_temp_c}°C) is below model range "
            f"({table.min_temp_c:g}-{table.max_temp_c:g}°C). Using {table.min_temp_c:g}°C for calculation."
        )
    elif inp.mean_soil_temp_c > table.max_temp_c:
        warns.append(
            f"Soil temperature ({inp.mean_soil_temp_c}°C) is above model range "
            f"({table.min_temp_c:g}-{table.max_temp_c:g}°C). Using {table.max_temp_c:g}°C for calculation."
        )

    if inp.baseline_type not in BASELINE_TYPES:
        errors.append(f"Invalid baseline type: {inp.baseline_type}")
    if inp.baseline_type == "CHARCOAL_REPURPOSE" and inp.baseline_carbon_storage_tco2e <= 0:
        warns.append("Charcoal repurpose baseline type requires baseline carbon storage value")

    return InputValidationReport(errors=errors, warnings=warns)


def formula_steps(inp: CalculationInput, result: CalculationResult) -> pd.DataFrame:
    """Step-by-step audit table of a calculation.

    Returns
    -------
    pandas.DataFrame
        Columns `step`, `formula`, `value` and `unit`, one row per term.
    """
    rows = [
        ("1. H/C_org ratio", "H/C_org = (m_H / m_C_org) × 12", result.h_over_corg, "molar ratio"),
        ("2. C_stored", "C_stored = Q_biochar × C_org × (44/12)", result.c_stored_tco2e, "tCO2e"),
        ("3. C_baseline", f"Baseline type: {inp.baseline_type}", result.c_baseline_tco2e, "tCO2e"),
        ("4. Persistence fraction", f"PF = M - a × H/C_org at {result.temp_used_c:g} °C", result.persistence_fraction_percent, "%"),
        ("5. C_loss", "C_loss = C_stored × (100 - PF) / 100", result.c_loss_tco2e, "tCO2e"),
        ("6. E_project", "E_project = E_biomass + E_production + E_use + E_emb", result.e_project_tco2e, "tCO2e"),
        ("7. E_leakage", "E_leakage = L_ECO + L_MA", result.e_leakage_tco2e, "tCO2e"),
        ("8. Net CORCs", "CORCs = C_stored - C_baseline - C_loss - E_project - E_leakage", result.net_corcs_tco2e, "tCO2e"),
    ]
    return pd.DataFrame(rows, columns=["step", "formula", "value", "unit"])


def efficiency_metrics(inp: CalculationInput, result: CalculationResult) -> Dict[str, float]:
    """Carbon efficiency ratios of a calculation.

    Ratios with a zero denominator are reported as NaN.
    """
    nan = float("nan")
    stored = result.c_stored_tco2e
    mass = inp.biochar_dry_mass_tonnes
    deductions = result.c_baseline_tco2e + result.c_loss_tco2e + result.e_project_tco2e + result.e_leakage_tco2e
    return dict(
        carbon_efficiency_percent=result.net_corcs_tco2e / stored * 100.0 if stored else nan,
        emission_intensity_tco2e_per_t=(result.e_project_tco2e + result.e_leakage_tco2e) / mass if mass else nan,
        net_corcs_per_t=result.net_corcs_tco2e / mass if mass else nan,
        gross_to_net_ratio_percent=max(0.0, (stored - deductions) / stored * 100.0) if stored else nan,
    )
