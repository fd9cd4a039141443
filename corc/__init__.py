"""Biochar CORC quantification engine.

This package converts aggregated biochar production data into certified
CO2-removal units (CORCs):

    CORCs = C_stored - C_baseline - C_loss - E_project - E_leakage

Each submodule exposes pure functions over frozen pydantic models;
tabular outputs are pandas DataFrames.  :func:`calculate_corcs` is the
full calculation, :func:`estimate_corcs` the reduced-fidelity fallback and
:func:`resolve_period` the explicit composition of both used for
monitoring periods.
"""

from .errors import ValidationError, DomainWarning
from .params import CalculationInput, MethodologyParams, PersistenceParameters, GWPValues, ProjectEmissionsInput, LeakageInput
from .results import CalculationResult, EstimateResult, CalculationSuccess, CalculationFailure, PeriodResolution
from .calculator import calculate_corcs, try_calculate_corcs, estimate_corcs, validate_input, formula_steps
from .persistence import persistence_fraction
from .quality import h_over_corg, validate_quality
from .aggregate import build_calculation_input
from .monitoring import resolve_period, recompute_periods, period_record_fields
from .utils import load_methodology, input_hash

__all__ = [
    "ValidationError",
    "DomainWarning",
    "CalculationInput",
    "MethodologyParams",
    "PersistenceParameters",
    "GWPValues",
    "ProjectEmissionsInput",
    "LeakageInput",
    "CalculationResult",
    "EstimateResult",
    "CalculationSuccess",
    "CalculationFailure",
    "PeriodResolution",
    "calculate_corcs",
    "try_calculate_corcs",
    "estimate_corcs",
    "validate_input",
    "formula_steps",
    "persistence_fraction",
    "h_over_corg",
    "validate_quality",
    "build_calculation_input",
    "resolve_period",
    "recompute_periods",
    "period_record_fields",
    "load_methodology",
    "input_hash",
]
