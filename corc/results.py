# MIT License
"""Result models returned by the CORC engine.

Results are pure outputs.  Persisting selected fields onto a monitoring
period record is the caller's job (see
:func:`corc.monitoring.period_record_fields`).
"""
from __future__ import annotations
from typing import Annotated, List, Literal, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field


class EmissionsBreakdown(BaseModel):
    """Per-category emissions of a calculation, tCO2e."""

    model_config = ConfigDict(frozen=True)

    biomass_emissions_tco2e: float
    production_emissions_tco2e: float
    embodied_emissions_tco2e: float
    end_use_emissions_tco2e: float
    ecological_leakage_tco2e: float = 0.0
    market_leakage_tco2e: float = 0.0


class CalculationResult(BaseModel):
    """Certified net CORC quantity with the five-term audit breakdown.

    `net_corcs_tco2e` always equals
    ``c_stored - c_baseline - c_loss - e_project - e_leakage``; it is not
    clamped at zero.  `quality_valid` is advisory: an ineligible batch still
    carries a numeric result.
    """

    model_config = ConfigDict(frozen=True)

    c_stored_tco2e: float
    c_baseline_tco2e: float
    c_loss_tco2e: float
    persistence_fraction_percent: float
    e_project_tco2e: float
    e_leakage_tco2e: float
    net_corcs_tco2e: float
    quality_valid: bool
    permanence_type: str
    breakdown: EmissionsBreakdown
    h_over_corg: float
    temp_used_c: float
    calculation_version: str
    gwp_version: str
    input_hash: str
    warnings: Tuple[str, ...] = ()


class EstimateResult(BaseModel):
    """Reduced-fidelity fallback result.

    Emissions and leakage are replaced by a single coarse term, so this
    always carries less information than :class:`CalculationResult` and
    must be shown as an approximation.
    """

    model_config = ConfigDict(frozen=True)

    c_stored_tco2e: float
    c_loss_tco2e: float
    estimated_emissions_tco2e: float
    estimated_corcs_tco2e: float
    persistence_fraction_percent: float
    is_approximation: Literal[True] = True
    note: str = ""


class CalculationSuccess(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["ok"] = "ok"
    result: CalculationResult

    @property
    def ok(self) -> bool:
        return True


class CalculationFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["failed"] = "failed"
    errors: Tuple[str, ...]

    @property
    def ok(self) -> bool:
        return False


CalculationOutcome = Annotated[Union[CalculationSuccess, CalculationFailure], Field(discriminator="status")]


class QualityReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    h_over_corg: float
    is_valid: bool
    threshold: float
    classification: str
    message: str


class InputValidationReport(BaseModel):
    """Errors block a calculation, warnings do not."""

    model_config = ConfigDict(frozen=True)

    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


class PeriodResolution(BaseModel):
    """Outcome of resolving one monitoring period.

    Exactly one of `result` / `estimate` is set when the period could be
    quantified at all; `approximate` tells the caller which one.
    """

    model_config = ConfigDict(frozen=True)

    result: Optional[CalculationResult] = None
    estimate: Optional[EstimateResult] = None
    approximate: bool = False
    errors: Tuple[str, ...] = ()

    @property
    def resolved(self) -> bool:
        return self.result is not None or self.estimate is not None
