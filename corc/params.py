# MIT License
"""Data models for the CORC quantification engine.

All models are defined using [`pydantic.BaseModel`](https://docs.pydantic.dev/)
to provide type checking, validation and JSON serialisation.  Input models
describe one monitoring period's worth of measurements; the methodology
models carry the regulatory parameters (persistence table, global warming
potentials, thresholds) so that a methodology revision is a data change,
not a code change.

Units follow the methodology: masses in tonnes, compositions in mass
percent, emission sub-terms in kg CO2e (stack gases in kg of the raw gas).
"""
from __future__ import annotations
from typing import Literal, Tuple
from pydantic import BaseModel, ConfigDict, Field
from pydantic import field_validator

BaselineType = Literal["NEW_BUILT", "RETROFIT_FACILITY", "CHARCOAL_REPURPOSE"]
BASELINE_TYPES: Tuple[str, ...] = ("NEW_BUILT", "RETROFIT_FACILITY", "CHARCOAL_REPURPOSE")


class BiomassEmissions(BaseModel):
    """Biomass sourcing emissions (E_biomass), kg CO2e."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    cultivation: float = Field(0.0, ge=0.0, description="Cultivation emissions, dedicated crops only (kg CO2e)")
    collection: float = Field(0.0, ge=0.0, description="Collection/gathering emissions (kg CO2e)")
    transport: float = Field(0.0, ge=0.0, description="Transport to facility (kg CO2e)")
    preprocessing: float = Field(0.0, ge=0.0, description="Chipping, drying and other pre-processing (kg CO2e)")


class ProductionEmissions(BaseModel):
    """Production emissions (E_production).

    `stack_ch4_kg` and `stack_n2o_kg` are kilograms of the raw gas and are
    converted with the methodology GWP values before summation.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    energy: float = Field(0.0, ge=0.0, description="Start-up fuel and electricity (kg CO2e)")
    materials: float = Field(0.0, ge=0.0, description="Consumables and chemicals (kg CO2e)")
    waste: float = Field(0.0, ge=0.0, description="Waste disposal (kg CO2e)")
    stack_ch4_kg: float = Field(0.0, ge=0.0, description="Direct CH4 at the stack (kg CH4)")
    stack_n2o_kg: float = Field(0.0, ge=0.0, description="Direct N2O at the stack (kg N2O)")
    fossil_co2_kg: float = Field(0.0, ge=0.0, description="Fossil CO2 from impurities (kg CO2)")
    maintenance: float = Field(0.0, ge=0.0, description="Maintenance (kg CO2e)")


class EmbodiedEmissions(BaseModel):
    """Embodied emissions (E_emb), amortised over the monitoring period, kg CO2e."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    infrastructure: float = Field(0.0, ge=0.0, description="Amortised infrastructure and equipment (kg CO2e)")
    dluc: float = Field(0.0, ge=0.0, description="Direct land use change (kg CO2e)")


class EndUseEmissions(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    transport: float = Field(0.0, ge=0.0, description="Transport to the end-use site (kg CO2e)")
    packaging: float = Field(0.0, ge=0.0, description="Packaging (kg CO2e)")
    incorporation: float = Field(0.0, ge=0.0, description="Application/incorporation (kg CO2e)")


class ProjectEmissionsInput(BaseModel):
    """Full project emissions input (E_project = E_ops + E_emb)."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    biomass_emissions: BiomassEmissions = Field(default_factory=BiomassEmissions)
    production_emissions: ProductionEmissions = Field(default_factory=ProductionEmissions)
    embodied_emissions: EmbodiedEmissions = Field(default_factory=EmbodiedEmissions)
    end_use_emissions: EndUseEmissions = Field(default_factory=EndUseEmissions)
    co_product_allocation_factor: float = Field(
        1.0,
        gt=0.0,
        le=1.0,
        description="Share of production emissions allocated to biochar (energy-content basis)."
    )


class EcologicalLeakage(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    facility: float = Field(0.0, ge=0.0, description="Facility construction/extension leakage (kg CO2e)")
    biomass_sourcing: float = Field(0.0, ge=0.0, description="Biomass sourcing area leakage (kg CO2e)")


class MarketActivityLeakage(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    afolu: float = Field(0.0, ge=0.0, description="AFOLU sector displacement (kg CO2e)")
    energy_material: float = Field(0.0, ge=0.0, description="Energy/material market displacement (kg CO2e)")
    iluc: float = Field(0.0, ge=0.0, description="Indirect land use change contribution (kg CO2e)")


class LeakageInput(BaseModel):
    """Full leakage input (E_leakage = L_ECO + L_MA), kg CO2e."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    ecological_leakage: EcologicalLeakage = Field(default_factory=EcologicalLeakage)
    market_activity_leakage: MarketActivityLeakage = Field(default_factory=MarketActivityLeakage)


class CalculationInput(BaseModel):
    """Canonical input of one CORC calculation.

    Built fresh per invocation by the aggregation layer (or directly by a
    caller) and never persisted by the engine.  Ratios are only defined when
    `organic_carbon_percent` is strictly positive; that case is rejected by
    the calculator rather than here so that the failure is reported as a
    calculation outcome.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    biochar_dry_mass_tonnes: float = Field(..., ge=0.0, description="Dry mass of biochar produced (t)")
    organic_carbon_percent: float = Field(..., ge=0.0, le=100.0, description="Organic carbon content (mass %)")
    hydrogen_percent: float = Field(..., ge=0.0, le=100.0, description="Hydrogen content (mass %)")
    mean_soil_temp_c: float = Field(15.0, ge=-60.0, le=60.0, description="Mean annual soil temperature at the end-use site (°C)")
    baseline_type: BaselineType = Field("NEW_BUILT", description="Baseline scenario of the facility.")
    baseline_carbon_storage_tco2e: float = Field(0.0, ge=0.0, description="Baseline carbon storage supplied upstream (tCO2e)")
    project_emissions: ProjectEmissionsInput = Field(default_factory=ProjectEmissionsInput)
    leakage_emissions: LeakageInput = Field(default_factory=LeakageInput)


class PersistencePoint(BaseModel):
    """One row of the BC+200 persistence table: PF = m - a × H/C_org at `temp_c`."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    temp_c: float
    m: float = Field(..., ge=0.0, le=100.0, description="Permanence intercept (%)")
    a: float = Field(..., gt=0.0, description="Hydrogen-sensitivity coefficient")


class PersistenceParameters(BaseModel):
    """Immutable, temperature-ordered persistence lookup table.

    Between tabulated temperatures the coefficients are interpolated
    linearly; outside the table the nearest entry applies (see
    :func:`corc.persistence.persistence_params`).

    The default rows at 10, 15, 25 and 30 °C are those of Puro Biochar
    Methodology 2025 Table 6.1 (BC+200); the 20 °C row is the reference
    point M = 89.87, a = 35.29.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    points: Tuple[PersistencePoint, ...] = Field(
        default_factory=lambda: (
            PersistencePoint(temp_c=10.0, m=94.49, a=18.28),
            PersistencePoint(temp_c=15.0, m=89.10, a=32.56),
            PersistencePoint(temp_c=20.0, m=89.87, a=35.29),
            PersistencePoint(temp_c=25.0, m=86.19, a=44.71),
            PersistencePoint(temp_c=30.0, m=86.19, a=48.25),
        )
    )

    @field_validator("points")
    @classmethod
    def strictly_increasing(cls, v):
        if len(v) < 1:
            raise ValueError("persistence table must contain at least one point")
        temps = [p.temp_c for p in v]
        if any(b <= a for a, b in zip(temps, temps[1:])):
            raise ValueError("persistence table temperatures must be strictly increasing")
        return v

    @property
    def temperatures(self) -> Tuple[float, ...]:
        return tuple(p.temp_c for p in self.points)

    @property
    def min_temp_c(self) -> float:
        return self.points[0].temp_c

    @property
    def max_temp_c(self) -> float:
        return self.points[-1].temp_c


class GWPValues(BaseModel):
    """Versioned 100-year global warming potentials used for stack gases."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    version: str = Field("IPCC AR5 GWP100", description="Source of the GWP values.")
    co2: float = Field(1.0, gt=0.0)
    ch4: float = Field(28.0, gt=0.0)
    n2o: float = Field(265.0, gt=0.0)


class MethodologyParams(BaseModel):
    """Regulatory parameters of the biochar methodology edition in use."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    calculation_version: str = Field("puro-biochar-2025-v1.0.0", description="Identifier recorded on every result.")
    permanence_type: Literal["BC100+", "BC200+"] = Field("BC200+")
    persistence: PersistenceParameters = Field(default_factory=PersistenceParameters)
    gwp: GWPValues = Field(default_factory=GWPValues)
    h_corg_threshold: float = Field(
        0.7,
        gt=0.0,
        le=2.0,
        description="Maximum H/C_org molar ratio for CORC eligibility."
    )
    h_corg_warning_level: float = Field(
        0.6,
        gt=0.0,
        le=2.0,
        description="H/C_org ratio above which an input is flagged as close to the threshold."
    )
    estimator_emission_fraction: float = Field(
        0.20,
        ge=0.0,
        le=1.0,
        description="Conservative emissions estimate used by the fallback estimator, as a fraction of C_stored."
    )
