# MIT License
"""Record models consumed by the input aggregator.

These mirror the operational records kept by the tracking system
(production batches, lab tests, feedstock deliveries, energy usage,
facility, leakage assessments, sequestration events).  They are read-only
snapshots handed over by the storage layer; the engine never writes them.
"""
from __future__ import annotations
from datetime import date
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field
from pydantic import field_validator

from .params import BaselineType


class LabTestRecord(BaseModel):
    test_date: date
    organic_carbon_percent: Optional[float] = Field(None, ge=0.0, le=100.0)
    hydrogen_percent: Optional[float] = Field(None, ge=0.0, le=100.0)


class FeedstockAllocationRecord(BaseModel):
    """Share of a feedstock delivery used by one production batch."""

    weight_used_tonnes: float = Field(0.0, ge=0.0)
    delivery_distance_km: float = Field(0.0, ge=0.0)


class EnergyUsageRecord(BaseModel):
    energy_type: str = Field("electricity", description="electricity, diesel, gas, propane, ...")
    quantity: float = Field(0.0, ge=0.0, description="kWh for electricity, litres or kg for fuels")


class ProductionBatchRecord(BaseModel):
    """One production batch.

    `dry_mass_tonnes` falls back to `output_biochar_weight_tonnes` when not
    measured; the most recent lab test overrides the batch composition.
    """

    batch_id: str
    production_date: date
    status: Literal["in_progress", "complete", "cancelled"] = "complete"
    output_biochar_weight_tonnes: float = Field(0.0, ge=0.0)
    dry_mass_tonnes: Optional[float] = Field(None, ge=0.0)
    organic_carbon_percent: Optional[float] = Field(None, ge=0.0, le=100.0)
    hydrogen_percent: Optional[float] = Field(None, ge=0.0, le=100.0)
    ch4_emissions_kg: Optional[float] = Field(None, ge=0.0)
    n2o_emissions_kg: Optional[float] = Field(None, ge=0.0)
    lab_tests: List[LabTestRecord] = Field(default_factory=list)
    feedstock_allocations: List[FeedstockAllocationRecord] = Field(default_factory=list)
    energy_usages: List[EnergyUsageRecord] = Field(default_factory=list)

    def latest_lab_test(self) -> Optional[LabTestRecord]:
        if not self.lab_tests:
            return None
        return max(self.lab_tests, key=lambda t: t.test_date)


class FacilityRecord(BaseModel):
    facility_id: str
    baseline_type: BaselineType = "NEW_BUILT"
    baseline_carbon_storage_tco2e: float = Field(0.0, ge=0.0)
    total_infrastructure_emissions_tco2e: Optional[float] = Field(None, ge=0.0)
    infrastructure_lifetime_years: Optional[float] = Field(None, gt=0.0)


class LeakageAssessmentRecord(BaseModel):
    assessment_date: date
    facility_ecological_kg_co2e: float = Field(0.0, ge=0.0)
    biomass_ecological_kg_co2e: float = Field(0.0, ge=0.0)
    afolu_leakage_kg_co2e: float = Field(0.0, ge=0.0)
    energy_material_leakage_kg_co2e: float = Field(0.0, ge=0.0)
    iluc_contribution_kg_co2e: float = Field(0.0, ge=0.0)


class SequestrationEventRecord(BaseModel):
    final_delivery_date: date
    mean_annual_soil_temp_c: Optional[float] = None
    batch_quantities_tonnes: List[float] = Field(default_factory=list)


class AggregationParams(BaseModel):
    """Default factors used when turning records into a calculation input.

    Emission factors are conservative placeholders until the facility LCA
    supplies measured values.
    """

    transport_kg_co2e_per_tkm: float = Field(0.1, ge=0.0, description="Feedstock transport (kg CO2e per t·km)")
    energy_factors_kg_co2e: Dict[str, float] = Field(
        default_factory=lambda: {"electricity": 0.5, "diesel": 2.7, "gas": 2.0, "propane": 1.5},
        description="Emission factor per unit of energy, keyed by energy type."
    )
    default_energy_factor_kg_co2e: float = Field(0.5, ge=0.0, description="Factor for energy types missing from the table")
    end_use_transport_kg_co2e_per_tonne: float = Field(10.0, ge=0.0)
    biomass_split: Dict[str, float] = Field(
        default_factory=lambda: {"collection": 0.2, "transport": 0.6, "preprocessing": 0.2},
        description="Split of feedstock logistics emissions over biomass sub-terms."
    )
    default_organic_carbon_percent: float = Field(80.0, gt=0.0, le=100.0)
    default_hydrogen_percent: float = Field(2.0, ge=0.0, le=100.0)
    default_soil_temp_c: float = Field(15.0)
    default_infrastructure_lifetime_years: float = Field(10.0, gt=0.0)

    @field_validator("biomass_split")
    def split_sums_to_one(cls, v):
        for key in ("collection", "transport", "preprocessing"):
            if key not in v:
                raise ValueError(f"biomass_split must contain key {key}")
        total = sum(v.values())
        if not (0.99 <= total <= 1.01):
            raise ValueError("biomass_split fractions must sum to 1.0")
        return v
