# MIT License
"""Aggregation of operational records into a calculation input.

Functions in this module merge the production batches, lab tests,
feedstock allocations, energy usage, facility data, leakage assessment and
sequestration events of one monitoring period into a single
:class:`~corc.params.CalculationInput`.  Per-batch quantities are first laid
out in a pandas DataFrame (:func:`batches_frame`); composition is then
averaged over batches weighted by dry mass.  The transformation is kept
simple and transparent so that each aggregated figure can be traced back
to its records.
"""

from __future__ import annotations
import logging
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from .errors import ValidationError
from .params import (
    BiomassEmissions,
    CalculationInput,
    EcologicalLeakage,
    EmbodiedEmissions,
    EndUseEmissions,
    LeakageInput,
    MarketActivityLeakage,
    ProductionEmissions,
    ProjectEmissionsInput,
)
from .records import (
    AggregationParams,
    FacilityRecord,
    LeakageAssessmentRecord,
    ProductionBatchRecord,
    SequestrationEventRecord,
)
from .utils import tonnes_to_kg

logger = logging.getLogger(__name__)

BATCH_COLUMNS = [
    "batch_id",
    "dry_mass_t",
    "organic_carbon_percent",
    "hydrogen_percent",
    "composition_source",
    "stack_ch4_kg",
    "stack_n2o_kg",
    "feedstock_transport_kg_co2e",
    "energy_kg_co2e",
]


def _energy_factor(energy_type: str, params: AggregationParams) -> float:
    return params.energy_factors_kg_co2e.get(energy_type.lower(), params.default_energy_factor_kg_co2e)


def batches_frame(batches: Iterable[ProductionBatchRecord], params: Optional[AggregationParams] = None) -> pd.DataFrame:
    """Lay out completed production batches, one row per batch.

    Parameters
    ----------
    batches:
        Production batch records of the monitoring period.  Batches that
        are not complete are skipped.
    params:
        Aggregation factors and composition defaults.

    Returns
    -------
    pandas.DataFrame
        Columns: batch_id, dry_mass_t, organic_carbon_percent,
        hydrogen_percent, composition_source ('lab_test', 'batch' or
        'default'), stack_ch4_kg, stack_n2o_kg,
        feedstock_transport_kg_co2e and energy_kg_co2e.
    """
    params = params or AggregationParams()
    rows = []
    for b in batches:
        if b.status != "complete":
            continue
        dry_mass = b.dry_mass_tonnes if b.dry_mass_tonnes is not None else b.output_biochar_weight_tonnes
        lab = b.latest_lab_test()
        # the most recent lab test overrides batch values field by field
        oc = next((v for v in (lab and lab.organic_carbon_percent, b.organic_carbon_percent) if v is not None), None)
        h = next((v for v in (lab and lab.hydrogen_percent, b.hydrogen_percent) if v is not None), None)
        if lab is not None and (lab.organic_carbon_percent is not None or lab.hydrogen_percent is not None):
            source = "lab_test"
        elif oc is not None or h is not None:
            source = "batch"
        else:
            source = "default"
        if oc is None:
            oc = params.default_organic_carbon_percent
        if h is None:
            h = params.default_hydrogen_percent
        transport = sum(
            a.delivery_distance_km * a.weight_used_tonnes * params.transport_kg_co2e_per_tkm
            for a in b.feedstock_allocations
        )
        energy = sum(e.quantity * _energy_factor(e.energy_type, params) for e in b.energy_usages)
        rows.append(dict(
            batch_id=b.batch_id,
            dry_mass_t=dry_mass,
            organic_carbon_percent=oc,
            hydrogen_percent=h,
            composition_source=source,
            stack_ch4_kg=b.ch4_emissions_kg or 0.0,
            stack_n2o_kg=b.n2o_emissions_kg or 0.0,
            feedstock_transport_kg_co2e=transport,
            energy_kg_co2e=energy,
        ))
    return pd.DataFrame(rows, columns=BATCH_COLUMNS)


def mean_soil_temperature(
    events: Iterable[SequestrationEventRecord],
    override_c: Optional[float] = None,
    params: Optional[AggregationParams] = None,
) -> float:
    """Mean of the recorded event soil temperatures.

    Falls back to `override_c`, then to the configured default (15 °C) when
    no event carries a temperature.
    """
    params = params or AggregationParams()
    temps = [e.mean_annual_soil_temp_c for e in events if e.mean_annual_soil_temp_c is not None]
    if temps:
        return float(np.mean(temps))
    if override_c is not None:
        return float(override_c)
    return params.default_soil_temp_c


def embodied_infrastructure_kg(facility: FacilityRecord, params: Optional[AggregationParams] = None) -> float:
    """Infrastructure emissions amortised over the facility lifetime (kg CO2e per period)."""
    params = params or AggregationParams()
    total_t = facility.total_infrastructure_emissions_tco2e or 0.0
    lifetime = facility.infrastructure_lifetime_years or params.default_infrastructure_lifetime_years
    return tonnes_to_kg(total_t) / lifetime


def leakage_from_assessment(assessment: Optional[LeakageAssessmentRecord]) -> LeakageInput:
    if assessment is None:
        return LeakageInput()
    return LeakageInput(
        ecological_leakage=EcologicalLeakage(
            facility=assessment.facility_ecological_kg_co2e,
            biomass_sourcing=assessment.biomass_ecological_kg_co2e,
        ),
        market_activity_leakage=MarketActivityLeakage(
            afolu=assessment.afolu_leakage_kg_co2e,
            energy_material=assessment.energy_material_leakage_kg_co2e,
            iluc=assessment.iluc_contribution_kg_co2e,
        ),
    )


def latest_assessment(assessments: Iterable[LeakageAssessmentRecord]) -> Optional[LeakageAssessmentRecord]:
    assessments = list(assessments)
    if not assessments:
        return None
    return max(assessments, key=lambda a: a.assessment_date)


def build_calculation_input(
    batches: Iterable[ProductionBatchRecord],
    facility: FacilityRecord,
    events: Iterable[SequestrationEventRecord] = (),
    leakage_assessments: Iterable[LeakageAssessmentRecord] = (),
    soil_temp_override_c: Optional[float] = None,
    params: Optional[AggregationParams] = None,
) -> CalculationInput:
    """Assemble the canonical calculation input of one monitoring period.

    Parameters
    ----------
    batches:
        Production batches produced in the period.
    facility:
        Facility record (baseline and infrastructure data).
    events:
        Sequestration events delivered in the period.
    leakage_assessments:
        Leakage assessments of the facility; only the most recent is used.
    soil_temp_override_c:
        Soil temperature used when no event records one.
    params:
        Aggregation factors and defaults.

    Returns
    -------
    CalculationInput
        Input ready for :func:`corc.calculator.calculate_corcs`.

    Raises
    ------
    ValidationError
        If there is no completed batch or the total dry mass is zero.
    """
    params = params or AggregationParams()
    events = list(events)
    df = batches_frame(batches, params)
    if df.empty:
        raise ValidationError("No completed production batches found in this monitoring period")
    total_dry_mass = float(df["dry_mass_t"].sum())
    if total_dry_mass <= 0:
        raise ValidationError("Total biochar dry mass is zero; no valid production data to quantify")

    oc = float(np.average(df["organic_carbon_percent"], weights=df["dry_mass_t"]))
    h = float(np.average(df["hydrogen_percent"], weights=df["dry_mass_t"]))

    feedstock_kg = float(df["feedstock_transport_kg_co2e"].sum())
    split = params.biomass_split
    delivered_t = sum(sum(e.batch_quantities_tonnes) for e in events)

    project = ProjectEmissionsInput(
        biomass_emissions=BiomassEmissions(
            cultivation=0.0,
            collection=feedstock_kg * split["collection"],
            transport=feedstock_kg * split["transport"],
            preprocessing=feedstock_kg * split["preprocessing"],
        ),
        production_emissions=ProductionEmissions(
            energy=float(df["energy_kg_co2e"].sum()),
            stack_ch4_kg=float(df["stack_ch4_kg"].sum()),
            stack_n2o_kg=float(df["stack_n2o_kg"].sum()),
        ),
        embodied_emissions=EmbodiedEmissions(infrastructure=embodied_infrastructure_kg(facility, params)),
        end_use_emissions=EndUseEmissions(transport=delivered_t * params.end_use_transport_kg_co2e_per_tonne),
    )
    logger.info(
        "Aggregated %d batches for facility %s: %.3f t dry mass, C_org %.2f %%, H %.2f %%",
        len(df), facility.facility_id, total_dry_mass, oc, h,
    )
    return CalculationInput(
        biochar_dry_mass_tonnes=total_dry_mass,
        organic_carbon_percent=oc,
        hydrogen_percent=h,
        mean_soil_temp_c=mean_soil_temperature(events, soil_temp_override_c, params),
        baseline_type=facility.baseline_type,
        baseline_carbon_storage_tco2e=facility.baseline_carbon_storage_tco2e,
        project_emissions=project,
        leakage_emissions=leakage_from_assessment(latest_assessment(leakage_assessments)),
    )

