"""Tests for the aggregate module.

These tests build a small monitoring period from records and check that
lab tests override batch composition, composition is averaged by dry
mass, emission factors and defaults are applied, and that the resulting
input flows through the calculator.
"""

import math
from datetime import date

import pytest

from corc.aggregate import (
    batches_frame,
    build_calculation_input,
    embodied_infrastructure_kg,
    latest_assessment,
    mean_soil_temperature,
)
from corc.calculator import calculate_corcs
from corc.errors import ValidationError
from corc.records import (
    AggregationParams,
    EnergyUsageRecord,
    FacilityRecord,
    FeedstockAllocationRecord,
    LabTestRecord,
    LeakageAssessmentRecord,
    ProductionBatchRecord,
    SequestrationEventRecord,
)


def _batches():
    b1 = ProductionBatchRecord(
        batch_id="B1",
        production_date=date(2025, 1, 10),
        output_biochar_weight_tonnes=12.0,
        dry_mass_tonnes=10.0,
        organic_carbon_percent=80.0,
        hydrogen_percent=2.0,
        ch4_emissions_kg=1.0,
        lab_tests=[
            LabTestRecord(test_date=date(2025, 1, 5), organic_carbon_percent=60.0, hydrogen_percent=3.0),
            LabTestRecord(test_date=date(2025, 1, 20), organic_carbon_percent=70.0),
        ],
        feedstock_allocations=[FeedstockAllocationRecord(weight_used_tonnes=5.0, delivery_distance_km=100.0)],
    )
    b2 = ProductionBatchRecord(
        batch_id="B2",
        production_date=date(2025, 2, 1),
        output_biochar_weight_tonnes=30.0,
        energy_usages=[
            EnergyUsageRecord(energy_type="electricity", quantity=100.0),
            EnergyUsageRecord(energy_type="Diesel", quantity=10.0),
        ],
    )
    b3 = ProductionBatchRecord(
        batch_id="B3",
        production_date=date(2025, 2, 5),
        status="in_progress",
        output_biochar_weight_tonnes=50.0,
    )
    return [b1, b2, b3]


def _facility():
    return FacilityRecord(facility_id="F1", total_infrastructure_emissions_tco2e=50.0)


def _events():
    return [
        SequestrationEventRecord(final_delivery_date=date(2025, 3, 1), mean_annual_soil_temp_c=12.0, batch_quantities_tonnes=[20.0, 10.0]),
        SequestrationEventRecord(final_delivery_date=date(2025, 3, 9), mean_annual_soil_temp_c=14.0, batch_quantities_tonnes=[5.0]),
    ]


def test_batches_frame_lab_override_and_defaults():
    df = batches_frame(_batches())
    assert list(df["batch_id"]) == ["B1", "B2"]
    b1 = df.iloc[0]
    # latest lab test overrides carbon only; hydrogen comes from the batch
    assert b1["organic_carbon_percent"] == 70.0
    assert b1["hydrogen_percent"] == 2.0
    assert b1["composition_source"] == "lab_test"
    assert math.isclose(b1["feedstock_transport_kg_co2e"], 50.0)
    b2 = df.iloc[1]
    assert b2["dry_mass_t"] == 30.0
    assert b2["composition_source"] == "default"
    assert (b2["organic_carbon_percent"], b2["hydrogen_percent"]) == (80.0, 2.0)
    assert math.isclose(b2["energy_kg_co2e"], 100 * 0.5 + 10 * 2.7)


def test_build_calculation_input():
    inp = build_calculation_input(
        _batches(),
        _facility(),
        events=_events(),
        leakage_assessments=[
            LeakageAssessmentRecord(assessment_date=date(2024, 6, 1), afolu_leakage_kg_co2e=999.0),
            LeakageAssessmentRecord(assessment_date=date(2025, 1, 1), facility_ecological_kg_co2e=100.0),
        ],
    )
    assert inp.biochar_dry_mass_tonnes == 40.0
    assert inp.organic_carbon_percent == pytest.approx((10 * 70 + 30 * 80) / 40)
    assert inp.hydrogen_percent == pytest.approx(2.0)
    assert inp.mean_soil_temp_c == 13.0

    pe = inp.project_emissions
    assert pe.biomass_emissions.collection == pytest.approx(10.0)
    assert pe.biomass_emissions.transport == pytest.approx(30.0)
    assert pe.biomass_emissions.preprocessing == pytest.approx(10.0)
    assert pe.production_emissions.energy == pytest.approx(77.0)
    assert pe.production_emissions.stack_ch4_kg == 1.0
    assert pe.embodied_emissions.infrastructure == pytest.approx(5000.0)
    assert pe.end_use_emissions.transport == pytest.approx(350.0)

    # only the most recent assessment is used
    assert inp.leakage_emissions.ecological_leakage.facility == 100.0
    assert inp.leakage_emissions.market_activity_leakage.afolu == 0.0


def test_aggregated_input_calculates():
    inp = build_calculation_input(_batches(), _facility(), events=_events())
    r = calculate_corcs(inp)
    # 50 kg feedstock + 77 kg energy + 28 kg CH4 + 5000 kg infrastructure + 350 kg end use
    assert r.e_project_tco2e == pytest.approx(5.505)
    assert r.e_leakage_tco2e == 0.0
    net = r.c_stored_tco2e - r.c_baseline_tco2e - r.c_loss_tco2e - r.e_project_tco2e - r.e_leakage_tco2e
    assert r.net_corcs_tco2e == pytest.approx(net, abs=1e-6)


def test_no_completed_batches_raises():
    with pytest.raises(ValidationError):
        build_calculation_input(_batches()[2:], _facility())


def test_zero_dry_mass_raises():
    empty = ProductionBatchRecord(batch_id="B0", production_date=date(2025, 1, 1), output_biochar_weight_tonnes=0.0)
    with pytest.raises(ValidationError):
        build_calculation_input([empty], _facility())


def test_mean_soil_temperature_fallbacks():
    assert mean_soil_temperature(_events()) == 13.0
    no_temp = [SequestrationEventRecord(final_delivery_date=date(2025, 3, 1))]
    assert mean_soil_temperature(no_temp, override_c=18.0) == 18.0
    assert mean_soil_temperature(no_temp) == 15.0
    assert mean_soil_temperature([], params=AggregationParams(default_soil_temp_c=11.0)) == 11.0


def test_embodied_infrastructure_amortisation():
    f = FacilityRecord(facility_id="F", total_infrastructure_emissions_tco2e=100.0, infrastructure_lifetime_years=20.0)
    assert embodied_infrastructure_kg(f) == 5000.0
    assert embodied_infrastructure_kg(FacilityRecord(facility_id="F")) == 0.0


def test_latest_assessment():
    assert latest_assessment([]) is None
    a = LeakageAssessmentRecord(assessment_date=date(2024, 1, 1))
    b = LeakageAssessmentRecord(assessment_date=date(2025, 1, 1))
    assert latest_assessment([b, a]) is b


def test_biomass_split_must_sum_to_one():
    with pytest.raises(ValueError):
        AggregationParams(biomass_split={"collection": 0.5, "transport": 0.6, "preprocessing": 0.2})
