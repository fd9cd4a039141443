"""Tests for the project emissions and leakage aggregators."""

import math

import pytest

from corc.emissions import (
    co_product_allocation_factor,
    default_project_emissions,
    production_emissions_kg,
    project_emissions_kg,
    stack_emissions_kg_co2e,
)
from corc.constants import ILUC_FACTORS
from corc.errors import ValidationError
from corc.leakage import assess_leakage_risk, default_leakage, iluc_contribution, leakage_kg, requires_iluc_assessment
from corc.params import (
    BiomassEmissions,
    EcologicalLeakage,
    EmbodiedEmissions,
    EndUseEmissions,
    GWPValues,
    LeakageInput,
    MarketActivityLeakage,
    ProductionEmissions,
    ProjectEmissionsInput,
)


def test_stack_emissions_conversion():
    e = ProductionEmissions(stack_ch4_kg=2.0, stack_n2o_kg=1.0)
    s = stack_emissions_kg_co2e(e, GWPValues())
    assert s == dict(stack_ch4_co2e=56.0, stack_n2o_co2e=265.0)


def test_production_includes_fossil_co2():
    e = ProductionEmissions(energy=10.0, materials=5.0, waste=1.0, fossil_co2_kg=4.0, maintenance=2.0)
    assert math.isclose(production_emissions_kg(e, GWPValues()), 22.0)


def test_project_emissions_subtotals():
    inp = ProjectEmissionsInput(
        biomass_emissions=BiomassEmissions(cultivation=1.0, collection=2.0, transport=3.0, preprocessing=4.0),
        production_emissions=ProductionEmissions(energy=100.0),
        embodied_emissions=EmbodiedEmissions(infrastructure=50.0, dluc=5.0),
        end_use_emissions=EndUseEmissions(transport=7.0, packaging=2.0, incorporation=1.0),
        co_product_allocation_factor=0.25,
    )
    d = project_emissions_kg(inp)
    assert d["biomass"] == 10.0
    assert d["production"] == 100.0
    assert d["production_allocated"] == 25.0
    assert d["embodied"] == 55.0
    assert d["end_use"] == 10.0
    assert d["operational"] == 45.0
    assert d["total"] == 100.0


def test_default_project_emissions_are_zero():
    assert project_emissions_kg(default_project_emissions())["total"] == 0.0


def test_allocation_factor():
    assert co_product_allocation_factor(300.0, 700.0) == pytest.approx(0.3)
    assert co_product_allocation_factor(0.0, 0.0) == 1.0


def test_leakage_sums():
    inp = LeakageInput(
        ecological_leakage=EcologicalLeakage(facility=10.0, biomass_sourcing=5.0),
        market_activity_leakage=MarketActivityLeakage(afolu=1.0, energy_material=2.0, iluc=3.0),
    )
    assert leakage_kg(inp) == dict(ecological=15.0, market_activity=6.0, total=21.0)
    assert leakage_kg(default_leakage())["total"] == 0.0


def test_iluc_contribution():
    assert iluc_contribution(10.0, 18.0, ILUC_FACTORS["CEREALS_STARCH"], 0.5) == pytest.approx(1080.0)
    with pytest.raises(ValidationError):
        iluc_contribution(10.0, 18.0, 0.012, 1.5)
    with pytest.raises(ValidationError):
        iluc_contribution(-1.0, 18.0, 0.012)


def test_requires_iluc_assessment():
    assert requires_iluc_assessment("a")
    assert requires_iluc_assessment("N")
    assert not requires_iluc_assessment("C")
    assert requires_iluc_assessment("C", is_dedicated_crop=True)


def test_assess_leakage_risk():
    assert assess_leakage_risk("C", False, False)["risk_level"] == "low"
    medium = assess_leakage_risk("A", False, False)
    assert medium["risk_level"] == "medium"
    assert medium["requires_iluc"] and medium["mitigation_required"]
    assert assess_leakage_risk("C", True, False)["risk_level"] == "high"
    assert assess_leakage_risk("D", False, True)["risk_level"] == "medium"
    with pytest.raises(ValidationError):
        assess_leakage_risk("Z", False, False)
