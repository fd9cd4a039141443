"""Tests for monitoring-period resolution and recomputation."""

import math

import pandas as pd
import pytest

from corc.calculator import try_calculate_corcs
from corc.errors import ValidationError
from corc.monitoring import PERIOD_COLUMNS, inputs_from_frame, period_record_fields, recompute_periods, resolve_period
from corc.params import CalculationInput, EcologicalLeakage, LeakageInput
from corc.results import CalculationFailure


def _ok():
    return CalculationInput(biochar_dry_mass_tonnes=100.0, organic_carbon_percent=80.0, hydrogen_percent=2.0, mean_soil_temp_c=20.0)


def _unbounded_leakage():
    return CalculationInput(
        biochar_dry_mass_tonnes=100.0,
        organic_carbon_percent=80.0,
        hydrogen_percent=2.0,
        mean_soil_temp_c=20.0,
        leakage_emissions=LeakageInput(ecological_leakage=EcologicalLeakage(facility=1e308, biomass_sourcing=1e308)),
    )


def _no_carbon():
    return CalculationInput(biochar_dry_mass_tonnes=100.0, organic_carbon_percent=0.0, hydrogen_percent=2.0)


def test_resolve_period_uses_full_calculation():
    res = resolve_period(_ok())
    assert res.resolved
    assert res.result is not None and res.estimate is None
    assert not res.approximate
    assert res.errors == ()


def test_resolve_period_falls_back_to_estimate():
    res = resolve_period(_unbounded_leakage())
    assert res.result is None
    assert res.estimate is not None
    assert res.approximate
    assert any("e_leakage" in e for e in res.errors)
    assert res.estimate.c_stored_tco2e == pytest.approx(293.333, abs=1e-3)


def test_resolve_period_unresolved():
    res = resolve_period(_no_carbon())
    assert not res.resolved
    assert res.errors


def test_infinite_mass_is_rejected_before_calculation():
    raw = dict(biochar_dry_mass_tonnes=float("inf"), organic_carbon_percent=80.0, hydrogen_percent=2.0, mean_soil_temp_c=20.0)
    out = try_calculate_corcs(raw)
    assert isinstance(out, CalculationFailure)
    assert any("biochar_dry_mass_tonnes" in e for e in out.errors)


def test_unvalidated_infinite_mass_leaves_period_unresolved():
    inp = CalculationInput.model_construct(
        biochar_dry_mass_tonnes=float("inf"), organic_carbon_percent=80.0, hydrogen_percent=2.0, mean_soil_temp_c=20.0
    )
    res = resolve_period(inp)
    assert not res.resolved
    assert res.estimate is None
    assert res.errors


def test_overflowing_stored_carbon_leaves_period_unresolved():
    inp = CalculationInput(biochar_dry_mass_tonnes=1e308, organic_carbon_percent=80.0, hydrogen_percent=2.0, mean_soil_temp_c=20.0)
    res = resolve_period(inp)
    assert not res.resolved
    assert res.estimate is None


def test_period_record_fields():
    fields = period_record_fields(resolve_period(_ok()).result)
    assert set(fields) == {
        "c_stored_tco2e",
        "c_baseline_tco2e",
        "c_loss_tco2e",
        "persistence_fraction_percent",
        "e_project_tco2e",
        "e_leakage_tco2e",
        "net_corcs_tco2e",
    }
    assert fields["net_corcs_tco2e"] == pytest.approx(232.563, abs=1e-3)


def test_recompute_periods():
    df = recompute_periods([("P1", _ok()), ("P2", _unbounded_leakage()), ("P3", _no_carbon())])
    assert list(df.columns) == PERIOD_COLUMNS
    assert list(df["status"]) == ["calculated", "estimated", "failed"]
    assert list(df["approximate"]) == [False, True, False]
    assert math.isnan(df.loc[1, "e_project_tco2e"])
    assert df.loc[0, "net_corcs_tco2e"] > df.loc[1, "net_corcs_tco2e"]


def test_inputs_from_frame():
    df = pd.DataFrame({
        "period_id": ["Q1", "Q2"],
        "biochar_dry_mass_tonnes": [100.0, 50.0],
        "organic_carbon_percent": [80.0, 75.0],
        "hydrogen_percent": [2.0, 2.5],
        "mean_soil_temp_c": [20.0, None],
    })
    pairs = inputs_from_frame(df)
    assert [p for p, _ in pairs] == ["Q1", "Q2"]
    assert pairs[0][1].mean_soil_temp_c == 20.0
    # missing value falls back to the model default
    assert pairs[1][1].mean_soil_temp_c == 15.0


def test_inputs_from_frame_errors():
    with pytest.raises(ValidationError):
        inputs_from_frame(pd.DataFrame({"period_id": ["Q1"], "biochar_dry_mass_tonnes": [1.0]}))
    bad = pd.DataFrame({
        "period_id": ["Q1"],
        "biochar_dry_mass_tonnes": [-1.0],
        "organic_carbon_percent": [80.0],
        "hydrogen_percent": [2.0],
    })
    with pytest.raises(ValidationError):
        inputs_from_frame(bad)
