"""Unit tests for the persistence, quality and stored-carbon modules.

These cover table interpolation and clamping, monotonicity of PF in the
H/C_org ratio, the quality threshold and the carbon conversions.
"""

import math

import pytest
from pydantic import ValidationError as PydanticValidationError

from corc.carbon import c_baseline, c_loss, c_stored, c_stored_breakdown, dry_mass_from_wet
from corc.errors import ValidationError
from corc.params import PersistenceParameters, PersistencePoint
from corc.persistence import (
    persistence_breakdown,
    persistence_fraction,
    persistence_fraction_from_ratio,
    persistence_params,
    persistence_range,
)
from corc.quality import h_over_corg, is_quality_valid, organic_carbon_from_total, quality_classification, validate_quality

THRESHOLD = 0.7


def test_table_points_are_exact():
    m, a, t = persistence_params(15.0)
    assert (m, a, t) == (89.10, 32.56, 15.0)


def test_interpolation_midpoint():
    m, a, t = persistence_params(17.5)
    assert math.isclose(m, (89.10 + 89.87) / 2)
    assert math.isclose(a, (32.56 + 35.29) / 2)
    assert t == 17.5


def test_clamp_reports_temperature_used():
    assert persistence_params(-3.0)[2] == 10.0
    assert persistence_params(42.0)[2] == 30.0
    assert persistence_params(42.0)[:2] == (86.19, 48.25)


def test_default_rows_match_published_table():
    rows = [(p.temp_c, p.m, p.a) for p in PersistenceParameters().points]
    assert rows == [(10.0, 94.49, 18.28), (15.0, 89.10, 32.56), (20.0, 89.87, 35.29), (25.0, 86.19, 44.71), (30.0, 86.19, 48.25)]


def test_non_finite_temperature_raises():
    with pytest.raises(ValidationError):
        persistence_params(float("nan"))


def test_pf_strictly_decreasing_in_ratio():
    for temp in (10.0, 17.5, 20.0, 30.0):
        values = [persistence_fraction_from_ratio(r / 10.0, temp) for r in range(0, 16)]
        assert all(b < a for a, b in zip(values, values[1:]))


def test_pf_clamped_to_range():
    assert persistence_fraction_from_ratio(0.0, 10.0) == 94.49
    assert persistence_fraction_from_ratio(5.0, 30.0) == 0.0


def test_persistence_fraction_from_composition():
    assert persistence_fraction(20.0, 2.0, 80.0) == pytest.approx(79.283, abs=1e-3)
    with pytest.raises(ValidationError):
        persistence_fraction(20.0, 2.0, 0.0)


def test_custom_table():
    table = PersistenceParameters(points=(PersistencePoint(temp_c=0.0, m=90.0, a=10.0), PersistencePoint(temp_c=10.0, m=80.0, a=20.0)))
    assert persistence_fraction_from_ratio(0.5, 5.0, table) == pytest.approx(85.0 - 15.0 * 0.5)


def test_table_must_be_increasing():
    with pytest.raises(PydanticValidationError):
        PersistenceParameters(points=(PersistencePoint(temp_c=20.0, m=90.0, a=10.0), PersistencePoint(temp_c=10.0, m=80.0, a=20.0)))


def test_persistence_breakdown():
    d = persistence_breakdown(0.3, 20.0, 293.3333333)
    assert d["loss_percent"] == pytest.approx(100.0 - 79.283, abs=1e-3)
    assert d["c_loss_tco2e"] + d["permanent_carbon_tco2e"] == pytest.approx(293.3333333)


def test_persistence_range():
    df = persistence_range(20.0)
    assert list(df.columns) == ["h_over_corg", "persistence_fraction_percent", "eligible"]
    assert len(df) == 5
    assert df["eligible"].all()
    assert df["persistence_fraction_percent"].is_monotonic_decreasing


def test_h_over_corg():
    assert math.isclose(h_over_corg(2.0, 80.0), 0.3)
    assert math.isclose(h_over_corg(6.0, 80.0), 0.9)
    with pytest.raises(ValidationError):
        h_over_corg(2.0, 0.0)
    with pytest.raises(ValidationError):
        h_over_corg(-1.0, 80.0)


def test_quality_threshold():
    assert is_quality_valid(0.7, THRESHOLD)
    assert not is_quality_valid(0.7001, THRESHOLD)
    assert quality_classification(0.3, THRESHOLD).startswith("Excellent")
    assert quality_classification(0.9, THRESHOLD).startswith("Ineligible")
    assert quality_classification(0.65, 0.6).startswith("Ineligible")
    assert "0.6" in quality_classification(0.65, 0.6)
    assert quality_classification(0.75, 0.8) == "Acceptable - Minimum stability (H/C_org <= 0.8)"
    rep = validate_quality(6.0, 80.0)
    assert not rep.is_valid
    assert rep.threshold == 0.7
    assert "fails" in rep.message


def test_organic_carbon_from_total():
    assert organic_carbon_from_total(85.0, 5.0) == 80.0
    with pytest.raises(ValidationError):
        organic_carbon_from_total(5.0, 10.0)


def test_c_stored():
    assert c_stored(100.0, 80.0) == pytest.approx(293.333, abs=1e-3)
    assert c_stored(0.0, 80.0) == 0.0
    with pytest.raises(ValidationError):
        c_stored(-1.0, 80.0)
    with pytest.raises(ValidationError):
        c_stored(float("nan"), 80.0)
    with pytest.raises(ValidationError):
        c_stored(100.0, float("inf"))
    d = c_stored_breakdown(100.0, 80.0)
    assert d["carbon_mass_tonnes"] == 80.0


def test_c_loss_bounds():
    assert c_loss(100.0, 100.0) == 0.0
    assert c_loss(100.0, 0.0) == 100.0
    with pytest.raises(ValidationError):
        c_loss(100.0, 101.0)
    with pytest.raises(ValidationError):
        c_loss(100.0, float("nan"))


def test_c_baseline_and_dry_mass():
    assert c_baseline(4.5) == 4.5
    with pytest.raises(ValidationError):
        c_baseline(float("inf"))
    assert dry_mass_from_wet(10.0, 20.0) == 8.0
    with pytest.raises(ValidationError):
        dry_mass_from_wet(10.0, 100.0)
