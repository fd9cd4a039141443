# MIT License
"""Stored carbon and deduction calculators.

``C_stored = Q_biochar × C_org × 44/12`` converts the organic carbon held in
the biochar into its CO2 equivalent.  ``C_loss = C_stored × (100 - PF)/100``
deducts the share expected to decompose within the accounting horizon.
"""

from __future__ import annotations
import math

from .constants import CO2_TO_C_RATIO
from .errors import ValidationError


def carbon_mass(biochar_dry_mass_tonnes: float, organic_carbon_percent: float) -> float:
    """Mass of organic carbon in the biochar (t C)."""
    return biochar_dry_mass_tonnes * (organic_carbon_percent / 100.0)


def c_stored(biochar_dry_mass_tonnes: float, organic_carbon_percent: float) -> float:
    """Gross carbon stored in the biochar.

    Parameters
    ----------
    biochar_dry_mass_tonnes:
        Dry mass of biochar (t).
    organic_carbon_percent:
        Organic carbon content (mass %).

    Returns
    -------
    float
        Stored carbon in tCO2e.
    """
    if not (math.isfinite(biochar_dry_mass_tonnes) and math.isfinite(organic_carbon_percent)):
        raise ValidationError("Biochar dry mass and organic carbon percent must be finite numbers")
    if biochar_dry_mass_tonnes < 0:
        raise ValidationError("Biochar dry mass cannot be negative")
    if organic_carbon_percent < 0 or organic_carbon_percent > 100:
        raise ValidationError("Organic carbon percent must be between 0 and 100")
    return carbon_mass(biochar_dry_mass_tonnes, organic_carbon_percent) * CO2_TO_C_RATIO


def c_stored_breakdown(biochar_dry_mass_tonnes: float, organic_carbon_percent: float) -> dict:
    mass_c = carbon_mass(biochar_dry_mass_tonnes, organic_carbon_percent)
    return dict(
        biochar_dry_mass_tonnes=biochar_dry_mass_tonnes,
        organic_carbon_percent=organic_carbon_percent,
        carbon_fraction=organic_carbon_percent / 100.0,
        carbon_mass_tonnes=mass_c,
        co2_to_c_ratio=CO2_TO_C_RATIO,
        c_stored_tco2e=mass_c * CO2_TO_C_RATIO,
    )


def dry_mass_from_wet(wet_mass_tonnes: float, moisture_percent: float) -> float:
    """Dry mass from wet mass and moisture content (%)."""
    if moisture_percent < 0 or moisture_percent >= 100:
        raise ValidationError("Moisture percent must be in [0, 100)")
    return wet_mass_tonnes * (1.0 - moisture_percent / 100.0)


def c_loss(c_stored_tco2e: float, persistence_fraction_percent: float) -> float:
    """Carbon lost to decomposition over the accounting horizon (tCO2e).

    Raises
    ------
    ValidationError
        If the persistence fraction is not finite or lies outside [0, 100],
        or stored carbon is negative.
    """
    if not math.isfinite(persistence_fraction_percent):
        raise ValidationError("Persistence fraction must be a finite number")
    if persistence_fraction_percent < 0 or persistence_fraction_percent > 100:
        raise ValidationError("Persistence fraction must be between 0 and 100")
    if c_stored_tco2e < 0:
        raise ValidationError("C_stored cannot be negative")
    return c_stored_tco2e * (100.0 - persistence_fraction_percent) / 100.0


def c_baseline(baseline_carbon_storage_tco2e: float) -> float:
    # baseline type is resolved upstream; the engine only passes the value through
    if not math.isfinite(baseline_carbon_storage_tco2e):
        raise ValidationError("Baseline carbon storage must be a finite number")
    return baseline_carbon_storage_tco2e
