# MIT License
"""Leakage aggregator (E_leakage = L_ECO + L_MA) and leakage risk helpers.

Sums are in kg CO2e; conversion to tonnes happens at the result boundary in
:mod:`corc.calculator`.
"""

from __future__ import annotations
from typing import Dict, List

from .constants import BIOMASS_CATEGORIES, HIGH_ILUC_RISK_CATEGORIES, LOW_RISK_WASTE_CATEGORIES, MJ_PER_GJ
from .errors import ValidationError
from .params import EcologicalLeakage, LeakageInput, MarketActivityLeakage


def ecological_leakage_kg(e: EcologicalLeakage) -> float:
    return e.facility + e.biomass_sourcing


def market_activity_leakage_kg(e: MarketActivityLeakage) -> float:
    return e.afolu + e.energy_material + e.iluc


def leakage_kg(inp: LeakageInput) -> Dict[str, float]:
    """Ecological, market/activity and total leakage in kg CO2e."""
    eco = ecological_leakage_kg(inp.ecological_leakage)
    market = market_activity_leakage_kg(inp.market_activity_leakage)
    return dict(ecological=eco, market_activity=market, total=eco + market)


def iluc_contribution(
    quantity_dry_tonnes: float,
    lower_heating_value_gj: float,
    iluc_factor_kg_co2e_per_mj: float,
    attribution_factor: float = 1.0,
) -> float:
    """Indirect land use change contribution of a high-risk feedstock.

    ``iLUC = Q × LHV × factor × AF``

    Parameters
    ----------
    quantity_dry_tonnes:
        Feedstock quantity (dry t).
    lower_heating_value_gj:
        Lower heating value (GJ per dry t).
    iluc_factor_kg_co2e_per_mj:
        iLUC emission factor, see :data:`corc.constants.ILUC_FACTORS`.
    attribution_factor:
        Share attributed to the project (0-1).

    Returns
    -------
    float
        iLUC contribution in kg CO2e.
    """
    if quantity_dry_tonnes < 0:
        raise ValidationError("Quantity cannot be negative")
    if lower_heating_value_gj < 0:
        raise ValidationError("Lower heating value cannot be negative")
    if iluc_factor_kg_co2e_per_mj < 0:
        raise ValidationError("iLUC factor cannot be negative")
    if attribution_factor < 0 or attribution_factor > 1:
        raise ValidationError("Attribution factor must be between 0 and 1")
    return quantity_dry_tonnes * lower_heating_value_gj * MJ_PER_GJ * iluc_factor_kg_co2e_per_mj * attribution_factor


def requires_iluc_assessment(biomass_category: str, is_dedicated_crop: bool = False) -> bool:
    """Dedicated crops and categories A, B and N need an iLUC assessment."""
    if is_dedicated_crop:
        return True
    return biomass_category.upper() in HIGH_ILUC_RISK_CATEGORIES


def assess_leakage_risk(biomass_category: str, is_dedicated_crop: bool, has_existing_use: bool) -> Dict[str, object]:
    """Qualitative leakage risk of a feedstock.

    Returns
    -------
    dict
        `risk_level` ('low' | 'medium' | 'high'), `requires_iluc`,
        `mitigation_required` and a list of `notes`.

    Raises
    ------
    ValidationError
        If `biomass_category` is not one of :data:`corc.constants.BIOMASS_CATEGORIES`.
    """
    category = biomass_category.upper()
    if category not in BIOMASS_CATEGORIES:
        raise ValidationError(f"Unknown biomass category: {biomass_category}")
    notes: List[str] = []
    risk_level = "low"
    if is_dedicated_crop:
        risk_level = "high"
        notes.append("Dedicated energy crops require full iLUC assessment")
        notes.append("Must demonstrate no competition with food production")
    if category in HIGH_ILUC_RISK_CATEGORIES:
        if risk_level != "high":
            risk_level = "medium"
        notes.append(f"Category {category} is classified as high-risk for iLUC")
    if has_existing_use:
        if risk_level == "low":
            risk_level = "medium"
        notes.append("Feedstock with existing economic use may cause market displacement")
    if category in LOW_RISK_WASTE_CATEGORIES and not has_existing_use:
        notes.append("Waste/residue category with no existing use - low leakage risk")
    return dict(
        risk_level=risk_level,
        requires_iluc=requires_iluc_assessment(category, is_dedicated_crop),
        mitigation_required=risk_level != "low",
        notes=notes,
    )


def default_leakage() -> LeakageInput:
    """Zero leakage, used when leakage is mitigated or not applicable."""
    return LeakageInput()
