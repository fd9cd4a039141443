# MIT License
"""Project emissions aggregator (E_project).

``E_project = E_biomass + E_production + E_use + E_emb``.  Every sub-term is
accumulated in kilograms of CO2e; the conversion to tonnes happens once, when
the calculator builds its result.  Stack CH4/N2O are converted with the GWP
set supplied by the methodology, never with literals in this module.
"""

from __future__ import annotations
import logging
from typing import Dict, Optional

from .params import (
    BiomassEmissions,
    EmbodiedEmissions,
    EndUseEmissions,
    GWPValues,
    ProductionEmissions,
    ProjectEmissionsInput,
)

logger = logging.getLogger(__name__)


def biomass_emissions_kg(e: BiomassEmissions) -> float:
    return e.cultivation + e.collection + e.transport + e.preprocessing


def stack_emissions_kg_co2e(e: ProductionEmissions, gwp: GWPValues) -> Dict[str, float]:
    """Stack gases converted to kg CO2e."""
    return dict(
        stack_ch4_co2e=e.stack_ch4_kg * gwp.ch4,
        stack_n2o_co2e=e.stack_n2o_kg * gwp.n2o,
    )


def production_emissions_kg(e: ProductionEmissions, gwp: GWPValues) -> float:
    """Production emissions in kg CO2e, before co-product allocation."""
    stack = stack_emissions_kg_co2e(e, gwp)
    return (
        e.energy
        + e.materials
        + e.waste
        + stack["stack_ch4_co2e"]
        + stack["stack_n2o_co2e"]
        + e.fossil_co2_kg * gwp.co2
        + e.maintenance
    )


def embodied_emissions_kg(e: EmbodiedEmissions) -> float:
    return e.infrastructure + e.dluc


def end_use_emissions_kg(e: EndUseEmissions) -> float:
    return e.transport + e.packaging + e.incorporation


def project_emissions_kg(inp: ProjectEmissionsInput, gwp: Optional[GWPValues] = None) -> Dict[str, float]:
    """Aggregate the four emission categories.

    Parameters
    ----------
    inp:
        Project emissions input.
    gwp:
        Global warming potentials for the stack gases.  Defaults to the
        methodology GWP set.

    Returns
    -------
    dict
        Subtotals in kg CO2e: `biomass`, `production` (gross),
        `production_allocated`, `embodied`, `end_use`, `operational` and
        `total`, plus the `co_product_allocation_factor` applied.
    """
    gwp = gwp or GWPValues()
    biomass = biomass_emissions_kg(inp.biomass_emissions)
    production = production_emissions_kg(inp.production_emissions, gwp)
    production_allocated = production * inp.co_product_allocation_factor
    embodied = embodied_emissions_kg(inp.embodied_emissions)
    end_use = end_use_emissions_kg(inp.end_use_emissions)
    operational = biomass + production_allocated + end_use
    total = operational + embodied
    logger.debug(
        "E_project kg CO2e: biomass=%.3f production=%.3f (allocated %.3f) embodied=%.3f end_use=%.3f",
        biomass, production, production_allocated, embodied, end_use,
    )
    return dict(
        biomass=biomass,
        production=production,
        production_allocated=production_allocated,
        embodied=embodied,
        end_use=end_use,
        operational=operational,
        total=total,
        co_product_allocation_factor=inp.co_product_allocation_factor,
    )


def co_product_allocation_factor(biochar_energy_mj: float, co_product_energy_mj: float) -> float:
    """Energy-content share of production emissions attributable to biochar.

    Returns 1.0 when there is no energy content to allocate.
    """
    total = biochar_energy_mj + co_product_energy_mj
    if total <= 0:
        return 1.0
    return biochar_energy_mj / total


def default_project_emissions() -> ProjectEmissionsInput:
    """All-zero project emissions, used when no LCA data is available yet."""
    return ProjectEmissionsInput()
