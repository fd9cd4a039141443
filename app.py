"""Streamlit entry point for the CORC audit report.

Collects one monitoring period's inputs in the sidebar, runs the full
calculation and shows the five-term breakdown.  When the calculation
fails the page falls back to the estimator and labels the figure as an
approximation.  Multi-period recomputation lives under `pages/`.
"""

import logging

import streamlit as st

from corc.calculator import efficiency_metrics, estimate_corcs, formula_steps, try_calculate_corcs, validate_input
from corc.errors import ValidationError
from corc.params import BASELINE_TYPES, CalculationInput, MethodologyParams
from corc.plots import fig_corc_waterfall, fig_emissions_breakdown, fig_persistence_curves, persistence_curves
from corc.results import CalculationSuccess
from corc.utils import load_methodology

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

st.set_page_config(page_title="Biochar CORC Calculator", layout="wide")

PRESETS = ["puro_biochar_2025_v1", "ipcc_ar6_gwp"]


def _methodology() -> MethodologyParams:
    name = st.sidebar.selectbox("Methodology preset", PRESETS)
    methodology = load_methodology(name)
    st.session_state["methodology"] = methodology
    return methodology


def _inputs() -> dict:
    """Raw input mapping from the sidebar widgets (kg CO2e for emission terms)."""
    sb = st.sidebar
    sb.header("Biochar")
    mass = sb.number_input("Dry mass (t)", min_value=0.0, value=100.0)
    oc = sb.number_input("Organic carbon (%)", min_value=0.0, max_value=100.0, value=80.0)
    h = sb.number_input("Hydrogen (%)", min_value=0.0, max_value=100.0, value=2.0)
    temp = sb.number_input("Mean soil temperature (°C)", min_value=-60.0, max_value=60.0, value=20.0)

    sb.header("Baseline")
    baseline_type = sb.selectbox("Baseline type", BASELINE_TYPES)
    baseline = sb.number_input("Baseline carbon storage (tCO2e)", min_value=0.0, value=0.0)

    sb.header("Project emissions (kg CO2e)")
    transport = sb.number_input("Biomass transport", min_value=0.0, value=0.0)
    energy = sb.number_input("Production energy", min_value=0.0, value=0.0)
    ch4 = sb.number_input("Stack CH4 (kg CH4)", min_value=0.0, value=0.0)
    n2o = sb.number_input("Stack N2O (kg N2O)", min_value=0.0, value=0.0)
    infrastructure = sb.number_input("Amortised infrastructure", min_value=0.0, value=0.0)
    end_use = sb.number_input("End-use transport", min_value=0.0, value=0.0)
    allocation = sb.slider("Co-product allocation factor", min_value=0.05, max_value=1.0, value=1.0)

    sb.header("Leakage (kg CO2e)")
    eco = sb.number_input("Ecological leakage", min_value=0.0, value=0.0)
    market = sb.number_input("Market/activity leakage", min_value=0.0, value=0.0)

    return dict(
        biochar_dry_mass_tonnes=mass,
        organic_carbon_percent=oc,
        hydrogen_percent=h,
        mean_soil_temp_c=temp,
        baseline_type=baseline_type,
        baseline_carbon_storage_tco2e=baseline,
        project_emissions=dict(
            biomass_emissions=dict(transport=transport),
            production_emissions=dict(energy=energy, stack_ch4_kg=ch4, stack_n2o_kg=n2o),
            embodied_emissions=dict(infrastructure=infrastructure),
            end_use_emissions=dict(transport=end_use),
            co_product_allocation_factor=allocation,
        ),
        leakage_emissions=dict(
            ecological_leakage=dict(facility=eco),
            market_activity_leakage=dict(afolu=market),
        ),
    )


def _show_estimate(raw: dict, errors, methodology: MethodologyParams) -> None:
    st.error("Full calculation failed: " + "; ".join(errors))
    try:
        est = estimate_corcs(
            raw["biochar_dry_mass_tonnes"],
            raw["organic_carbon_percent"],
            raw["hydrogen_percent"],
            raw["mean_soil_temp_c"],
            methodology,
        )
    except ValidationError as exc:
        st.error("No estimate possible: " + "; ".join(exc.errors))
        return
    st.warning("**Approximation.** " + est.note)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("C_stored (tCO2e)", f"{est.c_stored_tco2e:,.3f}")
    c2.metric("C_loss (tCO2e)", f"{est.c_loss_tco2e:,.3f}")
    c3.metric("Estimated emissions (tCO2e)", f"{est.estimated_emissions_tco2e:,.3f}")
    c4.metric("Estimated CORCs (tCO2e)", f"{est.estimated_corcs_tco2e:,.3f}")


def main() -> None:
    methodology = _methodology()
    raw = _inputs()

    st.title("Biochar CORC Calculator")
    st.caption(
        f"Methodology {methodology.calculation_version} · permanence {methodology.permanence_type} · "
        f"GWP {methodology.gwp.version}"
    )

    outcome = try_calculate_corcs(raw, methodology)
    if not isinstance(outcome, CalculationSuccess):
        _show_estimate(raw, outcome.errors, methodology)
        return

    result = outcome.result
    inp = CalculationInput.model_validate(raw)
    report = validate_input(inp, methodology)
    for msg in report.warnings:
        st.warning(msg)

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Net CORCs (tCO2e)", f"{result.net_corcs_tco2e:,.3f}")
    c2.metric("C_stored (tCO2e)", f"{result.c_stored_tco2e:,.3f}")
    c3.metric("Persistence fraction", f"{result.persistence_fraction_percent:.2f} %")
    c4.metric("H/C_org", f"{result.h_over_corg:.3f}", "eligible" if result.quality_valid else "ineligible")

    tab1, tab2, tab3 = st.tabs(["Breakdown", "Formula steps", "Persistence"])
    with tab1:
        st.plotly_chart(fig_corc_waterfall(result), use_container_width=True)
        st.plotly_chart(fig_emissions_breakdown(result.breakdown), use_container_width=True)
        metrics = efficiency_metrics(inp, result)
        st.json(metrics)
    with tab2:
        st.dataframe(formula_steps(inp, result), use_container_width=True)
        st.caption(f"Input hash `{result.input_hash}`")
        st.download_button(
            "Download result (JSON)",
            data=result.model_dump_json(indent=2),
            file_name="corc_result.json",
            mime="application/json",
        )
    with tab3:
        df = persistence_curves(methodology=methodology)
        st.plotly_chart(fig_persistence_curves(df, methodology.h_corg_threshold), use_container_width=True)


if __name__ == "__main__":
    main()
