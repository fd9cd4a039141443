# MIT License
"""Biochar quality: H/C_org molar ratio and the eligibility threshold.

The threshold check is advisory.  An ineligible batch still gets a numeric
CORC result; the flag is surfaced for display and issuance gating, which
live outside this package.
"""

from __future__ import annotations
import logging
import math
from typing import Optional

from .constants import H_TO_C_MOLAR_FACTOR
from .errors import ValidationError
from .params import MethodologyParams
from .results import QualityReport

logger = logging.getLogger(__name__)


def h_over_corg(hydrogen_percent: float, organic_carbon_percent: float) -> float:
    """Compute the H/C_org molar ratio.

    ``H/C_org = (m_H / m_C_org) × 12``, the factor converting the mass
    ratio into an atomic ratio.

    Parameters
    ----------
    hydrogen_percent:
        Hydrogen mass content (%).
    organic_carbon_percent:
        Organic carbon mass content (%).  Must be strictly positive.

    Returns
    -------
    float
        H/C_org molar ratio.

    Raises
    ------
    ValidationError
        If organic carbon is zero or negative, hydrogen is negative, or
        either value is not finite.
    """
    if not (math.isfinite(hydrogen_percent) and math.isfinite(organic_carbon_percent)):
        raise ValidationError("Hydrogen and organic carbon percent must be finite numbers")
    if organic_carbon_percent <= 0:
        raise ValidationError("Organic carbon percent must be greater than 0")
    if hydrogen_percent < 0:
        raise ValidationError("Hydrogen percent cannot be negative")
    return (hydrogen_percent / organic_carbon_percent) * H_TO_C_MOLAR_FACTOR


def is_quality_valid(ratio: float, threshold: float) -> bool:
    """True when the biochar meets the H/C_org eligibility threshold."""
    return ratio <= threshold


def quality_classification(ratio: float, threshold: float) -> str:
    """Stability class of a ratio; anything above `threshold` is ineligible."""
    if ratio > threshold:
        return f"Ineligible - Above threshold (H/C_org > {threshold:g})"
    if ratio <= 0.4:
        return "Excellent - High stability (H/C_org <= 0.4)"
    elif ratio <= 0.5:
        return "Very Good - Good stability (H/C_org <= 0.5)"
    elif ratio <= 0.6:
        return "Good - Moderate stability (H/C_org <= 0.6)"
    return f"Acceptable - Minimum stability (H/C_org <= {threshold:g})"


def validate_quality(
    hydrogen_percent: float,
    organic_carbon_percent: float,
    methodology: Optional[MethodologyParams] = None,
) -> QualityReport:
    """Full quality validation with a human-readable message."""
    methodology = methodology or MethodologyParams()
    threshold = methodology.h_corg_threshold
    ratio = h_over_corg(hydrogen_percent, organic_carbon_percent)
    valid = is_quality_valid(ratio, threshold)
    if valid:
        message = f"Biochar passes quality threshold (H/C_org = {ratio:.3f} <= {threshold})"
    else:
        message = (
            f"Biochar fails quality threshold (H/C_org = {ratio:.3f} > {threshold}). "
            f"Biochar must have H/C_org <= {threshold} for CORC eligibility."
        )
        logger.warning(message)
    return QualityReport(
        h_over_corg=ratio,
        is_valid=valid,
        threshold=threshold,
        classification=quality_classification(ratio, threshold),
        message=message,
    )


def organic_carbon_from_total(total_carbon_percent: float, inorganic_carbon_percent: float = 0.0) -> float:
    """Organic carbon as total minus inorganic carbon (C_org = C_tot - C_inorg)."""
    organic = total_carbon_percent - inorganic_carbon_percent
    if organic < 0:
        raise ValidationError("Organic carbon cannot be negative (inorganic > total)")
    return organic
