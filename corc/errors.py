# MIT License
"""Exceptions and warning categories raised by the CORC engine."""

from __future__ import annotations
from typing import Iterable, List, Optional


class ValidationError(ValueError):
    """Raised when calculation inputs are malformed or produce undefined terms.

    Callers are expected to catch this (or use
    :func:`corc.calculator.try_calculate_corcs`) and fall back to the
    estimator rather than propagate a partial result.
    """

    def __init__(self, message: str, errors: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.errors: List[str] = list(errors) if errors is not None else [message]


class DomainWarning(UserWarning):
    """Non-fatal methodology condition, e.g. H/C_org above the eligibility threshold."""
