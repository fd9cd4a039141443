# MIT License
from __future__ import annotations
import hashlib, json
from pathlib import Path
from typing import Optional, Union
from pydantic import BaseModel
from .constants import KG_PER_TONNE
from .params import MethodologyParams

METHODOLOGY_DIR = Path(__file__).resolve().parent / "presets"


def canonical_json(model: BaseModel) -> str:
    """Compact JSON form of a model with sorted keys, identical for equal models."""
    return json.dumps(model.model_dump(mode="json"), sort_keys=True, separators=(",", ":"))


def input_hash(model: BaseModel) -> str:
    """SHA256 hex digest of :func:`canonical_json`.

    Stored on every :class:`~corc.results.CalculationResult` as the audit
    link between a certified figure and the input it came from.
    """
    return hashlib.sha256(canonical_json(model).encode("utf-8")).hexdigest()


def load_methodology(name_or_path: Optional[Union[str, Path]] = None) -> MethodologyParams:
    """Load methodology parameters from a JSON preset.

    `name_or_path` is either a preset name under ``corc/presets`` or
    a path to a JSON file.  With no argument the built-in defaults are
    returned.
    """
    if name_or_path is None:
        return MethodologyParams()
    path = Path(name_or_path)
    if path.suffix != ".json":
        path = METHODOLOGY_DIR / f"{name_or_path}.json"
    return MethodologyParams.model_validate_json(path.read_text(encoding="utf-8"))


def kg_to_tonnes(kg_co2e: float) -> float:
    # result terms are summed in kg and converted here, once
    return kg_co2e / KG_PER_TONNE


def tonnes_to_kg(tco2e: float) -> float:
    return tco2e * KG_PER_TONNE
