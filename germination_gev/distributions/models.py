"""Shared models for GEV treatment-effect fitting."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Tuple

import numpy as np

from germination_gev.exceptions import ConfigValidationError

BASE_PARAMETERS: Tuple[str, ...] = ("shape", "location", "scale")
OFFSET_PARAMETERS: Tuple[str, ...] = ("treat_shape", "treat_location", "treat_scale")


@dataclass(frozen=True)
class ParameterVector:
    shape: float
    location: float
    scale: float
    treat_shape: float = 0.0
    treat_location: float = 0.0
    treat_scale: float = 0.0

    def effective(self, treatment_effect) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Per-observation (shape, location, scale) with offsets applied to infected rows."""
        effect = np.asarray(treatment_effect, dtype=float)
        return (
            self.shape + effect * self.treat_shape,
            self.location + effect * self.treat_location,
            self.scale + effect * self.treat_scale,
        )

    def for_group(self, effect: int) -> Tuple[float, float, float]:
        return (
            self.shape + effect * self.treat_shape,
            self.location + effect * self.treat_location,
            self.scale + effect * self.treat_scale,
        )

    def to_dict(self) -> Dict[str, float]:
        return {name: float(getattr(self, name)) for name in BASE_PARAMETERS + OFFSET_PARAMETERS}


@dataclass(frozen=True)
class ModelSpec:
    """Which treatment offsets are free; the rest stay fixed at zero."""

    name: str
    free_offsets: FrozenSet[str] = frozenset()
    description: str = ""

    def __post_init__(self) -> None:
        unknown = set(self.free_offsets) - set(OFFSET_PARAMETERS)
        if unknown:
            raise ConfigValidationError(f"unknown treatment offsets for {self.name}: {sorted(unknown)}")
        object.__setattr__(self, "free_offsets", frozenset(self.free_offsets))

    @property
    def free_parameters(self) -> Tuple[str, ...]:
        return BASE_PARAMETERS + tuple(p for p in OFFSET_PARAMETERS if p in self.free_offsets)

    @property
    def k(self) -> int:
        return len(self.free_parameters)

    def pack(self, params: ParameterVector) -> np.ndarray:
        return np.array([getattr(params, name) for name in self.free_parameters], dtype=float)

    def unpack(self, values) -> ParameterVector:
        values = np.asarray(values, dtype=float)
        if values.shape != (self.k,):
            raise ValueError(f"{self.name} expects {self.k} values, got shape {values.shape}")
        return ParameterVector(**{name: float(v) for name, v in zip(self.free_parameters, values)})

    def nests(self, other: "ModelSpec") -> bool:
        """True when ``other`` is this model with some free offsets fixed at zero."""
        return other.free_offsets < self.free_offsets


@dataclass(frozen=True)
class ParameterBounds:
    names: Tuple[str, ...]
    lower: Tuple[float, ...]
    upper: Tuple[float, ...]

    def __post_init__(self) -> None:
        if not len(self.names) == len(self.lower) == len(self.upper):
            raise ValueError("bounds vectors must align with parameter names")
        for name, lo, hi in zip(self.names, self.lower, self.upper):
            if not lo < hi:
                raise ValueError(f"empty bound for {name}: [{lo}, {hi}]")

    def as_pairs(self) -> List[Tuple[float, float]]:
        return list(zip(self.lower, self.upper))

    def clip(self, values) -> np.ndarray:
        return np.clip(np.asarray(values, dtype=float), self.lower, self.upper)

    def width(self) -> np.ndarray:
        return np.asarray(self.upper, dtype=float) - np.asarray(self.lower, dtype=float)


@dataclass(frozen=True)
class FitResult:
    model_name: str
    spec: ModelSpec
    params: Optional[ParameterVector]
    log_likelihood: float
    k: int
    aic: float
    bic: float
    n: int
    converged: bool
    fit_success: bool = True
    at_bound: Tuple[str, ...] = ()
    iterations: Optional[int] = None
    warnings: Tuple[str, ...] = ()
    error: Optional[str] = None
    fit_message: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "model_name": self.model_name,
            "free_parameters": list(self.spec.free_parameters),
            "params": self.params.to_dict() if self.params else None,
            "log_likelihood": _json_float(self.log_likelihood),
            "k": self.k,
            "aic": _json_float(self.aic),
            "bic": _json_float(self.bic),
            "n": self.n,
            "converged": self.converged,
            "fit_success": self.fit_success,
            "at_bound": list(self.at_bound),
            "iterations": self.iterations,
            "warnings": list(self.warnings),
            "error": self.error,
            "fit_message": self.fit_message,
        }


@dataclass(frozen=True)
class ModelComparison:
    model_name: str
    log_likelihood: float
    k: int
    aic: float
    delta_aic: float
    aic_weight: float
    rank: int

    def to_dict(self) -> dict:
        return {
            "rank": self.rank,
            "model_name": self.model_name,
            "log_likelihood": self.log_likelihood,
            "k": self.k,
            "aic": self.aic,
            "delta_aic": self.delta_aic,
            "aic_weight": self.aic_weight,
        }


@dataclass(frozen=True)
class LikelihoodRatioTest:
    restricted: str
    extended: str
    statistic: float
    df: int
    p_value: float

    def significant(self, alpha: float = 0.05) -> bool:
        return self.p_value < alpha

    def to_dict(self) -> dict:
        return {
            "restricted": self.restricted,
            "extended": self.extended,
            "statistic": self.statistic,
            "df": self.df,
            "p_value": self.p_value,
        }


@dataclass
class GerminationAnalysisResult:
    """Full comparison of the candidate GEV models for one dataset."""

    source: str
    n: int
    fit_results: List[FitResult]
    comparison: List[ModelComparison]
    lr_tests: List[LikelihoodRatioTest]
    best_fit: Optional[FitResult] = None
    failed_models: List[str] = field(default_factory=list)

    def result_for(self, model_name: str) -> FitResult:
        for fr in self.fit_results:
            if fr.model_name == model_name:
                return fr
        raise KeyError(model_name)


def _json_float(value: float) -> Optional[float]:
    return float(value) if np.isfinite(value) else None


__all__ = [
    "BASE_PARAMETERS",
    "OFFSET_PARAMETERS",
    "ParameterVector",
    "ModelSpec",
    "ParameterBounds",
    "FitResult",
    "ModelComparison",
    "LikelihoodRatioTest",
    "GerminationAnalysisResult",
]
