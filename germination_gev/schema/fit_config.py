"""Fit configuration schema and validation."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Literal, Optional, Tuple

from germination_gev.exceptions import ConfigValidationError

OptimizerMethod = Literal["Nelder-Mead", "Powell"]

MODEL_NAMES = ("null", "shape", "location", "scale", "full")


@dataclass(slots=True)
class FitConfig:
    method: OptimizerMethod = "Nelder-Mead"
    max_iter: int = 20000
    restarts: int = 2
    xatol: float = 1e-6
    fatol: float = 1e-8
    shape_start: float = 0.05
    shape_bounds: Tuple[float, float] = (-0.5, 0.5)
    location_pad_fraction: float = 0.1
    scale_lower_fraction: float = 1e-4
    scale_upper_factor: float = 2.0
    boundary_tolerance: float = 1e-3
    max_workers: Optional[int] = None
    models: Tuple[str, ...] = field(default=MODEL_NAMES)

    def __post_init__(self) -> None:
        self.shape_bounds = tuple(float(v) for v in self.shape_bounds)  # type: ignore[assignment]
        self.models = tuple(self.models)
        if self.method not in {"Nelder-Mead", "Powell"}:
            raise ConfigValidationError("method must be one of: Nelder-Mead, Powell")
        if self.max_iter <= 0:
            raise ConfigValidationError("max_iter must be > 0")
        if self.restarts < 0:
            raise ConfigValidationError("restarts must be >= 0")
        if self.xatol <= 0 or self.fatol <= 0:
            raise ConfigValidationError("xatol and fatol must be > 0")
        if len(self.shape_bounds) != 2 or self.shape_bounds[0] >= self.shape_bounds[1]:
            raise ConfigValidationError("shape_bounds must be an increasing (lower, upper) pair")
        if not self.shape_bounds[0] <= self.shape_start <= self.shape_bounds[1]:
            raise ConfigValidationError("shape_start must lie within shape_bounds")
        if self.location_pad_fraction < 0:
            raise ConfigValidationError("location_pad_fraction must be >= 0")
        if not 0 < self.scale_lower_fraction < 1:
            raise ConfigValidationError("scale_lower_fraction must be in (0, 1)")
        if self.scale_upper_factor <= 0:
            raise ConfigValidationError("scale_upper_factor must be > 0")
        if self.boundary_tolerance < 0:
            raise ConfigValidationError("boundary_tolerance must be >= 0")
        if self.max_workers is not None and self.max_workers <= 0:
            raise ConfigValidationError("max_workers must be positive when set")
        if not self.models:
            raise ConfigValidationError("at least one model must be selected")
        unknown = [m for m in self.models if m not in MODEL_NAMES]
        if unknown:
            raise ConfigValidationError(f"unknown models {unknown}; expected subset of {list(MODEL_NAMES)}")
        if len(set(self.models)) != len(self.models):
            raise ConfigValidationError("models must not contain duplicates")

    @classmethod
    def from_dict(cls, data: dict) -> "FitConfig":
        known = {f.name for f in fields(cls)}
        extra = sorted(set(data) - known)
        if extra:
            raise ConfigValidationError(f"unknown config keys: {extra}")
        return cls(**data)

    @classmethod
    def from_json(cls, path: Path) -> "FitConfig":
        try:
            data = json.loads(Path(path).read_text())
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigValidationError(f"cannot read config {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigValidationError(f"config {path} must contain a JSON object")
        return cls.from_dict(data)

    def to_dict(self) -> dict:
        return {
            "method": self.method,
            "max_iter": self.max_iter,
            "restarts": self.restarts,
            "xatol": self.xatol,
            "fatol": self.fatol,
            "shape_start": self.shape_start,
            "shape_bounds": list(self.shape_bounds),
            "location_pad_fraction": self.location_pad_fraction,
            "scale_lower_fraction": self.scale_lower_fraction,
            "scale_upper_factor": self.scale_upper_factor,
            "boundary_tolerance": self.boundary_tolerance,
            "max_workers": self.max_workers,
            "models": list(self.models),
        }


__all__ = ["FitConfig", "MODEL_NAMES", "OptimizerMethod"]
