"""Candidate GEV models, their nesting lattice, and start/bounds policies."""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

import numpy as np

from germination_gev.distributions.models import ModelSpec, ParameterBounds, ParameterVector
from germination_gev.exceptions import ConfigValidationError
from germination_gev.schema.fit_config import FitConfig
from germination_gev.schema.observations import GerminationDataset

NULL_MODEL = ModelSpec("null", frozenset(), "no treatment effect")
SHAPE_MODEL = ModelSpec("shape", frozenset({"treat_shape"}), "infection shifts shape")
LOCATION_MODEL = ModelSpec("location", frozenset({"treat_location"}), "infection shifts location")
SCALE_MODEL = ModelSpec("scale", frozenset({"treat_scale"}), "infection shifts scale")
FULL_MODEL = ModelSpec(
    "full",
    frozenset({"treat_shape", "treat_location", "treat_scale"}),
    "infection shifts shape, location and scale",
)

MODEL_SPECS: Dict[str, ModelSpec] = {
    spec.name: spec for spec in (NULL_MODEL, SHAPE_MODEL, LOCATION_MODEL, SCALE_MODEL, FULL_MODEL)
}

# Minimum spread used when every observation has the same time.
_MIN_SPREAD_FRACTION = 1e-3


def get_model_specs(names: Sequence[str]) -> List[ModelSpec]:
    try:
        return [MODEL_SPECS[name] for name in names]
    except KeyError as exc:
        raise ConfigValidationError(f"unknown model {exc.args[0]!r}; expected one of {list(MODEL_SPECS)}") from exc


def nested_pairs(specs: Sequence[ModelSpec]) -> List[Tuple[ModelSpec, ModelSpec]]:
    """Every (restricted, extended) pair on the lattice, null comparisons first."""
    pairs = [(a, b) for a in specs for b in specs if b.nests(a)]
    order = {name: i for i, name in enumerate(MODEL_SPECS)}
    return sorted(
        pairs,
        key=lambda p: (
            len(p[0].free_offsets),
            order.get(p[0].name, len(order)),
            len(p[1].free_offsets),
            order.get(p[1].name, len(order)),
        ),
    )


def sample_spread(dataset: GerminationDataset) -> float:
    spread = dataset.max_time - dataset.min_time
    floor = _MIN_SPREAD_FRACTION * max(abs(dataset.median), 1.0)
    return max(spread, floor)


def build_bounds(dataset: GerminationDataset, spec: ModelSpec, config: FitConfig) -> ParameterBounds:
    """Box constraints for the free parameters of ``spec``."""
    spread = sample_spread(dataset)
    pad = config.location_pad_fraction * spread
    shape_lo, shape_hi = config.shape_bounds
    scale_lo = config.scale_lower_fraction * spread
    scale_hi = config.scale_upper_factor * spread
    shape_width = shape_hi - shape_lo

    all_bounds = {
        "shape": (shape_lo, shape_hi),
        "location": (dataset.min_time - pad, dataset.max_time + pad),
        "scale": (scale_lo, scale_hi),
        "treat_shape": (-shape_width / 2.0, shape_width / 2.0),
        "treat_location": (-spread, spread),
        "treat_scale": (-scale_hi / 2.0, scale_hi / 2.0),
    }
    names = spec.free_parameters
    return ParameterBounds(
        names=names,
        lower=tuple(float(all_bounds[n][0]) for n in names),
        upper=tuple(float(all_bounds[n][1]) for n in names),
    )


def starting_point(dataset: GerminationDataset, bounds: ParameterBounds, config: FitConfig) -> ParameterVector:
    """Shape near zero, location at the median, scale at the sample SD, offsets at zero."""
    seed = ParameterVector(shape=config.shape_start, location=dataset.median, scale=dataset.std)
    spec_values = np.array([getattr(seed, n) for n in bounds.names], dtype=float)
    clipped = bounds.clip(spec_values)
    return ParameterVector(**{n: float(v) for n, v in zip(bounds.names, clipped)})


__all__ = [
    "NULL_MODEL",
    "SHAPE_MODEL",
    "LOCATION_MODEL",
    "SCALE_MODEL",
    "FULL_MODEL",
    "MODEL_SPECS",
    "get_model_specs",
    "nested_pairs",
    "sample_spread",
    "build_bounds",
    "starting_point",
]
