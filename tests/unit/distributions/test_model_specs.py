"""Model lattice, parameter packing, and start/bounds policies."""

import numpy as np
import pytest

from germination_gev.distributions.model_specs import (
    FULL_MODEL,
    LOCATION_MODEL,
    MODEL_SPECS,
    NULL_MODEL,
    SCALE_MODEL,
    SHAPE_MODEL,
    build_bounds,
    get_model_specs,
    nested_pairs,
    starting_point,
)
from germination_gev.distributions.models import ModelSpec, ParameterBounds, ParameterVector
from germination_gev.exceptions import ConfigValidationError
from germination_gev.schema.fit_config import FitConfig
from germination_gev.schema.observations import GerminationDataset


def _dataset() -> GerminationDataset:
    return GerminationDataset.from_groups(control=[20.0, 30.0, 40.0, 45.0], infect=[50.0, 60.0, 70.0])


def test_parameter_counts_follow_free_offsets() -> None:
    assert [MODEL_SPECS[n].k for n in ("null", "shape", "location", "scale", "full")] == [3, 4, 4, 4, 6]
    assert FULL_MODEL.free_parameters == (
        "shape",
        "location",
        "scale",
        "treat_shape",
        "treat_location",
        "treat_scale",
    )


def test_pack_unpack_keeps_fixed_offsets_at_zero() -> None:
    params = ParameterVector(shape=0.1, location=40.0, scale=8.0, treat_shape=0.2, treat_location=5.0, treat_scale=1.0)
    packed = SCALE_MODEL.pack(params)
    assert packed.tolist() == [0.1, 40.0, 8.0, 1.0]
    restored = SCALE_MODEL.unpack(packed)
    assert restored == ParameterVector(shape=0.1, location=40.0, scale=8.0, treat_scale=1.0)


def test_unknown_offset_is_rejected() -> None:
    with pytest.raises(ConfigValidationError):
        ModelSpec("bogus", frozenset({"treat_rate"}))


def test_nesting_relation() -> None:
    assert FULL_MODEL.nests(NULL_MODEL)
    assert FULL_MODEL.nests(LOCATION_MODEL)
    assert SHAPE_MODEL.nests(NULL_MODEL)
    assert not SHAPE_MODEL.nests(LOCATION_MODEL)
    assert not NULL_MODEL.nests(NULL_MODEL)
    pairs = nested_pairs([NULL_MODEL, LOCATION_MODEL, FULL_MODEL])
    assert [(a.name, b.name) for a, b in pairs] == [("null", "location"), ("null", "full"), ("location", "full")]


def test_get_model_specs_rejects_unknown_names() -> None:
    assert get_model_specs(["null", "full"]) == [NULL_MODEL, FULL_MODEL]
    with pytest.raises(ConfigValidationError):
        get_model_specs(["null", "weibull"])


def test_bounds_policy() -> None:
    dataset = _dataset()
    bounds = build_bounds(dataset, FULL_MODEL, FitConfig())
    lo = dict(zip(bounds.names, bounds.lower))
    hi = dict(zip(bounds.names, bounds.upper))
    spread = 50.0
    assert (lo["shape"], hi["shape"]) == (-0.5, 0.5)
    assert lo["location"] == pytest.approx(20.0 - 0.1 * spread)
    assert hi["location"] == pytest.approx(70.0 + 0.1 * spread)
    assert lo["scale"] > 0
    assert hi["scale"] == pytest.approx(2.0 * spread)
    assert (lo["treat_location"], hi["treat_location"]) == (-spread, spread)
    assert hi["treat_scale"] == pytest.approx(spread)
    assert bounds.names == FULL_MODEL.free_parameters


def test_bounds_for_constant_data_are_non_empty() -> None:
    dataset = GerminationDataset.from_groups(control=[12.0] * 10)
    bounds = build_bounds(dataset, NULL_MODEL, FitConfig())
    assert np.all(bounds.width() > 0)


def test_starting_point_policy() -> None:
    dataset = _dataset()
    config = FitConfig()
    bounds = build_bounds(dataset, LOCATION_MODEL, config)
    start = starting_point(dataset, bounds, config)
    assert start.shape == pytest.approx(0.05)
    assert start.location == pytest.approx(dataset.median)
    assert start.scale == pytest.approx(dataset.std)
    assert start.treat_location == 0.0


def test_starting_scale_is_clipped_into_bounds_for_zero_variance() -> None:
    dataset = GerminationDataset.from_groups(control=[12.0] * 10)
    config = FitConfig()
    bounds = build_bounds(dataset, NULL_MODEL, config)
    start = starting_point(dataset, bounds, config)
    assert start.scale == pytest.approx(bounds.lower[2])


def test_parameter_bounds_validation() -> None:
    with pytest.raises(ValueError):
        ParameterBounds(names=("shape",), lower=(0.5,), upper=(0.5,))
    with pytest.raises(ValueError):
        ParameterBounds(names=("shape", "scale"), lower=(0.0,), upper=(1.0,))
