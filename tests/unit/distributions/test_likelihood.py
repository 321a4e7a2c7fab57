"""Likelihood evaluator feasibility gates and values."""

import math

import numpy as np
import pytest
from scipy import stats

from germination_gev.distributions.likelihood import Feasible, Infeasible, LikelihoodEvaluator
from germination_gev.distributions.model_specs import FULL_MODEL, LOCATION_MODEL
from germination_gev.distributions.models import ParameterVector
from germination_gev.schema.observations import GerminationDataset


def _dataset() -> GerminationDataset:
    rng = np.random.default_rng(3)
    return GerminationDataset.from_groups(
        control=rng.gumbel(50.0, 10.0, size=40),
        infect=rng.gumbel(65.0, 12.0, size=40),
    )


@pytest.mark.parametrize("scale", [0.0, -1.0, -25.0])
def test_non_positive_scale_returns_infinity(scale: float) -> None:
    evaluator = LikelihoodEvaluator(_dataset())
    value = evaluator.evaluate(ParameterVector(shape=0.1, location=50.0, scale=scale))
    assert value == math.inf


def test_treatment_offset_driving_infected_scale_negative_is_infeasible() -> None:
    evaluator = LikelihoodEvaluator(_dataset())
    params = ParameterVector(shape=0.0, location=55.0, scale=10.0, treat_scale=-12.0)
    outcome = evaluator.assess(params)
    assert isinstance(outcome, Infeasible)
    assert "scale" in outcome.reason
    assert evaluator.evaluate(params) == math.inf


def test_observation_above_upper_support_returns_infinity() -> None:
    dataset = GerminationDataset.from_groups(control=[10.0, 11.0, 12.0, 15.0])
    evaluator = LikelihoodEvaluator(dataset)
    # upper bound 10 + 2 / 0.5 = 14 < 15
    params = ParameterVector(shape=-0.5, location=10.0, scale=2.0)
    assert evaluator.evaluate(params) == math.inf
    assert not evaluator.assess(params).feasible


def test_observation_below_lower_support_returns_infinity() -> None:
    dataset = GerminationDataset.from_groups(control=[5.0, 11.0, 12.0])
    evaluator = LikelihoodEvaluator(dataset)
    # lower bound 10 - 2 / 0.5 = 6 > 5
    assert evaluator.evaluate(ParameterVector(shape=0.5, location=10.0, scale=2.0)) == math.inf


def test_overflow_is_reported_as_infeasible_not_raised() -> None:
    dataset = GerminationDataset.from_groups(control=[1.0, 2.0, 3.0])
    evaluator = LikelihoodEvaluator(dataset)
    # exp(-z) overflows for z far below zero
    outcome = evaluator.assess(ParameterVector(shape=0.0, location=5000.0, scale=1.0))
    assert isinstance(outcome, Infeasible)


def test_gumbel_value_matches_closed_form() -> None:
    dataset = _dataset()
    evaluator = LikelihoodEvaluator(dataset)
    params = ParameterVector(shape=0.0, location=52.0, scale=11.0)
    expected = -float(np.sum(stats.gumbel_r.logpdf(dataset.times, loc=52.0, scale=11.0)))
    assert evaluator.evaluate(params) == pytest.approx(expected, abs=1e-9)
    assert evaluator.log_likelihood(params) == pytest.approx(-expected, abs=1e-9)


def test_treatment_offsets_apply_only_to_infected_rows() -> None:
    dataset = _dataset()
    evaluator = LikelihoodEvaluator(dataset)
    params = ParameterVector(shape=0.05, location=50.0, scale=10.0, treat_shape=-0.02, treat_location=15.0, treat_scale=2.0)
    control = dataset.treatment_effect == 0
    expected = -(
        np.sum(stats.genextreme.logpdf(dataset.times[control], -0.05, loc=50.0, scale=10.0))
        + np.sum(stats.genextreme.logpdf(dataset.times[~control], -0.03, loc=65.0, scale=12.0))
    )
    outcome = evaluator.assess(params)
    assert isinstance(outcome, Feasible)
    assert outcome.value == pytest.approx(expected, rel=1e-10)


def test_infeasible_ranks_below_any_feasible_value() -> None:
    assert Infeasible("x").as_objective() > Feasible(1e300).as_objective()


def test_objective_unpacks_free_parameters_for_spec() -> None:
    dataset = _dataset()
    evaluator = LikelihoodEvaluator(dataset)
    objective = evaluator.objective(LOCATION_MODEL)
    direct = evaluator.evaluate(ParameterVector(shape=0.0, location=50.0, scale=10.0, treat_location=15.0))
    assert objective(np.array([0.0, 50.0, 10.0, 15.0])) == pytest.approx(direct)
    with pytest.raises(ValueError):
        evaluator.objective(FULL_MODEL)(np.array([0.0, 50.0, 10.0]))
