"""Negative log-likelihood of the GEV treatment model.

The evaluator never raises for a bad parameter vector. Scale that is not
strictly positive, an observation outside the support, or any floating-point
trouble yields :class:`Infeasible`, which maps to ``+inf`` for the optimizer
and therefore ranks below every :class:`Feasible` value.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union

import numpy as np

from germination_gev.distributions.gev import gev_logpdf, gev_upper_bound
from germination_gev.distributions.models import ModelSpec, ParameterVector
from germination_gev.schema.observations import GerminationDataset


@dataclass(frozen=True)
class Feasible:
    value: float

    feasible = True

    def as_objective(self) -> float:
        return self.value


@dataclass(frozen=True)
class Infeasible:
    reason: str

    feasible = False

    def as_objective(self) -> float:
        return math.inf


Outcome = Union[Feasible, Infeasible]


class LikelihoodEvaluator:
    """Negative log-likelihood bound to one read-only dataset."""

    def __init__(self, dataset: GerminationDataset) -> None:
        self.dataset = dataset
        self._times = dataset.times
        self._effect = dataset.treatment_effect
        self._max_time = dataset.max_time

    def assess(self, params: ParameterVector) -> Outcome:
        shape, location, scale = params.effective(self._effect)

        if not np.all(scale > 0):
            return Infeasible("non-positive scale")

        negative = shape < 0
        if negative.any():
            upper = gev_upper_bound(shape[negative], location[negative], scale[negative])
            if np.any(self._max_time > upper):
                return Infeasible("observation above upper support bound")

        try:
            with np.errstate(over="raise", divide="raise", invalid="raise"):
                logpdf = gev_logpdf(self._times, shape, location, scale)
                total = float(np.sum(logpdf))
        except FloatingPointError as exc:
            return Infeasible(f"numerical error: {exc}")

        if not math.isfinite(total):
            return Infeasible("observation outside support")
        return Feasible(-total)

    def evaluate(self, params: ParameterVector) -> float:
        """Negative total log-likelihood, ``+inf`` when infeasible."""
        return self.assess(params).as_objective()

    def log_likelihood(self, params: ParameterVector) -> float:
        return -self.evaluate(params)

    def objective(self, spec: ModelSpec):
        """Objective over the free-parameter array of ``spec``."""

        def _objective(values: np.ndarray) -> float:
            return self.evaluate(spec.unpack(values))

        return _objective


__all__ = ["Feasible", "Infeasible", "Outcome", "LikelihoodEvaluator"]
