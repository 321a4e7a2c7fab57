"""Bounded maximum-likelihood fitter for one GEV treatment model."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

import numpy as np
from scipy.optimize import OptimizeResult, minimize

from germination_gev.distributions.errors import record_convergence_failure
from germination_gev.distributions.likelihood import LikelihoodEvaluator
from germination_gev.distributions.metrics.information_criteria import aic as calc_aic, bic as calc_bic
from germination_gev.distributions.model_specs import build_bounds, starting_point
from germination_gev.distributions.models import FitResult, ModelSpec, ParameterBounds, ParameterVector
from germination_gev.exceptions import OptimizationError
from germination_gev.schema.fit_config import FitConfig
from germination_gev.schema.observations import GerminationDataset
from germination_gev.utils.logging import get_logger

log = get_logger(__name__, component="gev_fitter")

# Initial simplex edge as a fraction of each parameter's bound width.
SIMPLEX_STEP_FRACTION = 0.1
# Shape values tried as extra seeds next to the configured start.
SHAPE_SEEDS = (-0.2, 0.2)
# Offsets are also seeded at +/- this fraction of their bound width.
OFFSET_SEED_FRACTION = 0.05


@dataclass
class _Search:
    best: Optional[OptimizeResult]
    n_seeds: int
    message: str


@dataclass
class _SearchState:
    solved: Dict[FrozenSet[str], _Search] = field(default_factory=dict)
    iterations: int = 0


class GevTreatmentFitter:
    """Maximise the GEV likelihood over the free parameters of one ModelSpec.

    Each call builds its own evaluator and optimizer state, so one fitter can be
    reused across datasets and several fitters can run side by side.

    The search runs the optimizer from several seeds: the start, alternative
    shapes, offsets nudged off zero, and the optimum of every model with one
    offset fewer, embedded with that offset at zero. Those nested optima are
    found the same way inside this call, so an extended model never ends below
    a model it nests when both are fitted with the same start and bounds.
    """

    def __init__(self, spec: ModelSpec, config: Optional[FitConfig] = None) -> None:
        self.spec = spec
        self.config = config or FitConfig()

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def k(self) -> int:
        return self.spec.k

    def fit(
        self,
        dataset: GerminationDataset,
        start: Optional[ParameterVector] = None,
        bounds: Optional[ParameterBounds] = None,
    ) -> FitResult:
        """Return a successful FitResult or raise OptimizationError."""
        spec = self.spec
        bounds = bounds or build_bounds(dataset, spec, self.config)
        if bounds.names != spec.free_parameters:
            raise OptimizationError(
                f"bounds for {list(bounds.names)} do not match {spec.name} parameters {list(spec.free_parameters)}"
            )
        start = start or starting_point(dataset, bounds, self.config)

        evaluator = LikelihoodEvaluator(dataset)
        x0 = bounds.clip(spec.pack(start))
        initial = evaluator.assess(spec.unpack(x0))
        if not initial.feasible:
            raise OptimizationError(f"{spec.name}: infeasible starting point ({initial.reason})")

        started = time.perf_counter()
        state = _SearchState()
        search = self._search(evaluator, spec, start, bounds, state)
        iterations = state.iterations
        duration_ms = (time.perf_counter() - started) * 1000.0

        if search.best is None:
            raise OptimizationError(
                f"{spec.name}: optimizer did not converge from any of {search.n_seeds} starts "
                f"after {iterations} iterations ({search.message})"
            )
        res = search.best

        params = spec.unpack(bounds.clip(res.x))
        outcome = evaluator.assess(params)
        if not outcome.feasible:
            raise OptimizationError(f"{spec.name}: optimum is infeasible ({outcome.reason})")

        at_bound = self._at_bound(spec.pack(params), bounds)
        scale_floor = bounds.lower[bounds.names.index("scale")]
        if params.scale - scale_floor <= self._tolerance(bounds, "scale"):
            raise OptimizationError(
                f"{spec.name}: scale collapsed onto its lower bound ({params.scale:.3g}); data look degenerate"
            )

        warnings = tuple(f"{name} finished on its bound" for name in at_bound)
        loglik = -outcome.value
        result = FitResult(
            model_name=spec.name,
            spec=spec,
            params=params,
            log_likelihood=loglik,
            k=spec.k,
            aic=calc_aic(loglik, spec.k),
            bic=calc_bic(loglik, spec.k, dataset.n),
            n=dataset.n,
            converged=True,
            fit_success=True,
            at_bound=at_bound,
            iterations=iterations,
            warnings=warnings,
            fit_message=str(res.message),
        )
        log.info(
            "Model fitted",
            extra={
                "model": spec.name,
                "k": spec.k,
                "n_samples": dataset.n,
                "log_likelihood": loglik,
                "aic": result.aic,
                "status": "OK" if not at_bound else "AT_BOUND",
                "duration_ms": round(duration_ms, 3),
            },
        )
        return result

    def _search(
        self,
        evaluator: LikelihoodEvaluator,
        spec: ModelSpec,
        start: ParameterVector,
        bounds: ParameterBounds,
        state: _SearchState,
    ) -> _Search:
        """Best converged optimum of ``spec`` over all of its seeds."""
        if spec.free_offsets in state.solved:
            return state.solved[spec.free_offsets]

        seeds = self.seeds(spec, start, bounds)
        for offset in sorted(spec.free_offsets):
            nested = _without_offset(spec, offset)
            found = self._search(evaluator, nested, start, restrict_bounds(bounds, nested), state)
            if found.best is not None:
                seeds.append(bounds.clip(spec.pack(nested.unpack(found.best.x))))

        objective = evaluator.objective(spec)
        best = None
        message = "no feasible seed"
        for x0 in seeds:
            if not np.isfinite(objective(x0)):
                continue
            res = self._optimize(objective, x0, bounds, state)
            message = str(res.message)
            if res.success and (best is None or res.fun < best.fun):
                best = res

        search = _Search(best=best, n_seeds=len(seeds), message=message)
        state.solved[spec.free_offsets] = search
        return search

    def seeds(self, spec: ModelSpec, start: ParameterVector, bounds: ParameterBounds) -> List[np.ndarray]:
        """Distinct starting arrays: the start, alternative shapes and nudged offsets."""
        base = bounds.clip(spec.pack(start))
        candidates = [base]
        for shape in SHAPE_SEEDS:
            alt = base.copy()
            alt[spec.free_parameters.index("shape")] = shape
            candidates.append(bounds.clip(alt))
        offsets = [i for i, name in enumerate(spec.free_parameters) if name in spec.free_offsets]
        if offsets:
            width = bounds.width()
            for sign in (1.0, -1.0):
                nudged = base.copy()
                nudged[offsets] += sign * OFFSET_SEED_FRACTION * width[offsets]
                candidates.append(bounds.clip(nudged))

        seeds: List[np.ndarray] = []
        for candidate in candidates:
            if not any(np.array_equal(candidate, seen) for seen in seeds):
                seeds.append(candidate)
        return seeds

    def _optimize(self, objective, x0: np.ndarray, bounds: ParameterBounds, state: _SearchState):
        res = self._minimize(objective, x0, bounds)
        state.iterations += int(getattr(res, "nit", 0) or 0)
        # a fresh simplex around the optimum gets Nelder-Mead out of stalls
        for _ in range(self.config.restarts):
            if not res.success:
                break
            again = self._minimize(objective, bounds.clip(res.x), bounds)
            state.iterations += int(getattr(again, "nit", 0) or 0)
            improved = res.fun - again.fun
            if again.success and improved >= 0:
                res = again
            if improved <= self.config.fatol:
                break
        return res

    def _minimize(self, objective, x0: np.ndarray, bounds: ParameterBounds):
        return minimize(
            objective,
            x0,
            method=self.config.method,
            bounds=bounds.as_pairs(),
            options=self._options(x0, bounds),
        )

    def _options(self, x0: np.ndarray, bounds: ParameterBounds) -> dict:
        cfg = self.config
        if cfg.method == "Powell":
            return {"maxiter": cfg.max_iter, "xtol": cfg.xatol, "ftol": cfg.fatol}
        return {
            "maxiter": cfg.max_iter,
            "maxfev": cfg.max_iter * 2,
            "xatol": cfg.xatol,
            "fatol": cfg.fatol,
            "adaptive": len(x0) > 3,
            "initial_simplex": initial_simplex(x0, bounds),
        }

    def _tolerance(self, bounds: ParameterBounds, name: str) -> float:
        idx = bounds.names.index(name)
        return self.config.boundary_tolerance * float(bounds.width()[idx])

    def _at_bound(self, values: np.ndarray, bounds: ParameterBounds) -> tuple:
        tol = self.config.boundary_tolerance * bounds.width()
        lower = np.asarray(bounds.lower)
        upper = np.asarray(bounds.upper)
        hit = (values - lower <= tol) | (upper - values <= tol)
        return tuple(name for name, flag in zip(bounds.names, hit) if flag)


def _without_offset(spec: ModelSpec, offset: str) -> ModelSpec:
    return ModelSpec(f"{spec.name}-{offset}", spec.free_offsets - {offset})


def restrict_bounds(bounds: ParameterBounds, spec: ModelSpec) -> ParameterBounds:
    """The rows of ``bounds`` that belong to the free parameters of ``spec``."""
    idx = [bounds.names.index(name) for name in spec.free_parameters]
    return ParameterBounds(
        names=spec.free_parameters,
        lower=tuple(bounds.lower[i] for i in idx),
        upper=tuple(bounds.upper[i] for i in idx),
    )


def initial_simplex(x0: np.ndarray, bounds: ParameterBounds) -> np.ndarray:
    """Simplex around ``x0`` with edges scaled to the bound widths, kept inside the box."""
    x0 = np.asarray(x0, dtype=float)
    steps = SIMPLEX_STEP_FRACTION * bounds.width()
    upper = np.asarray(bounds.upper)
    simplex = np.tile(x0, (x0.size + 1, 1))
    for i in range(x0.size):
        step = steps[i] if x0[i] + steps[i] <= upper[i] else -steps[i]
        simplex[i + 1, i] += step
    return simplex


def fit_model(
    dataset: GerminationDataset,
    spec: ModelSpec,
    start: Optional[ParameterVector] = None,
    bounds: Optional[ParameterBounds] = None,
    config: Optional[FitConfig] = None,
) -> FitResult:
    """Fit one model; optimizer failures come back as a failed FitResult."""
    try:
        return GevTreatmentFitter(spec, config).fit(dataset, start=start, bounds=bounds)
    except OptimizationError as exc:
        return record_convergence_failure(spec, error=exc, n_samples=dataset.n)


__all__ = ["GevTreatmentFitter", "fit_model", "initial_simplex", "restrict_bounds"]
