"""
Fit the candidate GEV treatment models to germination times and compare them.

Pipeline: dataset checks -> one bounded MLE per model (sequential or in a
process pool) -> AIC ranking with Akaike weights -> likelihood-ratio tests on
the nesting lattice. Fits never share state; results are gathered only after
every fit has finished.
"""

from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Dict, List, Optional, Sequence

from germination_gev.distributions.errors import ensure_fittable, record_convergence_failure
from germination_gev.distributions.fitters.gev_fitter import fit_model
from germination_gev.distributions.model_specs import get_model_specs, nested_pairs
from germination_gev.distributions.models import FitResult, GerminationAnalysisResult, ModelSpec
from germination_gev.distributions.selection.likelihood_ratio import run_nested_tests
from germination_gev.distributions.selection.model_selector import rank_models, select_model
from germination_gev.schema.fit_config import FitConfig
from germination_gev.schema.observations import GerminationDataset
from germination_gev.utils.logging import get_logger

log = get_logger(__name__, component="analysis")


def _clamp_workers(max_workers: Optional[int], n_tasks: int) -> int:
    if not max_workers:
        return 1
    return max(1, min(int(max_workers), n_tasks))


def fit_candidate_models(
    dataset: GerminationDataset,
    specs: Sequence[ModelSpec],
    config: Optional[FitConfig] = None,
) -> List[FitResult]:
    """Fit every spec independently; results come back in ``specs`` order."""

    config = config or FitConfig()
    ensure_fittable(dataset, specs)
    worker_count = _clamp_workers(config.max_workers, len(specs))

    if worker_count == 1:
        return [fit_model(dataset, spec, config=config) for spec in specs]

    results: Dict[str, FitResult] = {}
    with ProcessPoolExecutor(max_workers=worker_count) as executor:
        futures = {executor.submit(fit_model, dataset, spec, None, None, config): spec for spec in specs}
        for fut in as_completed(futures):
            spec = futures[fut]
            try:
                results[spec.name] = fut.result()
            except Exception as exc:  # noqa: BLE001 - a crashed worker fails only its own model
                results[spec.name] = record_convergence_failure(
                    spec, error=exc, n_samples=dataset.n, stage="worker"
                )
    return [results[spec.name] for spec in specs]


def analyze_germination(
    dataset: GerminationDataset,
    config: Optional[FitConfig] = None,
) -> GerminationAnalysisResult:
    """Fit, rank and test the configured models for one dataset."""

    config = config or FitConfig()
    specs = get_model_specs(config.models)
    fit_results = fit_candidate_models(dataset, specs, config)

    failed = [fr.model_name for fr in fit_results if not fr.fit_success]
    comparison = rank_models(fit_results)
    lr_tests = run_nested_tests(fit_results, nested_pairs(specs))
    best = select_model(fit_results)

    if failed:
        log.warning(
            "Some models failed to fit",
            extra={"status": "PARTIAL", "failed_models": failed, "n_samples": dataset.n},
        )
    log.info(
        "Model comparison complete",
        extra={
            "status": "OK" if best else "NO_MODEL",
            "model": best.model_name if best else None,
            "aic": best.aic if best else None,
            "n_samples": dataset.n,
        },
    )

    return GerminationAnalysisResult(
        source=dataset.source,
        n=dataset.n,
        fit_results=fit_results,
        comparison=comparison,
        lr_tests=lr_tests,
        best_fit=best,
        failed_models=failed,
    )


__all__ = ["fit_candidate_models", "analyze_germination"]
