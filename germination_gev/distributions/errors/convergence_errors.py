"""Convergence failure helpers for model fitting."""

from __future__ import annotations

from typing import Iterable, Optional

from germination_gev.distributions.models import FitResult, ModelSpec
from germination_gev.utils.logging import get_logger

log = get_logger(__name__, component="fit_errors")


def record_convergence_failure(
    spec: ModelSpec,
    *,
    error: Exception | str,
    n_samples: int,
    stage: str = "fit",
    iterations: Optional[int] = None,
    warnings: Optional[Iterable[str]] = None,
) -> FitResult:
    """Log diagnostics for a failed model fit and return a FitResult without coefficients."""

    message = str(error)
    warning_list = list(warnings or [])
    if message not in warning_list:
        warning_list.append(message)

    log.warning(
        "Model failed to converge",
        extra={
            "model": spec.name,
            "stage": stage,
            "n_samples": n_samples,
            "status": "FAILED",
            "error": message,
        },
    )

    return FitResult(
        model_name=spec.name,
        spec=spec,
        params=None,
        log_likelihood=float("nan"),
        k=spec.k,
        aic=float("inf"),
        bic=float("inf"),
        n=n_samples,
        converged=False,
        fit_success=False,
        iterations=iterations,
        warnings=tuple(warning_list),
        error=message,
        fit_message=f"FAILED_{stage}",
    )


__all__ = ["record_convergence_failure"]
