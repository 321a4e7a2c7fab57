"""AIC ranking of fitted models."""

from __future__ import annotations

from typing import List, Optional, Sequence

from germination_gev.distributions.metrics.information_criteria import akaike_weights, delta_aic
from germination_gev.distributions.models import FitResult, ModelComparison


def rank_models(fit_results: Sequence[FitResult]) -> List[ModelComparison]:
    """Successful fits sorted by AIC ascending with ΔAIC and Akaike weights.

    Failed fits carry no likelihood and are left out of the table.
    """
    usable = [fr for fr in fit_results if fr.fit_success]
    if not usable:
        return []
    usable.sort(key=lambda fr: fr.aic)
    aics = [fr.aic for fr in usable]
    deltas = delta_aic(aics)
    weights = akaike_weights(aics)
    return [
        ModelComparison(
            model_name=fr.model_name,
            log_likelihood=float(fr.log_likelihood),
            k=fr.k,
            aic=float(fr.aic),
            delta_aic=float(d),
            aic_weight=float(w),
            rank=i + 1,
        )
        for i, (fr, d, w) in enumerate(zip(usable, deltas, weights))
    ]


def select_model(fit_results: Sequence[FitResult]) -> Optional[FitResult]:
    """Lowest-AIC successful fit, or None when every model failed."""
    ranking = rank_models(fit_results)
    if not ranking:
        return None
    best = ranking[0].model_name
    return next(fr for fr in fit_results if fr.model_name == best)


__all__ = ["rank_models", "select_model"]
