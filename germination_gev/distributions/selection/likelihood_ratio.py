"""Likelihood-ratio tests between nested GEV models."""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from scipy.stats import chi2

from germination_gev.distributions.models import FitResult, LikelihoodRatioTest, ModelSpec
from germination_gev.exceptions import DistributionFitError
from germination_gev.utils.logging import get_logger

log = get_logger(__name__, component="likelihood_ratio")


def likelihood_ratio_test(restricted: FitResult, extended: FitResult) -> LikelihoodRatioTest:
    """LR = 2 (logLik_extended - logLik_restricted) against chi-squared(df = Δk)."""
    if not extended.spec.nests(restricted.spec):
        raise DistributionFitError(f"{restricted.model_name} is not nested in {extended.model_name}")
    if not (restricted.fit_success and extended.fit_success):
        raise DistributionFitError(
            f"cannot compare {restricted.model_name} and {extended.model_name}: a fit failed"
        )
    df = extended.k - restricted.k
    # optimizer noise can leave the larger model marginally below the smaller one
    statistic = max(0.0, 2.0 * (extended.log_likelihood - restricted.log_likelihood))
    p_value = float(chi2.sf(statistic, df))
    return LikelihoodRatioTest(
        restricted=restricted.model_name,
        extended=extended.model_name,
        statistic=float(statistic),
        df=int(df),
        p_value=p_value,
    )


def run_nested_tests(
    fit_results: Sequence[FitResult],
    pairs: Sequence[Tuple[ModelSpec, ModelSpec]],
) -> List[LikelihoodRatioTest]:
    """Test every nested pair whose two fits both succeeded."""
    by_name: Dict[str, FitResult] = {fr.model_name: fr for fr in fit_results}
    tests: List[LikelihoodRatioTest] = []
    for restricted_spec, extended_spec in pairs:
        restricted = by_name.get(restricted_spec.name)
        extended = by_name.get(extended_spec.name)
        if restricted is None or extended is None:
            continue
        if not (restricted.fit_success and extended.fit_success):
            log.warning(
                "Skipping likelihood-ratio test for failed fit",
                extra={"model": extended_spec.name, "restricted": restricted_spec.name, "status": "SKIPPED"},
            )
            continue
        tests.append(likelihood_ratio_test(restricted, extended))
    return tests


__all__ = ["likelihood_ratio_test", "run_nested_tests"]
