"""Selection report generator."""

from __future__ import annotations

from germination_gev.distributions.models import GerminationAnalysisResult


def build_selection_report(result: GerminationAnalysisResult) -> dict:
    return {
        "source": result.source,
        "n": result.n,
        "comparison": [row.to_dict() for row in result.comparison],
        "likelihood_ratio_tests": [t.to_dict() for t in result.lr_tests],
        "chosen_model": result.best_fit.model_name if result.best_fit else None,
        "chosen_params": result.best_fit.params.to_dict() if result.best_fit and result.best_fit.params else None,
        "failed_models": list(result.failed_models),
        "fit_results": [fr.to_dict() for fr in result.fit_results],
    }


def format_comparison_table(result: GerminationAnalysisResult) -> str:
    """Plain-text AIC table for terminal output."""
    header = f"{'rank':>4}  {'model':<9} {'k':>2} {'logLik':>11} {'AIC':>10} {'dAIC':>8} {'weight':>7}"
    lines = [header, "-" * len(header)]
    for row in result.comparison:
        lines.append(
            f"{row.rank:>4}  {row.model_name:<9} {row.k:>2} {row.log_likelihood:>11.3f} "
            f"{row.aic:>10.3f} {row.delta_aic:>8.3f} {row.aic_weight:>7.3f}"
        )
    for name in result.failed_models:
        lines.append(f"{'-':>4}  {name:<9} fit failed")
    if result.lr_tests:
        lines.append("")
        lines.append("likelihood-ratio tests")
        for t in result.lr_tests:
            lines.append(
                f"  {t.restricted} vs {t.extended}: LR={t.statistic:.3f} df={t.df} p={t.p_value:.4g}"
                + (" *" if t.significant() else "")
            )
    return "\n".join(lines)


__all__ = ["build_selection_report", "format_comparison_table"]
