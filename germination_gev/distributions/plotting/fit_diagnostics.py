"""
Histogram-plus-density figure for a fitted GEV treatment model.

Each treatment group is drawn as a density-normalised histogram with the GEV
density implied by that group's effective parameters of the supplied fit.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from germination_gev.distributions.gev import gev_pdf  # noqa: E402
from germination_gev.distributions.models import FitResult  # noqa: E402
from germination_gev.exceptions import PlottingError  # noqa: E402
from germination_gev.schema.observations import GerminationDataset, Treatment  # noqa: E402
from germination_gev.utils.logging import get_logger  # noqa: E402

log = get_logger(__name__, component="fit_diagnostics")

# Colorblind-friendly (Wong palette)
TREATMENT_STYLES = {
    Treatment.CONTROL: {"color": "#0072B2", "linestyle": "-"},
    Treatment.INFECT: {"color": "#D55E00", "linestyle": "--"},
}


def density_curve(fit_result: FitResult, treatment: Treatment, x: np.ndarray) -> np.ndarray:
    """GEV density for one treatment group, zero outside the support."""
    if fit_result.params is None:
        raise PlottingError(f"{fit_result.model_name} has no fitted parameters to draw")
    shape, location, scale = fit_result.params.for_group(treatment.effect)
    if scale <= 0:
        raise PlottingError(f"{fit_result.model_name}: non-positive scale for {treatment.value}")
    with np.errstate(over="ignore", under="ignore"):
        return gev_pdf(x, shape, location, scale)


def plot_germination_fit(
    dataset: GerminationDataset,
    fit_result: FitResult,
    output_path: Optional[Path] = None,
    *,
    bins: int = 30,
    title: Optional[str] = None,
) -> Figure:
    """Draw histograms per treatment with fitted density curves; optionally save to ``output_path``."""
    if not fit_result.fit_success or fit_result.params is None:
        raise PlottingError(f"cannot plot failed fit for {fit_result.model_name}")

    fig, ax = plt.subplots(figsize=(9, 6))
    span = dataset.max_time - dataset.min_time
    margin = 0.1 * span if span > 0 else max(abs(dataset.median) * 0.05, 1.0)
    x = np.linspace(dataset.min_time - margin, dataset.max_time + margin, 500)
    edges = np.histogram_bin_edges(dataset.times, bins=bins)

    for treatment in Treatment:
        times = dataset.subset(treatment)
        if times.size == 0:
            continue
        style = TREATMENT_STYLES[treatment]
        ax.hist(
            times,
            bins=edges,
            density=True,
            alpha=0.3,
            color=style["color"],
            label=f"{treatment.value} (n={times.size})",
        )
        shape, location, scale = fit_result.params.for_group(treatment.effect)
        ax.plot(
            x,
            density_curve(fit_result, treatment, x),
            color=style["color"],
            linestyle=style["linestyle"],
            linewidth=2,
            label=f"{treatment.value} GEV (ξ={shape:.3f}, μ={location:.2f}, σ={scale:.2f})",
        )

    ax.set_xlabel("Germination time")
    ax.set_ylabel("Density")
    ax.set_title(title or f"GEV fit: {fit_result.model_name} model (AIC={fit_result.aic:.2f})")
    ax.legend(fontsize=9)
    ax.grid(alpha=0.3)
    fig.tight_layout()

    if output_path is not None:
        output_path = Path(output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            fig.savefig(output_path, dpi=150, bbox_inches="tight")
        except OSError as exc:
            plt.close(fig)
            raise PlottingError(f"cannot write figure to {output_path}: {exc}") from exc
        log.info("Saved fit figure", extra={"model": fit_result.model_name, "status": "saved", "path": str(output_path)})
    return fig


__all__ = ["TREATMENT_STYLES", "density_curve", "plot_germination_fit"]
