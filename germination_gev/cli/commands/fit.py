"""Fit/compare CLI wiring."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt
import typer

from germination_gev.cli.validation import parse_model_list, validate_fit_inputs
from germination_gev.data.loader import DEFAULT_TIME_COLUMN, DEFAULT_TREATMENT_COLUMN, load_observations
from germination_gev.distributions.analysis import analyze_germination
from germination_gev.distributions.plotting.fit_diagnostics import plot_germination_fit
from germination_gev.distributions.selection.selection_report import build_selection_report, format_comparison_table
from germination_gev.exceptions import DistributionFitError
from germination_gev.schema.fit_config import FitConfig
from germination_gev.utils.logging import get_logger

log = get_logger(__name__, component="cli_fit")


def fit(
    data: Path = typer.Argument(..., help="CSV with treatment and germination time columns"),
    output: Path = typer.Option(Path("germination_gev_fit.png"), help="Figure output path"),
    treatment_column: str = typer.Option(DEFAULT_TREATMENT_COLUMN, help="Treatment label column"),
    time_column: str = typer.Option(DEFAULT_TIME_COLUMN, help="Germination time column"),
    config: Optional[Path] = typer.Option(None, help="JSON FitConfig file"),
    models: Optional[str] = typer.Option(None, help="Comma-delimited models (null,shape,location,scale,full)"),
    method: Optional[str] = typer.Option(None, help="Optimizer method: Nelder-Mead or Powell"),
    max_iter: Optional[int] = typer.Option(None, help="Optimizer iteration cap per model"),
    max_workers: Optional[int] = typer.Option(None, help="Fit models in parallel processes"),
    plot_model: Optional[str] = typer.Option(None, help="Model to draw (default: lowest AIC)"),
    bins: int = typer.Option(30, help="Histogram bins"),
    report: Optional[Path] = typer.Option(None, help="Write the JSON selection report here"),
    json_output: bool = typer.Option(False, "--json", help="Print the JSON report instead of a table"),
) -> None:
    model_names = parse_model_list(models)
    validate_fit_inputs(
        max_iter=max_iter,
        max_workers=max_workers,
        bins=bins,
        plot_model=plot_model,
        models=model_names,
    )

    cfg_data = FitConfig.from_json(config).to_dict() if config else FitConfig().to_dict()
    overrides = {"models": model_names, "method": method, "max_iter": max_iter, "max_workers": max_workers}
    cfg_data.update({k: v for k, v in overrides.items() if v is not None})
    fit_config = FitConfig.from_dict(cfg_data)
    # a --config file can narrow the models without --models
    validate_fit_inputs(plot_model=plot_model, models=list(fit_config.models))

    dataset = load_observations(data, treatment_column=treatment_column, time_column=time_column)
    result = analyze_germination(dataset, fit_config)

    chosen = result.result_for(plot_model) if plot_model else result.best_fit
    if chosen is None:
        raise DistributionFitError(f"every model failed to fit: {', '.join(result.failed_models)}")
    if not chosen.fit_success:
        raise DistributionFitError(f"{chosen.model_name} model failed to fit: {chosen.error}")

    fig = plot_germination_fit(dataset, chosen, output, bins=bins)
    plt.close(fig)

    payload = build_selection_report(result)
    payload["figure"] = str(output)
    payload["plotted_model"] = chosen.model_name
    if report:
        report.parent.mkdir(parents=True, exist_ok=True)
        report.write_text(json.dumps(payload, indent=2))

    if json_output:
        typer.echo(json.dumps(payload, indent=2))
    else:
        typer.echo(format_comparison_table(result))
        typer.echo(f"\nfigure: {output} ({chosen.model_name} model)")
    log.info("fit command completed", extra={"model": chosen.model_name, "status": "OK"})
