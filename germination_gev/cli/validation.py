"""CLI validation helpers."""

from __future__ import annotations

from typing import List, Optional

from germination_gev.exceptions import ConfigValidationError
from germination_gev.schema.fit_config import MODEL_NAMES


def require_positive(name: str, value: int | float) -> None:
    if value <= 0:
        raise ConfigValidationError(f"{name} must be > 0")


def parse_model_list(raw: Optional[str]) -> Optional[List[str]]:
    """Split a comma-delimited model list; None/blank keeps the configured default."""
    if raw is None or not raw.strip():
        return None
    names = [item.strip().lower() for item in raw.split(",") if item.strip()]
    unknown = [n for n in names if n not in MODEL_NAMES]
    if unknown:
        raise ConfigValidationError(f"unknown models {unknown}; expected subset of {list(MODEL_NAMES)}")
    return names


def validate_fit_inputs(
    *,
    max_iter: Optional[int] = None,
    max_workers: Optional[int] = None,
    bins: Optional[int] = None,
    plot_model: Optional[str] = None,
    models: Optional[List[str]] = None,
) -> None:
    if max_iter is not None:
        require_positive("max_iter", max_iter)
    if max_workers is not None:
        require_positive("max_workers", max_workers)
    if bins is not None:
        require_positive("bins", bins)
    if plot_model is not None:
        if plot_model not in MODEL_NAMES:
            raise ConfigValidationError(f"plot_model must be one of {list(MODEL_NAMES)}")
        if models is not None and plot_model not in models:
            raise ConfigValidationError(f"plot_model {plot_model!r} is not among the fitted models {models}")


__all__ = ["require_positive", "parse_model_list", "validate_fit_inputs"]
