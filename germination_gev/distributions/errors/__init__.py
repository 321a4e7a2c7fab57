"""Error helpers turning per-model problems into failed FitResults."""

from __future__ import annotations

from .convergence_errors import record_convergence_failure
from .data_errors import ensure_fittable

__all__ = [
    "ensure_fittable",
    "record_convergence_failure",
]
