"""Information criteria helpers (AIC/BIC, Akaike weights)."""

from __future__ import annotations

from typing import Sequence

import numpy as np


def aic(log_likelihood: float, k: int) -> float:
    return float(2 * k - 2 * log_likelihood)


def bic(log_likelihood: float, k: int, n: int) -> float:
    return float(k * np.log(max(n, 1)) - 2 * log_likelihood)


def delta_aic(aic_values: Sequence[float]) -> np.ndarray:
    vals = np.asarray(list(aic_values), dtype=float)
    if vals.size == 0:
        return vals
    return vals - vals.min()


def akaike_weights(aic_values: Sequence[float]) -> np.ndarray:
    """exp(-ΔAIC/2) normalised to sum to one."""
    deltas = delta_aic(aic_values)
    if deltas.size == 0:
        return deltas
    rel = np.exp(-0.5 * deltas)
    return rel / rel.sum()


__all__ = ["aic", "bic", "delta_aic", "akaike_weights"]
