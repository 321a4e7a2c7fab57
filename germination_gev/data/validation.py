"""Schema checks for germination tables."""

from __future__ import annotations

from typing import Iterable

import pandas as pd

from germination_gev.exceptions import DataIntegrityError
from germination_gev.schema.observations import Treatment


def validate_columns(df: pd.DataFrame, required: Iterable[str]) -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise DataIntegrityError(f"Missing required columns: {missing}")


def parse_treatments(labels: pd.Series) -> pd.Series:
    """Normalise labels and reject anything outside the known treatments."""
    if labels.isna().any():
        rows = labels.index[labels.isna()].tolist()
        raise DataIntegrityError(f"Missing treatment label in rows {rows[:10]}")
    normalized = labels.astype(str).str.strip().str.lower()
    allowed = {t.value for t in Treatment}
    unknown = sorted(set(normalized) - allowed)
    if unknown:
        raise DataIntegrityError(f"Unknown treatment labels {unknown}; expected one of {sorted(allowed)}")
    return normalized


def coerce_times(values: pd.Series) -> pd.Series:
    """Convert times to float; blank cells and NA markers become NaN, text raises."""
    coerced = pd.to_numeric(values, errors="coerce")
    malformed = coerced.isna() & values.notna() & (values.astype(str).str.strip() != "")
    if malformed.any():
        bad = values[malformed].astype(str).unique().tolist()
        raise DataIntegrityError(f"Non-numeric germination times: {bad[:10]}")
    return coerced.astype(float)


def ensure_min_observations(n: int, k: int, model_name: str = "model") -> None:
    """Raise unless there are more observations than free parameters."""
    if n <= k:
        raise DataIntegrityError(
            f"Insufficient observations for {model_name}: need > {k} (free parameters), got {n}"
        )


__all__ = ["validate_columns", "parse_treatments", "coerce_times", "ensure_min_observations"]
