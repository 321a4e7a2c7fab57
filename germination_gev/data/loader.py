"""CSV loading and NA filtering for germination observations."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from germination_gev.data.validation import coerce_times, parse_treatments, validate_columns
from germination_gev.exceptions import DataIntegrityError
from germination_gev.schema.observations import GerminationDataset, Treatment
from germination_gev.utils.logging import get_logger

log = get_logger(__name__, component="data_loader")

DEFAULT_TREATMENT_COLUMN = "treatment"
DEFAULT_TIME_COLUMN = "germination_time"


def observations_from_frame(
    df: pd.DataFrame,
    *,
    treatment_column: str = DEFAULT_TREATMENT_COLUMN,
    time_column: str = DEFAULT_TIME_COLUMN,
    source: str = "frame",
) -> GerminationDataset:
    """Drop rows with a missing time and build a validated dataset."""

    validate_columns(df, [treatment_column, time_column])
    if df.empty:
        raise DataIntegrityError(f"No rows in {source}")

    times = coerce_times(df[time_column])
    keep = times.notna()
    dropped = int((~keep).sum())
    if not keep.any():
        raise DataIntegrityError(f"All {len(df)} rows in {source} have a missing {time_column}")

    labels = parse_treatments(df.loc[keep, treatment_column])
    effect = np.where(labels.to_numpy() == Treatment.INFECT.value, 1, 0)
    dataset = GerminationDataset(
        times=times[keep].to_numpy(dtype=float),
        treatment_effect=effect,
        source=source,
    )
    log.info(
        "Loaded germination observations",
        extra={
            "n_samples": dataset.n,
            "status": "loaded",
            "dropped_missing": dropped,
            "n_control": dataset.count(Treatment.CONTROL),
            "n_infect": dataset.count(Treatment.INFECT),
        },
    )
    return dataset


def load_observations(
    path: Path,
    *,
    treatment_column: str = DEFAULT_TREATMENT_COLUMN,
    time_column: str = DEFAULT_TIME_COLUMN,
) -> GerminationDataset:
    path = Path(path)
    if not path.exists():
        raise DataIntegrityError(f"Data file not found: {path}")
    try:
        df = pd.read_csv(path, skipinitialspace=True)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
        raise DataIntegrityError(f"Cannot parse {path}: {exc}") from exc
    return observations_from_frame(
        df,
        treatment_column=treatment_column,
        time_column=time_column,
        source=str(path),
    )


__all__ = ["load_observations", "observations_from_frame", "DEFAULT_TREATMENT_COLUMN", "DEFAULT_TIME_COLUMN"]
