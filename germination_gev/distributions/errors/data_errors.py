"""Pre-fit dataset checks."""

from __future__ import annotations

from typing import Sequence

from germination_gev.data.validation import ensure_min_observations
from germination_gev.distributions.models import ModelSpec
from germination_gev.exceptions import DataIntegrityError
from germination_gev.schema.observations import GerminationDataset, Treatment


def ensure_fittable(dataset: GerminationDataset | None, specs: Sequence[ModelSpec]) -> None:
    """Raise DataIntegrityError before any optimizer call when the data cannot support ``specs``."""

    if dataset is None or dataset.n == 0:
        raise DataIntegrityError("No observations left after filtering missing times")
    for spec in specs:
        ensure_min_observations(dataset.n, spec.k, spec.name)
        if not spec.free_offsets:
            continue
        # offsets are only identifiable when both groups are observed
        for treatment in Treatment:
            if dataset.count(treatment) == 0:
                raise DataIntegrityError(
                    f"{spec.name} model needs {treatment.value} observations; none present"
                )


__all__ = ["ensure_fittable"]
