"""Observation and dataset types shared by the loader and the fitters."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Sequence

import numpy as np

from germination_gev.exceptions import DataIntegrityError


class Treatment(str, Enum):
    CONTROL = "control"
    INFECT = "infect"

    @property
    def effect(self) -> int:
        """Multiplier applied to treatment offsets (1 for infected seeds)."""
        return 1 if self is Treatment.INFECT else 0

    @classmethod
    def parse(cls, label: object) -> "Treatment":
        """Map a raw label onto a treatment, rejecting anything unrecognised."""
        if isinstance(label, Treatment):
            return label
        normalized = str(label).strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        allowed = ", ".join(m.value for m in cls)
        raise DataIntegrityError(f"Unknown treatment label {label!r}; expected one of: {allowed}")


@dataclass(frozen=True)
class Observation:
    treatment: Treatment
    germination_time: float


@dataclass(frozen=True, eq=False)
class GerminationDataset:
    """Read-only germination times with a 0/1 treatment indicator per row."""

    times: np.ndarray
    treatment_effect: np.ndarray
    source: str = field(default="memory", compare=False)

    def __post_init__(self) -> None:
        times = np.asarray(self.times, dtype=float).copy()
        effect = np.asarray(self.treatment_effect, dtype=int).copy()
        if times.ndim != 1 or effect.ndim != 1:
            raise DataIntegrityError("times and treatment_effect must be one-dimensional")
        if times.shape != effect.shape:
            raise DataIntegrityError(
                f"times ({times.size}) and treatment_effect ({effect.size}) lengths differ"
            )
        if times.size == 0:
            raise DataIntegrityError("dataset contains no observations")
        if not np.isfinite(times).all():
            raise DataIntegrityError("germination times must be finite")
        if (times <= 0).any():
            raise DataIntegrityError("germination times must be positive")
        if not np.isin(effect, (0, 1)).all():
            raise DataIntegrityError("treatment_effect must contain only 0 (control) or 1 (infect)")
        times.setflags(write=False)
        effect.setflags(write=False)
        object.__setattr__(self, "times", times)
        object.__setattr__(self, "treatment_effect", effect)

    @classmethod
    def from_observations(cls, observations: Iterable[Observation], source: str = "memory") -> "GerminationDataset":
        rows = list(observations)
        if not rows:
            raise DataIntegrityError("dataset contains no observations")
        times = np.array([row.germination_time for row in rows], dtype=float)
        effect = np.array([Treatment.parse(row.treatment).effect for row in rows], dtype=int)
        return cls(times=times, treatment_effect=effect, source=source)

    @classmethod
    def from_groups(
        cls,
        control: Sequence[float] = (),
        infect: Sequence[float] = (),
        source: str = "memory",
    ) -> "GerminationDataset":
        control_arr = np.asarray(control, dtype=float)
        infect_arr = np.asarray(infect, dtype=float)
        times = np.concatenate([control_arr, infect_arr])
        effect = np.concatenate([np.zeros(control_arr.size, dtype=int), np.ones(infect_arr.size, dtype=int)])
        return cls(times=times, treatment_effect=effect, source=source)

    @property
    def n(self) -> int:
        return int(self.times.size)

    @property
    def max_time(self) -> float:
        return float(self.times.max())

    @property
    def min_time(self) -> float:
        return float(self.times.min())

    @property
    def median(self) -> float:
        return float(np.median(self.times))

    @property
    def std(self) -> float:
        if self.n < 2:
            return 0.0
        return float(np.std(self.times, ddof=1))

    def count(self, treatment: Treatment) -> int:
        return int((self.treatment_effect == treatment.effect).sum())

    def subset(self, treatment: Treatment) -> np.ndarray:
        """Times observed under a single treatment."""
        return self.times[self.treatment_effect == treatment.effect]

    def __len__(self) -> int:
        return self.n


__all__ = ["Treatment", "Observation", "GerminationDataset"]
