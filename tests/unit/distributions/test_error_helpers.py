"""Unit tests for fit error helpers."""

import pytest

from germination_gev.distributions.errors import ensure_fittable, record_convergence_failure
from germination_gev.distributions.model_specs import LOCATION_MODEL, NULL_MODEL
from germination_gev.exceptions import DataIntegrityError
from germination_gev.schema.observations import GerminationDataset


def test_record_convergence_failure_populates_warning() -> None:
    result = record_convergence_failure(
        LOCATION_MODEL,
        error=RuntimeError("optimization diverged"),
        n_samples=200,
        stage="fit",
    )
    assert result.fit_success is False
    assert result.converged is False
    assert result.n == 200
    assert result.k == 4
    assert result.params is None
    assert result.aic == float("inf")
    assert any("diverged" in warning for warning in result.warnings)
    assert result.to_dict()["log_likelihood"] is None


def test_ensure_fittable_checks_sample_size() -> None:
    ensure_fittable(GerminationDataset.from_groups(control=[1.0, 2.0, 3.0, 4.0]), [NULL_MODEL])
    with pytest.raises(DataIntegrityError):
        ensure_fittable(GerminationDataset.from_groups(control=[1.0, 2.0, 3.0]), [NULL_MODEL])
    with pytest.raises(DataIntegrityError):
        ensure_fittable(None, [NULL_MODEL])
