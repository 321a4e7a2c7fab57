"""Batch fitting, AIC ranking and likelihood-ratio tests across the model lattice."""

import numpy as np
import pandas as pd
import pytest

from germination_gev.data.loader import observations_from_frame
from germination_gev.distributions import analysis
from germination_gev.distributions.analysis import analyze_germination, fit_candidate_models
from germination_gev.distributions.errors import record_convergence_failure
from germination_gev.distributions.model_specs import FULL_MODEL, MODEL_SPECS, NULL_MODEL, nested_pairs
from germination_gev.exceptions import DataIntegrityError
from germination_gev.schema.fit_config import FitConfig
from germination_gev.schema.observations import GerminationDataset


def _shifted(seed: int = 7, shift: float = 20.0, infect_scale: float = 10.0) -> GerminationDataset:
    rng = np.random.default_rng(seed)
    return GerminationDataset.from_groups(
        control=rng.gumbel(50.0, 10.0, size=100),
        infect=rng.gumbel(50.0 + shift, infect_scale, size=100),
    )


def test_location_model_beats_null_when_infection_shifts_location() -> None:
    result = analyze_germination(_shifted())
    aic = {row.model_name: row.aic for row in result.comparison}
    assert aic["location"] < aic["null"]
    assert result.result_for("location").params.treat_location == pytest.approx(20.0, abs=5.0)
    assert result.best_fit is not None
    assert result.best_fit.model_name != "null"

    lrt = next(t for t in result.lr_tests if t.restricted == "null" and t.extended == "location")
    assert lrt.df == 1
    assert lrt.p_value < 0.001
    assert lrt.significant()


@pytest.mark.parametrize(
    "seed,shift,infect_scale",
    [
        (1, 0.0, 10.0),
        (2, 5.0, 10.0),
        (3, 15.0, 10.0),
        (6, 0.0, 6.0),
        (8, 10.0, 15.0),
        (11, 2.0, 8.0),
        (13, 0.0, 12.0),
        (14, 0.0, 10.0),
        (14, 4.0, 14.0),
        (17, 8.0, 5.0),
    ],
)
def test_extended_models_never_fall_below_nested_models(seed: int, shift: float, infect_scale: float) -> None:
    specs = list(MODEL_SPECS.values())
    fits = {fr.model_name: fr for fr in fit_candidate_models(_shifted(seed, shift, infect_scale), specs)}
    assert all(fr.fit_success for fr in fits.values())
    pairs = nested_pairs(specs)
    assert len(pairs) == 7
    for restricted, extended in pairs:
        gap = fits[extended.name].log_likelihood - fits[restricted.name].log_likelihood
        assert gap >= -1e-9, f"{extended.name} below {restricted.name} by {-gap:.6g}"


def test_comparison_is_sorted_with_weights_summing_to_one() -> None:
    result = analyze_germination(_shifted(seed=5, shift=8.0))
    aics = [row.aic for row in result.comparison]
    assert aics == sorted(aics)
    assert [row.rank for row in result.comparison] == list(range(1, len(aics) + 1))
    assert result.comparison[0].delta_aic == 0.0
    assert sum(row.aic_weight for row in result.comparison) == pytest.approx(1.0)
    for row in result.comparison:
        fr = result.result_for(row.model_name)
        assert row.aic == 2 * fr.k - 2 * fr.log_likelihood


def test_lr_tests_cover_the_nesting_lattice() -> None:
    result = analyze_germination(_shifted(seed=9))
    pairs = [(t.restricted, t.extended) for t in result.lr_tests]
    assert pairs[:4] == [("null", "shape"), ("null", "location"), ("null", "scale"), ("null", "full")]
    assert set(pairs[4:]) == {("shape", "full"), ("location", "full"), ("scale", "full")}
    for t in result.lr_tests:
        assert t.statistic >= 0.0
        assert 0.0 <= t.p_value <= 1.0
        assert t.df == MODEL_SPECS[t.extended].k - MODEL_SPECS[t.restricted].k


def test_empty_dataset_raises_before_any_optimizer_call(monkeypatch) -> None:
    def _boom(*args, **kwargs):
        raise AssertionError("optimizer must not run")

    monkeypatch.setattr("germination_gev.distributions.fitters.gev_fitter.minimize", _boom)
    frame = pd.DataFrame({"treatment": ["control", "infect"], "germination_time": [np.nan, np.nan]})
    with pytest.raises(DataIntegrityError):
        dataset = observations_from_frame(frame)
        analyze_germination(dataset)
    with pytest.raises(DataIntegrityError):
        fit_candidate_models(None, [NULL_MODEL])


def test_too_few_observations_for_free_parameters() -> None:
    dataset = GerminationDataset.from_groups(control=[10.0, 12.0], infect=[14.0, 15.0])
    with pytest.raises(DataIntegrityError, match="Insufficient observations for full"):
        fit_candidate_models(dataset, [NULL_MODEL, FULL_MODEL])


def test_offset_models_need_both_treatments() -> None:
    dataset = GerminationDataset.from_groups(control=np.random.default_rng(0).gumbel(50, 10, 30))
    with pytest.raises(DataIntegrityError, match="infect"):
        analyze_germination(dataset)
    result = analyze_germination(dataset, FitConfig(models=("null",)))
    assert [fr.model_name for fr in result.fit_results] == ["null"]
    assert result.lr_tests == []


def test_failed_model_is_excluded_from_ranking(monkeypatch) -> None:
    real_fit_model = analysis.fit_model

    def _fit(dataset, spec, start=None, bounds=None, config=None):
        if spec.name == "scale":
            return record_convergence_failure(spec, error="forced failure", n_samples=dataset.n)
        return real_fit_model(dataset, spec, start, bounds, config)

    monkeypatch.setattr(analysis, "fit_model", _fit)
    result = analyze_germination(_shifted(seed=4))
    assert result.failed_models == ["scale"]
    assert "scale" not in {row.model_name for row in result.comparison}
    assert len(result.comparison) == 4
    assert all("scale" not in (t.restricted, t.extended) for t in result.lr_tests)
    assert result.result_for("scale").fit_success is False
    assert [fr.model_name for fr in result.fit_results] == list(MODEL_SPECS)


def test_process_pool_matches_sequential_fits() -> None:
    dataset = _shifted(seed=12)
    specs = [NULL_MODEL, FULL_MODEL]
    sequential = fit_candidate_models(dataset, specs, FitConfig())
    parallel = fit_candidate_models(dataset, specs, FitConfig(max_workers=2))
    assert [fr.model_name for fr in parallel] == ["null", "full"]
    for a, b in zip(sequential, parallel):
        assert a.log_likelihood == pytest.approx(b.log_likelihood)
