import json

import pytest

from germination_gev.exceptions import ConfigValidationError
from germination_gev.schema.fit_config import MODEL_NAMES, FitConfig


def test_defaults_round_trip() -> None:
    cfg = FitConfig()
    assert cfg.models == MODEL_NAMES
    assert FitConfig.from_dict(cfg.to_dict()) == cfg


@pytest.mark.parametrize(
    "overrides",
    [
        {"method": "BFGS"},
        {"max_iter": 0},
        {"restarts": -1},
        {"shape_bounds": (0.5, -0.5)},
        {"shape_start": 0.9},
        {"scale_lower_fraction": 0.0},
        {"max_workers": 0},
        {"models": ()},
        {"models": ("null", "weibull")},
        {"models": ("null", "null")},
    ],
)
def test_invalid_values(overrides) -> None:
    with pytest.raises(ConfigValidationError):
        FitConfig(**overrides)


def test_from_json(tmp_path) -> None:
    path = tmp_path / "fit.json"
    path.write_text(json.dumps({"method": "Powell", "models": ["null", "location"], "shape_bounds": [-0.2, 0.2]}))
    cfg = FitConfig.from_json(path)
    assert cfg.method == "Powell"
    assert cfg.models == ("null", "location")
    assert cfg.shape_bounds == (-0.2, 0.2)


def test_from_json_rejects_unknown_keys_and_bad_files(tmp_path) -> None:
    path = tmp_path / "fit.json"
    path.write_text(json.dumps({"tolerance": 1}))
    with pytest.raises(ConfigValidationError, match="unknown config keys"):
        FitConfig.from_json(path)
    path.write_text("{not json")
    with pytest.raises(ConfigValidationError):
        FitConfig.from_json(path)
    with pytest.raises(ConfigValidationError):
        FitConfig.from_json(tmp_path / "missing.json")
