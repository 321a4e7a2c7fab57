"""GEV model comparison for germination times under infection treatment."""

from germination_gev.distributions.analysis import analyze_germination, fit_candidate_models
from germination_gev.distributions.likelihood import LikelihoodEvaluator
from germination_gev.distributions.models import FitResult, ModelSpec, ParameterVector
from germination_gev.schema.fit_config import FitConfig
from germination_gev.schema.observations import GerminationDataset, Observation, Treatment

__version__ = "0.1.0"

__all__ = [
    "analyze_germination",
    "fit_candidate_models",
    "LikelihoodEvaluator",
    "FitResult",
    "ModelSpec",
    "ParameterVector",
    "FitConfig",
    "GerminationDataset",
    "Observation",
    "Treatment",
]
