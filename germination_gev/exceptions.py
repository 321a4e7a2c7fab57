"""Project-wide exception types."""

class GerminationGevError(Exception):
    """Base exception for all germination GEV errors."""


class DataSourceError(GerminationGevError):
    """Raised when data retrieval or schema checks fail."""


class DataIntegrityError(DataSourceError):
    """Raised when observations are missing, malformed, or too few to fit."""


class DistributionFitError(GerminationGevError):
    """Raised when distribution fitting fails or is implausible."""


class OptimizationError(DistributionFitError):
    """Raised when the optimizer exhausts its budget or finds no feasible point."""


class ConfigError(GerminationGevError):
    """Raised when configuration is missing or malformed."""


class ConfigValidationError(ConfigError):
    """Raised when validation fails for supplied configuration."""


class PlottingError(GerminationGevError):
    """Raised when a figure cannot be rendered or written."""
