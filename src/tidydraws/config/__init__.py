"""Engine configuration models and YAML loader."""

from .loader import load_config
from .schema import EngineConfig, EstimationConfig, LoggingConfig

__all__ = [
    "EngineConfig",
    "EstimationConfig",
    "LoggingConfig",
    "load_config",
]
