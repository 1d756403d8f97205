"""Config schema definitions."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class EstimationConfig(BaseModel):
    probs: list[float] = Field(default_factory=lambda: [0.95])
    point: str = "median"
    interval: str = "qi"
    kde_bw_method: str | float = "scott"
    kde_grid_size: int = Field(default=512, ge=16)

    @field_validator("probs")
    @classmethod
    def validate_probs(cls, value: list[float]) -> list[float]:
        """Each probability level must lie in (0, 1]."""
        if not value:
            raise ValueError("At least one probability level is required")
        for prob in value:
            if not 0 < prob <= 1:
                raise ValueError(f"Probability levels must be in (0, 1], got {prob}")
        return value

    @field_validator("point")
    @classmethod
    def validate_point(cls, value: str) -> str:
        if value not in ("mean", "median", "mode"):
            raise ValueError(f"point must be mean, median or mode, got '{value}'")
        return value

    @field_validator("interval")
    @classmethod
    def validate_interval(cls, value: str) -> str:
        if value not in ("qi", "hdi"):
            raise ValueError(f"interval must be qi or hdi, got '{value}'")
        return value


class LoggingConfig(BaseModel):
    verbose: bool = False
    log_file: Path | None = None


class EngineConfig(BaseModel):
    estimation: EstimationConfig = EstimationConfig()
    logging: LoggingConfig = LoggingConfig()
