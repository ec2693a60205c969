"""Centralised engine configuration using Pydantic settings."""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineConfig(BaseSettings):
    """Risk engine configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        allow_inf_nan=False,
    )

    simulation_iterations: int = Field(default=1000, alias="FLEET_RISK_ITERATIONS")
    confidence_level: float = Field(default=0.95, alias="FLEET_RISK_CONFIDENCE_LEVEL")
    random_seed: Optional[int] = Field(default=None, alias="FLEET_RISK_RANDOM_SEED")

    # Implied purchase price of a rented tool: monthly rate x amortization / markup
    rental_markup: float = Field(default=1.4, alias="FLEET_RISK_RENTAL_MARKUP")
    amortization_months: int = Field(default=48, alias="FLEET_RISK_AMORTIZATION_MONTHS")

    @field_validator("simulation_iterations", "amortization_months")
    @classmethod
    def _positive_int(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @field_validator("confidence_level")
    @classmethod
    def _open_unit_interval(cls, value: float) -> float:
        if not 0.0 < value < 1.0:
            raise ValueError("confidence level must lie strictly between 0 and 1")
        return value

    @field_validator("rental_markup")
    @classmethod
    def _positive_markup(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("rental markup must be positive")
        return value

    @field_validator("random_seed", mode="before")
    @classmethod
    def _blank_seed_is_unset(cls, value: Optional[str | int]) -> Optional[str | int]:
        if isinstance(value, str) and not value.strip():
            return None
        return value


@lru_cache(maxsize=1)
def get_config() -> EngineConfig:
    """Load configuration, caching the result for reuse."""

    return EngineConfig()  # type: ignore[call-arg]


__all__ = ["EngineConfig", "get_config"]
