"""Engine configuration.

Loads from environment variables (prefix ``LOGISTICS_``) and an optional
``.env`` file. Engine classes take plain constructor arguments; these
settings only feed the sidecar, the CLI and the ``from_settings`` factories.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Tunable defaults for the decision engine."""

    # ----- Sequence optimizer -----
    optimizer_population_size: int = Field(
        default=30, ge=2, description="Orderings per generation."
    )
    optimizer_generations: int = Field(
        default=20, ge=0, description="Generation budget per run."
    )
    optimizer_mutation_rate: float = Field(
        default=0.1, ge=0.0, le=1.0, description="Swap mutation probability."
    )
    optimizer_tournament_size: int = Field(
        default=3, ge=1, description="Contestants per parent selection."
    )
    optimizer_plateau_generations: int = Field(
        default=0,
        ge=0,
        description="Stop after this many generations without improvement (0 = off).",
    )

    # ----- Monte Carlo -----
    monte_carlo_trials: int = Field(
        default=500, ge=1, description="Trials per uncertainty simulation."
    )
    monte_carlo_noise: float = Field(
        default=0.10,
        ge=0.0,
        le=1.0,
        description="Half-width of the uniform multiplicative noise.",
    )

    # ----- Weight learning -----
    learning_step: float = Field(
        default=0.02, ge=0.0, le=1.0, description="Weight gained per trigger."
    )
    spoilage_tolerance: float = Field(
        default=10.0, description="Spoilage risk (%) that implicates freshness."
    )
    delay_threshold: float = Field(
        default=40.0, description="Average delay that implicates delivery."
    )

    # ----- Scenarios -----
    default_scenario: str = Field(
        default="Normal", description="Scenario used when none is given."
    )

    # ----- Sidecar -----
    sidecar_host: str = Field(default="0.0.0.0", description="Bind host.")
    sidecar_port: int = Field(default=8002, description="Bind port.")
    sidecar_dev_mode: bool = Field(
        default=False,
        description="Dev mode: CORS wildcard and error details in responses.",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOGISTICS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> EngineSettings:
    """Get cached settings singleton."""
    return EngineSettings()
