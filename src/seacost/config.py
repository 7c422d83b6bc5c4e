"""
Configuration management using pydantic-settings.

Loads configuration from environment variables and .env files.
Holds the business policy the calculators depend on: packaging defaults,
pricing margins, ratio tiering thresholds and scenario risk weights.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from seacost.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Packaging defaults:
        PACKAGING_BAG_WEIGHT: kg of finished product per bag
        PACKAGING_GELATIN_COST_PER_KG: cost of one kg of gelatin film
        PACKAGING_BAGS_PER_KG_GELATIN: bags produced from one kg of gelatin
        PACKAGING_BOX_COST_PER_UNIT: cost of one shipping box
        PACKAGING_BAGS_PER_BOX: bags packed into one box

    Pricing:
        PRICING_MINIMUM_MARGIN: minimum margin (percent) when the form gives none
        PRICING_RECOMMENDED_MARGIN_FLOOR: lowest margin (percent) ever recommended
        MARKET_POSITION_BAND: price gap per kg treated as competitive

    Analysis policy:
        RATIO_EXCELLENT_THRESHOLD: deviation at or above which a ratio is excellent
        RATIO_GOOD_THRESHOLD: deviation at or above which a ratio is good
        TREND_TOLERANCE: relative change treated as a stable trend
        SCENARIO_PROBABILITY_TOLERANCE: allowed deviation of the probability sum from 100
        RISK_WEIGHT_LOW / MEDIUM / HIGH: ordinal risk-index weights

    Other:
        DEFAULT_DISCOUNT_RATE: discount rate (percent) used by the CLI when a row has none
        OUTPUT_DIR: Directory for export files
        LOG_LEVEL: Logging level
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Packaging
    PACKAGING_BAG_WEIGHT: float = Field(
        default=5.0, gt=0.0, description="kg of product per bag"
    )
    PACKAGING_GELATIN_COST_PER_KG: float = Field(
        default=3.15, gt=0.0, description="Gelatin cost per kg"
    )
    PACKAGING_BAGS_PER_KG_GELATIN: float = Field(
        default=35.0, gt=0.0, description="Bags per kg of gelatin"
    )
    PACKAGING_BOX_COST_PER_UNIT: float = Field(
        default=0.59, gt=0.0, description="Cost per box"
    )
    PACKAGING_BAGS_PER_BOX: float = Field(
        default=2.0, gt=0.0, description="Bags per box"
    )

    # Pricing
    PRICING_MINIMUM_MARGIN: float = Field(
        default=15.0, ge=0.0, description="Minimum margin in percent"
    )
    PRICING_RECOMMENDED_MARGIN_FLOOR: float = Field(
        default=20.0, ge=0.0, description="Floor of the recommended margin in percent"
    )
    MARKET_POSITION_BAND: float = Field(
        default=0.5, ge=0.0, description="Competitor price gap per kg treated as competitive"
    )

    # Ratio benchmarking
    RATIO_EXCELLENT_THRESHOLD: float = Field(
        default=0.20, description="Relative deviation for 'excellent'"
    )
    RATIO_GOOD_THRESHOLD: float = Field(
        default=0.0, description="Relative deviation for 'good'"
    )
    TREND_TOLERANCE: float = Field(
        default=0.02, ge=0.0, description="Relative change treated as stable"
    )

    # Scenario weighting
    SCENARIO_PROBABILITY_TOLERANCE: float = Field(
        default=0.01, ge=0.0, description="Tolerance on the probability sum"
    )
    RISK_WEIGHT_LOW: float = Field(default=1.0, description="Risk index weight for low")
    RISK_WEIGHT_MEDIUM: float = Field(default=2.0, description="Risk index weight for medium")
    RISK_WEIGHT_HIGH: float = Field(default=3.0, description="Risk index weight for high")

    # Valuation
    DEFAULT_DISCOUNT_RATE: float = Field(
        default=10.0, ge=0.0, description="Default discount rate in percent"
    )

    # Directories
    OUTPUT_DIR: Path = Field(default=Path("output"), description="Output directory")

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )

    @model_validator(mode="after")
    def validate_ratio_thresholds(self) -> Settings:
        """Ensure the good threshold does not exceed the excellent threshold."""
        if self.RATIO_GOOD_THRESHOLD > self.RATIO_EXCELLENT_THRESHOLD:
            raise ValueError(
                "RATIO_GOOD_THRESHOLD must not exceed RATIO_EXCELLENT_THRESHOLD"
            )
        return self

    @model_validator(mode="after")
    def validate_risk_weights(self) -> Settings:
        """Ensure risk weights increase from low to high."""
        if not (self.RISK_WEIGHT_LOW < self.RISK_WEIGHT_MEDIUM < self.RISK_WEIGHT_HIGH):
            raise ValueError(
                "Risk weights must be strictly increasing: low < medium < high"
            )
        return self

    @property
    def risk_weights(self) -> dict[str, float]:
        """Risk index weight keyed by risk level value."""
        return {
            "low": self.RISK_WEIGHT_LOW,
            "medium": self.RISK_WEIGHT_MEDIUM,
            "high": self.RISK_WEIGHT_HIGH,
        }

    def ensure_directories(self) -> None:
        """Create the output directory if it doesn't exist."""
        self.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

    def display(self) -> dict[str, str | float]:
        """Return settings as a flat dict for display."""
        return {
            "PACKAGING_BAG_WEIGHT": self.PACKAGING_BAG_WEIGHT,
            "PACKAGING_GELATIN_COST_PER_KG": self.PACKAGING_GELATIN_COST_PER_KG,
            "PACKAGING_BAGS_PER_KG_GELATIN": self.PACKAGING_BAGS_PER_KG_GELATIN,
            "PACKAGING_BOX_COST_PER_UNIT": self.PACKAGING_BOX_COST_PER_UNIT,
            "PACKAGING_BAGS_PER_BOX": self.PACKAGING_BAGS_PER_BOX,
            "PRICING_MINIMUM_MARGIN": self.PRICING_MINIMUM_MARGIN,
            "PRICING_RECOMMENDED_MARGIN_FLOOR": self.PRICING_RECOMMENDED_MARGIN_FLOOR,
            "MARKET_POSITION_BAND": self.MARKET_POSITION_BAND,
            "RATIO_EXCELLENT_THRESHOLD": self.RATIO_EXCELLENT_THRESHOLD,
            "RATIO_GOOD_THRESHOLD": self.RATIO_GOOD_THRESHOLD,
            "TREND_TOLERANCE": self.TREND_TOLERANCE,
            "SCENARIO_PROBABILITY_TOLERANCE": self.SCENARIO_PROBABILITY_TOLERANCE,
            "RISK_WEIGHT_LOW": self.RISK_WEIGHT_LOW,
            "RISK_WEIGHT_MEDIUM": self.RISK_WEIGHT_MEDIUM,
            "RISK_WEIGHT_HIGH": self.RISK_WEIGHT_HIGH,
            "DEFAULT_DISCOUNT_RATE": self.DEFAULT_DISCOUNT_RATE,
            "OUTPUT_DIR": str(self.OUTPUT_DIR),
            "LOG_LEVEL": self.LOG_LEVEL,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ConfigurationError: If settings are invalid. The pydantic errors
            are listed in the context and chained as the cause.
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(
            "Invalid configuration",
            context={"errors": [err["msg"] for err in e.errors()]},
        ) from e


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
