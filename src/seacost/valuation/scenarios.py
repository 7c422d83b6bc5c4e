"""
Probability-weighted scenario aggregation.

Blends discrete outcomes (optimistic / base / pessimistic or custom) into
one expected value per field. The probability set must sum to 100; it is
never renormalised.

The risk index maps each scenario's qualitative risk level to an ordinal
weight (low=1, medium=2, high=3 by default) and weights it by probability.
It is a ranking heuristic for the dashboard, not a statistical risk
measure such as variance or value-at-risk.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from seacost.config import Settings, get_settings
from seacost.exceptions import InvalidScenarioSet, ValidationError
from seacost.logging import get_logger
from seacost.types import ScenarioOutcome

logger = get_logger(__name__)

NUMERIC_FIELDS = ("revenue", "costs", "net_income", "roi")


@dataclass(frozen=True)
class ScenarioSummary:
    """Probability-weighted view of a scenario set."""

    weighted_revenue: float
    weighted_costs: float
    weighted_net_income: float
    weighted_roi: float
    risk_index: float
    scenario_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict."""
        return {
            "weighted_revenue": self.weighted_revenue,
            "weighted_costs": self.weighted_costs,
            "weighted_net_income": self.weighted_net_income,
            "weighted_roi": self.weighted_roi,
            "risk_index": self.risk_index,
            "scenario_count": self.scenario_count,
        }


class ScenarioWeightingEngine:
    """Validates a scenario set and computes weighted aggregates."""

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.tolerance = settings.SCENARIO_PROBABILITY_TOLERANCE
        self.risk_weights = settings.risk_weights

    def validate(self, scenarios: Sequence[ScenarioOutcome]) -> None:
        """Raise InvalidScenarioSet unless probabilities sum to 100.

        Raises:
            InvalidScenarioSet: Empty set, a probability outside 0..100,
                or a probability sum outside tolerance.
        """
        if not scenarios:
            raise InvalidScenarioSet(
                "Scenario set is empty",
                context={"total": 0.0, "expected": 100.0, "tolerance": self.tolerance},
            )

        for s in scenarios:
            if not 0.0 <= s.probability <= 100.0:
                logger.error(
                    "Scenario probability out of range",
                    label=s.label,
                    probability=s.probability,
                )
                raise InvalidScenarioSet(
                    "Scenario probability must be between 0 and 100",
                    context={"label": s.label, "probability": s.probability},
                )

        total = sum(s.probability for s in scenarios)
        if abs(total - 100.0) > self.tolerance:
            logger.error(
                "Scenario probabilities do not sum to 100",
                total=total,
                scenarios=[s.label for s in scenarios],
            )
            raise InvalidScenarioSet(
                "Scenario probabilities must sum to 100",
                context={"total": total, "expected": 100.0, "tolerance": self.tolerance},
            )

    def weighted_aggregate(self, scenarios: Sequence[ScenarioOutcome], field: str) -> float:
        """Sum of field x probability / 100 over the scenario set.

        Args:
            scenarios: Scenario set whose probabilities sum to 100.
            field: Numeric field name (revenue, costs, net_income, roi).

        Returns:
            Probability-weighted value of the field.

        Raises:
            InvalidScenarioSet: Probabilities do not sum to 100.
            ValidationError: Unknown field name.
        """
        if field not in NUMERIC_FIELDS:
            raise ValidationError(
                f"Unknown scenario field: {field}",
                context={"field": field, "expected": list(NUMERIC_FIELDS)},
            )
        self.validate(scenarios)
        return sum(getattr(s, field) * s.probability / 100 for s in scenarios)

    def risk_index(self, scenarios: Sequence[ScenarioOutcome]) -> float:
        """Probability-weighted ordinal risk weight.

        Raises:
            InvalidScenarioSet: Probabilities do not sum to 100.
        """
        self.validate(scenarios)
        return sum(
            self.risk_weights[s.risk_level.value] * s.probability / 100 for s in scenarios
        )

    def summarize(self, scenarios: Sequence[ScenarioOutcome]) -> ScenarioSummary:
        """Weighted revenue, costs, net income, ROI and risk index."""
        self.validate(scenarios)
        return ScenarioSummary(
            weighted_revenue=self.weighted_aggregate(scenarios, "revenue"),
            weighted_costs=self.weighted_aggregate(scenarios, "costs"),
            weighted_net_income=self.weighted_aggregate(scenarios, "net_income"),
            weighted_roi=self.weighted_aggregate(scenarios, "roi"),
            risk_index=self.risk_index(scenarios),
            scenario_count=len(scenarios),
        )


def weighted_aggregate(scenarios: Sequence[ScenarioOutcome], field: str) -> float:
    """Convenience wrapper using the configured tolerance."""
    return ScenarioWeightingEngine().weighted_aggregate(scenarios, field)


def risk_index(scenarios: Sequence[ScenarioOutcome]) -> float:
    """Convenience wrapper using the configured risk weights."""
    return ScenarioWeightingEngine().risk_index(scenarios)
