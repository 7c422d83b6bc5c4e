"""
Core types for the costing engine.

This module defines the value objects shared by the calculators:
- Numeric coercion helpers for possibly-missing form input
- Enums for ratio interpretation, trend, scenario risk level
  and market position
- Dataclasses for batch input (packaging, labor, pricing, phases),
  cash-flow projections, ratios, scenarios and sensitivity points
- Helpers for ID generation and timestamps
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

from uuid6 import uuid7


def generate_id(prefix: str = "") -> str:
    """Generate a time-ordered unique ID using UUID7.

    Args:
        prefix: Optional prefix for the ID (e.g., "rpt").

    Returns:
        A unique ID string, optionally prefixed.
    """
    uid = str(uuid7())
    return f"{prefix}_{uid}" if prefix else uid


def utc_now() -> datetime:
    """Get current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def to_number(value: Any, default: float = 0.0) -> float:
    """Coerce a form value to a finite float.

    None, empty strings, unparseable strings, booleans, NaN and infinities
    all become ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
        if not value:
            return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def non_negative(value: Any, default: float = 0.0) -> float:
    """Coerce to a finite float and clamp negatives to 0."""
    return max(to_number(value, default), 0.0)


def round_display(value: float, places: int = 2) -> float:
    """Round a value for display. Never use before accumulating."""
    return round(value, places)


class Interpretation(str, Enum):
    """Tier of a ratio relative to its industry benchmark."""

    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    POOR = "poor"


class Trend(str, Enum):
    """Direction of a ratio between two time-ordered observations."""

    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class RiskLevel(str, Enum):
    """Qualitative risk attached to a scenario."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, value: Any) -> RiskLevel:
        """Parse a risk level, defaulting to MEDIUM for unknown input."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.MEDIUM


class MarketPosition(str, Enum):
    """Our price per kg relative to competitor quotes."""

    COMPETITIVE = "competitive"
    EXPENSIVE = "expensive"
    CHEAP = "cheap"


@dataclass(frozen=True)
class PackagingConfig:
    """Packaging parameters of a batch form.

    Zero or missing values are replaced by configured defaults at
    calculation time, not here.
    """

    bag_weight: float = 0.0
    gelatin_cost_per_kg: float = 0.0
    bags_per_kg_gelatin: float = 0.0
    box_cost_per_unit: float = 0.0
    bags_per_box: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PackagingConfig:
        """Build from a partial mapping."""
        return cls(
            bag_weight=non_negative(data.get("bag_weight")),
            gelatin_cost_per_kg=non_negative(data.get("gelatin_cost_per_kg")),
            bags_per_kg_gelatin=non_negative(data.get("bags_per_kg_gelatin")),
            box_cost_per_unit=non_negative(data.get("box_cost_per_unit")),
            bags_per_box=non_negative(data.get("bags_per_box")),
        )


@dataclass(frozen=True)
class LaborEntry:
    """A crew working one processing step (e.g. cleaning, glazing)."""

    label: str
    workers: float
    hours: float
    hourly_rate: float

    @property
    def total_hours(self) -> float:
        return self.workers * self.hours

    @property
    def cost(self) -> float:
        return self.workers * self.hours * self.hourly_rate

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LaborEntry:
        """Build from a partial mapping."""
        return cls(
            label=str(data.get("label") or ""),
            workers=non_negative(data.get("workers")),
            hours=non_negative(data.get("hours")),
            hourly_rate=non_negative(data.get("hourly_rate")),
        )


@dataclass(frozen=True)
class ProcessingPhase:
    """A processing step that removes waste and may add weight (glazing)."""

    name: str
    waste_percentage: float = 0.0
    added_weight: float = 0.0  # percent of the post-waste weight, negative for further loss

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ProcessingPhase:
        """Build from a partial mapping."""
        return cls(
            name=str(data.get("name") or ""),
            waste_percentage=min(non_negative(data.get("waste_percentage")), 100.0),
            added_weight=to_number(data.get("added_weight")),
        )


@dataclass(frozen=True)
class PricingInput:
    """Pricing section of a batch form.

    Percentages are in percent. A zero minimum margin falls back to the
    configured default when pricing.
    """

    profit_margin: float = 0.0
    vat_percent: float = 0.0
    seasonal_multiplier: float = 1.0
    minimum_margin: float = 0.0
    competitor_prices: tuple[float, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PricingInput:
        """Build from a partial mapping.

        Competitor quotes come from a ``competitor_prices`` list and the
        ``competitor1`` / ``competitor2`` form fields. Empty quotes are dropped.
        """
        quotes = data.get("competitor_prices") or []
        if not isinstance(quotes, (list, tuple)):
            quotes = []
        quotes = [*quotes, data.get("competitor1"), data.get("competitor2")]
        seasonal = to_number(data.get("seasonal_multiplier"), 1.0)
        return cls(
            profit_margin=non_negative(data.get("profit_margin")),
            vat_percent=non_negative(data.get("vat_percent")),
            seasonal_multiplier=seasonal if seasonal > 0 else 1.0,
            minimum_margin=non_negative(data.get("minimum_margin")),
            competitor_prices=tuple(q for q in (non_negative(v) for v in quotes) if q > 0),
        )


@dataclass(frozen=True)
class BatchInput:
    """Snapshot of a batch form."""

    weight: float = 0.0
    purchase_price: float = 0.0
    final_clean_weight: float = 0.0
    final_grill_weight: float = 0.0
    packaging: PackagingConfig = field(default_factory=PackagingConfig)
    labor: tuple[LaborEntry, ...] = ()
    transport_cost: float = 0.0
    additional_costs: float = 0.0
    pricing: PricingInput = field(default_factory=PricingInput)
    processing_phases: tuple[ProcessingPhase, ...] = ()
    product_name: str = ""
    batch_number: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BatchInput:
        """Build a batch from possibly-partial form data.

        Every numeric field is coerced, so a half-filled form still
        produces a usable (zeroed) batch.
        """
        packaging = data.get("packaging")
        if not isinstance(packaging, Mapping):
            packaging = data
        labor = data.get("labor") or []
        if not isinstance(labor, (list, tuple)):
            labor = []
        pricing = data.get("pricing")
        if not isinstance(pricing, Mapping):
            pricing = data
        phases = data.get("processing_phases") or []
        if not isinstance(phases, (list, tuple)):
            phases = []
        return cls(
            weight=non_negative(data.get("weight")),
            purchase_price=non_negative(data.get("purchase_price")),
            final_clean_weight=non_negative(data.get("final_clean_weight")),
            final_grill_weight=non_negative(data.get("final_grill_weight")),
            packaging=PackagingConfig.from_dict(packaging),
            labor=tuple(
                LaborEntry.from_dict(entry) for entry in labor if isinstance(entry, Mapping)
            ),
            transport_cost=non_negative(data.get("transport_cost")),
            additional_costs=non_negative(data.get("additional_costs")),
            pricing=PricingInput.from_dict(pricing),
            processing_phases=tuple(
                ProcessingPhase.from_dict(phase) for phase in phases if isinstance(phase, Mapping)
            ),
            product_name=str(data.get("product_name") or ""),
            batch_number=str(data.get("batch_number") or ""),
        )


@dataclass(frozen=True)
class CashFlowProjection:
    """One period of a multi-year cash-flow projection.

    ``free_cash_flow`` and ``present_value`` are derived; build rows with
    ``seacost.valuation.dcf.build_projection`` to keep them consistent.
    """

    period: int
    revenue: float
    operating_expenses: float
    capital_expenditure: float
    working_capital: float
    discount_rate: float
    free_cash_flow: float = 0.0
    present_value: float = 0.0
    cumulative_cash_flow: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict."""
        return {
            "period": self.period,
            "revenue": self.revenue,
            "operating_expenses": self.operating_expenses,
            "capital_expenditure": self.capital_expenditure,
            "working_capital": self.working_capital,
            "free_cash_flow": self.free_cash_flow,
            "discount_rate": self.discount_rate,
            "present_value": self.present_value,
            "cumulative_cash_flow": self.cumulative_cash_flow,
        }


@dataclass(frozen=True)
class FinancialRatio:
    """A ratio classified against its benchmark."""

    name: str
    value: float
    benchmark: float
    interpretation: Interpretation
    trend: Trend
    category: str = ""
    higher_is_better: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict."""
        return {
            "name": self.name,
            "category": self.category,
            "value": self.value,
            "benchmark": self.benchmark,
            "interpretation": self.interpretation.value,
            "trend": self.trend.value,
            "higher_is_better": self.higher_is_better,
        }


@dataclass(frozen=True)
class ScenarioOutcome:
    """A discrete outcome (optimistic/base/pessimistic or custom)."""

    label: str
    probability: float
    revenue: float = 0.0
    costs: float = 0.0
    net_income: float = 0.0
    roi: float = 0.0
    risk_level: RiskLevel = RiskLevel.MEDIUM

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ScenarioOutcome:
        """Build from a partial mapping."""
        return cls(
            label=str(data.get("label") or ""),
            probability=to_number(data.get("probability")),
            revenue=to_number(data.get("revenue")),
            costs=to_number(data.get("costs")),
            net_income=to_number(data.get("net_income")),
            roi=to_number(data.get("roi")),
            risk_level=RiskLevel.parse(data.get("risk_level")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict."""
        return {
            "label": self.label,
            "probability": self.probability,
            "revenue": self.revenue,
            "costs": self.costs,
            "net_income": self.net_income,
            "roi": self.roi,
            "risk_level": self.risk_level.value,
        }


@dataclass(frozen=True)
class SensitivityPoint:
    """Output change for one perturbed parameter, relative to the base case."""

    parameter_name: str
    perturbation_pct: float
    output_delta: float
    metric: str = "free_cash_flow"
    base_value: float = 0.0
    perturbed_value: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict."""
        return {
            "parameter_name": self.parameter_name,
            "perturbation_pct": self.perturbation_pct,
            "output_delta": self.output_delta,
            "metric": self.metric,
            "base_value": self.base_value,
            "perturbed_value": self.perturbed_value,
        }
