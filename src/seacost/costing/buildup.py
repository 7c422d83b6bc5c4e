"""
Cost build-up for a processing batch.

Raw material is the dominant cost line; labor, packaging, transport and
overheads are added on top to reach the batch total and the cost per
finished kg. The total is then priced per finished kg.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from seacost.config import Settings
from seacost.costing.packaging import PackagingCostCalculator, PackagingResult
from seacost.costing.pricing import (
    PricingCalculator,
    PricingResult,
    ProcessingEstimate,
    estimate_processed_weight,
)
from seacost.costing.yield_loss import YieldResult, compute_yield
from seacost.logging import get_logger, log_context
from seacost.types import BatchInput, LaborEntry, non_negative

logger = get_logger(__name__)


def compute_raw_material_cost(weight: Any, purchase_price: Any) -> float:
    """Raw material cost = weight x purchase price.

    Missing, NaN or negative inputs count as 0 so a half-filled form shows
    an incomplete cost instead of failing.
    """
    return non_negative(weight) * non_negative(purchase_price)


def compute_labor_cost(entries: Iterable[LaborEntry]) -> float:
    """Sum of workers x hours x hourly rate over all crews."""
    return sum(entry.cost for entry in entries)


@dataclass(frozen=True)
class BatchCostSummary:
    """Full cost picture of one batch."""

    raw_material_cost: float
    labor_cost: float
    packaging_cost: float
    transport_cost: float
    additional_costs: float
    total_cost: float
    cost_per_kg: float
    yield_result: YieldResult
    packaging: PackagingResult
    pricing: PricingResult
    processing: ProcessingEstimate | None = None

    @property
    def breakdown(self) -> list[tuple[str, float, float]]:
        """(category, amount, share of total in percent), zero lines omitted."""
        lines = [
            ("raw_material", self.raw_material_cost),
            ("labor", self.labor_cost),
            ("packaging", self.packaging_cost),
            ("transport", self.transport_cost),
            ("other", self.additional_costs),
        ]
        return [
            (name, amount, amount / self.total_cost * 100 if self.total_cost else 0.0)
            for name, amount in lines
            if amount > 0
        ]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict."""
        return {
            "raw_material_cost": self.raw_material_cost,
            "labor_cost": self.labor_cost,
            "packaging_cost": self.packaging_cost,
            "transport_cost": self.transport_cost,
            "additional_costs": self.additional_costs,
            "total_cost": self.total_cost,
            "cost_per_kg": self.cost_per_kg,
            "yield": self.yield_result.to_dict(),
            "packaging": self.packaging.to_dict(),
            "pricing": self.pricing.to_dict(),
            "processing": self.processing.to_dict() if self.processing else None,
            "breakdown": [
                {"category": name, "amount": amount, "percentage": pct}
                for name, amount, pct in self.breakdown
            ],
        }


def compute_batch_cost(batch: BatchInput, settings: Settings | None = None) -> BatchCostSummary:
    """Combine every cost line of a batch.

    Packaging is sized on the finished weight from the yield calculation.
    Cost per kg is relative to finished weight and is 0 until finished
    weights are entered. Pricing uses the measured finished weight, or the
    processing-phase estimate while no weights are measured.

    Args:
        batch: Batch form snapshot.
        settings: Settings supplying packaging defaults and pricing policy.

    Returns:
        BatchCostSummary.
    """
    with log_context(batch_id=batch.batch_number or None, calculator="cost_buildup"):
        raw_material_cost = compute_raw_material_cost(batch.weight, batch.purchase_price)
        labor_cost = compute_labor_cost(batch.labor)

        yield_result = compute_yield(
            batch.weight, batch.final_clean_weight, batch.final_grill_weight
        )
        packaging = PackagingCostCalculator(settings).calculate(
            yield_result.final_weight, batch.packaging
        )

        total_cost = (
            raw_material_cost
            + labor_cost
            + packaging.total_cost
            + batch.transport_cost
            + batch.additional_costs
        )
        final_weight = yield_result.final_weight
        cost_per_kg = total_cost / final_weight if final_weight > 0 else 0.0

        processing = None
        if batch.processing_phases:
            processing = estimate_processed_weight(batch.weight, batch.processing_phases)
        priced_weight = final_weight
        if priced_weight <= 0 and processing is not None:
            priced_weight = processing.final_weight
        pricing = PricingCalculator(settings).calculate(total_cost, priced_weight, batch.pricing)

        logger.debug(
            "Batch cost computed",
            total_cost=total_cost,
            cost_per_kg=cost_per_kg,
            selling_price_per_kg=pricing.selling_price_per_kg,
        )

        return BatchCostSummary(
            raw_material_cost=raw_material_cost,
            labor_cost=labor_cost,
            packaging_cost=packaging.total_cost,
            transport_cost=batch.transport_cost,
            additional_costs=batch.additional_costs,
            total_cost=total_cost,
            cost_per_kg=cost_per_kg,
            yield_result=yield_result,
            packaging=packaging,
            pricing=pricing,
            processing=processing,
        )
