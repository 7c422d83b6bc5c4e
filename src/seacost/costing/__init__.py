"""Batch costing: raw material, labor, yield, packaging and pricing."""

from seacost.costing.buildup import (
    BatchCostSummary,
    compute_batch_cost,
    compute_labor_cost,
    compute_raw_material_cost,
)
from seacost.costing.packaging import PackagingCostCalculator, PackagingResult, compute_packaging
from seacost.costing.pricing import (
    PricingCalculator,
    PricingResult,
    ProcessingEstimate,
    compute_pricing,
    estimate_processed_weight,
)
from seacost.costing.yield_loss import YieldResult, compute_yield

__all__ = [
    "BatchCostSummary",
    "PackagingCostCalculator",
    "PackagingResult",
    "PricingCalculator",
    "PricingResult",
    "ProcessingEstimate",
    "YieldResult",
    "compute_batch_cost",
    "compute_labor_cost",
    "compute_packaging",
    "compute_pricing",
    "compute_raw_material_cost",
    "compute_yield",
    "estimate_processed_weight",
]
