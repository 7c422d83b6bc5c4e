"""
Packaging cost calculation.

Finished product is packed into gelatin bags, and bags into boxes.
A partial bag or box still consumes a whole unit of material, so counts
are rounded up.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from seacost.config import Settings, get_settings
from seacost.logging import get_logger
from seacost.types import PackagingConfig, to_number

logger = get_logger(__name__)


@dataclass(frozen=True)
class PackagingResult:
    """Result of a packaging calculation."""

    bags: int
    gelatin_kg: float
    boxes: int
    total_cost: float

    # Parameters actually used, after default substitution
    config: PackagingConfig = PackagingConfig()

    @property
    def gelatin_cost(self) -> float:
        return self.gelatin_kg * self.config.gelatin_cost_per_kg

    @property
    def box_cost(self) -> float:
        return self.boxes * self.config.box_cost_per_unit

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict."""
        return {
            "bags": self.bags,
            "gelatin_kg": self.gelatin_kg,
            "boxes": self.boxes,
            "gelatin_cost": self.gelatin_cost,
            "box_cost": self.box_cost,
            "total_cost": self.total_cost,
        }


class PackagingCostCalculator:
    """Computes bag, gelatin and box requirements for a finished weight.

    Any packaging parameter that is missing, zero or negative is replaced
    by the configured default instead of dividing by zero.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.defaults = PackagingConfig(
            bag_weight=settings.PACKAGING_BAG_WEIGHT,
            gelatin_cost_per_kg=settings.PACKAGING_GELATIN_COST_PER_KG,
            bags_per_kg_gelatin=settings.PACKAGING_BAGS_PER_KG_GELATIN,
            box_cost_per_unit=settings.PACKAGING_BOX_COST_PER_UNIT,
            bags_per_box=settings.PACKAGING_BAGS_PER_BOX,
        )

    def resolve(self, config: PackagingConfig) -> PackagingConfig:
        """Substitute defaults for unusable parameters."""
        resolved: dict[str, float] = {}
        for name in (
            "bag_weight",
            "gelatin_cost_per_kg",
            "bags_per_kg_gelatin",
            "box_cost_per_unit",
            "bags_per_box",
        ):
            value = to_number(getattr(config, name))
            if value <= 0:
                value = getattr(self.defaults, name)
                logger.debug("Using default packaging parameter", parameter=name, value=value)
            resolved[name] = value
        return PackagingConfig(**resolved)

    def calculate(self, final_weight: Any, config: PackagingConfig) -> PackagingResult:
        """Calculate packaging for a finished weight.

        Args:
            final_weight: Finished product weight in kg.
            config: Packaging parameters from the batch form.

        Returns:
            PackagingResult with integer bag and box counts.
        """
        used = self.resolve(config)
        final_weight = to_number(final_weight)

        if final_weight <= 0:
            return PackagingResult(bags=0, gelatin_kg=0.0, boxes=0, total_cost=0.0, config=used)

        bags = math.ceil(final_weight / used.bag_weight)
        gelatin_kg = bags / used.bags_per_kg_gelatin
        boxes = math.ceil(bags / used.bags_per_box)
        total_cost = gelatin_kg * used.gelatin_cost_per_kg + boxes * used.box_cost_per_unit

        return PackagingResult(
            bags=bags,
            gelatin_kg=gelatin_kg,
            boxes=boxes,
            total_cost=total_cost,
            config=used,
        )


def compute_packaging(
    final_weight: Any,
    bag_weight: Any = None,
    gelatin_cost_per_kg: Any = None,
    bags_per_kg_gelatin: Any = None,
    box_cost_per_unit: Any = None,
    bags_per_box: Any = None,
) -> PackagingResult:
    """Calculate packaging with the configured defaults as fallbacks.

    Example:
        >>> compute_packaging(891.16, 5, 3.15, 35, 0.59, 2).bags
        179
    """
    config = PackagingConfig(
        bag_weight=to_number(bag_weight),
        gelatin_cost_per_kg=to_number(gelatin_cost_per_kg),
        bags_per_kg_gelatin=to_number(bags_per_kg_gelatin),
        box_cost_per_unit=to_number(box_cost_per_unit),
        bags_per_box=to_number(bags_per_box),
    )
    return PackagingCostCalculator().calculate(final_weight, config)
