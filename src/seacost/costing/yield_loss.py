"""
Yield and processing-loss calculation.

Compares raw input weight against the finished clean and grill weights
of a batch.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from seacost.logging import get_logger
from seacost.types import non_negative

logger = get_logger(__name__)


@dataclass(frozen=True)
class YieldResult:
    """Result of a yield/loss calculation."""

    input_weight: float
    final_weight: float
    loss: float
    loss_pct: float
    yield_pct: float

    # Finished weight exceeded input weight (glaze/water uptake or a typo)
    weight_gain: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict."""
        return {
            "input_weight": self.input_weight,
            "final_weight": self.final_weight,
            "loss": self.loss,
            "loss_pct": self.loss_pct,
            "yield_pct": self.yield_pct,
            "weight_gain": self.weight_gain,
        }


def compute_yield(
    input_weight: Any,
    final_clean_weight: Any,
    final_grill_weight: Any,
) -> YieldResult:
    """Compute finished weight, loss and yield percentages.

    When the input weight is 0 both percentages are 0. When the finished
    weight exceeds the input, loss is reported as 0 and the result is
    flagged with ``weight_gain``; the yield percentage keeps its true value.

    Args:
        input_weight: Raw material weight in kg.
        final_clean_weight: Finished clean product in kg.
        final_grill_weight: Finished grill product in kg.

    Returns:
        YieldResult.
    """
    input_weight = non_negative(input_weight)
    final_weight = non_negative(final_clean_weight) + non_negative(final_grill_weight)

    loss = input_weight - final_weight
    weight_gain = loss < 0
    if weight_gain:
        logger.warning(
            "Finished weight exceeds input weight",
            input_weight=input_weight,
            final_weight=final_weight,
        )
        loss = 0.0

    if input_weight > 0:
        loss_pct = loss / input_weight * 100
        yield_pct = final_weight / input_weight * 100
    else:
        loss_pct = 0.0
        yield_pct = 0.0

    return YieldResult(
        input_weight=input_weight,
        final_weight=final_weight,
        loss=loss,
        loss_pct=loss_pct,
        yield_pct=yield_pct,
        weight_gain=weight_gain,
    )
