"""
Selling price, break-even and market position for a batch.

The batch total is grossed up by VAT and the seasonal multiplier, then
spread over the finished weight. Competitor quotes are compared per kg;
a gap inside the market band counts as competitive.

Processing phases give a finished-weight estimate for batches priced
before the final weights are measured.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from seacost.config import Settings, get_settings
from seacost.logging import get_logger
from seacost.types import MarketPosition, PricingInput, ProcessingPhase, non_negative

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProcessingEstimate:
    """Finished weight expected after running the processing phases."""

    input_weight: float
    final_weight: float
    total_waste_pct: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict."""
        return {
            "input_weight": self.input_weight,
            "final_weight": self.final_weight,
            "total_waste_pct": self.total_waste_pct,
        }


def estimate_processed_weight(
    input_weight: Any,
    phases: Sequence[ProcessingPhase],
) -> ProcessingEstimate:
    """Run a weight through the phases in order.

    Each phase removes its waste percentage, then adds ``added_weight``
    percent of what is left. Weight never drops below 0. The total waste
    is the plain sum of the phase percentages.

    Example:
        >>> estimate_processed_weight(1000, [ProcessingPhase("clean", 20, 0),
        ...                                  ProcessingPhase("glaze", 0, 25)]).final_weight
        1000.0
    """
    weight = non_negative(input_weight)
    current = weight
    total_waste_pct = 0.0

    for phase in phases:
        after_waste = current * (1 - phase.waste_percentage / 100)
        current = max(after_waste * (1 + phase.added_weight / 100), 0.0)
        total_waste_pct += phase.waste_percentage

    return ProcessingEstimate(
        input_weight=weight,
        final_weight=current,
        total_waste_pct=total_waste_pct,
    )


@dataclass(frozen=True)
class PricingResult:
    """Pricing of one batch. Per-kg figures are 0 without a finished weight."""

    total_cost: float
    vat_amount: float
    total_cost_with_vat: float
    adjusted_cost: float  # after the seasonal multiplier
    selling_price_total: float
    selling_price_per_kg: float
    break_even_price: float
    profit_per_kg: float
    margin_at_current_price: float
    recommended_margin: float
    recommended_selling_price: float
    competitor_diffs: tuple[float, ...] = ()
    market_position: MarketPosition = MarketPosition.COMPETITIVE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict."""
        return {
            "total_cost": self.total_cost,
            "vat_amount": self.vat_amount,
            "total_cost_with_vat": self.total_cost_with_vat,
            "adjusted_cost": self.adjusted_cost,
            "selling_price_total": self.selling_price_total,
            "selling_price_per_kg": self.selling_price_per_kg,
            "break_even_price": self.break_even_price,
            "profit_per_kg": self.profit_per_kg,
            "margin_at_current_price": self.margin_at_current_price,
            "recommended_margin": self.recommended_margin,
            "recommended_selling_price": self.recommended_selling_price,
            "competitor_diffs": list(self.competitor_diffs),
            "market_position": self.market_position.value,
        }


class PricingCalculator:
    """Prices a costed batch against its margin policy and competitors."""

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.minimum_margin = settings.PRICING_MINIMUM_MARGIN
        self.recommended_margin_floor = settings.PRICING_RECOMMENDED_MARGIN_FLOOR
        self.market_band = settings.MARKET_POSITION_BAND

    def market_position(
        self,
        selling_price_per_kg: float,
        competitor_prices: Sequence[float],
    ) -> tuple[tuple[float, ...], MarketPosition]:
        """Competitor minus our price per quote, and the resulting position.

        Any competitor above us by more than the band makes us cheap; failing
        that, any below us by more than the band makes us expensive.
        """
        diffs = tuple(price - selling_price_per_kg for price in competitor_prices)
        if any(d > self.market_band for d in diffs):
            return diffs, MarketPosition.CHEAP
        if any(d < -self.market_band for d in diffs):
            return diffs, MarketPosition.EXPENSIVE
        return diffs, MarketPosition.COMPETITIVE

    def calculate(
        self,
        total_cost: Any,
        final_weight: Any,
        pricing: PricingInput,
    ) -> PricingResult:
        """Price a batch.

        Args:
            total_cost: Batch total before VAT.
            final_weight: Finished weight in kg the price is spread over.
            pricing: Margin, VAT, seasonal and competitor inputs.

        Returns:
            PricingResult. Without a finished weight the per-kg figures are
            0 and no competitor comparison is made.
        """
        total_cost = non_negative(total_cost)
        final_weight = non_negative(final_weight)

        vat_amount = total_cost * pricing.vat_percent / 100
        total_cost_with_vat = total_cost + vat_amount
        adjusted_cost = total_cost_with_vat * pricing.seasonal_multiplier
        selling_price_total = adjusted_cost * (1 + pricing.profit_margin / 100)

        recommended_margin = max(
            pricing.minimum_margin or self.minimum_margin,
            self.recommended_margin_floor,
        )

        if final_weight <= 0:
            logger.debug("No finished weight, per-kg pricing skipped", total_cost=total_cost)
            return PricingResult(
                total_cost=total_cost,
                vat_amount=vat_amount,
                total_cost_with_vat=total_cost_with_vat,
                adjusted_cost=adjusted_cost,
                selling_price_total=selling_price_total,
                selling_price_per_kg=0.0,
                break_even_price=0.0,
                profit_per_kg=0.0,
                margin_at_current_price=0.0,
                recommended_margin=recommended_margin,
                recommended_selling_price=0.0,
            )

        selling_price_per_kg = selling_price_total / final_weight
        break_even_price = adjusted_cost / final_weight
        profit_per_kg = selling_price_per_kg - break_even_price
        if selling_price_per_kg > 0:
            margin_at_current_price = profit_per_kg / selling_price_per_kg * 100
        else:
            margin_at_current_price = 0.0

        diffs, position = self.market_position(selling_price_per_kg, pricing.competitor_prices)

        return PricingResult(
            total_cost=total_cost,
            vat_amount=vat_amount,
            total_cost_with_vat=total_cost_with_vat,
            adjusted_cost=adjusted_cost,
            selling_price_total=selling_price_total,
            selling_price_per_kg=selling_price_per_kg,
            break_even_price=break_even_price,
            profit_per_kg=profit_per_kg,
            margin_at_current_price=margin_at_current_price,
            recommended_margin=recommended_margin,
            recommended_selling_price=break_even_price * (1 + recommended_margin / 100),
            competitor_diffs=diffs,
            market_position=position,
        )


def compute_pricing(
    total_cost: Any,
    final_weight: Any,
    pricing: PricingInput | None = None,
) -> PricingResult:
    """Price a batch with the configured margin policy.

    Example:
        >>> compute_pricing(1000, 100, PricingInput(profit_margin=25)).selling_price_per_kg
        12.5
    """
    return PricingCalculator().calculate(total_cost, final_weight, pricing or PricingInput())
