"""Tests for batch pricing and processing-phase weight estimates."""

from __future__ import annotations

import pytest

from seacost.config import Settings
from seacost.costing.buildup import compute_batch_cost
from seacost.costing.pricing import (
    PricingCalculator,
    compute_pricing,
    estimate_processed_weight,
)
from seacost.types import BatchInput, MarketPosition, PricingInput, ProcessingPhase


class TestPricingInput:
    """Tests for parsing the pricing section of a form."""

    def test_competitor_fields(self) -> None:
        """competitor1/competitor2 join the list and empty quotes are dropped."""
        pricing = PricingInput.from_dict(
            {"competitor_prices": [12, None], "competitor1": "9,5", "competitor2": 0}
        )
        assert pricing.competitor_prices == (12.0, 9.5)

    def test_seasonal_multiplier_defaults_to_one(self) -> None:
        """A missing or non-positive multiplier leaves the cost unchanged."""
        assert PricingInput.from_dict({}).seasonal_multiplier == 1.0
        assert PricingInput.from_dict({"seasonal_multiplier": 0}).seasonal_multiplier == 1.0
        assert PricingInput.from_dict({"seasonal_multiplier": "1,1"}).seasonal_multiplier == 1.1

    def test_negative_margin_clamped(self) -> None:
        """A negative margin prices at cost."""
        assert PricingInput.from_dict({"profit_margin": -10}).profit_margin == 0.0

    def test_batch_form_sections(self, batch_input: BatchInput) -> None:
        """Nested pricing and phase rows are read from the batch form."""
        batch = BatchInput.from_dict(
            {"pricing": {"vat_percent": 24}, "processing_phases": [{"name": "glaze", "added_weight": 5}, 3]}
        )

        assert batch.pricing.vat_percent == 24.0
        assert batch.processing_phases == (ProcessingPhase("glaze", 0.0, 5.0),)
        assert batch_input.pricing.profit_margin == 25.0
        assert batch_input.pricing.competitor_prices == (8.0,)


class TestProcessingEstimate:
    """Tests for running a weight through processing phases."""

    def test_waste_then_glazing(self) -> None:
        """Waste comes off first, glazing is added on what remains."""
        estimate = estimate_processed_weight(
            1000, [ProcessingPhase("clean", 20), ProcessingPhase("glaze", 0, 25)]
        )

        assert estimate.final_weight == pytest.approx(1000.0)
        assert estimate.total_waste_pct == 20.0

    def test_phases_compound(self) -> None:
        """Two 10% phases leave 81%, while the waste total is 20%."""
        estimate = estimate_processed_weight(
            100, [ProcessingPhase("head", 10), ProcessingPhase("peel", 10)]
        )

        assert estimate.final_weight == pytest.approx(81.0)
        assert estimate.total_waste_pct == 20.0

    def test_negative_added_weight(self) -> None:
        """A negative addition is a further loss."""
        estimate = estimate_processed_weight(100, [ProcessingPhase("thaw", 0, -5)])
        assert estimate.final_weight == pytest.approx(95.0)

    def test_never_negative(self) -> None:
        """Weight bottoms out at 0."""
        estimate = estimate_processed_weight(100, [ProcessingPhase("drip", 0, -150)])
        assert estimate.final_weight == 0.0

    def test_no_phases(self) -> None:
        """Without phases the weight is unchanged."""
        estimate = estimate_processed_weight("250", [])

        assert estimate.final_weight == 250.0
        assert estimate.to_dict()["total_waste_pct"] == 0.0


class TestPricing:
    """Tests for selling price, break-even and recommendations."""

    @pytest.fixture
    def pricing(self) -> PricingInput:
        return PricingInput(profit_margin=25, vat_percent=10, seasonal_multiplier=1.2)

    def test_cost_gross_up(self, pricing: PricingInput) -> None:
        """VAT first, then the seasonal multiplier, then the margin."""
        result = compute_pricing(1000, 100, pricing)

        assert result.vat_amount == pytest.approx(100.0)
        assert result.total_cost_with_vat == pytest.approx(1100.0)
        assert result.adjusted_cost == pytest.approx(1320.0)
        assert result.selling_price_total == pytest.approx(1650.0)

    def test_per_kg(self, pricing: PricingInput) -> None:
        """Per-kg price, break-even and profit."""
        result = compute_pricing(1000, 100, pricing)

        assert result.selling_price_per_kg == pytest.approx(16.5)
        assert result.break_even_price == pytest.approx(13.2)
        assert result.profit_per_kg == pytest.approx(3.3)
        assert result.margin_at_current_price == pytest.approx(20.0)

    def test_recommendation_floor(self, pricing: PricingInput) -> None:
        """The recommended margin never drops below the floor."""
        result = compute_pricing(1000, 100, pricing)

        assert result.recommended_margin == 20.0
        assert result.recommended_selling_price == pytest.approx(13.2 * 1.2)

    def test_minimum_margin_above_floor(self) -> None:
        """A form minimum above the floor wins."""
        result = compute_pricing(1000, 100, PricingInput(minimum_margin=30))

        assert result.recommended_margin == 30.0
        assert result.recommended_selling_price == pytest.approx(13.0)

    def test_zero_margin_prices_at_break_even(self) -> None:
        """Without a margin the price equals break-even."""
        result = compute_pricing(500, 50)

        assert result.selling_price_per_kg == pytest.approx(10.0)
        assert result.profit_per_kg == pytest.approx(0.0)
        assert result.margin_at_current_price == pytest.approx(0.0)

    def test_zero_weight(self) -> None:
        """Without a finished weight per-kg figures are 0, not errors."""
        result = compute_pricing(1000, 0, PricingInput(competitor_prices=(12.0,)))

        assert result.selling_price_per_kg == 0.0
        assert result.break_even_price == 0.0
        assert result.recommended_selling_price == 0.0
        assert result.competitor_diffs == ()
        assert result.market_position == MarketPosition.COMPETITIVE

    def test_to_dict(self, pricing: PricingInput) -> None:
        """Serialised result uses enum values."""
        data = compute_pricing(1000, 100, pricing).to_dict()

        assert data["market_position"] == "competitive"
        assert data["competitor_diffs"] == []


class TestMarketPosition:
    """Tests for the competitor comparison."""

    @pytest.mark.parametrize(
        "quotes,expected",
        [
            ((17.5,), MarketPosition.CHEAP),
            ((15.0,), MarketPosition.EXPENSIVE),
            ((16.8,), MarketPosition.COMPETITIVE),
            ((16.2, 16.9), MarketPosition.COMPETITIVE),
            ((17.5, 15.0), MarketPosition.CHEAP),
            ((), MarketPosition.COMPETITIVE),
        ],
    )
    def test_position(self, quotes: tuple[float, ...], expected: MarketPosition) -> None:
        """Gaps beyond 0.5 per kg decide the position, cheap before expensive."""
        pricing = PricingInput(profit_margin=25, vat_percent=10, seasonal_multiplier=1.2,
                               competitor_prices=quotes)
        result = compute_pricing(1000, 100, pricing)

        assert result.market_position == expected
        assert result.competitor_diffs == pytest.approx(tuple(q - 16.5 for q in quotes))

    def test_band_from_settings(self) -> None:
        """A wider band absorbs a 1.0 gap."""
        calculator = PricingCalculator(Settings(_env_file=None, MARKET_POSITION_BAND=2.0))
        _, position = calculator.market_position(16.5, [17.5])

        assert position == MarketPosition.COMPETITIVE


class TestBatchPricing:
    """Tests for pricing inside the batch cost build-up."""

    def test_priced_on_measured_weight(self, batch_input: BatchInput) -> None:
        """With measured weights the price spreads over the finished weight."""
        summary = compute_batch_cost(batch_input)
        expected = summary.total_cost * 1.13 * 1.25 / 891.16

        assert summary.pricing.selling_price_per_kg == pytest.approx(expected)
        assert summary.pricing.market_position == MarketPosition.EXPENSIVE
        assert summary.processing is None

    def test_priced_on_phase_estimate(self) -> None:
        """Before weights are measured the phase estimate is priced."""
        batch = BatchInput.from_dict(
            {
                "weight": 100,
                "purchase_price": 10,
                "processing_phases": [{"name": "clean", "waste_percentage": 20}],
                "pricing": {"profit_margin": 25},
            }
        )
        summary = compute_batch_cost(batch)

        assert summary.cost_per_kg == 0.0
        assert summary.processing is not None
        assert summary.processing.final_weight == pytest.approx(80.0)
        assert summary.pricing.selling_price_per_kg == pytest.approx(15.625)

    def test_to_dict(self, batch_input: BatchInput) -> None:
        """Serialised summary carries the pricing section."""
        data = compute_batch_cost(batch_input).to_dict()

        assert data["pricing"]["market_position"] == "expensive"
        assert data["processing"] is None
