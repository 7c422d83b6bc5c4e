"""Tests for batch costing: raw material, yield, packaging and cost build-up."""

from __future__ import annotations

import math

import pytest

from seacost.config import Settings
from seacost.costing.buildup import (
    compute_batch_cost,
    compute_labor_cost,
    compute_raw_material_cost,
)
from seacost.costing.packaging import PackagingCostCalculator, compute_packaging
from seacost.costing.yield_loss import compute_yield
from seacost.types import BatchInput, LaborEntry, PackagingConfig


class TestRawMaterialCost:
    """Tests for raw material cost."""

    def test_purchase_of_900_kg(self) -> None:
        """900 kg at 5.70 per kg costs 5130."""
        assert compute_raw_material_cost(900, 5.70) == pytest.approx(5130.00)

    @pytest.mark.parametrize(
        "weight,price",
        [(0, 0), (0, 12.5), (250, 0), (1234.5, 3.3), (0.001, 99999)],
    )
    def test_equals_weight_times_price(self, weight: float, price: float) -> None:
        """Cost is exactly weight x price for non-negative inputs."""
        assert compute_raw_material_cost(weight, price) == weight * price

    @pytest.mark.parametrize("weight", [None, "", "abc", float("nan"), -10])
    def test_unusable_weight_counts_as_zero(self, weight: object) -> None:
        """Missing, invalid or negative weight gives 0 instead of raising."""
        assert compute_raw_material_cost(weight, 5.70) == 0.0

    def test_string_input_is_coerced(self) -> None:
        """Form strings, including a decimal comma, are parsed."""
        assert compute_raw_material_cost("900", "5,70") == pytest.approx(5130.0)


class TestYield:
    """Tests for yield and loss."""

    def test_shrimp_batch_yield(self) -> None:
        """900 kg in, 430 clean + 461.16 grill out."""
        result = compute_yield(900, 430, 461.16)

        assert result.final_weight == pytest.approx(891.16)
        assert result.loss == pytest.approx(8.84)
        assert result.loss_pct == pytest.approx(0.98, abs=0.005)
        assert result.yield_pct == pytest.approx(99.02, abs=0.005)
        assert result.weight_gain is False

    @pytest.mark.parametrize(
        "input_weight,clean,grill",
        [(900, 430, 461.16), (1000, 0, 0), (50, 25, 0), (12.5, 3.3, 4.4), (1, 1, 0)],
    )
    def test_loss_and_yield_sum_to_100(
        self, input_weight: float, clean: float, grill: float
    ) -> None:
        """Loss % + yield % is 100 whenever nothing was gained."""
        result = compute_yield(input_weight, clean, grill)
        assert result.loss_pct + result.yield_pct == pytest.approx(100.0, abs=1e-9)

    def test_zero_input_weight(self) -> None:
        """Zero input gives zero percentages without raising."""
        result = compute_yield(0, 10, 5)

        assert result.loss_pct == 0.0
        assert result.yield_pct == 0.0
        assert result.final_weight == 15.0

    def test_missing_fields(self) -> None:
        """A blank form gives an all-zero result."""
        result = compute_yield(None, None, "")

        assert result.final_weight == 0.0
        assert result.loss == 0.0
        assert result.yield_pct == 0.0

    def test_weight_gain_is_flagged(self) -> None:
        """Finished weight above input reports zero loss and flags the gain."""
        result = compute_yield(100, 60, 50)

        assert result.weight_gain is True
        assert result.loss == 0.0
        assert result.loss_pct == 0.0
        assert result.yield_pct == pytest.approx(110.0)


class TestPackaging:
    """Tests for packaging cost."""

    def test_shrimp_batch_packaging(self) -> None:
        """891.16 kg packed into 5 kg bags, 2 bags per box."""
        result = compute_packaging(891.16, 5, 3.15, 35, 0.59, 2)

        assert result.bags == 179
        assert result.gelatin_kg == pytest.approx(5.114, abs=1e-3)
        assert result.boxes == 90
        assert result.total_cost == pytest.approx(69.21, abs=0.005)

    def test_counts_are_integers(self) -> None:
        """Bags and boxes are whole units rounded up."""
        result = compute_packaging(10.01, 5, 3.15, 35, 0.59, 2)

        assert isinstance(result.bags, int)
        assert isinstance(result.boxes, int)
        assert result.bags == 3
        assert result.boxes == 2

    def test_cost_split(self) -> None:
        """Gelatin and box cost add up to the total."""
        result = compute_packaging(891.16, 5, 3.15, 35, 0.59, 2)

        assert result.gelatin_cost == pytest.approx(179 / 35 * 3.15)
        assert result.box_cost == pytest.approx(90 * 0.59)
        assert result.gelatin_cost + result.box_cost == pytest.approx(result.total_cost)

    def test_zero_weight(self) -> None:
        """Nothing to pack costs nothing."""
        result = compute_packaging(0, 5, 3.15, 35, 0.59, 2)

        assert result.bags == 0
        assert result.boxes == 0
        assert result.total_cost == 0.0

    @pytest.mark.parametrize("bag_weight", [0, None, -5, "abc"])
    def test_unusable_bag_weight_falls_back_to_default(self, bag_weight: object) -> None:
        """A zero or missing bag weight uses the configured default."""
        result = compute_packaging(891.16, bag_weight, 3.15, 35, 0.59, 2)

        assert result.config.bag_weight == 5.0
        assert result.bags == 179

    def test_all_defaults(self) -> None:
        """With no parameters every value comes from configuration."""
        result = compute_packaging(891.16)

        assert result.config == PackagingConfig(5.0, 3.15, 35.0, 0.59, 2.0)
        assert result.total_cost == pytest.approx(69.21, abs=0.005)

    def test_defaults_come_from_settings(self) -> None:
        """Custom settings change the fallback values."""
        settings = Settings(_env_file=None, PACKAGING_BAG_WEIGHT=10.0, PACKAGING_BAGS_PER_BOX=4.0)
        result = PackagingCostCalculator(settings).calculate(100, PackagingConfig())

        assert result.bags == 10
        assert result.boxes == 3

    def test_non_negative_total(self) -> None:
        """Total cost is never negative."""
        for weight in (0, 0.5, 5, 5.01, 1000):
            assert compute_packaging(weight, 5, 3.15, 35, 0.59, 2).total_cost >= 0


class TestLaborCost:
    """Tests for labor cost."""

    def test_sum_over_crews(self) -> None:
        """Labor cost is workers x hours x rate summed over crews."""
        entries = [
            LaborEntry("cleaning", workers=6, hours=8, hourly_rate=4.5),
            LaborEntry("glazing", workers=2, hours=4, hourly_rate=5.0),
        ]

        assert compute_labor_cost(entries) == pytest.approx(256.0)
        assert entries[0].total_hours == 48

    def test_no_crews(self) -> None:
        """No labor entries cost nothing."""
        assert compute_labor_cost([]) == 0

    def test_partial_entry(self) -> None:
        """A half-filled labor row counts as zero."""
        entry = LaborEntry.from_dict({"label": "peeling", "workers": "4"})
        assert entry.cost == 0.0


class TestBatchCost:
    """Tests for the full batch cost build-up."""

    def test_total_cost(self, batch_input: BatchInput) -> None:
        """All cost lines add up to the batch total."""
        summary = compute_batch_cost(batch_input)

        assert summary.raw_material_cost == pytest.approx(5130.0)
        assert summary.labor_cost == pytest.approx(256.0)
        assert summary.packaging_cost == pytest.approx(69.21, abs=0.005)
        assert summary.transport_cost == 120.0
        assert summary.additional_costs == 35.5
        assert summary.total_cost == pytest.approx(
            5130.0 + 256.0 + summary.packaging_cost + 120.0 + 35.5
        )

    def test_cost_per_kg(self, batch_input: BatchInput) -> None:
        """Cost per kg is relative to finished weight."""
        summary = compute_batch_cost(batch_input)

        assert summary.cost_per_kg == pytest.approx(summary.total_cost / 891.16)

    def test_breakdown_shares(self, batch_input: BatchInput) -> None:
        """Breakdown percentages sum to 100."""
        summary = compute_batch_cost(batch_input)

        names = [name for name, _, _ in summary.breakdown]
        assert names[0] == "raw_material"
        assert sum(pct for _, _, pct in summary.breakdown) == pytest.approx(100.0)

    def test_breakdown_omits_zero_lines(self) -> None:
        """Cost lines without an amount are not listed."""
        batch = BatchInput(weight=100, purchase_price=2)
        summary = compute_batch_cost(batch)

        assert [name for name, _, _ in summary.breakdown] == ["raw_material"]

    def test_incomplete_form(self) -> None:
        """A form without finished weights still gives a partial result."""
        batch = BatchInput.from_dict({"weight": "900", "purchase_price": ""})
        summary = compute_batch_cost(batch)

        assert summary.raw_material_cost == 0.0
        assert summary.packaging.bags == 0
        assert summary.cost_per_kg == 0.0
        assert not math.isnan(summary.yield_result.yield_pct)

    def test_to_dict(self, batch_input: BatchInput) -> None:
        """Serialised summary carries nested yield and packaging."""
        data = compute_batch_cost(batch_input).to_dict()

        assert data["yield"]["final_weight"] == pytest.approx(891.16)
        assert data["packaging"]["bags"] == 179
        assert data["breakdown"][0]["category"] == "raw_material"
