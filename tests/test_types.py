"""Tests for core types and coercion helpers."""

from __future__ import annotations

import pytest

from seacost.exceptions import InvalidScenarioSet, SeaCostError
from seacost.types import (
    BatchInput,
    FinancialRatio,
    Interpretation,
    RiskLevel,
    Trend,
    generate_id,
    non_negative,
    round_display,
    to_number,
)


class TestToNumber:
    """Tests for numeric coercion of form input."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (5, 5.0),
            (5.7, 5.7),
            ("5.7", 5.7),
            ("5,7", 5.7),
            (" 12 ", 12.0),
            (None, 0.0),
            ("", 0.0),
            ("abc", 0.0),
            (True, 0.0),
            (float("nan"), 0.0),
            (float("inf"), 0.0),
            ([1], 0.0),
        ],
    )
    def test_coercion(self, value: object, expected: float) -> None:
        """Anything unusable becomes the default."""
        assert to_number(value) == expected

    def test_custom_default(self) -> None:
        """The fallback can be chosen."""
        assert to_number(None, default=-1.0) == -1.0

    def test_non_negative(self) -> None:
        """Negative values are clamped to zero."""
        assert non_negative(-3) == 0.0
        assert non_negative("4") == 4.0

    def test_round_display(self) -> None:
        """Display rounding defaults to two places."""
        assert round_display(354838.70967) == 354838.71
        assert round_display(0.98222, 1) == 1.0


class TestBatchInput:
    """Tests for batch form parsing."""

    def test_from_nested_form(self, batch_input: BatchInput) -> None:
        """Nested packaging and labor rows are parsed."""
        assert batch_input.weight == 900.0
        assert batch_input.packaging.bag_weight == 5.0
        assert len(batch_input.labor) == 2
        assert batch_input.batch_number == "LOT-2024-017"

    def test_flat_packaging_fields(self) -> None:
        """Packaging fields may sit at the top level of the form."""
        batch = BatchInput.from_dict({"weight": 100, "bag_weight": "2,5", "bags_per_box": 4})

        assert batch.packaging.bag_weight == 2.5
        assert batch.packaging.bags_per_box == 4.0

    def test_empty_form(self) -> None:
        """An empty form gives a zeroed batch."""
        batch = BatchInput.from_dict({})

        assert batch.weight == 0.0
        assert batch.labor == ()
        assert batch.product_name == ""

    def test_negative_values_clamped(self) -> None:
        """Negative weights and prices are treated as 0."""
        batch = BatchInput.from_dict({"weight": -100, "purchase_price": -2})

        assert batch.weight == 0.0
        assert batch.purchase_price == 0.0


class TestEnums:
    """Tests for enum parsing and serialisation."""

    def test_risk_level_parse(self) -> None:
        """Risk levels are case-insensitive with a medium fallback."""
        assert RiskLevel.parse("High") == RiskLevel.HIGH
        assert RiskLevel.parse(RiskLevel.LOW) == RiskLevel.LOW
        assert RiskLevel.parse(None) == RiskLevel.MEDIUM

    def test_ratio_to_dict_uses_values(self) -> None:
        """Enums serialise as plain strings."""
        ratio = FinancialRatio("current_ratio", 2.4, 2.0, Interpretation.EXCELLENT, Trend.STABLE)
        data = ratio.to_dict()

        assert data["interpretation"] == "excellent"
        assert data["trend"] == "stable"


class TestHelpers:
    """Tests for ID generation and exceptions."""

    def test_generate_id_prefix(self) -> None:
        """IDs carry the prefix and are unique."""
        first = generate_id("rpt")
        second = generate_id("rpt")

        assert first.startswith("rpt_")
        assert first != second

    def test_exception_context_in_str(self) -> None:
        """Context is rendered after the message."""
        error = InvalidScenarioSet("bad set", context={"total": 90.0})

        assert isinstance(error, SeaCostError)
        assert str(error) == "bad set (total=90.0)"
        assert str(SeaCostError("plain")) == "plain"
