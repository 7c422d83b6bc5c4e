"""
Financial ratios from a statement snapshot, benchmarked for seafood processors.

Seafood processing carries perishable inventory and short receivable
cycles, so turnover benchmarks are higher than for general manufacturing.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping

from seacost.ratios.benchmark import RatioBenchmarkEngine
from seacost.types import FinancialRatio, to_number

DAYS_PER_YEAR = 365


# Format: {ratio_name: {category, benchmark, higher_is_better}}
# Benchmarks are the "good" level for a mid-sized seafood processor.
SEAFOOD_BENCHMARKS: dict[str, dict[str, Any]] = {
    # ==================== Liquidity ====================
    "current_ratio": {"category": "liquidity", "benchmark": 2.0, "higher_is_better": True},
    "quick_ratio": {"category": "liquidity", "benchmark": 1.2, "higher_is_better": True},
    "cash_ratio": {"category": "liquidity", "benchmark": 0.3, "higher_is_better": True},

    # ==================== Leverage ====================
    "debt_to_equity": {"category": "leverage", "benchmark": 0.5, "higher_is_better": False},
    "debt_to_assets": {"category": "leverage", "benchmark": 0.5, "higher_is_better": False},
    "equity_ratio": {"category": "leverage", "benchmark": 0.5, "higher_is_better": True},
    "interest_coverage": {"category": "leverage", "benchmark": 5.0, "higher_is_better": True},

    # ==================== Activity ====================
    "inventory_turnover": {"category": "activity", "benchmark": 6.0, "higher_is_better": True},
    "receivables_turnover": {"category": "activity", "benchmark": 10.0, "higher_is_better": True},
    "asset_turnover": {"category": "activity", "benchmark": 1.5, "higher_is_better": True},
    "days_sales_outstanding": {"category": "activity", "benchmark": 36.5, "higher_is_better": False},
    "days_inventory_outstanding": {"category": "activity", "benchmark": 60.0, "higher_is_better": False},

    # ==================== Profitability (percent) ====================
    "gross_margin": {"category": "profitability", "benchmark": 35.0, "higher_is_better": True},
    "operating_margin": {"category": "profitability", "benchmark": 12.0, "higher_is_better": True},
    "net_margin": {"category": "profitability", "benchmark": 10.0, "higher_is_better": True},
    "roa": {"category": "profitability", "benchmark": 12.0, "higher_is_better": True},
    "roe": {"category": "profitability", "benchmark": 15.0, "higher_is_better": True},
    "ebitda_margin": {"category": "profitability", "benchmark": 15.0, "higher_is_better": True},
}


@dataclass(frozen=True)
class FinancialStatement:
    """Balance sheet and income statement figures for one period."""

    current_assets: float = 0.0
    current_liabilities: float = 0.0
    inventory: float = 0.0
    accounts_receivable: float = 0.0
    cash: float = 0.0
    total_assets: float = 0.0
    total_liabilities: float = 0.0
    total_equity: float = 0.0
    revenue: float = 0.0
    cost_of_goods_sold: float = 0.0
    operating_expenses: float = 0.0
    net_income: float = 0.0
    interest_expense: float = 0.0
    ebit: float = 0.0
    ebitda: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FinancialStatement:
        """Build from a partial mapping; missing figures are 0."""
        return cls(**{f.name: to_number(data.get(f.name)) for f in fields(cls)})


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def compute_financial_ratios(statement: FinancialStatement) -> dict[str, float]:
    """Liquidity, leverage, activity and profitability ratios.

    Margins and returns are in percent. Any ratio whose denominator is
    zero is 0.
    """
    s = statement
    inventory_turnover = _ratio(s.cost_of_goods_sold, s.inventory)
    receivables_turnover = _ratio(s.revenue, s.accounts_receivable)

    return {
        # Liquidity
        "current_ratio": _ratio(s.current_assets, s.current_liabilities),
        "quick_ratio": _ratio(s.current_assets - s.inventory, s.current_liabilities),
        "cash_ratio": _ratio(s.cash, s.current_liabilities),
        "working_capital": s.current_assets - s.current_liabilities,
        # Leverage
        "debt_to_equity": _ratio(s.total_liabilities, s.total_equity),
        "debt_to_assets": _ratio(s.total_liabilities, s.total_assets),
        "equity_ratio": _ratio(s.total_equity, s.total_assets),
        "interest_coverage": _ratio(s.ebit, s.interest_expense),
        # Activity
        "inventory_turnover": inventory_turnover,
        "receivables_turnover": receivables_turnover,
        "asset_turnover": _ratio(s.revenue, s.total_assets),
        "days_sales_outstanding": _ratio(DAYS_PER_YEAR, receivables_turnover),
        "days_inventory_outstanding": _ratio(DAYS_PER_YEAR, inventory_turnover),
        # Profitability
        "gross_margin": _ratio(s.revenue - s.cost_of_goods_sold, s.revenue) * 100,
        "operating_margin": _ratio(
            s.revenue - s.cost_of_goods_sold - s.operating_expenses, s.revenue
        ) * 100,
        "net_margin": _ratio(s.net_income, s.revenue) * 100,
        "roa": _ratio(s.net_income, s.total_assets) * 100,
        "roe": _ratio(s.net_income, s.total_equity) * 100,
        "ebitda_margin": _ratio(s.ebitda, s.revenue) * 100,
    }


def benchmark_statement(
    statement: FinancialStatement,
    previous: FinancialStatement | None = None,
    benchmarks: Mapping[str, Mapping[str, Any]] | None = None,
    engine: RatioBenchmarkEngine | None = None,
) -> list[FinancialRatio]:
    """Classify every benchmarked ratio of a statement.

    Args:
        statement: Current period figures.
        previous: Prior period figures; when given, trends are derived.
        benchmarks: Benchmark table. Defaults to SEAFOOD_BENCHMARKS.
        engine: Classification engine. Defaults to configured thresholds.

    Returns:
        FinancialRatio list in benchmark-table order.
    """
    benchmarks = benchmarks if benchmarks is not None else SEAFOOD_BENCHMARKS
    engine = engine or RatioBenchmarkEngine()

    current_values = compute_financial_ratios(statement)
    previous_values = compute_financial_ratios(previous) if previous is not None else {}

    ratios: list[FinancialRatio] = []
    for name, spec in benchmarks.items():
        if name not in current_values:
            continue
        ratios.append(
            engine.evaluate(
                name=name,
                value=current_values[name],
                benchmark=spec["benchmark"],
                higher_is_better=spec.get("higher_is_better", True),
                previous=previous_values.get(name),
                category=spec.get("category", ""),
            )
        )
    return ratios
