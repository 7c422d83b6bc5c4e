"""Financial ratio computation and benchmark classification."""

from seacost.ratios.benchmark import (
    RatioBenchmarkEngine,
    classify_ratio,
    classify_trend,
    evaluate_ratio,
)
from seacost.ratios.statements import (
    SEAFOOD_BENCHMARKS,
    FinancialStatement,
    benchmark_statement,
    compute_financial_ratios,
)

__all__ = [
    "SEAFOOD_BENCHMARKS",
    "FinancialStatement",
    "RatioBenchmarkEngine",
    "benchmark_statement",
    "classify_ratio",
    "classify_trend",
    "compute_financial_ratios",
    "evaluate_ratio",
]
