"""
Ratio classification against industry benchmarks.

The relative deviation d = (value - benchmark) / benchmark is tiered with
symmetric thresholds (defaults: +20% / 0% / -20%). For ratios where lower
is better (debt-to-equity, days outstanding) the sign of d is inverted
first. The thresholds are business policy and live in Settings.

Trend cannot be read from a single snapshot; it is either supplied by the
caller or derived from two time-ordered values.
"""

from __future__ import annotations

from typing import Any

from seacost.config import Settings, get_settings
from seacost.logging import get_logger
from seacost.types import FinancialRatio, Interpretation, Trend, to_number

logger = get_logger(__name__)

# Deviations are compared after rounding so that e.g. 2.4 vs 2.0 lands on
# the +20% boundary despite float representation error.
DEVIATION_PRECISION = 9


class RatioBenchmarkEngine:
    """Classifies ratios into excellent / good / average / poor."""

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.excellent_threshold = settings.RATIO_EXCELLENT_THRESHOLD
        self.good_threshold = settings.RATIO_GOOD_THRESHOLD
        self.trend_tolerance = settings.TREND_TOLERANCE

    def deviation(self, value: Any, benchmark: Any, higher_is_better: bool = True) -> float:
        """Signed relative deviation from benchmark, positive meaning better.

        A zero benchmark gives a deviation of 0.
        """
        value = to_number(value)
        benchmark = to_number(benchmark)

        if benchmark == 0:
            logger.warning("Benchmark is zero, treating deviation as 0", value=value)
            return 0.0

        d = (value - benchmark) / abs(benchmark)
        if not higher_is_better:
            d = -d
        return round(d, DEVIATION_PRECISION)

    def classify(
        self,
        value: Any,
        benchmark: Any,
        higher_is_better: bool = True,
    ) -> Interpretation:
        """Tier a ratio value against its benchmark."""
        d = self.deviation(value, benchmark, higher_is_better)

        if d >= self.excellent_threshold:
            return Interpretation.EXCELLENT
        if d >= self.good_threshold:
            return Interpretation.GOOD
        if d >= -self.excellent_threshold:
            return Interpretation.AVERAGE
        return Interpretation.POOR

    def trend(
        self,
        previous: Any,
        current: Any,
        higher_is_better: bool = True,
    ) -> Trend:
        """Trend between two time-ordered values of the same ratio.

        A relative move within the configured tolerance is stable.
        """
        previous = to_number(previous)
        current = to_number(current)

        if previous == 0:
            change = current - previous
        else:
            change = (current - previous) / abs(previous)
        if not higher_is_better:
            change = -change

        if abs(change) <= self.trend_tolerance:
            return Trend.STABLE
        return Trend.IMPROVING if change > 0 else Trend.DECLINING

    def evaluate(
        self,
        name: str,
        value: Any,
        benchmark: Any,
        higher_is_better: bool = True,
        previous: Any = None,
        trend: Trend | str | None = None,
        category: str = "",
    ) -> FinancialRatio:
        """Build a classified FinancialRatio.

        An explicit ``trend`` wins; otherwise it is derived from
        ``previous``; with neither the trend is stable.
        """
        value = to_number(value)
        benchmark = to_number(benchmark)

        if trend is not None:
            resolved_trend = Trend(trend)
        elif previous is not None:
            resolved_trend = self.trend(previous, value, higher_is_better)
        else:
            resolved_trend = Trend.STABLE

        return FinancialRatio(
            name=name,
            value=value,
            benchmark=benchmark,
            interpretation=self.classify(value, benchmark, higher_is_better),
            trend=resolved_trend,
            category=category,
            higher_is_better=higher_is_better,
        )


def classify_ratio(value: Any, benchmark: Any, higher_is_better: bool = True) -> Interpretation:
    """Convenience wrapper using the configured thresholds.

    Example:
        >>> classify_ratio(2.34, 2.0, higher_is_better=True)
        <Interpretation.GOOD: 'good'>
    """
    return RatioBenchmarkEngine().classify(value, benchmark, higher_is_better)


def classify_trend(
    previous: Any,
    current: Any,
    higher_is_better: bool = True,
    tolerance: float | None = None,
) -> Trend:
    """Convenience wrapper; tolerance defaults to the configured value."""
    engine = RatioBenchmarkEngine()
    if tolerance is not None:
        engine.trend_tolerance = tolerance
    return engine.trend(previous, current, higher_is_better)


def evaluate_ratio(
    name: str,
    value: Any,
    benchmark: Any,
    higher_is_better: bool = True,
    previous: Any = None,
    trend: Trend | str | None = None,
) -> FinancialRatio:
    """Convenience wrapper around RatioBenchmarkEngine.evaluate."""
    return RatioBenchmarkEngine().evaluate(
        name, value, benchmark, higher_is_better, previous=previous, trend=trend
    )
