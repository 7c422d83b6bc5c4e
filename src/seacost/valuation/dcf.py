"""
Deterministic DCF (Discounted Cash Flow) Engine.

Discounts projected free cash flows to present value and adds an
externally supplied terminal value. All arithmetic stays in full float
precision; rounding happens only at the display boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Sequence

from seacost.logging import get_logger
from seacost.types import CashFlowProjection, to_number

logger = get_logger(__name__)

IRR_INITIAL_GUESS = 0.10
IRR_MAX_ITERATIONS = 100
IRR_TOLERANCE = 1e-4


def discount_factor(discount_rate: float, period: int) -> float:
    """1 / (1 + rate/100)^period, with the rate given in percent.

    Period 0 is never discounted. A rate at or below -100% has no finite
    factor and an overflowing denominator discounts to nothing; both give 0.
    """
    if period == 0:
        return 1.0
    base = 1 + discount_rate / 100
    if base <= 0:
        return 0.0
    try:
        return 1 / (base ** period)
    except OverflowError:
        return 0.0


def build_projection(
    period: Any,
    revenue: Any,
    operating_expenses: Any,
    capital_expenditure: Any,
    working_capital: Any,
    discount_rate: Any,
) -> CashFlowProjection:
    """Build a projection row with derived free cash flow and present value.

    FCF = revenue - operating expenses - capital expenditure - working capital.
    """
    period = int(to_number(period))
    revenue = to_number(revenue)
    operating_expenses = to_number(operating_expenses)
    capital_expenditure = to_number(capital_expenditure)
    working_capital = to_number(working_capital)
    discount_rate = to_number(discount_rate)

    free_cash_flow = revenue - operating_expenses - capital_expenditure - working_capital
    present_value = free_cash_flow * discount_factor(discount_rate, period)

    return CashFlowProjection(
        period=period,
        revenue=revenue,
        operating_expenses=operating_expenses,
        capital_expenditure=capital_expenditure,
        working_capital=working_capital,
        discount_rate=discount_rate,
        free_cash_flow=free_cash_flow,
        present_value=present_value,
    )


def projection_from_dict(
    data: Mapping[str, Any],
    period: int,
    default_discount_rate: float = 0.0,
) -> CashFlowProjection:
    """Build a projection row from partial form data.

    A missing discount rate falls back to ``default_discount_rate``.
    """
    rate = data.get("discount_rate")
    return build_projection(
        period=data.get("period", period),
        revenue=data.get("revenue"),
        operating_expenses=data.get("operating_expenses"),
        capital_expenditure=data.get("capital_expenditure"),
        working_capital=data.get("working_capital"),
        discount_rate=default_discount_rate if rate is None else rate,
    )


@dataclass
class DCFResult:
    """Result of DCF calculation."""

    total_present_value: float
    terminal_value: float
    enterprise_value: float

    # Recomputed rows, in input order
    projections: list[CashFlowProjection] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict."""
        return {
            "total_present_value": self.total_present_value,
            "terminal_value": self.terminal_value,
            "enterprise_value": self.enterprise_value,
            "projections": [p.to_dict() for p in self.projections],
        }


@dataclass
class NPVResult:
    """Investment metrics for a net cash-flow series."""

    npv: float
    irr: float | None  # percent, None when Newton-Raphson fails
    payback_period: int | None
    discounted_payback: int | None
    profitability_index: float
    discount_rate: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict."""
        return {
            "npv": self.npv,
            "irr": self.irr,
            "payback_period": self.payback_period,
            "discounted_payback": self.discounted_payback,
            "profitability_index": self.profitability_index,
            "discount_rate": self.discount_rate,
        }


class DCFEngine:
    """Deterministic DCF valuation engine.

    Each period may carry its own discount rate. The period index used
    for discounting is the row's 1-based position in the projection list.
    """

    def calculate_dcf(
        self,
        projections: Sequence[CashFlowProjection],
        terminal_value: Any = 0.0,
    ) -> DCFResult:
        """Calculate enterprise value.

        Args:
            projections: Ordered projection rows (period 1..N).
            terminal_value: Value of cash flows beyond the horizon. Supplied
                by the caller, not derived.

        Returns:
            DCFResult with recomputed rows.
        """
        terminal_value = to_number(terminal_value)

        rows: list[CashFlowProjection] = []
        total_present_value = 0.0
        cumulative = 0.0

        for i, row in enumerate(projections, start=1):
            recomputed = build_projection(
                period=i,
                revenue=row.revenue,
                operating_expenses=row.operating_expenses,
                capital_expenditure=row.capital_expenditure,
                working_capital=row.working_capital,
                discount_rate=row.discount_rate,
            )
            cumulative += recomputed.free_cash_flow
            total_present_value += recomputed.present_value
            rows.append(
                replace(recomputed, period=row.period or i, cumulative_cash_flow=cumulative)
            )

        enterprise_value = total_present_value + terminal_value

        logger.debug(
            "DCF computed",
            periods=len(rows),
            total_present_value=total_present_value,
            enterprise_value=enterprise_value,
        )

        return DCFResult(
            total_present_value=total_present_value,
            terminal_value=terminal_value,
            enterprise_value=enterprise_value,
            projections=rows,
        )

    def npv_analysis(
        self,
        cash_flows: Sequence[Any],
        discount_rate: Any,
    ) -> NPVResult:
        """NPV, IRR, payback and profitability index of a net cash-flow series.

        Args:
            cash_flows: Net flow per period; index 0 is the initial flow
                (usually the negative investment) and is not discounted.
            discount_rate: Discount rate in percent.

        Returns:
            NPVResult.
        """
        flows = [to_number(cf) for cf in cash_flows]
        rate = to_number(discount_rate)

        present_values = [cf * discount_factor(rate, t) for t, cf in enumerate(flows)]
        npv = sum(present_values)

        payback_period = self._payback(flows)
        discounted_payback = self._payback(present_values)

        initial = flows[0] if flows else 0.0
        if initial < 0:
            profitability_index = sum(present_values[1:]) / abs(initial)
        else:
            profitability_index = 0.0

        return NPVResult(
            npv=npv,
            irr=self.calculate_irr(flows),
            payback_period=payback_period,
            discounted_payback=discounted_payback,
            profitability_index=profitability_index,
            discount_rate=rate,
        )

    def calculate_irr(self, cash_flows: Sequence[float]) -> float | None:
        """Internal rate of return (percent) by Newton-Raphson.

        Returns None when the derivative vanishes, the rate leaves the
        domain (<= -100%) or the iteration does not converge.
        """
        if not cash_flows:
            return None

        rate = IRR_INITIAL_GUESS
        for _ in range(IRR_MAX_ITERATIONS):
            npv = 0.0
            dnpv = 0.0
            try:
                for t, cf in enumerate(cash_flows):
                    factor = (1 + rate) ** t
                    npv += cf / factor
                    dnpv -= t * cf / (factor * (1 + rate))
            except (OverflowError, ZeroDivisionError):
                # Diverging iterate, e.g. flows with no sign change
                logger.debug("IRR iteration diverged", rate=rate)
                return None

            if abs(npv) < IRR_TOLERANCE:
                return rate * 100
            if dnpv == 0:
                return None

            rate -= npv / dnpv
            if rate <= -1:
                return None

        logger.debug("IRR did not converge", iterations=IRR_MAX_ITERATIONS)
        return None

    @staticmethod
    def _payback(flows: Sequence[float]) -> int | None:
        """First period >= 1 where the running total turns non-negative."""
        cumulative = 0.0
        for t, cf in enumerate(flows):
            cumulative += cf
            if t >= 1 and cumulative >= 0:
                return t
        return None


def compute_dcf(
    projections: Sequence[CashFlowProjection],
    terminal_value: Any = 0.0,
) -> DCFResult:
    """Convenience wrapper around DCFEngine.calculate_dcf."""
    return DCFEngine().calculate_dcf(projections, terminal_value)


def npv_analysis(cash_flows: Sequence[Any], discount_rate: Any) -> NPVResult:
    """Convenience wrapper around DCFEngine.npv_analysis."""
    return DCFEngine().npv_analysis(cash_flows, discount_rate)
