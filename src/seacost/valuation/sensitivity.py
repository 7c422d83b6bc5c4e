"""
One-factor-at-a-time sensitivity analysis on a projection period.

A single parameter is scaled by (1 + delta/100) while every other input
stays fixed; the change in free cash flow or present value is reported
against the base case. Simultaneous multi-factor perturbations are not
supported.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from seacost.exceptions import ValidationError
from seacost.logging import get_logger
from seacost.types import CashFlowProjection, SensitivityPoint, to_number
from seacost.valuation.dcf import build_projection

logger = get_logger(__name__)

PARAMETERS = (
    "revenue",
    "operating_expenses",
    "capital_expenditure",
    "working_capital",
    "discount_rate",
)

PARAMETER_ALIASES = {
    "cost": "operating_expenses",
    "costs": "operating_expenses",
    "opex": "operating_expenses",
    "capex": "capital_expenditure",
    "rate": "discount_rate",
}

METRICS = ("free_cash_flow", "present_value")


@dataclass(frozen=True)
class TornadoBar:
    """Low/high swing of one parameter in a tornado chart."""

    parameter_name: str
    low_delta: float
    high_delta: float

    @property
    def swing(self) -> float:
        return abs(self.high_delta - self.low_delta)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict."""
        return {
            "parameter_name": self.parameter_name,
            "low_delta": self.low_delta,
            "high_delta": self.high_delta,
            "swing": self.swing,
        }


def _resolve_parameter(parameter_name: str) -> str:
    name = parameter_name.strip().lower()
    name = PARAMETER_ALIASES.get(name, name)
    if name not in PARAMETERS:
        raise ValidationError(
            f"Unknown sensitivity parameter: {parameter_name}",
            context={"field": parameter_name, "expected": list(PARAMETERS)},
        )
    return name


def _validate_metric(metric: str) -> None:
    if metric not in METRICS:
        raise ValidationError(
            f"Unknown sensitivity metric: {metric}",
            context={"field": metric, "expected": list(METRICS)},
        )


def _recompute(base_case: CashFlowProjection, overrides: dict[str, float]) -> CashFlowProjection:
    values = {
        "revenue": base_case.revenue,
        "operating_expenses": base_case.operating_expenses,
        "capital_expenditure": base_case.capital_expenditure,
        "working_capital": base_case.working_capital,
        "discount_rate": base_case.discount_rate,
    }
    values.update(overrides)
    return build_projection(period=max(base_case.period, 1), **values)


class SensitivityAnalyzer:
    """Perturbs one projection input at a time."""

    def perturb(
        self,
        base_case: CashFlowProjection,
        parameter_name: str,
        delta_pct: Any,
        metric: str = "free_cash_flow",
    ) -> SensitivityPoint:
        """Output change when one parameter moves by delta_pct percent.

        Args:
            base_case: The projection period to perturb.
            parameter_name: revenue, operating_expenses (or "cost"),
                capital_expenditure, working_capital or discount_rate.
            delta_pct: Relative change in percent (e.g. 10 for +10%).
            metric: free_cash_flow or present_value.

        Returns:
            SensitivityPoint with the delta against the base case.

        Raises:
            ValidationError: Unknown parameter or metric.
        """
        name = _resolve_parameter(parameter_name)
        _validate_metric(metric)
        delta_pct = to_number(delta_pct)

        base = _recompute(base_case, {})
        scaled = getattr(base, name) * (1 + delta_pct / 100)
        perturbed = _recompute(base_case, {name: scaled})

        base_value = getattr(base, metric)
        perturbed_value = getattr(perturbed, metric)

        logger.debug(
            "Sensitivity point computed",
            parameter=name,
            delta_pct=delta_pct,
            metric=metric,
        )

        return SensitivityPoint(
            parameter_name=name,
            perturbation_pct=delta_pct,
            output_delta=perturbed_value - base_value,
            metric=metric,
            base_value=base_value,
            perturbed_value=perturbed_value,
        )

    def tornado(
        self,
        base_case: CashFlowProjection,
        parameters: Sequence[str] | None = None,
        delta_pct: Any = 10.0,
        metric: str = "present_value",
    ) -> list[TornadoBar]:
        """Run +/- delta on each parameter and rank by swing.

        Args:
            base_case: The projection period to perturb.
            parameters: Parameters to include. Defaults to all.
            delta_pct: Magnitude of the perturbation in percent.
            metric: free_cash_flow or present_value.

        Returns:
            TornadoBar list sorted by swing, largest first.
        """
        delta_pct = abs(to_number(delta_pct))
        bars: list[TornadoBar] = []

        for parameter in parameters or PARAMETERS:
            low = self.perturb(base_case, parameter, -delta_pct, metric)
            high = self.perturb(base_case, parameter, delta_pct, metric)
            bars.append(
                TornadoBar(
                    parameter_name=low.parameter_name,
                    low_delta=low.output_delta,
                    high_delta=high.output_delta,
                )
            )

        return sorted(bars, key=lambda bar: bar.swing, reverse=True)


def perturb(
    base_case: CashFlowProjection,
    parameter_name: str,
    delta_pct: Any,
    metric: str = "free_cash_flow",
) -> SensitivityPoint:
    """Convenience wrapper around SensitivityAnalyzer.perturb."""
    return SensitivityAnalyzer().perturb(base_case, parameter_name, delta_pct, metric)
