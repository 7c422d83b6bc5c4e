"""Deterministic valuation: DCF, scenario weighting and sensitivity."""

from seacost.valuation.dcf import (
    DCFEngine,
    DCFResult,
    NPVResult,
    build_projection,
    compute_dcf,
    npv_analysis,
)
from seacost.valuation.scenarios import (
    ScenarioSummary,
    ScenarioWeightingEngine,
    risk_index,
    weighted_aggregate,
)
from seacost.valuation.sensitivity import SensitivityAnalyzer, TornadoBar, perturb

__all__ = [
    "DCFEngine",
    "DCFResult",
    "NPVResult",
    "ScenarioSummary",
    "ScenarioWeightingEngine",
    "SensitivityAnalyzer",
    "TornadoBar",
    "build_projection",
    "compute_dcf",
    "npv_analysis",
    "perturb",
    "risk_index",
    "weighted_aggregate",
]
