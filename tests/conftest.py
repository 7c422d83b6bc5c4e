"""
Pytest configuration and fixtures for costing engine tests.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Generator
from unittest.mock import patch

import pytest

from seacost.config import Settings, clear_settings_cache
from seacost.types import BatchInput, CashFlowProjection, RiskLevel, ScenarioOutcome
from seacost.valuation.dcf import build_projection


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Ensure no test sees settings cached by another."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test outputs."""
    return tmp_path


@pytest.fixture
def mock_env_vars() -> Generator[dict[str, str], None, None]:
    """Provide a known configuration through environment variables."""
    env_vars = {
        "PACKAGING_BAG_WEIGHT": "5.0",
        "PACKAGING_GELATIN_COST_PER_KG": "3.15",
        "PACKAGING_BAGS_PER_KG_GELATIN": "35",
        "PACKAGING_BOX_COST_PER_UNIT": "0.59",
        "PACKAGING_BAGS_PER_BOX": "2",
        "RATIO_EXCELLENT_THRESHOLD": "0.2",
        "RATIO_GOOD_THRESHOLD": "0.0",
        "SCENARIO_PROBABILITY_TOLERANCE": "0.01",
        "OUTPUT_DIR": "test_output",
        "LOG_LEVEL": "DEBUG",
    }

    with patch.dict(os.environ, env_vars, clear=False):
        clear_settings_cache()
        yield env_vars


@pytest.fixture
def mock_settings(mock_env_vars: dict[str, str], temp_dir: Path) -> Generator[Settings, None, None]:
    """Provide a Settings instance writing into temp_dir."""
    with patch.dict(os.environ, {"OUTPUT_DIR": str(temp_dir / "output")}):
        clear_settings_cache()
        from seacost.config import get_settings

        settings = get_settings()
        settings.ensure_directories()
        yield settings
        clear_settings_cache()


@pytest.fixture
def batch_form() -> dict[str, Any]:
    """A completed batch form for a shrimp lot."""
    return {
        "product_name": "Vannamei shrimp",
        "batch_number": "LOT-2024-017",
        "weight": 900,
        "purchase_price": 5.70,
        "final_clean_weight": 430,
        "final_grill_weight": 461.16,
        "packaging": {
            "bag_weight": 5,
            "gelatin_cost_per_kg": 3.15,
            "bags_per_kg_gelatin": 35,
            "box_cost_per_unit": 0.59,
            "bags_per_box": 2,
        },
        "labor": [
            {"label": "cleaning", "workers": 6, "hours": 8, "hourly_rate": 4.5},
            {"label": "glazing", "workers": 2, "hours": 4, "hourly_rate": 5.0},
        ],
        "transport_cost": 120,
        "additional_costs": 35.5,
        "pricing": {
            "profit_margin": 25,
            "vat_percent": 13,
            "competitor1": 8.0,
            "competitor2": 0,
        },
    }


@pytest.fixture
def batch_input(batch_form: dict[str, Any]) -> BatchInput:
    """BatchInput built from the completed form."""
    return BatchInput.from_dict(batch_form)


@pytest.fixture
def base_projection() -> CashFlowProjection:
    """Single-year projection with an 8.5% discount rate."""
    return build_projection(
        period=1,
        revenue=2450000,
        operating_expenses=1840000,
        capital_expenditure=180000,
        working_capital=45000,
        discount_rate=8.5,
    )


@pytest.fixture
def three_scenarios() -> list[ScenarioOutcome]:
    """Optimistic / base / pessimistic set summing to 100%."""
    return [
        ScenarioOutcome(
            label="optimistic", probability=25, revenue=2800000, costs=2100000,
            net_income=700000, roi=28.0, risk_level=RiskLevel.LOW,
        ),
        ScenarioOutcome(
            label="base", probability=50, revenue=2450000, costs=1950000,
            net_income=500000, roi=20.0, risk_level=RiskLevel.MEDIUM,
        ),
        ScenarioOutcome(
            label="pessimistic", probability=25, revenue=2100000, costs=1850000,
            net_income=250000, roi=10.0, risk_level=RiskLevel.HIGH,
        ),
    ]
