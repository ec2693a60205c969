"""Shared pytest fixtures for the risk engine tests."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, Generator

import numpy as np
import pytest

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from fleet_risk.core.config import get_config
from fleet_risk.schemas import ProjectData, ToolRecommendation


def make_tool(
    name: str = "Rotary Hammer TE 30",
    *,
    category: str = "drilling",
    monthly_cost: float = 200.0,
    probability: float = 0.25,
    repair_days: float = 3,
    critical: bool = True,
    quantity: int = 1,
) -> ToolRecommendation:
    """Build a tool recommendation with an explicit risk profile."""

    return ToolRecommendation(
        name=name,
        category=category,
        quantity=quantity,
        monthly_cost=monthly_cost,
        total_cost=monthly_cost * 12,
        risk_factors={
            "repair_event_probability": probability,
            "expected_repair_days": repair_days,
            "critical_path_impact": critical,
        },
    )


@pytest.fixture(autouse=True)
def _clear_config_cache(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Ensure engine settings are reloaded for each test."""

    for key in (
        "FLEET_RISK_ITERATIONS",
        "FLEET_RISK_CONFIDENCE_LEVEL",
        "FLEET_RISK_RANDOM_SEED",
        "FLEET_RISK_RENTAL_MARKUP",
        "FLEET_RISK_AMORTIZATION_MONTHS",
    ):
        monkeypatch.delenv(key, raising=False)
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture()
def high_complexity_project() -> ProjectData:
    return ProjectData(
        project_name="Harbour Tower",
        project_complexity="high",
        timeline=18,
        budget=2_000_000,
        labor_count=40,
    )


@pytest.fixture()
def small_project() -> ProjectData:
    return ProjectData(
        project_name="Kitchen Refit",
        project_complexity="low",
        timeline=3,
        budget=50_000,
        labor_count=4,
    )


@pytest.fixture()
def tool_factory():
    return make_tool


@pytest.fixture()
def drilling_tool() -> ToolRecommendation:
    return make_tool()


@pytest.fixture()
def mixed_fleet() -> list[ToolRecommendation]:
    return [
        make_tool("Rotary Hammer TE 30", category="drilling", monthly_cost=200, probability=0.2, repair_days=4),
        make_tool("Wall Saw DST 20", category="cutting", monthly_cost=900, probability=0.26, repair_days=6),
        make_tool("Laser Level PR 30", category="measuring", monthly_cost=80, probability=0.13,
                  repair_days=3, critical=False),
        make_tool("Nailer GX 120", category="fastening", monthly_cost=60, probability=0.16,
                  repair_days=4, critical=False),
    ]


@pytest.fixture()
def rng() -> np.random.Generator:
    return np.random.default_rng(20240601)


@pytest.fixture()
def raw_project_payload() -> Dict[str, Any]:
    """Project payload as the quoting application sends it."""

    return {
        "projectName": "Depot Extension",
        "projectType": "industrial",
        "location": "Leeds",
        "laborCount": 12,
        "timeline": 8,
        "budget": 750000,
        "existingTools": ["ladder"],
        "projectComplexity": "medium",
    }
