#!/usr/bin/env python3
"""
Service outcome model for fleet tools
Holds the categorical repair-outcome distribution, the per-category base risk
table, the service-feature enhancement applied to catalog recommendations,
a closed-form reliability estimate used alongside the Monte Carlo run, and
the short-term rental (Tools-on-Demand) comparison.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from fleet_risk.core.logging import get_logger
from fleet_risk.schemas import (
    ProjectComplexity,
    ServiceFeatures,
    ToolRecommendation,
    ToolRiskFactors,
)

logger = get_logger(__name__)

_PROBABILITY_TOLERANCE = 1e-9


class ServiceOutcome(Enum):
    NORMAL_SERVICE = "normal_service"
    MINOR_DELAY = "minor_delay"
    CRITICAL_FAILURE = "critical_failure"


@dataclass(frozen=True)
class OutcomeSpec:
    """One row of the outcome distribution"""
    outcome: ServiceOutcome
    probability: float
    duration_multiplier: float
    description: str


class ServiceOutcomeDistribution:
    """
    Fixed categorical distribution describing how a single service event resolves.
    Rows are sampled in declaration order against cumulative cut points.
    """

    def __init__(self, rows: Sequence[OutcomeSpec]):
        if not rows:
            raise ValueError("outcome distribution needs at least one row")

        total = 0.0
        for row in rows:
            if not 0.0 <= row.probability <= 1.0:
                raise ValueError(f"probability for {row.outcome.value} outside [0, 1]: {row.probability}")
            if row.duration_multiplier < 0:
                raise ValueError(f"negative duration multiplier for {row.outcome.value}")
            total += row.probability

        if abs(total - 1.0) > _PROBABILITY_TOLERANCE:
            raise ValueError(f"outcome probabilities must sum to 1.0, got {total}")

        self.rows: Tuple[OutcomeSpec, ...] = tuple(rows)
        self._by_outcome = {row.outcome: row for row in self.rows}

        # Rounded so 0.7 + 0.2 lands on 0.9 exactly
        cut_points = []
        running = 0.0
        for row in self.rows:
            running = round(running + row.probability, 12)
            cut_points.append(running)
        self._cut_points = tuple(cut_points)

    def __getitem__(self, outcome: ServiceOutcome) -> OutcomeSpec:
        return self._by_outcome[outcome]

    def probability(self, outcome: ServiceOutcome) -> float:
        return self._by_outcome[outcome].probability

    def multiplier(self, outcome: ServiceOutcome) -> float:
        return self._by_outcome[outcome].duration_multiplier

    def disruption_probability(self) -> float:
        """Probability that a service event resolves worse than normal"""
        return round(sum(row.probability for row in self.rows
                         if row.outcome is not ServiceOutcome.NORMAL_SERVICE), 12)

    def resolve(self, r: float) -> OutcomeSpec:
        """Map a uniform draw in [0, 1) onto an outcome row."""
        for row, cut in zip(self.rows, self._cut_points):
            if r < cut:
                return row
        return self.rows[-1]

    def sample(self, rng: np.random.Generator) -> OutcomeSpec:
        return self.resolve(rng.random())


SERVICE_OUTCOMES = ServiceOutcomeDistribution([
    OutcomeSpec(ServiceOutcome.NORMAL_SERVICE, 0.70, 1.0, "Service within SLA"),
    OutcomeSpec(ServiceOutcome.MINOR_DELAY, 0.20, 2.5, "Minor delays (6-14 days)"),
    OutcomeSpec(ServiceOutcome.CRITICAL_FAILURE, 0.10, 8.0, "Major service failures (>14 days)"),
])


@dataclass(frozen=True)
class CategoryRisk:
    """Base service risk for a tool category before complexity adjustment"""
    probability: float
    repair_days: float
    critical_path: bool


CATEGORY_RISK_TABLE: Dict[str, CategoryRisk] = {
    'drilling': CategoryRisk(probability=0.15, repair_days=3, critical_path=True),
    'cutting': CategoryRisk(probability=0.20, repair_days=4, critical_path=True),
    'measuring': CategoryRisk(probability=0.10, repair_days=2, critical_path=False),
    'fastening': CategoryRisk(probability=0.12, repair_days=3, critical_path=False),
    'safety': CategoryRisk(probability=0.08, repair_days=2, critical_path=False),
    'demolition': CategoryRisk(probability=0.18, repair_days=5, critical_path=True),
}

# Unknown catalog categories are treated like drilling equipment
DEFAULT_CATEGORY_RISK = CategoryRisk(probability=0.15, repair_days=3, critical_path=True)

COMPLEXITY_MULTIPLIERS: Dict[ProjectComplexity, float] = {
    ProjectComplexity.LOW: 1.0,
    ProjectComplexity.MEDIUM: 1.1,
    ProjectComplexity.HIGH: 1.3,
}

ON_SITE_MAINTENANCE_CATEGORIES = frozenset({'measuring', 'layout'})
TOD_INELIGIBLE_CATEGORIES = frozenset({'safety', 'measuring'})


def lookup_category_risk(category: str) -> CategoryRisk:
    """Resolve a category to its base risk row, falling back to the default row."""
    key = (category or "").strip().lower()
    risk = CATEGORY_RISK_TABLE.get(key)
    if risk is None:
        logger.debug("category_risk_default", category=category)
        return DEFAULT_CATEGORY_RISK
    return risk


def derive_tool_risk(category: str,
                     complexity: Union[ProjectComplexity, str]) -> ToolRiskFactors:
    """Complexity-adjusted risk profile for a tool category"""
    risk = lookup_category_risk(category)
    multiplier = COMPLEXITY_MULTIPLIERS[ProjectComplexity(complexity)]

    return ToolRiskFactors(
        repair_event_probability=min(1.0, risk.probability * multiplier),
        expected_repair_days=math.ceil(risk.repair_days * multiplier),
        critical_path_impact=risk.critical_path,
    )


def enhance_tool(tool: Mapping[str, Any],
                 complexity: Union[ProjectComplexity, str]) -> ToolRecommendation:
    """
    Attach fleet service features and a category-derived risk profile to a
    plain catalog recommendation.
    """
    category = str(tool.get('category', 'general'))
    key = category.lower()

    payload = dict(tool)
    payload['category'] = category
    payload['riskFactors'] = derive_tool_risk(category, complexity)
    payload['serviceFeatures'] = ServiceFeatures(
        repair_coverage=True,
        theft_coverage=80,
        loaner_tools=True,
        on_site_maintenance=key in ON_SITE_MAINTENANCE_CATEGORIES,
        training_included=True,
    )
    # Safety and precision tools are poor fits for short-term rental
    payload['todEligible'] = key not in TOD_INELIGIBLE_CATEGORIES
    payload.pop('risk_factors', None)
    payload.pop('service_features', None)
    payload.pop('tod_eligible', None)

    return ToolRecommendation.model_validate(payload)


@dataclass
class ServiceScenario:
    """Closed-form outcome for one tool under one service outcome"""
    tool_name: str
    outcome: ServiceOutcome
    probability: float
    downtime_days: float
    cost: float
    description: str


@dataclass
class ServiceReliabilityEstimate:
    scenarios: List[ServiceScenario]
    average_downtime: float
    worst_case_downtime: float
    reliability_score: float


def estimate_service_reliability(tools: Sequence[ToolRecommendation],
                                 distribution: ServiceOutcomeDistribution = SERVICE_OUTCOMES
                                 ) -> ServiceReliabilityEstimate:
    """
    Expected downtime per tool across every service outcome, without sampling.

    Normal and delayed repairs are covered by the fleet contract; only a
    critical failure is charged, at the monthly rate for each started month
    of downtime. The reliability score loses 10 points per month of average
    downtime, floored at zero.
    """
    scenarios: List[ServiceScenario] = []
    total_weighted_downtime = 0.0
    worst_case = 0.0

    for tool in tools:
        base_days = tool.risk_factors.expected_repair_days

        for row in distribution.rows:
            downtime = base_days * row.duration_multiplier
            if row.outcome is ServiceOutcome.CRITICAL_FAILURE:
                cost = tool.monthly_cost * math.ceil(downtime / 30)
                worst_case = max(worst_case, downtime)
            else:
                cost = 0.0

            scenarios.append(ServiceScenario(
                tool_name=tool.name,
                outcome=row.outcome,
                probability=row.probability,
                downtime_days=downtime,
                cost=cost,
                description=f"{tool.name}: {row.description}",
            ))
            total_weighted_downtime += downtime * row.probability

    average_downtime = total_weighted_downtime / len(tools) if tools else 0.0
    reliability_score = max(0.0, 100 - (average_downtime / 30) * 10)

    return ServiceReliabilityEstimate(
        scenarios=scenarios,
        average_downtime=average_downtime,
        worst_case_downtime=worst_case,
        reliability_score=reliability_score,
    )


TOD_PREMIUM_MULTIPLIER = 1.25
TOD_MIN_SAVINGS_SHARE = 0.2
TOD_BACKUP_MAX_MONTHS = 3


class ToolsOnDemandScenario(Enum):
    PEAK_SEASON = "peak_season"
    SPECIALTY_PROJECT = "specialty_project"
    BACKUP_EQUIPMENT = "backup_equipment"


@dataclass
class ToolsOnDemandRecommendation:
    """Short-term rental suggested in place of a full-term fleet contract"""
    tool_name: str
    scenario: ToolsOnDemandScenario
    duration_months: float
    tod_monthly_cost: float
    fleet_monthly_cost: float
    savings: float
    justification: str


def evaluate_tools_on_demand(tool: ToolRecommendation,
                             project_months: float,
                             peak_season_months: float = 0,
                             specialty_work_months: float = 0
                             ) -> Optional[ToolsOnDemandRecommendation]:
    """
    Compare short-term rental of a tool against keeping it on the fleet
    contract for the whole project.

    Short-term rental carries a 25% monthly premium. A peak season shorter
    than 60% of the project, or specialty work shorter than 40% of it, sets
    the rental duration; otherwise the tool is rented as backup for at most
    three months. Returns None unless the tool is eligible and the rental
    saves more than 20% of the fleet cost.
    """
    if not tool.tod_eligible:
        return None

    tod_monthly_cost = tool.monthly_cost * TOD_PREMIUM_MULTIPLIER

    if 0 < peak_season_months < project_months * 0.6:
        scenario = ToolsOnDemandScenario.PEAK_SEASON
        duration = peak_season_months
        justification = (f"Use short-term rental for the {peak_season_months}-month peak season "
                         f"instead of the full {project_months}-month fleet contract")
    elif 0 < specialty_work_months < project_months * 0.4:
        scenario = ToolsOnDemandScenario.SPECIALTY_PROJECT
        duration = specialty_work_months
        justification = f"Specialized tool only needed for {specialty_work_months} months of specialty work"
    else:
        scenario = ToolsOnDemandScenario.BACKUP_EQUIPMENT
        duration = min(TOD_BACKUP_MAX_MONTHS, project_months)
        justification = "Keep as backup equipment for critical path protection"

    fleet_total = tool.monthly_cost * project_months
    savings = fleet_total - tod_monthly_cost * duration

    if savings <= fleet_total * TOD_MIN_SAVINGS_SHARE:
        logger.debug("tools_on_demand_rejected", tool=tool.name, scenario=scenario.value, savings=savings)
        return None

    return ToolsOnDemandRecommendation(
        tool_name=tool.name,
        scenario=scenario,
        duration_months=duration,
        tod_monthly_cost=tod_monthly_cost,
        fleet_monthly_cost=tool.monthly_cost,
        savings=savings,
        justification=justification,
    )
