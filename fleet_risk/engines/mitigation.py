"""
Mitigation & contingency planning for identified fleet risks
"""

from typing import List

from fleet_risk.engines.models import ContingencyPlan, MitigationStrategy, RiskCategory, RiskFactor
from fleet_risk.engines.service_model import SERVICE_OUTCOMES, ServiceOutcome
from fleet_risk.schemas import ProjectComplexity, ProjectData


def _equipment_strategies(factor: RiskFactor) -> List[MitigationStrategy]:
    return [MitigationStrategy(
        risk_category=RiskCategory.EQUIPMENT,
        strategy="Implement redundant backup equipment for critical tools",
        cost=factor.cost_impact * 0.3,
        effectiveness=0.7,
        implementation_time=2,
    )]


def _service_strategies(factor: RiskFactor) -> List[MitigationStrategy]:
    return [
        MitigationStrategy(
            risk_category=RiskCategory.SERVICE,
            strategy="Establish direct communication channel with service center",
            cost=2000,
            effectiveness=0.4,
            implementation_time=1,
        ),
        MitigationStrategy(
            risk_category=RiskCategory.SERVICE,
            strategy="Pre-order loaner tools for critical equipment",
            cost=factor.cost_impact * 0.2,
            effectiveness=0.6,
            implementation_time=3,
        ),
    ]


def _timeline_strategies(factor: RiskFactor) -> List[MitigationStrategy]:
    return [MitigationStrategy(
        risk_category=RiskCategory.TIMELINE,
        strategy="Build 15% timeline buffer into project schedule",
        cost=0,
        effectiveness=0.5,
        implementation_time=0,
    )]


def _financial_strategies(factor: RiskFactor) -> List[MitigationStrategy]:
    return [MitigationStrategy(
        risk_category=RiskCategory.FINANCIAL,
        strategy="Fleet management contract reduces capital exposure",
        cost=0,
        effectiveness=0.9,
        implementation_time=0,
    )]


# Operational factors have no standard mitigation
STRATEGY_BUILDERS = {
    RiskCategory.EQUIPMENT: _equipment_strategies,
    RiskCategory.SERVICE: _service_strategies,
    RiskCategory.TIMELINE: _timeline_strategies,
    RiskCategory.FINANCIAL: _financial_strategies,
}


def generate_mitigation_strategies(risk_factors: List[RiskFactor]) -> List[MitigationStrategy]:
    """Mitigation strategies keyed on each factor's category, in factor order"""
    strategies: List[MitigationStrategy] = []

    for factor in risk_factors:
        builder = STRATEGY_BUILDERS.get(factor.category)
        if builder is not None:
            strategies.extend(builder(factor))

    return strategies


def create_contingency_plans(project: ProjectData) -> List[ContingencyPlan]:
    """Standing contingency plans, extended for high-complexity projects"""
    plans = [
        ContingencyPlan(
            scenario="Critical service failure (>14 days repair time)",
            probability=SERVICE_OUTCOMES.probability(ServiceOutcome.CRITICAL_FAILURE),
            response="Activate emergency tool rental and expedite replacement",
            additional_cost=15000,
            additional_time=3,
        ),
        ContingencyPlan(
            scenario="Multiple tools unavailable simultaneously",
            probability=0.05,
            response="Source alternative equipment from secondary suppliers",
            additional_cost=8000,
            additional_time=5,
        ),
    ]

    if project.project_complexity == ProjectComplexity.HIGH:
        plans.append(ContingencyPlan(
            scenario="Scope creep requiring additional specialized equipment",
            probability=0.25,
            response="Leverage short-term rental for temporary equipment needs",
            additional_cost=project.budget * 0.08,
            additional_time=7,
        ))

    return plans
