"""
Financial impact of identified fleet risks
"""

from typing import List

from fleet_risk.engines.models import FinancialRiskImpact, RiskFactor

CONTINGENCY_MULTIPLIER = 1.5       # Reserve 150% of expected loss
MIN_CONTINGENCY_BUDGET_SHARE = 0.05
INSURANCE_COVERAGE = 0.8           # Service guarantee covers 80% of losses


def calculate_financial_impact(risk_factors: List[RiskFactor], budget: float) -> FinancialRiskImpact:
    """Aggregate factor cost impacts into expected, worst-case and reserve figures"""

    expected_cost = sum(factor.cost_impact * factor.probability for factor in risk_factors)
    worst_case_cost = sum(factor.cost_impact for factor in risk_factors)

    contingency_budget = max(expected_cost * CONTINGENCY_MULTIPLIER,
                             budget * MIN_CONTINGENCY_BUDGET_SHARE)

    return FinancialRiskImpact(
        expected_cost=expected_cost,
        worst_case_cost=worst_case_cost,
        contingency_budget=contingency_budget,
        insurance_value=worst_case_cost * INSURANCE_COVERAGE,
    )
