#!/usr/bin/env python3
"""
Risk Assessment Engine for equipment fleets
Identifies equipment, service, timeline, operational and financial risk
factors for a project and rolls them up into a deterministic risk profile
"""

import math
from typing import Dict, List, Optional

from fleet_risk.core.config import EngineConfig, get_config
from fleet_risk.core.logging import get_logger
from fleet_risk.engines.financial import calculate_financial_impact
from fleet_risk.engines.mitigation import create_contingency_plans, generate_mitigation_strategies
from fleet_risk.engines.models import OverallRisk, RiskCategory, RiskFactor, RiskImpact, RiskProfile
from fleet_risk.engines.service_model import SERVICE_OUTCOMES, ServiceOutcomeDistribution
from fleet_risk.schemas import ProjectComplexity, ProjectData, ToolRecommendation

logger = get_logger(__name__)

ELEVATED_FAILURE_THRESHOLD = 0.15
COMPRESSED_TIMELINE_MONTHS = 6
CAPITAL_EXPOSURE_BUDGET_SHARE = 0.2


class RiskModelingEngine:
    """
    Deterministic risk profiling over a project and its recommended fleet.
    No randomness is involved; identical input yields identical output.
    """

    def __init__(self, settings: Optional[EngineConfig] = None,
                 distribution: ServiceOutcomeDistribution = SERVICE_OUTCOMES):
        settings = settings or get_config()
        self.distribution = distribution
        self.rental_markup = settings.rental_markup
        self.amortization_months = settings.amortization_months

        self.IMPACT_WEIGHTS: Dict[RiskImpact, int] = {
            RiskImpact.LOW: 1,
            RiskImpact.MEDIUM: 2,
            RiskImpact.HIGH: 3,
            RiskImpact.CRITICAL: 4,
        }

    def assess_project_risk(self, project: ProjectData,
                            tools: List[ToolRecommendation]) -> RiskProfile:
        """Build the full risk profile for a project fleet"""

        risk_factors = self.identify_risk_factors(project, tools)

        profile = RiskProfile(
            overall_risk=self.calculate_overall_risk(risk_factors),
            risk_factors=risk_factors,
            mitigation_strategies=generate_mitigation_strategies(risk_factors),
            contingency_recommendations=create_contingency_plans(project),
            financial_impact=calculate_financial_impact(risk_factors, project.budget),
        )

        logger.info(
            "risk_profile_assessed",
            overall_risk=profile.overall_risk.value,
            factor_count=len(risk_factors),
            tool_count=len(tools),
            expected_cost=profile.financial_impact.expected_cost,
        )
        return profile

    def identify_risk_factors(self, project: ProjectData,
                              tools: List[ToolRecommendation]) -> List[RiskFactor]:
        """Ordered risk factors: per-tool equipment risks first, then project-wide risks"""

        factors: List[RiskFactor] = []
        factors.extend(self._assess_equipment_risks(tools))
        factors.append(self._assess_service_gap_risk(tools))

        if project.project_complexity == ProjectComplexity.HIGH:
            factors.append(RiskFactor(
                category=RiskCategory.OPERATIONAL,
                description="High project complexity increases coordination and equipment demands",
                probability=0.35,
                impact=RiskImpact.HIGH,
                cost_impact=project.budget * 0.05,
                time_impact=project.timeline * 30 * 0.1,
            ))

        if project.timeline < COMPRESSED_TIMELINE_MONTHS:
            factors.append(RiskFactor(
                category=RiskCategory.TIMELINE,
                description="Compressed timeline increases equipment availability pressure",
                probability=0.40,
                impact=RiskImpact.MEDIUM,
                cost_impact=project.budget * 0.03,
                time_impact=14,
            ))

        total_asset_value = self.implied_asset_value(tools)
        if total_asset_value > project.budget * CAPITAL_EXPOSURE_BUDGET_SHARE:
            factors.append(RiskFactor(
                category=RiskCategory.FINANCIAL,
                description="High equipment value creates significant financial exposure",
                probability=0.15,
                impact=RiskImpact.CRITICAL,
                cost_impact=total_asset_value * 0.1,
                time_impact=21,
            ))

        return factors

    def implied_asset_value(self, tools: List[ToolRecommendation]) -> float:
        """Purchase value implied by the rental rates: monthly x amortization / markup"""
        return sum(tool.monthly_cost * self.amortization_months / self.rental_markup
                   for tool in tools)

    def calculate_overall_risk(self, risk_factors: List[RiskFactor]) -> OverallRisk:
        """Classify a factor list; the first matching rule wins"""

        critical_count = sum(1 for f in risk_factors if f.impact == RiskImpact.CRITICAL)
        high_count = sum(1 for f in risk_factors if f.impact == RiskImpact.HIGH)
        risk_score = self.risk_score(risk_factors)

        if critical_count > 0 or risk_score > 3.0:
            return OverallRisk.CRITICAL
        if high_count > 1 or risk_score > 2.0:
            return OverallRisk.HIGH
        if risk_score > 1.0:
            return OverallRisk.MEDIUM
        return OverallRisk.LOW

    def risk_score(self, risk_factors: List[RiskFactor]) -> float:
        return sum(f.probability * self.IMPACT_WEIGHTS[f.impact] for f in risk_factors)

    def _assess_equipment_risks(self, tools: List[ToolRecommendation]) -> List[RiskFactor]:
        """Tools whose service probability is elevated"""

        risks = []
        for tool in tools:
            profile = tool.risk_factors
            probability = profile.repair_event_probability
            if probability <= ELEVATED_FAILURE_THRESHOLD:
                continue

            risks.append(RiskFactor(
                category=RiskCategory.EQUIPMENT,
                description=f"{tool.name} has elevated failure risk ({round(probability * 100)}% probability)",
                probability=probability,
                impact=RiskImpact.HIGH if profile.critical_path_impact else RiskImpact.MEDIUM,
                cost_impact=tool.monthly_cost * math.ceil(profile.expected_repair_days / 30),
                time_impact=profile.expected_repair_days,
            ))

        return risks

    def _assess_service_gap_risk(self, tools: List[ToolRecommendation]) -> RiskFactor:
        """Chance that any service event overruns the promised turnaround"""

        delay_probability = self.distribution.disruption_probability()

        # Half a month of rental per delayed tool, weighted by the delay probability
        cost_impact = sum(tool.monthly_cost * 0.5 * 0.3 for tool in tools)

        return RiskFactor(
            category=RiskCategory.SERVICE,
            description=(
                f"Service gap analysis indicates {round(delay_probability * 100)}% "
                f"probability of delays beyond promised SLA"
            ),
            probability=delay_probability,
            impact=RiskImpact.MEDIUM,
            cost_impact=cost_impact,
            time_impact=7,
        )
