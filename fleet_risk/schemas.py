"""Input contracts supplied by the surrounding quoting application."""
from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from fleet_risk.core.config import EngineConfig, get_config


class ProjectComplexity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class _CamelModel(BaseModel):
    # NaN and infinity are rejected on every float field
    model_config = ConfigDict(populate_by_name=True, extra="ignore", allow_inf_nan=False)


class ProjectData(_CamelModel):
    """Project attributes the engines read"""

    project_name: str = Field(default="", alias="projectName")
    project_type: Optional[str] = Field(default=None, alias="projectType")
    location: Optional[str] = None
    labor_count: int = Field(default=1, ge=1, alias="laborCount")
    timeline: int = Field(ge=1, description="Project duration in months")
    budget: float = Field(ge=0)
    project_complexity: ProjectComplexity = Field(
        default=ProjectComplexity.MEDIUM, alias="projectComplexity"
    )
    existing_tools: List[str] = Field(default_factory=list, alias="existingTools")
    special_requirements: Optional[str] = Field(default=None, alias="specialRequirements")


class ToolRiskFactors(_CamelModel):
    """Service-risk profile attached to a recommended tool"""

    repair_event_probability: float = Field(
        ge=0.0,
        le=1.0,
        validation_alias=AliasChoices(
            "repair_event_probability", "repairEventProbability", "repairDowntimeProbability"
        ),
    )
    expected_repair_days: float = Field(ge=0, alias="expectedRepairDays")
    critical_path_impact: bool = Field(default=False, alias="criticalPathImpact")


class ServiceFeatures(_CamelModel):
    repair_coverage: bool = Field(default=True, alias="repairCoverage")
    theft_coverage: float = Field(default=80, ge=0, le=100, alias="theftCoverage")
    loaner_tools: bool = Field(default=True, alias="loanerTools")
    on_site_maintenance: bool = Field(default=False, alias="onSiteMaintenance")
    training_included: bool = Field(default=True, alias="trainingIncluded")


class ToolRecommendation(_CamelModel):
    """A recommended fleet tool with its monthly cost and risk profile"""

    name: str
    category: str = "general"
    quantity: int = Field(default=1, ge=1)
    monthly_cost: float = Field(ge=0, alias="monthlyCost")
    total_cost: Optional[float] = Field(default=None, ge=0, alias="totalCost")
    risk_factors: ToolRiskFactors = Field(alias="riskFactors")
    service_features: Optional[ServiceFeatures] = Field(default=None, alias="serviceFeatures")
    tod_eligible: bool = Field(default=False, alias="todEligible")


class MonteCarloConfig(_CamelModel):
    """Parameters for one simulation run"""

    iterations: int = Field(default=1000, gt=0)
    confidence_level: float = Field(default=0.95, gt=0.0, lt=1.0, alias="confidenceLevel")
    # Informational only; trials are not truncated to the horizon
    time_horizon_days: Optional[float] = Field(default=None, ge=0, alias="timeHorizonDays")

    @classmethod
    def for_project(cls, project: ProjectData,
                    settings: Optional[EngineConfig] = None) -> "MonteCarloConfig":
        """Build the default configuration for a project from engine settings."""

        settings = settings or get_config()
        return cls(
            iterations=settings.simulation_iterations,
            confidence_level=settings.confidence_level,
            time_horizon_days=project.timeline * 30,
        )


ProjectInput = Union[ProjectData, Mapping[str, Any]]
ToolInput = Union[ToolRecommendation, Mapping[str, Any]]


def coerce_project(project: ProjectInput) -> ProjectData:
    """Validate a project mapping, passing model instances through."""

    if isinstance(project, ProjectData):
        return project
    return ProjectData.model_validate(project)


def coerce_tools(tools: Iterable[ToolInput]) -> List[ToolRecommendation]:
    """Validate every tool recommendation, preserving order."""

    return [
        tool if isinstance(tool, ToolRecommendation) else ToolRecommendation.model_validate(tool)
        for tool in tools
    ]


__all__ = [
    "ProjectComplexity",
    "ProjectData",
    "ToolRiskFactors",
    "ServiceFeatures",
    "ToolRecommendation",
    "MonteCarloConfig",
    "coerce_project",
    "coerce_tools",
]
