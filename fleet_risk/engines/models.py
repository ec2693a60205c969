"""
Result types shared by the risk assessment and simulation engines
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List

from fleet_risk.engines.service_model import ServiceOutcome


class RiskCategory(Enum):
    EQUIPMENT = "equipment"
    SERVICE = "service"
    TIMELINE = "timeline"
    FINANCIAL = "financial"
    OPERATIONAL = "operational"


class RiskImpact(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class OverallRisk(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


def _plain(value: Any) -> Any:
    """Recursively replace enums with their values for serialisation"""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


@dataclass(frozen=True)
class RiskFactor:
    """Individual risk factor with quantified cost and schedule impact"""
    category: RiskCategory
    description: str
    probability: float  # 0-1
    impact: RiskImpact
    cost_impact: float
    time_impact: float  # days


@dataclass
class MitigationStrategy:
    risk_category: RiskCategory
    strategy: str
    cost: float
    effectiveness: float  # 0-1 probability reduction
    implementation_time: float  # days


@dataclass
class ContingencyPlan:
    scenario: str
    probability: float
    response: str
    additional_cost: float
    additional_time: float  # days


@dataclass
class FinancialRiskImpact:
    expected_cost: float
    worst_case_cost: float
    contingency_budget: float
    insurance_value: float


@dataclass
class RiskProfile:
    """Deterministic risk view of a project fleet"""
    overall_risk: OverallRisk
    risk_factors: List[RiskFactor]
    mitigation_strategies: List[MitigationStrategy]
    contingency_recommendations: List[ContingencyPlan]
    financial_impact: FinancialRiskImpact

    def to_dict(self) -> Dict[str, Any]:
        return _plain(asdict(self))


@dataclass
class ServiceFailure:
    """One simulated service event within a trial"""
    tool_name: str
    failure_type: ServiceOutcome
    downtime_days: float
    cost: float


@dataclass
class ScenarioOutcome:
    """Result of one Monte Carlo trial"""
    scenario_id: int
    total_downtime: float = 0.0
    total_cost: float = 0.0
    critical_path_impact: bool = False
    service_failures: List[ServiceFailure] = field(default_factory=list)


@dataclass
class SimulationStatistics:
    """Summary statistics over trial total cost"""
    mean: float
    median: float
    standard_deviation: float
    percentiles: Dict[str, float]
    confidence_interval: Dict[str, float]


@dataclass
class SimulationResult:
    scenarios: List[ScenarioOutcome]
    statistics: SimulationStatistics
    recommendations: List[str]
    critical_path_rate: float = 0.0
    mean_downtime: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return _plain(asdict(self))
