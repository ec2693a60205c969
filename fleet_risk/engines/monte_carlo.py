#!/usr/bin/env python3
"""
Monte Carlo simulation of fleet service events
Each trial independently samples every tool: a Bernoulli draw decides whether
a service event occurs, and the outcome distribution decides how long it lasts.
Tools are uncorrelated within a trial and trials share no state.
"""

import math
import threading
from typing import List, Optional

import numpy as np

from fleet_risk.core.config import EngineConfig, get_config
from fleet_risk.core.logging import get_logger
from fleet_risk.engines.models import ScenarioOutcome, ServiceFailure, SimulationResult
from fleet_risk.engines.service_model import SERVICE_OUTCOMES, ServiceOutcomeDistribution
from fleet_risk.engines.statistics import (
    calculate_statistics,
    critical_path_rate,
    generate_recommendations,
    mean_downtime,
)
from fleet_risk.schemas import MonteCarloConfig, ProjectData, ToolRecommendation

logger = get_logger(__name__)


class SimulationCancelled(RuntimeError):
    """Raised when a simulation run is cancelled between trials"""

    def __init__(self, completed: int, requested: int):
        super().__init__(f"simulation cancelled after {completed} of {requested} trials")
        self.completed = completed
        self.requested = requested


def make_rng(seed: Optional[int] = None, settings: Optional[EngineConfig] = None) -> np.random.Generator:
    """Generator seeded explicitly, from settings, or from OS entropy"""
    if seed is None:
        seed = (settings or get_config()).random_seed
    return np.random.default_rng(seed)


class MonteCarloSimulator:
    """
    Stateless trial loop; all randomness comes from the injected generator so
    a seeded generator reproduces a run exactly.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None,
                 distribution: ServiceOutcomeDistribution = SERVICE_OUTCOMES):
        self.rng = rng if rng is not None else make_rng()
        self.distribution = distribution

    def run(self, project: ProjectData, tools: List[ToolRecommendation],
            config: Optional[MonteCarloConfig] = None,
            cancel_event: Optional[threading.Event] = None) -> SimulationResult:
        """Run the configured number of trials and reduce them to statistics"""

        config = config or MonteCarloConfig.for_project(project)
        run_logger = logger.bind(project=project.project_name, iterations=config.iterations)
        run_logger.debug("simulation_started", tool_count=len(tools),
                         time_horizon_days=config.time_horizon_days)

        scenarios: List[ScenarioOutcome] = []
        for scenario_id in range(config.iterations):
            if cancel_event is not None and cancel_event.is_set():
                run_logger.warning("simulation_cancelled", completed=scenario_id)
                raise SimulationCancelled(scenario_id, config.iterations)
            scenarios.append(self.simulate_scenario(scenario_id, tools))

        statistics = calculate_statistics(scenarios, config.confidence_level)

        result = SimulationResult(
            scenarios=scenarios,
            statistics=statistics,
            recommendations=generate_recommendations(scenarios, statistics),
            critical_path_rate=critical_path_rate(scenarios),
            mean_downtime=mean_downtime(scenarios),
        )

        run_logger.info(
            "simulation_completed",
            mean_cost=statistics.mean,
            p95_cost=statistics.percentiles['95th'],
            critical_path_rate=result.critical_path_rate,
        )
        return result

    def simulate_scenario(self, scenario_id: int, tools: List[ToolRecommendation]) -> ScenarioOutcome:
        """One trial across the whole fleet"""

        scenario = ScenarioOutcome(scenario_id=scenario_id)

        for tool in tools:
            profile = tool.risk_factors
            if self.rng.random() >= profile.repair_event_probability:
                continue

            outcome = self.distribution.sample(self.rng)
            downtime_days = profile.expected_repair_days * outcome.duration_multiplier
            cost = tool.monthly_cost * math.ceil(downtime_days / 30)

            scenario.total_downtime += downtime_days
            scenario.total_cost += cost
            if profile.critical_path_impact:
                scenario.critical_path_impact = True

            scenario.service_failures.append(ServiceFailure(
                tool_name=tool.name,
                failure_type=outcome.outcome,
                downtime_days=downtime_days,
                cost=cost,
            ))

        return scenario
