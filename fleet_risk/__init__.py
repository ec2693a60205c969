"""Probabilistic risk and reliability engine for rented equipment fleets."""
from __future__ import annotations

import threading
import uuid
from typing import Iterable, Optional, Union

import numpy as np

from fleet_risk.core.config import get_config
from fleet_risk.core.logging import run_context
from fleet_risk.engines.models import RiskProfile, SimulationResult
from fleet_risk.engines.monte_carlo import MonteCarloSimulator, SimulationCancelled, make_rng
from fleet_risk.engines.risk_assessment import RiskModelingEngine
from fleet_risk.schemas import (
    MonteCarloConfig,
    ProjectInput,
    ToolInput,
    coerce_project,
    coerce_tools,
)

__version__ = "0.1.0"


def assess_project_risk(project: ProjectInput, tools: Iterable[ToolInput]) -> RiskProfile:
    """Deterministic risk profile for a project and its recommended tools."""

    project_data = coerce_project(project)
    tool_list = coerce_tools(tools)
    with run_context(run_id=uuid.uuid4().hex[:12]):
        return RiskModelingEngine().assess_project_risk(project_data, tool_list)


def run_monte_carlo_simulation(
    project: ProjectInput,
    tools: Iterable[ToolInput],
    config: Optional[Union[MonteCarloConfig, dict]] = None,
    *,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> SimulationResult:
    """Simulate service events for the fleet and summarise the cost distribution.

    ``rng`` takes precedence over ``seed``; with neither, the configured
    ``FLEET_RISK_RANDOM_SEED`` is used, falling back to OS entropy.
    """

    project_data = coerce_project(project)
    tool_list = coerce_tools(tools)

    if config is None:
        run_config = MonteCarloConfig.for_project(project_data)
    elif isinstance(config, MonteCarloConfig):
        run_config = config
    else:
        run_config = MonteCarloConfig.model_validate(config)
    if run_config.time_horizon_days is None:
        run_config = run_config.model_copy(update={"time_horizon_days": project_data.timeline * 30})

    if rng is None:
        if seed is None:
            seed = get_config().random_seed
        rng = make_rng(seed)
    else:
        seed = None

    # seed stays None for injected generators and OS entropy
    with run_context(run_id=uuid.uuid4().hex[:12], seed=seed):
        simulator = MonteCarloSimulator(rng=rng)
        return simulator.run(project_data, tool_list, run_config, cancel_event=cancel_event)


__all__ = [
    "assess_project_risk",
    "run_monte_carlo_simulation",
    "MonteCarloConfig",
    "RiskProfile",
    "SimulationResult",
    "SimulationCancelled",
]
