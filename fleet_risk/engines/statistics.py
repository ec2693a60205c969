"""
Statistics aggregation over Monte Carlo trial outcomes
Percentiles and the confidence interval use index truncation into the sorted
cost array rather than interpolation.
"""

import math
from typing import Dict, List, Sequence

import numpy as np

from fleet_risk.engines.models import ScenarioOutcome, SimulationStatistics

PERCENTILE_POINTS: Dict[str, float] = {
    '5th': 0.05,
    '25th': 0.25,
    '50th': 0.50,
    '75th': 0.75,
    '95th': 0.95,
}

CRITICAL_PATH_RATE_THRESHOLD = 0.15
DOWNTIME_BUFFER_THRESHOLD_DAYS = 10
COST_TAIL_MULTIPLE = 3


def _index(n: int, fraction: float) -> int:
    return min(n - 1, max(0, math.floor(n * fraction)))


def calculate_statistics(scenarios: Sequence[ScenarioOutcome],
                         confidence_level: float) -> SimulationStatistics:
    """Mean, median, population standard deviation, percentiles and interval of trial cost"""

    if not scenarios:
        raise ValueError("cannot aggregate an empty scenario list")
    if not 0.0 < confidence_level < 1.0:
        raise ValueError(f"confidence level must lie strictly between 0 and 1, got {confidence_level}")

    costs = np.sort(np.array([s.total_cost for s in scenarios], dtype=float))
    n = len(costs)

    mean = float(np.mean(costs))
    # Lower-middle element for even counts
    median = float(costs[n // 2])
    standard_deviation = float(np.std(costs))

    percentiles = {label: float(costs[_index(n, p)]) for label, p in PERCENTILE_POINTS.items()}
    percentiles['50th'] = median

    alpha = 1 - confidence_level
    confidence_interval = {
        'lower': float(costs[_index(n, alpha / 2)]),
        'upper': float(costs[_index(n, 1 - alpha / 2)]),
    }

    return SimulationStatistics(
        mean=mean,
        median=median,
        standard_deviation=standard_deviation,
        percentiles=percentiles,
        confidence_interval=confidence_interval,
    )


def critical_path_rate(scenarios: Sequence[ScenarioOutcome]) -> float:
    if not scenarios:
        return 0.0
    return sum(1 for s in scenarios if s.critical_path_impact) / len(scenarios)


def mean_downtime(scenarios: Sequence[ScenarioOutcome]) -> float:
    if not scenarios:
        return 0.0
    return float(np.mean([s.total_downtime for s in scenarios]))


def generate_recommendations(scenarios: Sequence[ScenarioOutcome],
                             statistics: SimulationStatistics) -> List[str]:
    """Plain-language guidance derived from the simulated distribution"""

    recommendations = []

    path_rate = critical_path_rate(scenarios)
    downtime = mean_downtime(scenarios)
    p95 = statistics.percentiles['95th']

    if path_rate > CRITICAL_PATH_RATE_THRESHOLD:
        recommendations.append(
            f"High critical path risk ({round(path_rate * 100)}%) - consider redundant equipment"
        )

    if downtime > DOWNTIME_BUFFER_THRESHOLD_DAYS:
        recommendations.append(
            f"Expected {round(downtime)} days of equipment downtime - build schedule buffer"
        )

    if p95 > statistics.mean * COST_TAIL_MULTIPLE:
        recommendations.append(
            f"High cost variability - establish contingency fund of ${round(p95)}"
        )

    recommendations.append(f"95% confidence: costs will not exceed ${round(p95)}")
    recommendations.append(
        f"Recommended contingency: ${round(statistics.mean + statistics.standard_deviation)}"
    )

    return recommendations
