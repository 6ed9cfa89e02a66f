"""Logistics Decision & Predictive Analytics Engine.

Stateless numerical core behind the logistics dashboard:

    trend / anomaly   - least-squares trend lines and z-score outliers
    sequencing        - genetic search over vendor visit orders
    ranking           - multi-criteria strategy scoring under scenarios
    uncertainty       - Monte Carlo stress test of the ranking
    learning          - feedback-driven weight adaptation
    simulation        - one rank → simulate → learn cycle

Usage:
    from logistics_engine import WeightVector, run_cycle
    from logistics_engine.demo import STRATEGIES

    weights = WeightVector()
    cycle = run_cycle(STRATEGIES, weights, "Peak Traffic", seed=7)
    print(cycle.explanation)
    weights = cycle.next_weights   # thread into the next cycle
"""

__version__ = "0.1.0"

from .analytics import SeriesAnalysis, analyze_series
from .anomaly import AnomalyAlert, AnomalyPoint, AnomalyReport, detect, get_alerts
from .fleet import FleetImpact, ImpactLevel, impact_score, summarize_waitlist
from .learning import (
    LearningResult,
    WeightLearner,
    adapt_weights,
    feedback_from_ranking,
)
from .models import (
    DEFAULT_WEIGHTS,
    CustomerStatus,
    LearningFeedback,
    Sample,
    ScenarioParams,
    Strategy,
    Vendor,
    WaitlistCustomer,
    WeightKey,
    WeightVector,
)
from .ranking import (
    RankedStrategy,
    RankingResult,
    SensitivityReport,
    StrategyScores,
    normalize_weights,
    rank_strategies,
    score_strategy,
    sensitivity_analysis,
)
from .scenarios import SCENARIO_PRESETS, Scenario, resolve_scenario
from .sequencing import (
    FitnessResult,
    SequenceOptimizer,
    SequenceResult,
    evaluate_ordering,
    optimize_sequence,
)
from .simulation import CycleResult, run_cycle
from .trend import RegressionModel, TrendPoint, TrendPointKind, fit, generate_trendline
from .uncertainty import (
    MonteCarloResult,
    ScoreBand,
    UncertaintySimulator,
    simulate_uncertainty,
)

__all__ = [
    # Analytics
    "AnomalyAlert",
    "AnomalyPoint",
    "AnomalyReport",
    "RegressionModel",
    "SeriesAnalysis",
    "TrendPoint",
    "TrendPointKind",
    "analyze_series",
    "detect",
    "fit",
    "generate_trendline",
    "get_alerts",
    # Sequencing
    "FitnessResult",
    "SequenceOptimizer",
    "SequenceResult",
    "evaluate_ordering",
    "optimize_sequence",
    # Strategy scoring
    "RankedStrategy",
    "RankingResult",
    "SensitivityReport",
    "StrategyScores",
    "normalize_weights",
    "rank_strategies",
    "score_strategy",
    "sensitivity_analysis",
    "MonteCarloResult",
    "ScoreBand",
    "UncertaintySimulator",
    "simulate_uncertainty",
    "LearningResult",
    "WeightLearner",
    "adapt_weights",
    "feedback_from_ranking",
    "CycleResult",
    "run_cycle",
    # Scenarios
    "SCENARIO_PRESETS",
    "Scenario",
    "resolve_scenario",
    # Fleet
    "FleetImpact",
    "ImpactLevel",
    "impact_score",
    "summarize_waitlist",
    # Models
    "DEFAULT_WEIGHTS",
    "CustomerStatus",
    "LearningFeedback",
    "Sample",
    "ScenarioParams",
    "Strategy",
    "Vendor",
    "WaitlistCustomer",
    "WeightKey",
    "WeightVector",
]
