"""Decision engine sidecar API.

FastAPI application exposing the engine to the dashboard shell. Every
route is a stateless wrapper over one engine call; nothing is cached or
stored between requests. The caller keeps the current weight vector and
sends it back with the next request.

Endpoints:
    GET  /health                       - health check
    GET  /api/v1/scenarios             - scenario presets
    POST /api/v1/analytics/trend       - trend fit + anomaly scan
    POST /api/v1/analytics/anomalies   - anomaly scan only
    POST /api/v1/sequence/optimize     - vendor visit order
    POST /api/v1/strategies/rank       - strategy ranking
    POST /api/v1/strategies/simulate   - Monte Carlo ranking uncertainty
    POST /api/v1/strategies/learn      - one weight learning step
    POST /api/v1/simulation/cycle      - rank, simulate and learn in one call
    POST /api/v1/fleet/impact          - fleet load of a new customer
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__, anomaly
from .analytics import analyze_series
from .api_models import (
    AnomalyResponse,
    CycleResponse,
    ErrorResponse,
    FleetImpactRequest,
    FleetImpactResponse,
    HealthResponse,
    LearningResponse,
    LearnRequest,
    MonteCarloResponse,
    RankingResponse,
    ScenarioListResponse,
    SequenceRequest,
    SequenceResponse,
    SeriesRequest,
    StrategyRequest,
    TrendResponse,
)
from .config import EngineSettings, get_settings
from .fleet import impact_score, summarize_waitlist
from .learning import WeightLearner
from .ranking import rank_strategies, sensitivity_analysis
from .scenarios import SCENARIO_PRESETS
from .sequencing import SequenceOptimizer
from .simulation import run_cycle
from .uncertainty import UncertaintySimulator

logger = logging.getLogger("logistics.sidecar")


def create_app(settings: EngineSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="Logistics Decision Engine",
        version=__version__,
        description=(
            "Trend, anomaly, sequencing and strategy-scoring engine "
            "for the logistics dashboard."
        ),
    )

    origins = ["*"] if settings.sidecar_dev_mode else ["http://localhost:3000"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    learner = WeightLearner.from_settings(settings)

    def _scenario(name: str | None) -> str:
        return name or settings.default_scenario

    def _simulator(trials: int | None, seed: int | None) -> UncertaintySimulator:
        simulator = UncertaintySimulator.from_settings(settings, seed=seed)
        if trials is not None:
            simulator.trials = trials
        return simulator

    # -----------------------------------------------------------------
    # Global exception handler
    # -----------------------------------------------------------------

    @app.exception_handler(Exception)
    async def general_error_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred",
                detail=str(exc) if settings.sidecar_dev_mode else None,
            ).model_dump(),
        )

    # -----------------------------------------------------------------
    # Endpoints
    # -----------------------------------------------------------------

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        return HealthResponse(version=__version__, dev_mode=settings.sidecar_dev_mode)

    @app.get("/api/v1/scenarios", response_model=ScenarioListResponse)
    async def list_scenarios() -> ScenarioListResponse:
        return ScenarioListResponse(
            default=settings.default_scenario,
            scenarios=dict(SCENARIO_PRESETS),
        )

    @app.post("/api/v1/analytics/trend", response_model=TrendResponse)
    async def trend(body: SeriesRequest) -> TrendResponse:
        """Fit a trend line and flag anomalies in one pass."""
        analysis = analyze_series(body.samples, body.future_points)
        return TrendResponse(**analysis.to_dict())

    @app.post("/api/v1/analytics/anomalies", response_model=AnomalyResponse)
    async def anomalies(body: SeriesRequest) -> AnomalyResponse:
        report = anomaly.detect(body.samples)
        return AnomalyResponse(
            **report.to_dict(),
            alerts=[a.to_dict() for a in anomaly.get_alerts(report)],
        )

    @app.post("/api/v1/sequence/optimize", response_model=SequenceResponse)
    async def optimize_sequence(body: SequenceRequest) -> SequenceResponse:
        """Search for a low-delay vendor visit order."""
        optimizer = SequenceOptimizer.from_settings(settings, seed=body.seed)
        if body.generations is not None:
            optimizer.generations = body.generations
        if body.population_size is not None:
            optimizer.population_size = body.population_size
        result = optimizer.optimize(body.vendors)
        return SequenceResponse(**result.to_dict())

    @app.post("/api/v1/strategies/rank", response_model=RankingResponse)
    async def rank(
        body: StrategyRequest,
        sensitivity: bool = Query(default=False),
    ) -> RankingResponse:
        """Rank strategies; optionally include weight sensitivity."""
        scenario = _scenario(body.scenario)
        ranking = rank_strategies(body.strategies, body.weights, scenario)
        payload = ranking.to_dict()
        if sensitivity:
            payload["sensitivity"] = sensitivity_analysis(
                body.strategies, ranking.normalized_weights, scenario
            ).to_dict()
        return RankingResponse(**payload)

    @app.post("/api/v1/strategies/simulate", response_model=MonteCarloResponse)
    async def simulate(body: StrategyRequest) -> MonteCarloResponse:
        simulator = _simulator(body.trials, body.seed)
        result = simulator.simulate(
            body.strategies, body.weights, _scenario(body.scenario)
        )
        return MonteCarloResponse(**result.to_dict())

    @app.post("/api/v1/strategies/learn", response_model=LearningResponse)
    async def learn(body: LearnRequest) -> LearningResponse:
        result = learner.adapt(body.weights, body.feedback)
        return LearningResponse(**result.to_dict())

    @app.post("/api/v1/simulation/cycle", response_model=CycleResponse)
    async def cycle(body: StrategyRequest) -> CycleResponse:
        """Rank, stress-test and learn. Send ``next_weights`` back next time."""
        result = run_cycle(
            body.strategies,
            body.weights,
            _scenario(body.scenario),
            delay_threshold=settings.delay_threshold,
            simulator=_simulator(body.trials, body.seed),
            learner=learner,
        )
        return CycleResponse(**result.to_dict())

    @app.post("/api/v1/fleet/impact", response_model=FleetImpactResponse)
    async def fleet_impact(body: FleetImpactRequest) -> FleetImpactResponse:
        impact = impact_score(body.volume, body.location)
        return FleetImpactResponse(
            impact=impact.to_dict() if impact else None,
            waitlist=summarize_waitlist(body.waitlist).to_dict(),
        )

    return app
