# truthguard/main.py
import time
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from loguru import logger
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

from .config import Settings
from .errors import CreditsExhaustedError, RateLimitError
from .gateway import call_gateway
from .parsing import parse_reply
from .prompts import build_user_content
from .schemas import AnalyzeRequest, ErrorResponse, HealthResponse

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

# Metrics
REQUESTS_TOTAL = Counter("analyze_requests_total", "Total number of incoming analyze requests")
REQUESTS_ERRORS = Counter("analyze_errors_total", "Analyze requests that resulted in an error", ["kind"])
PARSE_STRATEGY = Counter("analyze_parse_strategy_total", "Which reply parser produced the result", ["strategy"])
PROCESS_LATENCY = Histogram("analyze_latency_seconds", "Time to analyze one submission")


def _error(status_code: int, message: str, details: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=message, details=details).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body, headers=CORS_HEADERS)


def create_app(settings: Optional[Settings] = None, http_client: Optional[httpx.AsyncClient] = None) -> FastAPI:
    """
    Build the analysis service.

    `settings` and `http_client` are injected so tests can swap the API key
    and the upstream transport. When no client is given, one is opened on
    startup and closed on shutdown.
    """
    settings = settings or Settings.from_env()
    app = FastAPI(title="TruthGuard", version="0.1.0")
    app.state.settings = settings
    app.state.http_client = http_client
    app.state.owns_http_client = http_client is None

    # CORSMiddleware only decorates regular responses; OPTIONS never reaches it (see below)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def short_circuit_options(request: Request, call_next):
        # every OPTIONS, preflight or not: empty body, CORS headers only
        if request.method == "OPTIONS":
            return Response(content=None, headers=CORS_HEADERS)
        return await call_next(request)

    @app.on_event("startup")
    async def startup_event():
        if not settings.api_key:
            logger.warning("LOVABLE_API_KEY not configured; analysis requests will fail until it is set.")
        if app.state.http_client is None:
            logger.info("Starting up: opening http client for {}", settings.gateway_url)
            limits = httpx.Limits(max_keepalive_connections=10, max_connections=20)
            app.state.http_client = httpx.AsyncClient(timeout=settings.request_timeout, limits=limits)

    @app.on_event("shutdown")
    async def shutdown_event():
        http_client = getattr(app.state, "http_client", None)
        if http_client is not None and app.state.owns_http_client:
            logger.info("Shutting down: closing http client")
            await http_client.aclose()
            app.state.http_client = None

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError):
        logger.warning("Rejected malformed request body: {}", exc.errors())
        REQUESTS_ERRORS.labels(kind="bad_request").inc()
        return _error(400, "Invalid request body", details="Expected {\"text\": string|null, \"imageUrl\": string|null}")

    @app.post("/analyze-content")
    async def analyze_content(req: AnalyzeRequest):
        """
        Classify a text and/or image submission as real or fake.

        Always answers with JSON: the AnalysisResult on success, or
        {"error": ...} with 400/402/429/500.
        """
        REQUESTS_TOTAL.inc()
        t0 = time.perf_counter()
        try:
            logger.info("Analyzing content: has_text={} has_image={}", req.has_text, req.has_image)

            content = build_user_content(req.text, req.image_url)
            if not content:
                REQUESTS_ERRORS.labels(kind="no_content").inc()
                return _error(400, "No content provided for analysis")

            client = app.state.http_client
            if client is None:
                # startup hook not run (e.g. TestClient used without a context manager)
                client = app.state.http_client = httpx.AsyncClient(timeout=settings.request_timeout)

            reply = await call_gateway(client, settings, content)
            logger.info("AI response received")

            outcome = parse_reply(reply)
            PARSE_STRATEGY.labels(strategy=outcome.strategy).inc()
            if outcome.is_fallback:
                logger.warning("Failed to parse AI response as JSON; using heuristic fallback")
            logger.info("Analysis complete via {}: {}", outcome.strategy, outcome.result)

            return JSONResponse(content=outcome.result.model_dump(), headers=CORS_HEADERS)

        except RateLimitError as e:
            REQUESTS_ERRORS.labels(kind="rate_limited").inc()
            return _error(e.status_code, str(e))
        except CreditsExhaustedError as e:
            REQUESTS_ERRORS.labels(kind="credits_exhausted").inc()
            return _error(e.status_code, str(e))
        except Exception as e:
            REQUESTS_ERRORS.labels(kind="internal").inc()
            logger.exception("Error in analyze-content: {}", e)
            return _error(500, str(e) or "Unknown error occurred", details="Failed to analyze content")
        finally:
            PROCESS_LATENCY.observe(time.perf_counter() - t0)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/metrics")
    async def metrics():
        """
        Prometheus metrics endpoint.
        """
        data = generate_latest()
        return Response(content=data, media_type=CONTENT_TYPE_LATEST)

    return app


def run() -> None:
    import uvicorn

    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)
