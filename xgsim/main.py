"""
FastAPI application for the xG match simulator
Exposes POST /simulate/by-id plus health endpoints
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from functools import lru_cache
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from xgsim.config import INDEX_BACKEND_SQL, Settings, get_settings
from xgsim.errors import (
    MalformedMatchJsonError,
    MatchIndexRepositoryError,
    MatchNotFoundError,
    MatchStorageError,
)
from xgsim.schemas import ErrorResponse, SimulateByIdRequest, SimulateByIdResponse
from xgsim.services.match_index import (
    MatchIndexRepository,
    RestMatchIndexRepository,
    SqlMatchIndexRepository,
)
from xgsim.services.match_storage import SupabaseMatchStorage
from xgsim.services.simulate_by_id import (
    DefaultSimulationRunner,
    SimulateMatchByIdUseCase,
    SimulationRequest,
)

settings = get_settings()

# Logging setup
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

APP_NAME = "xG Match Simulator"
APP_VERSION = "1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info(
        "Starting %s (index backend=%s, default runs=%d, max runs=%d)",
        APP_NAME, settings.match_index_backend, settings.default_runs, settings.max_runs,
    )
    yield
    logger.info("Shutting down %s", APP_NAME)


app = FastAPI(
    title=APP_NAME,
    description="Monte Carlo scoreline distribution from shot-level xG",
    version=APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# DEPENDENCIES
# ============================================================================

def build_match_index_repository(cfg: Settings) -> MatchIndexRepository:
    if cfg.match_index_backend == INDEX_BACKEND_SQL:
        from xgsim.models import get_session_factory

        return SqlMatchIndexRepository(get_session_factory(cfg.database_url))
    return RestMatchIndexRepository.from_settings(cfg)


@lru_cache(maxsize=1)
def get_use_case() -> SimulateMatchByIdUseCase:
    return SimulateMatchByIdUseCase(
        match_index_repository=build_match_index_repository(settings),
        match_storage=SupabaseMatchStorage.from_settings(settings),
        simulation_runner=DefaultSimulationRunner(),
        default_runs=settings.default_runs,
    )


# ============================================================================
# ERROR HANDLERS
# ============================================================================

class BadRequestError(Exception):
    pass


class PayloadTooLargeError(Exception):
    pass


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(BadRequestError)
async def bad_request_handler(request: Request, exc: BadRequestError):
    logger.warning("Rejected request body on %s: %s", request.url.path, exc)
    return _error(400, str(exc))


@app.exception_handler(PayloadTooLargeError)
async def payload_too_large_handler(request: Request, exc: PayloadTooLargeError):
    logger.warning("Payload too large on %s", request.url.path)
    return _error(413, "Payload too large")


@app.exception_handler(MatchNotFoundError)
async def not_found_handler(request: Request, exc: MatchNotFoundError):
    return _error(404, str(exc))


@app.exception_handler(MalformedMatchJsonError)
async def malformed_handler(request: Request, exc: MalformedMatchJsonError):
    logger.warning("Malformed match JSON: %s", exc)
    return _error(422, str(exc))


@app.exception_handler(MatchIndexRepositoryError)
@app.exception_handler(MatchStorageError)
async def upstream_handler(request: Request, exc: Exception):
    logger.error("Upstream failure on %s: %s", request.url.path, exc)
    return _error(502, str(exc))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_handler(request: Request, exc: Exception):
    logger.error("Unexpected error handling %s: %s", request.url.path, exc, exc_info=True)
    return _error(500, "Internal Server Error")


# ============================================================================
# BODY PARSING
# ============================================================================

def _describe_validation_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(p) for p in err.get("loc", ()))
    kind = err.get("type", "")
    if kind == "json_invalid":
        return "Invalid JSON payload"
    if kind in ("model_type", "model_attributes_type", "dict_type"):
        return "Body must be an object"
    if kind == "missing":
        return f"Field '{loc}' is required"
    if loc == "runs":
        return "Field 'runs' must be a positive integer"
    if kind == "value_error":
        return str(err["ctx"]["error"])
    return f"Field '{loc}': {err.get('msg', 'invalid value')}"


async def read_simulate_request(request: Request) -> SimulateByIdRequest:
    content_type = request.headers.get("content-type")
    if content_type and not content_type.startswith("application/json"):
        raise BadRequestError("Content-Type must be application/json")

    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > settings.body_limit_bytes:
        raise PayloadTooLargeError()

    raw = await request.body()
    if len(raw) > settings.body_limit_bytes:
        raise PayloadTooLargeError()
    if not raw.strip():
        raw = b"{}"

    try:
        body = SimulateByIdRequest.model_validate_json(raw)
    except ValidationError as exc:
        raise BadRequestError(_describe_validation_error(exc)) from exc

    if body.runs is not None and body.runs > settings.max_runs:
        raise BadRequestError(f"Field 'runs' must be <= {settings.max_runs}")
    return body


# ============================================================================
# PUBLIC ENDPOINTS
# ============================================================================

@app.get("/")
async def root():
    """Health check"""
    return {
        "app": APP_NAME,
        "version": APP_VERSION,
        "status": "operational",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/health")
async def health_check():
    """Configuration health: are the upstream collaborators configured?"""
    health = {"status": "healthy", "match_index": settings.match_index_backend, "storage": "configured"}
    if not settings.supabase_url or not settings.supabase_service_key:
        health["status"] = "degraded"
        health["storage"] = "missing SUPABASE_URL / SUPABASE_SERVICE_KEY"
    return health


@app.post(
    "/simulate/by-id",
    response_model=SimulateByIdResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def simulate_by_id(
    request: Request,
    use_case: SimulateMatchByIdUseCase = Depends(get_use_case),
):
    """Simulate a stored match by id and return the top-5 scorelines."""
    body = await read_simulate_request(request)
    logger.info("Simulation requested: id=%s runs=%s seed=%s", body.id, body.runs, body.seed)

    result = await run_in_threadpool(
        use_case.execute,
        SimulationRequest(id=body.id, runs=body.runs, seed=body.seed),
    )
    return result.to_dict()


if __name__ == "__main__":
    import uvicorn
    import os

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
