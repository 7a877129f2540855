"""
FastAPI application for the team vote API.

Routes:
    GET  /health  - liveness probe
    POST /vote    - record one vote for an allowed team
    GET  /counts  - vote counts for every allowed team
    GET  /metrics - Prometheus metrics
"""
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Request, status
from fastapi.responses import PlainTextResponse, Response
from opentelemetry.sdk.trace import TracerProvider
from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest
from pydantic import ValidationError

from .config import Settings
from .database import Database
from .errors import InvalidTeamError, StoreError
from .models import ErrorResponse, TeamCount, VoteRequest
from .service import VoteService
from .tracing import TRACER_NAME, init_tracing

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

# Prometheus metrics
vote_counter = Counter(
    "votes_cast_total",
    "Total number of votes recorded",
    ["team"]
)
vote_errors = Counter(
    "vote_errors_total",
    "Total number of vote submission errors",
    ["error_type"]
)


def configure_logging(settings: Settings):
    """Configure root logging from settings."""
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)


def build_router(service: VoteService) -> APIRouter:
    """Build the API routes bound to a vote service."""
    router = APIRouter()

    @router.get("/health", response_class=PlainTextResponse)
    async def health_check() -> str:
        """Liveness probe; healthy as long as the process is serving."""
        return "ok"

    @router.post(
        "/vote",
        status_code=status.HTTP_201_CREATED,
        response_class=Response,
        responses={
            400: {"model": ErrorResponse, "description": "Malformed body or invalid team"},
            500: {"model": ErrorResponse, "description": "Internal server error"}
        }
    )
    async def submit_vote(request: Request) -> Response:
        """
        Record a vote.

        - **team**: one of the allowed teams

        Returns 201 with an empty body.
        """
        try:
            payload = await request.json()
            vote = VoteRequest.model_validate(payload)
        except (ValueError, ValidationError) as e:
            vote_errors.labels(error_type="bad_request").inc()
            logger.debug(f"Rejected undecodable vote body: {e}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="bad request"
            )

        try:
            await service.cast_vote(vote.team)
        except InvalidTeamError as e:
            vote_errors.labels(error_type="invalid_team").inc()
            logger.info(f"Rejected vote: {e}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="invalid team"
            )
        except StoreError:
            vote_errors.labels(error_type="store_error").inc()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal server error"
            )
        except Exception as e:
            vote_errors.labels(error_type="internal_error").inc()
            logger.exception(f"Error submitting vote: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal server error"
            )

        vote_counter.labels(team=vote.team).inc()
        return Response(status_code=status.HTTP_201_CREATED)

    @router.get(
        "/counts",
        response_model=List[TeamCount],
        responses={
            500: {"model": ErrorResponse, "description": "Internal server error"}
        }
    )
    async def get_counts() -> List[TeamCount]:
        """Vote counts for every allowed team, zero when no votes exist."""
        try:
            return await service.get_counts()
        except Exception as e:
            logger.error(f"Error getting vote counts: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal server error"
            )

    @router.get("/metrics", include_in_schema=False)
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(
            content=generate_latest(),
            media_type=CONTENT_TYPE_LATEST
        )

    return router


def create_app(
    settings: Optional[Settings] = None,
    database=None,
    tracer_provider: Optional[TracerProvider] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Application settings, read from the environment if omitted
        database: Vote store; a PostgreSQL Database is built from settings if omitted
        tracer_provider: Tracer provider; an OTLP-exporting one is built if omitted

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = Settings()
    if database is None:
        database = Database.from_settings(settings)
    if tracer_provider is None:
        tracer_provider = init_tracing(settings)

    service = VoteService(
        database,
        settings.allowed_teams,
        tracer_provider.get_tracer(TRACER_NAME),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Wait for PostgreSQL on startup; release resources on shutdown."""
        logger.info(f"Starting {settings.SERVICE_NAME} service...")

        try:
            await database.initialize(settings.retry_policy)
            if settings.DB_CREATE_SCHEMA:
                await database.ensure_schema()
            logger.info(f"{settings.SERVICE_NAME} started successfully")
        except Exception as e:
            logger.error(f"Failed to start {settings.SERVICE_NAME}: {e}")
            tracer_provider.shutdown()
            raise

        yield

        logger.info(f"Shutting down {settings.SERVICE_NAME} service...")
        await database.close()
        tracer_provider.shutdown()
        logger.info(f"{settings.SERVICE_NAME} shut down successfully")

    app = FastAPI(
        title="Team Vote API",
        description="Records votes for a fixed set of teams and reports counts",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.vote_service = service

    @app.middleware("http")
    async def cors_middleware(request: Request, call_next):
        """Add permissive CORS headers; answer every pre-flight directly."""
        if request.method == "OPTIONS":
            response = Response(status_code=status.HTTP_200_OK)
        else:
            response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    app.include_router(build_router(service))
    return app


def run():
    """Run the API with uvicorn."""
    import uvicorn

    settings = Settings()
    configure_logging(settings)
    logger.info(f"listening on {settings.HOST}:{settings.PORT}")

    uvicorn.run(
        create_app(settings),
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run()
