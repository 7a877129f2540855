"""Configuration management for the Vote API service."""
from dataclasses import dataclass
from typing import List, Tuple

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry policy used while waiting for the store at startup."""

    interval: float
    deadline: float


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service configuration
    SERVICE_NAME: str = "ashes-vote-backend"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Server configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # PostgreSQL configuration
    DATABASE_URL: str = "postgres://postgres:postgres@db:5432/votes?sslmode=disable"
    DB_POOL_MIN_SIZE: int = 1
    DB_POOL_MAX_SIZE: int = 10
    DB_COMMAND_TIMEOUT: float = 10.0
    DB_CREATE_SCHEMA: bool = True

    # Startup readiness wait
    DB_READY_INTERVAL_SECONDS: float = 0.5
    DB_READY_TIMEOUT_SECONDS: float = 30.0

    # Voting
    ALLOWED_TEAMS: List[str] = ["australia", "england"]

    # OpenTelemetry
    OTEL_ENABLED: bool = True
    OTEL_EXPORTER_OTLP_ENDPOINT: str = "otel-collector:4317"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    @field_validator("ALLOWED_TEAMS")
    @classmethod
    def validate_allowed_teams(cls, v):
        """Require a non-empty list of distinct, non-blank team names."""
        teams = [team.strip() for team in v]
        if not teams:
            raise ValueError("ALLOWED_TEAMS must name at least one team")
        if any(not team for team in teams):
            raise ValueError("ALLOWED_TEAMS cannot contain blank names")
        if len(set(teams)) != len(teams):
            raise ValueError("ALLOWED_TEAMS cannot contain duplicates")
        return teams

    @field_validator("DB_READY_INTERVAL_SECONDS", "DB_READY_TIMEOUT_SECONDS")
    @classmethod
    def validate_positive(cls, v):
        """Readiness timings must be positive."""
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @property
    def allowed_teams(self) -> Tuple[str, ...]:
        """Immutable, ordered set of teams a vote may select."""
        return tuple(self.ALLOWED_TEAMS)

    @property
    def retry_policy(self) -> RetryPolicy:
        """Readiness wait policy for the PostgreSQL connection."""
        return RetryPolicy(
            interval=self.DB_READY_INTERVAL_SECONDS,
            deadline=self.DB_READY_TIMEOUT_SECONDS,
        )

    @property
    def log_level(self) -> str:
        return "DEBUG" if self.DEBUG else self.LOG_LEVEL.upper()
