"""
Team vote API.

Records votes for a fixed set of teams in PostgreSQL and reports
per-team counts over HTTP, with OpenTelemetry tracing of vote writes.
"""

from .config import RetryPolicy, Settings
from .errors import (
    DatabaseUnavailableError,
    InvalidTeamError,
    StoreError,
    VoteError,
)
from .models import TeamCount, VoteRequest
from .service import VoteService

__all__ = [
    'RetryPolicy',
    'Settings',
    'VoteError',
    'InvalidTeamError',
    'StoreError',
    'DatabaseUnavailableError',
    'TeamCount',
    'VoteRequest',
    'VoteService',
]

__version__ = '1.0.0'
