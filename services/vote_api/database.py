"""PostgreSQL database connection and queries."""
import asyncio
import logging
from typing import Dict, Optional

import asyncpg

from .config import RetryPolicy
from .errors import DatabaseUnavailableError, StoreError

logger = logging.getLogger(__name__)

# Failures that mean PostgreSQL could not be reached or refused the statement
DATABASE_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)

CREATE_VOTES_TABLE = """
    CREATE TABLE IF NOT EXISTS votes (
        id SERIAL PRIMARY KEY,
        team TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
"""


class Database:
    """Async PostgreSQL database manager for the append-only votes table."""

    def __init__(
        self,
        dsn: str,
        min_size: int = 1,
        max_size: int = 10,
        command_timeout: float = 10.0,
    ):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self.pool: Optional[asyncpg.Pool] = None

    @classmethod
    def from_settings(cls, settings) -> "Database":
        return cls(
            settings.DATABASE_URL,
            min_size=settings.DB_POOL_MIN_SIZE,
            max_size=settings.DB_POOL_MAX_SIZE,
            command_timeout=settings.DB_COMMAND_TIMEOUT,
        )

    async def _connect(self):
        """Create the pool and verify it with a round-trip."""
        pool = await asyncpg.create_pool(
            self.dsn,
            min_size=self.min_size,
            max_size=self.max_size,
            command_timeout=self.command_timeout,
        )
        try:
            async with pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
        except BaseException:
            await pool.close()
            raise
        self.pool = pool

    async def initialize(self, retry_policy: RetryPolicy):
        """
        Initialize the connection pool, waiting for PostgreSQL to come up.

        Args:
            retry_policy: Interval between attempts and overall deadline

        Raises:
            DatabaseUnavailableError: If PostgreSQL is still unreachable
                once the deadline has passed
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + retry_policy.deadline
        attempt = 0

        while True:
            attempt += 1
            remaining = deadline - loop.time()
            try:
                # A hanging connect counts as a failed attempt once the deadline passes
                await asyncio.wait_for(self._connect(), timeout=max(remaining, 0))
                logger.info(
                    f"PostgreSQL connection pool initialized after {attempt} attempt(s)"
                )
                return
            except DATABASE_ERRORS as e:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    logger.error(
                        f"PostgreSQL unreachable after {attempt} attempts "
                        f"({retry_policy.deadline}s): {e}"
                    )
                    raise DatabaseUnavailableError(
                        f"PostgreSQL unreachable after {retry_policy.deadline}s"
                    ) from e
                logger.warning(f"PostgreSQL not ready (attempt {attempt}): {e}")
                await asyncio.sleep(min(retry_policy.interval, remaining))

    def _require_pool(self) -> asyncpg.Pool:
        if self.pool is None:
            raise StoreError("Database pool is not initialized")
        return self.pool

    async def ensure_schema(self):
        """Create the votes table if it does not exist yet."""
        try:
            async with self._require_pool().acquire() as conn:
                await conn.execute(CREATE_VOTES_TABLE)
                logger.info("Votes table ready")
        except DATABASE_ERRORS as e:
            logger.error(f"Error creating votes table: {e}")
            raise StoreError("Failed to create votes table") from e

    async def insert_vote(self, team: str):
        """
        Append one vote row.

        Args:
            team: Team name, already validated by the caller
        """
        try:
            async with self._require_pool().acquire() as conn:
                await conn.execute("INSERT INTO votes (team) VALUES ($1)", team)
        except DATABASE_ERRORS as e:
            logger.error(f"Error inserting vote for team {team}: {e}")
            raise StoreError("Failed to record vote") from e

    async def count_votes(self) -> Dict[str, int]:
        """
        Count stored votes per team.

        Returns:
            Dictionary mapping team name to number of rows
        """
        try:
            async with self._require_pool().acquire() as conn:
                rows = await conn.fetch(
                    "SELECT team, COUNT(*) AS count FROM votes GROUP BY team"
                )
                return {row["team"]: row["count"] for row in rows}
        except DATABASE_ERRORS as e:
            logger.error(f"Error counting votes: {e}")
            raise StoreError("Failed to count votes") from e

    async def close(self):
        """Close database connection pool."""
        if self.pool is None:
            return
        try:
            await self.pool.close()
            logger.info("PostgreSQL connection pool closed successfully")
        except DATABASE_ERRORS as e:
            logger.error(f"Error closing PostgreSQL connection pool: {e}")
        finally:
            self.pool = None
