"""Vote ingestion and count aggregation."""
import logging
from typing import Iterable, List

from opentelemetry import trace

from .errors import InvalidTeamError
from .models import TeamCount

logger = logging.getLogger(__name__)


class VoteService:
    """
    Records votes for a fixed set of teams and summarizes them.

    Args:
        database: Store exposing insert_vote() and count_votes()
        allowed_teams: Ordered teams a vote may select
        tracer: Tracer used to wrap each vote write in a span
    """

    def __init__(self, database, allowed_teams: Iterable[str], tracer: trace.Tracer):
        self.database = database
        self.allowed_teams = tuple(allowed_teams)
        self.tracer = tracer

    def is_allowed(self, team: str) -> bool:
        return team in self.allowed_teams

    async def cast_vote(self, team: str):
        """
        Validate a vote and append it to the store.

        Raises:
            InvalidTeamError: If the team is not in the allowed set
            StoreError: If the write fails
        """
        if not self.is_allowed(team):
            raise InvalidTeamError(team)

        with self.tracer.start_as_current_span(
            "cast-vote", attributes={"vote.team": team}
        ):
            await self.database.insert_vote(team)

        logger.info(f"Vote recorded: team={team}")

    async def get_counts(self) -> List[TeamCount]:
        """
        Count votes for every allowed team.

        Teams without any vote are reported with a count of zero, in the
        order the allowed teams were configured.

        Raises:
            StoreError: If the query fails
        """
        counts = await self.database.count_votes()
        return [
            TeamCount(team=team, count=counts.get(team, 0))
            for team in self.allowed_teams
        ]
