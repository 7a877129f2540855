"""Exceptions raised by the vote service."""


class VoteError(Exception):
    """Base exception for the vote service."""
    pass


class InvalidTeamError(VoteError):
    """Raised when a vote names a team outside the allowed set."""

    def __init__(self, team):
        self.team = team
        super().__init__(f"invalid team: {team!r}")


class StoreError(VoteError):
    """Raised when a PostgreSQL read or write fails."""
    pass


class DatabaseUnavailableError(StoreError):
    """Raised when PostgreSQL does not become reachable before the deadline."""
    pass
