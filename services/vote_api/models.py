"""Pydantic models for request/response validation."""
from pydantic import BaseModel, ConfigDict, Field, StrictStr


class VoteRequest(BaseModel):
    """Vote submission request model."""

    team: StrictStr = Field(..., description="Team the vote is cast for")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "team": "australia"
            }
        }
    )


class TeamCount(BaseModel):
    """Number of votes recorded for one team."""

    team: str = Field(..., description="Team name")
    count: int = Field(..., ge=0, description="Number of votes for the team")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "team": "england",
                "count": 42
            }
        }
    )


class ErrorResponse(BaseModel):
    """Error response model."""

    detail: str = Field(..., description="Short error message")
