"""HTTP request and response models."""

from pydantic import BaseModel, Field

__all__ = [
    "CreateGameRequest",
    "CreateGameResponse",
    "GameInfo",
    "PhaseInfo",
    "PhaseListResponse",
    "PlayerInfo",
    "RequirementInfo",
]


class CreateGameRequest(BaseModel):
    """Request to host a new table."""

    host_name: str = Field(default="Host", min_length=1, max_length=40)
    player_id: str | None = Field(default=None, max_length=64)
    theme: str | None = Field(default=None, max_length=100)


class CreateGameResponse(BaseModel):
    """Response after creating a table."""

    game_id: str
    host_id: str


class PlayerInfo(BaseModel):
    """Public player information (no hand contents)."""

    id: str
    name: str
    is_bot: bool
    phase: int
    score: int
    has_laid_down: bool
    card_count: int


class GameInfo(BaseModel):
    """Public game summary."""

    id: str
    state: str
    round_number: int
    theme: str | None
    lobby: list[str]
    players: list[PlayerInfo]
    current_player_id: str | None
    deck_size: int


class RequirementInfo(BaseModel):
    """Phase requirement."""

    kind: str
    count: int


class PhaseInfo(BaseModel):
    """Phase definition."""

    id: int
    name: str
    description: str
    requirements: list[RequirementInfo]


class PhaseListResponse(BaseModel):
    """Response for the phase list endpoint."""

    phases: list[PhaseInfo]
