"""Pydantic request/response models for the API."""

from pydantic import BaseModel, Field, field_validator

from game.engine import RosterEntry
from game.rules import MAX_PLAYERS, MIN_PLAYERS
from game.state import GameState, Message

# Validation constants (no magic numbers in validation)
MAX_USERNAME_LENGTH = 30
MAX_GAME_NAME_LENGTH = 60


class PlayerCreateRequest(BaseModel):
    """Body for POST /players."""

    username: str = Field(..., min_length=1, max_length=MAX_USERNAME_LENGTH)

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("username must not be blank")
        return v


class PlayerResponse(BaseModel):
    id: str
    username: str


class GameCreateRequest(BaseModel):
    """Body for POST /games."""

    host_id: str = Field(..., min_length=1)
    name: str = Field(default="", max_length=MAX_GAME_NAME_LENGTH)
    max_players: int | None = Field(default=None, ge=MIN_PLAYERS, le=MAX_PLAYERS)
    role_config: dict[str, int] | None = Field(
        default=None,
        description="Role name -> count. If the total does not match the player count at start, a default table is used.",
    )
    doctor_heal_restriction: bool = Field(
        default=False,
        description="If true, a doctor may not heal the same player two nights in a row.",
    )


class JoinRequest(BaseModel):
    """Body for POST /games/join."""

    room_code: str = Field(..., min_length=1)
    player_id: str = Field(..., min_length=1)


class PlayerActionRequest(BaseModel):
    """Body for start / leave / delete, which only need the acting player."""

    player_id: str = Field(..., min_length=1)


class NightActionRequest(BaseModel):
    """Body for POST /games/{id}/actions."""

    player_id: str = Field(..., min_length=1)
    action_type: str = Field(..., pattern="^(kill|heal|investigate)$")
    target_id: str = Field(..., min_length=1)


class VoteRequest(BaseModel):
    """Body for POST and PUT /games/{id}/vote."""

    player_id: str = Field(..., min_length=1)
    target_id: str = Field(..., min_length=1)


class ParticipantPublic(BaseModel):
    """Participant as shown to a requester: living players' roles stay hidden except their own."""

    player_id: str
    name: str
    alive: bool
    is_host: bool
    role: str | None = Field(default=None, description="Set for the requester, for dead players, and once the game is over")


class MessagePublic(BaseModel):
    body: str
    category: str
    phase: str
    day_number: int
    author_id: str | None = None
    author_name: str | None = None
    private: bool = False


class GameStateResponse(BaseModel):
    """Public game state for GET /games/{id}."""

    game_id: str
    room_code: str
    name: str
    host_id: str
    status: str
    phase: str
    day_number: int
    max_players: int
    player_count: int
    doctor_heal_restriction: bool
    winner: str | None = Field(default=None, description="village, mafia or neutral when the game is over")
    pending_player_ids: list[str] = Field(
        default_factory=list,
        description="Living players the current night or day is still waiting on",
    )


class SubmitResponse(BaseModel):
    resolved: bool = Field(description="True when this submission completed the cycle and it was resolved")
    state: GameStateResponse


def game_state_to_public(state: GameState, pending_player_ids: list[str] | None = None) -> GameStateResponse:
    return GameStateResponse(
        game_id=state.game_id,
        room_code=state.room_code,
        name=state.name,
        host_id=state.host_id,
        status=state.status.value,
        phase=state.phase.value,
        day_number=state.day_number,
        max_players=state.max_players,
        player_count=len(state.participants),
        doctor_heal_restriction=state.doctor_heal_restriction,
        winner=state.winner.value if state.winner else None,
        pending_player_ids=pending_player_ids or [],
    )


def roster_to_public(
    roster: list[RosterEntry],
    requester_id: str | None = None,
    reveal_all: bool = False,
) -> list[ParticipantPublic]:
    """Hide roles of living players other than the requester unless reveal_all."""
    public = []
    for r in roster:
        visible = reveal_all or not r.is_alive or r.player_id == requester_id
        public.append(
            ParticipantPublic(
                player_id=r.player_id,
                name=r.name,
                alive=r.is_alive,
                is_host=r.is_host,
                role=r.role.value if (r.role and visible) else None,
            )
        )
    return public


def message_to_public(message: Message, names: dict[str, str]) -> MessagePublic:
    return MessagePublic(
        body=message.body,
        category=message.category.value,
        phase=message.phase.value,
        day_number=message.day_number,
        author_id=message.author_id,
        author_name=names.get(message.author_id) if message.author_id else None,
        private=message.recipient_id is not None,
    )
