"""FastAPI app: players, rooms, night actions, votes and game views."""

import logging
import random
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.models import (
    GameCreateRequest,
    GameStateResponse,
    JoinRequest,
    MessagePublic,
    NightActionRequest,
    ParticipantPublic,
    PlayerActionRequest,
    PlayerCreateRequest,
    PlayerResponse,
    SubmitResponse,
    VoteRequest,
    game_state_to_public,
    message_to_public,
    roster_to_public,
)
from api.settings import get_cors_origins, get_default_max_players, get_log_level, get_random_seed
from game.engine import GameController, SubmitResult
from game.errors import GameError, NotFoundError, PlayerNotFound, StateConflict, ValidationError
from game.rules import GameStatus
from game.state import Player
from game.store import InMemoryGameStore

logging.basicConfig(level=get_log_level())
logger = logging.getLogger(__name__)

app = FastAPI(title="Mafia Party API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

store = InMemoryGameStore()
controller = GameController(store, rng=random.Random(get_random_seed()))


def _status_for(exc: GameError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, StateConflict):
        return 409
    return 400


@app.exception_handler(GameError)
async def game_error_handler(request: Request, exc: GameError) -> JSONResponse:
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=_status_for(exc),
        content={"detail": str(exc), "error": type(exc).__name__},
    )


def _player(player_id: str) -> Player:
    player = store.get_player(player_id)
    if player is None:
        raise PlayerNotFound(f"Player {player_id} not found")
    return player


def _state_response(game_id: str) -> GameStateResponse:
    state = controller.get_state(game_id)
    return game_state_to_public(state, controller.pending_actors(game_id))


def _submit_response(game_id: str, result: SubmitResult) -> SubmitResponse:
    return SubmitResponse(resolved=result.resolved, state=_state_response(game_id))


@app.post("/players", response_model=PlayerResponse, tags=["Players"], summary="Create player")
def create_player(body: PlayerCreateRequest):
    """Register a player identity. Returns its id."""
    player = Player(id=str(uuid.uuid4()), name=body.username)
    store.save_player(player)
    return PlayerResponse(id=player.id, username=player.name)


@app.post("/games", response_model=GameStateResponse, tags=["Games"], summary="Create game")
def create_game(body: GameCreateRequest):
    """Open a room hosted by host_id."""
    host = _player(body.host_id)
    state = controller.create_game(
        host,
        name=body.name,
        max_players=body.max_players or get_default_max_players(),
        role_config=body.role_config,
        doctor_heal_restriction=body.doctor_heal_restriction,
    )
    return game_state_to_public(state)


@app.post("/games/join", response_model=GameStateResponse, tags=["Games"], summary="Join game by room code")
def join_game(body: JoinRequest):
    state = controller.join_game(body.room_code, _player(body.player_id))
    return game_state_to_public(state)


@app.post("/games/{game_id}/leave", response_model=GameStateResponse | None, tags=["Games"], summary="Leave game")
def leave_game(game_id: str, body: PlayerActionRequest):
    """Leave a room that has not started. Returns null when the room emptied and was removed."""
    state = controller.leave_game(game_id, body.player_id)
    return game_state_to_public(state) if state else None


@app.delete("/games/{game_id}", tags=["Games"], summary="Delete game")
def delete_game(game_id: str, player_id: str):
    """Host-only; removes the game with its roster, actions and messages."""
    controller.delete_game(game_id, player_id)
    return {"deleted": game_id}


@app.post("/games/{game_id}/start", response_model=GameStateResponse, tags=["Games"], summary="Start game")
def start_game_endpoint(game_id: str, body: PlayerActionRequest):
    """Host starts the game: roles are dealt and the first night begins."""
    controller.start_game(game_id, requester_id=body.player_id)
    return _state_response(game_id)


@app.get("/games/{game_id}", response_model=GameStateResponse, tags=["Games"], summary="Get game state")
def get_game(game_id: str):
    return _state_response(game_id)


@app.get(
    "/games/{game_id}/participants",
    response_model=list[ParticipantPublic],
    tags=["Games"],
    summary="Get roster",
)
def get_participants(game_id: str, player_id: str | None = None):
    """Roster in join order; living players' roles are shown only to themselves until the game ends."""
    finished = controller.get_public_state(game_id).status == GameStatus.FINISHED
    return roster_to_public(controller.get_roster(game_id), requester_id=player_id, reveal_all=finished)


@app.get("/games/{game_id}/messages", response_model=list[MessagePublic], tags=["Games"], summary="Get messages")
def get_messages(game_id: str, player_id: str | None = None):
    """Public messages plus those addressed to player_id, oldest first."""
    names = {r.player_id: r.name for r in controller.get_roster(game_id)}
    return [message_to_public(m, names) for m in controller.get_visible_messages(game_id, player_id)]


@app.post("/games/{game_id}/actions", response_model=SubmitResponse, tags=["Play"], summary="Submit night action")
def submit_night_action(game_id: str, body: NightActionRequest):
    result = controller.submit_night_action(game_id, body.player_id, body.action_type, body.target_id)
    return _submit_response(game_id, result)


@app.post("/games/{game_id}/vote", response_model=SubmitResponse, tags=["Play"], summary="Vote")
def submit_vote(game_id: str, body: VoteRequest):
    result = controller.submit_vote(game_id, body.player_id, body.target_id)
    return _submit_response(game_id, result)


@app.put("/games/{game_id}/vote", response_model=SubmitResponse, tags=["Play"], summary="Change vote")
def change_vote(game_id: str, body: VoteRequest):
    result = controller.change_vote(game_id, body.player_id, body.target_id)
    return _submit_response(game_id, result)


@app.get("/health", tags=["System"], summary="Health check")
def health():
    return {"status": "ok"}
