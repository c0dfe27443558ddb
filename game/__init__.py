"""Game core for Mafia Party."""

from game.engine import (
    GameController,
    PublicState,
    RosterEntry,
    SubmitResult,
    advance,
    assign_roles,
    pending_actors,
    start_game,
)
from game.rules import ActionType, GameStatus, Phase, Role, Team
from game.state import Action, GameState, Message, MessageCategory, Participant, Player
from game.store import GameStore, InMemoryGameStore
from game.win import evaluate_winner, is_game_over

__all__ = [
    "GameController",
    "PublicState",
    "RosterEntry",
    "SubmitResult",
    "advance",
    "assign_roles",
    "pending_actors",
    "start_game",
    "ActionType",
    "GameStatus",
    "Phase",
    "Role",
    "Team",
    "Action",
    "GameState",
    "Message",
    "MessageCategory",
    "Participant",
    "Player",
    "GameStore",
    "InMemoryGameStore",
    "evaluate_winner",
    "is_game_over",
]
