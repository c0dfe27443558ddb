"""Phase controller: lobby, role assignment, submissions and phase transitions."""

import copy
import logging
import random
import string
import uuid
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from game import ledger
from game.day import resolve_day
from game.errors import (
    GameAlreadyStarted,
    GameNotFound,
    NotEnoughPlayers,
    NotHost,
    ParticipantNotFound,
    ResolutionError,
    RoomFull,
    ValidationError,
)
from game.night import resolve_night
from game.rules import (
    BASE_ROLE,
    DEFAULT_MAX_PLAYERS,
    MAX_PLAYERS,
    MIN_PLAYERS,
    ROOM_CODE_LENGTH,
    ActionType,
    GameStatus,
    Phase,
    Role,
    Team,
    default_role_config,
    role_spec,
)
from game.state import GameState, Message, MessageCategory, Participant, Player
from game.store import GameStore
from game.win import end_game, evaluate_winner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of an accepted submission."""

    resolved: bool


@dataclass(frozen=True)
class PublicState:
    status: GameStatus
    phase: Phase
    day_number: int
    winner: Optional[Team] = None


@dataclass(frozen=True)
class RosterEntry:
    player_id: str
    name: str
    role: Optional[Role]
    is_alive: bool
    is_host: bool


# -- pure state transitions ---------------------------------------------------


def parse_role_config(raw: Optional[Mapping[Any, Any]]) -> dict[Role, int]:
    """Normalize a role -> count mapping, rejecting unknown roles and bad counts."""
    config: dict[Role, int] = {}
    for key, count in (raw or {}).items():
        try:
            role = Role(key)
        except ValueError as e:
            raise ValidationError(f"Unknown role: {key}") from e
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValidationError(f"Role count for {role.value} must be a non-negative integer")
        config[role] = count
    return config


def build_deck(role_config: Mapping[Role, int], player_count: int) -> list[Role]:
    """Role multiset for player_count players, falling back to the default table."""
    if sum(role_config.values()) != player_count:
        role_config = default_role_config(player_count)
    deck: list[Role] = []
    for role, count in role_config.items():
        deck.extend([role] * count)
    return deck


def assign_roles(player_count: int, role_config: Mapping[Role, int], rng: random.Random) -> list[Role]:
    """Shuffled roles in seat order; seats past the deck get the base role."""
    deck = build_deck(role_config, player_count)
    rng.shuffle(deck)
    return [deck[i] if i < len(deck) else BASE_ROLE for i in range(player_count)]


def start_game(state: GameState, rng: random.Random) -> GameState:
    """Deal roles and open the first night. Returns new state."""
    if state.status != GameStatus.WAITING:
        raise GameAlreadyStarted("The game has already started")
    if len(state.participants) < MIN_PLAYERS:
        raise NotEnoughPlayers(f"Need at least {MIN_PLAYERS} players to start")
    state = copy.deepcopy(state)
    roles = assign_roles(len(state.participants), state.role_config, rng)
    state.participants = [
        Participant(
            player_id=p.player_id,
            name=p.name,
            role=role,
            alive=True,
            is_host=p.is_host,
        )
        for p, role in zip(state.participants, roles)
    ]
    state.status = GameStatus.IN_PROGRESS
    state.phase = Phase.NIGHT
    state.day_number = 1
    state.nights_resolved = 0
    state.actions = []
    state.emit("The game has started! Night phase begins.")
    for p in state.participants:
        state.emit(f"Your role is {p.role.value}.", recipient_id=p.player_id)
    return state


def pending_actors(state: GameState) -> list[str]:
    """
    Living players the current cycle still waits on.

    At night every living heal/investigate holder must act; the kill is
    team-wide, so once any killer has locked the target the rest of the
    mafia are no longer waited on. By day every living player must vote.
    """
    if state.phase not in (Phase.NIGHT, Phase.DAY):
        return []
    cycle = ledger.current_cycle(state)
    acted = {a.actor_id for a in cycle}
    alive = state.get_alive_participants()
    if state.phase == Phase.DAY:
        return [p.player_id for p in alive if p.player_id not in acted]

    kill_locked = any(a.type == ActionType.KILL for a in cycle)
    pending = []
    for p in alive:
        action_type = role_spec(p.role).action_type
        if action_type is None or p.player_id in acted:
            continue
        if action_type == ActionType.KILL and kill_locked:
            continue
        pending.append(p.player_id)
    return pending


def cycle_complete(state: GameState) -> bool:
    return state.phase in (Phase.NIGHT, Phase.DAY) and not pending_actors(state)


def _check_win(state: GameState) -> bool:
    winner = evaluate_winner(state.participants)
    if winner is None:
        return False
    end_game(state, winner)
    logger.info("Game %s finished; winner: %s", state.game_id, winner.value)
    return True


def advance(state: GameState, rng: random.Random) -> GameState:
    """
    Resolve the current cycle if everyone it waits on has acted, then either
    end the game or flip to the next phase. A night that opens with no one
    able to act is resolved straight away. Returns new state (or state
    unchanged when the cycle is still open).
    """
    if not cycle_complete(state):
        return state
    if state.phase == Phase.NIGHT:
        state = resolve_night(state, rng)
        logger.info("Game %s: night resolved", state.game_id)
        if not _check_win(state):
            state.phase = Phase.DAY
            state.emit(f"Day {state.day_number} begins. Discuss and vote to eliminate a suspect.")
        return state

    state = resolve_day(state)
    logger.info("Game %s: day %d resolved", state.game_id, state.day_number)
    if state.finished or _check_win(state):
        return state
    state.phase = Phase.NIGHT
    state.emit("Night falls. Those with night actions, choose your targets.")
    # resolves at once when no living player holds a night action
    return advance(state, rng)


# -- controller ---------------------------------------------------------------


class GameController:
    """
    Runs every game operation inside a store transaction so that one game's
    submissions, resolutions and transitions never interleave.
    """

    def __init__(self, store: GameStore, rng: Optional[random.Random] = None) -> None:
        self.store = store
        self.rng = rng or random.Random()

    def get_state(self, game_id: str) -> GameState:
        """Snapshot of the full game; raises GameNotFound."""
        state = self.store.get(game_id)
        if state is None:
            raise GameNotFound(f"Game {game_id} not found")
        return state

    def _room_code(self) -> str:
        alphabet = string.ascii_uppercase + string.digits
        while True:
            code = "".join(self.rng.choice(alphabet) for _ in range(ROOM_CODE_LENGTH))
            if self.store.find_by_room_code(code) is None:
                return code

    # lobby

    def create_game(
        self,
        host: Player,
        name: str = "",
        max_players: int = DEFAULT_MAX_PLAYERS,
        role_config: Optional[Mapping[Any, Any]] = None,
        doctor_heal_restriction: bool = False,
    ) -> GameState:
        """Open a room with host seated as the first participant."""
        if not host or not host.id:
            raise ValidationError("A host player is required")
        if not MIN_PLAYERS <= max_players <= MAX_PLAYERS:
            raise ValidationError(f"max_players must be between {MIN_PLAYERS} and {MAX_PLAYERS}")
        state = GameState(
            game_id=str(uuid.uuid4()),
            room_code=self._room_code(),
            host_id=host.id,
            name=name or f"{host.name}'s game",
            max_players=max_players,
            role_config=parse_role_config(role_config),
            doctor_heal_restriction=doctor_heal_restriction,
        )
        state.participants.append(Participant(player_id=host.id, name=host.name, is_host=True))
        state.emit(f"{host.name} created the game.")
        self.store.create(state)
        logger.info("Game %s created by %s (room %s)", state.game_id, host.id, state.room_code)
        return state

    def join_game(self, room_code: str, player: Player) -> GameState:
        """Seat player in the room; joining twice is a no-op."""
        found = self.store.find_by_room_code(room_code)
        if found is None:
            raise GameNotFound(f"No game with room code {room_code}")
        with self.store.transaction(found.game_id) as tx:
            state = tx.state
            if state.get_participant(player.id) is not None:
                return state
            if state.status != GameStatus.WAITING:
                raise GameAlreadyStarted("The game has already started")
            if len(state.participants) >= state.max_players:
                raise RoomFull("The room is full")
            state.participants.append(Participant(player_id=player.id, name=player.name))
            state.emit(f"{player.name} joined the game.")
        logger.info("Player %s joined game %s", player.id, state.game_id)
        return tx.state

    def leave_game(self, game_id: str, player_id: str) -> Optional[GameState]:
        """Remove a player from a waiting room. Returns None when the room emptied and was deleted."""
        with self.store.transaction(game_id) as tx:
            state = tx.state
            leaving = state.get_participant(player_id)
            if leaving is None:
                raise ParticipantNotFound(f"{player_id} is not in this game")
            if state.status != GameStatus.WAITING:
                raise GameAlreadyStarted("Players cannot leave a game in progress")
            state.participants = [p for p in state.participants if p.player_id != player_id]
            state.emit(f"{leaving.name} left the game.")
            if leaving.is_host and state.participants:
                new_host = state.participants[0]
                state.update_participant(new_host.player_id, is_host=True)
                state.host_id = new_host.player_id
                state.emit(f"{new_host.name} is now the host.")
            empty = not state.participants
        if empty:
            self.store.delete(game_id)
            return None
        return tx.state

    def delete_game(self, game_id: str, requester_id: str) -> None:
        state = self.get_state(game_id)
        if state.host_id != requester_id:
            raise NotHost("Only the host can delete the game")
        self.store.delete(game_id)

    def start_game(self, game_id: str, requester_id: Optional[str] = None) -> GameState:
        """Assign roles and begin night 1; a night nobody can act in resolves at once."""
        with self.store.transaction(game_id) as tx:
            if requester_id is not None and tx.state.host_id != requester_id:
                raise NotHost("Only the host can start the game")
            tx.state, _ = self._resolve(start_game(tx.state, self.rng))
        logger.info("Game %s started with %d players", game_id, len(tx.state.participants))
        return tx.state

    # play

    def _resolve(self, state: GameState) -> tuple[GameState, bool]:
        phase, day = state.phase, state.day_number
        try:
            new_state = advance(state, self.rng)
        except ResolutionError:
            logger.warning("Game %s: %s %d resolution failed; cycle left intact", state.game_id, phase.value, day)
            raise
        return new_state, new_state is not state

    def submit_night_action(self, game_id: str, actor_id: str, action_type: Any, target_id: str) -> SubmitResult:
        """Record a kill, heal or investigation; resolves the night once everyone has acted."""
        action_type = ledger.parse_action_type(action_type)
        if action_type == ActionType.VOTE:
            raise ValidationError("Votes go through submit_vote")
        with self.store.transaction(game_id) as tx:
            ledger.submit(tx.state, actor_id, action_type, target_id)
            tx.state.emit(
                "You have chosen your target for the night.",
                MessageCategory.ACTION,
                recipient_id=actor_id,
            )
            tx.state, resolved = self._resolve(tx.state)
        return SubmitResult(resolved=resolved)

    def submit_vote(self, game_id: str, actor_id: str, target_id: str) -> SubmitResult:
        """Record a day vote; resolves the day once every living player has voted."""
        with self.store.transaction(game_id) as tx:
            ledger.submit(tx.state, actor_id, ActionType.VOTE, target_id)
            tx.state.emit(
                f"{tx.state.display_name(actor_id)} voted to eliminate {tx.state.display_name(target_id)}.",
                MessageCategory.VOTE,
                author_id=actor_id,
            )
            tx.state, resolved = self._resolve(tx.state)
        return SubmitResult(resolved=resolved)

    def change_vote(self, game_id: str, actor_id: str, target_id: str) -> SubmitResult:
        with self.store.transaction(game_id) as tx:
            ledger.replace_vote(tx.state, actor_id, target_id)
            tx.state.emit(
                f"{tx.state.display_name(actor_id)} changed their vote to {tx.state.display_name(target_id)}.",
                MessageCategory.VOTE,
                author_id=actor_id,
            )
            tx.state, resolved = self._resolve(tx.state)
        return SubmitResult(resolved=resolved)

    # views

    def get_public_state(self, game_id: str) -> PublicState:
        state = self.get_state(game_id)
        return PublicState(
            status=state.status,
            phase=state.phase,
            day_number=state.day_number,
            winner=state.winner,
        )

    def get_roster(self, game_id: str) -> list[RosterEntry]:
        """Participants in join order; roles are None until they are dealt."""
        state = self.get_state(game_id)
        return [
            RosterEntry(
                player_id=p.player_id,
                name=p.name,
                role=p.role if state.status != GameStatus.WAITING else None,
                is_alive=p.alive,
                is_host=p.is_host,
            )
            for p in state.participants
        ]

    def get_visible_messages(self, game_id: str, requester_id: Optional[str]) -> list[Message]:
        state = self.get_state(game_id)
        return [m for m in state.messages if m.visible_to(requester_id)]

    def pending_actors(self, game_id: str) -> list[str]:
        return pending_actors(self.get_state(game_id))
