"""Game persistence: repository interface and the in-memory implementation."""

import copy
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from threading import Lock
from typing import Iterator, Optional

from game.errors import GameNotFound
from game.state import GameState, Player

logger = logging.getLogger(__name__)


@dataclass
class Transaction:
    """Open write on one game. Replace or mutate ``state``; it is saved on clean exit."""

    state: GameState


class GameStore(ABC):
    """
    Storage for games and player identities.

    All writes to a game go through ``transaction``: the body works on a
    private copy and the copy replaces the stored game only if the body
    returns normally. Transactions on the same game are serialized.
    """

    @abstractmethod
    def create(self, state: GameState) -> None:
        ...

    @abstractmethod
    def get(self, game_id: str) -> Optional[GameState]:
        """Return a snapshot of the game, or None."""

    @abstractmethod
    def find_by_room_code(self, room_code: str) -> Optional[GameState]:
        ...

    @abstractmethod
    def transaction(self, game_id: str):
        """Context manager yielding a Transaction; raises GameNotFound."""

    @abstractmethod
    def delete(self, game_id: str) -> None:
        ...

    @abstractmethod
    def save_player(self, player: Player) -> None:
        ...

    @abstractmethod
    def get_player(self, player_id: str) -> Optional[Player]:
        ...


class InMemoryGameStore(GameStore):
    """Process-local store; one lock per game plus one for the registry."""

    def __init__(self) -> None:
        self._games: dict[str, GameState] = {}
        self._players: dict[str, Player] = {}
        self._game_locks: dict[str, Lock] = {}
        self._lock = Lock()

    def _game_lock(self, game_id: str) -> Lock:
        with self._lock:
            if game_id not in self._games:
                raise GameNotFound(f"Game {game_id} not found")
            return self._game_locks.setdefault(game_id, Lock())

    def create(self, state: GameState) -> None:
        with self._lock:
            if state.game_id in self._games:
                raise ValueError(f"Game {state.game_id} already exists")
            self._games[state.game_id] = copy.deepcopy(state)
            self._game_locks[state.game_id] = Lock()

    def get(self, game_id: str) -> Optional[GameState]:
        with self._lock:
            state = self._games.get(game_id)
            return copy.deepcopy(state) if state else None

    def find_by_room_code(self, room_code: str) -> Optional[GameState]:
        code = (room_code or "").strip().upper()
        with self._lock:
            for state in self._games.values():
                if state.room_code == code:
                    return copy.deepcopy(state)
        return None

    @contextmanager
    def transaction(self, game_id: str) -> Iterator[Transaction]:
        lock = self._game_lock(game_id)
        with lock:
            with self._lock:
                current = self._games.get(game_id)
            if current is None:
                raise GameNotFound(f"Game {game_id} not found")
            tx = Transaction(state=copy.deepcopy(current))
            yield tx
            with self._lock:
                if game_id in self._games:
                    self._games[game_id] = tx.state

    def delete(self, game_id: str) -> None:
        lock = self._game_lock(game_id)
        with lock:
            with self._lock:
                self._games.pop(game_id, None)
                self._game_locks.pop(game_id, None)
        logger.info("Game %s deleted", game_id)

    def save_player(self, player: Player) -> None:
        with self._lock:
            self._players[player.id] = player

    def get_player(self, player_id: str) -> Optional[Player]:
        with self._lock:
            return self._players.get(player_id)
