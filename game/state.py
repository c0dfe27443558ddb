"""Game state types for Mafia Party."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from game.rules import ActionType, GameStatus, Phase, Role, Team, role_spec


@dataclass(frozen=True)
class Player:
    """Player identity, owned by the caller."""

    id: str
    name: str


@dataclass(frozen=True)
class Participant:
    """A player seated in one game."""

    player_id: str
    name: str
    role: Optional[Role] = None
    alive: bool = True
    is_host: bool = False
    last_healed_target: Optional[str] = None

    @property
    def team(self) -> Optional[Team]:
        return role_spec(self.role).team if self.role else None


@dataclass(frozen=True)
class Action:
    """One actor's submitted intent for a cycle."""

    actor_id: str
    type: ActionType
    target_id: str
    phase: Phase
    day_number: int


class MessageCategory(str, Enum):
    """Type of emitted message."""

    SYSTEM = "system"
    ACTION = "action"
    VOTE = "vote"
    DEATH = "death"
    SAVED = "saved"
    INVESTIGATION = "investigation"
    TIE = "tie"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class Message:
    """A narrative or system message. recipient_id None means visible to everyone."""

    body: str
    category: MessageCategory
    phase: Phase
    day_number: int
    author_id: Optional[str] = None
    recipient_id: Optional[str] = None

    def visible_to(self, player_id: Optional[str]) -> bool:
        return self.recipient_id is None or self.recipient_id == player_id


@dataclass
class GameState:
    """Full state of one game: room settings, roster, ledger and messages."""

    game_id: str
    room_code: str
    host_id: str
    name: str = ""
    max_players: int = 8
    role_config: dict[Role, int] = field(default_factory=dict)
    doctor_heal_restriction: bool = False
    status: GameStatus = GameStatus.WAITING
    phase: Phase = Phase.LOBBY
    day_number: int = 1
    winner: Optional[Team] = None
    participants: list[Participant] = field(default_factory=list)  # join order
    actions: list[Action] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)
    nights_resolved: int = 0

    @property
    def finished(self) -> bool:
        return self.status == GameStatus.FINISHED

    def get_alive_participants(self) -> list[Participant]:
        """Return list of alive participants, in join order."""
        return [p for p in self.participants if p.alive]

    def get_participant(self, player_id: str) -> Optional[Participant]:
        """Return participant by player id or None."""
        for p in self.participants:
            if p.player_id == player_id:
                return p
        return None

    def get_participants_by_role(self, role: Role) -> list[Participant]:
        """Return alive participants with the given role."""
        return [p for p in self.participants if p.alive and p.role == role]

    def update_participant(self, player_id: str, **changes) -> Participant:
        """Replace one participant with a copy carrying changes. Returns the new record."""
        for i, p in enumerate(self.participants):
            if p.player_id == player_id:
                self.participants[i] = replace(p, **changes)
                return self.participants[i]
        raise KeyError(player_id)

    def emit(
        self,
        body: str,
        category: MessageCategory = MessageCategory.SYSTEM,
        author_id: Optional[str] = None,
        recipient_id: Optional[str] = None,
    ) -> None:
        """Append a message stamped with the current phase and day."""
        self.messages.append(
            Message(
                body=body,
                category=category,
                phase=self.phase,
                day_number=self.day_number,
                author_id=author_id,
                recipient_id=recipient_id,
            )
        )

    def display_name(self, player_id: str) -> str:
        p = self.get_participant(player_id)
        return p.name if p else player_id
