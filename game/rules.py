"""Game rules and constants for Mafia Party."""

from dataclasses import dataclass
from enum import Enum


class Team(str, Enum):
    """Team alignment; also used as the winner tag."""

    VILLAGE = "village"
    MAFIA = "mafia"
    NEUTRAL = "neutral"


class NightAction(str, Enum):
    """What a role can do at night."""

    NONE = "none"
    KILL = "kill"
    HEAL = "heal"
    INVESTIGATE_TRUE = "investigate_true"
    INVESTIGATE_RANDOM = "investigate_random"


class WinTrigger(str, Enum):
    STANDARD = "standard"
    SELF_ELIMINATION = "self_elimination"


class Role(str, Enum):
    """Player roles in the game."""

    VILLAGER = "villager"
    MAFIA = "mafia"
    DOCTOR = "doctor"
    DETECTIVE = "detective"
    FAKE_DETECTIVE = "fake_detective"
    JESTER = "jester"
    BANDIT = "bandit"


class Phase(str, Enum):
    """Current game phase."""

    LOBBY = "lobby"
    NIGHT = "night"
    DAY = "day"
    FINISHED = "finished"


class GameStatus(str, Enum):
    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class ActionType(str, Enum):
    """Kind of submitted action."""

    KILL = "kill"
    HEAL = "heal"
    INVESTIGATE = "investigate"
    VOTE = "vote"


@dataclass(frozen=True)
class RoleSpec:
    """Catalog entry for one role."""

    role: Role
    team: Team
    night_action: NightAction = NightAction.NONE
    win_trigger: WinTrigger = WinTrigger.STANDARD

    @property
    def mafia_aligned(self) -> bool:
        return self.team == Team.MAFIA

    @property
    def action_type(self) -> ActionType | None:
        """Ledger action type this role submits at night, or None."""
        return NIGHT_ACTION_TYPES.get(self.night_action)


NIGHT_ACTION_TYPES = {
    NightAction.KILL: ActionType.KILL,
    NightAction.HEAL: ActionType.HEAL,
    NightAction.INVESTIGATE_TRUE: ActionType.INVESTIGATE,
    NightAction.INVESTIGATE_RANDOM: ActionType.INVESTIGATE,
}

ROLE_CATALOG: dict[Role, RoleSpec] = {
    Role.VILLAGER: RoleSpec(Role.VILLAGER, Team.VILLAGE),
    Role.MAFIA: RoleSpec(Role.MAFIA, Team.MAFIA, NightAction.KILL),
    Role.DOCTOR: RoleSpec(Role.DOCTOR, Team.VILLAGE, NightAction.HEAL),
    Role.DETECTIVE: RoleSpec(Role.DETECTIVE, Team.VILLAGE, NightAction.INVESTIGATE_TRUE),
    Role.FAKE_DETECTIVE: RoleSpec(Role.FAKE_DETECTIVE, Team.VILLAGE, NightAction.INVESTIGATE_RANDOM),
    Role.JESTER: RoleSpec(Role.JESTER, Team.NEUTRAL, win_trigger=WinTrigger.SELF_ELIMINATION),
    Role.BANDIT: RoleSpec(Role.BANDIT, Team.MAFIA),
}

# Which phase each action type is legal in
ACTION_PHASES = {
    ActionType.KILL: Phase.NIGHT,
    ActionType.HEAL: Phase.NIGHT,
    ActionType.INVESTIGATE: Phase.NIGHT,
    ActionType.VOTE: Phase.DAY,
}

# Role that fills any slot the deck does not cover
BASE_ROLE = Role.VILLAGER

# Minimum players to start
MIN_PLAYERS = 4

# Upper bound for a room
MAX_PLAYERS = 12

# Room size when the host does not choose one
DEFAULT_MAX_PLAYERS = 8

ROOM_CODE_LENGTH = 6


def _table(mafia: int, villager: int, doctor: int, detective: int, fake: int, jester: int, bandit: int) -> dict[Role, int]:
    return {
        Role.MAFIA: mafia,
        Role.VILLAGER: villager,
        Role.DOCTOR: doctor,
        Role.DETECTIVE: detective,
        Role.FAKE_DETECTIVE: fake,
        Role.JESTER: jester,
        Role.BANDIT: bandit,
    }


# Role counts used when the room's configuration does not match the player count
DEFAULT_ROLE_TABLES: dict[int, dict[Role, int]] = {
    4: _table(1, 1, 1, 1, 0, 0, 0),
    5: _table(1, 2, 1, 1, 0, 0, 0),
    6: _table(2, 2, 1, 1, 0, 0, 0),
    7: _table(2, 2, 1, 1, 0, 1, 0),
    8: _table(2, 2, 1, 1, 1, 1, 0),
    9: _table(2, 2, 1, 1, 1, 1, 1),
    10: _table(2, 3, 1, 1, 1, 1, 1),
    11: _table(3, 3, 1, 1, 1, 1, 1),
    12: _table(3, 4, 1, 1, 1, 1, 1),
}


def role_spec(role: Role) -> RoleSpec:
    """Return the catalog entry for role."""
    return ROLE_CATALOG[role]


def is_mafia_aligned(role: Role | None) -> bool:
    return role is not None and ROLE_CATALOG[role].mafia_aligned


def default_role_config(player_count: int) -> dict[Role, int]:
    """Default role counts for player_count; counts outside 4..12 use the 4-player table."""
    return dict(DEFAULT_ROLE_TABLES.get(player_count, DEFAULT_ROLE_TABLES[MIN_PLAYERS]))
