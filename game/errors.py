"""Error taxonomy for the game core.

Three families, each mapped to one HTTP status by the API layer:

- ``ValidationError``: malformed input; nothing changed.
- ``StateConflict``: the request breaks a phase, ownership or consensus rule;
  nothing changed and the caller may retry with corrected input.
- ``NotFoundError``: the game, player or participant does not exist.
"""


class GameError(Exception):
    """Base class for all game core errors."""


class ValidationError(GameError):
    pass


class StateConflict(GameError):
    pass


class NotFoundError(GameError):
    pass


class InvalidActor(StateConflict):
    """Actor is not a living participant or cannot perform the action."""


class DeadPlayerCannotVote(InvalidActor):
    pass


class InvalidPhase(StateConflict):
    """Action type is not legal in the current phase."""


class NotDayPhase(InvalidPhase):
    pass


class DuplicateAction(StateConflict):
    """Actor already acted in this cycle."""


class MafiaTargetMismatch(StateConflict):
    """A kill target differs from the target already locked in this night."""


class InvalidTarget(StateConflict):
    pass


class NotEnoughPlayers(StateConflict):
    pass


class GameAlreadyStarted(StateConflict):
    pass


class GameFinished(StateConflict):
    pass


class RoomFull(StateConflict):
    pass


class NotHost(StateConflict):
    pass


class ResolutionError(StateConflict):
    """Action data could not be resolved; the cycle is left untouched."""


class GameNotFound(NotFoundError):
    pass


class ParticipantNotFound(NotFoundError):
    pass


class PlayerNotFound(NotFoundError):
    pass
