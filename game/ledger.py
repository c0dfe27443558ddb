"""Action ledger: per-cycle action recording with validation.

Functions here mutate the ``GameState`` they are given; callers pass the
working copy of an open store transaction.
"""

from game.errors import (
    DeadPlayerCannotVote,
    DuplicateAction,
    GameFinished,
    InvalidActor,
    InvalidPhase,
    InvalidTarget,
    MafiaTargetMismatch,
    NotDayPhase,
    ValidationError,
)
from game.rules import ACTION_PHASES, ActionType, NightAction, Phase, role_spec
from game.state import Action, GameState, Participant


def list_by_cycle(state: GameState, phase: Phase, day_number: int) -> list[Action]:
    """All actions recorded for one cycle, in submission order."""
    return [a for a in state.actions if a.phase == phase and a.day_number == day_number]


def current_cycle(state: GameState) -> list[Action]:
    return list_by_cycle(state, state.phase, state.day_number)


def clear_cycle(state: GameState, day_number: int) -> None:
    """Drop every action recorded under day_number."""
    state.actions = [a for a in state.actions if a.day_number != day_number]


def find_action(state: GameState, actor_id: str) -> Action | None:
    """Return actor's action in the current cycle, if any."""
    for a in current_cycle(state):
        if a.actor_id == actor_id:
            return a
    return None


def _check_actor(state: GameState, actor_id: str, action_type: ActionType) -> Participant:
    actor = state.get_participant(actor_id)
    if actor is None:
        raise InvalidActor(f"{actor_id} is not a participant in this game")
    if not actor.alive:
        if action_type == ActionType.VOTE:
            raise DeadPlayerCannotVote(f"{actor.name} is dead and cannot vote")
        raise InvalidActor(f"{actor.name} is dead and cannot act")
    return actor


def _check_phase(state: GameState, action_type: ActionType) -> None:
    legal = ACTION_PHASES[action_type]
    if state.phase == legal:
        return
    if action_type == ActionType.VOTE:
        raise NotDayPhase("Votes are only accepted during the day")
    raise InvalidPhase(f"{action_type.value} is only accepted during the {legal.value}")


def _check_target(state: GameState, actor: Participant, action_type: ActionType, target_id: str) -> None:
    target = state.get_participant(target_id)
    if target is None or not target.alive:
        raise InvalidTarget(f"{target_id} is not a living participant")
    if target.player_id == actor.player_id:
        raise InvalidTarget("You cannot target yourself")
    if action_type == ActionType.KILL and role_spec(target.role).night_action == NightAction.KILL:
        raise InvalidTarget("The mafia cannot target one of their own")
    if (
        action_type == ActionType.HEAL
        and state.doctor_heal_restriction
        and actor.last_healed_target == target_id
    ):
        raise InvalidTarget(f"You healed {target.name} last night; choose someone else")


def _check_consensus(state: GameState, target_id: str) -> None:
    """Every kill in a night must share one target; the first kill locks it."""
    for a in current_cycle(state):
        if a.type == ActionType.KILL and a.target_id != target_id:
            locked = state.display_name(a.target_id)
            raise MafiaTargetMismatch(f"The mafia already chose {locked} tonight")


def parse_action_type(value) -> ActionType:
    try:
        return ActionType(value)
    except ValueError as e:
        raise ValidationError(f"Unknown action type: {value}") from e


def submit(state: GameState, actor_id: str, action_type: ActionType, target_id: str) -> Action:
    """
    Validate and record one action for the current cycle.

    Raises a StateConflict subclass (or ValidationError for missing fields)
    and leaves the ledger unchanged when the action is rejected.
    """
    if not actor_id or not target_id:
        raise ValidationError("actor_id and target_id are required")
    action_type = parse_action_type(action_type)
    if state.finished:
        raise GameFinished("The game is over")
    actor = _check_actor(state, actor_id, action_type)
    _check_phase(state, action_type)
    if action_type != ActionType.VOTE and role_spec(actor.role).action_type != action_type:
        raise InvalidActor(f"A {actor.role.value} cannot {action_type.value}")
    if find_action(state, actor_id) is not None:
        raise DuplicateAction(f"{actor.name} already acted this {state.phase.value}")
    _check_target(state, actor, action_type, target_id)
    if action_type == ActionType.KILL:
        _check_consensus(state, target_id)

    action = Action(
        actor_id=actor_id,
        type=action_type,
        target_id=target_id,
        phase=state.phase,
        day_number=state.day_number,
    )
    state.actions.append(action)
    return action


def replace_vote(state: GameState, actor_id: str, target_id: str) -> Action:
    """Change an existing vote in place, keeping its position in the ledger."""
    if not actor_id or not target_id:
        raise ValidationError("actor_id and target_id are required")
    if state.finished:
        raise GameFinished("The game is over")
    actor = _check_actor(state, actor_id, ActionType.VOTE)
    _check_phase(state, ActionType.VOTE)
    previous = find_action(state, actor_id)
    if previous is None:
        raise InvalidActor(f"{actor.name} has not voted yet")
    _check_target(state, actor, ActionType.VOTE, target_id)

    action = Action(
        actor_id=actor_id,
        type=ActionType.VOTE,
        target_id=target_id,
        phase=state.phase,
        day_number=state.day_number,
    )
    state.actions[state.actions.index(previous)] = action
    return action
