"""Night resolution: mafia kill, doctor heals, investigations."""

import copy
import logging
import random
from typing import Optional

from game.errors import ResolutionError
from game.ledger import clear_cycle, current_cycle
from game.rules import ActionType, NightAction, Phase, is_mafia_aligned, role_spec
from game.state import Action, GameState, MessageCategory

logger = logging.getLogger(__name__)

GUILTY = "guilty"
INNOCENT = "innocent"


def _validate(state: GameState, actions: list[Action]) -> None:
    """Reject action data that cannot have come through the ledger."""
    for a in actions:
        actor = state.get_participant(a.actor_id)
        target = state.get_participant(a.target_id)
        if actor is None or target is None:
            raise ResolutionError(f"Night action references unknown player: {a}")
        if not actor.alive or not target.alive:
            raise ResolutionError(f"Night action involves a dead player: {a}")
        if a.type == ActionType.VOTE or role_spec(actor.role).action_type != a.type:
            raise ResolutionError(f"{actor.name} cannot {a.type.value} at night")
    kill_targets = {a.target_id for a in actions if a.type == ActionType.KILL}
    if len(kill_targets) > 1:
        raise ResolutionError(f"Conflicting kill targets: {sorted(kill_targets)}")


def kill_target(actions: list[Action]) -> Optional[str]:
    """The consensus kill target, or None when nobody was attacked."""
    for a in actions:
        if a.type == ActionType.KILL:
            return a.target_id
    return None


def investigate(state: GameState, action: Action, rng: random.Random) -> str:
    """Return the verdict an investigator sees for their target."""
    actor = state.get_participant(action.actor_id)
    target = state.get_participant(action.target_id)
    if role_spec(actor.role).night_action == NightAction.INVESTIGATE_RANDOM:
        return rng.choice((GUILTY, INNOCENT))
    return GUILTY if is_mafia_aligned(target.role) else INNOCENT


def resolve_night(state: GameState, rng: Optional[random.Random] = None) -> GameState:
    """
    Resolve the current night: the kill lands unless a heal covers its target,
    doctors remember who they healed, investigators get a private verdict.
    Clears the night's actions and advances the day number once per full
    cycle. Returns new state; does not mutate input.
    """
    if state.phase != Phase.NIGHT:
        raise ResolutionError(f"Cannot resolve night during {state.phase.value}")
    rng = rng or random.Random()
    state = copy.deepcopy(state)
    actions = current_cycle(state)
    _validate(state, actions)

    target_id = kill_target(actions)
    heals = [a for a in actions if a.type == ActionType.HEAL]
    if target_id is None:
        state.emit("The night passed quietly.")
    elif any(h.target_id == target_id for h in heals):
        state.emit(
            "The mafia attacked someone last night, but the doctor saved them.",
            MessageCategory.SAVED,
        )
        logger.info("Game %s: night %d kill on %s was healed", state.game_id, state.day_number, target_id)
    else:
        victim = state.update_participant(target_id, alive=False)
        state.emit(f"{victim.name} was eliminated during the night.", MessageCategory.DEATH)
        logger.info("Game %s: %s killed at night", state.game_id, target_id)

    for h in heals:
        state.update_participant(h.actor_id, last_healed_target=h.target_id)

    for a in actions:
        if a.type != ActionType.INVESTIGATE:
            continue
        verdict = investigate(state, a, rng)
        state.emit(
            f"Investigation result: {state.display_name(a.target_id)} is {verdict}.",
            MessageCategory.INVESTIGATION,
            recipient_id=a.actor_id,
        )

    clear_cycle(state, state.day_number)
    if state.nights_resolved > 0:
        state.day_number += 1
    state.nights_resolved += 1
    return state
