"""Day resolution: plurality vote with a no-elimination tie policy."""

import copy
import logging
from collections import Counter

from game.errors import ResolutionError
from game.ledger import clear_cycle, current_cycle
from game.rules import ActionType, Phase, WinTrigger, role_spec
from game.state import Action, GameState, MessageCategory
from game.win import end_game

logger = logging.getLogger(__name__)


def tally_votes(votes: list[Action]) -> Counter:
    """Count distinct voters per target; a voter's first vote is the one that counts."""
    counts: Counter = Counter()
    seen: set[str] = set()
    for v in votes:
        if v.actor_id in seen:
            continue
        seen.add(v.actor_id)
        counts[v.target_id] += 1
    return counts


def plurality(counts: Counter) -> list[str]:
    """Candidates sharing the highest count (empty when no votes)."""
    if not counts:
        return []
    max_votes = max(counts.values())
    return [tid for tid, c in counts.items() if c == max_votes]


def resolve_day(state: GameState) -> GameState:
    """
    Resolve the day vote. A unique plurality target is eliminated; a tie at
    the top eliminates no one. Voting out a self-elimination role ends the
    game for that role's team. Returns new state; does not mutate input.
    """
    if state.phase != Phase.DAY:
        raise ResolutionError(f"Cannot resolve votes during {state.phase.value}")
    state = copy.deepcopy(state)
    votes = [a for a in current_cycle(state) if a.type == ActionType.VOTE]
    for v in votes:
        target = state.get_participant(v.target_id)
        if target is None or not target.alive:
            raise ResolutionError(f"Vote for a player who cannot be eliminated: {v}")

    leaders = plurality(tally_votes(votes))
    if not leaders:
        state.emit("No votes were cast. No one is eliminated.")
    elif len(leaders) > 1:
        names = ", ".join(state.display_name(pid) for pid in leaders)
        state.emit(f"The vote is tied between {names}. No one is eliminated.", MessageCategory.TIE)
        logger.info("Game %s: day %d vote tied", state.game_id, state.day_number)
    else:
        victim = state.update_participant(leaders[0], alive=False)
        state.emit(
            f"{victim.name} was eliminated by vote. They were a {victim.role.value}.",
            MessageCategory.DEATH,
        )
        logger.info("Game %s: %s voted out on day %d", state.game_id, victim.player_id, state.day_number)
        spec = role_spec(victim.role)
        if spec.win_trigger == WinTrigger.SELF_ELIMINATION:
            clear_cycle(state, state.day_number)
            end_game(
                state,
                spec.team,
                f"{victim.name} was the {victim.role.value} and wanted to be voted out. The {victim.role.value} wins!",
            )
            return state

    clear_cycle(state, state.day_number)
    return state
