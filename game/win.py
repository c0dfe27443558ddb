"""Win evaluation: pure checks over the living roster."""

from typing import Iterable, Optional

from game.rules import GameStatus, Phase, Team, is_mafia_aligned
from game.state import GameState, MessageCategory, Participant

WIN_ANNOUNCEMENTS = {
    Team.VILLAGE: "All of the mafia have been eliminated. The village wins!",
    Team.MAFIA: "The mafia now equal or outnumber the village. The mafia wins!",
    Team.NEUTRAL: "The jester got themselves voted out. The jester wins!",
}


def count_alignment(participants: Iterable[Participant]) -> tuple[int, int]:
    """Return (living mafia-aligned, living everyone else)."""
    mafia = 0
    others = 0
    for p in participants:
        if not p.alive:
            continue
        if is_mafia_aligned(p.role):
            mafia += 1
        else:
            others += 1
    return mafia, others


def evaluate_winner(participants: Iterable[Participant]) -> Optional[Team]:
    """Return the winning team, or None while the game is ongoing."""
    mafia, others = count_alignment(participants)
    if mafia == 0:
        return Team.VILLAGE
    if mafia >= others:
        return Team.MAFIA
    return None


def is_game_over(state: GameState) -> bool:
    return state.finished or evaluate_winner(state.participants) is not None


def end_game(state: GameState, winner: Team, announcement: Optional[str] = None) -> None:
    """Mark state finished with winner and emit the final announcement (mutates state)."""
    state.status = GameStatus.FINISHED
    state.phase = Phase.FINISHED
    state.winner = winner
    state.emit(announcement or WIN_ANNOUNCEMENTS[winner], MessageCategory.GAME_OVER)
