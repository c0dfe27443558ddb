"""Tests for action submission, consensus and cycle bookkeeping."""

import pytest

from game import ledger
from game.errors import (
    DeadPlayerCannotVote,
    DuplicateAction,
    GameFinished,
    InvalidActor,
    InvalidPhase,
    InvalidTarget,
    MafiaTargetMismatch,
    NotDayPhase,
    StateConflict,
    ValidationError,
)
from game.rules import ActionType, GameStatus, Phase, Role, Team
from game.state import GameState, Participant
from game.win import end_game

NAMES = ["Alice", "Bob", "Carol", "Dave", "Eve", "Frank"]


def _make_game(roles: list[Role], phase: Phase = Phase.NIGHT, **kwargs) -> GameState:
    participants = [
        Participant(player_id=f"p{i}", name=NAMES[i], role=role, is_host=(i == 0))
        for i, role in enumerate(roles)
    ]
    return GameState(
        game_id="g1",
        room_code="ABC123",
        host_id="p0",
        participants=participants,
        status=GameStatus.IN_PROGRESS,
        phase=phase,
        **kwargs,
    )


def _two_mafia_game(**kwargs) -> GameState:
    """p0 villager, p1 mafia, p2 doctor, p3 detective, p4 mafia, p5 bandit."""
    return _make_game(
        [Role.VILLAGER, Role.MAFIA, Role.DOCTOR, Role.DETECTIVE, Role.MAFIA, Role.BANDIT],
        **kwargs,
    )


def test_submit_records_action_for_current_cycle():
    state = _two_mafia_game()
    action = ledger.submit(state, "p1", ActionType.KILL, "p0")
    assert action.phase == Phase.NIGHT
    assert action.day_number == 1
    assert ledger.list_by_cycle(state, Phase.NIGHT, 1) == [action]
    assert ledger.list_by_cycle(state, Phase.DAY, 1) == []


def test_list_by_cycle_keeps_submission_order():
    state = _two_mafia_game()
    ledger.submit(state, "p3", "investigate", "p1")
    ledger.submit(state, "p1", "kill", "p0")
    ledger.submit(state, "p2", "heal", "p0")
    assert [a.actor_id for a in ledger.list_by_cycle(state, Phase.NIGHT, 1)] == ["p3", "p1", "p2"]


def test_non_participant_is_invalid_actor():
    state = _two_mafia_game()
    with pytest.raises(InvalidActor):
        ledger.submit(state, "stranger", ActionType.KILL, "p0")


def test_dead_actor_rejected():
    state = _two_mafia_game()
    state.update_participant("p1", alive=False)
    with pytest.raises(InvalidActor):
        ledger.submit(state, "p1", ActionType.KILL, "p0")


def test_dead_player_cannot_vote():
    state = _two_mafia_game(phase=Phase.DAY)
    state.update_participant("p0", alive=False)
    with pytest.raises(DeadPlayerCannotVote):
        ledger.submit(state, "p0", ActionType.VOTE, "p1")


def test_vote_at_night_rejected():
    state = _two_mafia_game()
    with pytest.raises(NotDayPhase):
        ledger.submit(state, "p0", ActionType.VOTE, "p1")


def test_night_action_during_day_rejected():
    state = _two_mafia_game(phase=Phase.DAY)
    with pytest.raises(InvalidPhase):
        ledger.submit(state, "p1", ActionType.KILL, "p0")


def test_role_without_that_action_rejected():
    state = _two_mafia_game()
    with pytest.raises(InvalidActor):
        ledger.submit(state, "p0", ActionType.KILL, "p3")
    with pytest.raises(InvalidActor):
        ledger.submit(state, "p5", ActionType.KILL, "p0")  # bandit has no kill
    with pytest.raises(InvalidActor):
        ledger.submit(state, "p2", ActionType.INVESTIGATE, "p1")


def test_duplicate_action_rejected():
    state = _two_mafia_game()
    ledger.submit(state, "p2", ActionType.HEAL, "p0")
    with pytest.raises(DuplicateAction):
        ledger.submit(state, "p2", ActionType.HEAL, "p3")
    assert len(state.actions) == 1


def test_duplicate_vote_rejected():
    state = _two_mafia_game(phase=Phase.DAY)
    ledger.submit(state, "p0", ActionType.VOTE, "p1")
    with pytest.raises(DuplicateAction):
        ledger.submit(state, "p0", ActionType.VOTE, "p2")


def test_invalid_targets():
    state = _two_mafia_game()
    state.update_participant("p3", alive=False)
    with pytest.raises(InvalidTarget):
        ledger.submit(state, "p2", ActionType.HEAL, "p2")  # self
    with pytest.raises(InvalidTarget):
        ledger.submit(state, "p2", ActionType.HEAL, "p3")  # dead
    with pytest.raises(InvalidTarget):
        ledger.submit(state, "p2", ActionType.HEAL, "nobody")
    with pytest.raises(InvalidTarget):
        ledger.submit(state, "p1", ActionType.KILL, "p4")  # fellow mafia
    assert state.actions == []


def test_mafia_may_target_bandit():
    state = _two_mafia_game()
    ledger.submit(state, "p1", ActionType.KILL, "p5")
    assert state.actions[0].target_id == "p5"


def test_mafia_consensus_first_kill_locks_target():
    state = _two_mafia_game()
    ledger.submit(state, "p1", ActionType.KILL, "p0")
    with pytest.raises(MafiaTargetMismatch):
        ledger.submit(state, "p4", ActionType.KILL, "p3")
    ledger.submit(state, "p4", ActionType.KILL, "p0")
    kills = [a for a in state.actions if a.type == ActionType.KILL]
    assert len(kills) == 2
    assert {a.target_id for a in kills} == {"p0"}


def test_mafia_mismatch_is_a_state_conflict():
    state = _two_mafia_game()
    ledger.submit(state, "p4", ActionType.KILL, "p2")
    with pytest.raises(StateConflict):
        ledger.submit(state, "p1", ActionType.KILL, "p3")


def test_doctor_heal_restriction():
    state = _two_mafia_game(doctor_heal_restriction=True)
    state.update_participant("p2", last_healed_target="p0")
    with pytest.raises(InvalidTarget):
        ledger.submit(state, "p2", ActionType.HEAL, "p0")
    ledger.submit(state, "p2", ActionType.HEAL, "p3")


def test_doctor_may_repeat_without_restriction():
    state = _two_mafia_game(doctor_heal_restriction=False)
    state.update_participant("p2", last_healed_target="p0")
    ledger.submit(state, "p2", ActionType.HEAL, "p0")


def test_missing_fields_and_unknown_type():
    state = _two_mafia_game()
    with pytest.raises(ValidationError):
        ledger.submit(state, "", ActionType.KILL, "p0")
    with pytest.raises(ValidationError):
        ledger.submit(state, "p1", ActionType.KILL, "")
    with pytest.raises(ValidationError):
        ledger.submit(state, "p1", "poison", "p0")


def test_finished_game_rejects_actions():
    state = _two_mafia_game(phase=Phase.DAY)
    end_game(state, Team.VILLAGE)
    with pytest.raises(GameFinished):
        ledger.submit(state, "p0", ActionType.VOTE, "p1")


def test_clear_cycle_drops_only_that_day():
    state = _two_mafia_game()
    ledger.submit(state, "p1", ActionType.KILL, "p0")
    state.phase = Phase.DAY
    state.day_number = 2
    ledger.submit(state, "p0", ActionType.VOTE, "p1")
    ledger.clear_cycle(state, 1)
    assert [a.day_number for a in state.actions] == [2]


def test_replace_vote_keeps_position():
    state = _two_mafia_game(phase=Phase.DAY)
    ledger.submit(state, "p0", ActionType.VOTE, "p1")
    ledger.submit(state, "p2", ActionType.VOTE, "p1")
    ledger.replace_vote(state, "p0", "p4")
    votes = ledger.current_cycle(state)
    assert [(v.actor_id, v.target_id) for v in votes] == [("p0", "p4"), ("p2", "p1")]


def test_replace_vote_requires_existing_vote():
    state = _two_mafia_game(phase=Phase.DAY)
    with pytest.raises(InvalidActor):
        ledger.replace_vote(state, "p0", "p1")
