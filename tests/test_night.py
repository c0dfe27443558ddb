"""Tests for night resolution."""

import random

import pytest

from game import ledger
from game.errors import ResolutionError
from game.night import GUILTY, INNOCENT, resolve_night
from game.rules import ActionType, GameStatus, Phase, Role
from game.state import Action, GameState, MessageCategory, Participant

NAMES = ["Alice", "Bob", "Carol", "Dave", "Eve", "Frank"]


def _make_game(roles: list[Role], **kwargs) -> GameState:
    participants = [
        Participant(player_id=f"p{i}", name=NAMES[i], role=role)
        for i, role in enumerate(roles)
    ]
    return GameState(
        game_id="g1",
        room_code="ABC123",
        host_id="p0",
        participants=participants,
        status=GameStatus.IN_PROGRESS,
        phase=Phase.NIGHT,
        **kwargs,
    )


def _make_simple_game() -> GameState:
    """p0 villager, p1 mafia, p2 doctor, p3 detective."""
    return _make_game([Role.VILLAGER, Role.MAFIA, Role.DOCTOR, Role.DETECTIVE])


def _categories(state: GameState) -> list[MessageCategory]:
    return [m.category for m in state.messages]


def test_heal_on_kill_target_saves_them():
    state = _make_simple_game()
    ledger.submit(state, "p1", ActionType.KILL, "p0")
    ledger.submit(state, "p2", ActionType.HEAL, "p0")
    state2 = resolve_night(state, random.Random(0))
    assert all(p.alive for p in state2.participants)
    assert MessageCategory.SAVED in _categories(state2)
    assert MessageCategory.DEATH not in _categories(state2)


def test_heal_elsewhere_does_not_save():
    state = _make_simple_game()
    ledger.submit(state, "p1", ActionType.KILL, "p0")
    ledger.submit(state, "p2", ActionType.HEAL, "p3")
    state2 = resolve_night(state, random.Random(0))
    dead = [p.player_id for p in state2.participants if not p.alive]
    assert dead == ["p0"]
    deaths = [m for m in state2.messages if m.category == MessageCategory.DEATH]
    assert len(deaths) == 1
    assert "Alice" in deaths[0].body
    assert deaths[0].recipient_id is None


def test_no_kill_no_death():
    state = _make_simple_game()
    ledger.submit(state, "p2", ActionType.HEAL, "p0")
    state2 = resolve_night(state, random.Random(0))
    assert all(p.alive for p in state2.participants)


def test_does_not_mutate_input():
    state = _make_simple_game()
    ledger.submit(state, "p1", ActionType.KILL, "p0")
    resolve_night(state, random.Random(0))
    assert state.get_participant("p0").alive
    assert len(state.actions) == 1


def test_doctor_remembers_last_heal():
    state = _make_simple_game()
    ledger.submit(state, "p2", ActionType.HEAL, "p3")
    state2 = resolve_night(state, random.Random(0))
    assert state2.get_participant("p2").last_healed_target == "p3"


def test_detective_sees_the_truth_privately():
    state = _make_game([Role.VILLAGER, Role.MAFIA, Role.DOCTOR, Role.DETECTIVE, Role.BANDIT])
    ledger.submit(state, "p3", ActionType.INVESTIGATE, "p4")
    state2 = resolve_night(state, random.Random(0))
    results = [m for m in state2.messages if m.category == MessageCategory.INVESTIGATION]
    assert len(results) == 1
    assert results[0].recipient_id == "p3"
    assert results[0].body == f"Investigation result: Eve is {GUILTY}."

    state = _make_simple_game()
    ledger.submit(state, "p3", ActionType.INVESTIGATE, "p0")
    state2 = resolve_night(state, random.Random(0))
    results = [m for m in state2.messages if m.category == MessageCategory.INVESTIGATION]
    assert results[0].body.endswith(f"{INNOCENT}.")


def test_fake_detective_result_comes_from_rng():
    expected = random.Random(5).choice((GUILTY, INNOCENT))
    state = _make_game([Role.VILLAGER, Role.MAFIA, Role.DOCTOR, Role.FAKE_DETECTIVE])
    ledger.submit(state, "p3", ActionType.INVESTIGATE, "p1")
    state2 = resolve_night(state, random.Random(5))
    result = [m for m in state2.messages if m.category == MessageCategory.INVESTIGATION][0]
    assert result.body.endswith(f"{expected}.")
    assert result.recipient_id == "p3"


def test_fake_detective_ignores_truth():
    verdicts = set()
    for seed in range(50):
        state = _make_game([Role.VILLAGER, Role.MAFIA, Role.DOCTOR, Role.FAKE_DETECTIVE])
        ledger.submit(state, "p3", ActionType.INVESTIGATE, "p1")
        state2 = resolve_night(state, random.Random(seed))
        body = [m for m in state2.messages if m.category == MessageCategory.INVESTIGATION][0].body
        verdicts.add(GUILTY if body.endswith(f"{GUILTY}.") else INNOCENT)
    assert verdicts == {GUILTY, INNOCENT}


def test_clears_night_actions():
    state = _make_simple_game()
    ledger.submit(state, "p1", ActionType.KILL, "p0")
    state2 = resolve_night(state, random.Random(0))
    assert state2.actions == []


def test_day_number_advances_from_second_night():
    state = _make_simple_game()
    state2 = resolve_night(state, random.Random(0))
    assert state2.day_number == 1
    state2.phase = Phase.NIGHT
    state3 = resolve_night(state2, random.Random(0))
    assert state3.day_number == 2


def test_conflicting_kills_raise_and_leave_state_intact():
    state = _make_game([Role.VILLAGER, Role.MAFIA, Role.DOCTOR, Role.DETECTIVE, Role.MAFIA])
    state.actions = [
        Action("p1", ActionType.KILL, "p0", Phase.NIGHT, 1),
        Action("p4", ActionType.KILL, "p2", Phase.NIGHT, 1),
    ]
    with pytest.raises(ResolutionError):
        resolve_night(state, random.Random(0))
    assert len(state.actions) == 2
    assert all(p.alive for p in state.participants)


def test_unknown_actor_raises():
    state = _make_simple_game()
    state.actions = [Action("ghost", ActionType.KILL, "p0", Phase.NIGHT, 1)]
    with pytest.raises(ResolutionError):
        resolve_night(state, random.Random(0))


def test_wrong_phase_raises():
    state = _make_simple_game()
    state.phase = Phase.DAY
    with pytest.raises(ResolutionError):
        resolve_night(state, random.Random(0))
