"""
队伍注册服务测试
"""

import pytest

from buzzer.core.errors import SlotTaken, InvalidSlot, TeamNotFound
from buzzer.models import Team, BuzzEvent
from buzzer.services.game_state import get_game_state


def test_register_team_claims_slot(services, manager, run):
    team = run(services.teams.register_team(1, "  Red  "))

    assert team.team_number == 1
    assert team.team_name == "Red"
    assert team.score == 0
    assert manager.types() == ["teams_changed"]


def test_register_taken_slot_is_rejected(services, db, run):
    run(services.teams.register_team(2, "Blue"))

    with pytest.raises(SlotTaken):
        run(services.teams.register_team(2, "Green"))

    assert db.query(Team).count() == 1


@pytest.mark.parametrize("slot", [0, 5, -1])
def test_register_out_of_range_slot(services, run, slot):
    with pytest.raises(InvalidSlot):
        run(services.teams.register_team(slot, "Nobody"))


def test_register_blank_name(services, run):
    with pytest.raises(ValueError):
        run(services.teams.register_team(1, "   "))


def test_available_slots(services, run):
    run(services.teams.register_team(3, "Yellow"))
    run(services.teams.register_team(1, "Red"))

    slots = run(services.teams.available_slots())
    assert slots.max_teams == 4
    assert slots.taken == [1, 3]
    assert slots.available == [2, 4]


def test_list_teams_ordered_by_slot(services, run):
    run(services.teams.register_team(4, "Green"))
    run(services.teams.register_team(2, "Blue"))

    teams = run(services.teams.list_teams())
    assert [t.team_number for t in teams] == [2, 4]


def test_deleted_slot_can_be_claimed_again(services, run):
    team = run(services.teams.register_team(1, "Red"))
    run(services.teams.delete_team(team.id))

    again = run(services.teams.register_team(1, "Crimson"))
    assert again.team_name == "Crimson"


def test_delete_missing_team(services, run):
    with pytest.raises(TeamNotFound):
        run(services.teams.delete_team(999))


def test_delete_first_buzzer_unlocks(services, db, manager, run):
    red = run(services.teams.register_team(1, "Red"))
    blue = run(services.teams.register_team(2, "Blue"))
    assert run(services.buzz.buzz(blue.id)).accepted
    assert not run(services.buzz.buzz(red.id)).accepted

    run(services.teams.delete_team(blue.id))

    db.expire_all()
    state = get_game_state(db)
    assert state.is_locked is False
    assert state.first_buzzer_team_id is None
    assert db.query(BuzzEvent).filter(BuzzEvent.team_id == blue.id).count() == 0
    # 其他队伍的抢答记录保留
    assert db.query(BuzzEvent).filter(BuzzEvent.team_id == red.id).count() == 1
    assert manager.team_messages[-1][0] == blue.id
    assert manager.team_messages[-1][1]["type"] == "team_removed"


def test_delete_winner_clears_quiz_ended(services, db, run):
    red = run(services.teams.register_team(1, "Red"))
    run(services.teams.register_team(2, "Blue"))
    run(services.scoring.adjust_score(red.id, 10))
    result = run(services.scoring.end_quiz())
    assert result.winner.id == red.id

    run(services.teams.delete_team(red.id))

    db.expire_all()
    state = get_game_state(db)
    assert state.winner_team_id is None
    assert state.quiz_ended is False


def test_delete_other_team_keeps_lock(services, db, run):
    red = run(services.teams.register_team(1, "Red"))
    blue = run(services.teams.register_team(2, "Blue"))
    run(services.buzz.buzz(red.id))

    run(services.teams.delete_team(blue.id))

    db.expire_all()
    state = get_game_state(db)
    assert state.is_locked is True
    assert state.first_buzzer_team_id == red.id
