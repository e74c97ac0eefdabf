"""
场次生命周期测试
"""

import pytest

from buzzer.core.errors import SessionNotFound, SessionCompleted, NoQuestions
from buzzer.models import QuizSession, Question, RoundResult
from buzzer.services.game_state import get_game_state


def active_ids(db):
    db.expire_all()
    return [s.id for s in db.query(QuizSession).filter(QuizSession.is_active.is_(True)).all()]


def test_create_session_numbers_sequentially(services, run):
    first = run(services.sessions.create_session("Warm-up"))
    second = run(services.sessions.create_session("Finals"))

    assert (first.session_number, second.session_number) == (1, 2)
    assert not first.is_active and not first.is_completed


def test_session_number_after_delete_does_not_collide(services, run):
    first = run(services.sessions.create_session("A"))
    second = run(services.sessions.create_session("B"))
    run(services.sessions.delete_session(first.id))

    third = run(services.sessions.create_session("C"))
    assert third.session_number == second.session_number + 1


def test_create_session_requires_name(services, run):
    with pytest.raises(ValueError):
        run(services.sessions.create_session("  "))


def test_activation_is_exclusive(services, db, run):
    a = run(services.sessions.create_session("A"))
    b = run(services.sessions.create_session("B"))

    run(services.sessions.activate_session(a.id))
    assert active_ids(db) == [a.id]

    run(services.sessions.activate_session(b.id))
    assert active_ids(db) == [b.id]


def test_activating_other_session_clears_display(services, db, run):
    a = run(services.sessions.create_session("A"))
    b = run(services.sessions.create_session("B"))
    run(services.questions.add_question(a.id, "From A"))
    run(services.sessions.start_quiz(a.id))

    run(services.sessions.activate_session(b.id))

    db.expire_all()
    state = get_game_state(db)
    assert state.current_session_id == b.id
    assert state.current_question_id is None
    assert state.current_question is None


def test_reactivating_same_session_keeps_display(services, db, run):
    a = run(services.sessions.create_session("A"))
    question = run(services.questions.add_question(a.id, "Still here"))
    run(services.sessions.start_quiz(a.id))

    run(services.sessions.activate_session(a.id))

    db.expire_all()
    assert get_game_state(db).current_question_id == question.id


def test_deactivate_resets_game_state(services, db, run):
    a = run(services.sessions.create_session("A"))
    run(services.questions.add_question(a.id, "Q"))
    red = run(services.teams.register_team(1, "Red"))
    run(services.sessions.start_quiz(a.id))
    run(services.buzz.buzz(red.id))

    session = run(services.sessions.deactivate_session(a.id))

    assert session.is_active is False
    db.expire_all()
    state = get_game_state(db)
    assert state.current_session_id is None
    assert state.current_question is None
    assert state.is_locked is False
    assert state.first_buzzer_team_id is None


def test_deactivate_other_session_leaves_state(services, db, run):
    a = run(services.sessions.create_session("A"))
    b = run(services.sessions.create_session("B"))
    run(services.questions.add_question(a.id, "Q"))
    run(services.sessions.start_quiz(a.id))

    run(services.sessions.deactivate_session(b.id))

    db.expire_all()
    assert get_game_state(db).current_session_id == a.id


def test_completed_session_cannot_be_reactivated(services, manager, run):
    a = run(services.sessions.create_session("A"))
    run(services.sessions.activate_session(a.id))

    completed = run(services.sessions.complete_session(a.id))
    assert completed.is_completed and not completed.is_active
    assert completed.completed_at is not None
    assert "session_completed" in manager.types()

    with pytest.raises(SessionCompleted):
        run(services.sessions.activate_session(a.id))


def test_completion_poll(services, run):
    a = run(services.sessions.create_session("A"))

    before = run(services.sessions.get_completion(a.id))
    run(services.sessions.complete_session(a.id))
    after = run(services.sessions.get_completion(a.id))

    assert before.is_completed is False
    assert after.is_completed is True
    assert after.poll_interval == 2.0


def test_delete_session_cascades(services, db, run):
    a = run(services.sessions.create_session("A"))
    run(services.questions.add_question(a.id, "Q1"))
    run(services.questions.add_question(a.id, "Q2"))
    red = run(services.teams.register_team(1, "Red"))
    run(services.sessions.start_quiz(a.id))
    run(services.scoring.judge_answer(True, red.id))

    run(services.sessions.delete_session(a.id))

    db.expire_all()
    assert db.query(QuizSession).count() == 0
    assert db.query(Question).count() == 0
    assert db.query(RoundResult).count() == 0
    state = get_game_state(db)
    assert state.current_session_id is None
    assert state.current_question_id is None


def test_delete_missing_session(services, run):
    with pytest.raises(SessionNotFound):
        run(services.sessions.delete_session(3))


def test_start_quiz_without_questions(services, run):
    a = run(services.sessions.create_session("Empty"))
    with pytest.raises(NoQuestions):
        run(services.sessions.start_quiz(a.id))


def test_start_quiz_shows_first_question(services, run):
    a = run(services.sessions.create_session("A"))
    run(services.questions.add_question(a.id, "First", "https://cdn.example/1.png"))
    run(services.questions.add_question(a.id, "Second"))

    state = run(services.sessions.start_quiz(a.id))

    assert state.current_session_id == a.id
    assert state.current_question == "First"
    assert state.image_url == "https://cdn.example/1.png"
    assert state.session_question_index == 0
    assert state.question_count == 2
