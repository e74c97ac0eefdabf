"""
题库服务测试
"""

import pytest

from buzzer.core.errors import SessionFull, SessionNotFound, QuestionNotFound
from buzzer.models import Question, BuzzEvent, RoundResult
from buzzer.services.game_state import get_game_state


@pytest.fixture
def session_id(services, run):
    return run(services.sessions.create_session("Round 1")).id


def add_questions(services, run, session_id, count):
    return [
        run(services.questions.add_question(session_id, f"Question {i + 1}"))
        for i in range(count)
    ]


def test_add_question_assigns_positions(services, run, session_id):
    first, second = add_questions(services, run, session_id, 2)
    assert (first.order_index, second.order_index) == (1, 2)


def test_add_question_with_image(services, run, session_id):
    question = run(services.questions.add_question(session_id, "Whose flag?", "https://cdn.example/flag.png"))
    assert question.image_url == "https://cdn.example/flag.png"


def test_add_question_to_missing_session(services, run):
    with pytest.raises(SessionNotFound):
        run(services.questions.add_question(42, "Lost"))


def test_twenty_first_question_is_rejected(services, db, run, session_id):
    add_questions(services, run, session_id, 20)

    with pytest.raises(SessionFull):
        run(services.questions.add_question(session_id, "One too many"))

    assert db.query(Question).filter(Question.session_id == session_id).count() == 20


def test_delete_renumbers_densely(services, run, session_id):
    questions = add_questions(services, run, session_id, 4)

    run(services.questions.delete_question(questions[1].id))

    remaining = run(services.questions.list_questions(session_id))
    assert [q.order_index for q in remaining] == [1, 2, 3]
    assert [q.question_text for q in remaining] == ["Question 1", "Question 3", "Question 4"]


def test_delete_displayed_question_moves_to_next(services, db, run, session_id):
    questions = add_questions(services, run, session_id, 3)
    run(services.sessions.start_quiz(session_id))
    run(services.buzz.display_question(1))
    red = run(services.teams.register_team(1, "Red"))
    run(services.buzz.buzz(red.id))

    run(services.questions.delete_question(questions[1].id))

    db.expire_all()
    state = get_game_state(db)
    assert state.current_question_id == questions[2].id
    assert state.current_question == "Question 3"
    assert state.session_question_index == 1
    assert state.is_locked is False
    assert db.query(BuzzEvent).count() == 0


def test_delete_last_displayed_question_moves_to_previous(services, db, run, session_id):
    questions = add_questions(services, run, session_id, 3)
    run(services.sessions.start_quiz(session_id))
    run(services.buzz.display_question(2))

    run(services.questions.delete_question(questions[2].id))

    db.expire_all()
    state = get_game_state(db)
    assert state.current_question_id == questions[1].id
    assert state.session_question_index == 1


def test_delete_only_displayed_question_clears_state(services, db, run, session_id):
    (question,) = add_questions(services, run, session_id, 1)
    run(services.sessions.start_quiz(session_id))

    run(services.questions.delete_question(question.id))

    db.expire_all()
    state = get_game_state(db)
    assert state.current_question_id is None
    assert state.current_question is None
    assert state.current_session_id == session_id


def test_delete_earlier_question_shifts_displayed_index(services, db, run, session_id):
    questions = add_questions(services, run, session_id, 3)
    run(services.sessions.start_quiz(session_id))
    run(services.buzz.display_question(2))

    run(services.questions.delete_question(questions[0].id))

    db.expire_all()
    state = get_game_state(db)
    assert state.current_question_id == questions[2].id
    assert state.session_question_index == 1


def test_delete_question_keeps_round_results(services, db, run, session_id):
    (question,) = add_questions(services, run, session_id, 1)
    red = run(services.teams.register_team(1, "Red"))
    run(services.sessions.start_quiz(session_id))
    run(services.scoring.judge_answer(True, red.id))

    run(services.questions.delete_question(question.id))

    result = db.query(RoundResult).one()
    assert result.question_id is None
    assert result.session_id == session_id


def test_update_displayed_question_refreshes_state(services, db, run, session_id):
    (question,) = add_questions(services, run, session_id, 1)
    run(services.sessions.start_quiz(session_id))

    updated = run(services.questions.update_question(question.id, "Reworded", "https://cdn.example/q.png"))

    assert updated.question_text == "Reworded"
    db.expire_all()
    state = get_game_state(db)
    assert state.current_question == "Reworded"
    assert state.image_url == "https://cdn.example/q.png"


def test_update_missing_question(services, run):
    with pytest.raises(QuestionNotFound):
        run(services.questions.update_question(7, "Nope"))


def test_editing_question_after_quiz_ended_keeps_banner(services, db, run, session_id):
    first, _ = add_questions(services, run, session_id, 2)
    run(services.teams.register_team(1, "Red"))
    run(services.sessions.start_quiz(session_id))
    run(services.scoring.end_quiz())

    run(services.questions.update_question(first.id, "Reworded"))
    run(services.questions.delete_question(first.id))

    db.expire_all()
    state = get_game_state(db)
    assert state.quiz_ended is True
    assert state.current_question == "Quiz Ended - Check Results!"
    assert state.current_question_id is None
    assert state.image_url is None
