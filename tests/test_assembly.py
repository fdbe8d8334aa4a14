from types import SimpleNamespace as NS

import pytest

from lms_quiz.core.seeded_random import SeededRandom, seeded_shuffle
from lms_quiz.services.assembly import AssemblyOptions, assemble_quiz_view


def _quiz(n_questions=10, n_answers=4):
    questions = []
    for i in range(n_questions):
        qid = 100 + i
        # 보기 id 를 역순으로 넣어 정렬 여부 확인
        answers = [
            NS(id=qid * 10 + k, answer_text=f"q{qid}-a{k}", is_correct=(k == 0), explanation="why")
            for k in reversed(range(n_answers))
        ]
        questions.append(NS(
            id=qid, question_text=f"Question {i}", question_type="single_choice",
            points=1, position=n_questions - 1 - i, explanation="secret", answers=answers,
        ))
    return NS(
        id=7, lesson_id=3, title="Quiz", description=None, time_limit=10, passing_score=60,
        category=None, difficulty=None, questions=questions,
    )


def test_canonical_order_without_randomize():
    view = assemble_quiz_view(_quiz(3), AssemblyOptions())
    assert [q.position for q in view.questions] == [0, 1, 2]
    assert [q.id for q in view.questions] == [102, 101, 100]
    for q in view.questions:
        ids = [a.id for a in q.answers]
        assert ids == sorted(ids)
    assert view.metadata.randomized is False
    assert view.metadata.answersShuffled is False
    assert view.metadata.seed is None
    assert view.metadata.totalAvailableQuestions == 3
    assert view.metadata.returnedQuestions == 3


def test_view_never_exposes_correctness():
    view = assemble_quiz_view(_quiz(3), AssemblyOptions(randomize=True, shuffle_answers=True), user_id=1)
    dumped = view.model_dump_json()
    assert "isCorrect" not in dumped
    assert "explanation" not in dumped
    assert "secret" not in dumped


def test_randomized_view_is_reproducible():
    opts = AssemblyOptions(randomize=True, question_count=5, user_seed="s1", shuffle_answers=True)
    a = assemble_quiz_view(_quiz(), opts, user_id=42)
    b = assemble_quiz_view(_quiz(), opts, user_id=42)
    assert a.model_dump() == b.model_dump()
    assert a.metadata.seed == "42-7-s1"


def test_randomized_selection_follows_seeded_shuffle():
    quiz = _quiz()
    view = assemble_quiz_view(quiz, AssemblyOptions(randomize=True, question_count=5), user_id=42)

    canonical = sorted(quiz.questions, key=lambda q: (q.position, q.id))
    expected = seeded_shuffle(canonical, SeededRandom("42-7-default"))[:5]
    assert [q.id for q in view.questions] == [q.id for q in expected]
    assert [q.position for q in view.questions] == [0, 1, 2, 3, 4]
    assert view.metadata.totalAvailableQuestions == 10
    assert view.metadata.returnedQuestions == 5
    # 보기는 섞지 않음
    for q in view.questions:
        ids = [a.id for a in q.answers]
        assert ids == sorted(ids)


def test_answer_shuffle_continues_question_stream():
    quiz = _quiz(4)
    view = assemble_quiz_view(
        quiz, AssemblyOptions(randomize=True, shuffle_answers=True), user_id=42,
    )

    rng = SeededRandom("42-7-default")
    canonical = sorted(quiz.questions, key=lambda q: (q.position, q.id))
    picked = seeded_shuffle(canonical, rng)
    for got, q in zip(view.questions, picked):
        expected = seeded_shuffle(sorted(q.answers, key=lambda a: a.id), rng)
        assert [a.id for a in got.answers] == [a.id for a in expected]


def test_different_user_seed_changes_order():
    quiz = _quiz(10)
    orders = {
        tuple(q.id for q in assemble_quiz_view(
            quiz, AssemblyOptions(randomize=True, user_seed=s), user_id=42,
        ).questions)
        for s in ("a", "b", "c", "d")
    }
    assert len(orders) > 1


def test_anonymous_seed_uses_client_host():
    view = assemble_quiz_view(_quiz(2), AssemblyOptions(randomize=True), client_host="10.1.2.3")
    assert view.metadata.seed == "10.1.2.3-7-default"

    view = assemble_quiz_view(_quiz(2), AssemblyOptions(randomize=True))
    assert view.metadata.seed == "anonymous-7-default"


@pytest.mark.parametrize("count,expected", [(None, 3), (0, 3), (2, 2), (50, 3)])
def test_question_count_limits(count, expected):
    view = assemble_quiz_view(_quiz(3), AssemblyOptions(randomize=True, question_count=count), user_id=1)
    assert len(view.questions) == expected
    assert view.metadata.returnedQuestions == expected


def test_question_count_ignored_without_randomize():
    view = assemble_quiz_view(_quiz(3), AssemblyOptions(question_count=1))
    assert len(view.questions) == 3


def test_shuffle_answers_without_randomize_is_noop():
    view = assemble_quiz_view(_quiz(2), AssemblyOptions(shuffle_answers=True))
    assert view.metadata.answersShuffled is False
    for q in view.questions:
        ids = [a.id for a in q.answers]
        assert ids == sorted(ids)


def test_empty_quiz_randomized():
    view = assemble_quiz_view(_quiz(0), AssemblyOptions(randomize=True, question_count=5), user_id=1)
    assert view.questions == []
    assert view.metadata.totalAvailableQuestions == 0
    assert view.metadata.randomized is True
