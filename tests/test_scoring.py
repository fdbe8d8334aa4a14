import logging
from types import SimpleNamespace as NS

import pytest

from lms_quiz.core.logging import APP_LOGGER_NAME
from lms_quiz.schemas.quiz import SubmissionItem
from lms_quiz.services.scoring import grade, summarize


def _answer(id, text, correct):
    return NS(id=id, answer_text=text, is_correct=correct)


@pytest.fixture()
def questions():
    return [
        NS(id=1, question_type="single_choice", points=2, answers=[
            _answer(10, "Paris", True), _answer(11, "Lyon", False),
        ]),
        NS(id=2, question_type="true_false", points=1, answers=[
            _answer(20, "True", False), _answer(21, "False", True),
        ]),
        NS(id=3, question_type="fill_blank", points=3, answers=[
            _answer(30, "Photosynthesis", True), _answer(31, "photo synthesis", True),
        ]),
        NS(id=4, question_type="multiple_choice", points=1, answers=[
            _answer(40, "2", True), _answer(41, "3", True), _answer(42, "4", False),
        ]),
    ]


def _sub(**kw):
    return SubmissionItem(**kw)


def test_all_correct(questions):
    out = grade(questions, [
        _sub(questionId=1, answerId=10),
        _sub(questionId=2, answerId=21),
        _sub(questionId=3, textAnswer="  photosynthesis "),
        _sub(questionId=4, answerId=41),
    ])
    assert out.total_score == 7
    assert out.max_score == 7
    assert all(r.is_correct for r in out.results)
    assert [r.question_id for r in out.results] == [1, 2, 3, 4]


def test_wrong_choice_scores_zero(questions):
    out = grade(questions, [_sub(questionId=1, answerId=11)])
    assert out.total_score == 0
    assert out.max_score == 2
    assert out.results[0].is_correct is False
    assert out.results[0].points_earned == 0
    assert out.results[0].answer_id == 11


def test_fill_blank_accepts_any_correct_text(questions):
    out = grade(questions, [_sub(questionId=3, textAnswer="PHOTO SYNTHESIS")])
    assert out.results[0].is_correct
    assert out.results[0].text_answer == "PHOTO SYNTHESIS"

    out = grade(questions, [_sub(questionId=3, textAnswer="respiration")])
    assert not out.results[0].is_correct


def test_fill_blank_blank_text_is_wrong(questions):
    out = grade(questions, [_sub(questionId=3, textAnswer="   ")])
    assert out.total_score == 0
    assert out.max_score == 3


def test_unknown_question_is_skipped(questions):
    out = grade(questions, [
        _sub(questionId=999, answerId=10),
        _sub(questionId=1, answerId=10),
    ])
    assert out.skipped == 1
    assert out.max_score == 2
    assert out.total_score == 2
    assert len(out.results) == 1


def test_missing_selection_is_wrong_not_error(questions):
    out = grade(questions, [_sub(questionId=1), _sub(questionId=2, answerId="abc")])
    assert out.total_score == 0
    assert out.max_score == 3
    assert [r.answer_id for r in out.results] == [None, None]


def test_answer_from_other_question_does_not_count(questions):
    # 40 은 4번 문항의 정답 보기
    out = grade(questions, [_sub(questionId=1, answerId=40)])
    assert out.results[0].is_correct is False
    assert out.results[0].answer_id is None


def test_string_ids_are_coerced(questions):
    out = grade(questions, [_sub(questionId="1", answerId="10")])
    assert out.total_score == 2


def test_duplicate_submissions_counted_without_dedupe(questions):
    subs = [_sub(questionId=1, answerId=10), _sub(questionId=1, answerId=11)]
    out = grade(questions, subs)
    assert len(out.results) == 2
    assert out.max_score == 4
    assert out.total_score == 2


def test_duplicate_submissions_first_wins_with_dedupe(questions):
    subs = [_sub(questionId=1, answerId=11), _sub(questionId=1, answerId=10)]
    out = grade(questions, subs, dedupe=True)
    assert len(out.results) == 1
    assert out.skipped == 1
    assert out.max_score == 2
    assert out.total_score == 0


def test_empty_submission(questions):
    out = grade(questions, [])
    assert out.total_score == 0
    assert out.max_score == 0
    assert out.results == []


@pytest.mark.parametrize("total,max_,passing,expected", [
    (7, 10, 70, (70.0, True)),
    (6, 10, 70, (60.0, False)),
    (0, 0, 70, (0.0, False)),
    (0, 0, None, (0.0, True)),
    (1, 3, None, (100 / 3, True)),
])
def test_summarize(total, max_, passing, expected):
    percentage, passed = summarize(total, max_, passing)
    assert percentage == pytest.approx(expected[0])
    assert passed is expected[1]


def test_four_point_single_choice():
    q = NS(id=5, question_type="single_choice", points=4, answers=[
        _answer(10, "right", True), _answer(11, "w1", False),
        _answer(12, "w2", False), _answer(13, "w3", False),
    ])
    right = grade([q], [_sub(questionId=5, answerId=10)])
    assert (right.total_score, right.max_score) == (4, 4)
    assert summarize(right.total_score, right.max_score, 100) == (100.0, True)

    wrong = grade([q], [_sub(questionId=5, answerId=11)])
    assert (wrong.total_score, wrong.max_score) == (0, 4)
    assert summarize(wrong.total_score, wrong.max_score, 50) == (0.0, False)


def test_fill_blank_stored_answers_are_normalized_too():
    q = NS(id=6, question_type="fill_blank", points=1, answers=[
        _answer(60, "Paris", True), _answer(61, "paris ", True),
    ])
    out = grade([q], [_sub(questionId=6, textAnswer=" PARIS ")])
    assert out.results[0].is_correct


def test_non_string_text_answer_is_compared_as_text():
    q = NS(id=7, question_type="fill_blank", points=1, answers=[_answer(70, "42", True)])
    out = grade([q], [_sub(questionId=7, textAnswer=42)])
    assert out.results[0].is_correct
    assert out.results[0].text_answer == "42"


def test_unusable_answer_id_shape(questions):
    out = grade(questions, [_sub(questionId=1, answerId=[10]), _sub(questionId=[1], answerId=10)])
    assert out.skipped == 1
    assert out.max_score == 2
    assert out.total_score == 0
    assert out.results[0].answer_id is None


def test_default_logger_is_app_logger(questions, caplog):
    caplog.set_level(logging.WARNING, logger=APP_LOGGER_NAME)
    grade(questions, [_sub(questionId=1, answerId=10), _sub(questionId=1, answerId=11)], dedupe=True)
    assert [r.name for r in caplog.records] == [APP_LOGGER_NAME]
