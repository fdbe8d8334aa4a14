from lms_quiz.services.question_import import parse_question_text

SAMPLE = """
Q1: What is the capital of France?
A) Paris *
B) Lyon
C) Marseille

Question 2 - Which numbers are prime?
Pick all that apply.
A. 2 (correct)
B. 3 (Correct)
C. 4

Q3. A question without options

Q4: Final question
A: only option
"""


def test_parses_questions_with_options():
    questions = parse_question_text(SAMPLE)
    assert [q.questionText for q in questions] == [
        "What is the capital of France?",
        "Which numbers are prime? Pick all that apply.",
        "Final question",
    ]


def test_correct_marks_and_types():
    q1, q2, q4 = parse_question_text(SAMPLE)

    assert q1.questionType == "single_choice"
    assert [(a.answerText, a.isCorrect) for a in q1.answers] == [
        ("Paris", True), ("Lyon", False), ("Marseille", False),
    ]

    assert q2.questionType == "multiple_choice"
    assert [(a.answerText, a.isCorrect) for a in q2.answers] == [
        ("2", True), ("3", True), ("4", False),
    ]

    # 정답 표시가 없으면 multiple_choice 로 분류
    assert q4.questionType == "multiple_choice"
    assert q4.answers[0].isCorrect is False


def test_every_question_worth_one_point():
    assert all(q.points == 1 for q in parse_question_text(SAMPLE))


def test_empty_or_unstructured_content():
    assert parse_question_text("") == []
    assert parse_question_text("just some prose\nwithout any markers") == []
