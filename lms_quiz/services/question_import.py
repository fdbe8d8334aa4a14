# lms_quiz/services/question_import.py
"""
평문 문항 파서 (docx/pdf 에서 추출된 텍스트 → 문항 트리)

형식:
    Q1: 질문 내용          ← "Q", "Question" + 번호(옵션) + ":" / "." / "-"
    이어지는 줄은 질문에 덧붙임
    A) 보기               ← "A)", "B. ", "A:", "Answer:"
    B) 정답 보기 *         ← "*" 또는 "(correct)" 표시가 정답
"""
from __future__ import annotations
import re
from typing import List, Optional

from lms_quiz.schemas.quiz import AnswerCreate, QuestionCreate

QUESTION_RE = re.compile(r"^(Q|Question)\s*\d*\s*[:.\-]\s*", re.IGNORECASE)
OPTION_RE = re.compile(r"^([A-D]\)|[A-D]\.\s|A:|Answer:)", re.IGNORECASE)
CORRECT_MARK_RE = re.compile(r"\*|\(correct\)", re.IGNORECASE)


def _build_question(text: str, answers: List[AnswerCreate]) -> QuestionCreate:
    correct = sum(1 for a in answers if a.isCorrect)
    return QuestionCreate(
        questionText=text,
        questionType="single_choice" if correct == 1 else "multiple_choice",
        points=1,
        answers=answers,
    )


def parse_question_text(content: str) -> List[QuestionCreate]:
    lines = [ln.strip() for ln in (content or "").splitlines()]
    lines = [ln for ln in lines if ln]

    questions: List[QuestionCreate] = []
    current: Optional[str] = None
    answers: List[AnswerCreate] = []

    for line in lines:
        if QUESTION_RE.match(line):
            if current and answers:
                questions.append(_build_question(current, answers))
            answers = []
            current = QUESTION_RE.sub("", line, count=1).strip()
        elif OPTION_RE.match(line):
            is_correct = "*" in line or "(correct)" in line.lower()
            text = OPTION_RE.sub("", line, count=1)
            text = CORRECT_MARK_RE.sub("", text, count=1).strip()
            if text:
                answers.append(AnswerCreate(answerText=text, isCorrect=is_correct))
        elif current is not None:
            current += " " + line

    if current and answers:
        questions.append(_build_question(current, answers))

    return questions
