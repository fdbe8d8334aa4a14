# lms_quiz/services/scoring.py
"""
채점 엔진
- single_choice / multiple_choice / true_false: 선택한 보기의 is_correct
- fill_blank: 정답 텍스트들과 대소문자/앞뒤 공백 무시 비교
- 퀴즈에 없는 문항 id 는 건너뜀 (max_score 에도 포함 안 함)
- 선택/입력이 없는 제출은 오답 0점 (오류 아님)
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from lms_quiz.core.logging import get_logger

FILL_BLANK = "fill_blank"


@dataclass
class GradedAnswer:
    question_id: int
    answer_id: Optional[int]        # 해당 문항의 보기로 확인된 경우만
    text_answer: Optional[str]
    is_correct: bool
    points_earned: int


@dataclass
class GradeResult:
    results: List[GradedAnswer] = field(default_factory=list)
    total_score: int = 0
    max_score: int = 0
    skipped: int = 0


def _to_int(value: Any) -> Optional[int]:
    """숫자/숫자 문자열만 id 로 인정"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _as_text(value: Any) -> Optional[str]:
    """숫자 등 문자열이 아닌 입력은 str() 로 변환. 빈 값은 None"""
    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    return text or None


def _normalize(text: Any) -> str:
    return (_as_text(text) or "").strip().lower()


def is_fill_blank_match(question, text_answer: Any) -> bool:
    if not _normalize(text_answer):
        return False
    accepted = {_normalize(a.answer_text) for a in question.answers if a.is_correct}
    return _normalize(text_answer) in accepted


def find_answer(question, answer_id: Optional[int]):
    if answer_id is None:
        return None
    for a in question.answers:
        if a.id == answer_id:
            return a
    return None


def grade(
        questions: Sequence,
        submissions: Iterable,
        dedupe: bool = False,
        log: Optional[logging.Logger] = None,
) -> GradeResult:
    """
    제출 답안 채점

    Args:
        questions: 정답 정보가 포함된 문항들 (id, question_type, points, answers)
        submissions: questionId / answerId / textAnswer 를 가진 제출 항목들
        dedupe: True 면 같은 문항의 두 번째 이후 제출은 무시

    Returns:
        GradeResult (제출 순서대로 결과, 총점, 만점)
    """
    log = log or get_logger()
    by_id: Dict[int, Any] = {q.id: q for q in questions}
    seen = set()
    out = GradeResult()

    for sub in submissions:
        qid = _to_int(getattr(sub, "questionId", None))
        question = by_id.get(qid) if qid is not None else None
        if question is None:
            out.skipped += 1
            log.debug(f"퀴즈에 없는 문항 제출 무시: questionId={getattr(sub, 'questionId', None)!r}")
            continue

        if dedupe and question.id in seen:
            out.skipped += 1
            log.warning(f"같은 문항 중복 제출 무시: questionId={question.id}")
            continue
        seen.add(question.id)

        out.max_score += question.points
        text_answer = _as_text(getattr(sub, "textAnswer", None))
        selected = None

        if question.question_type == FILL_BLANK:
            is_correct = is_fill_blank_match(question, text_answer)
        else:
            selected = find_answer(question, _to_int(getattr(sub, "answerId", None)))
            is_correct = bool(selected is not None and selected.is_correct)

        earned = question.points if is_correct else 0
        out.total_score += earned
        out.results.append(GradedAnswer(
            question_id=question.id,
            answer_id=selected.id if selected is not None else None,
            text_answer=text_answer,
            is_correct=is_correct,
            points_earned=earned,
        ))

    return out


def summarize(total_score: int, max_score: int, passing_score: Optional[int]) -> Tuple[float, bool]:
    """(percentage_score, passed). 합격 기준이 없으면 항상 합격"""
    percentage = (total_score / max_score) * 100 if max_score > 0 else 0.0
    passed = percentage >= passing_score if passing_score is not None else True
    return percentage, passed
