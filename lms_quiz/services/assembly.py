# lms_quiz/services/assembly.py
"""
응시 화면 구성
- 기본: 문항 position 오름차순, 보기 id 오름차순
- randomize: 시드 기반 문항 섞기 → 개수 제한 → (옵션) 같은 난수 흐름으로 보기 섞기 → position 재부여
- 정답 여부/해설은 절대 내보내지 않음
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Union

from lms_quiz.core.seeded_random import SeededRandom, build_seed, seeded_shuffle
from lms_quiz.schemas.quiz import AnswerView, QuestionView, QuizView, QuizViewMetadata


@dataclass(frozen=True)
class AssemblyOptions:
    randomize: bool = False
    question_count: Optional[int] = None
    user_seed: Optional[str] = None
    shuffle_answers: bool = False


def _canonical_questions(quiz):
    questions = sorted(quiz.questions, key=lambda q: (q.position, q.id))
    return [(q, sorted(q.answers, key=lambda a: a.id)) for q in questions]


def assemble_quiz_view(
        quiz,
        options: AssemblyOptions,
        user_id: Optional[Union[int, str]] = None,
        client_host: Optional[str] = None,
) -> QuizView:
    entries = _canonical_questions(quiz)
    total = len(entries)
    seed: Optional[str] = None

    if options.randomize:
        seed = build_seed(quiz.id, user_id=user_id, client_host=client_host, sub_seed=options.user_seed)
        if entries:
            rng = SeededRandom(seed)
            entries = seeded_shuffle(entries, rng)

            if options.question_count and options.question_count > 0:
                entries = entries[:min(options.question_count, len(entries))]

            if options.shuffle_answers:
                # 리셋하지 않고 같은 생성기를 이어서 사용
                entries = [(q, seeded_shuffle(answers, rng)) for q, answers in entries]

    questions = [
        QuestionView(
            id=q.id,
            questionText=q.question_text,
            questionType=q.question_type,
            points=q.points,
            position=idx if options.randomize else q.position,
            answers=[AnswerView(id=a.id, answerText=a.answer_text) for a in answers],
        )
        for idx, (q, answers) in enumerate(entries)
    ]

    return QuizView(
        id=quiz.id,
        lessonId=quiz.lesson_id,
        title=quiz.title,
        description=quiz.description,
        timeLimit=quiz.time_limit,
        passingScore=quiz.passing_score,
        category=quiz.category,
        difficulty=quiz.difficulty,
        questions=questions,
        metadata=QuizViewMetadata(
            totalAvailableQuestions=total,
            returnedQuestions=len(questions),
            randomized=options.randomize,
            answersShuffled=options.randomize and options.shuffle_answers,
            seed=seed,
        ),
    )
