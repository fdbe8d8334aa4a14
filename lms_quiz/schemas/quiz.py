# lms_quiz/schemas/quiz.py
from __future__ import annotations
from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel, Field

from lms_quiz.schemas.common import Pagination


# -------------------------------
# 1) 출제 (생성/수정 요청)
# -------------------------------
# 필수값 검사는 트랜잭션 안(crud)에서 수행한다. 중간에 실패하면 전체 롤백.
class AnswerCreate(BaseModel):
    answerText: Optional[str] = None
    isCorrect: Optional[bool] = None
    explanation: Optional[str] = None


class QuestionCreate(BaseModel):
    questionText: Optional[str] = None
    questionType: Optional[str] = None   # single_choice | multiple_choice | true_false | fill_blank
    points: Optional[int] = None         # 기본 1
    explanation: Optional[str] = None
    answers: Optional[List[AnswerCreate]] = None


class QuizCreate(BaseModel):
    lessonId: Optional[int] = None       # 강의 퀴즈는 필수, 모의고사는 무시
    title: Optional[str] = None
    description: Optional[str] = None
    timeLimit: Optional[int] = None
    passingScore: Optional[int] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    questions: Optional[List[QuestionCreate]] = None


class QuizUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    timeLimit: Optional[int] = None
    passingScore: Optional[int] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None


class QuestionUpdate(BaseModel):
    questionText: Optional[str] = None
    questionType: Optional[str] = None
    points: Optional[int] = None
    explanation: Optional[str] = None
    answers: Optional[List[AnswerCreate]] = None  # 주어지면 보기 전체 교체


class MockTestImportRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    timeLimit: Optional[int] = None
    passingScore: Optional[int] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    content: str = ""                    # 문서에서 추출된 평문


# -------------------------------
# 2) 출제자용 상세 (정답/해설 포함)
# -------------------------------
class AnswerDetail(BaseModel):
    id: int
    answerText: str
    isCorrect: bool
    explanation: Optional[str] = None


class QuestionDetail(BaseModel):
    id: int
    questionText: str
    questionType: str
    points: int
    explanation: Optional[str] = None
    position: int
    answers: List[AnswerDetail]


class QuizDetail(BaseModel):
    id: int
    lessonId: Optional[int] = None
    title: str
    description: Optional[str] = None
    timeLimit: Optional[int] = None
    passingScore: Optional[int] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
    questions: List[QuestionDetail]


class QuizImportResponse(BaseModel):
    quiz: QuizDetail
    importedQuestions: int


# -------------------------------
# 3) 응시자용 화면 (정답/해설 제거)
# -------------------------------
class AnswerView(BaseModel):
    id: int
    answerText: str


class QuestionView(BaseModel):
    id: int
    questionText: str
    questionType: str
    points: int
    position: int
    answers: List[AnswerView]


class QuizViewMetadata(BaseModel):
    totalAvailableQuestions: int
    returnedQuestions: int
    randomized: bool
    answersShuffled: bool
    seed: Optional[str] = None


class QuizView(BaseModel):
    id: int
    lessonId: Optional[int] = None
    title: str
    description: Optional[str] = None
    timeLimit: Optional[int] = None
    passingScore: Optional[int] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    questions: List[QuestionView]
    metadata: QuizViewMetadata


class QuizSummary(BaseModel):
    id: int
    lessonId: Optional[int] = None
    title: str
    description: Optional[str] = None
    timeLimit: Optional[int] = None
    passingScore: Optional[int] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    questionCount: int
    createdAt: Optional[datetime] = None


class QuizListResponse(BaseModel):
    items: List[QuizSummary]
    pagination: Pagination


# -------------------------------
# 4) 응시 제출
# -------------------------------
class SubmissionItem(BaseModel):
    # 형식이 이상한 값도 그대로 받는다. 채점 단계에서 오답 0점 처리 (요청 자체는 거절하지 않음)
    questionId: Any = None
    answerId: Any = None
    textAnswer: Any = None


class SubmitAttemptRequest(BaseModel):
    quizId: Optional[int] = None
    startedAt: Optional[datetime] = None
    answers: Optional[List[SubmissionItem]] = None


class AttemptQuizInfo(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    passingScore: Optional[int] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None


class UserAnswerOut(BaseModel):
    id: int
    questionId: int
    answerId: Optional[int] = None
    textAnswer: Optional[str] = None
    isCorrect: bool
    pointsEarned: int
    question: Optional[QuestionDetail] = None
    answer: Optional[AnswerDetail] = None


class AttemptOut(BaseModel):
    id: int
    quizId: int
    userId: Optional[int] = None
    startedAt: datetime
    completedAt: Optional[datetime] = None
    timeSpentSeconds: Optional[int] = None
    score: int = 0
    maxScore: int = 0
    percentageScore: float = 0.0
    passed: bool = False
    quiz: Optional[AttemptQuizInfo] = None
    userAnswers: List[UserAnswerOut] = Field(default_factory=list)


class AttemptScore(BaseModel):
    score: int
    maxScore: int
    percentageScore: float
    passed: bool
    timeSpentSeconds: int


class AttemptResultResponse(BaseModel):
    attempt: AttemptOut
    result: AttemptScore
    requiresLogin: bool  # 비로그인 + 합격 → 가입 유도


class AttemptListResponse(BaseModel):
    items: List[AttemptOut]
    pagination: Pagination


# -------------------------------
# 5) 통계
# -------------------------------
class QuestionStat(BaseModel):
    id: int
    questionText: str
    questionType: str
    points: int
    totalAnswers: int
    correctAnswers: int
    correctPercentage: float


class QuizStatistics(BaseModel):
    quizId: int
    totalAttempts: int
    passedAttempts: int
    passRate: float
    averageScore: float
    questionStats: List[QuestionStat]
