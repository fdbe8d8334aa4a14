# lms_quiz/core/seeded_random.py
"""
시드 기반 셔플
- 같은 시드 → 항상 같은 순열 (프로세스 재시작과 무관)
- 보안용 난수가 아님. 재현 가능한 문항/보기 섞기 전용
"""
from __future__ import annotations
from typing import List, Optional, Sequence, TypeVar, Union

T = TypeVar("T")

_MODULUS = 233280
_MULTIPLIER = 9301
_INCREMENT = 49297


def seed_hash(seed: str) -> int:
    """UTF-16 코드 유닛 기준 31배 롤링 해시, 32비트 부호 있는 정수로 절단"""
    h = 0
    data = seed.encode("utf-16-le")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


class SeededRandom:
    """선형 합동 생성기. 호출할 때마다 [0, 1) 값을 하나씩 낸다."""

    def __init__(self, seed: str):
        self.seed = seed
        self._state = seed_hash(seed)

    def __call__(self) -> float:
        # 파이썬 % 는 음수 상태에서도 0 이상을 돌려준다
        self._state = (self._state * _MULTIPLIER + _INCREMENT) % _MODULUS
        return self._state / _MODULUS


def seeded_shuffle(items: Sequence[T], rng: SeededRandom) -> List[T]:
    """Fisher-Yates (뒤에서부터). 원본은 건드리지 않고 새 리스트 반환"""
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = int(rng() * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def build_seed(
        quiz_id: Union[int, str],
        user_id: Optional[Union[int, str]] = None,
        client_host: Optional[str] = None,
        sub_seed: Optional[str] = None,
) -> str:
    """요청자 + 퀴즈 + 보조 시드 → 시드 문자열"""
    identity = user_id if user_id is not None else (client_host or "anonymous")
    return f"{identity}-{quiz_id}-{sub_seed or 'default'}"
