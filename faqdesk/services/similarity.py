"""
단어 집합 기반 유사도 (Jaccard)

- 소문자화 후 [0-9a-z한글 공백] 이외 문자는 공백으로 치환한다.
- 공백 기준으로 나눈 단어를 '집합'으로 본다(중복 단어는 1회만 센다).
- 어느 한쪽 집합이라도 비어 있으면 0을 반환한다. (빈 문자열끼리도 0)
"""

import re
from typing import Set

_NON_WORD = re.compile(r"[^0-9a-z가-힣\s]")


def normalize_word_set(text: str | None) -> Set[str]:
    """문장을 정규화된 단어 집합으로 변환"""
    cleaned = _NON_WORD.sub(" ", (text or "").lower())
    return {tok for tok in cleaned.split() if tok}


def similarity_score(a: str | None, b: str | None) -> float:
    """두 문장의 Jaccard 유사도 (0.0 ~ 1.0, 대칭)"""
    set_a = normalize_word_set(a)
    set_b = normalize_word_set(b)
    if not set_a or not set_b:
        return 0.0
    inter = len(set_a & set_b)
    union = len(set_a) + len(set_b) - inter
    return inter / union
