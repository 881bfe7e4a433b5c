"""
Pronunciation Scorer.

Approximates how well a spoken transcript matches the target sentence.
The speech recogniser supplies the transcript and a 0-1 confidence; no
audio is processed here.

Scoring:
    accuracy      = 100 x matched positions / original word count
    overall       = min(100, accuracy + confidence x 20)
    fluency       = round(confidence x 100)
    pronunciation = round(overall x 0.9)

A position matches when the words are equal or one contains the other.
"""

from __future__ import annotations

import re
from types import MappingProxyType

from loguru import logger

from src.scoring.models import Mistake, ScoreResult

MAX_MISTAKES = 3
CONFIDENCE_WEIGHT = 20.0

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_words(text: str) -> list[str]:
    """Lowercase, drop punctuation and split on whitespace."""
    cleaned = _NON_WORD.sub("", (text or "").lower())
    return [w for w in _WHITESPACE.split(cleaned) if w]


def words_match(expected: str, actual: str) -> bool:
    if not expected or not actual:
        return False
    return expected == actual or expected in actual or actual in expected


def _suggestion(expected: str, actual: str) -> str:
    if not actual:
        return f'Missing word: say "{expected}"'
    return f'"{actual}" should be "{expected}"'


def find_mistakes(
    original_words: list[str],
    spoken_words: list[str],
    limit: int = MAX_MISTAKES,
) -> tuple[Mistake, ...]:
    """
    First ``limit`` target positions the transcript did not match.

    Extra spoken words past the end of the target are not mistakes.
    """
    mistakes: list[Mistake] = []
    for i, expected in enumerate(original_words):
        if len(mistakes) >= limit:
            break
        actual = spoken_words[i] if i < len(spoken_words) else ""
        if words_match(expected, actual):
            continue
        mistakes.append(
            Mistake(
                position=i,
                expected=expected,
                actual=actual,
                suggestion=_suggestion(expected, actual),
            )
        )
    return tuple(mistakes)


def pronunciation_feedback(overall: float) -> str:
    if overall >= 90:
        return "Excellent pronunciation!"
    if overall >= 80:
        return "Very good pronunciation, keep it up."
    if overall >= 70:
        return "Mostly correct, with room to improve."
    if overall >= 60:
        return "Pronunciation needs some work."
    return "Needs practice: try shadowing the sentence slowly, then speed up."


def score_pronunciation(original: str, spoken: str, confidence: float) -> ScoreResult:
    """
    Score a spoken attempt against the target sentence.

    Args:
        original: Target sentence
        spoken: Recognised transcript
        confidence: Recogniser confidence; clamped to [0, 1]

    Returns:
        ScoreResult; an empty original scores 0 accuracy
    """
    warnings: list[str] = []
    if not 0.0 <= confidence <= 1.0:
        clamped = max(0.0, min(1.0, confidence))
        message = f"confidence {confidence} outside [0, 1], clamped to {clamped}"
        logger.warning(message)
        warnings.append(message)
        confidence = clamped

    original_words = normalize_words(original)
    spoken_words = normalize_words(spoken)

    matched = sum(
        1
        for expected, actual in zip(original_words, spoken_words)
        if words_match(expected, actual)
    )
    accuracy = 100.0 * matched / len(original_words) if original_words else 0.0
    overall = min(100.0, accuracy + confidence * CONFIDENCE_WEIGHT)

    result = ScoreResult(
        overall_score=round(overall, 1),
        sub_scores=MappingProxyType(
            {
                "accuracy": round(accuracy, 1),
                "fluency": float(round(confidence * 100)),
                "pronunciation": float(round(overall * 0.9)),
            }
        ),
        feedback=pronunciation_feedback(overall),
        mistakes=find_mistakes(original_words, spoken_words),
        warnings=tuple(warnings),
    )
    logger.debug(
        f"Pronunciation: {matched}/{len(original_words)} words matched, "
        f"overall={result.overall_score}"
    )
    return result
