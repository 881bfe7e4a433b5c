"""
Writing Scorer.

Heuristic rubric scoring for short essays. Each rubric criterion with a
known id has its own estimator; any other criterion receives 75% of its
points.

Estimators (fraction of the criterion's max points):
- content:      0.5 + 0.5 x min(words / limit, 1), or 0.8 without a limit,
                plus up to 0.2 for keywords used
- organization: 0.9 for 3+ paragraphs, 0.7 for 2, else 0.5
- grammar:      max(0.4, 1 - errors per sentence x 0.5)
- vocabulary:   0.3 + 0.7 x unique / total words
- mechanics:    min(1, punctuation marks per sentence)
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Callable, Sequence

from loguru import logger

from src.scoring.models import (
    DEFAULT_WRITING_RUBRIC,
    CriterionScore,
    WritingRubric,
    WritingScoreResult,
)

MAX_SUGGESTIONS = 3
UNKNOWN_CRITERION_SHARE = 0.75
WEAK_CRITERION_PERCENT = 70.0

_WORD = re.compile(r"\b\w+\b")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")
_PUNCTUATION = re.compile(r"[.!?:;,]")
_MISSING_APOSTROPHE = re.compile(r"\b(dont|wont|cant|shouldnt)\b", re.IGNORECASE)
_LOWERCASE_I = re.compile(r"\bi\b")


def count_words(content: str) -> int:
    return len(content.split())


def split_sentences(content: str) -> list[str]:
    return [s.strip() for s in _SENTENCE_SPLIT.split(content) if s.strip()]


def split_paragraphs(content: str) -> list[str]:
    return [p for p in _PARAGRAPH_SPLIT.split(content) if p.strip()]


# =============================================================================
# Criterion estimators
# =============================================================================


def score_content(
    content: str,
    max_points: float,
    word_limit: int | None = None,
    keywords: Sequence[str] | None = None,
) -> float:
    word_count = count_words(content)
    if word_limit:
        ratio = min(word_count / word_limit, 1.0)
        score = max_points * (0.5 + ratio * 0.5)
    else:
        score = max_points * 0.8

    if keywords:
        lowered = content.lower()
        found = sum(1 for k in keywords if k.strip() and k.strip().lower() in lowered)
        score = min(max_points, score + (found / len(keywords)) * max_points * 0.2)
    return score


def score_organization(content: str, max_points: float) -> float:
    paragraphs = len(split_paragraphs(content))
    if paragraphs >= 3:
        return max_points * 0.9
    if paragraphs == 2:
        return max_points * 0.7
    return max_points * 0.5


def count_grammar_errors(content: str) -> int:
    """
    Count surface errors: contractions missing an apostrophe, sentences
    starting in lowercase, and a lowercase standalone "i".
    """
    errors = len(_MISSING_APOSTROPHE.findall(content))
    errors += sum(1 for s in split_sentences(content) if s[0].islower())
    errors += len(_LOWERCASE_I.findall(content))
    return errors


def score_grammar(content: str, max_points: float) -> float:
    sentences = max(1, len(split_sentences(content)))
    error_rate = count_grammar_errors(content) / sentences
    return max_points * max(0.4, 1.0 - error_rate * 0.5)


def score_vocabulary(content: str, max_points: float) -> float:
    words = _WORD.findall(content.lower())
    if not words:
        return 0.0
    diversity = len(set(words)) / len(words)
    return max_points * (0.3 + diversity * 0.7)


def score_mechanics(content: str, max_points: float) -> float:
    sentences = max(1, len(split_sentences(content)))
    punctuation = len(_PUNCTUATION.findall(content))
    return max_points * min(1.0, punctuation / sentences)


# =============================================================================
# Feedback templates
# =============================================================================

_CRITERION_FEEDBACK = {
    "content": (
        "Rich content with a clear position that answers the prompt well.",
        "Content is mostly complete and the position is fairly clear.",
        "Content is thin; add more details and examples.",
        "Content is too simple; support your points with more material.",
    ),
    "organization": (
        "Clear structure with smooth logic and well-planned paragraphs.",
        "Structure is fairly clear and mostly logical.",
        "Structure needs work; use clearer paragraph breaks.",
        "Structure is confusing; reorganise the argument.",
    ),
    "grammar": (
        "Accurate grammar with varied sentence patterns.",
        "Grammar is mostly correct with occasional slips.",
        "Some grammar errors; check your work carefully.",
        "Frequent grammar errors; more grammar practice is needed.",
    ),
    "vocabulary": (
        "Word choice is precise and varied.",
        "Word choice is mostly appropriate.",
        "Vocabulary is ordinary; try more varied words.",
        "Vocabulary is repetitive; work on expanding it.",
    ),
    "mechanics": (
        "Punctuation and capitalisation are correct.",
        "Punctuation and capitalisation are mostly correct.",
        "A few punctuation or capitalisation problems.",
        "Punctuation and capitalisation need improvement.",
    ),
}

_CRITERION_SUGGESTIONS = {
    "content": "Add concrete examples and details to support your points.",
    "organization": (
        "Use linking words such as however, therefore and in addition "
        "to connect paragraphs."
    ),
    "grammar": "Proofread for grammar, especially consistent verb tenses.",
    "vocabulary": "Vary your vocabulary and avoid repeating the same words.",
    "mechanics": "Check punctuation and capitalisation against standard English usage.",
}

GENERIC_SUGGESTION = "Keep up the good habits and read model essays to improve further."


def criterion_feedback(criterion_id: str, score: float, max_points: float) -> str:
    templates = _CRITERION_FEEDBACK.get(criterion_id)
    if templates is None:
        return "Scored."
    percent = 100.0 * score / max_points if max_points > 0 else 0.0
    if percent >= 90:
        return templates[0]
    if percent >= 75:
        return templates[1]
    if percent >= 60:
        return templates[2]
    return templates[3]


def overall_feedback(percent: float, word_count: int, sentence_count: int) -> str:
    if percent >= 90:
        text = "Excellent! A high-quality essay that is strong in every area."
    elif percent >= 80:
        text = "Very good! A solid essay with room to improve in a few areas."
    elif percent >= 70:
        text = "Good. The essay meets the basic requirements; practise the weaker areas."
    elif percent >= 60:
        text = "Pass. There is a foundation to build on, but several areas need work."
    else:
        text = "Needs improvement. Read model essays and practise core writing skills."
    return f"{text} {word_count} words, {sentence_count} sentences."


def writing_suggestions(
    criteria_scores: Sequence[CriterionScore],
    word_count: int,
    word_limit: int | None = None,
) -> tuple[str, ...]:
    """Up to three suggestions from weak criteria and a short essay."""
    suggestions = [
        _CRITERION_SUGGESTIONS[cs.criterion_id]
        for cs in criteria_scores
        if cs.percentage < WEAK_CRITERION_PERCENT and cs.criterion_id in _CRITERION_SUGGESTIONS
    ]
    if word_limit and word_count < word_limit * 0.8:
        suggestions.append(
            f"The essay is short ({word_count} words); expand it towards "
            f"the {word_limit}-word target."
        )
    if not suggestions:
        suggestions.append(GENERIC_SUGGESTION)
    return tuple(suggestions[:MAX_SUGGESTIONS])


# =============================================================================
# Entry point
# =============================================================================


def score_writing(
    content: str,
    rubric: WritingRubric = DEFAULT_WRITING_RUBRIC,
    word_limit: int | None = None,
    keywords: Sequence[str] | None = None,
) -> WritingScoreResult:
    """
    Score an essay against a rubric.

    Args:
        content: Essay text; paragraphs separated by blank lines
        rubric: Criteria and their max points
        word_limit: Target word count, if the prompt sets one
        keywords: Words the prompt expects to see

    Returns:
        WritingScoreResult; blank text scores 0 on every criterion
    """
    content = content or ""
    word_count = count_words(content)
    sentence_count = len(split_sentences(content))
    blank = not content.strip()

    estimators: dict[str, Callable[[float], float]] = {
        "content": lambda m: score_content(content, m, word_limit, keywords),
        "organization": lambda m: score_organization(content, m),
        "grammar": lambda m: score_grammar(content, m),
        "vocabulary": lambda m: score_vocabulary(content, m),
        "mechanics": lambda m: score_mechanics(content, m),
    }

    criteria_scores: list[CriterionScore] = []
    for criterion in rubric.criteria:
        max_points = criterion.max_points
        if blank:
            raw = 0.0
        elif criterion.id in estimators:
            raw = estimators[criterion.id](max_points)
        else:
            raw = max_points * UNKNOWN_CRITERION_SHARE
        score = max(0, min(max_points, round(raw)))
        criteria_scores.append(
            CriterionScore(
                criterion_id=criterion.id,
                score=score,
                max_score=max_points,
                feedback=criterion_feedback(criterion.id, score, max_points),
            )
        )

    total = sum(cs.score for cs in criteria_scores)
    max_total = sum(cs.max_score for cs in criteria_scores)
    percent = 100.0 * total / max_total if max_total > 0 else 0.0

    result = WritingScoreResult(
        total_score=total,
        max_score=max_total,
        overall_score=round(percent, 1),
        criteria_scores=tuple(criteria_scores),
        overall_feedback=overall_feedback(percent, word_count, sentence_count),
        suggestions=writing_suggestions(criteria_scores, word_count, word_limit),
        word_count=word_count,
        sentence_count=sentence_count,
        sub_scores=MappingProxyType(
            {cs.criterion_id: round(cs.percentage, 1) for cs in criteria_scores}
        ),
    )
    logger.debug(f"Writing: {total}/{max_total} over {word_count} words")
    return result
