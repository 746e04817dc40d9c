# symptra/matcher.py
"""
Local fuzzy matcher: ranks corpus conditions against the reported symptoms.

A reported phrase counts for a condition when one of the condition's canonical
phrases contains it, is contained by it, or is within the edit-similarity
threshold. The score is the fraction of reported phrases that matched.
"""
from typing import Iterable, List, Sequence

from .diseases import DISEASES
from .schemas import Condition, MatchResult
from .utils import similarity

SIMILARITY_THRESHOLD = 0.75
MIN_SCORE = 0.1
MAX_RESULTS = 5


def phrase_matches(phrase: str, canonical: Iterable[str]) -> bool:
    for candidate in canonical:
        if phrase in candidate or candidate in phrase:
            return True
        if similarity(phrase, candidate) > SIMILARITY_THRESHOLD:
            return True
    return False


def score_condition(symptoms: Sequence[str], condition: Condition) -> float:
    if not symptoms:
        return 0.0
    matched = sum(1 for phrase in symptoms if phrase_matches(phrase, condition.symptoms))
    return matched / len(symptoms)


def match_conditions(
    symptoms: Sequence[str], corpus: Sequence[Condition] = DISEASES
) -> List[MatchResult]:
    """
    Rank corpus conditions for the given normalized symptom phrases.

    Returns at most MAX_RESULTS matches scoring above MIN_SCORE, best first.
    Ties keep corpus order.
    """
    if not symptoms:
        return []
    results = []
    for condition in corpus:
        score = score_condition(symptoms, condition)
        if score > MIN_SCORE:
            results.append(MatchResult(condition=condition, score=score))
    # sorted() is stable, so equal scores stay in corpus order
    results = sorted(results, key=lambda r: r.score, reverse=True)
    return results[:MAX_RESULTS]
