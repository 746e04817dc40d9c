# symptra/utils.py
import re
from typing import List

_SPLIT_RE = re.compile(r"[,;.\n]+")

RED_FLAGS = [
    "chest pain",
    "difficulty breathing",
    "shortness of breath",
    "unconscious",
    "severe bleeding",
    "sudden weakness",
    "slurred speech",
    "seizure",
    "blood in vomit",
    "severe abdominal pain",
]


def normalize_symptoms(raw_text: str) -> List[str]:
    """
    Split free text into lower-cased symptom phrases.

    Fragments are separated by commas, semicolons, full stops or newlines.
    Order of first appearance is kept and exact repeats are dropped.
    """
    if not raw_text:
        return []
    phrases: List[str] = []
    for fragment in _SPLIT_RE.split(raw_text):
        phrase = fragment.strip().lower()
        if phrase and phrase not in phrases:
            phrases.append(phrase)
    return phrases


def levenshtein(a: str, b: str) -> int:
    # single-row DP over the classic (len(a)+1) x (len(b)+1) table
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            if ca == cb:
                current.append(previous[j - 1])
            else:
                current.append(1 + min(previous[j - 1], previous[j], current[j - 1]))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - levenshtein(a, b)) / longest


def detect_red_flags(text: str) -> List[str]:
    """Return the red-flag phrases mentioned in the text, in RED_FLAGS order."""
    lowered = (text or "").lower()
    return [rf for rf in RED_FLAGS if rf in lowered]


_ANALYSED_SYMPTOMS_RE = re.compile(r"symptoms?[:\s]+(.+?)\.", re.IGNORECASE | re.DOTALL)


def extract_symptoms(message: str) -> List[str]:
    """Symptom list of a "symptoms: a, b, c." style message, for display."""
    m = _ANALYSED_SYMPTOMS_RE.search(message or "")
    if not m:
        return []
    return [s.strip() for s in m.group(1).split(",") if s.strip()]
