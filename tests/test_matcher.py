import pytest

from symptra.diseases import DISEASES, load_corpus
from symptra.matcher import MAX_RESULTS, match_conditions, phrase_matches, score_condition
from symptra.schemas import Condition
from symptra.utils import levenshtein, normalize_symptoms, similarity

SAMPLE_INPUTS = [
    "fever, cough, fatigue",
    "headache; nausea; light sensitivity",
    "itchy eyes\nwatery eyes\nsneezing",
    "burning urination. frequent urination",
    "hedache, dizzyness",
    "completely unrelated words",
    "fever",
    "chest pain, shortness of breath, wheezing, high fever, chills, sweating, fatigue",
]


# --- normalizer ---


def test_normalize_splits_trims_and_lowercases():
    text = "Fever, Headache; cough.\n\n  Fatigue "
    assert normalize_symptoms(text) == ["fever", "headache", "cough", "fatigue"]


def test_normalize_keeps_first_seen_order_and_drops_repeats():
    assert normalize_symptoms("cough, Fever, COUGH, fever") == ["cough", "fever"]


def test_normalize_empty_inputs():
    assert normalize_symptoms("") == []
    assert normalize_symptoms(" , ; . \n") == []


@pytest.mark.parametrize("text", SAMPLE_INPUTS)
def test_normalize_is_idempotent(text):
    once = normalize_symptoms(text)
    assert normalize_symptoms(", ".join(once)) == once


# --- edit distance ---


def test_levenshtein_known_values():
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("", "abc") == 3
    assert levenshtein("abc", "abc") == 0
    assert levenshtein("flaw", "lawn") == 2


def test_similarity():
    assert similarity("", "") == 1.0
    assert similarity("abc", "abd") == pytest.approx(2 / 3)
    assert similarity("hedache", "headache") == pytest.approx(7 / 8)


def test_phrase_matches_by_containment_and_similarity():
    assert phrase_matches("fever", ["high fever"])
    assert phrase_matches("persistent dry cough", ["dry cough"])
    assert phrase_matches("hedache", ["headache"])
    assert not phrase_matches("xyz", ["headache", "fever"])


# --- corpus ---


def test_corpus_invariants():
    names = [c.name for c in DISEASES]
    assert len(names) == len(set(names))
    for condition in DISEASES:
        assert condition.symptoms
        assert all(s == s.lower() for s in condition.symptoms)
        assert len(set(condition.symptoms)) == len(condition.symptoms)
        assert condition.severity in {"mild", "moderate", "severe"}


def test_corpus_is_immutable():
    with pytest.raises(Exception):
        DISEASES[0].name = "Something else"


def test_load_corpus_rejects_bad_entries():
    base = {"name": "X", "symptoms": ["a"], "description": "d", "severity": "mild"}
    with pytest.raises(ValueError):
        load_corpus([base, dict(base)])
    with pytest.raises(ValueError):
        load_corpus([dict(base, symptoms=[])])
    with pytest.raises(ValueError):
        load_corpus([dict(base, symptoms=["Fever"])])
    with pytest.raises(ValueError):
        load_corpus([dict(base, symptoms=["fever", "fever"])])


# --- matcher ---


def test_empty_input_returns_no_matches():
    assert match_conditions([]) == []


def test_score_counts_fraction_of_input_phrases():
    cold = next(c for c in DISEASES if c.name == "Common Cold")
    assert score_condition(["fever", "rash"], cold) == 0.5
    assert score_condition([], cold) == 0.0


def test_fever_cough_fatigue_scenario():
    results = match_conditions(["fever", "cough", "fatigue"])
    names = [r.condition.name for r in results]

    assert "Common Cold" in names
    assert "Influenza (Flu)" in names
    assert names[:4] == ["Common Cold", "Influenza (Flu)", "COVID-19", "Pneumonia"]
    assert all(r.score == 1.0 for r in results[:4])
    assert results[4].condition.name == "Chickenpox"
    assert results[4].score == pytest.approx(2 / 3)


def test_results_reference_corpus_entries():
    results = match_conditions(["fever"])
    for r in results:
        assert any(r.condition is c for c in DISEASES)


@pytest.mark.parametrize("text", SAMPLE_INPUTS)
def test_matcher_properties(text):
    symptoms = normalize_symptoms(text)
    results = match_conditions(symptoms)

    assert len(results) <= MAX_RESULTS
    assert all(0.1 < r.score <= 1.0 for r in results)
    scores = [r.score for r in results]
    assert scores == sorted(scores, reverse=True)
    # ties keep corpus order
    order = {c.name: i for i, c in enumerate(DISEASES)}
    for a, b in zip(results, results[1:]):
        if a.score == b.score:
            assert order[a.condition.name] < order[b.condition.name]
    # deterministic
    assert match_conditions(symptoms) == results


def test_cap_and_stable_ties_with_large_corpus():
    corpus = [
        Condition(name=f"Condition {i}", symptoms=("fever",), description="", severity="mild")
        for i in range(12)
    ]
    results = match_conditions(["fever"], corpus)
    assert [r.condition.name for r in results] == [f"Condition {i}" for i in range(5)]


def test_low_scores_are_dropped():
    corpus = [Condition(name="Narrow", symptoms=("rash",), description="", severity="mild")]
    symptoms = ["rash"] + [f"unrelated thing {i}" for i in range(9)]
    assert match_conditions(symptoms, corpus) == []
    assert len(match_conditions(symptoms[:9], corpus)) == 1
