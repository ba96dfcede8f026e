"""
Unit tests for spreading a question quota across subjects.
"""
import pytest

from interviewai.core.errors import InvalidQuotaError, InvalidSubjectsError
from interviewai.services.subject_rotation import (
    allocate_questions,
    normalize_subjects,
    subject_for_question,
)


def test_three_subjects_ten_questions():
    """DSA gets the extra question; OS and DBMS get three each."""
    subjects = ["DSA", "OS", "DBMS"]
    assert allocate_questions(subjects, 10) == [("DSA", 4), ("OS", 3), ("DBMS", 3)]

    order = [subject_for_question(subjects, 10, k) for k in range(1, 11)]
    assert order == ["DSA"] * 4 + ["OS"] * 3 + ["DBMS"] * 3


def test_single_subject_takes_every_question():
    for k in range(1, 6):
        assert subject_for_question(["System Design"], 5, k) == "System Design"


def test_more_subjects_than_questions():
    """Trailing subjects get nothing when the quota is smaller than the list."""
    subjects = ["DSA", "OS", "DBMS", "CN"]
    assert allocate_questions(subjects, 2) == [("DSA", 1), ("OS", 1), ("DBMS", 0), ("CN", 0)]
    assert [subject_for_question(subjects, 2, k) for k in (1, 2)] == ["DSA", "OS"]


@pytest.mark.parametrize("n_subjects", [1, 2, 3, 4, 5])
@pytest.mark.parametrize("quota", [1, 2, 5, 7, 10, 20])
def test_allotment_is_even_and_complete(n_subjects, quota):
    """Counts sum to the quota, differ by at most one, and never increase down the list."""
    subjects = [f"S{i}" for i in range(n_subjects)]
    counts = [count for _, count in allocate_questions(subjects, quota)]

    assert sum(counts) == quota
    assert max(counts) - min(counts) <= 1
    assert counts == sorted(counts, reverse=True)

    # Walking every question reproduces the same allotment
    walked = [subject_for_question(subjects, quota, k) for k in range(1, quota + 1)]
    assert [walked.count(s) for s in subjects] == counts


def test_empty_subjects_rejected():
    with pytest.raises(InvalidSubjectsError):
        allocate_questions([], 5)


@pytest.mark.parametrize("quota", [0, -3])
def test_non_positive_quota_rejected(quota):
    with pytest.raises(InvalidQuotaError):
        allocate_questions(["DSA"], quota)


@pytest.mark.parametrize("question_number", [0, 6])
def test_question_number_out_of_range(question_number):
    with pytest.raises(InvalidQuotaError):
        subject_for_question(["DSA", "OS"], 5, question_number)


def test_normalize_subjects():
    """Blanks are dropped and duplicates collapse case-insensitively, keeping first-seen order."""
    assert normalize_subjects([" DSA ", "", "os", "dsa", "  ", "DBMS", "OS"]) == ["DSA", "os", "DBMS"]
    assert normalize_subjects([]) == []
    assert normalize_subjects(None) == []
