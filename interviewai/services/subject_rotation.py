"""
Subject rotation policy.

Spreads a question quota over an ordered list of subjects as evenly as
possible: every subject gets ``quota // n`` questions and the first
``quota % n`` subjects get one extra. Question ``k`` (1-indexed) belongs to
the first subject whose cumulative allotment reaches ``k``.
"""
from typing import Iterable, List, Tuple

from interviewai.core.errors import InvalidQuotaError, InvalidSubjectsError


def normalize_subjects(raw: Iterable[str]) -> List[str]:
    """Trim, drop blanks and de-duplicate subjects, keeping first-seen order."""
    seen = set()
    subjects = []
    for subject in raw or []:
        cleaned = (subject or "").strip()
        if cleaned and cleaned.lower() not in seen:
            seen.add(cleaned.lower())
            subjects.append(cleaned)
    return subjects


def allocate_questions(subjects: List[str], quota: int) -> List[Tuple[str, int]]:
    """
    Allot ``quota`` questions across ``subjects``.

    Example: ["DSA", "OS", "DBMS"] with quota 10 -> DSA 4, OS 3, DBMS 3.
    Subjects may receive 0 questions when there are more subjects than questions.
    """
    if not subjects:
        raise InvalidSubjectsError("At least one subject is required")
    if quota < 1:
        raise InvalidQuotaError(f"Question quota must be at least 1, got {quota}")

    base, extra = divmod(quota, len(subjects))
    return [
        (subject, base + 1 if index < extra else base)
        for index, subject in enumerate(subjects)
    ]


def subject_for_question(subjects: List[str], quota: int, question_number: int) -> str:
    """Return the subject that question ``question_number`` (1-indexed) is drawn from."""
    if question_number < 1 or question_number > quota:
        raise InvalidQuotaError(
            f"Question number {question_number} is outside 1..{quota}"
        )

    cumulative = 0
    for subject, count in allocate_questions(subjects, quota):
        cumulative += count
        if cumulative >= question_number:
            return subject

    # unreachable: allotments always sum to quota
    raise InvalidQuotaError(f"No subject allotted for question {question_number}")
