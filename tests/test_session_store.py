"""
Tests for session and response persistence.
"""
from datetime import timedelta

import pytest

from interviewai.core.errors import (
    InvalidStateError,
    ProfileNotFoundError,
    SessionCreateError,
    SessionNotFoundError,
)
from interviewai.db.models.interview_session import STATUS_COMPLETED, STATUS_IN_PROGRESS
from interviewai.services import session_store
from interviewai.services.feedback import Feedback, parse_feedback


def _session(db, profile, subjects=("DSA", "OS"), total=4):
    return session_store.create_session(db, profile.id, list(subjects), "Technical - DSA, OS", total)


def test_create_session(db, profile):
    session = _session(db, profile)

    assert session.id is not None
    assert session.user_id == profile.id
    assert session.subjects == ["DSA", "OS"]
    assert session.total_questions == 4
    assert session.status == STATUS_IN_PROGRESS
    assert session.started_at is not None
    assert session.completed_at is None


def test_create_session_requires_user(db):
    with pytest.raises(SessionCreateError):
        session_store.create_session(db, None, ["DSA"], "Technical - DSA", 5)


def test_get_session_scoped_to_owner(db, profile):
    session = _session(db, profile)

    assert session_store.get_session(db, session.id, user_id=profile.id).id == session.id
    with pytest.raises(SessionNotFoundError):
        session_store.get_session(db, session.id, user_id=profile.id + 1)
    with pytest.raises(SessionNotFoundError):
        session_store.get_session(db, 9999)


def test_insert_and_list_responses(db, profile):
    session = _session(db, profile)
    first = session_store.insert_response(
        db, session.id, 1, "What is a heap?", "A tree with the heap property",
        Feedback(score=80, strengths=["Accurate"], feedback="Good"),
    )
    second = session_store.insert_response(
        db, session.id, 2, "What is paging?", "Fixed-size memory blocks",
        Feedback(score=60),
    )

    responses = session_store.list_responses(db, session.id)
    assert [r.id for r in responses] == [first.id, second.id]
    assert [r.question_number for r in responses] == [1, 2]
    assert responses[0].score == 80
    assert parse_feedback(responses[0].ai_feedback).feedback.strengths == ["Accurate"]
    assert session_store.count_responses(db, session.id) == 2


def test_list_responses_for_several_sessions(db, profile):
    one = _session(db, profile)
    two = _session(db, profile)
    session_store.insert_response(db, one.id, 1, "Q", "A", Feedback(score=50))
    session_store.insert_response(db, two.id, 1, "Q", "A", Feedback(score=70))

    assert len(session_store.list_responses(db, [one.id, two.id])) == 2
    assert session_store.list_responses(db, []) == []


def test_mark_completed_once(db, profile):
    session = _session(db, profile)
    completed = session_store.mark_completed(db, session.id)

    assert completed.status == STATUS_COMPLETED
    assert completed.completed_at >= completed.started_at

    with pytest.raises(InvalidStateError):
        session_store.mark_completed(db, session.id)


def test_completion_never_precedes_start(db, profile):
    session = _session(db, profile)
    too_early = session_store.as_utc(session.started_at) - timedelta(hours=1)

    completed = session_store.mark_completed(db, session.id, completed_at=too_early)
    assert completed.completed_at == completed.started_at


def test_list_sessions_newest_first(db, profile):
    older = _session(db, profile)
    newer = _session(db, profile)
    session_store.mark_completed(db, older.id)

    assert [s.id for s in session_store.list_sessions(db, profile.id)] == [newer.id, older.id]
    assert [s.id for s in session_store.list_sessions(db, profile.id, status=STATUS_COMPLETED)] == [older.id]


def test_update_profile(db, profile):
    updated = session_store.update_profile(db, profile.id, full_name="Asha R", email="ASHA.R@example.com")
    assert updated.full_name == "Asha R"
    assert updated.email == "asha.r@example.com"
    assert session_store.get_profile_by_email(db, "Asha.R@example.com").id == profile.id

    with pytest.raises(ProfileNotFoundError):
        session_store.update_profile(db, 9999, full_name="Nobody")
