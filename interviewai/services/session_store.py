"""
Session store: create/read/update access to profiles, interview sessions and
interview responses.

Each write is a single-row insert or update committed on its own. Nothing here
spans tables in one transaction, and nothing compensates for a later failure.
"""
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from interviewai.core.errors import (
    InvalidStateError,
    ProfileNotFoundError,
    ResponseSaveError,
    SessionCreateError,
    SessionNotFoundError,
)
from interviewai.db.models.interview_response import InterviewResponse
from interviewai.db.models.interview_session import (
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    InterviewSession,
    utcnow,
)
from interviewai.db.models.profile import Profile
from interviewai.services.feedback import Feedback, serialize_feedback

logger = logging.getLogger(__name__)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ============================================
# Profiles
# ============================================

def get_profile(db: Session, user_id: int) -> Optional[Profile]:
    return db.query(Profile).filter(Profile.id == user_id).first()


def get_profile_by_email(db: Session, email: str) -> Optional[Profile]:
    return db.query(Profile).filter(Profile.email == email.lower()).first()


def create_profile(db: Session, full_name: str, email: str, password_hash: str) -> Profile:
    profile = Profile(full_name=full_name, email=email.lower(), password_hash=password_hash)
    db.add(profile)
    db.commit()
    db.refresh(profile)
    logger.info(f"Profile created: user_id={profile.id}")
    return profile


def update_profile(
    db: Session,
    user_id: int,
    full_name: Optional[str] = None,
    email: Optional[str] = None,
) -> Profile:
    profile = get_profile(db, user_id)
    if not profile:
        raise ProfileNotFoundError(f"Profile {user_id} not found")

    if full_name is not None:
        profile.full_name = full_name
    if email is not None:
        profile.email = email.lower()

    db.commit()
    db.refresh(profile)
    logger.info(f"Profile updated: user_id={user_id}")
    return profile


# ============================================
# Sessions
# ============================================

def create_session(
    db: Session,
    user_id: Optional[int],
    subjects: List[str],
    interview_type: str,
    total_questions: int,
) -> InterviewSession:
    """
    Insert a new in-progress session.

    Raises:
        SessionCreateError: No authenticated user, or the insert failed
    """
    if not user_id:
        raise SessionCreateError("Failed to start interview session: no authenticated user")

    session = InterviewSession(
        user_id=user_id,
        interview_type=interview_type,
        subjects=list(subjects),
        total_questions=total_questions,
        status=STATUS_IN_PROGRESS,
        started_at=utcnow(),
    )
    try:
        db.add(session)
        db.commit()
        db.refresh(session)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Session insert failed for user_id={user_id}: {e}", exc_info=True)
        raise SessionCreateError("Failed to start interview session") from e

    logger.info(
        f"Session created: session_id={session.id}, user_id={user_id}, "
        f"subjects={session.subjects}, total_questions={total_questions}"
    )
    return session


def get_session(db: Session, session_id: int, user_id: Optional[int] = None) -> InterviewSession:
    """Fetch a session, optionally restricted to its owner."""
    query = db.query(InterviewSession).filter(InterviewSession.id == session_id)
    if user_id is not None:
        query = query.filter(InterviewSession.user_id == user_id)
    session = query.first()
    if not session:
        raise SessionNotFoundError(f"Interview session {session_id} not found")
    return session


def list_sessions(db: Session, user_id: int, status: Optional[str] = None) -> List[InterviewSession]:
    query = db.query(InterviewSession).filter(InterviewSession.user_id == user_id)
    if status:
        query = query.filter(InterviewSession.status == status)
    return query.order_by(InterviewSession.started_at.desc(), InterviewSession.id.desc()).all()


def mark_completed(db: Session, session_id: int, completed_at: Optional[datetime] = None) -> InterviewSession:
    """
    Transition a session to completed. Happens at most once per session, and
    the completion timestamp never precedes the start timestamp.
    """
    session = get_session(db, session_id)
    if session.status == STATUS_COMPLETED:
        raise InvalidStateError(f"Interview session {session_id} is already completed")

    started_at = as_utc(session.started_at)
    completed_at = as_utc(completed_at) or utcnow()
    if started_at and completed_at < started_at:
        completed_at = started_at

    session.status = STATUS_COMPLETED
    session.completed_at = completed_at
    db.commit()
    db.refresh(session)
    logger.info(f"Session completed: session_id={session_id}")
    return session


# ============================================
# Responses
# ============================================

def count_responses(db: Session, session_id: int) -> int:
    return db.query(InterviewResponse).filter(InterviewResponse.session_id == session_id).count()


def insert_response(
    db: Session,
    session_id: int,
    question_number: int,
    question_text: str,
    answer_text: str,
    feedback: Feedback,
) -> InterviewResponse:
    """
    Append one response row. Score and feedback come from an already
    validated Feedback, so the score is always an int in [0, 100].

    Raises:
        ResponseSaveError: The insert failed
    """
    response = InterviewResponse(
        session_id=session_id,
        question_number=question_number,
        question_text=question_text,
        answer_text=answer_text,
        ai_feedback=serialize_feedback(feedback),
        score=feedback.score,
        created_at=utcnow(),
    )
    try:
        db.add(response)
        db.commit()
        db.refresh(response)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Response insert failed for session_id={session_id}: {e}", exc_info=True)
        raise ResponseSaveError("Failed to save your answer. Please try again.") from e

    logger.debug(f"Response saved: session_id={session_id}, question={question_number}, score={feedback.score}")
    return response


def list_responses(db: Session, session_ids: Union[int, Iterable[int]]) -> List[InterviewResponse]:
    """Responses for one session id or several, in creation order."""
    ids = [session_ids] if isinstance(session_ids, int) else list(session_ids)
    if not ids:
        return []
    return (
        db.query(InterviewResponse)
        .filter(InterviewResponse.session_id.in_(ids))
        .order_by(InterviewResponse.created_at.asc(), InterviewResponse.id.asc())
        .all()
    )
