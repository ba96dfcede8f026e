"""
Read-side views over stored sessions: dashboard stats, per-session results and
the plain-text performance report offered from the settings page.
"""
import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from interviewai.db.models.interview_response import InterviewResponse
from interviewai.db.models.interview_session import STATUS_COMPLETED, InterviewSession
from interviewai.db.models.profile import Profile
from interviewai.schemas.interview import (
    DashboardResponse,
    DashboardStats,
    ResponseDetail,
    ResultsResponse,
    SessionSummary,
)
from interviewai.services import session_store
from interviewai.services.feedback import parse_feedback

logger = logging.getLogger(__name__)

REPORT_WIDTH = 80


def average_score(responses: List[InterviewResponse]) -> int:
    """Rounded mean score; 0 when nothing has been answered."""
    if not responses:
        return 0
    return round(sum(r.score or 0 for r in responses) / len(responses))


def score_label(score: int) -> str:
    if score >= 80:
        return "Excellent"
    if score >= 60:
        return "Good"
    return "Needs Improvement"


def duration_minutes(session: InterviewSession) -> Optional[int]:
    started = session_store.as_utc(session.started_at)
    completed = session_store.as_utc(session.completed_at)
    if not started or not completed:
        return None
    return round((completed - started).total_seconds() / 60)


def summarize_session(session: InterviewSession, responses: List[InterviewResponse]) -> SessionSummary:
    return SessionSummary(
        id=session.id,
        interview_type=session.interview_type,
        subjects=list(session.subjects or []),
        status=session.status,
        total_questions=session.total_questions,
        answered=len(responses),
        average_score=average_score(responses),
        started_at=session.started_at,
        completed_at=session.completed_at,
        duration_minutes=duration_minutes(session),
    )


def _group_by_session(responses: List[InterviewResponse]) -> Dict[int, List[InterviewResponse]]:
    grouped = defaultdict(list)
    for response in responses:
        grouped[response.session_id].append(response)
    return grouped


def build_dashboard(db: Session, user_id: int) -> DashboardResponse:
    sessions = session_store.list_sessions(db, user_id)
    grouped = _group_by_session(session_store.list_responses(db, [s.id for s in sessions]))

    summaries = [summarize_session(s, grouped.get(s.id, [])) for s in sessions]
    all_responses = [r for rs in grouped.values() for r in rs]

    stats = DashboardStats(
        total_interviews=len(sessions),
        completed_interviews=sum(1 for s in sessions if s.status == STATUS_COMPLETED),
        average_score=average_score(all_responses),
        minutes_practiced=sum(s.duration_minutes or 0 for s in summaries),
        questions_answered=len(all_responses),
    )
    return DashboardResponse(stats=stats, sessions=summaries)


def build_results(db: Session, session_id: int, user_id: int) -> ResultsResponse:
    session = session_store.get_session(db, session_id, user_id=user_id)
    responses = session_store.list_responses(db, session.id)

    details = []
    for response in responses:
        parsed = parse_feedback(response.ai_feedback)
        details.append(ResponseDetail(
            id=response.id,
            question_number=response.question_number,
            question_text=response.question_text,
            answer_text=response.answer_text,
            score=response.score or 0,
            feedback=parsed.feedback,
            feedback_valid=parsed.ok,
            created_at=response.created_at,
        ))

    avg = average_score(responses)
    return ResultsResponse(
        session=summarize_session(session, responses),
        average_score=avg,
        score_label=score_label(avg),
        responses=details,
    )


def build_performance_report(db: Session, profile: Profile, generated_at: Optional[datetime] = None) -> str:
    """Plain-text report over the user's completed sessions."""
    generated_at = generated_at or datetime.now()
    sessions = session_store.list_sessions(db, profile.id, status=STATUS_COMPLETED)
    responses = session_store.list_responses(db, [s.id for s in sessions])
    grouped = _group_by_session(responses)

    rule = "=" * REPORT_WIDTH
    thin = "-" * REPORT_WIDTH
    lines = [
        "INTERVIEW PERFORMANCE REPORT",
        f"Generated: {generated_at:%Y-%m-%d %H:%M}",
        f"User: {profile.full_name or profile.email}",
        rule,
        "",
        "OVERALL STATISTICS",
        thin,
        f"Total Interviews Completed: {len(sessions)}",
        f"Total Questions Answered: {len(responses)}",
        f"Average Score: {average_score(responses)}%",
        "",
        "INTERVIEW HISTORY",
        thin,
        "",
    ]

    for session in sessions:
        session_responses = grouped.get(session.id, [])
        lines += [
            f"Session: {session.interview_type}",
            f"Date: {session.started_at:%Y-%m-%d %H:%M}",
            f"Duration: {duration_minutes(session) or 0} minutes",
            f"Score: {average_score(session_responses)}%",
            f"Questions Answered: {len(session_responses)}",
            "",
        ]
        for index, response in enumerate(session_responses, start=1):
            feedback = parse_feedback(response.ai_feedback).feedback
            lines.append(f"  Q{index}: {response.question_text}")
            lines.append(f"  Score: {response.score}/100")
            if feedback.feedback:
                lines.append(f"  Feedback: {feedback.feedback}")
            lines.append("")
        lines += [thin, ""]

    logger.debug(f"Performance report built: user_id={profile.id}, sessions={len(sessions)}")
    return "\n".join(lines)
