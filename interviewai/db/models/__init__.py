"""
Database models module.

Imports every model so they are registered with SQLAlchemy's Base.metadata
before table creation and migrations.
"""
from interviewai.db.models.profile import Profile
from interviewai.db.models.interview_session import InterviewSession
from interviewai.db.models.interview_response import InterviewResponse

__all__ = [
    "Profile",
    "InterviewSession",
    "InterviewResponse",
]
