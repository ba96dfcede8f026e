from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, JSON
from sqlalchemy.orm import relationship
from interviewai.db.base import Base

STATUS_IN_PROGRESS = "in-progress"
STATUS_COMPLETED = "completed"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InterviewSession(Base):
    __tablename__ = "interview_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id"), nullable=False, index=True)
    interview_type = Column(String, nullable=False)
    subjects = Column(JSON, nullable=False, default=list)
    total_questions = Column(Integer, nullable=False, default=5)
    status = Column(String, nullable=False, default=STATUS_IN_PROGRESS)  # in-progress / completed
    started_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    responses = relationship(
        "InterviewResponse",
        back_populates="session",
        order_by="InterviewResponse.id",
    )
