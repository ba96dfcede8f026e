from sqlalchemy import Column, Integer, ForeignKey, Text, DateTime
from sqlalchemy.orm import relationship
from interviewai.db.base import Base
from interviewai.db.models.interview_session import utcnow

class InterviewResponse(Base):
    __tablename__ = "interview_responses"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("interview_sessions.id"), nullable=False, index=True)
    question_number = Column(Integer, nullable=False)
    question_text = Column(Text, nullable=False)
    answer_text = Column(Text, nullable=False)

    # JSON text: {"score", "strengths", "improvements", "feedback"}
    ai_feedback = Column(Text, nullable=False, default="{}")
    score = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    session = relationship("InterviewSession", back_populates="responses")
