"""
Pydantic schemas for interview session endpoints.
"""
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field, model_validator

from interviewai.services.feedback import Feedback


class BeginInterviewRequest(BaseModel):
    """Start an interview from a subject selection or a single interview type."""
    subjects: Optional[List[str]] = Field(None, description="Ordered topic tags, e.g. ['DSA', 'OS', 'DBMS']")
    interview_type: Optional[str] = Field(None, description="Single interview type, e.g. 'System Design'")
    total_questions: Optional[int] = Field(None, description="Question quota (defaults to the configured quota)")

    @model_validator(mode="after")
    def require_selection(self):
        if not self.subjects and not (self.interview_type or "").strip():
            raise ValueError("Provide subjects or interview_type")
        return self

    def selection(self):
        return self.subjects if self.subjects else self.interview_type

    model_config = {
        "json_schema_extra": {
            "example": {
                "subjects": ["DSA", "OS", "DBMS"],
                "total_questions": 10
            }
        }
    }


class SubmitAnswerRequest(BaseModel):
    answer: str = Field(..., description="Typed or transcribed answer")


class SubjectInfo(BaseModel):
    key: str
    label: str


class SessionSummary(BaseModel):
    """One row of the dashboard session list."""
    id: int
    interview_type: str
    subjects: List[str] = Field(default_factory=list)
    status: str
    total_questions: int
    answered: int
    average_score: int
    started_at: datetime
    completed_at: Optional[datetime] = None
    duration_minutes: Optional[int] = None


class DashboardStats(BaseModel):
    total_interviews: int
    completed_interviews: int
    average_score: int
    minutes_practiced: int
    questions_answered: int


class DashboardResponse(BaseModel):
    stats: DashboardStats
    sessions: List[SessionSummary]


class ResponseDetail(BaseModel):
    id: int
    question_number: int
    question_text: str
    answer_text: str
    score: int
    feedback: Feedback
    feedback_valid: bool = True
    created_at: datetime


class ResultsResponse(BaseModel):
    session: SessionSummary
    average_score: int
    score_label: str
    responses: List[ResponseDetail]
