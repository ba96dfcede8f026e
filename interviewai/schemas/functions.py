"""
Request/response schemas for the hosted AI function endpoints.
"""
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator


class GenerateQuestionRequest(BaseModel):
    subjects: Optional[List[str]] = Field(None, description="Ordered subjects; rotation picks the active one")
    interview_type: Optional[str] = Field(None, alias="interviewType")
    question_number: int = Field(1, ge=1, alias="questionNumber")
    total_questions: int = Field(5, ge=1, alias="totalQuestions")
    previous_questions: List[str] = Field(default_factory=list, alias="previousQuestions")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def require_selection(self):
        if not self.subjects and not (self.interview_type or "").strip():
            raise ValueError("Provide subjects or interviewType")
        if self.question_number > self.total_questions:
            raise ValueError("questionNumber cannot exceed totalQuestions")
        return self


class GenerateQuestionResponse(BaseModel):
    question: str


class AnalyzeAnswerRequest(BaseModel):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    interview_type: str = Field("General", alias="interviewType")

    model_config = {"populate_by_name": True}


class AnalyzeAnswerResponse(BaseModel):
    score: int
    strengths: List[str]
    improvements: List[str]
    feedback: str


class SpeechToTextRequest(BaseModel):
    audio: str = Field(..., description="Base64-encoded recording")
    mime_type: str = Field("audio/webm", alias="mimeType")

    model_config = {"populate_by_name": True}


class SpeechToTextResponse(BaseModel):
    text: str


class TextToSpeechRequest(BaseModel):
    text: str = Field(..., min_length=1)


class TextToSpeechResponse(BaseModel):
    audio_content: str = Field(..., alias="audioContent", description="Base64-encoded MP3")

    model_config = {"populate_by_name": True}
