"""
Exception hierarchy for the interview flow.

Every error carries a stable ``code``, a user-facing ``message`` and whether the
user can retry the same action. ``main.py`` maps them onto HTTP responses.
"""
from typing import Any, Dict, Optional


class InterviewError(Exception):
    """Base class for all interview flow errors."""

    code = "INTERVIEW_ERROR"
    status_code = 500
    retryable = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(f"[{self.code}] {message}")


# ============================================
# Input validation
# ============================================

class EmptyAnswerError(InterviewError):
    code = "EMPTY_ANSWER"
    status_code = 422

    def __init__(self, message: str = "Please provide an answer before submitting"):
        super().__init__(message)


class SessionNotFoundError(InterviewError):
    code = "SESSION_NOT_FOUND"
    status_code = 404


class ProfileNotFoundError(InterviewError):
    code = "PROFILE_NOT_FOUND"
    status_code = 404


class InvalidQuotaError(InterviewError):
    code = "INVALID_QUOTA"
    status_code = 422


class InvalidSubjectsError(InterviewError):
    code = "INVALID_SUBJECTS"
    status_code = 422


class ControllerBusyError(InterviewError):
    code = "BUSY"
    status_code = 409
    retryable = True

    def __init__(self, message: str = "Another request for this interview is still in progress"):
        super().__init__(message)


class InvalidStateError(InterviewError):
    code = "INVALID_STATE"
    status_code = 409


class BadMessageError(InterviewError):
    """Malformed client message on the voice socket."""
    code = "BAD_MESSAGE"
    status_code = 400


# ============================================
# Persistence
# ============================================

class SessionCreateError(InterviewError):
    code = "SESSION_CREATE_FAILED"
    status_code = 500


class ResponseSaveError(InterviewError):
    code = "RESPONSE_SAVE_FAILED"
    status_code = 500
    retryable = True


# ============================================
# External services
# ============================================

class GatewayError(InterviewError):
    """Hosted AI call returned a non-success result."""
    code = "GATEWAY_ERROR"
    status_code = 502
    retryable = True


class QuestionGenerationError(GatewayError):
    code = "QUESTION_GENERATION_FAILED"


class AnswerAnalysisError(GatewayError):
    code = "ANSWER_ANALYSIS_FAILED"


class TranscriptionError(GatewayError):
    code = "TRANSCRIPTION_FAILED"


class SpeechSynthesisError(GatewayError):
    code = "SPEECH_SYNTHESIS_FAILED"


# ============================================
# Speech adapter
# ============================================

class NoActiveStreamError(InterviewError):
    code = "NO_ACTIVE_STREAM"
    status_code = 409

    def __init__(self, message: str = "No active audio stream or device available"):
        super().__init__(message)


class NoRecordingInProgressError(InterviewError):
    code = "NO_RECORDING"
    status_code = 409

    def __init__(self, message: str = "No recording in progress"):
        super().__init__(message)
