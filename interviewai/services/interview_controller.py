"""
Interview progression controller.

Drives one interview run through

    INITIALIZING -> AWAITING_QUESTION -> AWAITING_ANSWER -> SCORING
        -> AWAITING_QUESTION (next question) | COMPLETED (quota reached)

with FAILED as an absorbing state for unrecoverable errors. Operations are
serialized by the controller itself: calling one while another is still in
flight raises ControllerBusyError instead of relying on the client to disable
its buttons.

The controller keeps its run state in memory and talks to the database
through short-lived SQLAlchemy sessions, one per store call.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from interviewai.core import config
from interviewai.core.errors import (
    AnswerAnalysisError,
    ControllerBusyError,
    EmptyAnswerError,
    InterviewError,
    InvalidQuotaError,
    InvalidStateError,
    InvalidSubjectsError,
    QuestionGenerationError,
    ResponseSaveError,
    SessionCreateError,
    SessionNotFoundError,
    SpeechSynthesisError,
)
from interviewai.services import session_store
from interviewai.services.ai_gateway import AIGateway, subject_label
from interviewai.services.feedback import Feedback
from interviewai.services.subject_rotation import normalize_subjects, subject_for_question
from interviewai.services.voice_adapter import VoiceAdapter

logger = logging.getLogger(__name__)


class InterviewState(str, Enum):
    INITIALIZING = "initializing"
    AWAITING_QUESTION = "awaiting_question"
    AWAITING_ANSWER = "awaiting_answer"
    SCORING = "scoring"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATES = {InterviewState.COMPLETED, InterviewState.FAILED}


class ControllerSnapshot(BaseModel):
    """Read-only view of a run for the presentation layer."""
    session_id: Optional[int] = None
    state: InterviewState
    interview_type: Optional[str] = None
    subjects: List[str] = Field(default_factory=list)
    question_number: int = 1
    answered: int = 0
    total_questions: int
    current_question: Optional[str] = None
    current_subject: Optional[str] = None
    progress: float = Field(0.0, description="Percent of the quota answered")
    last_error: Optional[str] = None


class SubmitOutcome(BaseModel):
    """Result of one scored and saved answer."""
    response_id: int
    question_number: int
    score: int
    feedback: Feedback
    feedback_valid: bool = True
    completed: bool = False
    next_question: Optional[str] = None
    question_error: Optional[str] = None


class InterviewController:
    """State machine for a single interview run. Not shared between runs."""

    def __init__(
        self,
        gateway: AIGateway,
        session_factory: Callable[[], Session],
        user_id: Optional[int],
        voice: Optional[VoiceAdapter] = None,
    ):
        self.gateway = gateway
        self.session_factory = session_factory
        self.user_id = user_id
        self.voice = voice

        self.state = InterviewState.INITIALIZING
        self.session_id: Optional[int] = None
        self.interview_type: Optional[str] = None
        self.subjects: List[str] = []
        self.total_questions = config.DEFAULT_QUESTION_QUOTA
        self.question_number = 1
        self.answered = 0
        self.current_question: Optional[str] = None
        self.previous_questions: List[str] = []
        self.last_error: Optional[str] = None
        self._lock = asyncio.Lock()

    # ============================================
    # Helpers
    # ============================================

    @asynccontextmanager
    async def _operation(self, name: str):
        """Busy guard. Unexpected errors move the run to FAILED."""
        if self._lock.locked():
            raise ControllerBusyError()
        async with self._lock:
            try:
                yield
            except InterviewError:
                raise
            except Exception:
                logger.exception(f"{name} failed unexpectedly: session_id={self.session_id}")
                self.state = InterviewState.FAILED
                raise

    def _require_state(self, *allowed: InterviewState):
        if self.state not in allowed:
            raise InvalidStateError(
                f"Cannot do that while the interview is {self.state.value}"
            )

    def _run_db(self, fn, *args, **kwargs):
        db = self.session_factory()
        try:
            return fn(db, *args, **kwargs)
        finally:
            db.close()

    async def _with_db(self, fn, *args, **kwargs):
        """Run a blocking store call in a worker thread, off the event loop."""
        return await asyncio.to_thread(self._run_db, fn, *args, **kwargs)

    @property
    def current_subject(self) -> Optional[str]:
        if not self.subjects or self.state in TERMINAL_STATES:
            return None
        return subject_for_question(self.subjects, self.total_questions, self.question_number)

    def snapshot(self) -> ControllerSnapshot:
        return ControllerSnapshot(
            session_id=self.session_id,
            state=self.state,
            interview_type=self.interview_type,
            subjects=list(self.subjects),
            question_number=self.question_number,
            answered=self.answered,
            total_questions=self.total_questions,
            current_question=self.current_question,
            current_subject=self.current_subject,
            progress=round(self.answered / self.total_questions * 100, 1),
            last_error=self.last_error,
        )

    # ============================================
    # Operations
    # ============================================

    async def begin(
        self,
        subjects_or_type: Union[str, Sequence[str]],
        quota: Optional[int] = None,
    ) -> ControllerSnapshot:
        """
        Create the session row and request question 1.

        A failure to generate the first question does not fail the run: the
        run stays in AWAITING_QUESTION and ``last_error`` says what happened.

        Raises:
            InvalidSubjectsError / InvalidQuotaError: Bad input, state unchanged
            SessionCreateError: Insert rejected, run is FAILED
        """
        async with self._operation("begin"):
            self._require_state(InterviewState.INITIALIZING)

            raw = [subjects_or_type] if isinstance(subjects_or_type, str) else list(subjects_or_type or [])
            subjects = normalize_subjects(raw)
            if not subjects:
                raise InvalidSubjectsError("Choose at least one interview subject")

            quota = config.DEFAULT_QUESTION_QUOTA if quota is None else quota
            if quota < 1 or quota > config.MAX_QUESTION_QUOTA:
                raise InvalidQuotaError(
                    f"Question count must be between 1 and {config.MAX_QUESTION_QUOTA}"
                )

            interview_type = ", ".join(subject_label(s) for s in subjects)
            try:
                session = await self._with_db(
                    session_store.create_session,
                    self.user_id,
                    subjects,
                    interview_type,
                    quota,
                )
            except SessionCreateError:
                self.state = InterviewState.FAILED
                raise

            self.session_id = session.id
            self.subjects = subjects
            self.interview_type = interview_type
            self.total_questions = quota
            self.state = InterviewState.AWAITING_QUESTION

            try:
                await self._request_question()
            except QuestionGenerationError:
                pass
            return self.snapshot()

    async def request_question(self) -> str:
        """
        Ask the gateway for the current question. Used directly to retry after
        a failed generation.

        Raises:
            QuestionGenerationError: Still AWAITING_QUESTION, user may retry
        """
        async with self._operation("request_question"):
            self._require_state(InterviewState.AWAITING_QUESTION)
            return await self._request_question()

    async def _request_question(self) -> str:
        subject = subject_for_question(self.subjects, self.total_questions, self.question_number)
        try:
            question = await self.gateway.generate_question(
                subject,
                self.question_number,
                self.total_questions,
                list(self.previous_questions),
            )
        except QuestionGenerationError as e:
            self.last_error = e.message
            logger.warning(
                f"Question {self.question_number} generation failed: session_id={self.session_id}"
            )
            raise

        self.current_question = question
        self.last_error = None
        self.state = InterviewState.AWAITING_ANSWER
        return question

    async def submit_answer(self, answer_text: str) -> SubmitOutcome:
        """
        Score and save an answer, then move to the next question or complete.

        Raises:
            EmptyAnswerError: Blank answer, nothing saved, state unchanged
            AnswerAnalysisError / ResponseSaveError: Back to AWAITING_ANSWER, user may retry
        """
        async with self._operation("submit_answer"):
            self._require_state(InterviewState.AWAITING_ANSWER)
            answer = answer_text.strip() if isinstance(answer_text, str) else ""
            if not answer:
                raise EmptyAnswerError()

            question = self.current_question
            subject = self.current_subject
            self.state = InterviewState.SCORING
            try:
                result = await self.gateway.analyze_answer(question, answer, subject)
                response = await self._with_db(
                    session_store.insert_response,
                    self.session_id,
                    self.question_number,
                    question,
                    answer,
                    result.feedback,
                )
            except (AnswerAnalysisError, ResponseSaveError) as e:
                self.state = InterviewState.AWAITING_ANSWER
                self.last_error = e.message
                raise

            outcome = SubmitOutcome(
                response_id=response.id,
                question_number=self.question_number,
                score=result.feedback.score,
                feedback=result.feedback,
                feedback_valid=result.ok,
            )

            self.answered += 1
            self.previous_questions.append(question)
            self.last_error = None

            if self.answered >= self.total_questions:
                await self._complete()
                outcome.completed = True
                return outcome

            self.question_number += 1
            self.current_question = None
            self.state = InterviewState.AWAITING_QUESTION
            try:
                outcome.next_question = await self._request_question()
            except QuestionGenerationError as e:
                outcome.question_error = e.message
            return outcome

    async def complete(self) -> bool:
        """Finish the run now. Returns whether completion was persisted."""
        async with self._operation("complete"):
            self._require_state(InterviewState.AWAITING_QUESTION, InterviewState.AWAITING_ANSWER)
            return await self._complete()

    async def _complete(self) -> bool:
        self.state = InterviewState.COMPLETED
        self.current_question = None
        try:
            await self._with_db(session_store.mark_completed, self.session_id)
        except Exception as e:
            # Best effort: the run is over even if the row still says in-progress
            logger.error(f"Failed to persist completion for session_id={self.session_id}: {e}")
            return False
        logger.info(f"Interview completed: session_id={self.session_id}, answered={self.answered}")
        return True

    async def speak_current_question(self) -> bool:
        """Read the current question aloud. Speech failures are not fatal."""
        if self.voice is None or not self.current_question:
            return False
        try:
            return await self.voice.speak(self.current_question)
        except SpeechSynthesisError as e:
            logger.warning(f"Continuing without spoken question: {e.message}")
            return False

    def teardown(self):
        """Release audio resources. Safe in any state, any number of times."""
        if self.voice is not None:
            self.voice.release()


class ControllerRegistry:
    """Active runs by session id. One controller per run, owned by one user."""

    def __init__(self):
        self._controllers: Dict[int, InterviewController] = {}

    def register(self, controller: InterviewController):
        if controller.session_id is None:
            raise InvalidStateError("Interview run has no session yet")
        self._controllers[controller.session_id] = controller

    def get(self, session_id: int, user_id: Optional[int] = None) -> InterviewController:
        controller = self._controllers.get(session_id)
        if controller is None or (user_id is not None and controller.user_id != user_id):
            raise SessionNotFoundError(f"No active interview run for session {session_id}")
        return controller

    def discard(self, session_id: int) -> bool:
        controller = self._controllers.pop(session_id, None)
        if controller is None:
            return False
        controller.teardown()
        return True

    def __len__(self):
        return len(self._controllers)


registry = ControllerRegistry()
