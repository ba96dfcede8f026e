"""
Interview session endpoints: dashboard, start, question/answer loop, results.
"""
import logging
from typing import Callable, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from interviewai.api.dependencies import get_gateway, get_registry, get_session_factory
from interviewai.core.auth_dependency import get_current_profile, get_db
from interviewai.db.models.profile import Profile
from interviewai.schemas.interview import (
    BeginInterviewRequest,
    DashboardResponse,
    ResultsResponse,
    SubjectInfo,
    SubmitAnswerRequest,
)
from interviewai.services.ai_gateway import SUBJECT_LABELS, AIGateway
from interviewai.services.interview_controller import (
    ControllerRegistry,
    ControllerSnapshot,
    InterviewController,
    InterviewState,
    SubmitOutcome,
)
from interviewai.services.report_service import build_dashboard, build_results

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/interviews", tags=["Interviews"])


@router.get("/subjects", response_model=List[SubjectInfo])
def list_subjects():
    """Subjects with tuned prompts. Any other tag falls back to a generic prompt."""
    return [SubjectInfo(key=key, label=label) for key, label in SUBJECT_LABELS.items()]


@router.get("", response_model=DashboardResponse)
def dashboard(
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    """The user's sessions, newest first, with overall stats."""
    return build_dashboard(db, profile.id)


@router.post("", response_model=ControllerSnapshot, status_code=status.HTTP_201_CREATED)
async def begin_interview(
    payload: BeginInterviewRequest,
    profile: Profile = Depends(get_current_profile),
    gateway: AIGateway = Depends(get_gateway),
    registry: ControllerRegistry = Depends(get_registry),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
):
    """
    Create a session and load its first question. If question generation
    fails, the run is still created and ``last_error`` is set; retry with
    POST /interviews/{id}/question.
    """
    controller = InterviewController(gateway, session_factory, profile.id)
    snapshot = await controller.begin(payload.selection(), payload.total_questions)
    registry.register(controller)
    logger.info(f"Interview started: session_id={snapshot.session_id}, user_id={profile.id}")
    return snapshot


@router.get("/{session_id}", response_model=ControllerSnapshot)
def get_run(
    session_id: int,
    profile: Profile = Depends(get_current_profile),
    registry: ControllerRegistry = Depends(get_registry),
):
    return registry.get(session_id, user_id=profile.id).snapshot()


@router.post("/{session_id}/question", response_model=ControllerSnapshot)
async def retry_question(
    session_id: int,
    profile: Profile = Depends(get_current_profile),
    registry: ControllerRegistry = Depends(get_registry),
):
    controller = registry.get(session_id, user_id=profile.id)
    await controller.request_question()
    return controller.snapshot()


@router.post("/{session_id}/answer", response_model=SubmitOutcome)
async def submit_answer(
    session_id: int,
    payload: SubmitAnswerRequest,
    profile: Profile = Depends(get_current_profile),
    registry: ControllerRegistry = Depends(get_registry),
):
    """Score and save the answer; the run drops out of the registry once complete."""
    controller = registry.get(session_id, user_id=profile.id)
    outcome = await controller.submit_answer(payload.answer)
    if controller.state == InterviewState.COMPLETED:
        registry.discard(session_id)
    return outcome


@router.post("/{session_id}/complete", response_model=ControllerSnapshot)
async def complete_interview(
    session_id: int,
    profile: Profile = Depends(get_current_profile),
    registry: ControllerRegistry = Depends(get_registry),
):
    """End the run early. Completion is persisted on a best-effort basis."""
    controller = registry.get(session_id, user_id=profile.id)
    await controller.complete()
    registry.discard(session_id)
    return controller.snapshot()


@router.delete("/{session_id}/run", status_code=status.HTTP_204_NO_CONTENT)
def teardown_run(
    session_id: int,
    profile: Profile = Depends(get_current_profile),
    registry: ControllerRegistry = Depends(get_registry),
):
    """Drop the in-memory run (navigating away). The session row is kept."""
    registry.get(session_id, user_id=profile.id)
    registry.discard(session_id)


@router.get("/{session_id}/results", response_model=ResultsResponse)
def get_results(
    session_id: int,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    return build_results(db, session_id, profile.id)
