"""
Profile and settings endpoints.
"""
import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from interviewai.core.auth_dependency import get_current_profile, get_db
from interviewai.core.security import create_access_token
from interviewai.db.models.profile import Profile
from interviewai.schemas.profile import ProfileResponse, ProfileUpdateRequest
from interviewai.services import session_store
from interviewai.services.report_service import build_performance_report

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("", response_model=ProfileResponse)
def get_profile(profile: Profile = Depends(get_current_profile)):
    return ProfileResponse.model_validate(profile)


@router.patch("", response_model=ProfileResponse)
def update_profile(
    payload: ProfileUpdateRequest,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    """
    Update display name and/or email. Changing the email invalidates the
    current token, so a fresh one is returned.
    """
    new_email = payload.email.lower() if payload.email else None
    email_changed = new_email is not None and new_email != profile.email

    if email_changed and session_store.get_profile_by_email(db, new_email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    updated = session_store.update_profile(
        db,
        profile.id,
        full_name=payload.full_name,
        email=new_email if email_changed else None,
    )

    response = ProfileResponse.model_validate(updated)
    if email_changed:
        response.access_token = create_access_token({"sub": updated.email})
    return response


@router.get("/report", response_class=PlainTextResponse)
def download_performance_report(
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    """Plain-text performance report over all completed interviews."""
    report = build_performance_report(db, profile)
    filename = f"interview-performance-report-{date.today().isoformat()}.txt"
    return PlainTextResponse(
        report,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
