import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from interviewai.core.auth_dependency import get_db
from interviewai.core.security import hash_password, verify_password, create_access_token
from interviewai.schemas.auth import SignupRequest, SignupResponse, TokenResponse
from interviewai.services import session_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=SignupResponse)
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    """Create a profile. The profile id is the user's identity everywhere else."""
    if session_store.get_profile_by_email(db, payload.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    profile = session_store.create_profile(
        db,
        full_name=payload.full_name,
        email=payload.email,
        password_hash=hash_password(payload.password),
    )
    return SignupResponse(message="User created successfully", user_id=profile.id)


# Swagger's OAuth2 form sends "username"; we treat it as the email
@router.post("/login", response_model=TokenResponse)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    profile = session_store.get_profile_by_email(db, form_data.username)

    if not profile or not verify_password(form_data.password, profile.password_hash):
        logger.info("Failed login attempt")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return TokenResponse(access_token=create_access_token({"sub": profile.email}))
