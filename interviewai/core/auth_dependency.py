from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from sqlalchemy.orm import Session
from interviewai.core.config import SECRET_KEY, ALGORITHM
from interviewai.db.session import SessionLocal
from interviewai.db.models.profile import Profile

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def get_db():
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def decode_token_email(token: str) -> Optional[str]:
    """Email (JWT subject) of a valid token, None otherwise."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    return payload.get("sub")


def get_current_user(token: str = Depends(oauth2_scheme)):
    """Get current user email from JWT token."""
    email = decode_token_email(token)
    if email is None:
        raise HTTPException(status_code=401, detail="Invalid token")
    return email


def get_current_profile(
    email: str = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Profile:
    """Get the authenticated user's Profile from the JWT token."""
    profile = db.query(Profile).filter(Profile.email == email).first()
    if not profile:
        raise HTTPException(
            status_code=404,
            detail="User not found"
        )
    return profile
