from functools import lru_cache
from typing import Callable

from sqlalchemy.orm import Session

from interviewai.db.session import SessionLocal
from interviewai.services.ai_gateway import AIGateway, build_gateway
from interviewai.services.interview_controller import ControllerRegistry, registry


@lru_cache
def get_gateway() -> AIGateway:
    """Singleton AI gateway backed by the configured provider."""
    return build_gateway()


def get_registry() -> ControllerRegistry:
    """Process-wide registry of active interview runs."""
    return registry


def get_session_factory() -> Callable[[], Session]:
    """Factory for the short-lived sessions a controller opens per store call."""
    return SessionLocal
