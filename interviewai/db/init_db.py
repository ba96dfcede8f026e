import logging

from interviewai.db.session import engine
from interviewai.db.base import Base
import interviewai.db.models  # noqa: F401

logger = logging.getLogger(__name__)


def init_db():
    """Create any missing tables without running migrations."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured")
