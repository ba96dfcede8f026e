import os

# ✅ Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./interviewai.db")
RUN_MIGRATIONS = os.getenv("RUN_MIGRATIONS", "0") == "1"

# ✅ Security
SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# ✅ AI gateway (any OpenAI-compatible endpoint)
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
AI_GATEWAY_BASE_URL = os.getenv("AI_GATEWAY_BASE_URL")

QUESTION_MODEL = os.getenv("QUESTION_MODEL", "gpt-4o-mini")
ANALYSIS_MODEL = os.getenv("ANALYSIS_MODEL", "gpt-4o-mini")
TRANSCRIPTION_MODEL = os.getenv("TRANSCRIPTION_MODEL", "gpt-4o-transcribe")
TTS_MODEL = os.getenv("TTS_MODEL", "gpt-4o-mini-tts")
TTS_VOICE = os.getenv("TTS_VOICE", "alloy")

# ✅ Interview flow
DEFAULT_QUESTION_QUOTA = int(os.getenv("DEFAULT_QUESTION_QUOTA", "5"))
MAX_QUESTION_QUOTA = int(os.getenv("MAX_QUESTION_QUOTA", "20"))

# ✅ Logging / CORS
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]
