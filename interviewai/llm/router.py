"""
Model router: picks the model for each hosted AI operation.
"""
from interviewai.core import config

MODEL_ROUTING = {
    "generate_question": config.QUESTION_MODEL,
    "analyze_answer": config.ANALYSIS_MODEL,
    "speech_to_text": config.TRANSCRIPTION_MODEL,
    "text_to_speech": config.TTS_MODEL,
}

# Sampling settings per chat operation: (temperature, max_tokens)
SAMPLING = {
    "generate_question": (0.7, 500),
    "analyze_answer": (0.3, 800),
}


def get_model_for_operation(operation: str) -> str:
    """Return the configured model for an operation, defaulting to the question model."""
    return MODEL_ROUTING.get(operation, config.QUESTION_MODEL)


def get_sampling(operation: str) -> tuple[float, int]:
    return SAMPLING.get(operation, (0.7, 2000))
