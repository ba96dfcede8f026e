"""
The hosted AI operations exposed as plain request/response endpoints.

Field names follow the client contract (camelCase where the client sends it).
"""
import logging

from fastapi import APIRouter, Depends

from interviewai.api.dependencies import get_gateway
from interviewai.core.auth_dependency import get_current_user
from interviewai.core.logging_config import sanitize_log_data
from interviewai.schemas.functions import (
    AnalyzeAnswerRequest,
    AnalyzeAnswerResponse,
    GenerateQuestionRequest,
    GenerateQuestionResponse,
    SpeechToTextRequest,
    SpeechToTextResponse,
    TextToSpeechRequest,
    TextToSpeechResponse,
)
from interviewai.services.ai_gateway import AIGateway
from interviewai.services.subject_rotation import normalize_subjects, subject_for_question

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/functions",
    tags=["AI Functions"],
    dependencies=[Depends(get_current_user)],
)


@router.post("/generate-question", response_model=GenerateQuestionResponse)
async def generate_question(
    payload: GenerateQuestionRequest,
    gateway: AIGateway = Depends(get_gateway),
):
    subjects = normalize_subjects(payload.subjects or [payload.interview_type])
    subject = subject_for_question(subjects, payload.total_questions, payload.question_number)
    question = await gateway.generate_question(
        subject,
        payload.question_number,
        payload.total_questions,
        payload.previous_questions,
    )
    return GenerateQuestionResponse(question=question)


@router.post("/analyze-answer", response_model=AnalyzeAnswerResponse)
async def analyze_answer(
    payload: AnalyzeAnswerRequest,
    gateway: AIGateway = Depends(get_gateway),
):
    result = await gateway.analyze_answer(payload.question, payload.answer, payload.interview_type)
    return AnalyzeAnswerResponse(**result.feedback.model_dump())


@router.post("/speech-to-text", response_model=SpeechToTextResponse)
async def speech_to_text(
    payload: SpeechToTextRequest,
    gateway: AIGateway = Depends(get_gateway),
):
    logger.info(f"speech-to-text request: {sanitize_log_data(payload.model_dump())}")
    text = await gateway.speech_to_text(payload.audio, mime_type=payload.mime_type)
    return SpeechToTextResponse(text=text)


@router.post("/text-to-speech", response_model=TextToSpeechResponse)
async def text_to_speech(
    payload: TextToSpeechRequest,
    gateway: AIGateway = Depends(get_gateway),
):
    audio_content = await gateway.text_to_speech(payload.text)
    return TextToSpeechResponse(audio_content=audio_content)
