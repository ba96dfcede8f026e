"""
Remote AI gateway client.

Four stateless request/response operations against the hosted AI provider:
question generation, answer analysis, speech-to-text and text-to-speech.
Any provider failure surfaces as the matching typed error; nothing is retried.
"""
import base64
import binascii
import logging
from typing import List, Optional, Sequence

from interviewai.core import config
from interviewai.core.errors import (
    AnswerAnalysisError,
    QuestionGenerationError,
    SpeechSynthesisError,
    TranscriptionError,
)
from interviewai.llm.provider import LLMProvider
from interviewai.llm.router import get_model_for_operation, get_sampling
from interviewai.services.feedback import FeedbackParseResult, parse_feedback

logger = logging.getLogger(__name__)


# ============================================
# Prompts
# ============================================

SUBJECT_PROMPTS = {
    "dsa": """You are an expert technical interviewer for CSE students.
Generate clear, well-structured Data Structures and Algorithms questions.
Focus on: Arrays, Linked Lists, Trees, Graphs, Dynamic Programming, Sorting, Searching.
Provide a single question that tests problem-solving and coding skills.
Format: State the problem clearly with constraints and expected output.""",
    "system design": """You are an expert system design interviewer for CSE students.
Generate realistic system design questions about scalable applications.
Focus on: Architecture, Databases, Caching, Load Balancing, Microservices.
Provide a single high-level design challenge.
Format: Describe the system to design and key requirements.""",
    "hr": """You are an experienced HR interviewer for CSE students.
Generate professional behavioral and situational questions.
Focus on: Teamwork, Leadership, Problem-solving, Conflict resolution, Career goals.
Provide a single thoughtful question that reveals the candidate's soft skills.
Format: Ask an open-ended question about their experiences or approach.""",
    "os": """You are an expert operating systems interviewer for CSE students.
Focus on: Processes and Threads, Scheduling, Synchronization, Deadlocks, Memory Management, File Systems.
Provide a single conceptual or scenario-based question.""",
    "dbms": """You are an expert database interviewer for CSE students.
Focus on: Normalization, SQL, Indexing, Transactions, ACID, Concurrency Control.
Provide a single question, optionally with a small schema or query to reason about.""",
    "cn": """You are an expert computer networks interviewer for CSE students.
Focus on: OSI and TCP/IP layers, TCP vs UDP, Routing, DNS, HTTP, Congestion Control.
Provide a single conceptual question.""",
    "oop": """You are an expert object-oriented programming interviewer for CSE students.
Focus on: Encapsulation, Inheritance, Polymorphism, Abstraction, SOLID, Design Patterns.
Provide a single question, optionally asking for a short code sketch.""",
}

# Display labels and aliases accepted from clients
SUBJECT_ALIASES = {
    "technical - dsa": "dsa",
    "data structures": "dsa",
    "data structures and algorithms": "dsa",
    "hr & behavioral": "hr",
    "behavioral": "hr",
    "operating systems": "os",
    "databases": "dbms",
    "computer networks": "cn",
    "object oriented programming": "oop",
}

SUBJECT_LABELS = {
    "dsa": "Technical - DSA",
    "system design": "System Design",
    "hr": "HR & Behavioral",
    "os": "Operating Systems",
    "dbms": "DBMS",
    "cn": "Computer Networks",
    "oop": "OOP",
}

GENERIC_PROMPT = """You are an expert interviewer for CSE students.
Generate a single clear interview question on the topic: {subject}.
Format: Ask one focused question that can be answered verbally in a few minutes."""

ANALYSIS_PROMPT = """You are an expert interview evaluator for CSE students.
Analyze the candidate's answer and provide:
1. A score out of 100
2. Specific strengths (2-3 points)
3. Areas for improvement (2-3 points)
4. Overall feedback (2-3 sentences)

Be constructive, encouraging, and specific. Format your response as JSON with keys: score, strengths (array), improvements (array), feedback (string).
Return ONLY valid JSON, no markdown or extra text."""


def subject_key(subject: str) -> str:
    key = (subject or "").strip().lower()
    return SUBJECT_ALIASES.get(key, key)


def subject_label(subject: str) -> str:
    return SUBJECT_LABELS.get(subject_key(subject), subject.strip())


def system_prompt_for(subject: str) -> str:
    return SUBJECT_PROMPTS.get(subject_key(subject)) or GENERIC_PROMPT.format(subject=subject)


def build_question_prompt(
    subject: str,
    question_number: int,
    total_questions: int,
    previous_questions: Sequence[str],
) -> str:
    """User prompt for question generation. Prior questions are a hint, not a guarantee."""
    if previous_questions:
        asked = "\n".join(f"- {q}" for q in previous_questions)
        return (
            f"Generate question {question_number} of {total_questions} on {subject_label(subject)}.\n"
            f"Previous questions asked:\n{asked}\n"
            f"Make sure this question is different and progressively challenging. "
            f"Return only the question text."
        )
    return (
        f"Generate the first interview question (1 of {total_questions}) "
        f"for a {subject_label(subject)} interview. Return only the question text."
    )


# ============================================
# Gateway
# ============================================

class AIGateway:
    """Client for the hosted question, scoring, transcription and speech services."""

    def __init__(self, provider: LLMProvider, tts_voice: Optional[str] = None):
        self.provider = provider
        self.tts_voice = tts_voice or config.TTS_VOICE

    async def _chat(self, operation: str, system_prompt: str, user_prompt: str) -> str:
        temperature, max_tokens = get_sampling(operation)
        model = get_model_for_operation(operation)
        response = await self.provider.chat(
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        logger.debug(
            f"{operation}: model={response.model or model}, tokens_in={response.tokens_in}, "
            f"tokens_out={response.tokens_out}, cost=${response.cost_estimate:.6f}"
        )
        return response.content

    async def generate_question(
        self,
        subject: str,
        question_number: int,
        total_questions: int,
        previous_questions: Optional[List[str]] = None,
    ) -> str:
        """
        Generate one question for ``subject``.

        Raises:
            QuestionGenerationError: Provider failure or empty output
        """
        previous_questions = list(previous_questions or [])
        logger.info(f"Generating question: subject={subject}, number={question_number}/{total_questions}")
        try:
            content = await self._chat(
                "generate_question",
                system_prompt_for(subject),
                build_question_prompt(subject, question_number, total_questions, previous_questions),
            )
        except Exception as e:
            logger.error(f"Question generation failed: {type(e).__name__}: {e}")
            raise QuestionGenerationError("Failed to load question. Please try again.") from e

        question = (content or "").strip()
        if not question:
            raise QuestionGenerationError("Failed to load question. Please try again.")
        return question

    async def analyze_answer(self, question: str, answer: str, subject: str) -> FeedbackParseResult:
        """
        Score an answer. Malformed model output degrades to default feedback
        (``ok=False``) instead of failing.

        Raises:
            AnswerAnalysisError: Provider failure
        """
        user_prompt = (
            f"Interview Type: {subject_label(subject)}\n"
            f"Question: {question}\n"
            f"Candidate's Answer: {answer}\n\n"
            f"Evaluate this answer comprehensively."
        )
        logger.info(f"Analyzing answer: subject={subject}")
        try:
            content = await self._chat("analyze_answer", ANALYSIS_PROMPT, user_prompt)
        except Exception as e:
            logger.error(f"Answer analysis failed: {type(e).__name__}: {e}")
            raise AnswerAnalysisError("Failed to analyze your answer. Please try again.") from e

        return parse_feedback(content)

    async def speech_to_text(self, audio_b64: str, mime_type: str = "audio/webm") -> str:
        """
        Transcribe a base64-encoded recording in one request.

        Raises:
            TranscriptionError: Bad payload or provider failure
        """
        try:
            audio = base64.b64decode(audio_b64, validate=True)
        except (binascii.Error, ValueError, TypeError) as e:
            raise TranscriptionError("Audio payload is not valid base64") from e
        if not audio:
            raise TranscriptionError("Audio payload is empty")

        if not isinstance(mime_type, str):
            raise TranscriptionError("Audio format must be a MIME type string")
        extension = mime_type.split("/")[-1].split(";")[0] or "webm"
        try:
            text = await self.provider.transcribe(
                audio,
                model=get_model_for_operation("speech_to_text"),
                filename=f"answer.{extension}",
            )
        except Exception as e:
            logger.error(f"Transcription failed: {type(e).__name__}: {e}")
            raise TranscriptionError("Transcription failed") from e

        return (text or "").strip()

    async def text_to_speech(self, text: str) -> str:
        """
        Synthesize speech for ``text``.

        Returns:
            Base64-encoded audio content

        Raises:
            SpeechSynthesisError: Provider failure
        """
        if not text or not text.strip():
            raise SpeechSynthesisError("Nothing to speak")
        try:
            audio = await self.provider.synthesize(
                text,
                model=get_model_for_operation("text_to_speech"),
                voice=self.tts_voice,
            )
        except Exception as e:
            logger.error(f"Speech synthesis failed: {type(e).__name__}: {e}")
            raise SpeechSynthesisError("Speech synthesis failed") from e

        return base64.b64encode(audio).decode("ascii")


def build_gateway() -> AIGateway:
    """Gateway backed by the configured OpenAI-compatible provider."""
    from interviewai.llm.openai_provider import OpenAIProvider

    return AIGateway(OpenAIProvider())
