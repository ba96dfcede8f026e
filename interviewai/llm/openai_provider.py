"""
OpenAI provider implementation.

Works against api.openai.com or any OpenAI-compatible gateway configured with
AI_GATEWAY_BASE_URL.
"""
import logging
from typing import Optional, Dict
from openai import AsyncOpenAI, APIError

from interviewai.core.config import OPENAI_API_KEY, AI_GATEWAY_BASE_URL
from interviewai.llm.provider import LLMProvider, LLMResponse

logger = logging.getLogger(__name__)

# Model pricing per 1M tokens (input/output)
MODEL_PRICING = {
    "gpt-4o-mini": {"input": 0.15, "output": 0.60},
    "gpt-4o": {"input": 2.50, "output": 10.00},
}


class OpenAIProvider(LLMProvider):
    """Provider using the official OpenAI SDK (async client)."""
    
    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self.api_key = api_key or OPENAI_API_KEY
        if not self.api_key:
            raise ValueError("OPENAI_API_KEY not configured")
        self.client = AsyncOpenAI(api_key=self.api_key, base_url=base_url or AI_GATEWAY_BASE_URL)
        logger.info("OpenAI provider initialized")
    
    async def chat(
        self,
        messages: list[Dict[str, str]],
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """Generate a chat completion."""
        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens or 2000,
                **kwargs
            )
        except APIError as e:
            logger.error(f"OpenAI API error: {e}", exc_info=True)
            raise

        content = response.choices[0].message.content or ""
        tokens_in = response.usage.prompt_tokens if response.usage else 0
        tokens_out = response.usage.completion_tokens if response.usage else 0

        return LLMResponse(
            content=content,
            tokens_in=tokens_in,
            tokens_out=tokens_out,
            model=model,
            cost_estimate=self.estimate_cost(tokens_in, tokens_out, model),
            metadata={"finish_reason": response.choices[0].finish_reason},
        )

    async def transcribe(self, audio: bytes, model: str, filename: str = "answer.webm") -> str:
        """Transcribe a whole recording in one request."""
        try:
            transcript = await self.client.audio.transcriptions.create(
                file=(filename, audio),
                model=model,
            )
        except APIError as e:
            logger.error(f"OpenAI transcription error: {e}", exc_info=True)
            raise
        return transcript.text

    async def synthesize(self, text: str, model: str, voice: str) -> bytes:
        """Synthesize speech as mp3 bytes."""
        try:
            response = await self.client.audio.speech.create(
                model=model,
                voice=voice,
                input=text,
                response_format="mp3",
            )
        except APIError as e:
            logger.error(f"OpenAI speech synthesis error: {e}", exc_info=True)
            raise
        return response.content
    
    def estimate_cost(self, tokens_in: int, tokens_out: int, model: str) -> float:
        """Estimate cost in USD."""
        pricing = MODEL_PRICING.get(model, MODEL_PRICING["gpt-4o-mini"])
        return (tokens_in / 1_000_000) * pricing["input"] + (tokens_out / 1_000_000) * pricing["output"]
