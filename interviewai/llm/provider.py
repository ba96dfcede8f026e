"""
Provider interface for the hosted AI services the interview flow depends on.
"""
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any
from dataclasses import dataclass, field


@dataclass
class LLMResponse:
    """Standardized chat completion response."""
    content: str
    tokens_in: int = 0
    tokens_out: int = 0
    model: str = ""
    cost_estimate: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)


class LLMProvider(ABC):
    """Abstract base class for hosted AI providers."""
    
    @abstractmethod
    async def chat(
        self,
        messages: list[Dict[str, str]],
        model: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """
        Generate a chat completion.
        
        Args:
            messages: List of message dicts with 'role' and 'content'
            model: Model identifier
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            **kwargs: Additional provider-specific parameters
            
        Returns:
            LLMResponse with content and metadata
        """

    @abstractmethod
    async def transcribe(self, audio: bytes, model: str, filename: str = "answer.webm") -> str:
        """Transcribe one complete encoded audio recording to text."""

    @abstractmethod
    async def synthesize(self, text: str, model: str, voice: str) -> bytes:
        """Synthesize speech audio for text. Returns encoded audio bytes."""
    
    def estimate_cost(self, tokens_in: int, tokens_out: int, model: str) -> float:
        """Estimate cost in USD. Providers override with actual pricing."""
        return 0.0
