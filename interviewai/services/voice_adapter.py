"""
Speech capture/playback adapter.

One adapter is built per interview run and owned by that run's controller.
It buffers a whole spoken answer from the client's audio stream, hands the
recording to the gateway for transcription, and plays synthesized question
audio through an injected player. There is no streaming transcription,
resampling or voice-activity detection: an answer is captured in full, then
transcribed in one request.
"""
import base64
import logging
from typing import Awaitable, Callable, List, Optional

from interviewai.core.errors import (
    NoActiveStreamError,
    NoRecordingInProgressError,
    SpeechSynthesisError,
)
from interviewai.services.ai_gateway import AIGateway

logger = logging.getLogger(__name__)

# Plays encoded audio and returns once playback has finished
AudioPlayer = Callable[[bytes], Awaitable[None]]


class AudioStream:
    """A live audio input owned by exactly one adapter, e.g. a websocket feed."""

    def __init__(self, mime_type: str = "audio/webm;codecs=opus"):
        self.mime_type = mime_type
        self.active = True

    def stop(self):
        self.active = False


class VoiceAdapter:
    """Mediates between UI intents and audio capture, transcription and playback."""

    def __init__(self, gateway: AIGateway, player: Optional[AudioPlayer] = None):
        self.gateway = gateway
        self.player = player
        self.is_speaking = False
        self.is_recording = False
        self.released = False
        self._stream: Optional[AudioStream] = None
        self._chunks: List[bytes] = []

    @property
    def mime_type(self) -> str:
        return self._stream.mime_type if self._stream else "audio/webm"

    # ============================================
    # Playback
    # ============================================

    async def speak(self, text: str) -> bool:
        """
        Synthesize ``text`` and play it, returning once playback finishes.

        A call made while another is still speaking is a no-op and returns
        False; it neither queues nor interrupts the current playback. If the
        adapter is released while synthesis is in flight, nothing is played
        and False is returned.

        Raises:
            SpeechSynthesisError: Synthesis or playback failed
        """
        if self.is_speaking or self.released:
            logger.debug("speak() ignored: already speaking or released")
            return False

        self.is_speaking = True
        try:
            audio_b64 = await self.gateway.text_to_speech(text)
            # Torn down while synthesizing: drop the audio
            if self.released:
                logger.debug("Synthesized audio dropped: adapter released")
                return False
            if self.player is not None:
                await self.player(base64.b64decode(audio_b64))
        except SpeechSynthesisError:
            raise
        except Exception as e:
            logger.error(f"Audio playback failed: {type(e).__name__}: {e}")
            raise SpeechSynthesisError("Audio playback failed") from e
        finally:
            self.is_speaking = False
        return True

    # ============================================
    # Capture
    # ============================================

    def start_capture(self, stream: Optional[AudioStream]):
        """
        Start buffering encoded audio from ``stream``.

        Raises:
            NoActiveStreamError: No stream, an inactive stream, or a released adapter
        """
        if self.released or stream is None or not stream.active:
            raise NoActiveStreamError()

        self._stream = stream
        self._chunks = []
        self.is_recording = True
        logger.debug(f"Capture started: mime_type={stream.mime_type}")

    def push_chunk(self, chunk: bytes):
        """Buffer one encoded chunk. Chunks outside a recording are dropped."""
        if self.is_recording and chunk:
            self._chunks.append(bytes(chunk))

    def stop_capture(self) -> str:
        """
        Finish the recording and return it as one base64-encoded blob.

        Raises:
            NoRecordingInProgressError: start_capture() was not called first
        """
        if not self.is_recording:
            raise NoRecordingInProgressError()

        self.is_recording = False
        audio = b"".join(self._chunks)
        self._chunks = []
        logger.debug(f"Capture stopped: {len(audio)} bytes")
        return base64.b64encode(audio).decode("ascii")

    async def transcribe(self, audio_b64: str) -> str:
        """Transcribe a finished recording. Raises TranscriptionError."""
        return await self.gateway.speech_to_text(audio_b64, mime_type=self.mime_type)

    # ============================================
    # Teardown
    # ============================================

    def release(self):
        """Halt any recording and drop buffered audio. Safe to call repeatedly."""
        if self.released:
            return
        self.is_recording = False
        self.is_speaking = False
        self._chunks = []
        if self._stream is not None:
            self._stream.stop()
            self._stream = None
        self.released = True
        logger.debug("Voice adapter released")
