"""
Voice interview socket.

The client joins a run started with POST /interviews. Binary frames are
encoded audio chunks of the answer being recorded; text frames are JSON
commands:

    {"type": "start", "mime_type": "audio/webm;codecs=opus"}
    {"type": "stop"}                      -> transcript of the recording
    {"type": "answer", "text": "..."}     -> score, then next question or completion
    {"type": "speak"}                     -> re-play the current question

Closing the socket releases the run's audio resources.
"""
import json
import logging

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from interviewai.api.dependencies import get_gateway, get_registry
from interviewai.core.auth_dependency import decode_token_email, get_db
from interviewai.core.errors import BadMessageError, InterviewError
from interviewai.services import session_store
from interviewai.services.ai_gateway import AIGateway
from interviewai.services.interview_controller import (
    ControllerRegistry,
    InterviewController,
    InterviewState,
)
from interviewai.services.voice_adapter import AudioStream, VoiceAdapter

logger = logging.getLogger(__name__)

router = APIRouter()


async def _send_error(websocket: WebSocket, error: InterviewError):
    await websocket.send_json({
        "type": "error",
        "code": error.code,
        "detail": error.message,
        "retryable": error.retryable,
    })


async def _send_question(websocket: WebSocket, controller: InterviewController):
    await websocket.send_json({"type": "question", **controller.snapshot().model_dump(mode="json")})
    await controller.speak_current_question()


def _parse_message(text: str) -> dict:
    try:
        message = json.loads(text or "{}")
    except json.JSONDecodeError as e:
        raise BadMessageError("Expected a JSON command") from e
    if not isinstance(message, dict):
        raise BadMessageError("Expected a JSON object")
    return message


def _str_field(message: dict, name: str, default: str) -> str:
    value = message.get(name)
    if value is None:
        return default
    if not isinstance(value, str):
        raise BadMessageError(f"'{name}' must be a string")
    return value


async def _handle_command(websocket: WebSocket, controller: InterviewController, voice: VoiceAdapter, message: dict) -> bool:
    """
    Run one client command. Returns False once the interview is over.

    Raises:
        BadMessageError: Unknown command or a field of the wrong type
    """
    command = message.get("type")

    if command == "start":
        mime_type = _str_field(message, "mime_type", "") or "audio/webm;codecs=opus"
        voice.start_capture(AudioStream(mime_type))
        await websocket.send_json({"type": "recording"})

    elif command == "stop":
        audio_b64 = voice.stop_capture()
        text = await voice.transcribe(audio_b64)
        await websocket.send_json({"type": "transcript", "text": text})

    elif command == "answer":
        outcome = await controller.submit_answer(_str_field(message, "text", ""))
        await websocket.send_json({"type": "scored", **outcome.model_dump(mode="json")})
        if outcome.completed:
            await websocket.send_json({"type": "completed", "session_id": controller.session_id})
            return False
        if outcome.next_question:
            await _send_question(websocket, controller)

    elif command == "retry_question":
        await controller.request_question()
        await _send_question(websocket, controller)

    elif command == "speak":
        await controller.speak_current_question()

    else:
        raise BadMessageError(f"Unknown command: {command}")

    return True


@router.websocket("/ws/interview/{session_id}")
async def interview_socket(
    websocket: WebSocket,
    session_id: int,
    token: str = Query(...),
    db: Session = Depends(get_db),
    gateway: AIGateway = Depends(get_gateway),
    registry: ControllerRegistry = Depends(get_registry),
):
    email = decode_token_email(token)
    profile = session_store.get_profile_by_email(db, email) if email else None
    if profile is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    try:
        controller = registry.get(session_id, user_id=profile.id)
    except InterviewError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    # The run's audio stream belongs to a single connection
    if controller.voice is not None and not controller.voice.released:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    voice = VoiceAdapter(gateway, player=websocket.send_bytes)
    controller.voice = voice
    logger.info(f"Voice socket joined: session_id={session_id}")

    try:
        if controller.state == InterviewState.AWAITING_ANSWER:
            await _send_question(websocket, controller)
        else:
            await websocket.send_json({"type": "state", **controller.snapshot().model_dump(mode="json")})

        while True:
            data = await websocket.receive()
            if data.get("type") == "websocket.disconnect":
                break

            if data.get("bytes") is not None:
                voice.push_chunk(data["bytes"])
                continue

            try:
                message = _parse_message(data.get("text"))
                keep_going = await _handle_command(websocket, controller, voice, message)
            except InterviewError as e:
                await _send_error(websocket, e)
                continue

            if not keep_going:
                registry.discard(session_id)
                await websocket.close()
                break

    except WebSocketDisconnect:
        logger.info(f"Voice socket disconnected: session_id={session_id}")
    finally:
        voice.release()
        if controller.voice is voice:
            controller.voice = None
