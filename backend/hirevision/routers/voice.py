from fastapi import APIRouter, Depends
from fastapi.responses import Response

from hirevision.dependencies import get_current_user
from hirevision.schemas.ai import TextToSpeechRequest
from hirevision.services.tts_service import text_to_speech

router = APIRouter(
    prefix="/voice",
    tags=["voice"],
    dependencies=[Depends(get_current_user)],
)


@router.post("/text-to-speech")
async def speak(req: TextToSpeechRequest):
    audio = await text_to_speech(req.text, req.voice_id)
    return Response(content=audio, media_type="audio/mpeg")
