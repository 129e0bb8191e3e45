import logging

import httpx

from hirevision.config import settings

logger = logging.getLogger(__name__)

ELEVENLABS_API = "https://api.elevenlabs.io/v1"


class TTSNotConfigured(Exception):
    pass


class TTSError(Exception):
    pass


async def text_to_speech(text: str, voice_id: str | None = None) -> bytes:
    """Return MP3 audio for ``text``."""
    if not settings.elevenlabs_api_key:
        raise TTSNotConfigured("Text-to-speech is not configured")

    voice = voice_id or settings.elevenlabs_voice_id
    try:
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(
                f"{ELEVENLABS_API}/text-to-speech/{voice}",
                headers={
                    "xi-api-key": settings.elevenlabs_api_key,
                    "Accept": "audio/mpeg",
                },
                json={
                    "text": text,
                    "model_id": "eleven_monolingual_v1",
                    "voice_settings": {"stability": 0.5, "similarity_boost": 0.5},
                },
            )
    except httpx.HTTPError as exc:
        logger.error("ElevenLabs request failed: %s", exc)
        raise TTSError("Failed to generate speech") from exc

    if response.status_code != 200:
        logger.error("ElevenLabs returned %s: %s", response.status_code, response.text[:200])
        raise TTSError("Failed to generate speech")
    return response.content
