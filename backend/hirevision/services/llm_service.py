import logging

from google.genai import types

from hirevision.config import settings

logger = logging.getLogger(__name__)

MODERATION_CATEGORIES = [
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
]


class LLMNotConfigured(Exception):
    pass


def _enum_value(value) -> str | None:
    if value is None:
        return None
    return getattr(value, "value", str(value))


class LLMService:
    """Thin async wrapper around the Gemini API.

    The client is created lazily so the app imports and serves CRUD routes
    without an API key.
    """

    def __init__(self):
        self._client = None

    @property
    def is_configured(self) -> bool:
        return bool(settings.gemini_api_key)

    def ensure_configured(self):
        if not self.is_configured:
            raise LLMNotConfigured("AI features are not configured: missing Gemini API key")

    def _get_client(self):
        self.ensure_configured()
        if self._client is None:
            from google import genai

            self._client = genai.Client(api_key=settings.gemini_api_key)
        return self._client

    def reset(self):
        self._client = None

    async def generate(
        self,
        prompt: str,
        *,
        model: str | None = None,
        history: list[dict] | None = None,
        max_output_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        client = self._get_client()

        contents: list[types.Content] = []
        for msg in history or []:
            role = "model" if msg.get("role") in ("assistant", "model") else "user"
            contents.append(types.Content(role=role, parts=[types.Part(text=msg.get("content", ""))]))
        contents.append(types.Content(role="user", parts=[types.Part(text=prompt)]))

        response = await client.aio.models.generate_content(
            model=model or settings.gemini_model,
            contents=contents,
            config=types.GenerateContentConfig(
                max_output_tokens=max_output_tokens,
                temperature=temperature,
            ),
        )
        return response.text or ""

    async def safety_ratings(self, text: str) -> dict:
        """Run ``text`` through the model with blocking safety settings.

        Returns ``{"ratings": [{"category", "probability"}], "block_reason"}``.
        """
        client = self._get_client()
        response = await client.aio.models.generate_content(
            model=settings.gemini_flash_model,
            contents=text,
            config=types.GenerateContentConfig(
                safety_settings=[
                    types.SafetySetting(
                        category=category,
                        threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                    )
                    for category in MODERATION_CATEGORIES
                ],
            ),
        )

        ratings = []
        block_reason = None
        feedback = response.prompt_feedback
        if feedback is not None:
            block_reason = _enum_value(feedback.block_reason)
            ratings.extend(feedback.safety_ratings or [])
        for candidate in response.candidates or []:
            ratings.extend(candidate.safety_ratings or [])

        return {
            "ratings": [
                {
                    "category": _enum_value(r.category),
                    "probability": _enum_value(r.probability),
                }
                for r in ratings
            ],
            "block_reason": block_reason,
        }


llm_service = LLMService()
