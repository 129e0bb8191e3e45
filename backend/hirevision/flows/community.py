import json
import logging

from hirevision.config import settings
from hirevision.flows.base import FlowResult, run_text_flow
from hirevision.services.llm_service import LLMNotConfigured, llm_service

logger = logging.getLogger(__name__)

FLAGGING_PROBABILITIES = {"MEDIUM", "HIGH"}

DEFAULT_ICEBREAKER = (
    "Hi! I came across your profile and was impressed by your experience. "
    "I'd love to connect and share an opportunity that might interest you."
)
DEFAULT_CONNECTION_SUMMARY = (
    "You share professional interests and could benefit from exchanging experience and opportunities."
)


async def suggest_hashtags(content: str) -> list[str]:
    prompt = (
        "Analyze the following post content and suggest 3-5 relevant hashtags. "
        "Return ONLY a comma-separated list of hashtags (e.g., #react,#typescript,#webdev):\n\n"
        f"{content}"
    )
    result = await run_text_flow("hashtags", prompt, fallback="", model=settings.gemini_flash_model)
    hashtags = []
    for raw in result.output.split(","):
        tag = raw.strip().strip("`").strip()
        if not tag:
            continue
        if not tag.startswith("#"):
            tag = f"#{tag}"
        if tag not in hashtags:
            hashtags.append(tag)
    return hashtags[:5]


async def connection_icebreaker(candidate_profile: dict) -> FlowResult:
    prompt = (
        "Based on this candidate's profile, generate a personalized, short (1-2 sentences) "
        "icebreaker message for a recruiter to send:\n\n"
        f"Profile: {json.dumps(candidate_profile)}"
    )
    return await run_text_flow("connection_icebreaker", prompt, fallback=DEFAULT_ICEBREAKER)


async def connection_summary(profile_a: dict, profile_b: dict) -> FlowResult:
    prompt = (
        "Briefly summarize why these two professionals might be a good connection:\n\n"
        f"Profile 1: {json.dumps(profile_a)}\n\n"
        f"Profile 2: {json.dumps(profile_b)}"
    )
    return await run_text_flow("connection_summary", prompt, fallback=DEFAULT_CONNECTION_SUMMARY)


async def moderate_content(text: str) -> FlowResult:
    """Flag text whose safety ratings reach MEDIUM or HIGH.

    A failed model call allows the content through, with a warning.
    """
    try:
        report = await llm_service.safety_ratings(text)
    except LLMNotConfigured:
        raise
    except Exception as exc:
        logger.warning("Moderation failed, allowing content: %s", exc)
        return FlowResult(
            {"is_flagged": False, "blocked_categories": []},
            fallback=True,
            warning="Content moderation was unavailable; content was not checked.",
        )

    blocked = []
    for rating in report.get("ratings", []):
        category = rating.get("category")
        if not category or category == "HARM_CATEGORY_UNSPECIFIED":
            continue
        if rating.get("probability") in FLAGGING_PROBABILITIES and category not in blocked:
            blocked.append(category)

    block_reason = report.get("block_reason")
    if block_reason and block_reason != "BLOCKED_REASON_UNSPECIFIED" and block_reason not in blocked:
        blocked.append(block_reason)

    return FlowResult({"is_flagged": bool(blocked), "blocked_categories": blocked})
