import logging
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import BaseModel

from hirevision.services.llm_service import LLMNotConfigured, llm_service
from hirevision.utils.json_reply import parse_json_reply

logger = logging.getLogger(__name__)


class FlowError(Exception):
    """A text flow produced nothing usable; surfaced as HTTP 502."""


@dataclass
class FlowResult:
    output: Any
    fallback: bool = False
    warning: str | None = None


async def run_structured_flow(
    name: str,
    prompt: str,
    output_model: type[BaseModel],
    fallback: dict | Callable[[str | None], dict],
    **generate_kwargs,
) -> FlowResult:
    """Generate, parse and validate a JSON reply.

    ``fallback`` is either the default payload or a callable that builds it
    from the raw reply (``None`` when the model call itself failed).
    """
    raw = None
    try:
        raw = await llm_service.generate(prompt, **generate_kwargs)
        output = output_model.model_validate(parse_json_reply(raw))
    except LLMNotConfigured:
        raise
    except Exception as exc:
        logger.warning("Flow %s returned fallback: %s", name, exc)
        payload = fallback(raw) if callable(fallback) else fallback
        return FlowResult(
            payload,
            fallback=True,
            warning=f"AI response for {name} was unavailable or malformed; returning default output.",
        )
    return FlowResult(output.model_dump())


async def run_text_flow(
    name: str,
    prompt: str,
    fallback: str | None = None,
    **generate_kwargs,
) -> FlowResult:
    """Generate free text. Without a fallback any failure raises FlowError."""
    try:
        text = (await llm_service.generate(prompt, **generate_kwargs)).strip()
        if not text:
            raise ValueError("Empty model reply")
    except LLMNotConfigured:
        raise
    except Exception as exc:
        if fallback is None:
            logger.error("Flow %s failed: %s", name, exc)
            raise FlowError(f"Failed to generate {name.replace('_', ' ')}.") from exc
        logger.warning("Flow %s returned fallback: %s", name, exc)
        return FlowResult(
            fallback,
            fallback=True,
            warning=f"AI response for {name} was unavailable; returning default output.",
        )
    return FlowResult(text)
