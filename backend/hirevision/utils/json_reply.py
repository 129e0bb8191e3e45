import json
import re

_FENCE_OPEN = re.compile(r"^\s*```[a-zA-Z]*\s*\n?")
_FENCE_CLOSE = re.compile(r"\n?\s*```\s*$")


def strip_code_fences(text: str) -> str:
    """Remove a leading ```json (or bare ```) fence and a trailing fence."""
    cleaned = _FENCE_OPEN.sub("", text)
    cleaned = _FENCE_CLOSE.sub("", cleaned)
    return cleaned.strip()


def parse_json_reply(text: str):
    """Parse a model reply as JSON.

    Models often wrap the object in markdown fences or add a sentence before
    it, so after a direct parse fails the outermost ``{...}`` span is tried.
    Raises ValueError when neither parses.
    """
    if text is None:
        raise ValueError("Empty model reply")
    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end <= start:
        raise ValueError("Model reply is not JSON")
    try:
        return json.loads(cleaned[start:end + 1])
    except json.JSONDecodeError as exc:
        raise ValueError(f"Model reply is not JSON: {exc}") from exc
