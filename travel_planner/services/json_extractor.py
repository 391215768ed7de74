"""
JSON extraction from raw model output.
Models are asked for pure JSON but often wrap it in a code fence or commentary.
"""
import json
import logging
import re
from typing import Any, Optional

from ..exceptions import UpstreamGenerationError

logger = logging.getLogger(__name__)

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)```", re.IGNORECASE)


def extract_json(text: str) -> Optional[str]:
    """
    Find the most likely complete JSON object inside ``text``.

    1. The interior of a ```json fenced block, trimmed, returned as-is.
    2. The span from the first ``{`` to the last ``}`` if its braces balance.

    Braces inside string literals are counted like any other brace.

    Returns:
        The candidate substring, or None if nothing plausible was found.
    """
    if not text:
        return None

    match = _JSON_FENCE.search(text)
    if match:
        return match.group(1).strip()

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end != -1 and start < end:
        candidate = text[start:end + 1]
        if _braces_balanced(candidate):
            return candidate

    return None


def _braces_balanced(candidate: str) -> bool:
    balance = 0
    for char in candidate:
        if char == "{":
            balance += 1
        elif char == "}":
            balance -= 1
            if balance < 0:
                return False
    return balance == 0


def parse_model_json(text: str) -> Any:
    """
    Parse model output into JSON, trying the raw text then the extracted candidate.

    Each candidate is strict-parsed once; the first success wins.

    Raises:
        UpstreamGenerationError: if no candidate parses. The raw text is
            logged, never put into the error.
    """
    candidates = [text]
    extracted = extract_json(text)
    if extracted is not None and extracted != text:
        candidates.append(extracted)

    for candidate in candidates:
        try:
            return json.loads(candidate)
        except (json.JSONDecodeError, TypeError):
            continue

    logger.error(f"Failed to parse model output as JSON (length: {len(text or '')}). Raw text:\n{text}")
    raise UpstreamGenerationError()
