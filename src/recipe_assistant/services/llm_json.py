"""Lenient JSON extraction from model replies."""

import json
import logging
import re

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)

_logger = logging.getLogger(__name__)


def extract_json_object(text: str | None) -> dict[str, object] | None:
    """Return the outermost ``{...}`` span of ``text`` parsed as a dict.

    Models often wrap JSON in prose or code fences, so the reply is scanned
    for the first opening brace through the last closing brace. Returns None
    when no object is found or it does not parse.
    """
    if not text:
        return None
    match = _JSON_OBJECT.search(text)
    if match is None:
        return None
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        _logger.warning("Model reply is not valid JSON: %s", exc)
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed
