"""Provider response parsing utilities.

Text models are asked for JSON but routinely wrap it in prose or markdown
fences; this module digs the object out.
"""

import json
import re

# Precompiled regex for JSON extraction
_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)

# Lenient decoder that allows control characters (raw newlines, tabs) inside
# JSON strings, which models often emit instead of proper \n escapes.
_LENIENT_DECODER = json.JSONDecoder(strict=False)


def _try_loads(text: str):
    """Try parsing JSON, first strictly then leniently."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    try:
        return _LENIENT_DECODER.decode(text)
    except json.JSONDecodeError:
        pass
    raise json.JSONDecodeError("", text, 0)


def _ensure_dict(result) -> dict:
    """Ensure the parsed JSON result is a dict.

    A bare list of chapter stubs is wrapped as {"chapters": [...]}, since that
    is the only list-valued payload the assistant ever requests.
    """
    if isinstance(result, dict):
        return result
    if isinstance(result, list):
        return {"chapters": result}
    return {"value": result}


def parse_json_response(text: str) -> dict:
    """Extract and parse JSON from a model response.

    Handles JSON wrapped in markdown code fences or surrounded by prose,
    and tolerates unescaped newlines inside string values.

    Always returns a dict; lists are normalized via _ensure_dict.

    Raises:
        ValueError: If no JSON value can be recovered.
    """
    text = text.strip()

    try:
        return _ensure_dict(_try_loads(text))
    except json.JSONDecodeError:
        pass

    match = _JSON_FENCE_RE.search(text)
    if match:
        try:
            return _ensure_dict(_try_loads(match.group(1).strip()))
        except json.JSONDecodeError:
            pass

    # Try finding JSON object or array boundaries
    for start_char, end_char in [("{", "}"), ("[", "]")]:
        start = text.find(start_char)
        end = text.rfind(end_char)
        if start != -1 and end != -1 and end > start:
            try:
                return _ensure_dict(_try_loads(text[start:end + 1]))
            except json.JSONDecodeError:
                continue

    raise ValueError(f"Failed to parse JSON from LLM response: {text[:200]}...")
