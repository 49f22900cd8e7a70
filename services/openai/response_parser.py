"""Helpers to parse Responses API outputs."""

import json
import re
from typing import Any, Dict, Optional

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    return _FENCE.sub("", text.strip())


def parse_function_call(response: Any, *, tool_name: str) -> Dict[str, Any]:
    """Return the JSON arguments of the named function call.

    When the model answered with text instead, the output text is parsed as
    JSON after stripping a markdown fence.

    Raises:
        ValueError: No usable output, or the output is not a JSON object.
    """
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) == "function_call" and getattr(item, "name", None) == tool_name:
            return _loads_object(getattr(item, "arguments", None) or "")

    text = getattr(response, "output_text", None)
    if text:
        return _loads_object(strip_code_fence(text))
    raise ValueError(f"No function_call output for '{tool_name}' found in Responses API output.")


def _loads_object(raw: str) -> Dict[str, Any]:
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise ValueError(f"Model output is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("Model output is not a JSON object.")
    return data


def extract_usage(response: Any) -> Dict[str, Optional[int]]:
    """Return token usage information from the response, if present."""
    usage = getattr(response, "usage", None)
    return {
        "input_tokens": getattr(usage, "input_tokens", None) if usage else None,
        "output_tokens": getattr(usage, "output_tokens", None) if usage else None,
    }
