"""Utilities to build multimodal input payloads for the Responses API."""

import base64
from typing import Any, Dict, List


def to_image_data_url(image_bytes: bytes, mime_type: str = "image/jpeg") -> str:
    """Encode raw image bytes into a data URL suitable for vision input."""
    if not image_bytes:
        raise ValueError("Image bytes are required.")
    b64_str = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime_type or 'image/jpeg'};base64,{b64_str}"


def build_inputs(
    system_prompt: str,
    user_prompt: str,
    *,
    image_bytes: bytes,
    mime_type: str,
) -> List[Dict[str, Any]]:
    """Build the Responses API input array: system text, then the image with the request."""
    return [
        {
            "type": "message",
            "role": "system",
            "content": [{"type": "input_text", "text": system_prompt}],
        },
        {
            "type": "message",
            "role": "user",
            "content": [
                {"type": "input_image", "image_url": to_image_data_url(image_bytes, mime_type)},
                {"type": "input_text", "text": user_prompt},
            ],
        },
    ]
