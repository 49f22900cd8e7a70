"""Description: Skin image assessment service using OpenAI's Responses API."""

import logging
import time
from typing import Any, List, Dict

from openai import AsyncOpenAI
from pydantic import ValidationError as PydanticValidationError

from models.case_models import CasePrediction
from models.errors import RemoteAnalysisError
from services.openai.case_schema import FUNCTION_DEFINITION, FUNCTION_NAME
from services.openai.media_inputs import build_inputs
from services.openai.prompts import build_system_prompt, build_user_prompt
from services.openai.response_parser import extract_usage, parse_function_call


class SkinAnalyzer:
    """Send one skin image to the model and return the structured assessment.

    No retries and no timeout beyond the client's own defaults.
    """

    def __init__(self, client: AsyncOpenAI, model: str = "gpt-5") -> None:
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model
        self.system_prompt = build_system_prompt()

    async def analyze(
        self,
        image_bytes: bytes,
        *,
        mime_type: str,
        role: str,
        patient_name: str,
        notes: str = "",
    ) -> CasePrediction:
        """Assess a single image.

        Raises:
            RemoteAnalysisError: The call failed, or the output was not a valid assessment.
        """
        start_time = time.time()
        try:
            inputs = build_inputs(
                self.system_prompt,
                build_user_prompt(role, patient_name, notes),
                image_bytes=image_bytes,
                mime_type=mime_type,
            )
            response = await self._create_response(inputs)
            prediction = self._parse_response(response)
        except Exception as exc:
            logging.error("Error analyzing skin condition: %s", exc)
            raise RemoteAnalysisError(f"Failed to analyze image: {exc}") from exc

        usage = extract_usage(response)
        logging.info(
            "Skin analysis latency: %.3fs (input_tokens=%s, output_tokens=%s)",
            time.time() - start_time,
            usage["input_tokens"],
            usage["output_tokens"],
        )
        return prediction

    async def _create_response(self, inputs: List[Dict[str, Any]]) -> Any:
        """Send the multimodal request to the OpenAI Responses API."""
        return await self.client.responses.create(
            model=self.model,
            input=inputs,
            tools=[FUNCTION_DEFINITION],
            tool_choice={"type": "function", "name": FUNCTION_NAME},
        )

    def _parse_response(self, response: Any) -> CasePrediction:
        """Parse and validate the assessment from the model output."""
        try:
            payload = parse_function_call(response, tool_name=FUNCTION_NAME)
            return CasePrediction.model_validate(payload)
        except (ValueError, PydanticValidationError):
            logging.error("Full response object: %r", response)
            raise
