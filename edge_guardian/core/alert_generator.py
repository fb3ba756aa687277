"""
Tool-augmented alert generator.

One chat-completion conversation: the model sees the incident image and the
device location, may call getNextActions / getLocationDetails any number of
times (bounded by max_tool_rounds), and must finish with a JSON object that
validates as AlertDraft.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from openai import AsyncOpenAI
from pydantic import ValidationError

from edge_guardian.core.errors import AlertGenerationError
from edge_guardian.core.tools import Tool
from edge_guardian.schemas.alert import AlertDraft

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = """You are an AI assistant designed to generate real-time emergency alerts with contextual information.

Respond with a single JSON object (no markdown or extra text) using exactly these keys:
{
  "alertMessage": "concise and informative alert message",
  "severity": "low" | "medium" | "high",
  "recommendedActions": "detailed, step-by-step guide of actions to take",
  "emergencyType": "fire" | "road accident" | "other",
  "locationDetails": "descriptive summary of the incident location"
}"""

USER_PROMPT_TEMPLATE = """An emergency has been detected in an image.

Your task is to:
1. Analyze the image to determine the type of emergency (e.g., 'fire', 'road accident', or 'other').
2. Generate a concise and informative alert message based on the image.
3. Determine the severity of the incident (low, medium, high).
4. Use the getLocationDetails tool to get a descriptive summary of the incident location.
5. Use the getNextActions tool to provide a detailed, step-by-step guide of actions to take. This should include precautions and immediate guidance.

Device Location: {device_location}

Generate the alert."""


def _extract_json(text: str) -> dict:
    """Pull a JSON object out of the model response (handles markdown code blocks)."""
    text = text.strip()
    m = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", text)
    if m:
        text = m.group(1).strip()
    return json.loads(text)


class AlertGenerator:
    def __init__(
        self,
        client: Optional[AsyncOpenAI],
        tools: list[Tool],
        model: str = "gpt-4o-mini",
        max_tool_rounds: int = 5,
    ):
        self.client = client
        self.model = model
        self.max_tool_rounds = max_tool_rounds
        self._tools = {tool.name: tool for tool in tools}

    def is_configured(self) -> bool:
        return self.client is not None

    async def generate(self, image_url: str, device_location: str) -> AlertDraft:
        """Raises AlertGenerationError with an 'AI alert generation failed: ...' message."""
        try:
            return await self._run(image_url, device_location)
        except AlertGenerationError:
            raise
        except Exception as exc:
            logger.error("Alert generation failed: %s", exc)
            raise AlertGenerationError(f"AI alert generation failed: {exc}") from exc

    async def _run(self, image_url: str, device_location: str) -> AlertDraft:
        if self.client is None:
            raise AlertGenerationError("AI alert generation failed: no model client configured")

        messages: list[dict[str, Any]] = [
            {"role": "system", "content": SYSTEM_INSTRUCTION},
            {
                "role": "user",
                "content": [
                    {
                        "type": "text",
                        "text": USER_PROMPT_TEMPLATE.format(device_location=device_location),
                    },
                    {"type": "image_url", "image_url": {"url": image_url}},
                ],
            },
        ]
        tool_defs = [tool.definition() for tool in self._tools.values()]

        for round_no in range(self.max_tool_rounds + 1):
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                tools=tool_defs,
                response_format={"type": "json_object"},
            )
            message = response.choices[0].message

            if not message.tool_calls:
                return self._parse_draft(message.content or "")

            if round_no == self.max_tool_rounds:
                break

            messages.append(
                {
                    "role": "assistant",
                    "content": message.content,
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {
                                "name": call.function.name,
                                "arguments": call.function.arguments,
                            },
                        }
                        for call in message.tool_calls
                    ],
                }
            )
            for call in message.tool_calls:
                result = await self._call_tool(call.function.name, call.function.arguments)
                messages.append({"role": "tool", "tool_call_id": call.id, "content": result})

        raise AlertGenerationError(
            f"AI alert generation failed: model did not produce an alert "
            f"within {self.max_tool_rounds} tool rounds"
        )

    async def _call_tool(self, name: str, raw_arguments: str) -> str:
        tool = self._tools.get(name)
        if tool is None:
            raise AlertGenerationError(f"AI alert generation failed: unknown tool '{name}'")
        arguments = json.loads(raw_arguments or "{}")
        return await tool.invoke(arguments)

    @staticmethod
    def _parse_draft(content: str) -> AlertDraft:
        if not content.strip():
            raise AlertGenerationError("AI alert generation failed: model returned an empty response")
        try:
            return AlertDraft.model_validate(_extract_json(content))
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.error("Model output did not match the alert schema: %s", content[:500])
            raise AlertGenerationError(
                "AI alert generation failed: model output did not match the alert schema"
            ) from exc
