"""
Tools the alert model may call while drafting an alert.

A Tool pairs an OpenAI function definition (derived from a pydantic input
model) with an async handler that returns plain text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from openai import AsyncOpenAI
from pydantic import BaseModel, Field

from edge_guardian.schemas.alert import CamelModel

logger = logging.getLogger(__name__)

ROAD_ACCIDENT_HIGH_ACTIONS = (
    "1. Call emergency services (e.g., 911) immediately. "
    "2. Do not move injured individuals unless they are in immediate danger. "
    "3. Secure the scene by turning on hazard lights. "
    "4. Provide first aid if you are trained and it is safe to do so."
)
ROAD_ACCIDENT_ACTIONS = (
    "1. Assess the situation for any injuries. "
    "2. Move vehicles to a safe location if possible. "
    "3. Exchange insurance and contact information with other parties. "
    "4. Document the scene with photos."
)
FIRE_ACTIONS = (
    "1. Evacuate the area immediately. "
    "2. Activate the nearest fire alarm. "
    "3. Call the fire department from a safe location. "
    "4. Close doors behind you to slow the spread of fire. Do not use elevators."
)
GENERAL_ACTIONS = (
    "1. Assess the situation for immediate dangers. "
    "2. Call for help if needed. "
    "3. Provide assistance to others if it is safe to do so. "
    "4. Follow instructions from emergency personnel when they arrive."
)

LOCATION_PROMPT_TEMPLATE = (
    "Convert the following coordinates into a plausible, descriptive, human-readable "
    'address. For example, "near the old town square" or "on the corner of Main St '
    'and 2nd Ave". Coordinates: {device_location}'
)


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    input_model: type[BaseModel]
    handler: Callable[[Any], Awaitable[str]]

    def definition(self) -> dict[str, Any]:
        """Function definition in the chat-completions `tools` format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_model.model_json_schema(),
            },
        }

    async def invoke(self, arguments: dict[str, Any]) -> str:
        """Validate raw model arguments and run the handler. Raises pydantic.ValidationError."""
        params = self.input_model.model_validate(arguments)
        logger.info("Tool %s called with %s", self.name, params.model_dump())
        return await self.handler(params)


class NextActionsInput(CamelModel):
    emergency_type: str = Field(description="The type of emergency detected.")
    severity: str = Field(description="The severity of the emergency.")


class LocationDetailsInput(CamelModel):
    device_location: str = Field(description="The coordinates of the device.")


def recommended_actions(emergency_type: str, severity: str) -> str:
    # Exact, case-sensitive comparisons: "High" does not select the high-severity list.
    if emergency_type == "road accident":
        if severity == "high":
            return ROAD_ACCIDENT_HIGH_ACTIONS
        return ROAD_ACCIDENT_ACTIONS
    if emergency_type == "fire":
        return FIRE_ACTIONS
    return GENERAL_ACTIONS


async def _next_actions_handler(params: NextActionsInput) -> str:
    return recommended_actions(params.emergency_type, params.severity)


def next_actions_tool() -> Tool:
    return Tool(
        name="getNextActions",
        description=(
            "Generates a detailed, step-by-step guide of actions, precautions, and "
            "guidance based on the emergency type and severity."
        ),
        input_model=NextActionsInput,
        handler=_next_actions_handler,
    )


class LocationDescriber:
    """Turns raw device coordinates into a readable place description via a second model call."""

    def __init__(self, client: AsyncOpenAI, model: str, temperature: float = 0.7):
        self.client = client
        self.model = model
        self.temperature = temperature

    async def describe(self, device_location: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            temperature=self.temperature,
            messages=[
                {
                    "role": "user",
                    "content": LOCATION_PROMPT_TEMPLATE.format(device_location=device_location),
                }
            ],
        )
        text = (response.choices[0].message.content or "").strip()
        if not text:
            raise ValueError("Location description model returned an empty response.")
        return text

    async def _handle(self, params: LocationDetailsInput) -> str:
        return await self.describe(params.device_location)

    def as_tool(self) -> Tool:
        return Tool(
            name="getLocationDetails",
            description="Provides a descriptive summary of a location based on coordinates.",
            input_model=LocationDetailsInput,
            handler=self._handle,
        )
