from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

EmergencyType = Literal["fire", "road accident", "other"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AlertDraft(CamelModel):
    """Structured alert as produced by the language model, before assembly."""

    alert_message: str = Field(description="The generated emergency alert message.")
    severity: str = Field(description="The severity of the emergency (low, medium, high).")
    recommended_actions: str = Field(
        description="A detailed, step-by-step guide of actions to take, "
        "including precautions and immediate guidance."
    )
    emergency_type: EmergencyType = Field(description="The type of emergency detected.")
    location_details: str = Field(description="A descriptive summary of the incident location.")


class Alert(AlertDraft):
    model_config = ConfigDict(frozen=True)

    id: str                         # "<epoch ms>-<8 hex chars>"
    timestamp: int                  # epoch ms
    image_url: str                  # data URI or URL, as submitted
    location: str                   # raw device location


class AlertRequest(CamelModel):
    # Any: the pipeline reports missing or non-text fields instead of a 422.
    image_data_uri: Any = None
    location: Any = None
    recipient_emails: Any = None


class AlertResult(CamelModel):
    success: bool
    message: str
    is_no_incident: Optional[bool] = None
    alert: Optional[Alert] = None
