from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class ClassificationPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    classification: dict[str, Optional[float]]

    @field_validator("classification")
    @classmethod
    def _not_empty(cls, value: dict[str, Optional[float]]) -> dict[str, Optional[float]]:
        if not value:
            raise ValueError("classification must contain at least one label")
        return value


class ClassificationResponse(BaseModel):
    """Envelope returned by the classifier: {"result": {"classification": {...}}}."""

    model_config = ConfigDict(extra="ignore")

    result: ClassificationPayload
