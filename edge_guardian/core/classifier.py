"""
Classification gateway: posts one image to the Edge Impulse classifier and
returns its label -> score mapping. Single attempt, no retries.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import requests
from pydantic import ValidationError

from edge_guardian.core.errors import (
    ClassifierConnectionError,
    ClassifierEmptyResponseError,
    ClassifierProtocolError,
    ClassifierServiceError,
    ConfigurationError,
)
from edge_guardian.schemas.classification import ClassificationResponse

logger = logging.getLogger(__name__)

CLASSIFIER_NOT_CONFIGURED = (
    "The image analysis service is not configured. "
    "Please set the EDGE_IMPULSE_API_URL environment variable."
)


class ImageClassifier:
    def __init__(self, api_url: str, timeout: float = 30.0):
        self.api_url = api_url
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.api_url)

    async def classify(
        self, image: bytes, content_type: str = "image/jpeg"
    ) -> dict[str, Optional[float]]:
        if not self.is_configured():
            raise ConfigurationError(CLASSIFIER_NOT_CONFIGURED)
        return await asyncio.to_thread(self._classify_sync, image, content_type)

    def _classify_sync(self, image: bytes, content_type: str) -> dict[str, Optional[float]]:
        try:
            response = requests.post(
                self.api_url,
                files={"file": ("image.jpg", image, content_type)},
                headers={"Bypass-Tunnel-Reminder": "true"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Classifier request to %s failed: %s", self.api_url, exc)
            raise ClassifierConnectionError() from exc

        if not response.ok:
            logger.error(
                "Classifier returned status %s: %s", response.status_code, response.text[:500]
            )
            raise ClassifierServiceError(response.status_code)

        if not response.text:
            raise ClassifierEmptyResponseError()

        try:
            parsed = ClassificationResponse.model_validate_json(response.text)
        except ValidationError as exc:
            logger.error("Unexpected classifier payload: %s", response.text[:500])
            raise ClassifierProtocolError() from exc

        return parsed.result.classification
