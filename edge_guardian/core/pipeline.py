"""
Alert pipeline: validate -> classify -> decide -> generate -> assemble -> notify.

Every failure becomes an AlertResult; nothing raised by a collaborator escapes
run(). A notification failure still returns the alert, with a warning message.
Instances hold only configured collaborators, so one pipeline serves
concurrent requests.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from edge_guardian.core.alert_generator import AlertGenerator
from edge_guardian.core.assembler import assemble_alert
from edge_guardian.core.classifier import CLASSIFIER_NOT_CONFIGURED, ImageClassifier
from edge_guardian.core.errors import (
    AlertPipelineError,
    ConfigurationError,
    InputValidationError,
    NotificationError,
)
from edge_guardian.core.incident import NoIncident, decide_incident
from edge_guardian.core.notifier import AlertNotifier
from edge_guardian.schemas.alert import AlertRequest, AlertResult
from edge_guardian.utils.data_uri import decode_data_uri

logger = logging.getLogger(__name__)

GENERATOR_NOT_CONFIGURED = (
    "The AI alert service is not configured. "
    "Please set the OPENAI_API_KEY environment variable."
)
NO_INCIDENT_MESSAGE = "No incident was detected in the provided image."
SUCCESS_MESSAGE = "Alert generated successfully."
NOTIFICATION_WARNING = (
    "Alert generated, but failed to send email notification. "
    "Please check your SMTP configuration."
)


class PipelineStage(str, enum.Enum):
    VALIDATING = "validating"
    CLASSIFYING = "classifying"
    DECIDING = "deciding"
    GENERATING = "generating"
    ASSEMBLING = "assembling"
    NOTIFYING = "notifying"


@dataclass(frozen=True)
class ValidatedRequest:
    image_url: str
    location: str
    recipients: Optional[str]
    image: bytes
    content_type: str


class AlertPipeline:
    def __init__(
        self,
        classifier: ImageClassifier,
        generator: AlertGenerator,
        notifier: Optional[AlertNotifier] = None,
    ):
        self.classifier = classifier
        self.generator = generator
        self.notifier = notifier

    async def run(self, request: AlertRequest) -> AlertResult:
        stage = PipelineStage.VALIDATING
        try:
            validated = self._validate(request)

            stage = PipelineStage.CLASSIFYING
            logger.debug(
                "Classifying %d-byte %s image", len(validated.image), validated.content_type
            )
            classification = await self.classifier.classify(validated.image, validated.content_type)

            stage = PipelineStage.DECIDING
            decision = decide_incident(classification)
            if isinstance(decision, NoIncident):
                logger.info("No incident detected (scores=%s)", classification)
                return AlertResult(success=True, message=NO_INCIDENT_MESSAGE, is_no_incident=True)
            logger.info("Incident '%s' detected (score=%.3f)", decision.label, decision.score)

            # The generator re-reads the image; the classifier label is only a gate.
            stage = PipelineStage.GENERATING
            draft = await self.generator.generate(validated.image_url, validated.location)

            stage = PipelineStage.ASSEMBLING
            alert = assemble_alert(draft, image_url=validated.image_url, location=validated.location)
            logger.info("Alert %s assembled (%s, severity=%s)", alert.id, alert.emergency_type, alert.severity)
        except AlertPipelineError as exc:
            logger.error("Alert pipeline failed while %s: %s", stage.value, exc)
            return AlertResult(success=False, message=str(exc))
        except Exception as exc:
            logger.exception("Unexpected error in alert pipeline while %s", stage.value)
            if stage is PipelineStage.GENERATING:
                return AlertResult(success=False, message=f"AI alert generation failed: {exc}")
            return AlertResult(success=False, message=str(exc) or "An unknown error occurred.")

        if validated.recipients:
            stage = PipelineStage.NOTIFYING
            try:
                if self.notifier is None:
                    raise NotificationError("No email notifier is configured.")
                await self.notifier.send_alert(alert, validated.recipients)
            except Exception as exc:
                logger.error("Failed to send notification email: %s", exc)
                return AlertResult(success=True, message=NOTIFICATION_WARNING, alert=alert)

        return AlertResult(success=True, message=SUCCESS_MESSAGE, alert=alert)

    def _validate(self, request: AlertRequest) -> ValidatedRequest:
        image_url = request.image_data_uri
        if not isinstance(image_url, str) or not image_url.strip():
            raise InputValidationError("Please provide an image.")
        location = request.location
        if not isinstance(location, str) or not location.strip():
            raise InputValidationError("Location is required.")
        recipients = request.recipient_emails
        if recipients is not None and not isinstance(recipients, str):
            raise InputValidationError("Recipient emails must be a comma-separated list.")
        if not self.classifier.is_configured():
            raise ConfigurationError(CLASSIFIER_NOT_CONFIGURED)
        if not self.generator.is_configured():
            raise ConfigurationError(GENERATOR_NOT_CONFIGURED)

        image_url = image_url.strip()
        try:
            image, content_type = decode_data_uri(image_url)
        except ValueError as exc:
            raise InputValidationError(str(exc)) from exc
        return ValidatedRequest(
            image_url=image_url,
            location=location,
            recipients=recipients.strip() if recipients else None,
            image=image,
            content_type=content_type,
        )
