import asyncio
import json

import pytest
import requests

from edge_guardian.config import SmtpSettings
from edge_guardian.core.alert_generator import AlertGenerator
from edge_guardian.core.classifier import ImageClassifier
from edge_guardian.core.errors import NotificationError
from edge_guardian.core.notifier import AlertNotifier
from edge_guardian.core.pipeline import (
    NO_INCIDENT_MESSAGE,
    NOTIFICATION_WARNING,
    SUCCESS_MESSAGE,
    AlertPipeline,
)
from edge_guardian.core.tools import FIRE_ACTIONS, next_actions_tool
from edge_guardian.schemas.alert import AlertRequest
from fakes import EchoOpenAI, FakeOpenAI, classification_body, completion, http_response, tool_call

API_URL = "http://classifier.local/api/image"


class RecordingNotifier:
    def __init__(self, error=None):
        self.error = error
        self.sent = []

    async def send_alert(self, alert, recipients):
        if self.error is not None:
            raise self.error
        self.sent.append((alert, recipients))


@pytest.fixture
def classifier_returns(monkeypatch):
    calls = []

    def install(scores=None, error=None, response=None):
        def fake_post(url, **kwargs):
            calls.append(url)
            if error is not None:
                raise error
            return response or http_response(200, classification_body(scores))

        monkeypatch.setattr(requests, "post", fake_post)
        return calls

    return install


def make_pipeline(client, notifier=None, classifier_url=API_URL):
    return AlertPipeline(
        classifier=ImageClassifier(classifier_url),
        generator=AlertGenerator(client, [next_actions_tool()]),
        notifier=notifier,
    )


@pytest.mark.asyncio
async def test_no_incident(classifier_returns, image_data_uri):
    classifier_returns({"No_Incident": 0.91, "fire": 0.09})
    client = FakeOpenAI([])

    result = await make_pipeline(client).run(AlertRequest(image_data_uri=image_data_uri, location="here"))

    assert result.success is True
    assert result.is_no_incident is True
    assert result.alert is None
    assert result.message == NO_INCIDENT_MESSAGE
    assert client.completions.calls == []


@pytest.mark.asyncio
async def test_incident_without_recipients(classifier_returns, image_data_uri, draft_json):
    classifier_returns({"No_Incident": 0.1, "fire": 0.9})
    notifier = RecordingNotifier()

    result = await make_pipeline(FakeOpenAI([completion(content=draft_json)]), notifier).run(
        AlertRequest(image_data_uri=image_data_uri, location="40.7, -74.0")
    )

    assert result.success is True
    assert result.message == SUCCESS_MESSAGE
    assert result.is_no_incident is None
    assert result.alert.image_url == image_data_uri
    assert result.alert.location == "40.7, -74.0"
    assert result.alert.emergency_type == "fire"
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_incident_with_recipients_is_emailed(classifier_returns, image_data_uri, draft_json):
    classifier_returns({"No_Incident": 0.1, "fire": 0.9})
    notifier = RecordingNotifier()

    result = await make_pipeline(FakeOpenAI([completion(content=draft_json)]), notifier).run(
        AlertRequest(image_data_uri=image_data_uri, location="here", recipient_emails="ops@example.com")
    )

    assert result.message == SUCCESS_MESSAGE
    assert notifier.sent == [(result.alert, "ops@example.com")]


@pytest.mark.asyncio
async def test_misconfigured_mail_downgrades_to_warning(classifier_returns, image_data_uri, draft_json):
    classifier_returns({"No_Incident": 0.1, "fire": 0.9})
    notifier = AlertNotifier(SmtpSettings())

    result = await make_pipeline(FakeOpenAI([completion(content=draft_json)]), notifier).run(
        AlertRequest(image_data_uri=image_data_uri, location="here", recipient_emails="ops@example.com")
    )

    assert result.success is True
    assert result.alert is not None
    assert result.message == NOTIFICATION_WARNING


@pytest.mark.asyncio
async def test_notifier_error_keeps_alert(classifier_returns, image_data_uri, draft_json):
    classifier_returns({"fire": 0.9})
    notifier = RecordingNotifier(NotificationError("Failed to send email via SMTP."))

    result = await make_pipeline(FakeOpenAI([completion(content=draft_json)]), notifier).run(
        AlertRequest(image_data_uri=image_data_uri, location="here", recipient_emails="ops@example.com")
    )

    assert result.success is True
    assert result.alert is not None
    assert "failed to send email notification" in result.message


@pytest.mark.asyncio
async def test_unreachable_classifier(classifier_returns, image_data_uri):
    classifier_returns(error=requests.ConnectionError("Name or service not known"))

    result = await make_pipeline(FakeOpenAI([])).run(
        AlertRequest(image_data_uri=image_data_uri, location="here")
    )

    assert result.success is False
    assert result.alert is None
    assert result.message.startswith("Could not connect to the analysis service")


@pytest.mark.asyncio
async def test_classifier_service_error(classifier_returns, image_data_uri):
    classifier_returns(response=http_response(500, "boom"))

    result = await make_pipeline(FakeOpenAI([])).run(
        AlertRequest(image_data_uri=image_data_uri, location="here")
    )

    assert result.success is False
    assert "(status 500)" in result.message


@pytest.mark.asyncio
async def test_generation_failure(classifier_returns, image_data_uri):
    classifier_returns({"fire": 0.9})

    result = await make_pipeline(FakeOpenAI([RuntimeError("invalid api key")])).run(
        AlertRequest(image_data_uri=image_data_uri, location="here")
    )

    assert result.success is False
    assert result.alert is None
    assert result.message == "AI alert generation failed: invalid api key"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "image, location, message",
    [
        ("", "here", "Please provide an image."),
        ("data:image/jpeg;base64,AAAA", "", "Location is required."),
        ("not a data uri", "here", "Invalid data URI"),
    ],
)
async def test_validation_errors_never_reach_services(classifier_returns, image, location, message):
    calls = classifier_returns({"fire": 0.9})

    result = await make_pipeline(FakeOpenAI([])).run(AlertRequest(image_data_uri=image, location=location))

    assert result.success is False
    assert result.message == message
    assert calls == []


@pytest.mark.asyncio
async def test_missing_classifier_url(classifier_returns, image_data_uri):
    calls = classifier_returns({"fire": 0.9})

    result = await make_pipeline(FakeOpenAI([]), classifier_url="").run(
        AlertRequest(image_data_uri=image_data_uri, location="here")
    )

    assert result.success is False
    assert "EDGE_IMPULSE_API_URL" in result.message
    assert calls == []


@pytest.mark.asyncio
async def test_missing_model_client(classifier_returns, image_data_uri):
    calls = classifier_returns({"fire": 0.9})

    result = await make_pipeline(None).run(AlertRequest(image_data_uri=image_data_uri, location="here"))

    assert result.success is False
    assert "OPENAI_API_KEY" in result.message
    assert calls == []


@pytest.mark.asyncio
async def test_repeat_runs_give_identical_decision_and_actions(classifier_returns, image_data_uri, draft_payload):
    classifier_returns({"No_Incident": 0.1, "road_accident": 0.2, "fire": 0.7})
    responses = []
    for _ in range(2):
        responses.append(
            completion(
                tool_calls=[tool_call("c1", "getNextActions", {"emergencyType": "fire", "severity": "high"})]
            )
        )
        responses.append(completion(content=json.dumps(dict(draft_payload, recommendedActions=FIRE_ACTIONS))))
    client = FakeOpenAI(responses)
    pipeline = make_pipeline(client)
    request = AlertRequest(image_data_uri=image_data_uri, location="here")

    first = await pipeline.run(request)
    second = await pipeline.run(request)

    assert first.success and second.success
    assert first.alert.recommended_actions == second.alert.recommended_actions == FIRE_ACTIONS
    assert first.alert.id != second.alert.id
    tool_results = [
        m["content"] for call in client.completions.calls for m in call["messages"] if m["role"] == "tool"
    ]
    assert set(tool_results) == {FIRE_ACTIONS}


@pytest.mark.asyncio
async def test_padded_image_is_normalized_before_use(classifier_returns, image_data_uri, draft_json):
    classifier_returns({"fire": 0.9})
    client = FakeOpenAI([completion(content=draft_json)])

    result = await make_pipeline(client).run(
        AlertRequest(image_data_uri=f"  {image_data_uri}\n", location="here")
    )

    assert result.success is True
    assert result.alert.image_url == image_data_uri
    user_parts = client.completions.calls[0]["messages"][1]["content"]
    assert user_parts[1]["image_url"]["url"] == image_data_uri


@pytest.mark.asyncio
async def test_non_text_recipients_are_rejected(classifier_returns, image_data_uri):
    calls = classifier_returns({"fire": 0.9})

    result = await make_pipeline(FakeOpenAI([])).run(
        AlertRequest(image_data_uri=image_data_uri, location="here", recipient_emails=["ops@example.com"])
    )

    assert result.success is False
    assert calls == []


@pytest.mark.asyncio
async def test_concurrent_runs_do_not_interfere(classifier_returns, image_data_uri, draft_payload):
    classifier_returns({"No_Incident": 0.1, "fire": 0.9})
    notifier = RecordingNotifier()
    pipeline = make_pipeline(EchoOpenAI(draft_payload), notifier)
    requests_ = [
        AlertRequest(image_data_uri=image_data_uri, location=f"site-{i}", recipient_emails=f"ops{i}@example.com")
        for i in range(5)
    ]

    results = await asyncio.gather(*(pipeline.run(r) for r in requests_))

    assert all(r.success and r.message == SUCCESS_MESSAGE for r in results)
    assert [r.alert.location for r in results] == [f"site-{i}" for i in range(5)]
    assert [r.alert.location_details for r in results] == [f"site-{i}" for i in range(5)]
    assert len({r.alert.id for r in results}) == 5
    sent = {recipients: alert.location for alert, recipients in notifier.sent}
    assert sent == {f"ops{i}@example.com": f"site-{i}" for i in range(5)}
