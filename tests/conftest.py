"""Shared pytest fixtures: image payloads, drafts and alert JSON from the model."""

import base64
import json

import pytest

from edge_guardian.schemas.alert import AlertDraft

JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00fake-jpeg-body\xff\xd9"


@pytest.fixture
def jpeg_bytes():
    return JPEG_BYTES


@pytest.fixture
def image_data_uri():
    return "data:image/jpeg;base64," + base64.b64encode(JPEG_BYTES).decode("ascii")


@pytest.fixture
def draft_payload():
    return {
        "alertMessage": "Vehicle fire on the northbound lane.",
        "severity": "high",
        "recommendedActions": "1. Evacuate the area immediately.",
        "emergencyType": "fire",
        "locationDetails": "Near the old town square",
    }


@pytest.fixture
def draft_json(draft_payload):
    return json.dumps(draft_payload)


@pytest.fixture
def draft(draft_payload):
    return AlertDraft.model_validate(draft_payload)
