import pytest
from pydantic import ValidationError

from edge_guardian.core.tools import (
    FIRE_ACTIONS,
    GENERAL_ACTIONS,
    ROAD_ACCIDENT_ACTIONS,
    ROAD_ACCIDENT_HIGH_ACTIONS,
    LocationDescriber,
    next_actions_tool,
    recommended_actions,
)
from fakes import FakeOpenAI, completion


def test_recommended_actions_branches():
    assert recommended_actions("road accident", "high").startswith("1. Call emergency services")
    assert recommended_actions("fire", "low").startswith("1. Evacuate the area immediately.")
    assert recommended_actions("other", "medium").startswith(
        "1. Assess the situation for immediate dangers."
    )
    assert recommended_actions("road accident", "low") == ROAD_ACCIDENT_ACTIONS


def test_recommended_actions_is_deterministic():
    assert recommended_actions("fire", "high") == recommended_actions("fire", "high")


def test_fire_ignores_severity():
    assert recommended_actions("fire", "high") == recommended_actions("fire", "low") == FIRE_ACTIONS


def test_severity_comparison_is_case_sensitive():
    assert recommended_actions("road accident", "High") == ROAD_ACCIDENT_ACTIONS
    assert recommended_actions("Road Accident", "high") == GENERAL_ACTIONS


def test_next_actions_tool_definition_uses_camel_case_parameters():
    definition = next_actions_tool().definition()
    assert definition["type"] == "function"
    assert definition["function"]["name"] == "getNextActions"
    params = definition["function"]["parameters"]
    assert set(params["properties"]) == {"emergencyType", "severity"}
    assert set(params["required"]) == {"emergencyType", "severity"}


@pytest.mark.asyncio
async def test_next_actions_tool_invoke():
    result = await next_actions_tool().invoke({"emergencyType": "road accident", "severity": "high"})
    assert result == ROAD_ACCIDENT_HIGH_ACTIONS


@pytest.mark.asyncio
async def test_tool_rejects_missing_arguments():
    with pytest.raises(ValidationError):
        await next_actions_tool().invoke({"emergencyType": "fire"})


@pytest.mark.asyncio
async def test_location_describer_uses_creative_temperature():
    client = FakeOpenAI([completion(content="  On the corner of Main St and 2nd Ave \n")])
    tool = LocationDescriber(client, "gpt-4o-mini", temperature=0.7).as_tool()

    result = await tool.invoke({"deviceLocation": "40.7128, -74.0060"})

    assert result == "On the corner of Main St and 2nd Ave"
    call = client.completions.calls[0]
    assert call["temperature"] == 0.7
    assert "40.7128, -74.0060" in call["messages"][0]["content"]


@pytest.mark.asyncio
async def test_location_describer_empty_reply_fails():
    client = FakeOpenAI([completion(content="")])
    with pytest.raises(ValueError):
        await LocationDescriber(client, "gpt-4o-mini").describe("1, 2")
