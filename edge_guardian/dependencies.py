"""
Composition root: long-lived clients are built once per process and shared
by every request.
"""

from functools import lru_cache
from typing import Optional

from openai import AsyncOpenAI

from edge_guardian.config import Settings
from edge_guardian.core.alert_generator import AlertGenerator
from edge_guardian.core.classifier import ImageClassifier
from edge_guardian.core.notifier import AlertNotifier
from edge_guardian.core.pipeline import AlertPipeline
from edge_guardian.core.report_summarizer import IncidentReportSummarizer
from edge_guardian.core.tools import LocationDescriber, Tool, next_actions_tool


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()


def build_openai_client(settings: Settings) -> Optional[AsyncOpenAI]:
    if not settings.openai_api_key:
        return None
    return AsyncOpenAI(api_key=settings.openai_api_key)


def build_pipeline(settings: Settings, client: Optional[AsyncOpenAI] = None) -> AlertPipeline:
    tools: list[Tool] = [next_actions_tool()]
    if client is not None:
        describer = LocationDescriber(
            client, settings.openai_model, temperature=settings.location_temperature
        )
        tools.append(describer.as_tool())
    generator = AlertGenerator(
        client,
        tools,
        model=settings.openai_model,
        max_tool_rounds=settings.max_tool_rounds,
    )
    return AlertPipeline(
        classifier=ImageClassifier(settings.classifier_url, timeout=settings.classifier_timeout_sec),
        generator=generator,
        notifier=AlertNotifier(settings.smtp),
    )


@lru_cache
def get_pipeline() -> AlertPipeline:
    settings = get_settings()
    return build_pipeline(settings, build_openai_client(settings))


@lru_cache
def get_summarizer() -> IncidentReportSummarizer:
    settings = get_settings()
    return IncidentReportSummarizer(settings.google_api_key, settings.gemini_model)
