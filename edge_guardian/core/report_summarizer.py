"""
Gemini: condenses a free-text incident report into a short summary for the
dashboard.
"""

import asyncio

import google.generativeai as genai

from edge_guardian.core.errors import ConfigurationError
from edge_guardian.schemas.incident_summary import IncidentSummary

SYSTEM_INSTRUCTION = """You are an expert at summarizing incident reports.

Provide a concise summary of the incident report you are given, highlighting the key details (what happened, where, severity, people affected, actions taken). Output plain text only, 2-4 sentences."""

USER_PROMPT_TEMPLATE = """Incident Report:
{incident_report}"""


class IncidentReportSummarizer:
    def __init__(self, api_key: str, model_name: str = "gemini-2.5-flash"):
        self.api_key = api_key
        self.model_name = model_name
        if api_key:
            genai.configure(api_key=api_key)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _summarize_sync(self, incident_report: str) -> str:
        model = genai.GenerativeModel(
            model_name=self.model_name,
            system_instruction=SYSTEM_INSTRUCTION,
        )
        response = model.generate_content(
            USER_PROMPT_TEMPLATE.format(incident_report=incident_report)
        )
        if not response.text:
            raise ValueError("Gemini returned empty response (possibly blocked or failed).")
        return response.text.strip()

    async def summarize(self, incident_report: str) -> IncidentSummary:
        if not self.is_configured():
            raise ConfigurationError(
                "GOOGLE_API_KEY is not set. Add it to .env or set the env var."
            )
        text = await asyncio.to_thread(self._summarize_sync, incident_report)
        return IncidentSummary(summary=text)
