from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SummarizeReportRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    incident_report: str = Field(description="The full text of the incident report.")


class IncidentSummary(BaseModel):
    summary: str = Field(description="A concise summary of the incident report.")
