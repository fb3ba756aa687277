import logging

from fastapi import APIRouter, Depends, HTTPException

from edge_guardian.core.errors import ConfigurationError
from edge_guardian.core.report_summarizer import IncidentReportSummarizer
from edge_guardian.dependencies import get_summarizer
from edge_guardian.schemas.incident_summary import IncidentSummary, SummarizeReportRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["ai-config"])


@router.post("/summarize-report", response_model=IncidentSummary)
async def post_summarize_report(
    request: SummarizeReportRequest,
    summarizer: IncidentReportSummarizer = Depends(get_summarizer),
) -> IncidentSummary:
    """Send the full incident report text to Gemini; returns a concise summary."""
    if not request.incident_report.strip():
        raise HTTPException(400, detail="incidentReport cannot be empty")
    try:
        return await summarizer.summarize(request.incident_report)
    except ConfigurationError as e:
        raise HTTPException(503, detail=str(e))
    except Exception as e:
        logger.error("Incident report summarization failed: %s", e)
        raise HTTPException(502, detail=f"Incident report summarization failed: {e}")
