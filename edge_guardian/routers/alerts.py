from fastapi import APIRouter, Depends

from edge_guardian.core.pipeline import AlertPipeline
from edge_guardian.dependencies import get_pipeline
from edge_guardian.schemas.alert import AlertRequest, AlertResult

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.post("/generate", response_model=AlertResult, response_model_exclude_none=True)
async def generate_alert(
    request: AlertRequest,
    pipeline: AlertPipeline = Depends(get_pipeline),
) -> AlertResult:
    """
    Classify the submitted image and, when it shows an incident, return a
    generated alert (optionally emailed to recipientEmails). Failures are
    reported in the body with success=false, never as HTTP errors.
    """
    return await pipeline.run(request)
