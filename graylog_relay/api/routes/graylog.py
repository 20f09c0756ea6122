"""Graylog webhook endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from graylog_relay.api.dependencies import get_alert_analysis_service, get_alert_intake_service
from graylog_relay.api.schemas import (
    AnalysisResponse,
    ErrorResponse,
    WebhookInfoResponse,
    WebhookResponse,
)
from graylog_relay.core.analysis import AlertAnalysisService
from graylog_relay.core.intake import AlertIntakeService
from graylog_relay.core.logging import get_logger
from graylog_relay.core.models import AlertPayload, utcnow

logger = get_logger("api.graylog")

router = APIRouter()


@router.post(
    "/webhook",
    response_model=WebhookResponse,
    responses={500: {"model": WebhookResponse}},
)
async def receive_webhook(
    payload: AlertPayload,
    intake: AlertIntakeService = Depends(get_alert_intake_service),
):
    """Receive a Graylog alert, investigate it if urgent, and store it."""
    logger.info("webhook_request_received")
    result = await intake.process_webhook(payload)
    response = WebhookResponse.from_result(result)

    if not response.success:
        return JSONResponse(status_code=500, content=response.model_dump(mode="json"))
    return response


@router.get("/webhook/info", response_model=WebhookInfoResponse)
async def get_webhook_info(
    intake: AlertIntakeService = Depends(get_alert_intake_service),
) -> WebhookInfoResponse:
    return WebhookInfoResponse(**intake.get_webhook_info())


@router.post(
    "/webhook/analyze",
    response_model=AnalysisResponse,
    responses={503: {"model": ErrorResponse}},
)
async def analyze_webhook(
    payload: AlertPayload,
    analysis_service: Optional[AlertAnalysisService] = Depends(get_alert_analysis_service),
) -> AnalysisResponse:
    """Run only the AI investigation for an alert and return the report."""
    logger.info("analysis_request_received", title=payload.event_definition_title)

    if analysis_service is None:
        logger.warning("chat_model_not_configured")
        raise HTTPException(
            status_code=503,
            detail="Chat model not configured. Set GLR_LLM_API_KEY to enable AI analysis.",
        )

    analysis = await analysis_service.investigate(payload)

    return AnalysisResponse(
        success=True,
        analysis=analysis,
        analyzed_at=utcnow(),
        event_title=payload.event_definition_title,
    )
