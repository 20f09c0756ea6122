"""Alert intake: handles one Graylog webhook end to end.

Flow: received → (priority ≥ 2) investigated → notified → stored → responded.
Investigation and notification are best effort; storage always happens when
the payload carries event data.
"""

from __future__ import annotations

from typing import Optional

from graylog_relay.clients.teams import TeamsNotifier, build_notifier
from graylog_relay.core.analysis import AlertAnalysisService, get_analysis_service
from graylog_relay.core.logging import bind_alert_context, get_logger
from graylog_relay.core.models import AlertPayload, StoredAlertRecord, WebhookResult, utcnow
from graylog_relay.db.repository import InMemoryAlertRepository, get_repository

logger = get_logger("intake")

WEBHOOK_PATH = "/api/graylog/webhook"


class AlertIntakeService:
    def __init__(
        self,
        repository: InMemoryAlertRepository,
        analysis_service: Optional[AlertAnalysisService] = None,
        notifier: Optional[TeamsNotifier] = None,
    ) -> None:
        if repository is None:
            raise ValueError("AlertIntakeService requires a repository")
        self._repository = repository
        self._analysis_service = analysis_service
        self._notifier = notifier

    async def process_webhook(self, payload: AlertPayload) -> WebhookResult:
        bind_alert_context(payload.event_id, payload.event_definition_title)
        try:
            logger.info("alert_received", title=payload.event_definition_title)

            event = payload.event
            if event is None:
                # TODO: surface misconfigured Graylog notifications instead of reporting success
                logger.warning("alert_without_event", title=payload.event_definition_title)
                return WebhookResult(
                    success=True,
                    message="Alert received, but it carried no event data",
                    received_at=utcnow(),
                )

            logger.info(
                "alert_event",
                event_id=event.id,
                message=event.message,
                priority=event.priority,
            )

            if payload.is_high_priority:
                logger.warning("high_priority_alert", event_id=event.id, message=event.message)
                await self._investigate(payload)

            saved = await self._repository.add(StoredAlertRecord.from_payload(payload))

            return WebhookResult(
                success=True,
                message="Alert received and processed",
                received_at=utcnow(),
                event_id=event.id,
                alert_id=saved.id,
            )

        except Exception as e:
            logger.error("alert_processing_failed", error=str(e))
            return WebhookResult(
                success=False,
                message=f"Error while processing alert: {e}",
                received_at=utcnow(),
                event_id=payload.event_id,
            )

    async def _investigate(self, payload: AlertPayload) -> None:
        """Run the AI analysis and deliver it. Never raises."""
        if self._analysis_service is None:
            logger.info("analysis_not_configured", event_id=payload.event_id)
            return

        try:
            analysis = await self._analysis_service.investigate(payload)
        except Exception as e:
            logger.error("analysis_failed_continuing", event_id=payload.event_id, error=str(e))
            return

        if self._notifier is None:
            logger.info("teams_not_configured", event_id=payload.event_id, analysis=analysis)
            return

        try:
            sent = await self._notifier.notify(
                title=payload.title,
                analysis_text=analysis,
                event_id=payload.event_id,
                priority=payload.event.priority if payload.event else None,
            )
        except Exception as e:
            logger.error("teams_delivery_failed", event_id=payload.event_id, error=str(e))
            return

        if sent:
            logger.info("analysis_delivered", event_id=payload.event_id)
        else:
            logger.warning("analysis_not_delivered", event_id=payload.event_id)

    @staticmethod
    def get_webhook_info() -> dict:
        return {
            "endpoint": WEBHOOK_PATH,
            "method": "POST",
            "description": "Receives Graylog event-notification webhooks",
            "content_type": "application/json",
            "example_payload": {
                "event_definition_id": "example-id",
                "event_definition_title": "Test alert",
                "event_definition_description": "This is a test alert",
                "event": {
                    "id": "event-123",
                    "message": "Anomalous activity detected",
                    "priority": 2,
                    "timestamp": utcnow().isoformat(),
                    "alert": True,
                    "fields": {"RequestId": "0HNI1U3PLH2D9:00000004"},
                },
                "backlog": [],
            },
        }


_intake_service: AlertIntakeService | None = None


def get_intake_service() -> AlertIntakeService:
    global _intake_service
    if _intake_service is None:
        _intake_service = AlertIntakeService(
            get_repository(),
            analysis_service=get_analysis_service(),
            notifier=build_notifier(),
        )
    return _intake_service
