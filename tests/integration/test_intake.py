"""Integration tests for the alert intake flow."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from graylog_relay.core.analysis import AlertAnalysisService
from graylog_relay.core.intake import WEBHOOK_PATH, AlertIntakeService


@pytest.fixture
def analysis_service():
    service = MagicMock(spec=AlertAnalysisService)
    service.investigate = AsyncMock(return_value="root cause: expired credentials")
    return service


@pytest.fixture
def notifier():
    sink = MagicMock()
    sink.notify = AsyncMock(return_value=True)
    return sink


class TestAlertIntake:
    def test_requires_repository(self):
        with pytest.raises(ValueError):
            AlertIntakeService(None)

    @pytest.mark.asyncio
    async def test_payload_without_event(self, repository, analysis_service, payload_without_event):
        intake = AlertIntakeService(repository, analysis_service)

        result = await intake.process_webhook(payload_without_event)

        assert result.success is True
        assert "no event data" in result.message
        assert result.alert_id is None
        assert await repository.count() == 0
        analysis_service.investigate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_low_priority_is_stored_without_analysis(
        self, repository, analysis_service, notifier, low_priority_payload
    ):
        intake = AlertIntakeService(repository, analysis_service, notifier)

        result = await intake.process_webhook(low_priority_payload)

        assert result.success is True
        assert result.message == "Alert received and processed"
        assert result.event_id == "01JH0000000000000000000000"
        analysis_service.investigate.assert_not_awaited()
        notifier.notify.assert_not_awaited()

        stored = await repository.get(result.alert_id)
        assert stored.priority == 1
        assert stored.title == "Login failures"
        assert stored.source == "graylog-node-1"

    @pytest.mark.asyncio
    async def test_high_priority_is_analysed_and_notified(
        self, repository, analysis_service, notifier, high_priority_payload
    ):
        intake = AlertIntakeService(repository, analysis_service, notifier)

        result = await intake.process_webhook(high_priority_payload)

        assert result.success is True
        analysis_service.investigate.assert_awaited_once_with(high_priority_payload)
        notifier.notify.assert_awaited_once_with(
            title="Login failures",
            analysis_text="root cause: expired credentials",
            event_id="01JH0000000000000000000000",
            priority=3,
        )
        assert await repository.count() == 1

    @pytest.mark.asyncio
    async def test_analysis_failure_still_stores(
        self, repository, analysis_service, notifier, high_priority_payload
    ):
        analysis_service.investigate.side_effect = RuntimeError("model crashed")
        intake = AlertIntakeService(repository, analysis_service, notifier)

        result = await intake.process_webhook(high_priority_payload)

        assert result.success is True
        assert result.alert_id is not None
        notifier.notify.assert_not_awaited()
        assert await repository.count() == 1

    @pytest.mark.asyncio
    async def test_notification_failure_still_stores(
        self, repository, analysis_service, notifier, high_priority_payload
    ):
        notifier.notify.return_value = False
        intake = AlertIntakeService(repository, analysis_service, notifier)

        result = await intake.process_webhook(high_priority_payload)

        assert result.success is True
        assert await repository.count() == 1

    @pytest.mark.asyncio
    async def test_notifier_exception_still_stores(
        self, repository, analysis_service, notifier, high_priority_payload
    ):
        notifier.notify.side_effect = RuntimeError("socket closed")
        intake = AlertIntakeService(repository, analysis_service, notifier)

        result = await intake.process_webhook(high_priority_payload)

        assert result.success is True
        assert await repository.count() == 1

    @pytest.mark.asyncio
    async def test_high_priority_without_analysis_service(self, repository, high_priority_payload):
        intake = AlertIntakeService(repository)

        result = await intake.process_webhook(high_priority_payload)

        assert result.success is True
        assert await repository.count() == 1

    @pytest.mark.asyncio
    async def test_analysis_without_notifier(self, repository, analysis_service, high_priority_payload):
        intake = AlertIntakeService(repository, analysis_service)

        result = await intake.process_webhook(high_priority_payload)

        assert result.success is True
        analysis_service.investigate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_duplicate_deliveries_are_stored_twice(self, repository, low_priority_payload):
        intake = AlertIntakeService(repository)

        first = await intake.process_webhook(low_priority_payload)
        second = await intake.process_webhook(low_priority_payload)

        assert first.alert_id != second.alert_id
        assert await repository.count() == 2

    @pytest.mark.asyncio
    async def test_storage_failure_is_reported(self, low_priority_payload):
        repository = MagicMock()
        repository.add = AsyncMock(side_effect=RuntimeError("store unavailable"))
        intake = AlertIntakeService(repository)

        result = await intake.process_webhook(low_priority_payload)

        assert result.success is False
        assert result.message == "Error while processing alert: store unavailable"
        assert result.event_id == "01JH0000000000000000000000"

    @pytest.mark.asyncio
    async def test_end_to_end_with_scripted_model(
        self, repository, chat_model_factory, mock_searcher, notifier, high_priority_payload
    ):
        model = chat_model_factory(
            [
                [
                    chat_model_factory.tool_call(
                        {"queryString": 'RequestId:"ABC123"', "timeRangeSeconds": 60, "limit": 20}
                    )
                ],
                [chat_model_factory.text("The login service rejected an expired token.")],
            ]
        )
        intake = AlertIntakeService(repository, AlertAnalysisService(model, mock_searcher), notifier)

        result = await intake.process_webhook(high_priority_payload)

        assert result.success is True
        mock_searcher.search.assert_awaited_once()
        assert (
            notifier.notify.await_args.kwargs["analysis_text"]
            == "The login service rejected an expired token."
        )


class TestWebhookInfo:
    def test_info_describes_endpoint(self):
        info = AlertIntakeService.get_webhook_info()
        assert info["endpoint"] == WEBHOOK_PATH
        assert info["method"] == "POST"
        assert info["content_type"] == "application/json"
        assert info["example_payload"]["event"]["priority"] == 2
