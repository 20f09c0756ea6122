"""Alert analysis: investigates one alert with the chat model.

Runs the investigation graph for a single alert and turns whatever happens
into a report string: the model's text, a placeholder when the model said
nothing, or ``"analysis failed: ..."``. It never raises on model or tool
failure.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_groq import ChatGroq

from graylog_relay.agents.prompts import SYSTEM_PROMPT, build_user_prompt
from graylog_relay.agents.tools import LogSearcher, build_search_tool
from graylog_relay.clients.graylog_search import build_search_client
from graylog_relay.core.config import Settings, get_settings
from graylog_relay.core.logging import get_logger
from graylog_relay.core.models import AlertPayload, InvestigationOutcome
from graylog_relay.graph.investigation import build_investigation_graph

logger = get_logger("analysis")

EMPTY_ANALYSIS_PLACEHOLDER = "AI analysis returned no result, please check the chat model configuration."
FAILURE_PREFIX = "analysis failed: "


class InvestigationCancelled(Exception):
    pass


class AlertAnalysisService:
    """Drives the model ⇄ log-search exchange for an alert."""

    def __init__(
        self,
        chat_model: Any,
        search_client: Optional[LogSearcher] = None,
        *,
        max_tool_rounds: int = 8,
        timeout_seconds: float = 300,
    ) -> None:
        if chat_model is None:
            raise ValueError("AlertAnalysisService requires a chat model")
        self._search_client = search_client
        self._tools = [build_search_tool(search_client)] if search_client is not None else []
        self._graph = build_investigation_graph(chat_model, self._tools)
        self._max_tool_rounds = max_tool_rounds
        self._timeout_seconds = timeout_seconds

        if not self._tools:
            logger.warning("search_tool_unavailable", msg="model will answer from the prompt alone")

    @property
    def has_search_tool(self) -> bool:
        return bool(self._tools)

    async def investigate(
        self,
        alert: AlertPayload,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> str:
        """Return the investigation report for ``alert``."""
        outcome = await self.run(alert, cancel_event)
        return outcome.analysis_text

    async def run(
        self,
        alert: AlertPayload,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> InvestigationOutcome:
        start_time = time.monotonic()
        try:
            logger.info("analysis_started", title=alert.title, event_id=alert.event_id)

            user_prompt = build_user_prompt(alert)
            logger.info(
                "prompts_built",
                system_prompt_length=len(SYSTEM_PROMPT),
                user_prompt_length=len(user_prompt),
                tools=[t.name for t in self._tools],
            )

            initial_state = {
                "messages": [SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=user_prompt)],
                "text_fragments": [],
                "tool_call_count": 0,
                "tool_rounds": 0,
                "max_tool_rounds": self._max_tool_rounds,
            }
            # Each round is two graph steps (agent + tools), plus the final agent turn
            config = {"recursion_limit": 2 * self._max_tool_rounds + 5}

            result = await self._run_until_cancelled(
                asyncio.wait_for(
                    self._graph.ainvoke(initial_state, config=config),
                    timeout=self._timeout_seconds,
                ),
                cancel_event,
            )

            analysis = "".join(result.get("text_fragments", []))
            tool_call_count = result.get("tool_call_count", 0)

            logger.info(
                "analysis_completed",
                tool_calls=tool_call_count,
                length=len(analysis),
                duration=f"{time.monotonic() - start_time:.1f}s",
            )

            if tool_call_count == 0 and self._tools:
                logger.warning("analysis_used_no_tools", title=alert.title)

            if not analysis.strip():
                logger.warning("analysis_empty", title=alert.title)
                return InvestigationOutcome(EMPTY_ANALYSIS_PLACEHOLDER, tool_call_count)

            return InvestigationOutcome(analysis, tool_call_count)

        except asyncio.TimeoutError:
            logger.error("analysis_timed_out", timeout_seconds=self._timeout_seconds)
            return InvestigationOutcome(
                f"{FAILURE_PREFIX}timed out after {self._timeout_seconds}s"
            )
        except Exception as e:
            logger.error("analysis_failed", error=str(e))
            return InvestigationOutcome(f"{FAILURE_PREFIX}{e}")

    @staticmethod
    async def _run_until_cancelled(coro, cancel_event: Optional[asyncio.Event]):
        """Await ``coro`` unless ``cancel_event`` fires first."""
        if cancel_event is None:
            return await coro

        run = asyncio.ensure_future(coro)
        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait({run, waiter}, return_when=asyncio.FIRST_COMPLETED)
            if run in done:
                return run.result()
            raise InvestigationCancelled("investigation cancelled")
        finally:
            # also reached when the caller itself is cancelled
            for task in (run, waiter):
                if not task.done():
                    task.cancel()
            await asyncio.gather(run, waiter, return_exceptions=True)


def build_chat_model(settings: Settings | None = None) -> ChatGroq | None:
    """Create the chat model when an API key is configured, otherwise ``None``."""
    settings = settings or get_settings()
    if not settings.llm_enabled:
        return None
    return ChatGroq(
        api_key=settings.llm_api_key,
        model=settings.llm_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        base_url=settings.llm_endpoint or None,
    )


_analysis_service: AlertAnalysisService | None = None
_analysis_service_built = False


def get_analysis_service() -> AlertAnalysisService | None:
    """Shared service, or ``None`` when no chat model is configured."""
    global _analysis_service, _analysis_service_built
    if not _analysis_service_built:
        settings = get_settings()
        chat_model = build_chat_model(settings)
        if chat_model is not None:
            _analysis_service = AlertAnalysisService(
                chat_model,
                build_search_client(settings),
                max_tool_rounds=settings.max_tool_rounds,
                timeout_seconds=settings.max_investigation_duration_seconds,
            )
        _analysis_service_built = True
    return _analysis_service
