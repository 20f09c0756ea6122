"""LangChain tool definition for Graylog log search.

The investigator gets exactly one tool, ``search_graylog_logs``. Results are
formatted as human-readable text for the LLM.
"""

from __future__ import annotations

from typing import Protocol

from langchain_core.tools import BaseTool, StructuredTool
from pydantic import BaseModel, Field

from graylog_relay.agents.prompts import SEARCH_TOOL_NAME
from graylog_relay.clients.graylog_search import LogRecord
from graylog_relay.core.logging import get_logger

logger = get_logger("agents.tools")

SEARCH_TOOL_DESCRIPTION = (
    "Search the Graylog log system. Use it to trace the full request chain of a "
    "RequestId or MsgId, or to find every record of an error Code. "
    "queryString uses Elasticsearch syntax, timeRangeSeconds is the relative time "
    "range in seconds (default 60), limit is the number of records (default 10)."
)

# (field, label) pairs rendered for each returned record
_RECORD_FIELDS = (
    ("timestamp", "Time"),
    ("message", "Message"),
    ("Code", "Code"),
    ("Layer", "Layer"),
    ("Class", "Class"),
    ("Method", "Method"),
    ("Account", "Account"),
    ("Msg", "Description"),
)


class LogSearcher(Protocol):
    async def search(
        self, query_string: str, time_range_seconds: int = 60, limit: int = 20
    ) -> list[LogRecord]: ...


class SearchLogsInput(BaseModel):
    queryString: str = Field(
        description='Elasticsearch query, e.g. RequestId:"xxx", MsgId:"xxx" or Code:"904002"'
    )
    timeRangeSeconds: int = Field(
        default=60,
        description="Relative time range in seconds; 60 by default, 900 (15 minutes) for trends",
    )
    limit: int = Field(default=10, description="Number of records to return, 10 by default")


def format_search_results(query_string: str, records: list[LogRecord]) -> str:
    if not records:
        return f"No log records found for query '{query_string}'"

    lines = [f"Found {len(records)} log records:", ""]
    for index, record in enumerate(records, start=1):
        lines.append(f"### Log {index}")
        for field, label in _RECORD_FIELDS:
            if field in record:
                lines.append(f"- {label}: {record[field]}")
        lines.append("")
    return "\n".join(lines)


def build_search_tool(searcher: LogSearcher) -> BaseTool:
    """Wrap a log searcher as the ``search_graylog_logs`` tool."""

    async def search_graylog_logs(
        queryString: str, timeRangeSeconds: int = 60, limit: int = 10  # noqa: N803
    ) -> str:
        logger.info(
            "tool_search_requested",
            query=queryString,
            time_range_seconds=timeRangeSeconds,
            limit=limit,
        )
        try:
            records = await searcher.search(
                queryString, time_range_seconds=timeRangeSeconds, limit=limit
            )
        except Exception as e:
            logger.error("tool_search_failed", query=queryString, error=str(e))
            return f"search failed: {e}"

        logger.info("tool_search_completed", query=queryString, count=len(records))
        return format_search_results(queryString, records)

    return StructuredTool.from_function(
        coroutine=search_graylog_logs,
        name=SEARCH_TOOL_NAME,
        description=SEARCH_TOOL_DESCRIPTION,
        args_schema=SearchLogsInput,
    )
