"""Graylog AI Relay entry point.

Usage:
    python main.py serve                 Run the webhook API
    python main.py analyze payload.json  Investigate one saved Graylog payload
"""

from __future__ import annotations

import asyncio
import json
import sys
import time
from pathlib import Path

import uvicorn

from graylog_relay.core.analysis import get_analysis_service
from graylog_relay.core.config import get_settings
from graylog_relay.core.logging import configure_logging, get_logger
from graylog_relay.core.models import AlertPayload


async def run_analysis(payload_path: Path) -> None:
    """Investigate the alert stored in ``payload_path`` and print the report."""
    settings = get_settings()
    configure_logging(json_output=settings.log_json, level=settings.log_level)
    logger = get_logger("main")

    service = get_analysis_service()
    if service is None:
        logger.error("missing_api_key", msg="Set GLR_LLM_API_KEY in .env file")
        sys.exit(1)

    payload = AlertPayload.model_validate(json.loads(payload_path.read_text(encoding="utf-8")))

    logger.info(
        "starting_analysis",
        title=payload.title,
        model=settings.llm_model,
        search_tool=service.has_search_tool,
    )

    start_time = time.monotonic()
    outcome = await service.run(payload)
    elapsed = time.monotonic() - start_time

    print("\n" + "=" * 70)
    print("  GRAYLOG ALERT INVESTIGATION REPORT")
    print("=" * 70)
    print(f"\n  Alert: {payload.title}")
    print(f"  Event ID: {payload.event_id or 'N/A'}")
    print(f"  Priority: {payload.priority}")
    print(f"  Tool calls: {outcome.tool_call_count}")
    print(f"  Duration: {elapsed:.1f}s")
    print("\n" + "-" * 70 + "\n")
    print(outcome.analysis_text)
    print("\n" + "=" * 70)


def serve() -> None:
    settings = get_settings()
    uvicorn.run(
        "graylog_relay.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
    )


def main() -> None:
    """CLI entry point."""
    command = sys.argv[1] if len(sys.argv) > 1 else "serve"

    if command == "serve":
        serve()
    elif command == "analyze" and len(sys.argv) > 2:
        asyncio.run(run_analysis(Path(sys.argv[2])))
    else:
        print(__doc__)
        sys.exit(1)


if __name__ == "__main__":
    main()
