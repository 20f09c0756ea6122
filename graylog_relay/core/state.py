"""LangGraph investigation state definition.

List fields use ``operator.add`` as a reducer so each node *appends* to the
conversation and to the streamed text instead of overwriting it.
"""

from __future__ import annotations

import operator
from typing import Annotated

from langchain_core.messages import BaseMessage
from typing_extensions import TypedDict


class InvestigationState(TypedDict):
    # ── Conversation (append-only) ──────────────────────────────
    messages: Annotated[list[BaseMessage], operator.add]

    # ── Streamed model text, in emission order ──────────────────
    text_fragments: Annotated[list[str], operator.add]

    # ── Tool telemetry ──────────────────────────────────────────
    tool_call_count: int
    tool_rounds: int
    max_tool_rounds: int
