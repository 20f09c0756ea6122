"""LangGraph investigation graph definition.

Graph structure:
    START → agent → (conditional) → tools → agent → ... → END

Without tools the graph is simply START → agent → END.
"""

from __future__ import annotations

from typing import Any, Sequence

from langchain_core.tools import BaseTool
from langgraph.graph import END, START, StateGraph

from graylog_relay.agents.investigator import (
    bind_tools,
    make_agent_node,
    make_tools_node,
    should_call_tools,
)
from graylog_relay.core.state import InvestigationState


def build_investigation_graph(model: Any, tools: Sequence[BaseTool] = ()) -> StateGraph:
    """Build and compile the investigation graph."""

    graph = StateGraph(InvestigationState)

    graph.add_node("agent", make_agent_node(bind_tools(model, tools)))
    graph.add_edge(START, "agent")

    if not tools:
        graph.add_edge("agent", END)
        return graph.compile()

    # ── Tool loop: agent ⇄ tools until a text-only turn ────────
    graph.add_node("tools", make_tools_node(tools))
    graph.add_conditional_edges(
        "agent",
        should_call_tools,
        {"tools": "tools", "end": END},
    )
    graph.add_edge("tools", "agent")

    return graph.compile()
