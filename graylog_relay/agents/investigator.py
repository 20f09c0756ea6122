"""Investigator agent: the model turn and the tool turn of the loop.

``make_agent_node`` streams one model turn and records its text;
``make_tools_node`` runs every tool call the model asked for, in order, and
appends the results to the conversation.
"""

from __future__ import annotations

from typing import Any, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import (
    AIMessage,
    AIMessageChunk,
    BaseMessage,
    ToolMessage,
    message_chunk_to_message,
)
from langchain_core.tools import BaseTool

from graylog_relay.core.logging import get_logger
from graylog_relay.core.state import InvestigationState

logger = get_logger("investigator")


def message_text(message: BaseMessage) -> str:
    """Text carried by a message or chunk, ignoring non-text content blocks."""
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def make_agent_node(model: Any):
    """Build the node that streams one model turn."""

    async def agent_node(state: InvestigationState) -> dict:
        fragments: list[str] = []
        full: AIMessageChunk | None = None

        async for chunk in model.astream(state["messages"]):
            text = message_text(chunk)
            if text:
                fragments.append(text)
            full = chunk if full is None else full + chunk

        reply: AIMessage = message_chunk_to_message(full) if full is not None else AIMessage(content="")

        logger.info(
            "model_turn_completed",
            text_length=sum(len(f) for f in fragments),
            tool_calls=len(reply.tool_calls),
        )

        return {
            "messages": [reply],
            "text_fragments": fragments,
        }

    return agent_node


def make_tools_node(tools: Sequence[BaseTool]):
    """Build the node that dispatches the tool calls of the last model turn."""
    tools_by_name = {tool.name: tool for tool in tools}

    async def tools_node(state: InvestigationState) -> dict:
        last = state["messages"][-1]
        calls = getattr(last, "tool_calls", None) or []
        count = state["tool_call_count"]
        results: list[ToolMessage] = []

        for call in calls:
            count += 1
            name = call["name"]
            logger.info("tool_invoked", tool=name, call_number=count, args=call["args"])

            tool = tools_by_name.get(name)
            if tool is None:
                content = f"unknown tool: {name}"
            else:
                try:
                    content = str(await tool.ainvoke(call["args"]))
                except Exception as e:
                    logger.error("tool_failed", tool=name, error=str(e))
                    content = f"search failed: {e}"

            logger.info("tool_result", tool=name, length=len(content))
            results.append(
                ToolMessage(
                    content=content,
                    tool_call_id=call.get("id") or f"call_{count}",
                    name=name,
                )
            )

        return {
            "messages": results,
            "tool_call_count": count,
            "tool_rounds": state["tool_rounds"] + 1,
        }

    return tools_node


def should_call_tools(state: InvestigationState) -> str:
    """Route to 'tools' when the model asked for a tool and rounds remain, else 'end'."""
    last = state["messages"][-1]
    if not getattr(last, "tool_calls", None):
        return "end"
    if state["tool_rounds"] >= state["max_tool_rounds"]:
        logger.warning("tool_round_limit_reached", rounds=state["tool_rounds"])
        return "end"
    return "tools"


def bind_tools(model: BaseChatModel, tools: Sequence[BaseTool]) -> Any:
    """Expose ``tools`` to the model; a model without tools is used as-is."""
    if not tools:
        return model
    return model.bind_tools(list(tools))
