"""Prompts for the Graylog alert investigator.

The system prompt fixes the persona, the one tool and the report layout.
``build_user_prompt`` turns an alert payload into the investigation brief,
including a ready-to-run tool call for every backlog entry.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from pydantic import BaseModel

from graylog_relay.core.models import AlertPayload

SEARCH_TOOL_NAME = "search_graylog_logs"

# Event fields worth querying on, in the order they are presented
PRIORITY_FIELDS = ("RequestId", "MsgId", "Code", "Account", "Layer", "Class", "Method")
FALLBACK_FIELD_LIMIT = 10

EVENT_MESSAGE_LIMIT = 100
BACKLOG_MESSAGE_LIMIT = 200
RAW_ENTRY_LIMIT = 500

SYSTEM_PROMPT = """\
# Role: Senior Log Investigator

You are not a traditional AI analyst. Your job is to **solve the case**. When an
alert arrives your first reaction must be to gather evidence, not to give a
conclusion.

## The only tool: search_graylog_logs
Use `search_graylog_logs(queryString, timeRangeSeconds, limit)` to find the truth.
- **queryString**: Elasticsearch syntax, e.g. `RequestId:"0HNI1U..."` or `MsgId:"f49c2..."`.
- **timeRangeSeconds**: defaults to 60 seconds; use 900 (15 minutes) to look at trends.
- **limit**: defaults to 10.

## Investigator rules (absolute priority)
1. **No blind guessing**: never say "this is probably caused by ..." before you have
   called the tool and read the returned logs. Never assert a root cause without
   first calling the tool.
2. **Tool first**: whenever you see a RequestId, MsgId, Code or Account, query it
   immediately.
3. **Reject partial information**: even when the alert already contains some log
   lines, query the tool for the request's complete trace.
4. **Follow it through**: when an anomaly spans the frontend (FrontendLayer) and the
   backend (BackendApi), join them with MsgId.

## Strategy and query guide

### 1. Locate and trace
- **Single hop**: query `RequestId` to see every action of that request in one Layer.
- **Cross layer**: query `MsgId` to join the frontend request with backend API handling.
- **Same kind**: query `Code` over the last 15 minutes to see how often the error occurs.

### 2. Layer traits
- **Frontend (FrontendLayer)**: look at the logic between `=== Login Request START ===` and `END`.
- **Backend (BackendApi)**: focus on responses whose `Code` is not 000000.

## Report format (mandatory)
Your final answer must contain exactly these sections:

### Investigation summary
- Anomalies investigated: X
- Tool calls made: Y
- Key finding: (one sentence)

### Investigation (one block per anomaly)
#### Anomaly #[N]: [description]
- **Step 1**: ran `[query]` -> found [specific key log line]
- **Step 2**: (if needed) ran `[query]` -> traced to [break point / cause]
- **Break point**: [Layer] > [Class] > [Method] @ [exact timestamp]
- **Cause**: according to log `[quoted content]` the anomaly was caused by `[cause]`.

### Conclusion
- [systemic or isolated problem]
- [impact assessment]

### Recommended actions
- **Immediate fix**: [steps]
- **Long term**: [monitoring / code improvements]

### Completeness checklist
- [ ] Called the tool
- [ ] Traced the complete request chain
- [ ] Conclusion is based on evidence, not speculation
"""


def truncate(text: Any, limit: int) -> str:
    """Cut ``text`` to ``limit`` characters, appending ``...`` when cut."""
    text = "" if text is None else str(text)
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def suggest_tool_call(query_string: str, time_range_seconds: int, limit: int) -> str:
    return f"{SEARCH_TOOL_NAME}('{query_string}', {time_range_seconds}, {limit})"


def normalize_entry(entry: Any) -> Optional[dict[str, Any]]:
    """Flatten a backlog entry into a field mapping, or ``None`` if it isn't one.

    Entries arrive as dicts, JSON strings or pydantic models depending on how
    the payload was produced.
    """
    if isinstance(entry, BaseModel):
        entry = entry.model_dump()
    elif isinstance(entry, (str, bytes)):
        try:
            entry = json.loads(entry)
        except ValueError:
            return None
    if not isinstance(entry, dict):
        return None

    log = {str(k): v for k, v in entry.items() if k != "fields"}
    # Graylog message summaries carry custom fields in a nested "fields" object
    nested = entry.get("fields")
    if isinstance(nested, dict):
        for key, value in nested.items():
            log.setdefault(str(key), value)
    elif "fields" in entry:
        log["fields"] = nested
    return log


def render_raw_entry(entry: Any) -> str:
    try:
        raw = json.dumps(entry, indent=2, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        raw = repr(entry)
    return truncate(raw, RAW_ENTRY_LIMIT)


def _entry_suggestion(log: dict[str, Any]) -> Optional[str]:
    request_id = log.get("RequestId")
    msg_id = log.get("MsgId")
    if request_id and msg_id:
        return (
            suggest_tool_call(f'RequestId:"{request_id}"', 60, 20)
            + " or "
            + suggest_tool_call(f'MsgId:"{msg_id}"', 60, 20)
        )
    if request_id:
        return suggest_tool_call(f'RequestId:"{request_id}"', 60, 20)
    if msg_id:
        return suggest_tool_call(f'MsgId:"{msg_id}"', 60, 20)
    if log.get("Code") is not None:
        return suggest_tool_call(f'Code:"{log["Code"]}"', 900, 50)
    return None


def _render_backlog_entry(lines: list[str], index: int, entry: Any) -> None:
    lines.append(f"### Anomaly #{index}")

    log = normalize_entry(entry)
    if log is None:
        lines.append("```json")
        lines.append(render_raw_entry(entry))
        lines.append("```")
        lines.append("")
        return

    if "timestamp" in log:
        lines.append(f"- Time: `{log['timestamp']}`")
    if log.get("RequestId"):
        lines.append(f"- RequestId: `{log['RequestId']}` <- **query this for the full trace!**")
    if log.get("MsgId"):
        lines.append(f"- MsgId: `{log['MsgId']}` <- **use this to join frontend and backend!**")
    for key in ("Code", "Msg", "Layer", "Class", "Method", "Account"):
        if key in log:
            lines.append(f"- {key}: `{log[key]}`")
    if "message" in log:
        lines.append(f"- Message: `{truncate(log['message'], BACKLOG_MESSAGE_LIMIT)}`")
    lines.append("")

    suggestion = _entry_suggestion(log)
    if suggestion:
        lines.append(f"Investigate with: `{suggestion}`")
    lines.append("")


def build_user_prompt(alert: AlertPayload) -> str:
    """Build the investigation brief for one alert."""
    lines: list[str] = [
        "# Urgent investigation",
        "",
        "## Example: using the tool correctly",
        "",
        "```",
        "Correct:",
        '1. You see RequestId: "0HNI1U3PLH2D9:00000004"',
        "2. Immediately run: " + suggest_tool_call('RequestId:"0HNI1U3PLH2D9:00000004"', 60, 20),
        "3. Analyze the results",
        "4. If a MsgId shows up, run: " + suggest_tool_call('MsgId:"xxx"', 60, 20),
        "",
        "Wrong:",
        "1. Read the message",
        '2. Say "this is a wrong password problem..." <- forbidden!',
        "```",
        "",
        "**You are an investigator, not an analyst.** Your first step is to call "
        f"{SEARCH_TOOL_NAME}. The information below is only a set of leads; use the "
        "tool to fetch the complete evidence from Graylog.",
        "",
        "---",
        "",
        "## Alert title",
        f"**{alert.title}**",
        "",
    ]

    if alert.event_definition_description:
        lines += ["## Alert description", alert.event_definition_description, ""]

    event = alert.event
    if event is not None:
        if event.fields:
            lines += ["## Key trace fields (query these first!)", ""]
            present = [name for name in PRIORITY_FIELDS if name in event.fields]
            if present:
                for name in present:
                    lines.append(f"- **{name}**: `{event.fields[name]}` <- query this!")
            else:
                for name, value in list(event.fields.items())[:FALLBACK_FIELD_LIMIT]:
                    lines.append(f"- {name}: `{value}`")
            lines.append("")

        timestamp = event.timestamp.strftime("%Y-%m-%d %H:%M:%S") if event.timestamp else ""
        lines += [
            "## Event details",
            f"- Event ID: {event.id or ''}",
            f"- Source: {event.source or ''}",
            f"- Priority: {event.priority if event.priority is not None else ''}",
            f"- Time: {timestamp}",
            f"- Message excerpt: {truncate(event.message, EVENT_MESSAGE_LIMIT)}",
            "",
        ]

    if alert.backlog:
        count = len(alert.backlog)
        lines += [
            f"## Log messages that triggered this alert ({count})",
            "",
            f"You must investigate **every one** of these with {SEARCH_TOOL_NAME}:",
            "",
        ]
        for index, entry in enumerate(alert.backlog, start=1):
            _render_backlog_entry(lines, index, entry)
        lines += [
            "---",
            "",
            "**Important**:",
            f"- Investigate each of the **{count} anomalies** above individually with the tool before concluding",
            "- Do not conclude from these excerpts alone; query the surrounding logs",
            "- Use RequestId or MsgId to trace each anomaly's complete request chain",
            "",
        ]

    lines += [
        "---",
        "",
        "## Your task, in order",
        "",
        "1. Run a first query with the **RequestId** or **MsgId** above.",
        "2. Find where the request broke in the results.",
        "3. Verify with a second query on **MsgId** or **Code**.",
        "4. Repeat steps 1-3 for every anomaly.",
        "5. Write the report in the required format.",
        "",
        "## Start now",
        "",
        f'Do not reply "understood" or "okay". Start calling {SEARCH_TOOL_NAME} right away '
        "and finish with the recommended actions.",
    ]

    return "\n".join(lines)
