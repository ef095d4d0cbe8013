"""Markdown export of a transcript and routing of agent permission prompts."""

from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from .chatlog import ChatMessage, ChatMessageLog, PermissionState, Role

MAX_ARGS_PREVIEW_CHARS = 1500
_ARGS_TRUNCATION_MARK = "\n…(truncated)"


class PermissionOutcome(Enum):
    ALLOW = "allow"
    DENY = "deny"


Completion = Callable[[PermissionOutcome], None]


def default_export_name(now: datetime) -> str:
    """Suggested file name for a transcript saved at the given time."""
    return f"UAgent-{now:%Y%m%d-%H%M%S}.md"


def export_markdown(messages: Iterable[ChatMessage], now: datetime) -> str:
    """Render the transcript as a Markdown document. Permission rows are left out."""
    parts = [f"# UAgent — chat export\n\n_{now:%Y.%m.%d-%H.%M.%S}_\n\n"]
    for message in messages:
        role = message.role
        if role is Role.USER:
            parts.append("## You\n\n")
            if message.contexts:
                parts.append("**Context:**\n\n")
                for asset in message.contexts:
                    parts.append(f"- `{asset.asset_name}` (`{asset.package_name}`)\n")
                parts.append("\n")
            parts.append(message.text + "\n\n")
        elif role is Role.AGENT:
            parts.append("## Agent\n\n" + message.text + "\n\n")
        elif role is Role.TOOL:
            title = message.tool_call_title or "(untitled)"
            parts.append(f"### Tool: {title} _({message.tool_call_status})_\n\n")
            if message.text:
                parts.append("```\n" + message.text)
                if not message.text.endswith("\n"):
                    parts.append("\n")
                parts.append("```\n\n")
        elif role is Role.SYSTEM:
            parts.append("> _system:_ " + message.text + "\n\n")
    return "".join(parts)


def format_args_preview(raw_tool_call: Optional[Any]) -> str:
    """Indented JSON of a tool call's arguments, cut short when very long."""
    if raw_tool_call is None:
        return ""
    preview = json.dumps(raw_tool_call, indent="\t", ensure_ascii=False)
    if len(preview) > MAX_ARGS_PREVIEW_CHARS:
        preview = preview[:MAX_ARGS_PREVIEW_CHARS] + _ARGS_TRUNCATION_MARK
    return preview


class PermissionRouter:
    """Turns agent permission requests into log rows and answers them on decision."""

    def __init__(self, log: ChatMessageLog) -> None:
        self._log = log
        self._pending: dict[str, Completion] = {}

    @property
    def pending(self) -> frozenset[str]:
        """Ids of permission rows still awaiting a decision."""
        return frozenset(self._pending)

    def request(
        self,
        tool_title: str,
        tool_kind: str,
        raw_tool_call: Optional[Any],
        complete: Completion,
    ) -> str:
        """Show a permission row and remember the callback; returns the row id."""
        title = tool_title or "(unnamed tool)"
        permission_id = self._log.append_permission(
            title, tool_kind, format_args_preview(raw_tool_call)
        )
        self._pending[permission_id] = complete
        return permission_id

    def decide(self, permission_id: str, allow: bool) -> bool:
        """Resolve a pending row. Returns False when the id is not pending."""
        complete = self._pending.pop(permission_id, None)
        if complete is None:
            return False
        self._log.set_permission_state(
            permission_id, PermissionState.ALLOWED if allow else PermissionState.DENIED
        )
        complete(PermissionOutcome.ALLOW if allow else PermissionOutcome.DENY)
        return True

    def deny_all(self) -> None:
        """Deny every request still waiting, so the agent is never left hanging."""
        pending, self._pending = self._pending, {}
        for complete in pending.values():
            complete(PermissionOutcome.DENY)