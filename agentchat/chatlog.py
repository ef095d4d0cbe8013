"""The chat transcript model: an append-only list of messages plus change events."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from .context import AssetData, ContentBlock, ContentKind

Color = tuple[float, float, float, float]
WHITE: Color = (1.0, 1.0, 1.0, 1.0)


class Role(Enum):
    USER = "user"
    AGENT = "agent"
    TOOL = "tool"
    SYSTEM = "system"
    PERMISSION = "permission"


class PermissionState(Enum):
    """Pending while the prompt awaits an answer; Allowed and Denied are final."""

    PENDING = "pending"
    ALLOWED = "allowed"
    DENIED = "denied"


@dataclass
class ChatMessage:
    """One entry in the chat transcript.

    Agent messages stay incomplete while their turn is streaming; every other
    role starts complete.
    """

    role: Role = Role.USER
    text: str = ""
    contexts: list[AssetData] = field(default_factory=list)
    tool_call_id: str = ""
    tool_call_title: str = ""
    tool_call_status: str = "pending"
    tint: Color = WHITE
    permission_id: str = ""
    permission_tool_kind: str = ""
    permission_args_preview: str = ""
    permission_state: PermissionState = PermissionState.PENDING
    turn_complete: bool = True


class SessionUpdateKind(Enum):
    AGENT_MESSAGE_CHUNK = "agent_message_chunk"
    AGENT_THOUGHT_CHUNK = "agent_thought_chunk"
    TOOL_CALL = "tool_call"
    TOOL_CALL_UPDATE = "tool_call_update"
    OTHER = "other"


@dataclass
class SessionUpdate:
    """An inbound update from the agent about the running session."""

    kind: SessionUpdateKind
    content: Optional[ContentBlock] = None
    tool_call_id: str = ""
    tool_call_title: str = ""
    tool_call_status: str = ""
    tool_call_content: list[ContentBlock] = field(default_factory=list)


class _Event:
    """A list of no-argument callbacks fired together."""

    def __init__(self) -> None:
        self._callbacks: list[Callable[[], None]] = []

    def connect(self, callback: Callable[[], None]) -> None:
        self._callbacks.append(callback)

    def disconnect(self, callback: Callable[[], None]) -> None:
        self._callbacks.remove(callback)

    def emit(self) -> None:
        for callback in list(self._callbacks):
            callback()


def _tool_body(blocks: list[ContentBlock], include_links: bool) -> str:
    body = ""
    for block in blocks:
        if body:
            body += "\n"
        if block.kind is ContentKind.TEXT:
            body += block.text
        elif block.kind is ContentKind.RESOURCE:
            body += block.resource_text
        elif block.kind is ContentKind.RESOURCE_LINK and include_links:
            body += f"→ {block.link_uri}"
    return body


class ChatMessageLog:
    """Transcript model with no UI dependency.

    Tracks the in-flight agent reply so chunks coalesce, and which message
    each tool call id belongs to so status updates land in place.
    """

    def __init__(self) -> None:
        self._messages: list[ChatMessage] = []
        self._current_agent: Optional[int] = None
        self._tool_index: dict[str, int] = {}
        self.on_changed = _Event()
        self.on_agent_turn_ended = _Event()

    @property
    def messages(self) -> list[ChatMessage]:
        return self._messages

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(self._messages)

    def _close_agent_turn(self) -> None:
        index = self._current_agent
        self._current_agent = None
        if index is not None and 0 <= index < len(self._messages):
            self._messages[index].turn_complete = True
            self.on_agent_turn_ended.emit()

    def append_user(self, text: str, contexts: list[AssetData]) -> None:
        """Add a user message; ends any in-flight agent turn."""
        self._close_agent_turn()
        self._messages.append(ChatMessage(Role.USER, text=text, contexts=list(contexts)))
        self.on_changed.emit()

    def append_agent_chunk(self, text: str) -> None:
        """Add agent text, joining the open agent message if there is one."""
        index = self._current_agent
        if (
            index is None
            or not 0 <= index < len(self._messages)
            or self._messages[index].role is not Role.AGENT
        ):
            self._messages.append(ChatMessage(Role.AGENT, text=text, turn_complete=False))
            self._current_agent = len(self._messages) - 1
        else:
            self._messages[index].text += text
        self.on_changed.emit()

    def append_tool(self, update: SessionUpdate) -> None:
        """Add a tool-call row; ends the agent turn."""
        self._close_agent_turn()
        message = ChatMessage(
            Role.TOOL,
            text=_tool_body(update.tool_call_content, include_links=True),
            tool_call_id=update.tool_call_id,
            tool_call_title=update.tool_call_title,
            tool_call_status=update.tool_call_status or "pending",
        )
        self._messages.append(message)
        self._tool_index[update.tool_call_id] = len(self._messages) - 1
        self.on_changed.emit()

    def update_tool(self, update: SessionUpdate) -> None:
        """Update a tool-call row in place, or add one if it was never seen."""
        index = self._tool_index.get(update.tool_call_id)
        if index is None or not 0 <= index < len(self._messages):
            self.append_tool(update)
            return
        message = self._messages[index]
        if update.tool_call_status:
            message.tool_call_status = update.tool_call_status
        if update.tool_call_title:
            message.tool_call_title = update.tool_call_title
        extra = _tool_body(update.tool_call_content, include_links=False)
        if extra:
            if message.text:
                message.text += "\n"
            message.text += extra
        self.on_changed.emit()

    def append_system(self, text: str, tint: Color = WHITE) -> None:
        """Add a status line; does not end the agent turn."""
        self._messages.append(ChatMessage(Role.SYSTEM, text=text, tint=tint))
        self.on_changed.emit()

    def append_permission(self, tool_title: str, tool_kind: str, args_preview: str) -> str:
        """Add a pending permission prompt and return its stable id."""
        self._close_agent_turn()
        message = ChatMessage(
            Role.PERMISSION,
            permission_id=str(uuid.uuid4()),
            tool_call_title=tool_title,
            permission_tool_kind=tool_kind,
            permission_args_preview=args_preview,
            permission_state=PermissionState.PENDING,
        )
        self._messages.append(message)
        self.on_changed.emit()
        return message.permission_id

    def set_permission_state(self, permission_id: str, state: PermissionState) -> None:
        """Set the state of the permission row with this id; unknown ids are ignored."""
        if not permission_id:
            return
        for message in self._messages:
            if message.role is Role.PERMISSION and message.permission_id == permission_id:
                message.permission_state = state
                self.on_changed.emit()
                return

    def apply_session_update(self, update: SessionUpdate) -> None:
        """Route an agent update to the matching append or update call."""
        kind = update.kind
        if kind in (SessionUpdateKind.AGENT_MESSAGE_CHUNK, SessionUpdateKind.AGENT_THOUGHT_CHUNK):
            if update.content is not None and update.content.kind is ContentKind.TEXT:
                self.append_agent_chunk(update.content.text)
        elif kind is SessionUpdateKind.TOOL_CALL:
            self.append_tool(update)
        elif kind is SessionUpdateKind.TOOL_CALL_UPDATE:
            self.update_tool(update)

    def end_agent_turn(self) -> None:
        """Mark the current agent reply done; the next chunk starts a new row."""
        self._close_agent_turn()

    def reset(self) -> None:
        """Drop all messages and markers."""
        self._messages.clear()
        self._tool_index.clear()
        self._current_agent = None
        self.on_changed.emit()