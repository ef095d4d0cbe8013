"""Presentation logic for the chat message list: row styling and scroll pinning."""

from __future__ import annotations

from typing import Callable, Optional

from .chatlog import ChatMessage, ChatMessageLog, Color, PermissionState, Role

PERMISSION_BORDER: Color = (0.30, 0.20, 0.05, 1.0)
ALLOWED_COLOR: Color = (0.5, 0.85, 0.5, 1.0)
DENIED_COLOR: Color = (0.9, 0.6, 0.4, 1.0)

_BORDER_COLORS: dict[Role, Color] = {
    Role.USER: (0.12, 0.22, 0.40, 1.0),
    Role.AGENT: (0.10, 0.10, 0.13, 1.0),
    Role.TOOL: (0.20, 0.14, 0.04, 1.0),
    Role.SYSTEM: (0.30, 0.10, 0.10, 1.0),
    Role.PERMISSION: PERMISSION_BORDER,
}

_LABELS = {
    Role.USER: "you",
    Role.AGENT: "agent",
    Role.SYSTEM: "system",
    Role.PERMISSION: "permission requested",
}

_PIN_THRESHOLD = 0.001
_CATCHUP_FRAMES = 4


def border_color(role: Role) -> Color:
    """Background tint of a row's border for the given role."""
    return _BORDER_COLORS[role]


def row_label(message: ChatMessage) -> str:
    """Header label of a row."""
    if message.role is Role.TOOL:
        return f"tool · {message.tool_call_title or message.tool_call_id}"
    return _LABELS[message.role]


def status_icon(status: str) -> str:
    """Name of the icon shown for a tool call's status."""
    if status == "completed":
        return "Icons.SuccessWithColor"
    if status == "failed":
        return "Icons.ErrorWithColor"
    return "Icons.Warning"


def permission_title(message: ChatMessage) -> str:
    """Tool title shown on a permission card."""
    return message.tool_call_title or "(unknown tool)"


def permission_outcome(message: ChatMessage) -> str:
    """Resolution line of a permission card; empty while it is pending."""
    if message.permission_state is PermissionState.ALLOWED:
        return "✓ Allowed by user"
    if message.permission_state is PermissionState.DENIED:
        return "✗ Cancelled by user"
    return ""


def body_is_markdown(message: ChatMessage) -> bool:
    """Only settled agent replies are rendered as parsed Markdown."""
    return message.role is Role.AGENT and message.turn_complete


def _noop() -> None:
    pass


class MessageListView:
    """View state over a ChatMessageLog.

    Keeps which tool rows are expanded and pins the list to the bottom while
    the user stays there. After every change the scroll to the bottom is
    repeated for a few ticks, since freshly built rows settle their height late.
    """

    def __init__(
        self,
        log: ChatMessageLog,
        on_permission_decided: Optional[Callable[[str, bool], None]] = None,
        scroll_to_bottom: Callable[[], None] = _noop,
        request_refresh: Callable[[], None] = _noop,
        rebuild: Callable[[], None] = _noop,
    ) -> None:
        self._log = log
        self._on_permission_decided = on_permission_decided
        self._scroll_to_bottom = scroll_to_bottom
        self._request_refresh = request_refresh
        self._rebuild = rebuild
        self._expanded: dict[str, bool] = {}
        self.pin_to_bottom = True
        self._frames_left = 0
        self._timer_active = False
        log.on_changed.connect(self._handle_log_changed)
        log.on_agent_turn_ended.connect(self._handle_agent_turn_ended)

    @property
    def timer_active(self) -> bool:
        """Whether scroll catch-up ticks are still scheduled."""
        return self._timer_active

    def is_tool_expanded(self, tool_call_id: str) -> bool:
        return self._expanded.get(tool_call_id, False)

    def toggle_tool(self, tool_call_id: str) -> bool:
        """Flip a tool row between collapsed and expanded; returns the new state."""
        expanded = not self._expanded.get(tool_call_id, False)
        self._expanded[tool_call_id] = expanded
        self._request_refresh()
        return expanded

    def on_scrolled(self, remaining: float) -> None:
        """Record the normalised distance left to the bottom (0 means at the bottom)."""
        self.pin_to_bottom = remaining <= _PIN_THRESHOLD

    def tick(self) -> bool:
        """Run one catch-up frame. Returns True while more frames are due."""
        if not self._timer_active:
            return False
        if self.pin_to_bottom:
            self._scroll_to_bottom()
        self._frames_left -= 1
        if self._frames_left <= 0:
            self._timer_active = False
            return False
        return True

    def decide(self, permission_id: str, allow: bool) -> bool:
        """Forward an Accept/Cancel click. Returns False when nobody listens."""
        if self._on_permission_decided is None:
            return False
        self._on_permission_decided(permission_id, allow)
        return True

    def _schedule_catchup(self) -> None:
        if not self.pin_to_bottom:
            return
        self._frames_left = _CATCHUP_FRAMES
        self._timer_active = True

    def _handle_log_changed(self) -> None:
        empty = len(self._log) == 0
        if empty:
            self._expanded.clear()
        self._request_refresh()
        if not empty:
            self._schedule_catchup()

    def _handle_agent_turn_ended(self) -> None:
        self._rebuild()
        self._schedule_catchup()