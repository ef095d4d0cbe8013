from agentchat.chatlog import (
    ChatMessage,
    ChatMessageLog,
    PermissionState,
    Role,
    SessionUpdate,
    SessionUpdateKind,
)
from agentchat.rows import (
    MessageListView,
    body_is_markdown,
    border_color,
    permission_outcome,
    permission_title,
    row_label,
    status_icon,
)
from agentchat.transcript import PermissionOutcome, PermissionRouter


def test_border_color_user():
    assert border_color(Role.USER) == (0.12, 0.22, 0.40, 1.0)


def test_border_colors_distinct_per_role():
    colors = {border_color(role) for role in Role}
    assert len(colors) == len(list(Role))


def test_row_label_plain_roles():
    assert row_label(ChatMessage(Role.USER)) == "you"
    assert row_label(ChatMessage(Role.AGENT)) == "agent"
    assert row_label(ChatMessage(Role.SYSTEM)) == "system"


def test_row_label_tool_prefers_title_then_id():
    titled = ChatMessage(Role.TOOL, tool_call_id="c1", tool_call_title="Read file")
    untitled = ChatMessage(Role.TOOL, tool_call_id="c1")
    assert row_label(titled) == "tool · Read file"
    assert row_label(untitled) == "tool · c1"


def test_status_icon():
    assert status_icon("completed") == "Icons.SuccessWithColor"
    assert status_icon("failed") == "Icons.ErrorWithColor"
    assert status_icon("pending") == "Icons.Warning"
    assert status_icon("in_progress") == "Icons.Warning"


def test_permission_title_and_outcome():
    msg = ChatMessage(Role.PERMISSION)
    assert permission_title(msg) == "(unknown tool)"
    msg.tool_call_title = "Edit"
    assert permission_title(msg) == "Edit"
    assert permission_outcome(msg) == ""
    msg.permission_state = PermissionState.ALLOWED
    assert permission_outcome(msg) == "✓ Allowed by user"
    msg.permission_state = PermissionState.DENIED
    assert permission_outcome(msg) == "✗ Cancelled by user"


def test_body_is_markdown_only_after_turn_ends():
    log = ChatMessageLog()
    log.append_agent_chunk("**hi**")
    assert body_is_markdown(log.messages[0]) is False
    log.end_agent_turn()
    assert body_is_markdown(log.messages[0]) is True
    log.append_system("note")
    assert body_is_markdown(log.messages[1]) is False


def test_toggle_tool():
    refreshes = []
    view = MessageListView(ChatMessageLog(), request_refresh=lambda: refreshes.append(1))
    assert view.is_tool_expanded("t") is False
    assert view.toggle_tool("t") is True
    assert view.is_tool_expanded("t") is True
    assert view.toggle_tool("t") is False
    assert len(refreshes) == 2


def test_change_schedules_catchup_frames():
    scrolls = []
    log = ChatMessageLog()
    view = MessageListView(log, scroll_to_bottom=lambda: scrolls.append(1))
    assert view.tick() is False
    log.append_system("hello")
    assert view.timer_active is True
    results = []
    while view.timer_active:
        results.append(view.tick())
    assert results[-1] is False
    assert all(results[:-1])
    assert len(scrolls) == len(results)


def test_unpinned_view_does_not_schedule():
    scrolls = []
    log = ChatMessageLog()
    view = MessageListView(log, scroll_to_bottom=lambda: scrolls.append(1))
    view.on_scrolled(0.5)
    assert view.pin_to_bottom is False
    log.append_system("hello")
    assert view.timer_active is False
    assert scrolls == []
    view.on_scrolled(0.0)
    assert view.pin_to_bottom is True


def test_reset_clears_expanded_state():
    log = ChatMessageLog()
    view = MessageListView(log)
    log.append_tool(SessionUpdate(SessionUpdateKind.TOOL_CALL, tool_call_id="x"))
    view.toggle_tool("x")
    log.reset()
    assert view.is_tool_expanded("x") is False


def test_agent_turn_end_rebuilds():
    rebuilds = []
    log = ChatMessageLog()
    MessageListView(log, rebuild=lambda: rebuilds.append(1))
    log.append_agent_chunk("a")
    assert rebuilds == []
    log.end_agent_turn()
    assert rebuilds == [1]


def test_decide_routes_to_permission_router():
    log = ChatMessageLog()
    router = PermissionRouter(log)
    outcomes = []
    view = MessageListView(log, on_permission_decided=router.decide)
    pid = router.request("Edit", "edit", {"path": "a"}, outcomes.append)
    assert view.decide(pid, True) is True
    assert outcomes == [PermissionOutcome.ALLOW]
    assert log.messages[0].permission_state is PermissionState.ALLOWED


def test_decide_without_listener():
    view = MessageListView(ChatMessageLog())
    assert view.decide("id", False) is False