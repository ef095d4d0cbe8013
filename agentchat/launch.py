"""Working out how to start the agent, and describing the client's state."""

from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from .settings import AgentSettings


class ClientState(Enum):
    DISCONNECTED = "disconnected"
    STARTING = "starting"
    INITIALIZING = "initializing"
    CREATING_SESSION = "creating_session"
    READY = "ready"
    PROMPTING = "prompting"
    ERROR = "error"


@dataclass(frozen=True)
class LaunchSpec:
    """Command line for the agent process plus the MCP URL to hand it."""

    command: str
    args: list[str] = field(default_factory=list)
    mcp_url: str = ""


_SHIM_SUFFIXES = (".cmd", ".bat", ".exe")


def _extension(path: str) -> str:
    name = re.split(r"[\\/]", path)[-1]
    if "." not in name:
        return ""
    return name.rpartition(".")[2].lower()


def resolve_launch(
    settings: AgentSettings,
    file_exists: Callable[[str], bool] = os.path.isfile,
    windows: Optional[bool] = None,
) -> LaunchSpec:
    """Turn the configured agent command into a launchable command line.

    Raises ValueError when no agent command is configured.
    """
    if not settings.agent_command:
        raise ValueError("no agent command configured")
    if windows is None:
        windows = sys.platform == "win32"

    resolved = settings.agent_command
    ext = _extension(resolved)

    # An extensionless npm shim cannot be started directly on Windows; its
    # native sibling can.
    if windows and not ext:
        for suffix in _SHIM_SUFFIXES:
            candidate = resolved + suffix
            if file_exists(candidate):
                resolved = candidate
                ext = suffix[1:]
                break

    if ext in ("cmd", "bat"):
        command, args = "cmd.exe", ["/c", resolved]
    elif ext == "js":
        command, args = "node", [resolved]
    else:
        command, args = resolved, []
    args.extend(settings.agent_args)
    return LaunchSpec(command, args, settings.mcp_url())


_STATUS = {
    ClientState.DISCONNECTED: "disconnected",
    ClientState.STARTING: "starting agent…",
    ClientState.INITIALIZING: "initializing…",
    ClientState.CREATING_SESSION: "creating session…",
    ClientState.PROMPTING: "thinking…",
}


def status_text(
    state: Optional[ClientState], session_id: str = "", last_error: str = ""
) -> str:
    """One-line status shown in the chat header."""
    if state is None:
        return "no client"
    if state is ClientState.READY:
        return f"ready · {session_id[:12]}"
    if state is ClientState.ERROR:
        return f"error · {last_error}"
    return _STATUS[state]