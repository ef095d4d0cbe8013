"""Project settings for the agent chat and per-user preferences."""

from __future__ import annotations

import configparser
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

_PREFS_SECTION = "UAgent"
_MODE_KEY = "PermissionMode"
_MODEL_KEY = "Model"


class PermissionMode(Enum):
    """How permission requests from the agent are answered."""

    READ_ONLY = "ReadOnly"
    DEFAULT = "Default"
    FULL_ACCESS = "FullAccess"

    def label(self) -> str:
        """Human-readable name shown in the mode dropdown."""
        return _MODE_LABELS[self]

    @classmethod
    def from_label(cls, label: str) -> PermissionMode:
        """Map a dropdown label back to a mode; unknown labels mean full access."""
        for mode, text in _MODE_LABELS.items():
            if text == label:
                return mode
        return cls.FULL_ACCESS


_MODE_LABELS = {
    PermissionMode.READ_ONLY: "Read Only",
    PermissionMode.DEFAULT: "Default",
    PermissionMode.FULL_ACCESS: "Full Access",
}


def _check_range(name: str, value: int, low: int, high: int) -> None:
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")


@dataclass
class AgentSettings:
    """Shared project configuration for launching and talking to the agent."""

    agent_command: str = ""
    agent_args: list[str] = field(default_factory=list)
    auto_include_open_assets: bool = True
    max_blueprint_summary_chars: int = 8000
    request_timeout_seconds: int = 300
    enable_mcp_server: bool = True
    mcp_server_port: int = 47777

    def __post_init__(self) -> None:
        _check_range(
            "max_blueprint_summary_chars", self.max_blueprint_summary_chars, 512, 100000
        )
        _check_range("request_timeout_seconds", self.request_timeout_seconds, 0, 3600)
        _check_range("mcp_server_port", self.mcp_server_port, 1024, 65535)

    def mcp_url(self) -> str:
        """Loopback URL of the MCP server, or an empty string when it is disabled."""
        if not self.enable_mcp_server:
            return ""
        return f"http://127.0.0.1:{self.mcp_server_port}/mcp"


class UserPreferences:
    """Per-user choices (permission mode, preferred model) kept in an INI file.

    Without a path the preferences live in memory only.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._memory = configparser.ConfigParser()
        self._memory.optionxform = str  # keep key case

    def _read(self) -> configparser.ConfigParser:
        if self._path is None:
            return self._memory
        parser = configparser.ConfigParser()
        parser.optionxform = str
        if self._path.is_file():
            parser.read(self._path, encoding="utf-8")
        return parser

    def _write(self, key: str, value: str) -> None:
        parser = self._read()
        if not parser.has_section(_PREFS_SECTION):
            parser.add_section(_PREFS_SECTION)
        parser.set(_PREFS_SECTION, key, value)
        if self._path is None:
            self._memory = parser
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("w", encoding="utf-8") as handle:
            parser.write(handle)

    def load_permission_mode(self) -> PermissionMode:
        """Saved permission mode; full access when nothing valid is stored."""
        raw = self._read().get(_PREFS_SECTION, _MODE_KEY, fallback="")
        try:
            return PermissionMode(raw)
        except ValueError:
            return PermissionMode.FULL_ACCESS

    def save_permission_mode(self, mode: PermissionMode) -> None:
        self._write(_MODE_KEY, mode.value)

    def load_model(self) -> str:
        """Saved model value, or an empty string when none was picked."""
        return self._read().get(_PREFS_SECTION, _MODEL_KEY, fallback="")

    def save_model(self, value: str) -> None:
        self._write(_MODEL_KEY, value)