"""The chat window's controller: ties the agent client, transcript and input together."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Protocol, Sequence

from .chatlog import ChatMessageLog, Color, SessionUpdate
from .composer import ChatComposer
from .context import AssetContextBuilderRegistry, AssetData, ContentBlock
from .launch import ClientState, resolve_launch, status_text
from .settings import AgentSettings, UserPreferences
from .transcript import Completion, PermissionRouter, export_markdown

ERROR_TINT: Color = (1.0, 0.5, 0.5, 1.0)
SUCCESS_TINT: Color = (0.5, 0.8, 0.5, 1.0)

MISSING_COMMAND_MESSAGE = "Set Agent Command in Project Settings → Plugins → UAgent."
NOT_READY_MESSAGE = "Cannot send — client not ready."
_MODEL_CATEGORY = "model"


class _Client(Protocol):
    """What the session needs from an agent client."""

    state: ClientState
    session_id: str
    last_error: str
    config_options: Sequence[Any]

    def start(self, command: str, args: list[str], cwd: str) -> None: ...

    def set_mcp_server_url(self, url: str) -> None: ...

    def send_prompt(self, blocks: list[ContentBlock]) -> bool: ...

    def set_config_option(self, config_id: str, value: str) -> None: ...

    def cancel_prompt(self) -> None: ...

    def stop(self) -> None: ...


def _choice_label(choice: Any) -> str:
    return choice.name or choice.value


class ChatSession:
    """Drives one chat: starts the agent, sends prompts and records what comes back.

    Config options reported by the client are objects with ``id``, ``category``,
    ``current_value`` and ``options``; each option choice has ``name`` and ``value``.
    """

    def __init__(
        self,
        client: _Client,
        settings: Optional[AgentSettings] = None,
        preferences: Optional[UserPreferences] = None,
        registry: Optional[AssetContextBuilderRegistry] = None,
        project_dir: str | os.PathLike[str] = ".",
        file_exists: Callable[[str], bool] = os.path.isfile,
        windows: Optional[bool] = None,
    ) -> None:
        self.client = client
        self.settings = settings if settings is not None else AgentSettings()
        self.preferences = preferences if preferences is not None else UserPreferences()
        self.project_dir = project_dir
        self.registry = (
            registry if registry is not None else AssetContextBuilderRegistry(project_dir)
        )
        self._file_exists = file_exists
        self._windows = windows
        self.log = ChatMessageLog()
        self.composer = ChatComposer()
        self.permissions = PermissionRouter(self.log)

    # Status

    def status(self) -> str:
        """Header status line for the current client state."""
        return status_text(self.client.state, self.client.session_id, self.client.last_error)

    def can_send(self, text: str) -> bool:
        return self.client.state is ClientState.READY and bool(text)

    # Session control

    def start(self) -> bool:
        """Start a fresh session. Returns False when no agent command is configured."""
        # Outstanding prompts are denied before the log they point into is cleared.
        self.permissions.deny_all()
        self.log.reset()
        if not self.settings.agent_command:
            self.log.append_system(MISSING_COMMAND_MESSAGE, ERROR_TINT)
            return False
        spec = resolve_launch(self.settings, self._file_exists, self._windows)
        self.client.set_mcp_server_url(spec.mcp_url)
        self.client.start(spec.command, list(spec.args), os.path.abspath(self.project_dir))
        return True

    def close(self) -> None:
        """Deny anything still pending and stop the client."""
        self.permissions.deny_all()
        self.client.stop()

    def cancel(self) -> bool:
        """Cancel a running prompt. Returns False when none is running."""
        if self.client.state is not ClientState.PROMPTING:
            return False
        self.client.cancel_prompt()
        return True

    # Sending

    def send(self, text: str, open_assets: Iterable[AssetData] = ()) -> bool:
        """Send text with its context. Returns False when nothing was sent."""
        if not self.can_send(text):
            return False
        user_text = text.strip()
        if not user_text:
            return False
        open_assets = list(open_assets)

        blocks = self.composer.build_context_blocks(self.registry, open_assets, self.settings)
        blocks.append(ContentBlock.text_block(user_text))

        self.log.append_user(user_text, self.composer.visible_contexts(open_assets))
        self.composer.clear()

        if not self.client.send_prompt(blocks):
            self.log.append_system(NOT_READY_MESSAGE, ERROR_TINT)
        return True

    # Client events

    def on_state_changed(self, state: ClientState) -> None:
        if state is ClientState.ERROR:
            self.log.append_system(f"Error: {self.client.last_error}", ERROR_TINT)
            return
        if state is ClientState.READY:
            self.apply_saved_model()

    def on_session_update(self, update: SessionUpdate) -> None:
        self.log.apply_session_update(update)

    def on_prompt_done(self, error: str = "") -> None:
        self.log.end_agent_turn()
        if error:
            self.log.append_system(f"Prompt failed: {error}", ERROR_TINT)

    def on_client_error(self, message: str) -> None:
        self.log.append_system(message, ERROR_TINT)

    def on_permission_requested(
        self,
        tool_title: str,
        tool_kind: str,
        raw_tool_call: Optional[Any],
        complete: Completion,
    ) -> str:
        """Show an agent permission request; returns the row id."""
        return self.permissions.request(tool_title, tool_kind, raw_tool_call, complete)

    # Model selection

    def _model_options(self) -> list[Any]:
        return [opt for opt in self.client.config_options if opt.category == _MODEL_CATEGORY]

    def model_choices(self) -> list[tuple[str, list[tuple[str, str]], str]]:
        """One entry per advertised model option.

        Each is ``(config_id, [(label, value), ...], current_label)``; options
        without choices are left out.
        """
        dropdowns = []
        for opt in self._model_options():
            choices = [(_choice_label(c), c.value) for c in opt.options]
            if not choices:
                continue
            current = next(
                (label for label, value in choices if value == opt.current_value),
                opt.current_value,
            )
            dropdowns.append((opt.id, choices, current))
        return dropdowns

    def select_model(self, label: str) -> bool:
        """Pick a model by its label, remember it and tell the agent."""
        for config_id, choices, _current in self.model_choices():
            for choice_label, value in choices:
                if choice_label == label:
                    self.preferences.save_model(value)
                    self.client.set_config_option(config_id, value)
                    return True
        return False

    def apply_saved_model(self) -> bool:
        """Push the saved model preference to the agent if it offers it."""
        saved = self.preferences.load_model()
        if not saved:
            return False
        for opt in self._model_options():
            if opt.current_value == saved:
                return False
            if any(c.value == saved for c in opt.options):
                self.client.set_config_option(opt.id, saved)
                return True
            return False
        return False

    # Export

    def export(self, path: str | os.PathLike[str], now: Optional[datetime] = None) -> Optional[Path]:
        """Save the transcript as Markdown. Returns the written path, or None."""
        if len(self.log) == 0:
            return None
        if now is None:
            now = datetime.now()
        out = Path(path)
        if not out.suffix:
            out = out.with_name(out.name + ".md")
        document = export_markdown(self.log.messages, now)
        try:
            out.write_text(document, encoding="utf-8")
        except OSError:
            self.log.append_system(f"Export failed: could not write {out}", ERROR_TINT)
            return None
        self.log.append_system(f"Exported transcript to {out}", SUCCESS_TINT)
        return out