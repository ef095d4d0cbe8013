"""The chat input's context chips and @-mention handling."""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from .context import AssetContextBuilderRegistry, AssetData, ContentBlock
from .settings import AgentSettings

MAX_MENTION_RESULTS = 25
_SEARCH_ROOT = "/Game/"


def find_mention_tokens(text: str) -> set[str]:
    """Asset names of the complete ``@[Name]`` tokens in text.

    A token counts only at the start of the text or after whitespace.
    """
    names: set[str] = set()
    scan = 0
    while scan < len(text):
        at = text.find("@[", scan)
        if at == -1:
            break
        if at > 0 and not text[at - 1].isspace():
            scan = at + 1
            continue
        end = text.find("]", at + 2)
        if end == -1:
            break
        name = text[at + 2:end]
        if name:
            names.add(name)
        scan = end + 1
    return names


def find_mention_query(text: str) -> Optional[tuple[int, str]]:
    """Position of an open ``@query`` at the end of text and the query after it.

    Returns None when the last word does not start with a bare '@' or when it
    is a finished ``@[...]`` token.
    """
    for pos in range(len(text) - 1, -1, -1):
        ch = text[pos]
        if ch == "@":
            completed = pos + 1 < len(text) and text[pos + 1] == "["
            if not completed and (pos == 0 or text[pos - 1].isspace()):
                return pos, text[pos + 1:]
            return None
        if ch.isspace():
            return None
    return None


def filter_assets(
    assets: Iterable[AssetData], query: str, limit: int = MAX_MENTION_RESULTS
) -> list[AssetData]:
    """Assets whose name contains query, ignoring case; an empty query matches all."""
    needle = query.strip().lower()
    found: list[AssetData] = []
    for asset in assets:
        if len(found) >= limit:
            break
        if not needle or needle in asset.asset_name.lower():
            found.append(asset)
    return found


def _noop() -> None:
    pass


class ChatComposer:
    """State of the chat input: its text, attached context chips and mention popup.

    Chips added through an ``@[Name]`` token vanish when the token is removed
    from the text; chips added directly stay until removed.
    """

    def __init__(
        self,
        asset_source: Callable[[], Iterable[AssetData]] = list,
        on_chips_changed: Callable[[], None] = _noop,
    ) -> None:
        self._asset_source = asset_source
        self._on_chips_changed = on_chips_changed
        self.text = ""
        self._chips: dict[str, AssetData] = {}
        self._token_backed: set[str] = set()
        self._pending_at: Optional[int] = None
        self.results: list[AssetData] = []
        self.picker_open = False

    def _refresh_results(self, query: str) -> None:
        searchable = (
            asset
            for asset in self._asset_source()
            if asset.package_name.startswith(_SEARCH_ROOT)
        )
        self.results = filter_assets(searchable, query)

    def _close_picker(self) -> None:
        self.picker_open = False

    def add_chip(self, asset: AssetData) -> None:
        """Attach an asset as context."""
        self._chips[asset.package_name] = asset
        self._on_chips_changed()

    def remove_chip(self, asset: AssetData) -> None:
        """Detach an asset; unknown assets are ignored."""
        self._chips.pop(asset.package_name, None)
        self._token_backed.discard(asset.package_name)
        self._on_chips_changed()

    def on_text_changed(self, text: str) -> None:
        """Track new input text: drop chips whose token is gone and update the popup."""
        self.text = text

        if self._token_backed:
            mentioned = find_mention_tokens(text)
            changed = False
            for package in list(self._token_backed):
                chip = self._chips.get(package)
                if chip is None or chip.asset_name not in mentioned:
                    self._chips.pop(package, None)
                    self._token_backed.discard(package)
                    changed = True
            if changed:
                self._on_chips_changed()

        found = find_mention_query(text)
        if found is None:
            self._close_picker()
            self._pending_at = None
            return
        self._pending_at, query = found
        self._refresh_results(query)
        self.picker_open = True

    def pick_mention(self, asset: AssetData) -> None:
        """Attach a picked asset, replacing a typed ``@query`` with its token."""
        self.add_chip(asset)
        if self._pending_at is not None:
            current = self.text
            prefix = current[: self._pending_at] if self._pending_at < len(current) else current
            self.on_text_changed(f"{prefix}@[{asset.asset_name}] ")
            self._pending_at = None
            self._token_backed.add(asset.package_name)
        self._close_picker()

    def confirm_top_result(self) -> bool:
        """Pick the first search result. Returns False when there is none."""
        if not self.results:
            return False
        self.pick_mention(self.results[0])
        return True

    def manual_chips(self) -> list[AssetData]:
        """Attached assets in the order they were added."""
        return list(self._chips.values())

    def visible_contexts(self, open_assets: Iterable[AssetData]) -> list[AssetData]:
        """Chips followed by open assets, without duplicates."""
        contexts = self.manual_chips()
        for asset in open_assets:
            if asset not in contexts:
                contexts.append(asset)
        return contexts

    def build_context_blocks(
        self,
        registry: Optional[AssetContextBuilderRegistry],
        open_assets: Iterable[AssetData],
        settings: Optional[AgentSettings] = None,
    ) -> list[ContentBlock]:
        """One content block per distinct package: open assets first, then chips."""
        if registry is None:
            return []
        if settings is None:
            settings = AgentSettings()
        max_chars = settings.max_blueprint_summary_chars
        emitted: set[str] = set()
        blocks: list[ContentBlock] = []

        candidates: list[AssetData] = []
        if settings.auto_include_open_assets:
            candidates.extend(open_assets)
        candidates.extend(self._chips.values())

        for asset in candidates:
            if asset.package_name in emitted:
                continue
            emitted.add(asset.package_name)
            blocks.append(registry.build(asset, max_chars))
        return blocks

    def clear(self) -> None:
        """Empty the input and drop every chip, as after sending a message."""
        self.text = ""
        self._chips.clear()
        self._token_backed.clear()
        self._pending_at = None
        self._close_picker()
        self._on_chips_changed()