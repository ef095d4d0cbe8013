"""Content blocks for prompts and the per-asset-class builders that make them."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

BLUEPRINT_MIME_TYPE = "application/x-ue-blueprint+json"
_TRUNCATION_MARK = "\n…[truncated]"
_GAME_ROOT = "/Game/"
_ASSET_EXTENSION = ".uasset"


@dataclass(frozen=True)
class AssetData:
    """Description of one project asset."""

    asset_name: str
    package_name: str
    asset_class: Optional[type] = None

    @property
    def package_path(self) -> str:
        """Folder part of the package name."""
        return self.package_name.rpartition("/")[0]

    @property
    def object_path(self) -> str:
        return f"{self.package_name}.{self.asset_name}"

    def file_uri(self, project_dir: str | os.PathLike[str]) -> str:
        """file:/// URI of the asset's package file on disk."""
        if not self.package_name.startswith(_GAME_ROOT):
            raise ValueError(f"unknown mount point for package {self.package_name!r}")
        relative = self.package_name[len(_GAME_ROOT):]
        on_disk = os.path.join(os.fspath(project_dir), "Content", relative + _ASSET_EXTENSION)
        full = os.path.abspath(on_disk)
        return "file:///" + full.replace("\\", "/")


class ContentKind(Enum):
    TEXT = "text"
    RESOURCE = "resource"
    RESOURCE_LINK = "resource_link"


@dataclass(frozen=True)
class ContentBlock:
    """One piece of prompt content: text, an inline resource or a resource link."""

    kind: ContentKind
    text: str = ""
    resource_uri: str = ""
    resource_mime_type: str = ""
    resource_text: str = ""
    link_uri: str = ""
    link_name: str = ""
    link_mime_type: str = ""
    link_size: int = -1

    @classmethod
    def text_block(cls, text: str) -> ContentBlock:
        return cls(ContentKind.TEXT, text=text)

    @classmethod
    def resource(cls, uri: str, mime_type: str, text: str) -> ContentBlock:
        return cls(
            ContentKind.RESOURCE,
            resource_uri=uri,
            resource_mime_type=mime_type,
            resource_text=text,
        )

    @classmethod
    def resource_link(cls, uri: str, name: str, mime_type: str, size: int) -> ContentBlock:
        return cls(
            ContentKind.RESOURCE_LINK,
            link_uri=uri,
            link_name=name,
            link_mime_type=mime_type,
            link_size=size,
        )


Builder = Callable[[AssetData, int], ContentBlock]
DumpProvider = Callable[[str, int], Optional[dict[str, Any]]]


class AssetContextBuilderRegistry:
    """Chooses a content-block builder by asset class.

    A builder covers its class and all subclasses; the most recently
    registered match wins. Unmatched assets become a resource link.
    """

    def __init__(self, project_dir: str | os.PathLike[str] = ".") -> None:
        self._project_dir = project_dir
        self._entries: list[tuple[type, Builder]] = []

    def register(self, asset_class: Optional[type], builder: Optional[Builder]) -> None:
        if asset_class is None or builder is None:
            return
        self._entries.append((asset_class, builder))

    def build(self, asset: AssetData, max_chars: int) -> ContentBlock:
        cls = asset.asset_class
        if cls is not None:
            for for_class, builder in reversed(self._entries):
                if issubclass(cls, for_class):
                    return builder(asset, max_chars)
        return ContentBlock.resource_link(
            asset.file_uri(self._project_dir), asset.asset_name, "", -1
        )


def build_blueprint_block(
    asset: AssetData,
    max_chars: int,
    dump_provider: DumpProvider,
    project_dir: str | os.PathLike[str],
) -> ContentBlock:
    """Inline the Blueprint dump as JSON; fall back to a link when no dump exists."""
    uri = asset.file_uri(project_dir)
    dump = dump_provider(asset.object_path, max_chars)
    if dump is None:
        return ContentBlock.resource_link(uri, asset.asset_name, "", -1)
    serialized = json.dumps(dump, indent="\t", ensure_ascii=False)
    if len(serialized) > max_chars:
        serialized = serialized[:max_chars] + _TRUNCATION_MARK
    return ContentBlock.resource(uri, BLUEPRINT_MIME_TYPE, serialized)


def register_builtin_builders(
    registry: AssetContextBuilderRegistry,
    blueprint_class: type,
    dump_provider: DumpProvider,
    project_dir: str | os.PathLike[str],
) -> None:
    """Register the Blueprint summariser for blueprint_class and its subclasses."""

    def _builder(asset: AssetData, max_chars: int) -> ContentBlock:
        return build_blueprint_block(asset, max_chars, dump_provider, project_dir)

    registry.register(blueprint_class, _builder)