from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

# Core data models decoded from the SwitchTube browse API


class MediaType(Enum):
    UNKNOWN = "unknown"
    VIDEO = "video"
    CHANNEL = "channel"


@dataclass(frozen=True)
class Video:
    id: str
    title: str
    episode: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Video":
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title") or "",
            episode=data.get("episode") or "",
        )


@dataclass(frozen=True)
class VideoVariant:
    path: str
    media_type: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "VideoVariant":
        return cls(path=data.get("path") or "", media_type=data.get("mediaType") or "")


@dataclass(frozen=True)
class ChannelMetadata:
    name: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ChannelMetadata":
        return cls(name=data.get("name") or "")


@dataclass
class DownloadSummary:
    selected: int
    succeeded: int = 0
    skipped: int = 0
    failed: List[str] = field(default_factory=list)


__all__ = [
    "MediaType",
    "Video",
    "VideoVariant",
    "ChannelMetadata",
    "DownloadSummary",
]
