"""Configuration management for the SwitchTube downloader."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

DEFAULT_BASE_URL = "https://tube.switch.ch/"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "switchtube-downloader" / "config.json"


@dataclass
class AppConfig:
    base_url: str = DEFAULT_BASE_URL
    keyring_service: str = "SwitchTube"
    timeout_seconds: int = 10
    max_concurrency: int = 4
    chunk_size: int = 64 * 1024
    output_dir: Optional[Path] = None  # None -> current working directory

    def __post_init__(self):
        if self.output_dir is not None and not isinstance(self.output_dir, Path):
            self.output_dir = Path(self.output_dir)
        if not self.base_url.endswith("/"):
            self.base_url += "/"

    @classmethod
    def from_file(cls, path: Path) -> "AppConfig":
        """Loads configuration from a JSON file."""
        if not path.exists():
            return cls()
        with open(path, "r") as f:
            data = json.load(f)
        known = {fld.name for fld in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class DownloadOptions:
    """Options for a single ``download`` invocation."""

    media: str  # video or channel ID / URL
    use_episode: bool = False
    skip: bool = False
    force: bool = False
    all: bool = False
    output: Optional[Path] = None

    def __post_init__(self):
        if self.output is not None and not isinstance(self.output, Path):
            self.output = Path(self.output)


__all__ = ["AppConfig", "DownloadOptions", "DEFAULT_CONFIG_PATH", "DEFAULT_BASE_URL"]
