from __future__ import annotations

import os
import re
from pathlib import Path
from typing import BinaryIO, Optional

from . import prompt

DEFAULT_EXTENSION = "mp4"

# Applied in order; characters not listed are kept as-is
REPLACEMENTS = (
    ("/", "-"),
    ("\\", "-"),
    (":", "-"),
    ("|", "-"),
    ("*", ""),
    ("?", ""),
    ('"', ""),
    ("<", ""),
    (">", ""),
)
DASH_RUN = re.compile(r"-{2,}")


class FileCreateError(OSError):
    pass


class FolderCreateError(OSError):
    pass


def sanitize_filename(name: str) -> str:
    for invalid, replacement in REPLACEMENTS:
        name = name.replace(invalid, replacement)
    name = name.strip()
    return DASH_RUN.sub("-", name)


def extension_for(media_type: str) -> str:
    # "video/mp4" -> "mp4"
    parts = media_type.split("/")
    if len(parts) == 2:
        return parts[1]
    return DEFAULT_EXTENSION


def create_filename(
    title: str,
    media_type: str,
    episode: str = "",
    use_episode: bool = False,
    output: Optional[Path] = None,
) -> Path:
    """Build the on-disk path for a video.

    Spaces in the sanitized title become underscores. When ``use_episode``
    is set and the video carries an episode tag, it is used as a prefix
    (``01_Title.mp4``).
    """
    stem = sanitize_filename(title).replace(" ", "_")
    if use_episode and episode:
        stem = f"{episode}_{stem}"
    filename = f"{stem}.{extension_for(media_type)}"
    if output is not None:
        filename = os.path.join(output, filename)
    return Path(os.path.normpath(filename))


def create_channel_folder(channel_name: str, output: Optional[Path] = None) -> Path:
    folder = os.path.normpath(channel_name.replace("/", " - "))
    if output is not None:
        folder = os.path.join(output, folder)
    try:
        os.makedirs(folder, exist_ok=True)
    except OSError as e:
        raise FolderCreateError(f"failed to create folder {folder}: {e}") from e
    return Path(folder)


def create_video_file(path: Path) -> BinaryIO:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FolderCreateError(f"failed to create folder {path.parent}: {e}") from e
    try:
        return open(path, "wb")
    except OSError as e:
        raise FileCreateError(f"failed to create file {path}: {e}") from e


def should_skip_existing(path: Path, force: bool = False, skip: bool = False) -> bool:
    """Decide whether an existing file at ``path`` is left alone."""
    if force or not path.exists():
        return False
    if skip:
        return True
    return not prompt.confirm(f"File {path} already exists. Overwrite?")


__all__ = [
    "sanitize_filename",
    "extension_for",
    "create_filename",
    "create_channel_folder",
    "create_video_file",
    "should_skip_existing",
    "FileCreateError",
    "FolderCreateError",
]
