"""Progress bars for video transfers."""

from __future__ import annotations

import threading
from typing import BinaryIO, Iterable, Optional

from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)


def make_progress() -> Progress:
    return Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        "[progress.percentage]{task.percentage:>3.0f}%",
        DownloadColumn(),
        TransferSpeedColumn(),
        TimeRemainingColumn(),
    )


def copy_stream(
    chunks: Iterable[bytes],
    dst: BinaryIO,
    progress: Progress,
    task_id: TaskID,
    cancel: Optional[threading.Event] = None,
) -> int:
    """Write ``chunks`` to ``dst``, advancing ``task_id``; returns bytes written.

    Stops early, leaving the copy short, once ``cancel`` is set.
    """
    written = 0
    for chunk in chunks:
        if cancel is not None and cancel.is_set():
            break
        if not chunk:  # keep-alive
            continue
        dst.write(chunk)
        written += len(chunk)
        progress.update(task_id, advance=len(chunk))
    return written


__all__ = ["make_progress", "copy_stream"]
