"""Core download logic: resolve the input, fetch metadata, write files."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from rich import print as rprint
from rich.markup import escape
from rich.progress import Progress

from .client import APIClient, APIError, ResponseDecodeError
from .config import DEFAULT_BASE_URL, AppConfig, DownloadOptions
from .logging_utils import get_logger
from .models import ChannelMetadata, DownloadSummary, MediaType, Video, VideoVariant
from .naming import (
    FileCreateError,
    FolderCreateError,
    create_channel_folder,
    create_filename,
    create_video_file,
    should_skip_existing,
)
from .progress import copy_stream, make_progress
from .selector import select_videos
from .tokens import TokenManager

VIDEO_PREFIX = "videos/"
CHANNEL_PREFIX = "channels/"


class DownloadError(Exception):
    pass


class InvalidURLError(DownloadError):
    pass


class InvalidIDError(DownloadError):
    pass


class NoVariantsError(DownloadError):
    pass


class VideoDownloadError(DownloadError):
    pass


class ChannelDownloadError(DownloadError):
    pass


class IncompleteDownloadError(OSError):
    pass


def extract_id_and_type(text: str, base_url: str = DEFAULT_BASE_URL) -> Tuple[str, MediaType]:
    """Split a video/channel URL into ``(id, type)``.

    Anything not starting with ``base_url`` is taken as a bare ID of unknown
    type. A URL on the right host that is neither a video nor a channel link
    raises :class:`InvalidURLError`.
    """
    text = text.strip()
    if not text.startswith(base_url):
        return text, MediaType.UNKNOWN
    rest = text[len(base_url):]
    if rest.startswith(VIDEO_PREFIX):
        return rest[len(VIDEO_PREFIX):], MediaType.VIDEO
    if rest.startswith(CHANNEL_PREFIX):
        return rest[len(CHANNEL_PREFIX):], MediaType.CHANNEL
    raise InvalidURLError(f"invalid url: {text}")


@dataclass
class PlannedDownload:
    video: Video
    variant: VideoVariant
    path: Path


def _expect(data: Any, kind: type, url: str) -> Any:
    if not isinstance(data, kind):
        raise ResponseDecodeError(f"unexpected response shape from {url}")
    return data


class Downloader:
    def __init__(self, options: DownloadOptions, client: APIClient, config: Optional[AppConfig] = None):
        self.options = options
        self.client = client
        self.config = config or AppConfig()
        self.output_dir: Optional[Path] = options.output or self.config.output_dir
        self._log = get_logger()
        self._cancel = threading.Event()

    # --- API lookups -------------------------------------------------
    def fetch_video(self, video_id: str) -> Video:
        url = self.client.video_url(video_id)
        return Video.from_api(_expect(self.client.get_json(url), dict, url))

    def fetch_variants(self, video_id: str) -> List[VideoVariant]:
        url = self.client.video_variants_url(video_id)
        return [VideoVariant.from_api(v) for v in _expect(self.client.get_json(url), list, url)]

    def fetch_channel(self, channel_id: str) -> ChannelMetadata:
        url = self.client.channel_url(channel_id)
        return ChannelMetadata.from_api(_expect(self.client.get_json(url), dict, url))

    def fetch_channel_videos(self, channel_id: str) -> List[Video]:
        url = self.client.channel_videos_url(channel_id)
        return [Video.from_api(v) for v in _expect(self.client.get_json(url), list, url)]

    # Public API
    def download_video(self, video_id: str) -> Optional[Path]:
        """Download one video; returns its path, or None if it was skipped."""
        video = self.fetch_video(video_id)
        variants = self.fetch_variants(video_id)
        if not variants:
            raise NoVariantsError(f"no video variants found for {video_id}")

        path = self._filename(video, variants[0], self.output_dir)
        if should_skip_existing(path, self.options.force, self.options.skip):
            rprint(f"[yellow]Skipped[/yellow] {escape(str(path))}")
            return None

        with make_progress() as progress:
            self._transfer(PlannedDownload(video, variants[0], path), progress)
        self._log.debug("Downloaded %s to %s", video_id, path)
        return path

    def download_channel(self, channel_id: str) -> Optional[DownloadSummary]:
        """Download the videos the user selects from a channel.

        Returns None when there is nothing to do (empty channel or empty
        selection). Per-video failures are collected in the summary rather
        than raised.
        """
        channel = self.fetch_channel(channel_id)
        videos = self.fetch_channel_videos(channel_id)
        if not videos:
            rprint("No videos found in this channel")
            return None

        rprint(f"Found {len(videos)} videos in channel: {escape(channel.name)}")
        indices = select_videos(videos, self.options.all, self.options.use_episode)
        if not indices:
            rprint("No videos selected for download")
            return None

        folder = create_channel_folder(channel.name, self.output_dir)
        rprint(f"\nDownloading to folder: {escape(str(folder))}\n")

        summary = DownloadSummary(selected=len(indices))
        planned = self._prepare(videos, indices, folder, summary)
        if planned:
            self._download_all(planned, summary)
        self.print_results(summary)
        return summary

    def print_results(self, summary: DownloadSummary) -> None:
        rprint(
            f"\n[green][SUCCESS][/green] Download complete! "
            f"{summary.succeeded}/{summary.selected} videos successful"
        )
        if summary.failed:
            rprint("[red][ERROR][/red] Failed downloads:")
            for title in summary.failed:
                rprint(f"  - {escape(title)}")

    # Internal helpers
    def _filename(self, video: Video, variant: VideoVariant, output: Optional[Path]) -> Path:
        return create_filename(
            video.title, variant.media_type, video.episode, self.options.use_episode, output
        )

    def _prepare(
        self,
        videos: Sequence[Video],
        indices: Sequence[int],
        folder: Path,
        summary: DownloadSummary,
    ) -> List[PlannedDownload]:
        planned: List[PlannedDownload] = []
        for idx in indices:
            video = videos[idx]
            try:
                variants = self.fetch_variants(video.id)
            except APIError as e:
                rprint(f"\nFailed to get video variants for {escape(video.title)}: {escape(str(e))}")
                summary.failed.append(video.title)
                continue
            if not variants:
                rprint(f"\nNo variants found for {escape(video.title)}")
                summary.failed.append(video.title)
                continue

            path = self._filename(video, variants[0], folder)
            if should_skip_existing(path, self.options.force, self.options.skip):
                summary.skipped += 1
                continue
            planned.append(PlannedDownload(video, variants[0], path))
        return planned

    def _download_all(self, planned: Sequence[PlannedDownload], summary: DownloadSummary) -> None:
        with (
            make_progress() as progress,
            ThreadPoolExecutor(max_workers=max(1, self.config.max_concurrency)) as executor,
        ):
            futures = {executor.submit(self._transfer, item, progress): item for item in planned}
            try:
                for future in as_completed(futures):
                    item = futures[future]
                    try:
                        future.result()
                    except (APIError, OSError) as e:
                        self._log.debug("Download of %s failed: %s", item.video.id, e)
                        summary.failed.append(item.video.title)
                    else:
                        self._log.debug("Downloaded %s to %s", item.video.id, item.path)
                        summary.succeeded += 1
            except KeyboardInterrupt:
                # Running transfers stop at their next chunk
                self._cancel.set()
                executor.shutdown(wait=False, cancel_futures=True)
                raise

    def _transfer(self, item: PlannedDownload, progress: Progress) -> None:
        with self.client.stream(self.client.absolute(item.variant.path)) as resp:
            total = int(resp.headers.get("Content-Length") or 0) or None
            task_id = progress.add_task(item.path.name, total=total)
            with create_video_file(item.path) as fh:
                written = copy_stream(
                    resp.iter_content(chunk_size=self.config.chunk_size),
                    fh,
                    progress,
                    task_id,
                    self._cancel,
                )
        if total is not None and written < total:
            item.path.unlink(missing_ok=True)
            raise IncompleteDownloadError(
                f"incomplete download of {item.path.name}: got {written} of {total} bytes"
            )


def download(
    options: DownloadOptions,
    config: Optional[AppConfig] = None,
    client: Optional[APIClient] = None,
) -> None:
    """Download the video or channel named by ``options.media``.

    A bare ID is tried as a video first and, failing that, as a channel.
    Token problems and user aborts propagate unchanged.
    """
    config = config or AppConfig()
    media_id, media_type = extract_id_and_type(options.media, config.base_url)
    log = get_logger()
    log.debug("Resolved %r as %s id %r", options.media, media_type.value, media_id)

    if client is None:
        tokens = TokenManager(config.keyring_service, config.base_url, config.timeout_seconds)
        client = APIClient(tokens.get, config.base_url)
    downloader = Downloader(options, client, config)

    if media_type in (MediaType.VIDEO, MediaType.UNKNOWN):
        try:
            downloader.download_video(media_id)
            return
        except (DownloadError, APIError, OSError) as e:
            if media_type is MediaType.VIDEO or isinstance(
                e, (FileCreateError, FolderCreateError, IncompleteDownloadError)
            ):
                raise VideoDownloadError(f"failed to download video: {e}") from e
            log.debug("%r is not a video (%s); trying as channel", media_id, e)

    try:
        downloader.download_channel(media_id)
    except APIError as e:
        if media_type is MediaType.UNKNOWN:
            raise InvalidIDError(f"invalid id: {media_id}") from e
        raise ChannelDownloadError(f"failed to download channel: {e}") from e
    except (DownloadError, OSError, ValueError) as e:
        raise ChannelDownloadError(f"failed to download channel: {e}") from e


__all__ = [
    "Downloader",
    "PlannedDownload",
    "download",
    "extract_id_and_type",
    "DownloadError",
    "InvalidURLError",
    "InvalidIDError",
    "NoVariantsError",
    "VideoDownloadError",
    "ChannelDownloadError",
    "IncompleteDownloadError",
]
