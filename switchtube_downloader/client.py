"""Authenticated access to the SwitchTube browse API."""

from __future__ import annotations

from contextlib import contextmanager
from http import HTTPStatus
from typing import Any, Callable, Iterator, Optional
from urllib.parse import quote, urljoin

import requests

from .config import DEFAULT_BASE_URL
from .logging_utils import get_logger

VIDEO_API = "api/v1/browse/videos/"
CHANNEL_API = "api/v1/browse/channels/"


class APIError(Exception):
    pass


class HTTPStatusError(APIError):
    def __init__(self, url: str, status_code: int):
        self.url = url
        self.status_code = status_code
        try:
            reason = HTTPStatus(status_code).phrase
        except ValueError:
            reason = "Unknown"
        super().__init__(f"HTTP request failed with status {status_code}: {reason}")


class ResponseDecodeError(APIError):
    pass


def build_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({"Accept": "application/json"})
    return session


class APIClient:
    """Issues GET requests with the ``Authorization: Token`` header.

    ``token_provider`` is called once, on the first request; the token is
    cached for the lifetime of the client.
    """

    def __init__(
        self,
        token_provider: Callable[[], str],
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
    ):
        self._token_provider = token_provider
        self._token: Optional[str] = None
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.session = session or build_session()

    # --- URL helpers -------------------------------------------------
    def absolute(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))

    def video_url(self, video_id: str) -> str:
        return self.absolute(VIDEO_API + quote(video_id))

    def video_variants_url(self, video_id: str) -> str:
        return self.absolute(VIDEO_API + quote(video_id) + "/video_variants")

    def channel_url(self, channel_id: str) -> str:
        return self.absolute(CHANNEL_API + quote(channel_id))

    def channel_videos_url(self, channel_id: str) -> str:
        return self.absolute(CHANNEL_API + quote(channel_id) + "/videos")

    # --- Requests ----------------------------------------------------
    def _headers(self) -> dict:
        if self._token is None:
            self._token = self._token_provider()
        return {"Authorization": f"Token {self._token}"}

    def _get(self, url: str, stream: bool = False) -> requests.Response:
        get_logger().debug("GET %s", url)
        try:
            resp = self.session.get(url, headers=self._headers(), stream=stream)
        except requests.RequestException as e:
            raise APIError(f"request to {url} failed: {e}") from e
        if resp.status_code != HTTPStatus.OK:
            resp.close()
            raise HTTPStatusError(url, resp.status_code)
        return resp

    def get_json(self, url: str) -> Any:
        resp = self._get(url)
        try:
            return resp.json()
        except ValueError as e:
            raise ResponseDecodeError(f"failed to decode response from {url}: {e}") from e
        finally:
            resp.close()

    @contextmanager
    def stream(self, url: str) -> Iterator[requests.Response]:
        resp = self._get(url, stream=True)
        try:
            yield resp
        finally:
            resp.close()


__all__ = [
    "APIClient",
    "APIError",
    "HTTPStatusError",
    "ResponseDecodeError",
    "build_session",
]
