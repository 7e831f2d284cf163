from unittest.mock import MagicMock

import pytest
import requests

from switchtube_downloader.client import (
    APIClient,
    APIError,
    HTTPStatusError,
    ResponseDecodeError,
)

VIDEO_URL = "https://tube.switch.ch/api/v1/browse/videos/abc"


@pytest.fixture
def provider():
    return MagicMock(return_value="secret")


@pytest.fixture
def client(provider, fake_session):
    return APIClient(provider, session=fake_session)


def test_endpoint_urls(client):
    assert client.video_url("abc") == VIDEO_URL
    assert client.video_variants_url("abc") == VIDEO_URL + "/video_variants"
    assert client.channel_url("x y") == "https://tube.switch.ch/api/v1/browse/channels/x%20y"
    assert client.channel_videos_url("c1").endswith("/channels/c1/videos")
    assert client.absolute("/media/v.mp4") == "https://tube.switch.ch/media/v.mp4"


def test_base_url_gets_trailing_slash(provider, fake_session):
    c = APIClient(provider, "https://example.org/tube", session=fake_session)
    assert c.video_url("1") == "https://example.org/tube/api/v1/browse/videos/1"


def test_get_json_sends_token_and_caches_it(client, provider, fake_session):
    resp = fake_session.add(VIDEO_URL, json={"id": "abc", "title": "T"})
    assert client.get_json(VIDEO_URL) == {"id": "abc", "title": "T"}
    client.get_json(VIDEO_URL)
    assert provider.call_count == 1
    assert fake_session.calls[0]["headers"]["Authorization"] == "Token secret"
    assert resp.closed


def test_non_ok_status_raises(client, fake_session):
    resp = fake_session.add(VIDEO_URL, status=403)
    with pytest.raises(HTTPStatusError) as exc:
        client.get_json(VIDEO_URL)
    assert exc.value.status_code == 403
    assert "403" in str(exc.value) and "Forbidden" in str(exc.value)
    assert resp.closed


def test_unknown_status_phrase(client, fake_session):
    fake_session.add(VIDEO_URL, status=599)
    with pytest.raises(HTTPStatusError, match="Unknown"):
        client.get_json(VIDEO_URL)


def test_bad_json_raises_decode_error(client, fake_session):
    fake_session.add(VIDEO_URL, body=b"<html>")
    with pytest.raises(ResponseDecodeError):
        client.get_json(VIDEO_URL)


def test_transport_error_wrapped(client, fake_session):
    fake_session.add(VIDEO_URL, error=requests.ConnectionError("boom"))
    with pytest.raises(APIError, match="boom"):
        client.get_json(VIDEO_URL)


def test_token_error_propagates(fake_session):
    class Missing(Exception):
        pass

    def no_token():
        raise Missing("no token")

    c = APIClient(no_token, session=fake_session)
    with pytest.raises(Missing):
        c.get_json(VIDEO_URL)
    assert fake_session.calls == []


def test_stream_closes_response(client, fake_session):
    resp = fake_session.add("https://tube.switch.ch/media/v.mp4", body=b"0123456789")
    with client.stream(client.absolute("media/v.mp4")) as r:
        assert b"".join(r.iter_content(chunk_size=4)) == b"0123456789"
        assert not resp.closed
    assert resp.closed
    assert fake_session.calls[-1]["stream"] is True
