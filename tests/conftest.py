import sys
from pathlib import Path

import pytest
from keyring.errors import PasswordDeleteError

# Ensure project root on sys.path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

BASE_URL = "https://tube.switch.ch/"
PROFILE_URL = BASE_URL + "api/v1/profiles/me"

_NO_JSON = object()


class FakeResponse:
    def __init__(self, status_code=200, json_data=_NO_JSON, body=b"", headers=None):
        self.status_code = status_code
        self._json = json_data
        self.body = body
        self.headers = headers if headers is not None else {"Content-Length": str(len(body))}
        self.closed = False

    def json(self):
        if self._json is _NO_JSON:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._json

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self.body), chunk_size):
            yield self.body[start : start + chunk_size]

    def close(self):
        self.closed = True


class FakeSession:
    """Stands in for ``requests.Session``; unknown URLs answer 404."""

    def __init__(self):
        self.headers = {}
        self.routes = {}
        self.calls = []

    def add(self, url, status=200, json=_NO_JSON, body=b"", headers=None, error=None):
        self.routes[url] = error or FakeResponse(status, json, body, headers)
        return self.routes[url]

    def get(self, url, headers=None, stream=False, timeout=None):
        self.calls.append({"url": url, "headers": headers or {}, "stream": stream})
        route = self.routes.get(url)
        if isinstance(route, Exception):
            raise route
        return route or FakeResponse(404)


class FakeKeyring:
    def __init__(self):
        self.store = {}

    def get_password(self, service, user):
        return self.store.get((service, user))

    def set_password(self, service, user, password):
        self.store[(service, user)] = password

    def delete_password(self, service, user):
        if (service, user) not in self.store:
            raise PasswordDeleteError("Password not found")
        del self.store[(service, user)]


@pytest.fixture()
def temp_output_dir(tmp_path):
    d = tmp_path / "out"
    d.mkdir()
    return d


@pytest.fixture()
def fake_session(monkeypatch):
    session = FakeSession()
    monkeypatch.setattr("requests.Session", lambda: session)
    return session


@pytest.fixture()
def fake_keyring(monkeypatch):
    ring = FakeKeyring()
    monkeypatch.setattr("keyring.get_password", ring.get_password)
    monkeypatch.setattr("keyring.set_password", ring.set_password)
    monkeypatch.setattr("keyring.delete_password", ring.delete_password)
    monkeypatch.setattr("getpass.getuser", lambda: "alice")
    return ring


@pytest.fixture()
def valid_token(fake_keyring, fake_session):
    """A stored token the profile endpoint accepts."""
    fake_keyring.set_password("SwitchTube", "alice", "abcdefghijklmnop")
    fake_session.add(PROFILE_URL, json={"id": 1})
    return "abcdefghijklmnop"


@pytest.fixture()
def answers(monkeypatch):
    """Feed canned replies to every line prompt, in order."""
    replies = []

    def ask(prompt):
        return replies.pop(0) if replies else ""

    monkeypatch.setattr("switchtube_downloader.prompt.ask", ask)
    return replies


@pytest.fixture()
def run_cli(capsys, tmp_path):
    from switchtube_downloader.cli import run_cli as _run_cli

    def _invoke(args):
        try:
            code = _run_cli(["--config", str(tmp_path / "config.json"), *args])
        except SystemExit as e:
            code = e.code
        captured = capsys.readouterr()
        return code, captured.out, captured.err

    return _invoke
