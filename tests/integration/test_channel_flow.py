import pytest

BASE = "https://tube.switch.ch/"
CHANNEL = BASE + "api/v1/browse/channels/ch42"
VIDEOS = BASE + "api/v1/browse/videos/"


@pytest.fixture
def channel(fake_session):
    fake_session.add(CHANNEL, json={"name": "Networks/Systems"})
    fake_session.add(
        CHANNEL + "/videos",
        json=[
            {"id": "v1", "title": "Week 1: Intro", "episode": "01"},
            {"id": "v2", "title": "Week 2", "episode": "02"},
        ],
    )
    for vid, body in (("v1", b"intro-bytes"), ("v2", b"week-two")):
        fake_session.add(
            VIDEOS + vid + "/video_variants",
            json=[{"path": f"/media/{vid}.webm", "mediaType": "video/webm"}],
        )
        fake_session.add(BASE + f"media/{vid}.webm", body=body)
    return fake_session


@pytest.mark.integration
def test_download_whole_channel(run_cli, valid_token, channel, temp_output_dir):
    code, out, err = run_cli(
        ["download", BASE + "channels/ch42", "--all", "--episode", "-o", str(temp_output_dir)]
    )
    assert code == 0
    folder = temp_output_dir / "Networks - Systems"
    assert (folder / "01_Week_1-_Intro.webm").read_bytes() == b"intro-bytes"
    assert (folder / "02_Week_2.webm").read_bytes() == b"week-two"
    assert "2/2 videos successful" in out
    media_calls = [c for c in channel.calls if "/media/" in c["url"]]
    assert all(c["headers"]["Authorization"] == f"Token {valid_token}" for c in media_calls)


@pytest.mark.integration
def test_download_with_text_selection(run_cli, valid_token, channel, temp_output_dir, answers, monkeypatch):
    monkeypatch.setattr("switchtube_downloader.selector.is_terminal", lambda s: False)
    answers.append("2")
    code, out, err = run_cli(["download", "ch42", "-o", str(temp_output_dir)])
    assert code == 0
    folder = temp_output_dir / "Networks - Systems"
    assert not (folder / "Week_1-_Intro.webm").exists()
    assert (folder / "Week_2.webm").exists()
    assert "1/1 videos successful" in out


@pytest.mark.integration
def test_download_without_token(run_cli, fake_keyring, channel, temp_output_dir):
    code, out, err = run_cli(["download", "ch42", "--all", "-o", str(temp_output_dir)])
    assert code == 1
    assert "no token found" in out
    assert not any(temp_output_dir.iterdir())


@pytest.mark.integration
def test_download_unknown_id(run_cli, valid_token, temp_output_dir):
    code, out, err = run_cli(["download", "nothing-here", "-o", str(temp_output_dir)])
    assert code == 1
    assert "invalid id: nothing-here" in out
