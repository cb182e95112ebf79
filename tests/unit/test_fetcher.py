"""Unit tests for media fetching and MIME handling."""

import base64

import pytest
import requests

from texforge.contexts.media import fetcher
from texforge.contexts.media.fetcher import (
    FetchError,
    extension_from_mime_type,
    fetch_item,
    is_remote,
)


class FakeResponse:
    def __init__(self, content=b"", content_type="", status_code=200):
        self.content = content
        self.headers = {"Content-Type": content_type} if content_type else {}
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")


@pytest.mark.unit
@pytest.mark.parametrize(
    "mime,expected",
    [
        ("image/png", ".png"),
        ("image/jpeg", ".jpg"),
        ("image/png; charset=binary", ".png"),
        ("IMAGE/PNG", ".png"),
        ("application/pdf", ".pdf"),
        ("application/postscript", ".eps"),
        ("image/x-texforge-unknown", None),
        (None, None),
        ("", None),
    ],
)
def test_extension_from_mime_type(mime, expected):
    assert extension_from_mime_type(mime) == expected


@pytest.mark.unit
def test_is_remote():
    assert is_remote("https://example.org/a.png")
    assert is_remote("HTTP://example.org/a.png")
    assert not is_remote("figures/a.png")
    assert not is_remote("file:///tmp/a.png")


@pytest.mark.unit
def test_fetch_local_relative_to_base(tmp_path):
    (tmp_path / "figs").mkdir()
    (tmp_path / "figs" / "plot.png").write_bytes(b"png")

    contents, mime = fetch_item(str(tmp_path), "figs/plot.png")

    assert contents == b"png"
    assert mime == "image/png"


@pytest.mark.unit
def test_fetch_file_url(tmp_path):
    image = tmp_path / "a.pdf"
    image.write_bytes(b"%PDF-1.4")

    assert fetch_item(None, image.as_uri()) == (b"%PDF-1.4", "application/pdf")


@pytest.mark.unit
def test_fetch_missing_local_file_raises(tmp_path):
    with pytest.raises(FetchError) as excinfo:
        fetch_item(str(tmp_path), "nope.png")

    assert excinfo.value.src == "nope.png"


@pytest.mark.unit
def test_fetch_data_uri():
    payload = base64.b64encode(b"\x89PNG").decode("ascii")

    assert fetch_item(None, f"data:image/png;base64,{payload}") == (b"\x89PNG", "image/png")
    assert fetch_item(None, "data:,hello%20world") == (b"hello world", "text/plain")


@pytest.mark.unit
def test_fetch_malformed_data_uri():
    with pytest.raises(FetchError):
        fetch_item(None, "data:image/png;base64")
    with pytest.raises(FetchError):
        fetch_item(None, "data:image/png;base64,***")


@pytest.mark.unit
@pytest.mark.parametrize(
    "base,src",
    [
        (None, "http://[::1/a.png"),
        ("http://[::1/docs/", "img/a.png"),
    ],
)
def test_fetch_malformed_url_raises_fetch_error(base, src):
    with pytest.raises(FetchError) as excinfo:
        fetch_item(base, src)

    assert excinfo.value.src == src
    assert "IPv6" in excinfo.value.reason


@pytest.mark.unit
def test_fetch_absolute_url(monkeypatch):
    requested = []

    def fake_get(url, timeout):
        requested.append(url)
        return FakeResponse(b"gif", "image/gif; charset=binary")

    monkeypatch.setattr(fetcher.requests, "get", fake_get)

    assert fetch_item("/local/dir", "https://example.org/a.gif") == (b"gif", "image/gif")
    assert requested == ["https://example.org/a.gif"]


@pytest.mark.unit
def test_fetch_relative_to_base_url(monkeypatch):
    requested = []

    def fake_get(url, timeout):
        requested.append(url)
        return FakeResponse(b"svg")

    monkeypatch.setattr(fetcher.requests, "get", fake_get)

    contents, mime = fetch_item("https://example.org/docs/index.html", "img/logo.svg")

    assert requested == ["https://example.org/docs/img/logo.svg"]
    # No Content-Type header: guessed from the URL
    assert mime == "image/svg+xml"
    assert contents == b"svg"


@pytest.mark.unit
def test_fetch_http_error_becomes_fetch_error(monkeypatch):
    monkeypatch.setattr(
        fetcher.requests, "get", lambda url, timeout: FakeResponse(status_code=404)
    )

    with pytest.raises(FetchError, match="404"):
        fetch_item(None, "https://example.org/missing.png")


@pytest.mark.unit
def test_fetch_connection_error_becomes_fetch_error(monkeypatch):
    def refuse(url, timeout):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(fetcher.requests, "get", refuse)

    with pytest.raises(FetchError, match="connection refused"):
        fetch_item(None, "https://example.org/a.png")
