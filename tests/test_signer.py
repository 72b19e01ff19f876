"""Tests for request signing and encoding."""

from __future__ import annotations

import httpx
import pytest

from mailru_cloud import ProtocolError
from mailru_cloud._internal.transport import Transport
from mailru_cloud.endpoints import API_BASE
from mailru_cloud.models import Session
from mailru_cloud.signer import MULTIPART, RequestSigner, decode, format_url


@pytest.fixture
def session() -> Session:
    session = Session(is_authenticated=True)
    session.set_token("tok", 1700000000123, "user@mail.ru")
    return session


@pytest.fixture
def signer(session: Session) -> RequestSigner:
    transport = Transport(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    return RequestSigner(transport, session)


def _form(request: httpx.Request) -> httpx.QueryParams:
    return httpx.QueryParams(request.read().decode())


class TestFormatUrl:
    """Tests for URL resolution."""

    def test_relative_path_gets_api_base(self) -> None:
        assert format_url("/file/move") == API_BASE + "/file/move"

    def test_absolute_url_is_untouched(self) -> None:
        url = "https://cld-upload9.cloud.mail.ru/upload-web/"
        assert format_url(url) == url

    def test_idempotent_on_absolute_urls(self) -> None:
        once = format_url("/folder")
        assert format_url(once) == once


class TestDefaults:
    """Tests for the signing parameters."""

    def test_get_puts_defaults_in_query(self, signer: RequestSigner) -> None:
        """Test a signed GET carries every default key in the query string."""
        request = signer.sign("/folder", "GET", {"home": "/docs"})
        params = request.url.params

        assert params["home"] == "/docs"
        assert params["api"] == "2"
        assert params["email"] == "user@mail.ru"
        assert params["x-email"] == "user@mail.ru"
        assert params["token"] == "tok"
        assert params["_"] == "1700000000123"
        assert request.read() == b""

    def test_post_puts_defaults_in_form_body(self, signer: RequestSigner) -> None:
        """Test a signed POST sends parameters form-encoded, not in the URL."""
        request = signer.sign("/file/remove", "POST", {"home": "/a.txt"})
        form = _form(request)

        assert request.headers["content-type"] == "application/x-www-form-urlencoded"
        assert not request.url.params
        assert form["token"] == "tok"
        assert form["_"] == "1700000000123"
        assert form["home"] == "/a.txt"

    def test_defaults_never_dropped(self, signer: RequestSigner) -> None:
        """Test all default keys are present even when not supplied by the caller."""
        request = signer.sign("/folder", "GET", {})

        assert set(request.url.params.keys()) == {"home", "api", "email", "x-email", "token", "_"}
        assert request.url.params["home"] == ""

    def test_caller_values_win(self, signer: RequestSigner) -> None:
        """Test caller-supplied keys override the defaults."""
        request = signer.sign("/folder", "GET", {"api": 1, "token": "other"})

        assert request.url.params["api"] == "1"
        assert request.url.params["token"] == "other"
        assert request.url.params["email"] == "user@mail.ru"

    def test_defaults_can_be_suppressed(self, signer: RequestSigner) -> None:
        request = signer.sign("/folder", "GET", {"home": "/"}, apply_defaults=False)

        assert dict(request.url.params) == {"home": "/"}

    def test_defaults_follow_session_updates(
        self, signer: RequestSigner, session: Session
    ) -> None:
        """Test the signer reads the token pair at signing time."""
        session.set_token("fresh", 42, "user@mail.ru")
        request = signer.sign("/folder", "GET", {})

        assert request.url.params["token"] == "fresh"
        assert request.url.params["_"] == "42"


class TestMultipart:
    """Tests for multipart encoding."""

    def test_multipart_sends_name_contents_parts(self, signer: RequestSigner) -> None:
        request = signer.sign(
            "https://auth.mail.ru/cgi-bin/auth",
            "POST",
            {"Login": "user", "Password": "pw", "Domain": "mail.ru"},
            encoding=MULTIPART,
            apply_defaults=False,
        )
        body = request.read()

        assert request.headers["content-type"].startswith("multipart/form-data; boundary=")
        assert b'name="Login"\r\n\r\nuser\r\n' in body
        assert b'name="Password"\r\n\r\npw\r\n' in body
        assert b'name="Domain"\r\n\r\nmail.ru\r\n' in body
        assert b"filename" not in body


class TestDecode:
    """Tests for response decoding."""

    def test_decode_json(self) -> None:
        request = httpx.Request("GET", API_BASE + "/folder")
        response = httpx.Response(200, json={"status": 200, "body": []}, request=request)

        assert decode(response) == {"status": 200, "body": []}

    def test_decode_non_json_raises_protocol_error(self) -> None:
        request = httpx.Request("GET", API_BASE + "/folder")
        response = httpx.Response(502, text="Bad gateway", request=request)

        with pytest.raises(ProtocolError, match="Expected JSON"):
            decode(response)
