"""Shared test helpers for mailru_cloud tests."""

from __future__ import annotations

import hashlib
import json
from typing import Any

import httpx

LOGIN = "user@mail.ru"
PASSWORD = "secret"
TOKEN_TIME = 1700000000000


def json_response(status_code: int, payload: Any) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload).encode())


class FakeCloud:
    """In-memory stand-in for the Mail.Ru auth, API, upload and download hosts.

    Pass ``handle`` to httpx.MockTransport. Every request is recorded in
    ``requests``; uploaded blobs live in ``blobs`` keyed by hash and named
    files in ``files`` keyed by cloud path.
    """

    def __init__(self, password: str = PASSWORD) -> None:
        self.password = password
        self.requests: list[httpx.Request] = []
        self.blobs: dict[str, bytes] = {}
        self.files: dict[str, str] = {}
        self.folders: set[str] = {"/"}
        self.tokens_issued = 0
        self.current_token: str | None = None
        self.fail: dict[str, int] = {}

    # -- introspection --------------------------------------------------

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def last_params(self, path: str) -> httpx.QueryParams:
        """Signed parameters of the last call to path, wherever they travelled."""
        request = self.requests_to(path)[-1]
        return _params(request)

    # -- routing --------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host, path = request.url.host, request.url.path

        if path in self.fail:
            return httpx.Response(self.fail[path], text="failure")

        if host == "auth.mail.ru":
            return self._auth(request)
        if host == "cloud.mail.ru" and path == "/":
            return httpx.Response(
                200,
                text="<html>cloud</html>",
                headers={"Set-Cookie": "sdcs=landing; Domain=.mail.ru; Path=/"},
            )
        if path == "/api/v2/tokens/csrf":
            return self._token(request)
        if host == "cld-upload9.cloud.mail.ru":
            return self._upload(request)
        if host == "cloclo17.datacloudmail.ru":
            return self._download(request)
        if path.startswith("/api/v2/"):
            return self._api(request, path[len("/api/v2"):])
        return httpx.Response(404, text="not found")

    def _auth(self, request: httpx.Request) -> httpx.Response:
        body = request.content
        expected = b'name="Password"\r\n\r\n' + self.password.encode() + b"\r\n"
        if expected not in body:
            return httpx.Response(401, text="bad credentials")
        return httpx.Response(
            200,
            text="ok",
            headers={"Set-Cookie": "Mpop=session-cookie; Domain=.mail.ru; Path=/"},
        )

    def _token(self, request: httpx.Request) -> httpx.Response:
        cookies = request.headers.get("cookie", "")
        if "Mpop=" not in cookies or "sdcs=" not in cookies:
            return json_response(403, {"status": 403, "body": "nosdc"})
        self.tokens_issued += 1
        self.current_token = f"token-{self.tokens_issued}"
        return json_response(
            200,
            {
                "email": request.url.params["email"],
                "time": TOKEN_TIME + self.tokens_issued,
                "status": 200,
                "body": {"token": self.current_token},
            },
        )

    def _upload(self, request: httpx.Request) -> httpx.Response:
        data = request.content
        content_hash = hashlib.sha1(data).hexdigest().upper()
        self.blobs[content_hash] = data
        return httpx.Response(200, text=content_hash + "\r\n")

    def _download(self, request: httpx.Request) -> httpx.Response:
        home = request.url.path[len("/get"):]
        if home not in self.files:
            return httpx.Response(404, text="not found")
        return httpx.Response(200, content=self.blobs[self.files[home]])

    def _api(self, request: httpx.Request, endpoint: str) -> httpx.Response:
        params = _params(request)
        if params.get("token") != self.current_token or params.get("_") != str(
            TOKEN_TIME + self.tokens_issued
        ):
            return json_response(403, {"status": 403, "body": {"token": {"error": "invalid"}}})

        home = params.get("home", "")
        if endpoint == "/folder":
            prefix = home.rstrip("/") + "/"
            entries = [
                {"name": p[len(prefix):], "home": p, "type": "folder"}
                for p in sorted(self.folders)
                if p != home and p.startswith(prefix) and "/" not in p[len(prefix):]
            ] + [
                {
                    "name": p[len(prefix):],
                    "home": p,
                    "type": "file",
                    "size": len(self.blobs[h]),
                    "hash": h,
                }
                for p, h in sorted(self.files.items())
                if p.startswith(prefix) and "/" not in p[len(prefix):]
            ]
            return json_response(200, {"status": 200, "body": {"home": home, "list": entries}})
        if endpoint == "/folder/add":
            self.folders.add(home)
            return json_response(200, {"status": 200, "body": home})
        if endpoint == "/file/add":
            if params["conflict"] == "strict" and home in self.files:
                return json_response(400, {"status": 400, "body": {"home": {"error": "exists"}}})
            if params["hash"] not in self.blobs:
                return json_response(400, {"status": 400, "body": {"hash": {"error": "invalid"}}})
            self.files[home] = params["hash"]
            return json_response(200, {"status": 200, "body": home})
        if endpoint == "/file/publish":
            return json_response(200, {"status": 200, "body": "Ab1c/xYz9Qw"})
        if endpoint in ("/file/move", "/file/copy", "/file/remove", "/file/rename"):
            return json_response(200, {"status": 200, "body": home})
        return json_response(404, {"status": 404, "body": "unknown"})


def _params(request: httpx.Request) -> httpx.QueryParams:
    if request.method == "GET":
        return request.url.params
    return httpx.QueryParams(request.content.decode())
