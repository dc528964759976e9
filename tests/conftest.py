"""Pytest configuration and fixtures."""

import base64
import io
import json

import httpx
import pytest
from PIL import Image

from dewatermark.config import Settings


pytest_plugins = ("pytest_asyncio",)

SECRET = b"unit-test-signing-secret-0123456789abcdef"
ENCODED_SECRET = base64.urlsafe_b64encode(SECRET).rstrip(b"=").decode()
BUNDLE_PATH = "/_next/static/chunks/pages/_app-3f2a1b9c5d.js"

UPLOAD_HTML = f"""<!DOCTYPE html><html><head>
<script src="/_next/static/chunks/webpack-11aa.js" defer></script>
<script src="{BUNDLE_PATH}" defer></script>
</head><body><div id="__next"></div></body></html>"""

BUNDLE_JS = (
    'var o={baseURL:"https://dewatermark.ai"},c={apiURL:"https://api.dewatermark.ai",'
    f'jwtKey:"{ENCODED_SECRET}"}};function r(e){{return e}}'
)


def make_image(width: int, height: int, fmt: str = "PNG", mode: str = "RGB") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, (width, height), color=128 if mode == "L" else (200, 40, 40)).save(buffer, format=fmt)
    return buffer.getvalue()


def multipart_fields(request: httpx.Request) -> dict:
    """Split a multipart/form-data request into {name: (headers, body)}."""

    boundary = request.headers["content-type"].split("boundary=", 1)[1].encode()
    fields = {}
    for chunk in request.content.split(b"--" + boundary):
        if not chunk.strip() or chunk.strip() == b"--":
            continue
        head, _, body = chunk.lstrip(b"\r\n").partition(b"\r\n\r\n")
        headers = head.decode()
        name = headers.split('name="', 1)[1].split('"', 1)[0]
        fields[name] = (headers, body[:-2] if body.endswith(b"\r\n") else body)
    return fields


class FakeSite:
    """In-memory stand-in for the front-end and the erase API."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.html = UPLOAD_HTML
        self.script = BUNDLE_JS
        self.html_status = 200
        self.api_status = 200
        self.api_body = json.dumps({"edited_image": {"image": base64.b64encode(make_image(8, 8)).decode()}})
        self.requests: list[httpx.Request] = []
        self.redirects: dict[str, str] = {}
        self.html_paths = {settings.upload_path}
        self.api_paths = {settings.erase_path}

    @property
    def api_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == "api.dewatermark.ai"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path in self.redirects:
            return httpx.Response(308, headers={"Location": self.redirects[path]})
        if request.method == "GET" and path in self.html_paths:
            return httpx.Response(self.html_status, text=self.html)
        if request.method == "GET" and path == BUNDLE_PATH:
            return httpx.Response(200, text=self.script)
        if request.method == "POST" and path in self.api_paths:
            return httpx.Response(self.api_status, text=self.api_body)
        return httpx.Response(404, text="not found")

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def site(settings):
    return FakeSite(settings)


@pytest.fixture
def owned_client_kwargs(site, monkeypatch):
    """Route clients built by DeWatermark itself through the fake site.

    Returns the keyword arguments DeWatermark passed to ``httpx.AsyncClient``.
    """

    captured = {}
    real_client = httpx.AsyncClient

    def build(**kwargs):
        captured.update(kwargs)
        kwargs.pop("proxy", None)
        return real_client(transport=httpx.MockTransport(site.handler), trust_env=False, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", build)
    return captured
