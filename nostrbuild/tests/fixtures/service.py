"""
Test doubles for the media service: canned payloads, a recording
transport and a controllable clock.
"""

import json
from typing import Callable, List, Optional

import httpx

from nostrbuild.app.core.config import Settings


# Secret key 1: its x-only public key is the secp256k1 generator's x.
SECRET_HEX = "0" * 63 + "1"
PUBKEY_HEX = "79be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def asset_payload(url: str = "https://image.nostr.build/abc.png") -> dict:
    return {
        "url": url,
        "sha256": "abc",
        "original_sha256": "def",
        "size": 1234,
        "mime": "image/png",
        "type": "picture",
        "name": "abc.png",
        "input_name": "fileToUpload",
        "blurhash": "LEHV6nWB2yk8pyo0adR*.7kCMdnj",
        "dimensions": {"width": 640, "height": 480},
        "dimensionsString": "640x480",
        "thumbnail": "https://image.nostr.build/thumb/abc.png",
        "responsive": {
            "240p": "https://image.nostr.build/resp/240p/abc.png",
            "1080p": "https://image.nostr.build/resp/1080p/abc.png",
        },
        "metadata": {
            "date:create": "2024-01-01T00:00:00+00:00",
            "png:IHDR.bit_depth": "8",
        },
    }


def upload_payload(*urls: str) -> dict:
    assets = [asset_payload(u) for u in urls] or [asset_payload()]
    return {
        "status": "success",
        "message": "Upload successful.",
        "data": assets,
    }


def delete_payload() -> dict:
    return {"status": "success", "message": "Deleted."}


class RecordingTransport(httpx.MockTransport):
    """
    MockTransport that keeps every request it receives.
    """

    def __init__(
        self,
        respond: Callable[[httpx.Request], httpx.Response],
    ):
        self.requests: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            request.read()
            self.requests.append(request)
            return respond(request)

        super().__init__(handler)

    @property
    def last(self) -> Optional[httpx.Request]:
        return self.requests[-1] if self.requests else None


def json_response(payload: dict, status_code: int = 200) -> Callable:
    def respond(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status_code,
            content=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )

    return respond


def text_response(body: str, status_code: int) -> Callable:
    def respond(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, text=body)

    return respond


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.value = start
        self.calls = 0

    def __call__(self) -> float:
        self.calls += 1
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds
