import pytest

from nostrbuild.app.services.media_client import rewrite_delete_url


@pytest.mark.parametrize(
    "asset_url,expected",
    [
        (
            "https://otherhost/a/b/c/image123.png",
            "https://nostr.build/api/v2/nip96/upload/image123.png",
        ),
        (
            "https://image.nostr.build/resp/240p/abc.png",
            "https://nostr.build/api/v2/nip96/upload/abc.png",
        ),
        (
            "https://image.nostr.build/thumb/abc.png",
            "https://nostr.build/api/v2/nip96/upload/abc.png",
        ),
        (
            "https://nostr.build/api/v2/nip96/upload/abc.png",
            "https://nostr.build/api/v2/nip96/upload/abc.png",
        ),
        (
            "https://user@cdn.example:8443/i/abc.png?v=2",
            "https://nostr.build/api/v2/nip96/upload/abc.png?v=2",
        ),
        (
            "https://image.nostr.build/i/abc.png/",
            "https://nostr.build/api/v2/nip96/upload/abc.png",
        ),
    ],
)
def test_rewrite_forces_host_and_keeps_basename(asset_url, expected):
    assert rewrite_delete_url(asset_url, "nostr.build") == expected


def test_rewrite_is_idempotent():
    once = rewrite_delete_url("https://x/a/b/c.gif", "nostr.build")
    assert rewrite_delete_url(once, "nostr.build") == once


@pytest.mark.parametrize(
    "value",
    [
        "not a url",
        "abc.png",
        "/i/abc.png",
        "image.nostr.build/i/abc.png",
        "http://[::1/abc.png",
    ],
)
def test_unparsable_input_is_returned_verbatim(value):
    assert rewrite_delete_url(value, "nostr.build") == value
