"""
HTTP auth events (NIP-98) for nostr.build requests.

An auth event is a short-lived, signed statement that binds the caller's
key to one HTTP method and one exact URL at one point in time. It is
carried in the Authorization header instead of a static API key:

    Authorization: Nostr <base64(compact JSON of the signed event)>

HARD GUARANTEES:
- One event per outbound request; events are never cached or reused
- The "u" and "method" tags are copied verbatim from the request
- The builder never fabricates pubkey, id or signature; only the signer
  populates them
"""

import base64
import binascii
import hashlib
import json
import logging
import time
from typing import Callable, List, Optional

from coincurve import PublicKeyXOnly
from pydantic import BaseModel, Field, ValidationError

from nostrbuild.app.core.errors import SignerError

logger = logging.getLogger("nostrbuild.auth_event")


HTTP_AUTH_KIND = 27235
AUTH_SCHEME = "Nostr"

URL_TAG = "u"
METHOD_TAG = "method"


class AuthEvent(BaseModel):
    """
    A Nostr event in wire field order.

    Field order matters: the header payload is the model dumped in
    declaration order.
    """

    id: str = ""
    pubkey: str = ""
    created_at: int
    kind: int = HTTP_AUTH_KIND
    tags: List[List[str]] = Field(default_factory=list)
    content: str = ""
    sig: str = ""

    def tag_values(self, name: str) -> List[str]:
        return [tag[1] for tag in self.tags if len(tag) >= 2 and tag[0] == name]

    def serialize_for_id(self) -> bytes:
        """
        NIP-01 canonical serialization used to derive the event id.
        """
        payload = [
            0,
            self.pubkey,
            self.created_at,
            self.kind,
            self.tags,
            self.content,
        ]
        return json.dumps(
            payload,
            separators=(",", ":"),
            ensure_ascii=False,
        ).encode("utf-8")

    def compute_id(self) -> str:
        return hashlib.sha256(self.serialize_for_id()).hexdigest()

    def to_json(self) -> str:
        return json.dumps(
            self.model_dump(),
            separators=(",", ":"),
            ensure_ascii=False,
        )


# A signer fills in pubkey, id and sig in place, or raises.
Signer = Callable[[AuthEvent], None]


# ----------------------------------------------------------------------
# Building
# ----------------------------------------------------------------------

def build_auth_event(
    method: str,
    url: str,
    signer: Signer,
    *,
    clock: Callable[[], float] = time.time,
) -> AuthEvent:
    """
    Build and sign an auth event bound to ``method`` and ``url``.

    Args:
        method:  HTTP verb exactly as it will be sent (e.g. "POST").
        url:     Final request URL exactly as it will be sent.
        signer:  Callable that populates pubkey, id and sig.
        clock:   Wall-clock source in seconds since the epoch.

    Raises:
        ValueError:   if method or url is empty.
        SignerError:  if the signer returns without pubkey, id or sig.
        Any exception raised by the signer propagates unchanged.
    """
    if not method:
        raise ValueError("auth event method must be a non-empty string")
    if not url:
        raise ValueError("auth event url must be a non-empty string")

    event = AuthEvent(
        created_at=int(clock()),
        kind=HTTP_AUTH_KIND,
        tags=[
            [URL_TAG, url],
            [METHOD_TAG, method],
        ],
    )

    signer(event)

    if not event.pubkey or not event.sig or not event.id:
        raise SignerError(
            "Signer returned without populating pubkey, id and sig"
        )

    logger.debug(
        "auth_event_signed",
        extra={
            "method": method,
            "url": url,
            "event_id": event.id,
            "created_at": event.created_at,
        },
    )
    return event


def encode_authorization_header(event: AuthEvent) -> str:
    encoded = base64.b64encode(event.to_json().encode("utf-8")).decode("ascii")
    return f"{AUTH_SCHEME} {encoded}"


# ----------------------------------------------------------------------
# Decoding and verification
# ----------------------------------------------------------------------

def decode_authorization_header(value: str) -> AuthEvent:
    """
    Parse an ``Authorization: Nostr ...`` header value back into an event.

    Raises ValueError on a wrong scheme, invalid base64 or invalid JSON.
    """
    scheme, _, token = value.strip().partition(" ")
    if scheme != AUTH_SCHEME or not token:
        raise ValueError(f"Expected '{AUTH_SCHEME} <token>' authorization")

    try:
        raw = base64.b64decode(token.strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Authorization token is not valid base64") from exc

    try:
        return AuthEvent.model_validate_json(raw)
    except ValidationError as exc:
        raise ValueError("Authorization token is not a valid event") from exc


def verify_auth_event(
    event: AuthEvent,
    *,
    method: Optional[str] = None,
    url: Optional[str] = None,
    now: Optional[float] = None,
    window_seconds: int = 60,
) -> bool:
    """
    Check an auth event the way a receiving service would.

    Verifies kind, id recomputation and the BIP-340 signature. When
    given, also checks that exactly one method/url tag matches and that
    created_at lies within ``window_seconds`` of ``now``.
    """
    if event.kind != HTTP_AUTH_KIND:
        return False

    if event.compute_id() != event.id:
        return False

    try:
        pubkey = PublicKeyXOnly(bytes.fromhex(event.pubkey))
        valid = pubkey.verify(
            bytes.fromhex(event.sig),
            bytes.fromhex(event.id),
        )
    except ValueError:
        return False

    if not valid:
        return False

    if method is not None and event.tag_values(METHOD_TAG) != [method]:
        return False

    if url is not None and event.tag_values(URL_TAG) != [url]:
        return False

    if now is not None and abs(now - event.created_at) > window_seconds:
        return False

    return True
