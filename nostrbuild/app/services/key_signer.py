"""
Local key signer for HTTP auth events.

Holds a Nostr secret key (``nsec1...`` bech32 or 64 hex characters) and
signs events with BIP-340 Schnorr over secp256k1, as NIP-01 requires.

The secret is decoded lazily, at signing time. A missing or malformed
secret therefore fails the one call that needed a signature, with a
ConfigError, and never partially sends a request.
"""

import logging
import re
from typing import Optional, Union

from bech32 import bech32_decode, convertbits
from coincurve import PrivateKey, PublicKeyXOnly
from pydantic import SecretStr

from nostrbuild.app.core.errors import ConfigError
from nostrbuild.app.services.auth_event import AuthEvent

logger = logging.getLogger("nostrbuild.key_signer")


SECRET_KEY_HRP = "nsec"
_HEX_KEY_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def decode_secret_key(secret: str) -> bytes:
    """
    Decode a secret key into its 32 raw bytes.

    Each way the value can be wrong has its own error branch; nothing is
    assumed about what a successful bech32 decode contains.
    """
    value = secret.strip()
    if not value:
        raise ConfigError("Secret key is empty")

    if _HEX_KEY_RE.match(value):
        return bytes.fromhex(value)

    hrp, data = bech32_decode(value)
    if hrp is None or data is None:
        raise ConfigError("Secret key is neither hex nor valid bech32")

    if hrp != SECRET_KEY_HRP:
        raise ConfigError(
            f"Expected an '{SECRET_KEY_HRP}' key, got '{hrp}'"
        )

    decoded = convertbits(data, 5, 8, False)
    if decoded is None:
        raise ConfigError("Secret key has invalid bech32 padding")

    raw = bytes(decoded)
    if len(raw) != 32:
        raise ConfigError(
            f"Secret key must be 32 bytes, got {len(raw)}"
        )
    return raw


class KeySigner:
    """
    Callable signer backed by an in-memory secret key.

    Instances carry no mutable state between calls; a failed signature
    leaves nothing behind that could affect the next one.
    """

    def __init__(self, secret: Optional[Union[str, SecretStr]]):
        if isinstance(secret, SecretStr):
            secret = secret.get_secret_value()
        self._secret = secret

    def _private_key(self) -> PrivateKey:
        if not self._secret:
            raise ConfigError("NBCMD_NSEC is not set")

        raw = decode_secret_key(self._secret)
        try:
            return PrivateKey(raw)
        except ValueError as exc:
            raise ConfigError("Secret key is not a valid secp256k1 key") from exc

    @staticmethod
    def _xonly_hex(private_key: PrivateKey) -> str:
        return PublicKeyXOnly.from_secret(private_key.secret).format().hex()

    def public_key_hex(self) -> str:
        return self._xonly_hex(self._private_key())

    def __call__(self, event: AuthEvent) -> None:
        private_key = self._private_key()

        event.pubkey = self._xonly_hex(private_key)
        event.id = event.compute_id()
        event.sig = private_key.sign_schnorr(bytes.fromhex(event.id)).hex()

        logger.debug(
            "event_signed",
            extra={"event_id": event.id, "pubkey": event.pubkey},
        )

    def __repr__(self) -> str:
        return "KeySigner(secret='**********')"
