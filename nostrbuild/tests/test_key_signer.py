import pytest
from bech32 import bech32_encode, convertbits
from pydantic import SecretStr

from nostrbuild.app.core.errors import ConfigError
from nostrbuild.app.services.auth_event import AuthEvent
from nostrbuild.app.services.key_signer import KeySigner, decode_secret_key

from nostrbuild.tests.fixtures.service import PUBKEY_HEX, SECRET_HEX


def _bech32(hrp: str, raw: bytes) -> str:
    return bech32_encode(hrp, convertbits(raw, 8, 5))


def test_decode_hex_secret():
    assert decode_secret_key(SECRET_HEX) == bytes.fromhex(SECRET_HEX)


def test_decode_nsec_secret():
    raw = bytes.fromhex(SECRET_HEX)
    assert decode_secret_key(_bech32("nsec", raw)) == raw


def test_decode_rejects_public_key():
    npub = _bech32("npub", bytes.fromhex(PUBKEY_HEX))

    with pytest.raises(ConfigError, match="Expected an 'nsec' key"):
        decode_secret_key(npub)


def test_decode_rejects_wrong_length():
    short = _bech32("nsec", b"\x01" * 16)

    with pytest.raises(ConfigError, match="32 bytes"):
        decode_secret_key(short)


@pytest.mark.parametrize("value", ["", "   ", "nsec1notreallybech32", "zz" * 32])
def test_decode_rejects_garbage(value):
    with pytest.raises(ConfigError):
        decode_secret_key(value)


def test_signer_populates_pubkey_id_and_sig():
    event = AuthEvent(created_at=1_700_000_000, tags=[["u", "x"], ["method", "GET"]])

    KeySigner(SecretStr(SECRET_HEX))(event)

    assert event.pubkey == PUBKEY_HEX
    assert event.id == event.compute_id()
    assert len(bytes.fromhex(event.sig)) == 64


def test_public_key_matches_signed_events():
    signer = KeySigner(SECRET_HEX)
    event = AuthEvent(created_at=1_700_000_000)

    signer(event)

    assert signer.public_key_hex() == PUBKEY_HEX
    assert event.pubkey == signer.public_key_hex()


def test_public_key_needs_a_secret():
    with pytest.raises(ConfigError, match="NBCMD_NSEC is not set"):
        KeySigner(None).public_key_hex()


def test_missing_secret_fails_at_signing_time():
    signer = KeySigner(None)
    event = AuthEvent(created_at=1_700_000_000)

    with pytest.raises(ConfigError, match="NBCMD_NSEC is not set"):
        signer(event)

    assert event.sig == ""


def test_out_of_range_secret_is_a_config_error():
    with pytest.raises(ConfigError, match="secp256k1"):
        KeySigner("0" * 64)(AuthEvent(created_at=0))


def test_repr_hides_secret():
    assert SECRET_HEX not in repr(KeySigner(SECRET_HEX))
