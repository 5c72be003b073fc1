"""
Client for the nostr.build media API with NIP-98 HTTP auth.
"""

from nostrbuild.app.core.config import Settings, get_settings
from nostrbuild.app.core.errors import (
    ConfigError,
    DecodeError,
    NostrBuildError,
    RemoteError,
    RequestCancelledError,
    RequestError,
    SignerError,
    TransportError,
)
from nostrbuild.app.schemas.media import (
    DeleteResult,
    Dimensions,
    MediaAsset,
    UploadResult,
)
from nostrbuild.app.services.auth_event import (
    AuthEvent,
    Signer,
    build_auth_event,
    decode_authorization_header,
    encode_authorization_header,
    verify_auth_event,
)
from nostrbuild.app.services.key_signer import KeySigner, decode_secret_key
from nostrbuild.app.services.media_client import (
    MediaClient,
    delete,
    rewrite_delete_url,
    upload,
)

__all__ = [
    "AuthEvent",
    "ConfigError",
    "DecodeError",
    "DeleteResult",
    "Dimensions",
    "KeySigner",
    "MediaAsset",
    "MediaClient",
    "NostrBuildError",
    "RemoteError",
    "RequestCancelledError",
    "RequestError",
    "Settings",
    "Signer",
    "SignerError",
    "TransportError",
    "UploadResult",
    "build_auth_event",
    "decode_authorization_header",
    "decode_secret_key",
    "delete",
    "encode_authorization_header",
    "get_settings",
    "rewrite_delete_url",
    "upload",
    "verify_auth_event",
]
