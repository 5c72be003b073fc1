"""
Error taxonomy for nostr.build calls.

Every failure of an upload or delete call surfaces as exactly one of
these types. Nothing here is retried or recovered locally; the caller
decides what to do.
"""


class NostrBuildError(RuntimeError):
    """Base class for all client failures."""


class ConfigError(NostrBuildError):
    """Raised when the signing secret or client configuration is unusable."""


class SignerError(ConfigError):
    """Raised when a signer returns an event without pubkey or signature."""


class TransportError(NostrBuildError):
    """Raised when the request could not be delivered or answered."""


class RequestCancelledError(TransportError):
    """Raised when an in-flight request is aborted by a timeout or deadline."""


class RemoteError(NostrBuildError):
    """
    Raised when the service answers with a non-200 status.

    The body is kept verbatim. Error bodies have no fixed schema and are
    never parsed.
    """

    def __init__(self, status_code: int, body: str):
        super().__init__(body)
        self.status_code = status_code
        self.body = body


# Name used by callers that think in terms of "the request failed remotely".
RequestError = RemoteError


class DecodeError(NostrBuildError):
    """Raised when a 200 response does not match the expected schema."""
