import logging
import posixpath
import time
from typing import Callable, Optional, Type, TypeVar
from urllib.parse import urlsplit, urlunsplit

import anyio
import httpx
from pydantic import BaseModel, ValidationError

from nostrbuild.app.core.config import Settings, get_app_version, get_settings
from nostrbuild.app.core.errors import (
    DecodeError,
    RemoteError,
    RequestCancelledError,
    TransportError,
)
from nostrbuild.app.schemas.media import DeleteResult, UploadResult
from nostrbuild.app.services.auth_event import (
    Signer,
    build_auth_event,
    encode_authorization_header,
)

logger = logging.getLogger("nostrbuild.media_client")

ResultT = TypeVar("ResultT", bound=BaseModel)


UPLOAD_PATH = "/api/v2/upload/files"
DELETE_PATH = "/api/v2/nip96/upload"
UPLOAD_FIELD = "fileToUpload"


def rewrite_delete_url(asset_url: str, service_host: str) -> str:
    """
    Map any asset URL onto the service's delete endpoint.

    The host is forced to ``service_host`` and the path becomes the
    delete prefix joined with the last segment of the original path, so
    size-variant directories (e.g. ``/thumb/``, ``/responsive/240p/``)
    are discarded. Scheme, query and fragment are kept.

    Input that does not parse as an absolute URL is returned verbatim;
    the request is still attempted against it. This includes scheme-less
    host paths such as ``image.nostr.build/i/abc.png``: without a scheme
    the first segment cannot be told apart from a relative path, so no
    host is guessed.
    """
    try:
        parts = urlsplit(asset_url)
    except ValueError:
        return asset_url

    if not parts.scheme or not parts.netloc:
        return asset_url

    basename = posixpath.basename(parts.path.rstrip("/"))
    path = f"{DELETE_PATH}/{basename}" if basename else DELETE_PATH

    return urlunsplit(
        (parts.scheme, service_host, path, parts.query, parts.fragment)
    )


class MediaClient:
    """
    Async client for the nostr.build media API.

    HARD GUARANTEES:
    - One attempt per call; nothing is retried
    - A fresh auth event per request, bound to the exact method and URL
      that is sent
    - No state shared between calls beyond the transport's own pooling
    - signer=None must be passed explicitly to send unauthenticated
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: Settings,
        *,
        clock: Callable[[], float] = time.time,
    ):
        self.client = http_client
        self.settings = settings
        self._clock = clock

    # ------------------------------------------------------------------
    # URLs
    # ------------------------------------------------------------------

    def upload_url(self) -> str:
        return f"{self.settings.base_url}{UPLOAD_PATH}"

    def delete_url(self, asset_url: str) -> str:
        return rewrite_delete_url(asset_url, self.settings.service_host)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def upload(
        self,
        file_bytes: bytes,
        *,
        signer: Optional[Signer],
        filename: str = UPLOAD_FIELD,
        content_type: str = "application/octet-stream",
        timeout: Optional[float] = None,
    ) -> UploadResult:
        """
        Upload a complete, already-read file.

        Returns:
            UploadResult with at least one asset; ``primary_url`` is the
            first asset's URL.

        Raises:
            ConfigError, TransportError, RequestCancelledError,
            RemoteError, DecodeError
        """
        if not isinstance(file_bytes, (bytes, bytearray)):
            raise TypeError(
                "upload expects the complete file as bytes, "
                f"got {type(file_bytes).__name__}"
            )

        url = self.upload_url()
        request = self._build_request(
            "POST",
            url,
            files={
                UPLOAD_FIELD: (filename, bytes(file_bytes), content_type),
            },
        )
        self._authorize(request, signer)

        logger.info(
            "upload_started",
            extra={
                "url": url,
                "size": len(file_bytes),
                "authenticated": signer is not None,
            },
        )

        response = await self._send(request, timeout)
        result = self._decode(response, UploadResult)

        logger.info(
            "upload_succeeded",
            extra={"url": result.primary_url, "assets": len(result.data)},
        )
        return result

    async def delete(
        self,
        asset_url: str,
        *,
        signer: Optional[Signer],
        timeout: Optional[float] = None,
    ) -> DeleteResult:
        """
        Delete a previously uploaded asset by its URL.

        The rewritten delete URL, not ``asset_url``, is both the request
        target and the URL bound into the auth event, in the encoded form
        httpx sends.
        """
        url = self.delete_url(asset_url)
        logger.debug(
            "delete_url_rewritten",
            extra={"asset_url": asset_url, "url": url},
        )

        request = self._build_request("DELETE", url)
        self._authorize(request, signer)

        response = await self._send(request, timeout)
        result = self._decode(response, DeleteResult)

        logger.info("delete_succeeded", extra={"url": url})
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _authorize(
        self,
        request: httpx.Request,
        signer: Optional[Signer],
    ) -> None:
        # Bind the URL exactly as it goes on the wire, after httpx encoding.
        if signer is None:
            return

        event = build_auth_event(
            request.method,
            str(request.url),
            signer,
            clock=self._clock,
        )
        request.headers["Authorization"] = encode_authorization_header(event)

    def _build_request(self, method: str, url: str, **kwargs) -> httpx.Request:
        try:
            return self.client.build_request(method, url, **kwargs)
        except httpx.InvalidURL as exc:
            raise TransportError(f"Cannot send {method} to {url!r}: {exc}") from exc

    async def _send(
        self,
        request: httpx.Request,
        timeout: Optional[float],
    ) -> httpx.Response:
        deadline = (
            timeout
            if timeout is not None
            else self.settings.request_timeout_seconds
        )

        try:
            with anyio.fail_after(deadline):
                return await self.client.send(request)
        except TimeoutError as exc:
            logger.warning(
                "request_deadline_exceeded",
                extra={"method": request.method, "deadline": deadline},
            )
            raise RequestCancelledError(
                f"{request.method} {request.url} aborted after {deadline}s"
            ) from exc
        except httpx.TimeoutException as exc:
            logger.warning(
                "request_timed_out",
                extra={"method": request.method, "error_type": type(exc).__name__},
            )
            raise RequestCancelledError(
                f"{request.method} {request.url} timed out: {exc}"
            ) from exc
        except httpx.TransportError as exc:
            logger.warning(
                "request_transport_failed",
                extra={"method": request.method, "error_type": type(exc).__name__},
            )
            raise TransportError(
                f"{request.method} {request.url} failed: {exc}"
            ) from exc

    def _decode(
        self,
        response: httpx.Response,
        model: Type[ResultT],
    ) -> ResultT:
        if response.status_code != 200:
            body = response.text
            logger.warning(
                "remote_request_failed",
                extra={
                    "status_code": response.status_code,
                    "response_body": body,
                },
            )
            raise RemoteError(response.status_code, body)

        try:
            return model.model_validate_json(response.content)
        except ValidationError as exc:
            logger.error(
                "response_decode_failed",
                extra={"model": model.__name__, "errors": exc.error_count()},
            )
            raise DecodeError(
                f"Response does not match {model.__name__}: {exc}"
            ) from exc


# ----------------------------------------------------------------------
# One-shot helpers
# ----------------------------------------------------------------------

def create_http_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            timeout=settings.request_timeout_seconds,
            connect=10.0,
        ),
        headers={"User-Agent": f"nostrbuild/{get_app_version()}"},
    )


async def upload(
    file_bytes: bytes,
    *,
    signer: Optional[Signer],
    settings: Optional[Settings] = None,
    **kwargs,
) -> UploadResult:
    """Upload with a short-lived HTTP client."""
    settings = settings or get_settings()
    async with create_http_client(settings) as http_client:
        return await MediaClient(http_client, settings).upload(
            file_bytes, signer=signer, **kwargs
        )


async def delete(
    asset_url: str,
    *,
    signer: Optional[Signer],
    settings: Optional[Settings] = None,
    timeout: Optional[float] = None,
) -> DeleteResult:
    """Delete with a short-lived HTTP client."""
    settings = settings or get_settings()
    async with create_http_client(settings) as http_client:
        return await MediaClient(http_client, settings).delete(
            asset_url, signer=signer, timeout=timeout
        )
