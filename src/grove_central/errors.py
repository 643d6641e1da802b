"""Custom exceptions for the central directory client."""

from __future__ import annotations

import httpx

DEFAULT_SERVICE = "Grove"


class CentralError(Exception):
    """Base error for every failure raised by the central client."""


class CentralTransportError(CentralError):
    """Raised when a request never produced a response.

    Connection failures, timeouts and body read failures end up here. They
    are never retried by the client.
    """


class CentralDecodeError(CentralError):
    """Raised when a successful response body is not the expected JSON shape."""


class CentralStatusError(CentralError):
    """Raised when the service answers with a non-2xx status.

    Attributes:
        status_code: The HTTP status code returned by the server.
        method: Method of the originating request.
        url: Full URL of the originating request.
        service: Label of the remote service, used to group diagnostics.
    """

    def __init__(
        self,
        status_code: int,
        method: str,
        url: str,
        service: str = DEFAULT_SERVICE,
    ) -> None:
        self.status_code = status_code
        self.method = method
        self.url = url
        self.service = service
        super().__init__(f"{service}: {method} {url} returned HTTP {status_code}")


class CentralNotFoundError(CentralStatusError):
    """Raised when the server returns a 404 Not Found response."""


class CentralServerError(CentralStatusError):
    """Raised when the server returns a 5xx response."""


def error_from_response(
    request: httpx.Request,
    response: httpx.Response,
    service: str = DEFAULT_SERVICE,
) -> CentralStatusError | None:
    """Classify a response by its status code.

    The body is never inspected, so error responses are never decoded.

    Args:
        request: The request that produced ``response``.
        response: The received response.
        service: Label attached to the produced error.

    Returns:
        ``None`` for any 2xx status, otherwise the typed error the caller
        should raise without decoding the body.
    """
    status = response.status_code
    if 200 <= status < 300:
        return None

    if status == 404:
        error_cls: type[CentralStatusError] = CentralNotFoundError
    elif status >= 500:
        error_cls = CentralServerError
    else:
        error_cls = CentralStatusError
    return error_cls(
        status_code=status,
        method=request.method,
        url=str(request.url),
        service=service,
    )
