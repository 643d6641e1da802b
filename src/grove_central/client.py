"""Async HTTP client for the central directory API."""

from __future__ import annotations

import asyncio
import copy
import logging
import time
from typing import Any, TypeVar
from urllib.parse import quote

import httpx

from .backoff import Backoff
from .config import API_PREFIX, SESSION_COOKIE, CentralConfig
from .decoding import decode_json
from .errors import (
    CentralDecodeError,
    CentralNotFoundError,
    CentralStatusError,
    CentralTransportError,
    error_from_response,
)
from .models import Application, Membership, User

T = TypeVar("T")

QueryParams = dict[str, str | int] | None

_CLIENT_OPTIONS = ("http_client", "logger")


class CentralClient:
    """Async client wrapping the read endpoints of the central directory API.

    Usage::

        async with CentralClient("https://central.example.com") as client:
            scoped = client.with_options(session_key=request_session)
            user = await scoped.get_user_by_identity(42)

    Calls may run concurrently on one client. The configuration is immutable;
    ``with_options()`` derives an independent client instead of mutating it.

    Args:
        config: A ``CentralConfig`` or the base URL of the service.
        http_client: Transport to send requests with. When omitted, the client
            creates one and closes it in ``close()``.
        session_key: Session token, overriding the one in ``config``.
        logger: Logger for request and retry messages. A child named
            ``central`` is used.
    """

    def __init__(
        self,
        config: CentralConfig | str,
        *,
        http_client: httpx.AsyncClient | None = None,
        session_key: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if isinstance(config, str):
            config = CentralConfig(base_url=config)
        if session_key is not None:
            config = config.with_overrides(session_key=session_key)
        self._config = config

        self._owns_client = http_client is None
        self._client = (
            http_client
            if http_client is not None
            else httpx.AsyncClient(timeout=config.timeout_seconds)
        )
        self._logger = (
            logger.getChild("central") if logger is not None else logging.getLogger(__name__)
        )

    @property
    def config(self) -> CentralConfig:
        """The immutable configuration of this client."""
        return self._config

    def with_options(self, **overrides: Any) -> CentralClient:
        """Derive a client with additional configuration.

        The derived client shares the transport but never closes it. This
        client is left unchanged.

        Args:
            **overrides: ``http_client``, ``logger``, or any ``CentralConfig``
                field such as ``session_key``.

        Returns:
            The new client.

        Raises:
            TypeError: If an override names an unknown option.
            ValueError: If ``http_client`` or ``logger`` is ``None``, or the
                resulting configuration is invalid.
        """
        client_overrides = {k: overrides.pop(k) for k in _CLIENT_OPTIONS if k in overrides}
        for name, value in client_overrides.items():
            if value is None:
                msg = f"{name} override must not be None"
                raise ValueError(msg)

        derived = copy.copy(self)
        derived._owns_client = False
        if overrides:
            derived._config = self._config.with_overrides(**overrides)
        if "http_client" in client_overrides:
            derived._client = client_overrides["http_client"]
        if "logger" in client_overrides:
            derived._logger = client_overrides["logger"].getChild("central")
        return derived

    async def __aenter__(self) -> CentralClient:
        """Enter the async context manager.

        Returns:
            The client instance.
        """
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Exit the async context manager, closing an owned HTTP client."""
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Request building
    # ------------------------------------------------------------------

    def _build_url(self, path: str, params: QueryParams = None) -> httpx.URL:
        """Compose ``<base-url>/api/central/v1<path>?<params>``."""
        url = httpx.URL(self._config.base_url).copy_with(path=API_PREFIX + path)
        if params is not None:
            url = url.copy_with(params=params)
        return url

    def _new_request(self, method: str, path: str, params: QueryParams = None) -> httpx.Request:
        """Build a request with JSON accept and session cookie headers.

        No I/O happens here; ``httpx.InvalidURL`` propagates if the URL
        cannot be built.
        """
        headers = {"Accept": "application/json"}
        if self._config.session_key:
            headers["Cookie"] = f"{SESSION_COOKIE}={self._config.session_key}"
        return self._client.build_request(method, self._build_url(path, params), headers=headers)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _check_response(
        self,
        request: httpx.Request,
        response: httpx.Response,
        started: float,
    ) -> CentralStatusError | None:
        """Log the exchange and classify its status.

        Returns:
            The error to raise immediately, or ``None`` to go on decoding.
        """
        self._logger.info(
            "%s %s status=%d time=%.3fs",
            request.method,
            request.url,
            response.status_code,
            time.monotonic() - started,
        )
        return error_from_response(request, response, self._config.service_name)

    async def _get(
        self,
        path: str,
        output_type: type[T] | Any,
        params: QueryParams = None,
    ) -> T:
        """Send a GET request and decode the JSON body into ``output_type``.

        Transport failures and non-2xx statuses are raised immediately.
        A body that cannot be decoded is retried after a jittered exponential
        backoff, with no limit on the number of attempts: if the service keeps
        answering 2xx with bad bodies, this never returns. Bound the call with
        ``asyncio.timeout()`` or cancel its task to stop it; the backoff sleep
        is cancelled promptly.

        Raises:
            CentralTransportError: If the request could not be completed.
            CentralStatusError: If the server returned a non-2xx status.
        """
        cfg = self._config.backoff
        backoff = Backoff(
            min_seconds=cfg.min_seconds,
            max_seconds=cfg.max_seconds,
            factor=cfg.factor,
            jitter=cfg.jitter,
        )

        while True:
            request = self._new_request("GET", path, params)
            started = time.monotonic()
            try:
                response = await self._client.send(request, stream=True)
            except httpx.RequestError as e:
                raise CentralTransportError(f"GET request to {request.url} failed: {e}") from e

            try:
                error = self._check_response(request, response, started)
                if error is not None:
                    raise error

                try:
                    content = await response.aread()
                except httpx.RequestError as e:
                    raise CentralTransportError(
                        f"GET request to {request.url} failed while reading body: {e}"
                    ) from e

                try:
                    return decode_json(content, output_type)
                except CentralDecodeError as e:
                    self._logger.warning("Response error, will retry: %s", e)
            finally:
                await response.aclose()

            await asyncio.sleep(backoff.duration())

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_memberships_by_identity(self, identity_id: int) -> list[Membership]:
        """Get the memberships of an identity.

        Args:
            identity_id: External identity identifier.

        Returns:
            The memberships, or an empty list if the identity is unknown.
        """
        try:
            memberships = await self._get(
                f"/identities/{identity_id}/memberships",
                list[Membership] | None,
            )
        except CentralNotFoundError:
            return []
        return memberships or []

    async def get_user_by_identity(self, identity_id: int) -> User | None:
        """Get the user bound to an identity.

        Args:
            identity_id: External identity identifier.

        Returns:
            The user, or ``None`` if there is none or the body is ``null``.
        """
        try:
            return await self._get(f"/users/by-identity/{identity_id}", User | None)
        except CentralNotFoundError:
            return None

    async def get_application_by_key(self, key: str) -> Application | None:
        """Get an application by its key.

        Args:
            key: Application key. It is sent as a single path segment.

        Returns:
            The application, or ``None`` if the key is unknown or the body is
            ``null``.
        """
        try:
            return await self._get(
                f"/applications/keys/{quote(key, safe='')}", Application | None
            )
        except CentralNotFoundError:
            return None
