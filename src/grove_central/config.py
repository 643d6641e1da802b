"""Configuration for the central directory client.

Configuration values are frozen dataclasses validated at construction.
Per-call customization goes through ``with_overrides()``, which returns a new
instance and leaves the shared one untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import urlsplit

from .errors import DEFAULT_SERVICE

API_PREFIX = "/api/central/v1"
SESSION_COOKIE = "checkpoint.session"


@dataclass(frozen=True)
class BackoffConfig:
    """Delays used between retries of undecodable responses.

    Attributes:
        min_seconds: First delay.
        max_seconds: Upper bound for any delay.
        factor: Growth multiplier between attempts.
        jitter: If True, randomize each delay.
    """

    min_seconds: float = 0.1
    max_seconds: float = 10.0
    factor: float = 2.0
    jitter: bool = True

    def __post_init__(self) -> None:
        if self.min_seconds <= 0:
            msg = f"backoff.min_seconds must be positive, got {self.min_seconds}"
            raise ValueError(msg)
        if self.max_seconds < self.min_seconds:
            msg = (
                f"backoff.max_seconds ({self.max_seconds}) must be >= "
                f"backoff.min_seconds ({self.min_seconds})"
            )
            raise ValueError(msg)
        if self.factor < 1:
            msg = f"backoff.factor must be >= 1, got {self.factor}"
            raise ValueError(msg)


@dataclass(frozen=True)
class CentralConfig:
    """Settings of a ``CentralClient``.

    Attributes:
        base_url: Root URL of the central service. Its path is replaced by
            the API prefix when requests are built.
        session_key: Session token sent as the ``checkpoint.session`` cookie.
            Empty strings are normalized to ``None``.
        timeout_seconds: Request timeout for a transport created by the client.
        backoff: Retry delays for undecodable responses.
        service_name: Label attached to status errors.
    """

    base_url: str
    session_key: str | None = None
    timeout_seconds: float = 30.0
    backoff: BackoffConfig = field(default_factory=BackoffConfig)
    service_name: str = DEFAULT_SERVICE

    def __post_init__(self) -> None:
        parts = urlsplit(self.base_url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            msg = f"base_url must be an absolute http(s) URL, got {self.base_url!r}"
            raise ValueError(msg)
        if self.timeout_seconds <= 0:
            msg = f"timeout_seconds must be positive, got {self.timeout_seconds}"
            raise ValueError(msg)
        if not self.session_key:
            # frozen dataclass: bypass __setattr__ for normalization
            object.__setattr__(self, "session_key", None)

    def with_overrides(self, **changes: Any) -> CentralConfig:
        """Return a validated copy with ``changes`` applied.

        Raises:
            TypeError: If a change names an unknown field.
            ValueError: If the resulting configuration is invalid.
        """
        return replace(self, **changes)
