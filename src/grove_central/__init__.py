"""Async Python client for the Grove central directory API."""

from .client import CentralClient
from .config import BackoffConfig, CentralConfig
from .errors import (
    CentralDecodeError,
    CentralError,
    CentralNotFoundError,
    CentralServerError,
    CentralStatusError,
    CentralTransportError,
)
from .models import Application, Membership, Organization, Role, User

__all__ = [
    # Client
    "CentralClient",
    # Configuration
    "BackoffConfig",
    "CentralConfig",
    # Errors
    "CentralDecodeError",
    "CentralError",
    "CentralNotFoundError",
    "CentralServerError",
    "CentralStatusError",
    "CentralTransportError",
    # Records
    "Application",
    "Membership",
    "Organization",
    "Role",
    "User",
]
