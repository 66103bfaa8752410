"""
Custom exceptions for the InnerTube client.
"""

from typing import Optional


class InnerTubeError(Exception):
    """Base exception for all InnerTube client errors."""


class TransportError(InnerTubeError):
    """Network, timeout or non-2xx failures after retries are exhausted."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        attempts: int = 1,
    ):
        super().__init__(message)
        self.status = status
        self.attempts = attempts


class SchemaMismatchError(InnerTubeError):
    """A required top-level response section is missing or malformed."""


class AuthRequiredError(InnerTubeError):
    """The request needs credentials the session does not have."""


class ConfigError(InnerTubeError):
    """Configuration errors."""
