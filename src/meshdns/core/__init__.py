"""Core library modules for mesh DNS integration."""

from meshdns.core.errors import (
    APIFailureError,
    MalformedDataError,
    MeshDNSError,
    MissingResourceError,
    NoKnownProviderError,
    UnsupportedVersionError,
)
from meshdns.core.models import MeshDNSSettings, Provider

__all__ = [
    "APIFailureError",
    "MalformedDataError",
    "MeshDNSError",
    "MeshDNSSettings",
    "MissingResourceError",
    "NoKnownProviderError",
    "Provider",
    "UnsupportedVersionError",
]
