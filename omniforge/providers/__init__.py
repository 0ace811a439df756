"""
Providers Layer.

Exceptions shared by every generation capability wrapper.
"""
from .exceptions import (
    ProviderError,
    ProviderUnavailable,
    ProviderQuotaExceeded,
    MalformedOutputError,
)

__all__ = [
    "ProviderError",
    "ProviderUnavailable",
    "ProviderQuotaExceeded",
    "MalformedOutputError",
]
