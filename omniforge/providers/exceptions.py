"""
Provider exceptions.
"""


class ProviderError(Exception):
    """Base exception for provider errors."""

    def __init__(self, provider: str, message: str, status_code: int = None):
        self.provider = provider
        self.message = message
        self.status_code = status_code
        super().__init__(f"[{provider}] {message}")


class ProviderUnavailable(ProviderError):
    """Provider is not available (missing API key, network error, etc.)."""

    def __init__(self, provider: str, reason: str = "unavailable"):
        super().__init__(provider, f"Provider unavailable: {reason}")
        self.reason = reason


class ProviderQuotaExceeded(ProviderError):
    """Provider rejected the call for billing or quota reasons."""

    BILLING_KEYWORDS = [
        "billing", "insufficient_quota", "exceeded", "quota",
        "payment", "credit", "balance", "limit reached",
        "insufficient_funds",
    ]

    def __init__(self, provider: str, detail: str, status_code: int = None):
        super().__init__(provider, f"Quota or billing error: {detail}", status_code)
        self.detail = detail

    @classmethod
    def matches(cls, status_code: int, error_text: str) -> bool:
        """Check if an error response is billing-related."""
        if status_code not in (400, 402, 429):
            return False
        error_lower = (error_text or "").lower()
        return any(kw in error_lower for kw in cls.BILLING_KEYWORDS)


class MalformedOutputError(Exception):
    """A provider returned output that could not be decoded into the expected shape."""

    def __init__(self, message: str, raw: str = ""):
        self.message = message
        self.raw = raw
        super().__init__(message)
