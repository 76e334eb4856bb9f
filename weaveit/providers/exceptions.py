"""
Provider exceptions.
"""


class ProviderError(Exception):
    """Base exception for provider errors."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        self.message = message
        super().__init__(f"[{provider}] {message}")


class ProviderUnavailable(ProviderError):
    """Provider is not available (missing API key, package not installed, etc.)."""

    def __init__(self, provider: str, reason: str = "unavailable"):
        super().__init__(provider, f"Provider unavailable: {reason}")
        self.reason = reason


class ProviderResponseError(ProviderError):
    """Backend answered, but with an error status or an unusable body."""

    def __init__(self, provider: str, message: str, status_code: int | None = None):
        super().__init__(provider, message)
        self.status_code = status_code

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429
