"""Custom exception classes for the image studio."""

from typing import Optional


class AkiError(Exception):
    """Base exception for all studio errors."""
    pass


class ConfigurationError(AkiError):
    """Configuration or credential errors detected at startup."""
    pass


class TransportError(AkiError):
    """Network or connection failure talking to a provider."""

    def __init__(self, provider: str, cause: BaseException):
        self.provider = provider
        self.cause = cause
        super().__init__(f"{provider} transport error: {type(cause).__name__}: {cause}")


class MalformedResponseError(AkiError):
    """Provider response does not have the expected shape."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        self.provider = provider
        self.status_code = status_code
        if status_code is not None:
            message = f"HTTP {status_code}: {message}"
        super().__init__(f"{provider} malformed response: {message}")


class InvalidRequestError(AkiError):
    """Request payload could not be serialized."""
    pass


class ImageConversionError(AkiError):
    """Local image encoding failed."""
    pass


class SessionBusyError(AkiError):
    """A session operation was started while another is in flight."""
    pass
