"""
Error taxonomy shared by the relay and the client

The relay raises RelayError subclasses and renders them as {"error": message}.
The client turns any failed round-trip into an AnalysisError.
"""

from enum import Enum
from typing import Optional

import httpx
import openai


class ErrorKind(str, Enum):
    """Failure categories surfaced to the user"""

    MISSING_INPUT = "missing-input"
    MISSING_CREDENTIAL = "missing-credential"
    INVALID_PROVIDER_RESPONSE = "invalid-provider-response"
    PROVIDER_AUTH_FAILURE = "provider-auth-failure"
    PROVIDER_QUOTA_EXCEEDED = "provider-quota-exceeded"
    NETWORK_FAILURE = "network-failure"
    GENERIC = "generic"


class PhotoErrorCode(str, Enum):
    """Reasons a user-selected photo is rejected"""

    INVALID_FORMAT = "invalid-format"
    FILE_TOO_LARGE = "file-too-large"
    PROCESSING_ERROR = "processing-error"


# Relay error messages (wire contract, do not localize)
NO_IMAGE_PROVIDED = "No image provided"
INVALID_REQUEST_BODY = "Invalid request body"
API_KEY_NOT_CONFIGURED = "OpenAI API key not configured"
INVALID_API_KEY = "Invalid API key"
QUOTA_EXCEEDED = "API quota exceeded"
INTERNAL_ANALYSIS_ERROR = "Internal server error during analysis"
NO_MODEL_RESPONSE = "No response from AI model"
PARSE_FAILED = "Failed to parse AI response"
INVALID_FORMAT = "Invalid response format from AI"
PDF_GENERATION_FAILED = "Failed to generate PDF report"


class RelayError(Exception):
    """Error raised by the relay, rendered as an HTTP error response"""

    def __init__(
        self,
        kind: ErrorKind,
        status_code: int,
        message: str,
    ):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code
        self.message = message

    @classmethod
    def missing_input(cls) -> "RelayError":
        return cls(ErrorKind.MISSING_INPUT, 400, NO_IMAGE_PROVIDED)

    @classmethod
    def missing_credential(cls) -> "RelayError":
        return cls(ErrorKind.MISSING_CREDENTIAL, 500, API_KEY_NOT_CONFIGURED)


class InvalidModelResponse(RelayError):
    """The model answered, but not with a usable risk report"""

    def __init__(self, message: str):
        super().__init__(ErrorKind.INVALID_PROVIDER_RESPONSE, 500, message)


class PhotoValidationError(Exception):
    """A selected photo failed validation or could not be read"""

    def __init__(self, code: PhotoErrorCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class AnalysisError(Exception):
    """Client-side failure of an analysis round-trip"""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code


def classify_provider_error(exc: Exception) -> RelayError:
    """
    Map an exception raised by the vision model call to a relay error

    Typed OpenAI errors are checked first; anything else falls back to
    matching the provider's message text.
    """
    if isinstance(exc, openai.AuthenticationError):
        return RelayError(ErrorKind.PROVIDER_AUTH_FAILURE, 401, INVALID_API_KEY)
    if isinstance(exc, openai.RateLimitError):
        return RelayError(ErrorKind.PROVIDER_QUOTA_EXCEEDED, 429, QUOTA_EXCEEDED)

    message = str(exc)
    if "API key" in message:
        return RelayError(ErrorKind.PROVIDER_AUTH_FAILURE, 401, INVALID_API_KEY)
    if "quota" in message:
        return RelayError(ErrorKind.PROVIDER_QUOTA_EXCEEDED, 429, QUOTA_EXCEEDED)
    return RelayError(ErrorKind.GENERIC, 500, INTERNAL_ANALYSIS_ERROR)


def classify_failure_message(message: str) -> ErrorKind:
    """Pick the user-facing category for a failed analysis message"""
    if "API key" in message:
        if "not configured" in message:
            return ErrorKind.MISSING_CREDENTIAL
        return ErrorKind.PROVIDER_AUTH_FAILURE
    if "quota" in message:
        return ErrorKind.PROVIDER_QUOTA_EXCEEDED
    if "network" in message or "fetch" in message:
        return ErrorKind.NETWORK_FAILURE
    return ErrorKind.GENERIC


def analysis_error_from_exception(exc: Exception) -> AnalysisError:
    """Wrap a transport or decoding failure raised by the HTTP client"""
    if isinstance(exc, AnalysisError):
        return exc
    if isinstance(exc, httpx.TransportError):
        return AnalysisError(
            ErrorKind.NETWORK_FAILURE,
            f"network error while contacting the relay: {str(exc) or exc.__class__.__name__}",
        )
    message = str(exc) or exc.__class__.__name__
    return AnalysisError(classify_failure_message(message), message)
