"""
Storefront error taxonomy

Every failure that reaches presentation code is one of:
- PreconditionError: blocked locally, never sent to the server
- ValidationRejected: an expected business outcome (stock, minimum order)
- RemoteError: transport or server failure, message already normalized

Remote error payloads come in several shapes (plain strings, FastAPI
validation lists, ``{"errors": [...]}``, ``{"detail": {"errors": [...]}}``).
They are all flattened into one readable string here.
"""

import logging
from enum import Enum
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."
NETWORK_ERROR_MESSAGE = "Unable to reach the store. Please try again."

# Location prefixes FastAPI adds to validation errors
_LOCATION_PREFIXES = ("body", "query", "path", "header")


class ErrorKind(str, Enum):
    """Category of a failed storefront operation"""
    PRECONDITION = "precondition"
    VALIDATION = "validation"
    TRANSPORT = "transport"
    IN_FLIGHT = "in_flight"


class StorefrontError(Exception):
    """Base exception for storefront client errors"""

    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PreconditionError(StorefrontError):
    """Action blocked before any network call"""

    kind = ErrorKind.PRECONDITION

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class ValidationRejected(StorefrontError):
    """Business validation failed (stock shortfall, minimum order)"""

    kind = ErrorKind.VALIDATION

    def __init__(self, reasons: list[str]):
        super().__init__("; ".join(reasons) if reasons else GENERIC_ERROR_MESSAGE)
        self.reasons = list(reasons)


class RemoteError(StorefrontError):
    """Remote call failed; ``message`` is always a plain string"""

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def extract_error_messages(payload: Any) -> list[str]:
    """Flatten a remote error payload into a list of readable messages"""
    if payload is None:
        return []

    if isinstance(payload, str):
        text = payload.strip()
        return [text] if text else []

    if isinstance(payload, (list, tuple)):
        messages: list[str] = []
        for entry in payload:
            messages.extend(extract_error_messages(entry))
        return messages

    if isinstance(payload, dict):
        # FastAPI validation entry: {"loc": [...], "msg": "...", "type": "..."}
        if "msg" in payload:
            message = str(payload["msg"]).strip()
            location = payload.get("loc")
            if isinstance(location, (list, tuple)):
                field = ".".join(
                    str(part) for part in location if part not in _LOCATION_PREFIXES
                )
                if field:
                    return [f"{field}: {message}"]
            return [message] if message else []

        for key in ("errors", "detail", "error", "message"):
            if key in payload:
                messages = extract_error_messages(payload[key])
                if messages:
                    return messages

    return []


def response_error_messages(response: httpx.Response) -> list[str]:
    """Error messages carried by an HTTP response body"""
    try:
        payload = response.json()
    except ValueError:
        return []
    return extract_error_messages(payload)


def normalize_error(error: Any) -> str:
    """Reduce any error shape to a single human-readable string"""
    if isinstance(error, StorefrontError):
        return error.message

    if isinstance(error, httpx.HTTPStatusError):
        messages = response_error_messages(error.response)
        return "; ".join(messages) if messages else GENERIC_ERROR_MESSAGE

    if isinstance(error, httpx.TransportError):
        return NETWORK_ERROR_MESSAGE

    if isinstance(error, BaseException):
        return GENERIC_ERROR_MESSAGE

    messages = extract_error_messages(error)
    return "; ".join(messages) if messages else GENERIC_ERROR_MESSAGE


def to_remote_error(error: Exception) -> RemoteError:
    """Wrap a transport/HTTP exception as a RemoteError"""
    if isinstance(error, RemoteError):
        return error

    status_code = None
    if isinstance(error, httpx.HTTPStatusError):
        status_code = error.response.status_code

    message = normalize_error(error)
    logger.debug(f"Normalized remote error ({type(error).__name__}): {message}")
    return RemoteError(message, status_code=status_code)
