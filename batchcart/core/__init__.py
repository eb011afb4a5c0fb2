# Core configuration and shared utilities

from .config import Settings, get_settings
from .errors import (
    ErrorKind,
    StorefrontError,
    PreconditionError,
    ValidationRejected,
    RemoteError,
    normalize_error,
)
from .liveness import Liveness

__all__ = [
    "Settings",
    "get_settings",
    "ErrorKind",
    "StorefrontError",
    "PreconditionError",
    "ValidationRejected",
    "RemoteError",
    "normalize_error",
    "Liveness",
]
