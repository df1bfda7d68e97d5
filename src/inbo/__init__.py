"""Async client for the Inbo newsletter backend."""

from inbo.api.client import ApiClient
from inbo.auth.credentials import FileCredentialStore, MemoryCredentialStore
from inbo.cache import ResponseCache
from inbo.config import Settings, get_settings
from inbo.errors import ApiError, InboError, SessionExpiredError, UnauthorizedError

__version__ = "0.1.0"

__all__ = [
    "ApiClient",
    "ApiError",
    "FileCredentialStore",
    "InboError",
    "MemoryCredentialStore",
    "ResponseCache",
    "SessionExpiredError",
    "Settings",
    "UnauthorizedError",
    "get_settings",
]
