from inbo.auth.credentials import (
    CredentialStore,
    FileCredentialStore,
    MemoryCredentialStore,
    StoredToken,
)

__all__ = [
    "CredentialStore",
    "FileCredentialStore",
    "MemoryCredentialStore",
    "StoredToken",
]
