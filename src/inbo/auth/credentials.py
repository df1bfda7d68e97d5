# Credential Store — access/refresh token persistence with per-entry expiry.
#
# Both tokens are opaque strings. They are written together on login, the
# access token alone is replaced on refresh, and both are removed together
# on logout or when a refresh is rejected.

from __future__ import annotations

import json
import logging
import os
import stat
import time
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"

_DAY = 86400


@dataclass
class StoredToken:
    """One persisted credential entry."""

    value: str
    expires_at: float  # Unix timestamp

    def is_expired(self, now: float | None = None) -> bool:
        return (now if now is not None else time.time()) >= self.expires_at


@runtime_checkable
class CredentialStore(Protocol):
    """Get/set/clear interface the API client depends on."""

    def get_access_token(self) -> str | None: ...

    def get_refresh_token(self) -> str | None: ...

    def set_tokens(self, access_token: str, refresh_token: str) -> None: ...

    def set_access_token(self, access_token: str) -> None: ...

    def clear_tokens(self) -> None: ...


class _TTLStore(ABC):
    """Shared expiry handling; subclasses provide ``_read``/``_write``."""

    def __init__(self, access_ttl_days: int = 7, refresh_ttl_days: int = 30):
        self.access_ttl = access_ttl_days * _DAY
        self.refresh_ttl = refresh_ttl_days * _DAY

    @abstractmethod
    def _read(self) -> dict[str, StoredToken]:
        ...

    @abstractmethod
    def _write(self, entries: dict[str, StoredToken]) -> None:
        ...

    def _get(self, key: str) -> str | None:
        entry = self._read().get(key)
        if entry is None or entry.is_expired():
            return None
        return entry.value

    def get_access_token(self) -> str | None:
        return self._get(ACCESS_TOKEN_KEY)

    def get_refresh_token(self) -> str | None:
        return self._get(REFRESH_TOKEN_KEY)

    def set_tokens(self, access_token: str, refresh_token: str) -> None:
        now = time.time()
        self._write(
            {
                ACCESS_TOKEN_KEY: StoredToken(access_token, now + self.access_ttl),
                REFRESH_TOKEN_KEY: StoredToken(refresh_token, now + self.refresh_ttl),
            }
        )

    def set_access_token(self, access_token: str) -> None:
        entries = self._read()
        entries[ACCESS_TOKEN_KEY] = StoredToken(access_token, time.time() + self.access_ttl)
        self._write(entries)

    def clear_tokens(self) -> None:
        self._write({})


class MemoryCredentialStore(_TTLStore):
    """In-process store. Nothing survives the process."""

    def __init__(self, access_ttl_days: int = 7, refresh_ttl_days: int = 30):
        super().__init__(access_ttl_days, refresh_ttl_days)
        self._entries: dict[str, StoredToken] = {}

    def _read(self) -> dict[str, StoredToken]:
        return dict(self._entries)

    def _write(self, entries: dict[str, StoredToken]) -> None:
        self._entries = dict(entries)


class FileCredentialStore(_TTLStore):
    """File-based store at ``<config_dir>/credentials.json``.

    The file is chmod 0600 (owner-only read/write). Expired entries read as
    absent, the way an expired cookie would.
    """

    def __init__(
        self,
        path: Path,
        access_ttl_days: int = 7,
        refresh_ttl_days: int = 30,
    ):
        super().__init__(access_ttl_days, refresh_ttl_days)
        self.path = path

    def _read(self) -> dict[str, StoredToken]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
            if not isinstance(data, dict):
                raise ValueError(f"expected an object, got {type(data).__name__}")
            return {
                key: StoredToken(str(entry["value"]), float(entry["expires_at"]))
                for key, entry in data.items()
            }
        except (OSError, ValueError, TypeError, KeyError) as e:
            logger.warning("Ignoring unreadable credential file %s: %s", self.path, e)
            return {}

    def _write(self, entries: dict[str, StoredToken]) -> None:
        if not entries:
            if self.path.exists():
                self.path.unlink()
                logger.info("Cleared stored credentials")
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {key: asdict(entry) for key, entry in entries.items()}
        self.path.write_text(json.dumps(data, indent=2))
        os.chmod(self.path, stat.S_IRUSR | stat.S_IWUSR)
        logger.debug("Saved credentials (%s)", ", ".join(sorted(entries)))
