"""Thread-safe bookkeeping of per-file access permissions."""

from __future__ import annotations

import enum
import threading

MAX_PERM_FILES = 100


class Permission(enum.Enum):
    """Access level recorded for a file written to the server."""

    READWRITE = "READWRITE"
    READONLY = "READONLY"


class PermissionTable:
    """A bounded table mapping file names to their permission.

    Files without an entry are treated as freely writable.  Once the table
    holds ``capacity`` entries, permissions for new files are not recorded.
    """

    def __init__(self, capacity: int = MAX_PERM_FILES) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self.capacity = capacity
        self._entries: dict[str, Permission] = {}
        self._lock = threading.Lock()

    def check(self, filename: str, require_write: bool = False) -> bool:
        """Return whether the requested access to ``filename`` is allowed."""
        with self._lock:
            permission = self._entries.get(filename)
        if permission is None or not require_write:
            return True
        return permission is Permission.READWRITE

    def set(self, filename: str, permission: Permission) -> None:
        """Record ``permission`` for ``filename``, updating any existing entry."""
        with self._lock:
            if filename in self._entries or len(self._entries) < self.capacity:
                self._entries[filename] = permission

    def discard(self, filename: str) -> None:
        """Forget the entry for ``filename`` if there is one."""
        with self._lock:
            self._entries.pop(filename, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, filename: object) -> bool:
        with self._lock:
            return filename in self._entries