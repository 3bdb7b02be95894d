"""Context variables with optional expiration.

Emulates the ``context`` object the host injects into scripts. Variables
live in memory for one script session and may carry a TTL; expired
entries are removed lazily, the first time a read observes them.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple

from blip_utils.errors import ExpirationError, NamingError

logger = logging.getLogger(__name__)

# Returned to scripts instead of an absent marker
MISSING_VALUE = ""


def _now_ms() -> int:
    """Return current epoch time in milliseconds."""
    return time.time_ns() // 1_000_000


class VariableName:
    """A validated, non-empty variable identifier."""

    __slots__ = ("_value",)

    def __init__(self, name: Any):
        if name is None or name == "":
            raise NamingError("'name' argument is required")
        if not isinstance(name, str):
            raise NamingError(f"'name' must be a string, got: {type(name).__name__}")
        self._value = name

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"VariableName({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, VariableName):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)


@dataclass
class VariableEntry:
    """A stored value and the epoch millisecond at which it expires.

    ``expires_at`` is None for entries that never expire.
    """

    value: Any
    expires_at: Optional[int] = None

    @classmethod
    def create(cls, value: Any, ttl_millis: int = 0) -> "VariableEntry":
        """Build an entry whose TTL starts now (0 = no expiration)."""
        expires_at = _now_ms() + ttl_millis if ttl_millis > 0 else None
        return cls(value=value, expires_at=expires_at)

    def is_expired(self) -> bool:
        return self.expires_at is not None and _now_ms() >= self.expires_at


class VariableRepository:
    """In-memory store of variable entries, owned by a single Context."""

    def __init__(self) -> None:
        self._store: Dict[str, VariableEntry] = {}

    def has(self, name: str) -> bool:
        """Check whether a live entry exists. Does not evict."""
        entry = self._store.get(name)
        return entry is not None and not entry.is_expired()

    def get(self, name: str) -> Any:
        """Get a live value, evicting the entry if it has expired.

        Args:
            name: Variable name.

        Returns:
            The stored value, or None if absent or expired.
        """
        entry = self._store.get(name)
        if entry is None:
            return None
        if entry.is_expired():
            del self._store[name]
            logger.debug(f"Variable '{name}' expired and was evicted")
            return None
        return entry.value

    def set(self, name: str, value: Any, ttl_millis: int = 0) -> None:
        """Store or replace a variable. A replaced entry loses its old TTL."""
        self._store[name] = VariableEntry.create(value, ttl_millis)
        logger.debug(f"Variable '{name}' set (ttl={ttl_millis}ms)")

    def delete(self, name: str) -> None:
        self._store.pop(name, None)

    def items(self) -> Iterator[Tuple[str, Any]]:
        """Yield live (name, value) pairs, evicting expired entries."""
        for name in list(self._store):
            entry = self._store[name]
            if entry.is_expired():
                del self._store[name]
                logger.debug(f"Variable '{name}' expired and was evicted")
                continue
            yield name, entry.value

    def __len__(self) -> int:
        return len(self._store)


class Context:
    """Asynchronous facade over a VariableRepository.

    The coroutines never suspend; they are async only to match the
    host's interface. Every call validates the variable name before
    touching the repository.
    """

    def __init__(self) -> None:
        self._repository = VariableRepository()

    async def get_variable_async(self, name: str) -> Any:
        """Get a variable's value.

        Args:
            name: Variable name.

        Returns:
            The stored value, or "" if the variable is absent or expired.

        Raises:
            NamingError: If name is missing, empty, or not a string.
        """
        value = self._repository.get(str(VariableName(name)))
        return MISSING_VALUE if value is None else value

    async def set_variable_async(self, name: str, value: Any, expiration: int = 0) -> None:
        """Set a variable, optionally expiring after ``expiration`` ms.

        A None value is stored as an empty dict.

        Args:
            name: Variable name.
            value: Value to store.
            expiration: Milliseconds until expiration (0 = never).

        Raises:
            NamingError: If name is missing, empty, or not a string.
            ExpirationError: If expiration is negative.
        """
        key = str(VariableName(name))
        if expiration < 0:
            raise ExpirationError()
        if value is None:
            value = {}
        self._repository.set(key, value, expiration)

    async def delete_variable_async(self, name: str) -> None:
        """Delete a variable. Deleting an absent variable is a no-op."""
        key = str(VariableName(name))
        if not self._repository.has(key):
            return
        self._repository.delete(key)

    def variables(self) -> Dict[str, Any]:
        """Snapshot of the live variables."""
        return dict(self._repository.items())
