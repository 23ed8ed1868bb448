"""Exception types raised by blar."""

from typing import Any


class BlarError(Exception):
    """Base exception for blar errors."""

    pass


class ParseError(BlarError):
    """Raised when a value cannot be resolved to an entity dataclass."""

    pass


class NoStorageConfigured(BlarError):
    """Raised when a repository or app is used without a storage driver."""

    def __init__(self, message: str = "database not configured: pass a storage driver"):
        super().__init__(message)


class NotFound(BlarError):
    """Raised when a single-row lookup finds no match."""

    def __init__(self, entity_name: str, id: Any):
        self.entity_name = entity_name
        self.id = id
        super().__init__(f"{entity_name} with id {id!r} not found")


class MissingPrimaryKey(BlarError):
    """Raised when an id-based operation targets an entity without a primary key."""

    def __init__(self, entity_name: str):
        self.entity_name = entity_name
        super().__init__(f"Entity '{entity_name}' declares no primary key")


class OperationCancelled(BlarError):
    """Raised when a request context was cancelled or its deadline passed."""

    pass


class HookError(BlarError):
    """Wraps the exception raised by a lifecycle hook.

    Attributes:
        hook: Hook method name (e.g. "before_create")
        original: The exception the hook raised, unmodified
    """

    def __init__(self, hook: str, original: BaseException):
        self.hook = hook
        self.original = original
        super().__init__(str(original))
