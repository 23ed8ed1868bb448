"""Request-scoped context passed to repository and hook calls."""

import threading
import time
from dataclasses import dataclass, field
from enum import Enum

from blar.errors import OperationCancelled


class Operation(Enum):
    """The lifecycle operation a request performs."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class RequestContext:
    """Cancellation and deadline state for one request.

    The core never creates deadlines itself; callers attach them and the
    storage driver checks the context before executing each statement.

    Attributes:
        entity_name: Name of the entity being operated on
        operation: The current operation, if known
        deadline: time.monotonic() value after which the request is expired
    """

    entity_name: str = ""
    operation: Operation | None = None
    deadline: float | None = None
    _cancelled: threading.Event = field(
        default_factory=threading.Event, repr=False, compare=False
    )

    @classmethod
    def with_timeout(cls, seconds: float, **kwargs) -> "RequestContext":
        """Create a context that expires `seconds` from now."""
        return cls(deadline=time.monotonic() + seconds, **kwargs)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def raise_if_done(self) -> None:
        """Raise OperationCancelled if cancelled or past the deadline."""
        if self.cancelled:
            raise OperationCancelled("request context was cancelled")
        if self.expired:
            raise OperationCancelled("request context deadline exceeded")
