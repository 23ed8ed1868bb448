"""Lifecycle hook capabilities an entity may implement.

Each capability is a single method taking the request context and the
transaction handle. Implementations may be coroutines or plain methods;
raising aborts the lifecycle sequence.
"""

from typing import Any, Protocol, runtime_checkable

from blar.core.context import RequestContext


@runtime_checkable
class BeforeCreate(Protocol):
    def before_create(self, ctx: RequestContext, tx: Any) -> Any: ...


@runtime_checkable
class AfterCreate(Protocol):
    def after_create(self, ctx: RequestContext, tx: Any) -> Any: ...


@runtime_checkable
class BeforeUpdate(Protocol):
    def before_update(self, ctx: RequestContext, tx: Any) -> Any: ...


@runtime_checkable
class AfterUpdate(Protocol):
    def after_update(self, ctx: RequestContext, tx: Any) -> Any: ...


@runtime_checkable
class BeforeDelete(Protocol):
    def before_delete(self, ctx: RequestContext, tx: Any) -> Any: ...


@runtime_checkable
class AfterDelete(Protocol):
    def after_delete(self, ctx: RequestContext, tx: Any) -> Any: ...


# hook method name -> capability
HOOK_CAPABILITIES: dict[str, type] = {
    "before_create": BeforeCreate,
    "after_create": AfterCreate,
    "before_update": BeforeUpdate,
    "after_update": AfterUpdate,
    "before_delete": BeforeDelete,
    "after_delete": AfterDelete,
}
