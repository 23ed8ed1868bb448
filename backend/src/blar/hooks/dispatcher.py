"""Dispatch lifecycle hooks implemented by entity instances."""

import inspect
import logging
from typing import Any

from blar.core.context import RequestContext
from blar.errors import HookError
from blar.hooks.types import HOOK_CAPABILITIES

logger = logging.getLogger(__name__)


class HookDispatcher:
    """Invokes an entity's optional lifecycle hooks.

    An entity that does not implement a capability is a no-op success.
    Sequencing (before hook -> storage -> after hook) belongs to the
    caller, which must skip the storage operation when a before hook fails.
    """

    async def dispatch(
        self, hook_name: str, ctx: RequestContext, entity: Any, tx: Any
    ) -> bool:
        """Run one hook if the entity implements it.

        Returns:
            True if the hook ran, False if the entity lacks the capability

        Raises:
            HookError: Wrapping whatever the hook raised
        """
        capability = HOOK_CAPABILITIES[hook_name]
        if not isinstance(entity, capability):
            return False

        try:
            result = getattr(entity, hook_name)(ctx, tx)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(
                "%s hook on %s failed: %s", hook_name, type(entity).__name__, e
            )
            raise HookError(hook_name, e) from e
        return True

    async def call_before_create(self, ctx: RequestContext, entity: Any, tx: Any) -> bool:
        return await self.dispatch("before_create", ctx, entity, tx)

    async def call_after_create(self, ctx: RequestContext, entity: Any, tx: Any) -> bool:
        return await self.dispatch("after_create", ctx, entity, tx)

    async def call_before_update(self, ctx: RequestContext, entity: Any, tx: Any) -> bool:
        return await self.dispatch("before_update", ctx, entity, tx)

    async def call_after_update(self, ctx: RequestContext, entity: Any, tx: Any) -> bool:
        return await self.dispatch("after_update", ctx, entity, tx)

    async def call_before_delete(self, ctx: RequestContext, entity: Any, tx: Any) -> bool:
        return await self.dispatch("before_delete", ctx, entity, tx)

    async def call_after_delete(self, ctx: RequestContext, entity: Any, tx: Any) -> bool:
        return await self.dispatch("after_delete", ctx, entity, tx)
