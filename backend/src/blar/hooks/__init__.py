"""Entity lifecycle hooks.

Entities opt in by defining any of six methods:
- before_create / after_create
- before_update / after_update
- before_delete / after_delete

Usage:
    @dataclass
    class Product:
        id: int = field(default=0, metadata=tag("pk"))
        price: float = 0.0

        async def before_create(self, ctx, tx):
            if self.price < 0:
                raise ValueError("price must not be negative")
"""

from blar.hooks.dispatcher import HookDispatcher
from blar.hooks.types import (
    HOOK_CAPABILITIES,
    AfterCreate,
    AfterDelete,
    AfterUpdate,
    BeforeCreate,
    BeforeDelete,
    BeforeUpdate,
)

VALID_HOOK_POINTS = tuple(HOOK_CAPABILITIES)

__all__ = [
    "AfterCreate",
    "AfterDelete",
    "AfterUpdate",
    "BeforeCreate",
    "BeforeDelete",
    "BeforeUpdate",
    "HOOK_CAPABILITIES",
    "HookDispatcher",
    "VALID_HOOK_POINTS",
]
