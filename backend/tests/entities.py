"""Entity dataclasses shared by the test suite."""

from dataclasses import dataclass, field
from typing import ClassVar

from blar.metadata import tag


@dataclass
class User:
    id: int = field(default=0, metadata=tag("pk"))
    name: str = ""
    email: str = ""


@dataclass
class Product:
    id: int = field(default=0, metadata=tag("pk", storage="primaryKey"))
    name: str = ""
    price: float = 0.0
    quantity: int = field(default=0, metadata=tag("readonly"))
    secret: str = field(default="", metadata=tag("hidden"))


@dataclass
class Address:
    street: str = ""
    city: str = ""


@dataclass
class Customer:
    id: int = field(default=0, metadata=tag("pk"))
    name: str = ""
    address: Address = field(default_factory=Address, metadata=tag("nested"))
    billing: Address | None = field(default=None, metadata=tag("nested"))
    _internal: str = ""


@dataclass
class OrderLine:
    __storage__: ClassVar[str] = "table:order_items"

    id: int = field(default=0, metadata=tag("pk"))
    order_id: int = field(default=0, metadata=tag("fk:orders"))
    label: str = ""
    price: float = 0.0
    note: str = field(default="", metadata=tag("hidden"))


@dataclass
class Order:
    id: int = field(default=0, metadata=tag("pk"))
    customer_id: int = field(default=0, metadata=tag("fk:customers.id"))
    lines: list[OrderLine] = field(default_factory=list, metadata=tag("list"))
    tags: list[str] = field(default_factory=list, metadata=tag("m2m:order_tags"))
    line_count: int = field(default=0, metadata=tag("count:lines;readonly"))
    total: float = field(default=0.0, metadata=tag("sum:lines.price;readonly"))


@dataclass
class AuditEntry:
    message: str = ""


@dataclass
class Widget:
    id: str = field(default="", metadata=tag("pk"))
    label: str = ""


@dataclass
class Gadget:
    """Entity with lifecycle hooks; records every hook call in `calls`."""

    calls: ClassVar[list[str]] = []

    id: int = field(default=0, metadata=tag("pk"))
    name: str = ""
    price: float = 0.0

    async def before_create(self, ctx, tx):
        Gadget.calls.append("before_create")
        if self.price < 0:
            raise ValueError("price must not be negative")

    async def after_create(self, ctx, tx):
        Gadget.calls.append("after_create")
        if self.name == "explode":
            raise RuntimeError("after_create exploded")

    async def before_update(self, ctx, tx):
        Gadget.calls.append("before_update")
        if self.name == "locked":
            raise ValueError("gadget is locked")

    async def after_update(self, ctx, tx):
        Gadget.calls.append("after_update")

    def before_delete(self, ctx, tx):
        Gadget.calls.append("before_delete")
        if self.name == "keep":
            raise ValueError("gadget cannot be deleted")

    def after_delete(self, ctx, tx):
        Gadget.calls.append("after_delete")
