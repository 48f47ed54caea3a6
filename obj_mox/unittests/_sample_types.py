"""Types mocked throughout the unit tests."""

from __future__ import annotations

import abc
import typing as t

from obj_mox.calls import Slot  # noqa: TC001 - resolved by get_type_hints
from obj_mox.comparators import Matcher


class Order:
    """Value object passed to :class:`OrderStore`."""

    def __init__(self, amount: int = 0) -> None:
        self.amount = amount

    def __repr__(self) -> str:
        return f"Order({self.amount})"


class InvalidOperationError(Exception):
    """Raised by expectations configured to reject an order."""


class Engine(abc.ABC):
    """Abstract collaborator reached through :attr:`Car.engine`."""

    @abc.abstractmethod
    def start(self) -> bool: ...

    @property
    @abc.abstractmethod
    def rpm(self) -> int: ...


class Car(t.Protocol):
    """Interface exposing a chain of properties."""

    @property
    def engine(self) -> Engine: ...

    @property
    def model(self) -> str: ...


class OrderStore(t.Protocol):
    """Interface used for most controller tests."""

    def save(self, order: Order) -> None: ...

    def get(self, order_id: int) -> int: ...

    def do_something(self, value: int) -> None: ...

    def lookup(self, key: str, result: Slot) -> bool: ...

    def describe(self) -> Order: ...

    def tags(self) -> list[str]: ...

    def find(self, key: str) -> Order | None: ...

    @property
    def name(self) -> str: ...

    @name.setter
    def name(self, value: str) -> None: ...


class Repository(abc.ABC):
    """Abstract class mixing abstract and concrete members."""

    @abc.abstractmethod
    def load(self, key: str) -> str: ...

    @abc.abstractmethod
    def store(self, key: str, value: str) -> None: ...

    @abc.abstractmethod
    def fetch(self, key: str) -> Order: ...

    def describe(self) -> str:
        return "repository"

    @property
    def size(self) -> int:
        return 3


class Basket(abc.ABC):
    """Abstract class with an abstract dunder method."""

    @abc.abstractmethod
    def __len__(self) -> int: ...

    @abc.abstractmethod
    def name(self) -> str: ...


class Builder(abc.ABC):
    """Abstract class whose only abstract member is a staticmethod."""

    @staticmethod
    @abc.abstractmethod
    def make() -> int: ...


class CachedRepository(Repository):
    """Concrete override of :class:`Repository`."""

    def load(self, key: str) -> str:
        return f"cached:{key}"

    def store(self, key: str, value: str) -> None:
        return None

    def fetch(self, key: str) -> Order:
        return Order(len(key))


class Counter:
    """Concrete class with constructor state."""

    def __init__(self, start: int = 0) -> None:
        self.start = start

    def next(self, step: int = 1) -> int:
        return self.start + step


class Tools:
    """Members that a stand-in cannot intercept, and a variadic method."""

    limit = 5

    @staticmethod
    def helper() -> int:
        return 1

    @classmethod
    def build(cls) -> Tools:
        return cls()

    @t.final
    def locked(self) -> int:
        return 1

    def run(self, *values: int, **options: str) -> int:
        return len(values) + len(options)

    def _set_secret(self, value: str) -> None:
        self._secret = value

    secret = property(None, _set_secret)


class AtLeast(Matcher):
    """Custom matcher storing its bound in ``__slots__``."""

    __slots__ = ("limit",)

    def __init__(self, limit: int) -> None:
        self.limit = limit

    def matches(self, value: object) -> bool:
        return isinstance(value, int) and value >= self.limit


@t.final
class Sealed:
    """Final class that cannot be subclassed."""

    def go(self) -> None:
        return None


__all__ = [
    "AtLeast",
    "Basket",
    "Builder",
    "Car",
    "CachedRepository",
    "Counter",
    "Engine",
    "InvalidOperationError",
    "Order",
    "OrderStore",
    "Repository",
    "Sealed",
    "Tools",
]
