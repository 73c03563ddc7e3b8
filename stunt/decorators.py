"""
Decorators for marking operations as sealed or doubled.

Usage:
    class Repository(ABC):
        @abstractmethod
        def find(self, key: str) -> Optional[Record]:
            ...

        @sealed
        def describe(self) -> str:
            return "repository"

`describe` keeps its original behavior on every double of Repository.
"""

from typing import Any, Callable

DOUBLED_MARKER = "__stunt_doubled__"


def sealed(func: Callable) -> Callable:
    """
    Mark an operation as non-overridable.

    Equivalent to typing.final, but also effective on interpreters
    where typing.final does not set __final__.

    Raises:
        AttributeError: If the object does not accept attributes
    """
    target = func.__func__ if isinstance(func, (staticmethod, classmethod)) else func
    target.__final__ = True
    return func


def is_sealed(obj: Any) -> bool:
    target = obj
    if isinstance(obj, (staticmethod, classmethod)):
        target = obj.__func__
    elif isinstance(obj, property):
        target = obj.fget
    return bool(getattr(target, "__final__", False))


def doubled(func: Callable) -> Callable:
    """Mark a dispatch function installed on a double"""
    setattr(func, DOUBLED_MARKER, True)
    return func


def is_doubled(func: Any) -> bool:
    """
    Tell a doubled operation from an original one.

    Accepts functions, bound methods and properties.
    """
    if isinstance(func, property):
        func = func.fget
    func = getattr(func, "__func__", func)
    return bool(getattr(func, DOUBLED_MARKER, False))
