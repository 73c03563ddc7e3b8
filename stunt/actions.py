"""
Actions a behavior plan can resolve a call with
"""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Sequence, Tuple

from stunt.core.errors import ArgumentIndexOutOfRange, NoMappingForArguments, UnsupportedOperation
from stunt.core.models import Invocation, Operation


@dataclass
class CallContext:
    """Everything an action may look at while resolving one call"""
    double: Any
    operation: Operation
    invocation: Invocation
    synthesize_default: Callable[[], Any]


class Action:
    """Base class: resolve a call to a return value or raise"""

    def resolve(self, call: CallContext) -> Any:
        raise NotImplementedError

    def describe(self) -> str:
        return type(self).__name__


@dataclass
class NoneConfigured(Action):
    """Synthesize a default from the declared return type"""

    def resolve(self, call: CallContext) -> Any:
        return call.synthesize_default()


@dataclass
class FixedValue(Action):
    value: Any

    def resolve(self, call: CallContext) -> Any:
        return self.value

    def describe(self) -> str:
        return f"returns {self.value!r}"


@dataclass
class ValueSequence(Action):
    """Return values in call order; the last one repeats once exhausted"""
    values: List[Any]
    cursor: int = 0

    def __post_init__(self):
        if not self.values:
            raise ValueError("A value sequence needs at least one value")

    def resolve(self, call: CallContext) -> Any:
        value = self.values[self.cursor]
        if self.cursor < len(self.values) - 1:
            self.cursor += 1
        return value

    def describe(self) -> str:
        return f"returns {self.values!r} in order"


@dataclass
class ThrowError(Action):
    error: Any

    def resolve(self, call: CallContext) -> Any:
        raise self.error

    def describe(self) -> str:
        return f"raises {self.error!r}"


@dataclass
class EchoArgument(Action):
    index: int

    def resolve(self, call: CallContext) -> Any:
        arguments = call.invocation.arguments
        if self.index < 0 or self.index >= len(arguments):
            raise ArgumentIndexOutOfRange(call.operation.name, self.index, len(arguments))
        return arguments[self.index]

    def describe(self) -> str:
        return f"returns argument #{self.index}"


@dataclass
class Callback(Action):
    function: Callable[..., Any]

    def resolve(self, call: CallContext) -> Any:
        return self.function(*call.invocation.arguments, **call.invocation.kwargs)

    def describe(self) -> str:
        return f"returns {getattr(self.function, '__name__', 'callback')}(...)"


@dataclass
class ReturnSelf(Action):

    def resolve(self, call: CallContext) -> Any:
        return call.double

    def describe(self) -> str:
        return "returns self"


@dataclass
class ArgumentMap(Action):
    """First entry whose arguments equal the call's arguments wins"""
    entries: List[Tuple[Tuple[Any, ...], Any]] = field(default_factory=list)

    def resolve(self, call: CallContext) -> Any:
        arguments = call.invocation.arguments
        for expected, value in self.entries:
            if len(expected) == len(arguments) and all(
                a == b for a, b in zip(expected, arguments)
            ):
                return value
        raise NoMappingForArguments(call.operation.name, arguments)

    def describe(self) -> str:
        return f"maps {len(self.entries)} argument list(s)"


@dataclass
class Unsupported(Action):
    """Stand-in for static and class-level operations"""

    def resolve(self, call: CallContext) -> Any:
        raise UnsupportedOperation(call.operation.name)

    def describe(self) -> str:
        return "unsupported"


def normalize_map_entries(entries: Sequence[Any]) -> List[Tuple[Tuple[Any, ...], Any]]:
    """
    Accept (args, value) pairs or flat rows whose last item is the value.

    [(("a", "b"), "c")] and [["a", "b", "c"]] describe the same mapping.
    """
    normalized = []
    for entry in entries:
        entry = tuple(entry)
        if len(entry) == 2 and isinstance(entry[0], (tuple, list)):
            normalized.append((tuple(entry[0]), entry[1]))
        elif len(entry) >= 1:
            normalized.append((entry[:-1], entry[-1]))
        else:
            raise ValueError("Empty argument map entry")
    return normalized
