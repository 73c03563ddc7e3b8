"""
Invocation-count matchers and argument constraints for expectations.

Usage:
    configure(mock, "update").expects(once()).with_args(equal_to("something"))
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Tuple


# ============================================================================
# Invocation-count matchers
# ============================================================================

class CountMatcher:
    """Decide whether a number of matching calls is acceptable"""

    def matches(self, count: int) -> bool:
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError

    def __str__(self):
        return self.describe()


@dataclass(frozen=True)
class AnyCount(CountMatcher):

    def matches(self, count: int) -> bool:
        return True

    def describe(self) -> str:
        return "any number of times"


@dataclass(frozen=True)
class Never(CountMatcher):

    def matches(self, count: int) -> bool:
        return count == 0

    def describe(self) -> str:
        return "never"


@dataclass(frozen=True)
class AtLeastOnce(CountMatcher):

    def matches(self, count: int) -> bool:
        return count >= 1

    def describe(self) -> str:
        return "at least once"


@dataclass(frozen=True)
class Exactly(CountMatcher):
    n: int

    def __post_init__(self):
        if self.n < 0:
            raise ValueError("Expected call count must not be negative")

    def matches(self, count: int) -> bool:
        return count == self.n

    def describe(self) -> str:
        return "exactly once" if self.n == 1 else f"exactly {self.n} times"


@dataclass(frozen=True)
class AtMost(CountMatcher):
    n: int

    def __post_init__(self):
        if self.n < 0:
            raise ValueError("Expected call count must not be negative")

    def matches(self, count: int) -> bool:
        return count <= self.n

    def describe(self) -> str:
        return f"at most {self.n} times"


@dataclass(frozen=True)
class AtLeast(CountMatcher):
    n: int

    def __post_init__(self):
        if self.n < 0:
            raise ValueError("Expected call count must not be negative")

    def matches(self, count: int) -> bool:
        return count >= self.n

    def describe(self) -> str:
        return f"at least {self.n} times"


def any_number() -> CountMatcher:
    return AnyCount()


def never() -> CountMatcher:
    return Never()


def once() -> CountMatcher:
    return Exactly(1)


def at_least_once() -> CountMatcher:
    return AtLeastOnce()


def exactly(n: int) -> CountMatcher:
    return Exactly(n)


def at_most(n: int) -> CountMatcher:
    return AtMost(n)


def at_least(n: int) -> CountMatcher:
    return AtLeast(n)


# ============================================================================
# Argument constraints
# ============================================================================

class Constraint:
    """Predicate over a single call argument"""

    def evaluate(self, value: Any) -> bool:
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError

    def __call__(self, value: Any) -> bool:
        return self.evaluate(value)

    def __repr__(self):
        return self.describe()


class _Anything(Constraint):

    def evaluate(self, value: Any) -> bool:
        return True

    def describe(self) -> str:
        return "anything"


class _Predicate(Constraint):

    def __init__(self, predicate: Callable[[Any], bool], description: str):
        self._predicate = predicate
        self._description = description

    def evaluate(self, value: Any) -> bool:
        return bool(self._predicate(value))

    def describe(self) -> str:
        return self._description


class _Not(Constraint):

    def __init__(self, inner: Constraint):
        self._inner = inner

    def evaluate(self, value: Any) -> bool:
        return not self._inner.evaluate(value)

    def describe(self) -> str:
        return f"not ({self._inner.describe()})"


class _Combined(Constraint):

    def __init__(self, constraints: Tuple[Constraint, ...], require_all: bool):
        self._constraints = constraints
        self._require_all = require_all

    def evaluate(self, value: Any) -> bool:
        results = (c.evaluate(value) for c in self._constraints)
        return all(results) if self._require_all else any(results)

    def describe(self) -> str:
        joiner = " and " if self._require_all else " or "
        return joiner.join(f"({c.describe()})" for c in self._constraints)


def as_constraint(value: Any) -> Constraint:
    """Bare values given where a constraint is expected mean equality"""
    if isinstance(value, Constraint):
        return value
    return equal_to(value)


def anything() -> Constraint:
    return _Anything()


def equal_to(expected: Any) -> Constraint:
    return _Predicate(lambda v: v == expected, f"is equal to {expected!r}")


def identical_to(expected: Any) -> Constraint:
    return _Predicate(lambda v: v is expected, f"is identical to {expected!r}")


def is_instance_of(cls: Any) -> Constraint:
    name = getattr(cls, "__qualname__", repr(cls))
    return _Predicate(lambda v: isinstance(v, cls), f"is an instance of {name}")


def is_none() -> Constraint:
    return _Predicate(lambda v: v is None, "is None")


def greater_than(bound: Any) -> Constraint:
    return _Predicate(lambda v: v > bound, f"is greater than {bound!r}")


def less_than(bound: Any) -> Constraint:
    return _Predicate(lambda v: v < bound, f"is less than {bound!r}")


def contains(item: Any) -> Constraint:
    def _contains(value):
        try:
            return item in value
        except TypeError:
            return False
    return _Predicate(_contains, f"contains {item!r}")


def matches_regex(pattern: str) -> Constraint:
    compiled = re.compile(pattern)
    return _Predicate(
        lambda v: isinstance(v, str) and compiled.search(v) is not None,
        f"matches /{pattern}/",
    )


def callback(predicate: Callable[[Any], bool]) -> Constraint:
    name = getattr(predicate, "__name__", "callback")
    return _Predicate(predicate, f"is accepted by {name}()")


def logical_not(constraint: Any) -> Constraint:
    return _Not(as_constraint(constraint))


def logical_and(*constraints: Any) -> Constraint:
    return _Combined(tuple(as_constraint(c) for c in constraints), require_all=True)


def logical_or(*constraints: Any) -> Constraint:
    return _Combined(tuple(as_constraint(c) for c in constraints), require_all=False)


# ============================================================================
# Expectation
# ============================================================================

@dataclass(frozen=True)
class Expectation:
    """Call-count rule plus positional argument constraints"""
    count: CountMatcher
    constraints: Tuple[Constraint, ...] = ()

    def accepts(self, arguments: Tuple[Any, ...]) -> bool:
        """
        Check one call's arguments against the constraints.

        Constraints are ANDed positionally; arguments beyond the
        constraint list pass, missing arguments fail.
        """
        if len(arguments) < len(self.constraints):
            return False
        return all(c.evaluate(a) for c, a in zip(self.constraints, arguments))

    def describe(self) -> str:
        text = f"called {self.count.describe()}"
        if self.constraints:
            text += " with (" + ", ".join(c.describe() for c in self.constraints) + ")"
        return text


def build_expectation(count: CountMatcher, constraints: Tuple[Any, ...] = ()) -> Expectation:
    if not isinstance(count, CountMatcher):
        raise TypeError(f"Expected a count matcher such as once() or exactly(n), got {count!r}")
    return Expectation(count=count, constraints=tuple(as_constraint(c) for c in constraints))
