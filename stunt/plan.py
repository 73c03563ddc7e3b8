"""
Per-operation behavior plan: configured action, invocation log, expectation.
"""

import inspect
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from stunt.actions import (
    Action, ArgumentMap, Callback, CallContext, EchoArgument, FixedValue,
    NoneConfigured, ReturnSelf, ThrowError, Unsupported, ValueSequence,
    normalize_map_entries,
)
from stunt.core.errors import UnsupportedOperation
from stunt.core.models import DoubleMode, Invocation, Operation
from stunt.matchers import CountMatcher, Expectation, any_number, build_expectation

logger = logging.getLogger(__name__)

_UNSET = object()


class BehaviorPlan:
    """
    How one operation of a double behaves, and what it has seen.

    Every configuration method returns the plan, so calls chain:

        configure(mock, "update").will_return(True).expects(once())
    """

    def __init__(self, owner: Any, operation: Operation):
        self.operation = operation
        self.action: Action = Unsupported() if operation.is_static else NoneConfigured()
        self.invocations: List[Invocation] = []
        self.expectation: Optional[Expectation] = None
        self._owner = owner
        self._default = _UNSET

    def __repr__(self):
        return f"<BehaviorPlan {self.operation.name}: {self.action.describe()}, {self.call_count} call(s)>"

    @property
    def call_count(self) -> int:
        return len(self.invocations)

    # ------------------------------------------------------------------
    # Stub behavior
    # ------------------------------------------------------------------

    def will_return(self, *values: Any) -> "BehaviorPlan":
        """
        Return a fixed value, or several values in call order.

        With more than one value the last one is returned for every
        call after the sequence is exhausted.
        """
        if not values:
            raise ValueError("will_return() needs at least one value")
        if len(values) == 1:
            return self._set_action(FixedValue(values[0]))
        return self._set_action(ValueSequence(list(values)))

    def will_throw(self, error: Any) -> "BehaviorPlan":
        """Raise the given exception (instance or class) on every call"""
        is_class = inspect.isclass(error) and issubclass(error, BaseException)
        if not (is_class or isinstance(error, BaseException)):
            raise TypeError(f"will_throw() needs an exception, got {error!r}")
        return self._set_action(ThrowError(error))

    def will_return_argument(self, index: int) -> "BehaviorPlan":
        if not isinstance(index, int) or isinstance(index, bool):
            raise TypeError(f"Argument index must be an int, got {index!r}")
        return self._set_action(EchoArgument(index))

    def will_return_callback(self, function: Callable[..., Any]) -> "BehaviorPlan":
        if not callable(function):
            raise TypeError(f"will_return_callback() needs a callable, got {function!r}")
        return self._set_action(Callback(function))

    def will_return_self(self) -> "BehaviorPlan":
        return self._set_action(ReturnSelf())

    def will_return_map(self, entries: Sequence[Any]) -> "BehaviorPlan":
        """
        Map argument lists to return values.

        Args:
            entries: (args, value) pairs, or flat rows whose last item is
                the value: [("a", "b", "c", "d")] maps ("a", "b", "c") to "d"
        """
        return self._set_action(ArgumentMap(normalize_map_entries(entries)))

    def _set_action(self, action: Action) -> "BehaviorPlan":
        if self.operation.is_static:
            raise UnsupportedOperation(
                self.operation.name,
                f"{self.operation.name}() is static or class-level; its behavior cannot be configured",
            )
        self.action = action
        self._default = _UNSET
        logger.debug("%s.%s %s", self._owner.name, self.operation.name, action.describe())
        return self

    # ------------------------------------------------------------------
    # Mock behavior
    # ------------------------------------------------------------------

    def expects(self, count: CountMatcher, *constraints: Any) -> "BehaviorPlan":
        """Attach an expectation, replacing any earlier one"""
        self.expectation = build_expectation(count, constraints)
        if self._owner.mode is DoubleMode.STUB:
            logger.warning(
                "Expectation on stub %s.%s is not verified unless verify_stub_expectations is set",
                self._owner.name, self.operation.name,
            )
        return self

    def with_args(self, *constraints: Any) -> "BehaviorPlan":
        """Constrain arguments of the attached expectation"""
        count = self.expectation.count if self.expectation else any_number()
        self.expectation = build_expectation(count, constraints)
        return self

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def bind(self, args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Tuple[Tuple[Any, ...], Dict[str, Any]]:
        """
        Normalize call arguments to declared parameter order.

        Raises:
            TypeError: If the arguments do not fit the signature
        """
        bound = self.operation.signature.bind(*args, **kwargs)
        bound.apply_defaults()

        positional: List[Any] = []
        extra: Dict[str, Any] = {}
        for name, param in self.operation.signature.parameters.items():
            value = bound.arguments[name]
            if param.kind is inspect.Parameter.VAR_POSITIONAL:
                positional.extend(value)
            elif param.kind is inspect.Parameter.VAR_KEYWORD:
                extra.update(value)
            else:
                positional.append(value)
        return tuple(positional), extra

    def invoke(self, args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Any:
        """Record a call and resolve it through the configured action"""
        if self.operation.is_static:
            # Static stand-ins refuse every call, whatever its arguments
            arguments, extra = tuple(args), dict(kwargs)
        else:
            arguments, extra = self.bind(args, kwargs)
        invocation = Invocation(
            operation=self.operation.name,
            arguments=arguments,
            kwargs=extra,
            order=self._owner.next_order(),
        )
        self.invocations.append(invocation)

        call = CallContext(
            double=self._owner.double,
            operation=self.operation,
            invocation=invocation,
            synthesize_default=self._synthesize_default,
        )
        return self.action.resolve(call)

    def _synthesize_default(self) -> Any:
        # Nested doubles keep their identity across calls; plain values are fresh
        if self._default is not _UNSET:
            return self._default
        value = self._owner.default_for(self.operation)
        if self._owner.is_double(value):
            self._default = value
        return value

    def reset(self) -> None:
        """Forget recorded invocations; configuration stays"""
        self.invocations.clear()
