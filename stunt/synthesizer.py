"""
Double synthesizer: builds stand-in objects that satisfy contracts.

Usage:
    mock = create_mock(Observer)
    configure(mock, "update").expects(once()).with_args("something")

    subject.attach(mock)
    subject.do_something()

    assert verify(mock).passed
"""

import inspect
import itertools
import logging
import types
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from stunt.core.errors import NotDoubleable, UnknownOperation, UnsupportedOperation
from stunt.core.models import Contract, DoubleMode, IntersectionContract, Invocation, Operation, OperationKind
from stunt.decorators import doubled
from stunt.defaults import synthesize_default
from stunt.introspector import ContractIntrospector, ContractLike, get_introspector
from stunt.plan import BehaviorPlan

logger = logging.getLogger(__name__)

CONTROL_ATTRIBUTE = "_stunt_control"

AnyContract = Union[Contract, IntersectionContract]


class Double:
    """Base class of every synthesized double"""

    def __repr__(self):
        control = control_of(self)
        return f"<{control.mode.value} double of {control.name}>"


class DoubleControl:
    """
    Dispatch table and state behind one double.

    Holds one BehaviorPlan per doubled operation, the per-double call
    counter and the lineage used to break return-type cycles.
    """

    def __init__(self, synthesizer: "DoubleSynthesizer", contract: AnyContract,
                 mode: DoubleMode, lineage: Mapping[Tuple[type, ...], Any]):
        self.contract = contract
        self.mode = mode
        self.double: Any = None
        self.plans: Dict[str, BehaviorPlan] = {
            op.name: BehaviorPlan(self, op) for op in contract.operations
        }
        self.lineage: Dict[Tuple[type, ...], Any] = dict(lineage)
        self._synthesizer = synthesizer
        self._order = itertools.count(1)

    @property
    def name(self) -> str:
        return self.contract.name

    def bind(self, double: Any) -> None:
        self.double = double
        # A double stands in for its own contract and every constituent
        self.lineage[self.contract.key] = double
        for target in self.contract.targets:
            self.lineage[(target,)] = double

    def next_order(self) -> int:
        return next(self._order)

    def plan(self, operation: str) -> BehaviorPlan:
        plan = self.plans.get(operation)
        if plan is None:
            raise UnknownOperation(self.name, operation, self.plans.keys())
        return plan

    def default_for(self, operation: Operation) -> Any:
        value = synthesize_default(operation.return_annotation, self)
        logger.debug("%s.%s defaulted to %r", self.name, operation.name, value)
        return value

    def nested_double(self, target: type) -> Any:
        """
        Double for a contract-typed return value.

        Contracts already in this double's lineage resolve to the
        existing double instead of a new one.
        """
        contract = self._synthesizer.introspector.introspect(target)
        existing = self.lineage.get(contract.key)
        if existing is not None:
            return existing
        return self._synthesizer.build(contract, DoubleMode.STUB, self.lineage)

    def is_double(self, value: Any) -> bool:
        return is_double(value)

    def invocations(self, operation: Optional[str] = None) -> List[Invocation]:
        if operation is not None:
            return list(self.plan(operation).invocations)
        recorded = [inv for plan in self.plans.values() for inv in plan.invocations]
        return sorted(recorded, key=lambda inv: inv.order)

    def reset(self, operation: Optional[str] = None) -> None:
        plans = [self.plan(operation)] if operation is not None else self.plans.values()
        for plan in plans:
            plan.reset()


class _StaticStandIn:
    """Descriptor replacing static and class-level operations"""

    __stunt_doubled__ = True

    def __init__(self, operation: Operation):
        self.operation = operation

    def __get__(self, instance, owner=None):
        name = self.operation.name
        if instance is None:
            def unsupported(*args, **kwargs):
                return _dispatch_unbound(owner, name)
            return doubled(unsupported)

        def standin(*args, **kwargs):
            return control_of(instance).plan(name).invoke(args, kwargs)
        return doubled(standin)


def _dispatch_unbound(owner: type, name: str) -> Any:
    raise UnsupportedOperation(name, f"{owner.__qualname__}.{name}() is static or class-level and cannot be doubled")


def _make_dispatcher(operation: Operation):
    name = operation.name

    if operation.is_async:
        async def dispatcher(self, *args, **kwargs):
            return control_of(self).plan(name).invoke(args, kwargs)
    else:
        def dispatcher(self, *args, **kwargs):
            return control_of(self).plan(name).invoke(args, kwargs)

    dispatcher.__name__ = name
    dispatcher.__qualname__ = name
    receiver = inspect.Parameter("self", inspect.Parameter.POSITIONAL_ONLY)
    signature = operation.signature
    dispatcher.__signature__ = signature.replace(
        parameters=[receiver, *signature.parameters.values()]
    )
    return doubled(dispatcher)


def _make_property(operation: Operation) -> property:
    name = operation.name

    def getter(self):
        return control_of(self).plan(name).invoke((), {})

    getter.__name__ = name
    if not operation.settable:
        return property(doubled(getter))

    def setter(self, value):
        # A written value is what later reads return
        control_of(self).plan(name).will_return(value)

    setter.__name__ = name
    return property(doubled(getter), doubled(setter))


class DoubleSynthesizer:
    """Create doubles, reusing one generated class per contract"""

    def __init__(self, introspector: Optional[ContractIntrospector] = None):
        self.introspector = introspector or ContractIntrospector()
        self._classes: Dict[Tuple[type, ...], type] = {}

    def create_double(self, contract: ContractLike, mode: Union[DoubleMode, str] = DoubleMode.MOCK) -> Any:
        """
        Create a double of one contract.

        Args:
            contract: Class to double, or an introspected contract
            mode: DoubleMode.STUB or DoubleMode.MOCK

        Raises:
            NotDoubleable: If the class is closed
        """
        return self.build(self.introspector.introspect(contract), DoubleMode(mode), {})

    def create_intersection_double(self, contracts: Iterable[ContractLike],
                                   mode: Union[DoubleMode, str] = DoubleMode.MOCK) -> Any:
        """Create one double that is an instance of every given contract"""
        intersection = self.introspector.introspect_all(contracts)
        return self.build(intersection, DoubleMode(mode), {})

    def create_configured_double(self, contract: ContractLike, mode: Union[DoubleMode, str],
                                 values: Mapping[str, Any]) -> Any:
        """
        Create a double and give each named operation a fixed return value.

        Raises:
            UnknownOperation: If a name is not an operation of the contract
        """
        double = self.create_double(contract, mode)
        control = control_of(double)
        for name, value in values.items():
            control.plan(name).will_return(value)
        return double

    def build(self, contract: AnyContract, mode: DoubleMode,
              lineage: Mapping[Tuple[type, ...], Any]) -> Any:
        cls = self._class_for(contract)
        control = DoubleControl(self, contract, mode, lineage)
        try:
            double = _instantiate(cls)
        except TypeError as e:
            raise NotDoubleable(contract.targets[0], f"instances cannot be created without its constructor ({e})") from e
        object.__setattr__(double, CONTROL_ATTRIBUTE, control)
        control.bind(double)
        logger.debug("Created %s double of %s (%d operation(s))",
                     mode.value, contract.name, len(control.plans))
        return double

    def _class_for(self, contract: AnyContract) -> type:
        cls = self._classes.get(contract.key)
        if cls is not None:
            return cls

        namespace: Dict[str, Any] = {"__module__": __name__}
        for op in contract.operations:
            if op.kind is OperationKind.STATIC:
                namespace[op.name] = _StaticStandIn(op)
            elif op.kind is OperationKind.PROPERTY:
                namespace[op.name] = _make_property(op)
            else:
                namespace[op.name] = _make_dispatcher(op)

        name = "Double_" + "_".join(t.__name__ for t in contract.targets)
        try:
            cls = types.new_class(name, (Double, *contract.targets), exec_body=lambda ns: ns.update(namespace))
        except TypeError as e:
            raise NotDoubleable(contract.targets[0], f"a subclass cannot be generated ({e})") from e

        # Remaining abstract members are private; they keep their original body
        if getattr(cls, "__abstractmethods__", None):
            cls.__abstractmethods__ = frozenset()

        self._classes[contract.key] = cls
        return cls


def _instantiate(cls: type) -> Any:
    # Constructors of the contract are never run
    try:
        return object.__new__(cls)
    except TypeError:
        return cls.__new__(cls)


# ============================================================================
# Module-level API
# ============================================================================

_default_synthesizer = DoubleSynthesizer(get_introspector())


def get_synthesizer() -> DoubleSynthesizer:
    return _default_synthesizer


def is_double(value: Any) -> bool:
    return isinstance(value, Double)


def control_of(double: Any) -> DoubleControl:
    """
    Return the control object behind a double.

    Raises:
        TypeError: If the value is not a double
    """
    try:
        return object.__getattribute__(double, CONTROL_ATTRIBUTE)
    except AttributeError:
        raise TypeError(f"{double!r} is not a test double") from None


def create_double(contract: ContractLike, mode: Union[DoubleMode, str] = DoubleMode.MOCK) -> Any:
    return _default_synthesizer.create_double(contract, mode)


def create_stub(contract: ContractLike) -> Any:
    return _default_synthesizer.create_double(contract, DoubleMode.STUB)


def create_mock(contract: ContractLike) -> Any:
    return _default_synthesizer.create_double(contract, DoubleMode.MOCK)


def create_intersection_double(contracts: Iterable[ContractLike],
                               mode: Union[DoubleMode, str] = DoubleMode.MOCK) -> Any:
    return _default_synthesizer.create_intersection_double(contracts, mode)


def create_configured_double(contract: ContractLike, mode: Union[DoubleMode, str],
                             values: Mapping[str, Any]) -> Any:
    return _default_synthesizer.create_configured_double(contract, mode, values)


def create_configured_stub(contract: ContractLike, values: Mapping[str, Any]) -> Any:
    return _default_synthesizer.create_configured_double(contract, DoubleMode.STUB, values)


def configure(double: Any, operation: str) -> BehaviorPlan:
    """
    Address the behavior plan of one operation.

    Raises:
        UnknownOperation: If the contract has no such doubled operation
    """
    return control_of(double).plan(operation)


def attach_expectation(double: Any, operation: str, count: Any, constraints: Iterable[Any] = ()) -> BehaviorPlan:
    """Attach (or replace) the expectation on an operation"""
    if isinstance(constraints, (str, bytes)):
        # A lone string is one constraint, not one per character
        constraints = (constraints,)
    return control_of(double).plan(operation).expects(count, *constraints)


def invocations(double: Any, operation: Optional[str] = None) -> List[Invocation]:
    """Recorded calls on a double, in call order"""
    return control_of(double).invocations(operation)


def reset(double: Any, operation: Optional[str] = None) -> None:
    control_of(double).reset(operation)
