"""
Data models for contracts, operations and recorded invocations
"""

import inspect
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class OperationKind(str, Enum):
    """How an operation is reached on an instance"""
    METHOD = "method"
    PROPERTY = "property"
    STATIC = "static"


class DoubleMode(str, Enum):
    """Stubs supply values; mocks additionally carry verified expectations"""
    STUB = "stub"
    MOCK = "mock"


@dataclass(frozen=True)
class Parameter:
    """One declared parameter of an operation (receiver excluded)"""
    name: str
    annotation: Any
    kind: inspect._ParameterKind
    default: Any = inspect.Parameter.empty

    @property
    def has_default(self) -> bool:
        return self.default is not inspect.Parameter.empty


@dataclass(frozen=True)
class Operation:
    """Signature of a single doubled operation"""
    name: str
    kind: OperationKind
    parameters: Tuple[Parameter, ...]
    return_annotation: Any
    signature: inspect.Signature
    is_async: bool = False
    # Properties only: whether the contract accepts assignment
    settable: bool = False

    @property
    def is_static(self) -> bool:
        return self.kind is OperationKind.STATIC


@dataclass(frozen=True)
class Contract:
    """Operations of one introspected class"""
    target: type
    operations: Tuple[Operation, ...]

    @property
    def name(self) -> str:
        return self.target.__qualname__

    @property
    def targets(self) -> Tuple[type, ...]:
        return (self.target,)

    @property
    def key(self) -> Tuple[type, ...]:
        return self.targets

    def operation(self, name: str) -> Optional[Operation]:
        for op in self.operations:
            if op.name == name:
                return op
        return None

    def operation_names(self) -> Tuple[str, ...]:
        return tuple(op.name for op in self.operations)


@dataclass(frozen=True)
class IntersectionContract:
    """Union of the operations of several contracts"""
    contracts: Tuple[Contract, ...]
    operations: Tuple[Operation, ...]

    @property
    def name(self) -> str:
        return " & ".join(c.name for c in self.contracts)

    @property
    def targets(self) -> Tuple[type, ...]:
        return tuple(c.target for c in self.contracts)

    @property
    def key(self) -> Tuple[type, ...]:
        return self.targets

    def operation(self, name: str) -> Optional[Operation]:
        for op in self.operations:
            if op.name == name:
                return op
        return None

    def operation_names(self) -> Tuple[str, ...]:
        return tuple(op.name for op in self.operations)


@dataclass(frozen=True)
class Invocation:
    """A recorded call on a doubled operation"""
    operation: str
    arguments: Tuple[Any, ...]
    kwargs: Dict[str, Any] = field(default_factory=dict)
    order: int = 0

    def __repr__(self):
        parts = [repr(a) for a in self.arguments]
        parts += [f"{k}={v!r}" for k, v in self.kwargs.items()]
        return f"#{self.order} {self.operation}({', '.join(parts)})"
