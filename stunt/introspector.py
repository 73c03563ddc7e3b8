"""
Introspector that turns Python classes into contracts.
"""

import enum
import functools
import inspect
import logging
import typing
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from stunt.core.errors import NotDoubleable
from stunt.core.models import Contract, IntersectionContract, Operation, OperationKind, Parameter
from stunt.decorators import is_sealed

logger = logging.getLogger(__name__)

# Py_TPFLAGS_BASETYPE: the type allows subclassing
_BASETYPE_FLAG = 1 << 10

ContractLike = Union[type, Contract, IntersectionContract]

_OPEN_SIGNATURE = inspect.Signature([
    inspect.Parameter("args", inspect.Parameter.VAR_POSITIONAL),
    inspect.Parameter("kwargs", inspect.Parameter.VAR_KEYWORD),
])


class ContractIntrospector:
    """Enumerate the doubleable operations of a class"""

    def __init__(self):
        self._cache: Dict[type, Contract] = {}

    def introspect(self, target: ContractLike) -> Union[Contract, IntersectionContract]:
        """
        Build the contract for a class.

        Args:
            target: A class, or an already introspected contract

        Returns:
            Contract with one Operation per public, overridable member

        Raises:
            NotDoubleable: If the class is closed (enum, final, not subclassable)
        """
        if isinstance(target, (Contract, IntersectionContract)):
            return target

        self.check_doubleable(target)

        cached = self._cache.get(target)
        if cached is not None:
            return cached

        operations = []
        for name, member in self._collect_members(target):
            op = self._build_operation(target, name, member)
            if op is not None:
                operations.append(op)

        contract = Contract(target=target, operations=tuple(operations))
        self._cache[target] = contract
        logger.debug("Introspected %s: %d operation(s)", contract.name, len(operations))
        return contract

    def introspect_all(self, targets: Iterable[ContractLike]) -> IntersectionContract:
        """
        Merge several contracts into one intersection contract.

        When two contracts declare the same operation name, the
        signature from the first one listed is kept.
        """
        contracts: List[Contract] = []
        for target in targets:
            contract = self.introspect(target)
            if isinstance(contract, IntersectionContract):
                contracts.extend(contract.contracts)
            else:
                contracts.append(contract)

        if not contracts:
            raise ValueError("An intersection needs at least one contract")

        seen = set()
        for contract in contracts:
            if contract.target in seen:
                raise ValueError(f"{contract.name} is listed more than once")
            seen.add(contract.target)

        merged: Dict[str, Operation] = {}
        for contract in contracts:
            for op in contract.operations:
                merged.setdefault(op.name, op)

        return IntersectionContract(contracts=tuple(contracts), operations=tuple(merged.values()))

    def check_doubleable(self, target: Any) -> None:
        """Raise NotDoubleable unless target is an open class"""
        if not inspect.isclass(target):
            raise NotDoubleable(target, "it is not a class")
        if issubclass(target, enum.Enum):
            raise NotDoubleable(target, "enumerations are closed")
        if is_sealed(target):
            raise NotDoubleable(target, "the class is final")
        if not target.__flags__ & _BASETYPE_FLAG:
            raise NotDoubleable(target, "the type does not allow subclassing")

    def _collect_members(self, target: type) -> List[Tuple[str, Any]]:
        # Later classes in reversed MRO override earlier ones
        members: Dict[str, Any] = {}
        for klass in reversed(target.__mro__):
            if klass is object:
                continue
            for name, member in vars(klass).items():
                members[name] = member
        return [(name, member) for name, member in members.items() if not name.startswith("_")]

    def _build_operation(self, target: type, name: str, member: Any) -> Optional[Operation]:
        if is_sealed(member):
            logger.debug("Skipping sealed operation %s.%s", target.__qualname__, name)
            return None

        if isinstance(member, staticmethod):
            return self._operation_from(name, OperationKind.STATIC, member.__func__, drop_first=False)
        if isinstance(member, classmethod):
            return self._operation_from(name, OperationKind.STATIC, member.__func__, drop_first=True)
        if isinstance(member, property):
            if member.fget is None:
                return None
            return self._operation_from(name, OperationKind.PROPERTY, member.fget, drop_first=True,
                                        settable=member.fset is not None)
        if isinstance(member, functools.cached_property):
            # Instances may overwrite a cached value
            return self._operation_from(name, OperationKind.PROPERTY, member.func, drop_first=True,
                                        settable=True)
        if inspect.isfunction(member):
            return self._operation_from(name, OperationKind.METHOD, member, drop_first=True)

        # Plain class attributes are data, not operations
        return None

    def _operation_from(self, name: str, kind: OperationKind, func: Any, drop_first: bool,
                        settable: bool = False) -> Operation:
        hints = resolve_type_hints(func)
        try:
            signature = inspect.signature(func)
        except ValueError:
            # Builtins without signature metadata accept anything
            signature = _OPEN_SIGNATURE
            drop_first = False
        params = list(signature.parameters.values())
        if drop_first and params:
            params = params[1:]

        parameters = tuple(
            Parameter(
                name=p.name,
                annotation=hints.get(p.name, p.annotation),
                kind=p.kind,
                default=p.default,
            )
            for p in params
        )

        if "return" in hints:
            return_annotation = hints["return"]
        elif signature.return_annotation is inspect.Signature.empty:
            return_annotation = None
        else:
            return_annotation = signature.return_annotation

        return Operation(
            name=name,
            kind=kind,
            parameters=parameters,
            return_annotation=return_annotation,
            signature=signature.replace(parameters=params),
            is_async=inspect.iscoroutinefunction(func),
            settable=settable,
        )


def resolve_type_hints(func: Any) -> Dict[str, Any]:
    """
    Evaluate annotations of a function.

    Forward references that cannot be resolved leave the raw
    annotations in place.
    """
    try:
        return typing.get_type_hints(func)
    except (NameError, TypeError, AttributeError) as e:
        logger.debug("Falling back to raw annotations for %s: %s", getattr(func, "__qualname__", func), e)
        return dict(getattr(func, "__annotations__", {}))


_default_introspector = ContractIntrospector()


def introspect(target: ContractLike) -> Union[Contract, IntersectionContract]:
    """Introspect with the shared, caching introspector"""
    return _default_introspector.introspect(target)


def introspect_all(targets: Iterable[ContractLike]) -> IntersectionContract:
    return _default_introspector.introspect_all(targets)


def get_introspector() -> ContractIntrospector:
    return _default_introspector
