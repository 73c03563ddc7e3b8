"""
Error taxonomy for test double creation, configuration and dispatch
"""

from typing import Any, Optional, Sequence


class StuntError(Exception):
    """Base class for every error raised by stunt"""


class NotDoubleable(StuntError, TypeError):
    """The given type is closed and cannot be doubled"""

    def __init__(self, target: Any, reason: str):
        self.target = target
        self.reason = reason
        name = getattr(target, "__qualname__", repr(target))
        super().__init__(
            f"Cannot create a double of {name}: {reason}. "
            f"Double an interface (ABC or Protocol) it implements instead."
        )


class UnknownOperation(StuntError, AttributeError):
    """Configuration names an operation the contract does not declare"""

    def __init__(self, contract_name: str, operation: str, known: Sequence[str] = ()):
        self.contract_name = contract_name
        self.operation = operation
        message = f"{contract_name} has no doubled operation '{operation}'"
        if known:
            message += f" (available: {', '.join(sorted(known))})"
        super().__init__(message)


class ArgumentIndexOutOfRange(StuntError, IndexError):
    """An echo action asked for an argument the call did not receive"""

    def __init__(self, operation: str, index: int, count: int):
        self.operation = operation
        self.index = index
        self.count = count
        super().__init__(
            f"{operation}() was called with {count} argument(s), "
            f"cannot return argument #{index}"
        )


class NoMappingForArguments(StuntError, LookupError):
    """An argument map has no entry for the received arguments"""

    def __init__(self, operation: str, arguments: tuple):
        self.operation = operation
        self.arguments = arguments
        super().__init__(f"No mapping configured for {operation}{arguments!r}")


class UnsupportedOperation(StuntError):
    """A static or class-level operation was reached on a double"""

    def __init__(self, operation: str, detail: Optional[str] = None):
        self.operation = operation
        super().__init__(
            detail or f"{operation}() is static or class-level and cannot be doubled"
        )


class ExpectationFailedError(StuntError, AssertionError):
    """Raised on request when a verification report holds failures"""

    def __init__(self, report: Any):
        self.report = report
        super().__init__(report.format_text())
