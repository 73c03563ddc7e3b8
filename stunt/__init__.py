"""
Stunt: test doubles synthesized from class contracts
"""

__version__ = "0.1.0"

from .core.errors import (
    ArgumentIndexOutOfRange, ExpectationFailedError, NoMappingForArguments,
    NotDoubleable, StuntError, UnknownOperation, UnsupportedOperation,
)
from .core.config import Settings, configure_settings, get_settings
from .core.models import Contract, DoubleMode, IntersectionContract, Invocation, Operation
from .decorators import is_doubled, sealed
from .introspector import ContractIntrospector, introspect
from .matchers import (
    any_number, anything, at_least, at_least_once, at_most, callback, contains,
    equal_to, exactly, greater_than, identical_to, is_instance_of, is_none,
    less_than, logical_and, logical_not, logical_or, matches_regex, never, once,
)
from .plan import BehaviorPlan
from .synthesizer import (
    DoubleSynthesizer, attach_expectation, configure, create_configured_double,
    create_configured_stub, create_double, create_intersection_double,
    create_mock, create_stub, invocations, is_double, reset,
)
from .verify import VerificationEntry, VerificationReport, verify, verify_all
from .factory import DoubleFactory

__all__ = [
    "ArgumentIndexOutOfRange",
    "BehaviorPlan",
    "Contract",
    "ContractIntrospector",
    "DoubleFactory",
    "DoubleMode",
    "DoubleSynthesizer",
    "ExpectationFailedError",
    "IntersectionContract",
    "Invocation",
    "NoMappingForArguments",
    "NotDoubleable",
    "Operation",
    "Settings",
    "StuntError",
    "UnknownOperation",
    "UnsupportedOperation",
    "VerificationEntry",
    "VerificationReport",
    "any_number",
    "anything",
    "at_least",
    "at_least_once",
    "at_most",
    "attach_expectation",
    "callback",
    "configure",
    "configure_settings",
    "contains",
    "create_configured_double",
    "create_configured_stub",
    "create_double",
    "create_intersection_double",
    "create_mock",
    "create_stub",
    "equal_to",
    "exactly",
    "get_settings",
    "greater_than",
    "identical_to",
    "introspect",
    "invocations",
    "is_double",
    "is_doubled",
    "is_instance_of",
    "is_none",
    "less_than",
    "logical_and",
    "logical_not",
    "logical_or",
    "matches_regex",
    "never",
    "once",
    "reset",
    "sealed",
    "verify",
    "verify_all",
]
