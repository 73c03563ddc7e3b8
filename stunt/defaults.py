"""
Return-type driven default values for unconfigured operations
"""

import collections.abc as cabc
import enum
import inspect
import logging
import types
import typing
from typing import Any

from stunt.core.config import CONTAINER_DEFAULTS, SCALAR_DEFAULTS
from stunt.core.errors import NotDoubleable

logger = logging.getLogger(__name__)

_NONE_TYPES = {
    None,
    type(None),
    inspect.Signature.empty,
    typing.Any,
    typing.NoReturn,
    typing.Never,
}


def synthesize_default(annotation: Any, context: Any) -> Any:
    """
    Produce the default value for a declared return type.

    Args:
        annotation: Resolved return annotation of the operation
        context: Double control of the calling double; provides
            `double` and `nested_double(cls)` for contract types

    Returns:
        None for void, nullable and unknown types; falsy scalars and
        empty containers; the first member of enums and literals; a
        nested double for other classes
    """
    if _is_hashable(annotation) and annotation in _NONE_TYPES:
        return None

    if annotation is typing.Self:
        return context.double

    if isinstance(annotation, str):
        logger.debug("Unresolved return annotation %r, defaulting to None", annotation)
        return None

    if isinstance(annotation, typing.TypeVar):
        if annotation.__bound__ is not None:
            return synthesize_default(annotation.__bound__, context)
        return None

    supertype = getattr(annotation, "__supertype__", None)
    if supertype is not None:
        return synthesize_default(supertype, context)

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin is typing.Union or origin is types.UnionType:
        # Nullable types default to absence
        if type(None) in args:
            return None
        return synthesize_default(args[0], context)

    if origin is typing.Literal:
        return args[0] if args else None

    if origin is typing.Annotated:
        return synthesize_default(args[0], context)

    if origin is not None:
        if origin in CONTAINER_DEFAULTS:
            return CONTAINER_DEFAULTS[origin]()
        if origin in (type, cabc.Callable) or not inspect.isclass(origin):
            return None
        annotation = origin

    if annotation is cabc.Callable:
        return None
    if annotation in SCALAR_DEFAULTS:
        return SCALAR_DEFAULTS[annotation]()
    if annotation in CONTAINER_DEFAULTS:
        return CONTAINER_DEFAULTS[annotation]()

    if inspect.isclass(annotation):
        if issubclass(annotation, enum.Enum):
            members = list(annotation)
            return members[0] if members else None
        try:
            return context.nested_double(annotation)
        except NotDoubleable as e:
            logger.debug("No default for %s: %s", annotation.__qualname__, e)
            return None

    return None


def _is_hashable(value: Any) -> bool:
    try:
        hash(value)
    except TypeError:
        return False
    return True
