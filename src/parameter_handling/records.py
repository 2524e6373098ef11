"""Record interface: ordered decomposition and reconstruction of user types.

A record is any fixed-schema object whose constituent values can be listed
in a declared order and rebuilt from a new list of values in that order.
Both the flatten engine and the value resolver walk records through this
single interface, so a user type only has to describe itself once.

Three sources of record behaviour are recognised, in this order:

1. Explicit registrations made with :func:`register_record`.
2. Types defining ``decompose(self)`` and ``rebuild(self, parts)``.
3. ``NamedTuple`` and dataclass instances.
"""

import dataclasses
import logging
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, Tuple, Type, runtime_checkable

logger = logging.getLogger(__name__)

DecomposeFn = Callable[[Any], Tuple[Any, ...]]
RebuildFn = Callable[[Any, Sequence[Any]], Any]


@runtime_checkable
class Record(Protocol):
    """Protocol for user types that take part in flatten and resolve.

    ``decompose`` returns the constituent values in declared order.
    ``rebuild`` returns a new instance of the same type built from
    ``parts``, which has the same length and order as ``decompose()``.
    """

    def decompose(self) -> Tuple[Any, ...]:
        ...

    def rebuild(self, parts: Sequence[Any]) -> Any:
        ...


_registry: Dict[type, Tuple[DecomposeFn, RebuildFn]] = {}


def register_record(cls: Type, decompose: DecomposeFn, rebuild: RebuildFn) -> None:
    """Register decompose/rebuild functions for a type you do not own.

    Args:
        cls: The type to register
        decompose: ``obj -> tuple`` of constituent values in declared order
        rebuild: ``(obj, parts) -> new instance`` built from ``parts``

    Raises:
        ValueError: If ``cls`` is already registered
    """
    if cls in _registry:
        raise ValueError(f"Type {cls.__name__} is already registered as a record")
    _registry[cls] = (decompose, rebuild)
    logger.info(f"Registered record type {cls.__module__}.{cls.__qualname__}")


def unregister_record(cls: Type) -> None:
    """Remove a registration made with :func:`register_record`."""
    if cls not in _registry:
        raise KeyError(f"Type {cls.__name__} is not registered as a record")
    del _registry[cls]


def _lookup(obj: Any) -> Optional[Tuple[DecomposeFn, RebuildFn]]:
    for klass in type(obj).__mro__:
        if klass in _registry:
            return _registry[klass]
    return None


def _is_namedtuple(obj: Any) -> bool:
    return isinstance(obj, tuple) and hasattr(type(obj), "_fields") and hasattr(type(obj), "_make")


def _init_field_names(obj: Any) -> Tuple[str, ...]:
    return tuple(f.name for f in dataclasses.fields(obj) if f.init)


def is_record(obj: Any) -> bool:
    """Check whether ``obj`` can be decomposed and rebuilt."""
    if _lookup(obj) is not None:
        return True
    if isinstance(obj, type):
        return False
    if isinstance(obj, Record):
        return True
    return _is_namedtuple(obj) or dataclasses.is_dataclass(obj)


def decompose(obj: Any) -> Tuple[Any, ...]:
    """Return the constituent values of a record in declared order.

    Raises:
        TypeError: If ``obj`` is not a record
    """
    entry = _lookup(obj)
    if entry is not None:
        return tuple(entry[0](obj))
    if isinstance(obj, Record):
        return tuple(obj.decompose())
    if _is_namedtuple(obj):
        return tuple(obj)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return tuple(getattr(obj, name) for name in _init_field_names(obj))
    raise TypeError(f"{type(obj).__name__} is not a record type")


def rebuild(obj: Any, parts: Sequence[Any]) -> Any:
    """Build a new instance shaped like ``obj`` from ``parts``.

    Raises:
        TypeError: If ``obj`` is not a record, or its type cannot be
            constructed from the supplied parts
    """
    parts = tuple(parts)
    entry = _lookup(obj)
    try:
        if entry is not None:
            return entry[1](obj, parts)
        if isinstance(obj, Record):
            return obj.rebuild(parts)
        if _is_namedtuple(obj):
            return type(obj)._make(parts)
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return type(obj)(**dict(zip(_init_field_names(obj), parts)))
    except (TypeError, ValueError) as e:
        raise TypeError(
            f"Cannot rebuild {type(obj).__name__} from {len(parts)} ordered parts: {e}. "
            f"Register explicit decompose/rebuild functions with register_record()"
        ) from e
    raise TypeError(f"{type(obj).__name__} is not a record type")
