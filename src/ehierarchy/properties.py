"""
Property declarations and the generic accessor.

A property is a named attribute serviced by accessor callables. Each
declaration is either a unified accessor (one callable for reads and writes)
or an AccessorPair whose writer/reader side may be None to make the property
read-only or write-only. Accessors are called as ``accessor(name, *values)``:
no values means a read, one or more values means a write, and write accessors
return a boolean success value.

AttributeTable.generic_accessor is the default accessor. It stores values in
the table and infers how to treat argument lists from the shape of the stored
value:

- list storage: a write replaces the list wholesale with the arguments;
  a read returns a copy of the list.
- dict storage: a write replaces the dict wholesale, taking the arguments as
  alternating key/value pairs; a read returns a copy of the dict.
- anything else is scalar storage: a single argument is stored as is, but
  several arguments store their COUNT, not the arguments.

The storage kind is inferred the first time the generic accessor touches a
property and stays pinned afterwards. To get list or dict behavior a property
must be initialised with an (empty) list or dict before first use.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from ehierarchy.errors import NotReadableError, NotWritableError, UnknownAttributeError

logger = logging.getLogger(__name__)

Accessor = Callable[..., Any]


@dataclass(frozen=True)
class AccessorPair:
    """Separate write and read accessors for one property.

    Either side may be None: ``AccessorPair(None, reader)`` is read-only,
    ``AccessorPair(writer, None)`` is write-only.
    """
    writer: Optional[Accessor] = None
    reader: Optional[Accessor] = None

    @property
    def readable(self) -> bool:
        return self.reader is not None

    @property
    def writable(self) -> bool:
        return self.writer is not None


PropertySpec = Union[Accessor, AccessorPair]


class StorageKind(Enum):
    """Shape of a generic property's stored value."""
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    MAPPING = "mapping"

    @classmethod
    def of(cls, value: Any) -> 'StorageKind':
        if isinstance(value, list):
            return cls.SEQUENCE
        if isinstance(value, dict):
            return cls.MAPPING
        return cls.SCALAR


class AttributeTable:
    """Per-instance property declarations plus generic accessor storage.

    Attributes:
        declarations: property name -> unified accessor or AccessorPair
        values: storage used by the generic accessor
    """

    def __init__(self):
        self.declarations: Dict[str, PropertySpec] = {}
        self.values: Dict[str, Any] = {}
        self._kinds: Dict[str, StorageKind] = {}

    # ========== DECLARATION ==========

    def declare(self, name: str, accessor: PropertySpec) -> None:
        """Declare (or redeclare) a property.

        Redeclaring replaces the accessors only; the stored value is kept.
        """
        if not isinstance(accessor, AccessorPair) and not callable(accessor):
            raise TypeError(f"Accessor for property {name} must be callable or an AccessorPair")
        self.declarations[name] = accessor

    def has(self, name: str) -> bool:
        return name in self.declarations

    def names(self) -> List[str]:
        return list(self.declarations)

    def store(self, name: str, value: Any) -> None:
        """Put a raw value into generic storage (initialisation helper).

        Does not go through any accessor, so mutability is not enforced.
        """
        self.values[name] = value

    # ========== ACCESS ==========

    def read(self, name: str) -> Any:
        """Read a property through its read accessor.

        Raises:
            UnknownAttributeError: name is not declared
            NotReadableError: the property has no read accessor
        """
        spec = self._lookup(name)
        reader = spec.reader if isinstance(spec, AccessorPair) else spec
        if reader is None:
            raise NotReadableError(name)
        return reader(name)

    def write(self, name: str, *values: Any) -> bool:
        """Write a property through its write accessor.

        Returns:
            The accessor's success value.

        Raises:
            UnknownAttributeError: name is not declared
            NotWritableError: the property has no write accessor
        """
        if not values:
            raise TypeError(f"Writing property {name} requires at least one value")
        spec = self._lookup(name)
        writer = spec.writer if isinstance(spec, AccessorPair) else spec
        if writer is None:
            raise NotWritableError(name)
        return bool(writer(name, *values))

    def _lookup(self, name: str) -> PropertySpec:
        try:
            return self.declarations[name]
        except KeyError:
            logger.warning(f"No property defined by that name ({name})")
            raise UnknownAttributeError(name) from None

    # ========== GENERIC ACCESSOR ==========

    def storage_kind(self, name: str) -> StorageKind:
        """Get the pinned storage kind, inferring it on first use."""
        kind = self._kinds.get(name)
        if kind is None:
            kind = StorageKind.of(self.values.get(name))
            self._kinds[name] = kind
        return kind

    def generic_accessor(self, name: str, *values: Any) -> Any:
        """Default accessor: storage-shape-aware read/write of ``values[name]``.

        Writes perform no validation and always return True.
        """
        if name not in self.declarations:
            logger.warning(f"No property defined by that name ({name})")
            raise UnknownAttributeError(name)

        kind = self.storage_kind(name)

        if values:
            if kind is StorageKind.SEQUENCE:
                self.values[name] = list(values)
            elif kind is StorageKind.MAPPING:
                self.values[name] = _pairs_to_dict(name, values)
            elif len(values) > 1:
                # Scalar storage keeps the argument count, not the arguments
                self.values[name] = len(values)
            else:
                self.values[name] = values[0]
            return True

        current = self.values.get(name)
        if kind is StorageKind.SEQUENCE:
            return list(current)
        if kind is StorageKind.MAPPING:
            return dict(current)
        return current


def _pairs_to_dict(name: str, values: tuple) -> Dict[Any, Any]:
    """Build a dict from alternating key/value arguments."""
    if len(values) % 2:
        logger.warning(f"Odd number of values written to mapping property {name}; "
                       f"last key {values[-1]!r} maps to None")
        values = values + (None,)
    return dict(zip(values[::2], values[1::2]))
