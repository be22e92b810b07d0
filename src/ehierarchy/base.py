"""
EHierarchy: base class for traditional OO objects.

Aggregates three traits into one base class:

- Properties and flags: named attributes with controllable mutability and
  boolean flags with event handlers, reachable by bare name through the
  Dispatcher (``obj.first_name``, ``obj.read_only``).
- Containers: a parent/child ownership tree with recursive, bottom-up
  terminate() (see ehierarchy.hierarchy).
- Object tracking: every live object is registered in the process-wide
  ObjectDirectory under its namespace-qualified name.

Subclasses override _init() to declare their properties and flags:

    class Table(EHierarchy):
        def _init(self, config):
            self.declare_property("rows", default=[])
            self.declare_property("title", AccessorPair(None, self.generic_accessor))
            self.declare_flag("dirty")
            self.apply_config(config)
            return True

    db = Table(name="db")
    users = Table(parent=db, properties={"name": "users"}, flags={"dirty": True})
    users.full_name                     # "db::users"
    db.terminate()                      # users first, then db
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from ehierarchy.directory import ObjectDirectory
from ehierarchy.dispatch import Binding, Dispatcher
from ehierarchy.errors import ConfigurationError, RegistrationConflictError, TerminatedObjectError
from ehierarchy.flags import EventHandler, FlagOperator, FlagRegister
from ehierarchy.hierarchy import NAMESPACE_SEPARATOR, HierarchyNode
from ehierarchy.properties import AccessorPair, AttributeTable, PropertySpec

logger = logging.getLogger(__name__)

_UNSET = object()


@dataclass
class ObjectConfig:
    """Constructor configuration handed to _init().

    Flat keyword arguments override same-named entries of the properties and
    flags blocks, so flat keys should only be used when no property and flag
    share a name.
    """
    properties: Dict[str, Any] = field(default_factory=dict)
    flags: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    def has_property_value(self, name: str) -> bool:
        return name in self.extra or name in self.properties

    def property_value(self, name: str, default: Any = None) -> Any:
        if name in self.extra:
            return self.extra[name]
        return self.properties.get(name, default)

    def has_flag_value(self, name: str) -> bool:
        return name in self.extra or name in self.flags

    def flag_value(self, name: str, default: Any = None) -> Any:
        if name in self.extra:
            return self.extra[name]
        return self.flags.get(name, default)

    def pop_name(self) -> Optional[Any]:
        """Remove and return the mandatory name from either location."""
        name = self.properties.pop('name', None)
        extra_name = self.extra.pop('name', None)
        return name if name is not None else extra_name


class EHierarchy(HierarchyNode):
    """Base class for objects with properties, flags and a container tree.

    Construction is two-phase: the base sets up core structures and the
    read-only ``name`` property, then the overridable _init() declares the
    subclass's properties and flags. The object is registered and linked to
    its parent only if both phases succeed.

    Args:
        parent: Owning container, or None for a root object
        properties: Initial property values (must include ``name`` unless
            given as a flat keyword)
        flags: Initial flag values
        **conf: Flat property/flag values

    Raises:
        ConfigurationError: no name, an invalid name, or _init() failed
        RegistrationConflictError: the namespace-qualified name is taken
    """

    def __init__(
        self,
        parent: Optional['EHierarchy'] = None,
        properties: Optional[Dict[str, Any]] = None,
        flags: Optional[Dict[str, Any]] = None,
        **conf: Any,
    ):
        config = ObjectConfig(dict(properties or {}), dict(flags or {}), conf)

        name = config.pop_name()
        if name is None:
            raise ConfigurationError(f"{type(self).__name__} instance created without a name property")
        if not isinstance(name, str) or not name or NAMESPACE_SEPARATOR in name:
            raise ConfigurationError(f"Invalid object name {name!r}")
        if parent is not None and parent.is_terminated:
            raise ConfigurationError(f"Cannot create {name!r} under a terminated parent")

        self._attributes = AttributeTable()
        self._flags = FlagRegister()
        self._init_hierarchy(parent, name)

        self._attributes.declare('name', AccessorPair(None, self._attributes.generic_accessor))
        self._attributes.store('name', name)

        try:
            if not self._init(config):
                raise ConfigurationError(f"Initialisation of {type(self).__name__} {name!r} failed")

            if not ObjectDirectory.register(self):
                raise RegistrationConflictError(self.full_name)
        except Exception:
            # Children built by _init must not outlive a failed construction
            self._abandon()
            raise

        if parent is not None:
            parent.add_child(self)

    def _init(self, config: ObjectConfig) -> bool:
        """Subclass initialisation hook (override in subclasses).

        Declare properties and flags here and apply configured defaults,
        usually with apply_config(). The ``name`` property is already
        declared; redeclaring it is not supported. Return False to abort
        construction.
        """
        return True

    def apply_config(self, config: ObjectConfig) -> None:
        """Copy configured values into every declared property and flag.

        Property values are stored directly (mutability is not enforced at
        construction). Flags are set through the event protocol, so their
        handlers fire.
        """
        for name in self._attributes.names():
            if config.has_property_value(name):
                self._attributes.store(name, config.property_value(name))
        for name in self._flags.names():
            if config.has_flag_value(name):
                self._flags.access(name, config.flag_value(name))

    def __repr__(self) -> str:
        attributes = self.__dict__.get('_attributes')
        name = attributes.values.get('name') if attributes is not None else None
        state = " terminated" if self.__dict__.get('_terminated') else ""
        return f"<{type(self).__name__} {name!r}{state}>"

    def _check_alive(self) -> None:
        if self._terminated:
            raise TerminatedObjectError(self._attributes.values.get('name'))

    # ========== DECLARATION ==========

    def declare_property(self, name: str, accessor: Optional[PropertySpec] = None, default: Any = _UNSET) -> None:
        """Declare a property.

        Args:
            name: Property name
            accessor: Unified accessor or AccessorPair; defaults to the
                generic accessor in read-write mode
            default: Initial stored value. Initialise with [] or {} to give
                the generic accessor sequence or mapping semantics.
        """
        self._check_alive()
        self._attributes.declare(name, accessor if accessor is not None else self._attributes.generic_accessor)
        if default is not _UNSET:
            self._attributes.store(name, default)

    def declare_flag(self, name: str, handler: Optional[EventHandler] = None) -> None:
        """Declare a flag, optionally with an event handler."""
        self._check_alive()
        self._flags.declare(name, handler)

    # ========== PROPERTIES ==========

    def generic_accessor(self, name: str, *values: Any) -> Any:
        """The default storage-shape-aware accessor (see ehierarchy.properties)."""
        return self._attributes.generic_accessor(name, *values)

    def has_property(self, name: str) -> bool:
        self._check_alive()
        return self._attributes.has(name)

    def property_names(self) -> List[str]:
        self._check_alive()
        return self._attributes.names()

    def read_property(self, name: str) -> Any:
        """Read a property through its read accessor."""
        self._check_alive()
        return self._attributes.read(name)

    def write_property(self, name: str, *values: Any) -> bool:
        """Write a property; returns whether the write succeeded."""
        self._check_alive()
        return self._attributes.write(name, *values)

    # ========== FLAGS ==========

    def has_flag(self, name: str) -> bool:
        self._check_alive()
        return self._flags.has(name)

    def flag_names(self) -> List[str]:
        self._check_alive()
        return self._flags.names()

    def flag(self, name: str, value: Optional[object] = None) -> bool:
        """Read a flag, or set it when value is given (its handler fires either way)."""
        self._check_alive()
        return self._flags.access(name, value)

    def combine_flags(self, op: Union[str, FlagOperator], *names: str) -> bool:
        """Logical AND/OR/XOR of the named flags' current states."""
        self._check_alive()
        return self._flags.combine(op, *names)

    # ========== DISPATCH ==========

    def resolve(self, name: str, *args: Any) -> Any:
        """Explicit bare-name dispatch: property first, then flag."""
        self._check_alive()
        return Dispatcher.resolve(self, name, *args)

    def supports(self, name: str) -> bool:
        """Whether name is a native member or a declared property/flag."""
        self._check_alive()
        return Dispatcher.supports(self, name)

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails
        if name.startswith('_'):
            raise AttributeError(name)
        return self.resolve(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if not name.startswith('_') and '_attributes' in self.__dict__ and self._is_declared(name):
            self._check_alive()
            if Dispatcher.binding_for(self, name) is Binding.FLAG:
                self.flag(name, bool(value))
            else:
                self.write_property(name, value)
            return
        object.__setattr__(self, name, value)

    def _is_declared(self, name: str) -> bool:
        return self._attributes.has(name) or self._flags.has(name)
