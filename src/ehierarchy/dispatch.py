"""
Bare-name dispatch for properties and flags.

Lets call sites use a property or flag name as if it were a native attribute:

    obj.first_name            # property read
    obj.first_name = "Ada"    # property write
    obj.read_only             # flag read (fires its event handler)

A name resolves to a property if one is declared, else to a flag, else it
fails with UnknownAttributeError. Properties always win over a same-named
flag; such a flag stays reachable through obj.flag(name).

Resolutions are memoized per (concrete type, name); types are held weakly.
Declarations live on instances, so a cached binding is re-validated against
the instance before use and re-resolved when it no longer applies. Cached
and uncached dispatch therefore always agree.
"""

import logging
import weakref
from enum import Enum
from typing import Any

from ehierarchy.config import get_runtime_settings
from ehierarchy.errors import UnknownAttributeError

logger = logging.getLogger(__name__)


class Binding(Enum):
    """What a bare name resolved to."""
    PROPERTY = "property"
    FLAG = "flag"


# Key: concrete type -> {name: Binding}; weak so discarded classes are released
_binding_cache = weakref.WeakKeyDictionary()


def clear_binding_cache() -> None:
    """Forget every memoized resolution."""
    _binding_cache.clear()


def get_cached_binding(obj_type: type, name: str):
    """Get the memoized binding for a type/name pair, or None."""
    return _binding_cache.get(obj_type, {}).get(name)


class Dispatcher:
    """Resolves bare names on EHierarchy-style objects.

    Objects must provide has_property(), has_flag(), read_property(),
    write_property() and flag().
    """

    @staticmethod
    def _applies(obj: Any, name: str, binding: Binding) -> bool:
        if binding is Binding.PROPERTY:
            return obj.has_property(name)
        return not obj.has_property(name) and obj.has_flag(name)

    @staticmethod
    def _resolve_uncached(obj: Any, name: str) -> Binding:
        if obj.has_property(name):
            return Binding.PROPERTY
        if obj.has_flag(name):
            return Binding.FLAG
        logger.debug(f"Attempt to access an undefined property or flag ({name}) on {type(obj).__name__}")
        raise UnknownAttributeError(name, type(obj).__name__)

    @classmethod
    def binding_for(cls, obj: Any, name: str) -> Binding:
        """Resolve a name to a binding without touching any accessor.

        Raises:
            UnknownAttributeError: name is neither a property nor a flag
        """
        if not get_runtime_settings().cache_bindings:
            return cls._resolve_uncached(obj, name)

        bindings = _binding_cache.setdefault(type(obj), {})
        cached = bindings.get(name)
        if cached is not None and cls._applies(obj, name, cached):
            return cached

        binding = cls._resolve_uncached(obj, name)
        bindings[name] = binding
        logger.debug(f"Cached binding {type(obj).__name__}.{name} -> {binding.value}")
        return binding

    @classmethod
    def resolve(cls, obj: Any, name: str, *args: Any) -> Any:
        """Dispatch a bare-name access.

        For a property, no args reads and one or more args writes (returning
        the write result). For a flag, no args reads and one arg sets it.
        """
        binding = cls.binding_for(obj, name)
        if binding is Binding.PROPERTY:
            if args:
                return obj.write_property(name, *args)
            return obj.read_property(name)

        if len(args) > 1:
            raise TypeError(f"Flag {name} takes at most one value, got {len(args)}")
        return obj.flag(name, *args)

    @classmethod
    def supports(cls, obj: Any, name: str) -> bool:
        """Whether ``name`` can be used on obj as a member.

        Native attributes of the type answer True directly. Otherwise a
        resolution trial is made (and memoized), so declared names report as
        supported before they were ever accessed. No accessor or event
        handler is invoked.
        """
        if hasattr(type(obj), name):
            return True
        try:
            cls.binding_for(obj, name)
        except UnknownAttributeError:
            return False
        return True
