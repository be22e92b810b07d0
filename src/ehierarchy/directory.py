"""
ObjectDirectory: process-wide registry of live objects.

Objects are keyed by their fully qualified name, the namespace (ancestor
names joined by "::") followed by the object's own name:

    root                 -> "root"
    root's child "mid"   -> "root::mid"
    mid's child "leaf"   -> "root::mid::leaf"

Each object is registered by its constructor and deregistered by terminate();
user code rarely needs register()/deregister() directly.

The directory lives for the whole process. At interpreter exit every root
(parentless) object still registered is terminated, which reaches every
other object through its root's recursive termination.
"""

import atexit
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from ehierarchy.config import get_runtime_settings
from ehierarchy.errors import DeregistrationMissError

logger = logging.getLogger(__name__)


class ObjectDirectory:
    """Singleton registry of all live objects, keyed by fully qualified name.

    Registration lifecycle:
    - EHierarchy constructor: registers after a successful _init
    - EHierarchy.terminate(): deregisters after its children are terminated

    Mutation is serialized with a re-entrant lock. The runtime otherwise
    assumes a single thread of control.
    """
    _objects: Dict[str, Any] = {}
    _lock = threading.RLock()

    # Callbacks receive (full_name: str, obj)
    _on_register_callbacks: List[Callable[[str, Any], None]] = []
    _on_unregister_callbacks: List[Callable[[str, Any], None]] = []

    @classmethod
    def add_register_callback(cls, callback: Callable[[str, Any], None]) -> None:
        """Subscribe to registration events."""
        if callback not in cls._on_register_callbacks:
            cls._on_register_callbacks.append(callback)

    @classmethod
    def remove_register_callback(cls, callback: Callable[[str, Any], None]) -> None:
        """Unsubscribe from registration events."""
        if callback in cls._on_register_callbacks:
            cls._on_register_callbacks.remove(callback)

    @classmethod
    def add_unregister_callback(cls, callback: Callable[[str, Any], None]) -> None:
        """Subscribe to deregistration events."""
        if callback not in cls._on_unregister_callbacks:
            cls._on_unregister_callbacks.append(callback)

    @classmethod
    def remove_unregister_callback(cls, callback: Callable[[str, Any], None]) -> None:
        """Unsubscribe from deregistration events."""
        if callback in cls._on_unregister_callbacks:
            cls._on_unregister_callbacks.remove(callback)

    @classmethod
    def _fire_callbacks(cls, callbacks: List[Callable[[str, Any], None]], full_name: str, obj: Any) -> None:
        for callback in list(callbacks):
            try:
                callback(full_name, obj)
            except Exception as e:
                logger.warning(f"Error in directory callback for {full_name}: {e}")

    @classmethod
    def register(cls, obj: Any) -> bool:
        """Register an object under its fully qualified name.

        Args:
            obj: Object exposing ``full_name`` (namespace + name)

        Returns:
            True if registered, False if the name is already taken.
            Existing entries are never overwritten.
        """
        full_name = obj.full_name
        with cls._lock:
            if full_name in cls._objects:
                logger.warning(f"An object by that name ({full_name}) already exists, not registering")
                return False
            cls._objects[full_name] = obj

        logger.debug(f"Registered object: {full_name} ({type(obj).__name__})")
        cls._fire_callbacks(cls._on_register_callbacks, full_name, obj)
        return True

    @classmethod
    def deregister(cls, obj: Any, strict: bool = False) -> bool:
        """Remove an object from the directory.

        Args:
            obj: Object exposing ``full_name``
            strict: Raise instead of returning False when the name is absent

        Returns:
            True if removed, False if no object by that name was registered.

        Raises:
            DeregistrationMissError: strict is set and the name is absent
        """
        full_name = obj.full_name
        with cls._lock:
            if cls._objects.get(full_name) is not obj:
                if strict:
                    raise DeregistrationMissError(full_name)
                logger.warning(f"No object by that name ({full_name}) exists to deregister")
                return False
            del cls._objects[full_name]

        logger.debug(f"Deregistered object: {full_name}")
        cls._fire_callbacks(cls._on_unregister_callbacks, full_name, obj)
        return True

    @classmethod
    def get(cls, full_name: str) -> Optional[Any]:
        """Get an object by fully qualified name, or None."""
        return cls._objects.get(full_name)

    @classmethod
    def is_registered(cls, full_name: str) -> bool:
        return full_name in cls._objects

    @classmethod
    def list_names(cls) -> List[str]:
        """Get every registered fully qualified name (no particular order)."""
        return list(cls._objects.keys())

    @classmethod
    def get_all(cls) -> List[Any]:
        """Get every registered object."""
        return list(cls._objects.values())

    @classmethod
    def roots(cls) -> List[Any]:
        """Get registered objects no live container owns.

        That is objects without a parent, and objects whose parent was
        terminated, collected, or no longer lists them as a child.
        """
        return [obj for obj in cls.get_all() if not obj.is_terminated and _is_unowned(obj)]

    @classmethod
    def clear(cls) -> None:
        """Drop every entry without terminating anything. For testing only."""
        with cls._lock:
            cls._objects.clear()
        logger.debug("Cleared all objects from directory")

    @classmethod
    def shutdown(cls) -> int:
        """Terminate every registered root object.

        Non-root objects are terminated by their root's recursive terminate(),
        never independently, so nothing is terminated twice.

        Returns:
            Number of roots terminated.
        """
        terminated = 0
        for root in cls.roots():
            if root.is_terminated:
                continue
            try:
                root.terminate()
                terminated += 1
            except Exception as e:
                logger.warning(f"Error terminating {root.full_name} during shutdown: {e}")

        if terminated:
            logger.info(f"Directory shutdown terminated {terminated} root object(s)")
        return terminated


def _is_unowned(obj: Any) -> bool:
    parent = obj.parent
    if parent is None or parent.is_terminated:
        return True
    return not any(child is obj for child in parent.children)


# ========== MODULE-LEVEL DIRECTORY FUNCTIONS ==========

def register_object(obj: Any) -> bool:
    """Register an object. Constructors already do this."""
    return ObjectDirectory.register(obj)


def deregister_object(obj: Any) -> bool:
    """Deregister an object. terminate() already does this."""
    return ObjectDirectory.deregister(obj)


def list_objects() -> List[str]:
    """List the fully qualified names of all registered objects."""
    return ObjectDirectory.list_names()


def get_object(full_name: str) -> Optional[Any]:
    """Look up a registered object by fully qualified name."""
    return ObjectDirectory.get(full_name)


# ========== PROCESS LIFECYCLE ==========

_shutdown_hook_installed = False


def _shutdown_at_exit() -> None:
    if get_runtime_settings().terminate_on_exit:
        ObjectDirectory.shutdown()


def install_shutdown_hook() -> None:
    """Register directory teardown with atexit (idempotent)."""
    global _shutdown_hook_installed
    if _shutdown_hook_installed:
        return
    atexit.register(_shutdown_at_exit)
    _shutdown_hook_installed = True
