"""
Container hierarchy: ownership, namespaces and ordered teardown.

"Parent" and "child" here describe containment, not class inheritance: a
child belongs to its parent, and the parent is responsible for tearing it
down. The parent owns its children (a strong list); a child only keeps a weak
reference back to its parent, so the tree never forms an ownership cycle.

Why ordered teardown matters: think of a database container holding table
objects that cache writes. The tables must flush before the container closes
its connection. Leaving this to garbage collection gives no ordering, so
terminate() tears the tree down explicitly, bottom-up:

    container.terminate()
      -> each child, oldest first, is terminated recursively
      -> the container unlinks itself from its own parent
      -> the container is deregistered from the ObjectDirectory
"""

import logging
import weakref
from typing import Any, List, Optional, Tuple

from ehierarchy.directory import ObjectDirectory
from ehierarchy.errors import TerminatedObjectError

logger = logging.getLogger(__name__)

NAMESPACE_SEPARATOR = "::"


class HierarchyNode:
    """Mixin giving an object a parent, owned children and a namespace.

    Subclasses call _init_hierarchy() during construction and must expose a
    ``name`` attribute. The parent is fixed at construction; afterwards only
    membership of the children list changes (add_child/remove_child or
    termination). Name and parent never change, so the namespace is computed
    once, here, and stays valid after the parent is terminated or collected.
    """

    def _init_hierarchy(self, parent: Optional['HierarchyNode'] = None, name: str = "") -> None:
        self._parent_ref = weakref.ref(parent) if parent is not None else None
        self._namespace = f"{parent.full_name}{NAMESPACE_SEPARATOR}" if parent is not None else ""
        self._full_name = f"{self._namespace}{name}"
        self._children: List[Any] = []
        self._terminated = False

    def _check_alive(self) -> None:
        if self._terminated:
            raise TerminatedObjectError(repr(self))

    @property
    def is_terminated(self) -> bool:
        return self._terminated

    @property
    def parent(self) -> Optional['HierarchyNode']:
        """The container this object belongs to, or None for a root."""
        self._check_alive()
        return self._parent_ref() if self._parent_ref is not None else None

    @property
    def children(self) -> Tuple[Any, ...]:
        """Snapshot of the contained objects, in the order they were added."""
        self._check_alive()
        return tuple(self._children)

    def namespace(self) -> str:
        """Ancestor names joined root-first, each followed by the separator.

        A root yields "", a grandchild of "root" via "mid" yields "root::mid::".
        """
        self._check_alive()
        return self._namespace

    @property
    def full_name(self) -> str:
        """Namespace-qualified name used as the directory key."""
        return self._full_name

    def add_child(self, child: Any) -> bool:
        """Take ownership of a child.

        Called by the constructor for objects created with a parent. Also
        usable for attaching objects of other classes; those are terminated
        with the container if they define terminate().
        """
        self._check_alive()
        self._children.append(child)
        return True

    def remove_child(self, child: Any) -> bool:
        """Detach a child (compared by identity).

        Returns:
            True if the child was found and removed.
        """
        self._check_alive()
        for index, existing in enumerate(self._children):
            if existing is child:
                del self._children[index]
                return True
        return False

    def get_child(self, name: str) -> Optional[Any]:
        """Get the first child with the given name, or None."""
        self._check_alive()
        for child in self._children:
            if getattr(child, 'name', None) == name:
                return child
        return None

    def terminate(self) -> None:
        """Tear down this object and everything it contains, bottom-up.

        After this returns the object is consumed: further attribute, flag
        or hierarchy operations raise TerminatedObjectError.
        """
        if self._terminated:
            logger.warning(f"{self!r} is already terminated")
            return

        self._terminate_children()

        parent = self.parent
        if parent is not None and not parent.is_terminated:
            parent.remove_child(self)

        ObjectDirectory.deregister(self)
        self._terminated = True
        logger.debug(f"Terminated {self!r}")

    def _terminate_children(self) -> None:
        """Pop and terminate children oldest-first (those that can be)."""
        while self._children:
            child = self._children.pop(0)
            terminate = getattr(child, 'terminate', None)
            if callable(terminate):
                terminate()

    def _abandon(self) -> None:
        """Discard a node whose construction failed.

        Children already created under it are terminated; the node itself was
        never registered or linked, so it is only marked terminated.
        """
        self._terminate_children()
        self._terminated = True
        logger.debug(f"Abandoned {self!r} after failed construction")
