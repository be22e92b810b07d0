"""
Object-model runtime: properties, event flags, containers and object tracking.

This package provides a base class that gives arbitrary record types three
composable behaviors, plus the process-wide directory that tracks them.

Key Features:
- Properties with read-only / write-only / read-write accessors
- Boolean flags with event handlers fired on every access
- Parent/child containers with recursive, bottom-up termination
- Process-wide directory of live objects keyed by namespace-qualified name
- Bare-name access (obj.first_name) with memoized resolution

Quick Start:
    >>> from ehierarchy import EHierarchy, AccessorPair, get_object
    >>>
    >>> class Person(EHierarchy):
    ...     def _init(self, config):
    ...         self.declare_property('first_name')
    ...         self.declare_property('tags', default=[])
    ...         self.declare_flag('changed')
    ...         self.apply_config(config)
    ...         return True
    >>>
    >>> family = Person(name='family')
    >>> ada = Person(parent=family, name='ada', first_name='Ada')
    >>> ada.full_name
    'family::ada'
    >>> get_object('family::ada') is ada
    True
    >>> ada.tags = 'math'
    >>> ada.write_property('tags', 'math', 'engines')
    True
    >>> family.terminate()   # ada first, then family

Architecture:
    Construction runs the base setup, then the subclass _init(), then
    registers the object and links it to its parent. Bare-name access goes
    through the Dispatcher to the property table or the flag register.
    terminate() walks the container tree bottom-up and deregisters each
    object. At interpreter exit the remaining root objects are terminated.

Modules:
    - base: EHierarchy base class and constructor configuration
    - properties: property declarations and the generic accessor
    - flags: flag register, event protocol and logical combinators
    - hierarchy: container tree, namespaces and termination
    - directory: process-wide object directory and exit-time teardown
    - dispatch: bare-name resolution and binding cache
    - config: runtime settings
    - errors: exception hierarchy
"""

# Base class
from ehierarchy.base import EHierarchy, ObjectConfig

# Properties
from ehierarchy.properties import AccessorPair, AttributeTable, StorageKind

# Flags
from ehierarchy.flags import FlagOperator, FlagRegister

# Hierarchy
from ehierarchy.hierarchy import NAMESPACE_SEPARATOR, HierarchyNode

# Directory
from ehierarchy.directory import (
    ObjectDirectory,
    register_object,
    deregister_object,
    list_objects,
    get_object,
    install_shutdown_hook,
)

# Dispatch
from ehierarchy.dispatch import Binding, Dispatcher, clear_binding_cache

# Configuration
from ehierarchy.config import (
    RuntimeSettings,
    get_runtime_settings,
    set_runtime_settings,
    reset_runtime_settings,
)

# Errors
from ehierarchy.errors import (
    EHierarchyError,
    ConfigurationError,
    UnknownAttributeError,
    UnknownFlagError,
    NotWritableError,
    NotReadableError,
    RegistrationConflictError,
    DeregistrationMissError,
    InvalidOperatorError,
    NoOperandsError,
    TerminatedObjectError,
)

__all__ = [
    # Base class
    'EHierarchy',
    'ObjectConfig',
    # Properties
    'AccessorPair',
    'AttributeTable',
    'StorageKind',
    # Flags
    'FlagOperator',
    'FlagRegister',
    # Hierarchy
    'NAMESPACE_SEPARATOR',
    'HierarchyNode',
    # Directory
    'ObjectDirectory',
    'register_object',
    'deregister_object',
    'list_objects',
    'get_object',
    'install_shutdown_hook',
    # Dispatch
    'Binding',
    'Dispatcher',
    'clear_binding_cache',
    # Configuration
    'RuntimeSettings',
    'get_runtime_settings',
    'set_runtime_settings',
    'reset_runtime_settings',
    # Errors
    'EHierarchyError',
    'ConfigurationError',
    'UnknownAttributeError',
    'UnknownFlagError',
    'NotWritableError',
    'NotReadableError',
    'RegistrationConflictError',
    'DeregistrationMissError',
    'InvalidOperatorError',
    'NoOperandsError',
    'TerminatedObjectError',
]

__version__ = '0.6.0'
__description__ = 'Base class aggregating properties, event flags, containers and object tracking'

# Exit-time teardown of remaining root objects (honours terminate_on_exit)
install_shutdown_hook()
